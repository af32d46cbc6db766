from allergen_scout.cli import cli

cli()
