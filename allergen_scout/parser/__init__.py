"""allergen_scout.parser: Разбор XML-документов (sitemap)."""

from .sitemap_parser import parse_sitemap

__all__ = ["parse_sitemap"]
