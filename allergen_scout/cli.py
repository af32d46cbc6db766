# === FILE: allergen_scout/cli.py ===
"""
Точка входа AllergenScout через командную строку.

Команды:
  find [CHAIN]   Найти официальный сайт сети, обойти его и скачать выбранные PDF
  crawl URL      Обойти известный сайт и вывести найденные PDF в JSON
  fast [CHAIN]   Быстрый режим: только поисковик (site:... filetype:pdf)
  fix-cache      Привести URL в кэше к виду scheme://host
  config         Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...; по умолчанию log_level из конфига)
  --log-file PATH     Файл для логов (по умолчанию log_file из конфига)

Пример:
  allergen-scout find kurasushi --json reports/kurasushi.json
"""
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

import click

from allergen_scout import __version__
from allergen_scout.cache import UrlCache
from allergen_scout.config import load_config
from allergen_scout.engine import download_selected, fast_search, find_pdfs, lookup_site
from allergen_scout.errors import ConfigError
from allergen_scout.logger import configure
from allergen_scout.report.html_report import render_html
from allergen_scout.report.json_report import render_json, report_data

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def parse_selection(raw: str, total: int) -> List[int]:
    """Разбирает ввод вида ``1,3,5`` в список 0-based индексов в пределах *total*."""
    indices: List[int] = []
    for part in raw.split(','):
        part = part.strip()
        if not part.isdigit():
            continue
        idx = int(part) - 1
        if 0 <= idx < total and idx not in indices:
            indices.append(idx)
    return indices


def _ask_chain(chain: Optional[str]) -> str:
    if chain is None:
        chain = click.prompt('Enter restaurant chain name (in English)', default='', show_default=False)
    chain = chain.strip()
    if not chain:
        print_error('Invalid chain name.')
    return chain


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='AllergenScout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default=None,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования (по умолчанию из конфига)'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (по умолчанию из конфига)'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file):
    """Поиск PDF с информацией об аллергенах на сайтах сетей ресторанов."""
    try:
        cfg = load_config(config_path)
    except (ConfigError, FileNotFoundError) as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    configure(level=log_level or cfg.log_level, log_file=log_file or cfg.log_file)
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


def _save_reports(report, json_output, html_output):
    if json_output:
        click.echo(f'JSON report: {render_json(report, json_output)}')
    if html_output:
        click.echo(f'HTML report: {render_html(report, None, html_output)}')


@cli.command('find', context_settings=CONTEXT_SETTINGS)
@click.argument('chain', required=False)
@click.option('--all', '-a', 'download_all', is_flag=True, help='Скачать все найденные PDF без вопроса')
@click.option('--json', '-j', 'json_output', default=None,
              type=click.Path(writable=True, dir_okay=False, path_type=Path),
              help='Сохранить JSON-отчёт в файл')
@click.option('--html', 'html_output', default=None,
              type=click.Path(writable=True, dir_okay=False, path_type=Path),
              help='Сохранить HTML-отчёт в файл')
@click.pass_context
def find(ctx, chain, download_all, json_output, html_output):
    """Найти официальный сайт, обойти его и скачать выбранные PDF."""
    cfg = ctx.obj['config']
    chain = _ask_chain(chain)

    click.echo('Fetching official site...')
    site_url = asyncio.run(lookup_site(cfg, chain))
    if not site_url:
        print_error('Failed to fetch official site.')
    click.echo(f'Official site: {site_url}')

    click.echo('Searching for PDFs...')
    report = asyncio.run(find_pdfs(cfg, site_url))
    _save_reports(report, json_output, html_output)

    hits = report.hits
    if not hits:
        click.echo('No PDFs found.')
        return
    click.echo(f'Found {len(hits)} PDF links.')
    for idx, pdf in enumerate(hits, start=1):
        click.echo(f'{idx}: {pdf.url} (Source: {pdf.source})')

    if download_all:
        selected = list(range(len(hits)))
    else:
        raw = click.prompt(
            'Enter PDF numbers to download (e.g., 1,3,5 or leave empty to skip)',
            default='', show_default=False,
        )
        if not raw.strip():
            click.echo('Download skipped.')
            return
        selected = parse_selection(raw, len(hits))
        if not selected:
            click.echo('No valid numbers were selected.')
            return

    saved = asyncio.run(download_selected(cfg, [hits[i] for i in selected], chain))
    for path in saved:
        click.echo(f'PDF saved: {path}')


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('site_url')
@click.option('--json', '-j', 'json_output', default=None,
              type=click.Path(writable=True, dir_okay=False, path_type=Path),
              help='Сохранить JSON-отчёт в файл')
@click.option('--html', 'html_output', default=None,
              type=click.Path(writable=True, dir_okay=False, path_type=Path),
              help='Сохранить HTML-отчёт в файл')
@click.option('--pretty', is_flag=True, help='Преформатировать JSON-вывод (отступ 2)')
@click.pass_context
def crawl(ctx, site_url, json_output, html_output, pretty):
    """Обойти сайт SITE_URL и вывести найденные PDF."""
    cfg = ctx.obj['config']
    report = asyncio.run(find_pdfs(cfg, site_url))
    if json_output or html_output:
        _save_reports(report, json_output, html_output)
        return
    click.echo(json.dumps(report_data(report), ensure_ascii=False, indent=2 if pretty else None))


@cli.command('fast', context_settings=CONTEXT_SETTINGS)
@click.argument('chain', required=False)
@click.pass_context
def fast(ctx, chain):
    """Быстрый поиск PDF через поисковик и скачивание первого результата."""
    cfg = ctx.obj['config']
    chain = _ask_chain(chain)
    saved = asyncio.run(fast_search(cfg, chain))
    if saved is None:
        click.echo('Could not find a suitable PDF automatically.')
        return
    click.echo(f'PDF saved to: {saved}')


@cli.command('fix-cache', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def fix_cache(ctx):
    """Нормализовать URL в кэше (оставить только scheme://host)."""
    cfg = ctx.obj['config']
    fixed = UrlCache(cfg.cache_file).normalize()
    click.echo(f'URL cache has been normalized ({len(fixed)} entries)')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2, exclude={'google_api_key'}))


if __name__ == "__main__":
    cli()
