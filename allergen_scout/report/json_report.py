# allergen_scout/report/json_report.py

"""
Генерация JSON-отчёта для проекта AllergenScout.

Сериализация результатов обхода (CrawlReport) в файл.
"""
import json
from pathlib import Path
from typing import Any, Dict

from allergen_scout.crawler.models import CrawlReport


def report_data(report: CrawlReport) -> Dict[str, Any]:
    """Словарь для сериализации: найденные PDF по фазам и ошибки этапов."""
    return {
        'site_url': report.site_url,
        'pdf_links': [h.as_dict() for h in report.hits],
        'phases': {
            'seed': len(report.seed),
            'sitemap': len(report.sitemap),
            'subpages': len(report.subpages),
        },
        'errors': [
            {'kind': e.kind.value, 'url': e.url, 'message': e.message} for e in report.errors
        ],
    }


def render_json(report: CrawlReport, output_path: Path | str) -> Path:
    """
    Сохраняет отчёт report в формате JSON по указанному пути.

    :param report: объект CrawlReport с результатами обхода
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(report_data(report), f, ensure_ascii=False, indent=2)

    return output
