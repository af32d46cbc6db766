# File: allergen_scout/report/__init__.py
"""allergen_scout.report: Генерация отчётов (JSON и HTML) для CLI и тестов."""

from .html_report import render_html
from .json_report import render_json, report_data

__all__ = ["render_json", "render_html", "report_data"]
