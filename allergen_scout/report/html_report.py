# File: allergen_scout/report/html_report.py
"""allergen_scout.report.html_report: Генерация HTML-отчёта с помощью Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Union

from jinja2 import BaseLoader, ChoiceLoader, DictLoader, Environment, FileSystemLoader, select_autoescape

from allergen_scout.crawler.models import CrawlReport

TEMPLATE_NAME = "report.html.j2"

_BUILTIN_TEMPLATE = """<!DOCTYPE html>
<html lang="ja">
<head><meta charset="utf-8"><title>Allergen PDFs: {{ site_url }}</title></head>
<body>
<h1>{{ site_url }}</h1>
{% if pdf_links %}
<ol>
{% for pdf in pdf_links %}
  <li><a href="{{ pdf.url }}">{{ pdf.text }}</a> <small>(Source: {{ pdf.source }})</small></li>
{% endfor %}
</ol>
{% else %}
<p>No PDFs found.</p>
{% endif %}
{% if errors %}
<h2>Errors</h2>
<ul>
{% for e in errors %}<li>{{ e.kind.value }}: {{ e.url }}: {{ e.message }}</li>{% endfor %}
</ul>
{% endif %}
</body>
</html>
"""


def render_html(
    report: CrawlReport,
    template_dir: Optional[Union[Path, str]],
    output_path: Union[Path, str],
) -> Path:
    """Рендерит HTML-отчёт и сохраняет его по указанному пути.

    Args:
        report: объект CrawlReport.
        template_dir: директория с шаблоном ``report.html.j2``; если шаблона там
            нет (или None), используется встроенный.
        output_path: путь к итоговому HTML-файлу.

    Returns:
        Path до сохранённого HTML-файла.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    loaders: list[BaseLoader] = []
    if template_dir is not None:
        loaders.append(FileSystemLoader(str(template_dir)))
    loaders.append(DictLoader({TEMPLATE_NAME: _BUILTIN_TEMPLATE}))

    env = Environment(
        loader=ChoiceLoader(loaders),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )
    template = env.get_template(TEMPLATE_NAME)

    context: dict[str, Any] = {
        "site_url": report.site_url,
        "pdf_links": report.hits,
        "errors": report.errors,
    }

    output_path.write_text(template.render(**context), encoding="utf-8")
    return output_path
