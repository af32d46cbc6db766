# File: allergen_scout/parser/sitemap_parser.py
"""allergen_scout.parser.sitemap_parser: Модуль для парсинга sitemap.xml и извлечения URL."""

from __future__ import annotations

from typing import List, Union

from lxml import etree


def parse_sitemap(xml_content: Union[str, bytes]) -> List[str]:
    """Разбирает XML urlset и возвращает <loc> каждого <url> в порядке документа.

    Args:
        xml_content: строка или байты с содержимым sitemap.xml.

    Returns:
        Список URL. Для ``<sitemapindex>`` возвращается пустой список:
        вложенные sitemap не обходятся.

    Raises:
        ValueError: документ не удалось разобрать как XML.

    Пример:
    ```python
    from allergen_scout.parser.sitemap_parser import parse_sitemap

    with open('sitemap.xml', encoding='utf-8') as f:
        urls = parse_sitemap(f.read())
    ```
    """
    data = xml_content.encode("utf-8") if isinstance(xml_content, str) else xml_content
    parser = etree.XMLParser(ns_clean=True, recover=True, resolve_entities=False)
    try:
        root = etree.fromstring(data, parser=parser)
    except etree.XMLSyntaxError as exc:
        raise ValueError(f"invalid sitemap XML: {exc}") from exc
    if root is None:
        raise ValueError("invalid sitemap XML: empty document")
    if etree.QName(root).localname != "urlset":
        return []
    locs = root.findall("{*}url/{*}loc")
    return [loc.text.strip() for loc in locs if loc.text and loc.text.strip()]
