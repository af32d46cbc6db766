# allergen_scout/crawler/link_extractor.py
"""
Link extraction utilities for AllergenScout.

Static pages are parsed with BeautifulSoup; rendered pages hand over raw
``{href, text}`` pairs collected by :data:`RENDERED_LINKS_JS` in the browser.
"""
from __future__ import annotations

from typing import Iterable, List, Mapping
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup
from bs4.element import Tag

from allergen_scout.crawler.models import LinkCandidate, PageData

# Runs inside the page after scripts have executed. Besides anchors, JS-driven
# menus often keep the target in data attributes or an onclick handler.
RENDERED_LINKS_JS = """
() => {
  const links = [];
  document.querySelectorAll('a').forEach(el => {
    const href = el.getAttribute('href');
    if (href) links.push({ href, text: (el.textContent || '').trim() });
  });
  document.querySelectorAll('button, div[data-url], div[data-href]').forEach(el => {
    const href = el.getAttribute('data-url') || el.getAttribute('data-href') || el.getAttribute('onclick');
    if (href) links.push({ href, text: (el.textContent || '').trim() });
  });
  return links;
}
"""


def resolve(base_url: str, href: str) -> str | None:
    """Resolve *href* against *base_url*; None when the result is not a usable URL."""
    try:
        absolute = urljoin(base_url, href.strip())
        parts = urlsplit(absolute)
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc:
        return None
    return absolute


def extract_anchors(page: PageData) -> List[LinkCandidate]:
    """
    Extract every ``<a href>`` of the page as an absolute LinkCandidate.

    Order follows the document; hrefs that cannot be resolved are dropped.
    """
    content = page.content.decode("utf-8", "replace") if isinstance(page.content, bytes) else page.content
    soup = BeautifulSoup(content, "html.parser")
    candidates: List[LinkCandidate] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        absolute = resolve(page.url, href_val)
        if absolute is None:
            continue
        candidates.append(LinkCandidate(absolute, tag.get_text().strip()))
    return candidates


def candidates_from_raw(base_url: str, raw_links: Iterable[Mapping[str, object]]) -> List[LinkCandidate]:
    """Convert ``{href, text}`` dicts returned from the browser into LinkCandidates."""
    candidates: List[LinkCandidate] = []
    for item in raw_links:
        href = item.get("href")
        if not isinstance(href, str):
            continue
        absolute = resolve(base_url, href)
        if absolute is None:
            continue
        text = item.get("text")
        candidates.append(LinkCandidate(absolute, text.strip() if isinstance(text, str) else ""))
    return candidates
