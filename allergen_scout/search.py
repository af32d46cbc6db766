# File: allergen_scout/search.py
"""allergen_scout.search: Клиент Google Custom Search для поиска официального сайта и PDF."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, List, Optional
from urllib.parse import urlsplit

from aiohttp import ClientError, ClientSession

from allergen_scout.errors import SearchError
from allergen_scout.logger import logger

API_URL = "https://www.googleapis.com/customsearch/v1"


@dataclass(frozen=True, slots=True)
class SearchItem:
    """Один результат поиска."""

    title: str
    link: str
    snippet: str = ""


class SearchClient:
    """Выполняет запросы к Custom Search JSON API. Ошибки логируются, результат: пустой список."""

    def __init__(self, session: ClientSession, api_key: Optional[str], cx: Optional[str]) -> None:
        self.session = session
        self.api_key = api_key
        self.cx = cx

    async def search(self, query: str, *, gl: Optional[str] = None) -> List[SearchItem]:
        try:
            return await self._query(query, gl)
        except SearchError as exc:
            logger.error("Search API error: %s", exc)
            return []

    async def _query(self, query: str, gl: Optional[str]) -> List[SearchItem]:
        if not self.api_key or not self.cx:
            raise SearchError("GOOGLE_API_KEY / GOOGLE_CX are not configured")
        params = {"key": self.api_key, "cx": self.cx, "q": query}
        if gl:
            params["gl"] = gl
        try:
            async with self.session.get(API_URL, params=params, raise_for_status=False) as resp:
                if resp.status != 200:
                    raise SearchError(f"HTTP {resp.status}")
                data = await resp.json(content_type=None)
        except (ClientError, asyncio.TimeoutError, ValueError) as exc:
            raise SearchError(str(exc) or type(exc).__name__) from exc
        return _parse_items(data)

    async def find_official_site(self, chain_name: str) -> Optional[str]:
        """Первый результат запроса ``<chain> official site``."""
        items = await self.search(f"{chain_name} official site")
        if not items:
            logger.info("No search results found.")
            return None
        first = items[0]
        logger.info("Title: %s", first.title)
        logger.info("Snippet: %s", first.snippet)
        logger.info("Official site candidate: %s", first.link)
        return first.link

    async def find_best_allergy_pdf(self, site_url: str) -> Optional[SearchItem]:
        """Лучший PDF об аллергенах на сайте по запросу ``site:<host> filetype:pdf アレルギー``."""
        host = urlsplit(site_url).hostname or site_url
        query = f"site:{host} filetype:pdf アレルギー"
        logger.info("Searching PDF with query: %s", query)
        items = await self.search(query, gl="jp")
        if not items:
            logger.info("No allergy PDF found via search.")
            return None
        top = items[0]
        logger.info("Top PDF candidate: %s (%s)", top.title, top.link)
        return top


def _parse_items(data: Any) -> List[SearchItem]:
    if not isinstance(data, dict):
        raise SearchError("unexpected response payload")
    items: List[SearchItem] = []
    for raw in data.get("items") or []:
        if not isinstance(raw, dict) or not raw.get("link"):
            continue
        items.append(
            SearchItem(
                title=str(raw.get("title", "")),
                link=str(raw["link"]),
                snippet=str(raw.get("snippet", "")),
            )
        )
    return items
