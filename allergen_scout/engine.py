# File: allergen_scout/engine.py
"""allergen_scout.engine: Оркестрация «поиск сайта → обход → скачивание» для CLI и тестов."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

from aiohttp import ClientSession, ClientTimeout

from allergen_scout.cache import UrlCache
from allergen_scout.config import CrawlerConfig
from allergen_scout.crawler.crawler import CrawlOrchestrator
from allergen_scout.crawler.models import CrawlReport, PdfHit
from allergen_scout.crawler.robots import RobotsCache
from allergen_scout.downloader import download_hits
from allergen_scout.logger import logger
from allergen_scout.search import SearchClient

__all__ = ["Engine", "lookup_site", "find_pdfs", "download_selected", "fast_search"]


class Engine:
    """Фасад над поиском, кэшем URL, обходом сайта и загрузкой PDF.

    Одна HTTP-сессия и один кэш robots.txt на время жизни контекста::

        async with Engine(config) as engine:
            site = await engine.lookup_official_site("kurasushi")
    """

    def __init__(
        self,
        config: CrawlerConfig,
        *,
        cache: Optional[UrlCache] = None,
        robots_cache: Optional[RobotsCache] = None,
    ) -> None:
        self.config = config
        self.cache = cache if cache is not None else UrlCache(config.cache_file)
        self.robots_cache = robots_cache if robots_cache is not None else RobotsCache()
        self.session: Optional[ClientSession] = None

    async def __aenter__(self) -> Engine:
        self.session = ClientSession(
            timeout=ClientTimeout(total=self.config.request_timeout),
            headers={"User-Agent": self.config.user_agent},
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    def _session(self) -> ClientSession:
        if self.session is None:
            raise RuntimeError("Engine must be used as an async context manager")
        return self.session

    def _search(self) -> SearchClient:
        return SearchClient(self._session(), self.config.google_api_key, self.config.google_cx)

    async def lookup_official_site(self, chain_name: str) -> Optional[str]:
        """Официальный сайт из кэша, иначе через поиск (с сохранением в кэш)."""
        cached = self.cache.official_site(chain_name)
        if cached:
            logger.info("Using cached URL")
            return cached
        url = await self._search().find_official_site(chain_name)
        if url:
            self.cache.set_official_site(chain_name, url)
        return url

    async def find_pdfs(self, site_url: str) -> CrawlReport:
        async with CrawlOrchestrator(
            self.config, robots_cache=self.robots_cache, session=self._session()
        ) as crawler:
            return await crawler.crawl_report(site_url)

    async def download(self, hits: Sequence[PdfHit], chain_name: str) -> List[Path]:
        return await download_hits(self._session(), hits, chain_name, self.config.output_dir)

    async def fast_search(self, chain_name: str) -> Optional[Path]:
        """Быстрый режим: только поисковик, без обхода сайта; скачивается первый PDF."""
        site_url = await self.lookup_official_site(chain_name)
        if not site_url:
            logger.info("Official site not found.")
            return None
        item = await self._search().find_best_allergy_pdf(site_url)
        if item is None:
            logger.info("Could not find a suitable PDF automatically.")
            return None
        hit = PdfHit(url=item.link, text=item.title, source=site_url)
        self.cache.add_pdf_link(chain_name, hit)
        saved = await self.download([hit], chain_name)
        return saved[0] if saved else None


# --------------------------------------------------------------------------- #
# Точки входа для CLI                                                         #
# --------------------------------------------------------------------------- #


async def lookup_site(cfg: CrawlerConfig, chain_name: str) -> Optional[str]:
    async with Engine(cfg) as engine:
        return await engine.lookup_official_site(chain_name)


async def find_pdfs(cfg: CrawlerConfig, site_url: str) -> CrawlReport:
    async with Engine(cfg) as engine:
        return await engine.find_pdfs(site_url)


async def download_selected(cfg: CrawlerConfig, hits: Sequence[PdfHit], chain_name: str) -> List[Path]:
    async with Engine(cfg) as engine:
        return await engine.download(hits, chain_name)


async def fast_search(cfg: CrawlerConfig, chain_name: str) -> Optional[Path]:
    async with Engine(cfg) as engine:
        return await engine.fast_search(chain_name)
