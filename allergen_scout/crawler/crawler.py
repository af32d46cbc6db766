# === FILE: allergen_scout/crawler/crawler.py ===
"""
Crawl orchestrator: seed page → sitemap entries → same-site sub-pages.

Only one hop below the seed is explored. The seed and sitemap phases run
strictly one request at a time; sub-pages go through :class:`BatchScheduler`.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import List, Optional, Set

from aiohttp import ClientSession, ClientTimeout

from allergen_scout.config import CrawlerConfig
from allergen_scout.crawler.batch import BatchScheduler
from allergen_scout.crawler.classifier import LinkClassifier
from allergen_scout.crawler.discovery import SitemapDiscoverer, SubpageDiscoverer
from allergen_scout.crawler.fetcher import Fetcher
from allergen_scout.crawler.models import CrawlReport, ErrorKind, PdfHit, ScanError, ScanResult
from allergen_scout.crawler.robots import RobotsCache, RobotsGate, RobotsTxtRules
from allergen_scout.crawler.scanner import PageScanner, RenderedPageScanner

__all__ = ("CrawlOrchestrator",)


class CrawlOrchestrator:
    """Асинхронный поиск PDF с аллергенами на одном сайте с учётом robots.txt.

    Usage::

        async with CrawlOrchestrator(config) as crawler:
            hits = await crawler.crawl("https://example.com/")

    The robots cache may be shared between orchestrators by passing the same
    :class:`RobotsCache`; the visited set always belongs to a single run.
    """

    def __init__(
        self,
        config: CrawlerConfig,
        *,
        robots_cache: Optional[RobotsCache] = None,
        session: Optional[ClientSession] = None,
    ) -> None:
        self.config = config
        self.robots_cache = robots_cache if robots_cache is not None else RobotsCache()
        self.session = session
        self._owns_session = session is None
        self.visited: Set[str] = set()
        self.logger = logging.getLogger("AllergenScout")

        self.gate: Optional[RobotsGate] = None
        self.page_scanner: Optional[PageScanner] = None
        self.rendered_scanner: Optional[RenderedPageScanner] = None
        self.sitemap: Optional[SitemapDiscoverer] = None
        self.subpages: Optional[SubpageDiscoverer] = None
        self.scheduler: Optional[BatchScheduler] = None

    async def __aenter__(self) -> CrawlOrchestrator:
        if self.session is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.config.request_timeout),
                headers={"User-Agent": self.config.user_agent},
            )
        self._build(Fetcher(self.session))
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    def _build(self, fetcher: Fetcher) -> None:
        cfg = self.config
        self.gate = RobotsGate(fetcher, cfg.robots_agent, self.robots_cache)
        self.page_scanner = PageScanner(fetcher, self.gate, LinkClassifier(cfg.allergy_keywords))
        self.rendered_scanner = RenderedPageScanner(
            self.page_scanner,
            timeout=cfg.render_timeout,
            headless=cfg.headless,
            user_agent=cfg.user_agent,
        )
        self.sitemap = SitemapDiscoverer(fetcher)
        self.subpages = SubpageDiscoverer(fetcher, self.gate)
        self.scheduler = BatchScheduler(self.page_scanner, delay=cfg.batch_delay)

    async def crawl(self, site_url: str) -> List[PdfHit]:
        """Найти все PDF с аллергенами; при сбое возвращаются частичные результаты."""
        return (await self.crawl_report(site_url)).hits

    async def crawl_report(self, site_url: str) -> CrawlReport:
        if self.gate is None:
            raise RuntimeError("CrawlOrchestrator must be used as an async context manager")
        report = CrawlReport(site_url)
        self.visited = set()
        start = time.monotonic()
        try:
            self.logger.info("Checking robots.txt...")
            policy = await self.gate.get(site_url)

            self.logger.info("Searching main page...")
            result = await self.page_scanner.scan_result(site_url, policy)  # type: ignore[union-attr]
            self._record_result(report, result)
            report.seed.extend(result.hits)
            self.visited.add(site_url)

            self.logger.info("Checking sitemap...")
            await self._sitemap_phase(report, site_url, policy)

            self.logger.info("Exploring sub-pages...")
            await self._subpage_phase(report, site_url, policy)
        except Exception as exc:
            self.logger.error("Error during PDF search: %s", exc)
            report.errors.append(ScanError(ErrorKind.ORCHESTRATION, site_url, str(exc)))
        self.logger.info(
            "Завершено: %d PDF за %.2f с", len(report.hits), time.monotonic() - start
        )
        return report

    async def _sitemap_phase(
        self, report: CrawlReport, site_url: str, policy: Optional[RobotsTxtRules]
    ) -> None:
        found = await self.sitemap.discover_result(site_url)  # type: ignore[union-attr]
        self._record(report, found.error)
        pending = self._claim(found.urls)
        if not pending:
            return
        delay = self._polite_delay(self.config.sitemap_delay, policy)
        self.logger.info("Searching sitemap URLs...")
        for url in pending:
            self.logger.info("Checking sitemap URL: %s", url)
            scanner = self._scanner_for(url)
            result = await scanner.scan_result(url, policy)
            self._record_result(report, result)
            report.sitemap.extend(result.hits)
            await asyncio.sleep(delay)

    async def _subpage_phase(
        self, report: CrawlReport, site_url: str, policy: Optional[RobotsTxtRules]
    ) -> None:
        found = await self.subpages.discover_result(site_url, policy)  # type: ignore[union-attr]
        self._record(report, found.error)
        self.logger.info("Detected %d sub-pages", len(found.urls))
        pending = self._claim(found.urls)
        if not pending:
            return
        self.logger.info("Processing sub-pages in parallel...")
        hits = await self.scheduler.run(  # type: ignore[union-attr]
            pending,
            policy,
            self.config.max_concurrent,
            delay=self._polite_delay(self.config.batch_delay, policy),
        )
        report.subpages.extend(hits)

    def _claim(self, urls: List[str]) -> List[str]:
        """Drop visited URLs, mark the rest visited and return them in order."""
        pending: List[str] = []
        for url in urls:
            if url in self.visited:
                continue
            self.visited.add(url)
            pending.append(url)
        return pending

    def _polite_delay(self, configured: float, policy: Optional[RobotsTxtRules]) -> float:
        """Configured pause, raised to the site's Crawl-delay for our agent."""
        if policy is None:
            return configured
        crawl_delay = policy.crawl_delay(self.config.robots_agent)
        if crawl_delay is None:
            return configured
        return max(configured, crawl_delay)

    def _scanner_for(self, url: str) -> PageScanner | RenderedPageScanner:
        if any(token in url for token in self.config.render_tokens):
            return self.rendered_scanner  # type: ignore[return-value]
        return self.page_scanner  # type: ignore[return-value]

    def _record_result(self, report: CrawlReport, result: ScanResult) -> None:
        if result.ok:
            return
        for error in result.errors:
            self._record(report, error)

    @staticmethod
    def _record(report: CrawlReport, error: Optional[ScanError]) -> None:
        # seed and sub-page discovery fetch the same URL; keep one entry per failure
        if error is not None and error not in report.errors:
            report.errors.append(error)
