# allergen_scout/crawler/scanner.py
"""
Page scanners: fetch one URL and return the allergen PDF links found on it.

:class:`PageScanner` reads static HTML. :class:`RenderedPageScanner` lets a
headless Chromium execute the page first and falls back to the static scanner
whenever rendering fails. Both expose the same ``scan`` / ``scan_result`` API.
"""
from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Sequence

from playwright.async_api import async_playwright

from allergen_scout.crawler.classifier import LinkClassifier
from allergen_scout.crawler.fetcher import Fetcher
from allergen_scout.crawler.link_extractor import (
    RENDERED_LINKS_JS,
    candidates_from_raw,
    extract_anchors,
)
from allergen_scout.crawler.models import ErrorKind, LinkCandidate, PdfHit, ScanError, ScanResult
from allergen_scout.crawler.robots import RobotsGate, RobotsTxtRules
from allergen_scout.errors import FetchError, RenderError

__all__ = ("PageScanner", "RenderedPageScanner")

logger = logging.getLogger("AllergenScout")

DEFAULT_LINK_TEXT = "PDF"


class PageScanner:
    """Static-HTML scanner gated by robots.txt."""

    def __init__(self, fetcher: Fetcher, gate: RobotsGate, classifier: LinkClassifier) -> None:
        self.fetcher = fetcher
        self.gate = gate
        self.classifier = classifier

    async def scan(self, url: str, policy: Optional[RobotsTxtRules]) -> List[PdfHit]:
        """Return PDF hits for *url*; any failure yields an empty list."""
        return (await self.scan_result(url, policy)).hits

    async def scan_result(self, url: str, policy: Optional[RobotsTxtRules]) -> ScanResult:
        if not self.gate.is_allowed(policy, url):
            logger.info("Skipped by robots.txt: %s", url)
            return ScanResult.failed(url, ErrorKind.ROBOTS, "disallowed by robots.txt")
        try:
            page = await self.fetcher.fetch_text(url)
        except FetchError as exc:
            logger.error("Error searching page (%s): %s", url, exc)
            return ScanResult.failed(url, ErrorKind.FETCH, str(exc))
        return ScanResult(url, self.collect_hits(url, extract_anchors(page), policy))

    def collect_hits(
        self,
        source: str,
        candidates: Sequence[LinkCandidate],
        policy: Optional[RobotsTxtRules],
    ) -> List[PdfHit]:
        """Classify *candidates* and keep the ones whose target robots.txt allows."""
        hits: List[PdfHit] = []
        for candidate in self.classifier.classify(candidates):
            if not self.gate.is_allowed(policy, candidate.url):
                logger.debug("PDF blocked by robots.txt: %s", candidate.url)
                continue
            hits.append(PdfHit(candidate.url, candidate.text or DEFAULT_LINK_TEXT, source))
        return hits


class RenderedPageScanner:
    """Scanner that executes page scripts in headless Chromium before extraction.

    Rendering is best effort: on timeout, crash or navigation error the browser
    is closed and the wrapped :class:`PageScanner` scans the same URL instead.
    """

    def __init__(
        self,
        fallback: PageScanner,
        *,
        timeout: float = 30.0,
        headless: bool = True,
        user_agent: Optional[str] = None,
    ) -> None:
        self.fallback = fallback
        self.timeout = timeout
        self.headless = headless
        self.user_agent = user_agent

    @property
    def gate(self) -> RobotsGate:
        return self.fallback.gate

    async def scan(self, url: str, policy: Optional[RobotsTxtRules]) -> List[PdfHit]:
        return (await self.scan_result(url, policy)).hits

    async def scan_result(self, url: str, policy: Optional[RobotsTxtRules]) -> ScanResult:
        if not self.gate.is_allowed(policy, url):
            logger.info("Skipped by robots.txt: %s", url)
            return ScanResult.failed(url, ErrorKind.ROBOTS, "disallowed by robots.txt")
        try:
            raw_links = await self._render(url)
        except RenderError as exc:
            logger.error("JavaScript rendering error (%s): %s", url, exc)
            result = await self.fallback.scan_result(url, policy)
            result.errors.insert(0, ScanError(ErrorKind.RENDER, url, exc.message))
            return result
        candidates = candidates_from_raw(url, raw_links)
        return ScanResult(url, self.fallback.collect_hits(url, candidates, policy))

    async def _render(self, url: str) -> List[Mapping[str, Any]]:
        """Load *url* in an isolated context and return raw ``{href, text}`` links.

        Every failure, from driver start-up to script evaluation, surfaces as
        :class:`RenderError`; cancellation propagates unchanged.
        """
        try:
            async with async_playwright() as pw:
                browser = await pw.chromium.launch(headless=self.headless)
                try:
                    context = await browser.new_context(user_agent=self.user_agent)
                    page = await context.new_page()
                    await page.goto(url, wait_until="networkidle", timeout=self.timeout * 1000)
                    links = await page.evaluate(RENDERED_LINKS_JS)
                finally:
                    await browser.close()
        except Exception as exc:
            raise RenderError(url, str(exc) or type(exc).__name__) from exc
        return list(links or [])
