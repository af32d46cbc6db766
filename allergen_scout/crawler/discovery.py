# allergen_scout/crawler/discovery.py
"""
Candidate page discovery: sitemap.xml entries and same-site links of the seed.
"""
from __future__ import annotations

import logging
from typing import List, Optional
from urllib.parse import urljoin

from allergen_scout.crawler.fetcher import Fetcher
from allergen_scout.crawler.link_extractor import extract_anchors
from allergen_scout.crawler.models import Discovery, ErrorKind
from allergen_scout.crawler.robots import RobotsGate, RobotsTxtRules
from allergen_scout.errors import FetchError
from allergen_scout.parser.sitemap_parser import parse_sitemap

__all__ = ("SitemapDiscoverer", "SubpageDiscoverer")

logger = logging.getLogger("AllergenScout")


class SitemapDiscoverer:
    """Reads ``/sitemap.xml`` of a site into a flat list of URLs."""

    def __init__(self, fetcher: Fetcher) -> None:
        self.fetcher = fetcher

    async def discover(self, site_url: str) -> List[str]:
        return (await self.discover_result(site_url)).urls

    async def discover_result(self, site_url: str) -> Discovery:
        sitemap_url = urljoin(site_url, "/sitemap.xml")
        logger.info("Fetching sitemap: %s", sitemap_url)
        try:
            page = await self.fetcher.fetch_text(sitemap_url)
        except FetchError as exc:
            logger.info("Sitemap not found (%s)", exc)
            return Discovery.failed(sitemap_url, ErrorKind.SITEMAP, str(exc))
        try:
            urls = parse_sitemap(page.content)
        except ValueError as exc:
            logger.info("Failed to parse sitemap: %s", exc)
            return Discovery.failed(sitemap_url, ErrorKind.MALFORMED, str(exc))
        logger.info("Retrieved %d URLs from sitemap", len(urls))
        return Discovery(sitemap_url, urls)


class SubpageDiscoverer:
    """Collects links of the seed page that start with the seed URL itself.

    The check is a literal string prefix, so scheme/host casing and a trailing
    slash on the seed change what counts as a sub-page.
    """

    def __init__(self, fetcher: Fetcher, gate: RobotsGate) -> None:
        self.fetcher = fetcher
        self.gate = gate

    async def discover(self, site_url: str, policy: Optional[RobotsTxtRules]) -> List[str]:
        return (await self.discover_result(site_url, policy)).urls

    async def discover_result(self, site_url: str, policy: Optional[RobotsTxtRules]) -> Discovery:
        if not self.gate.is_allowed(policy, site_url):
            logger.info("Skipped by robots.txt: %s", site_url)
            return Discovery.failed(site_url, ErrorKind.ROBOTS, "disallowed by robots.txt")
        try:
            page = await self.fetcher.fetch_text(site_url)
        except FetchError as exc:
            logger.error("Error fetching sub-pages: %s", exc)
            return Discovery.failed(site_url, ErrorKind.FETCH, str(exc))
        found = dict.fromkeys(
            c.url for c in extract_anchors(page) if c.url.startswith(site_url)
        )
        return Discovery(site_url, list(found))
