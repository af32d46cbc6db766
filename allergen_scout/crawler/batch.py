# allergen_scout/crawler/batch.py
"""
Batch scheduler: scan URLs with bounded concurrency and pauses between batches.
"""
from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Protocol, Sequence

from allergen_scout.crawler.models import PdfHit
from allergen_scout.crawler.robots import RobotsTxtRules

__all__ = ("Scanner", "BatchScheduler")

logger = logging.getLogger("AllergenScout")


class Scanner(Protocol):
    async def scan(self, url: str, policy: Optional[RobotsTxtRules]) -> List[PdfHit]:
        ...


class BatchScheduler:
    """Runs URLs through a scanner ``max_concurrent`` at a time.

    Starts inside a batch are staggered by ``delay / max_concurrent`` and the
    next batch starts ``delay`` seconds after the previous one has finished.
    """

    def __init__(self, scanner: Scanner, delay: float = 2.0) -> None:
        self.scanner = scanner
        self.delay = delay

    async def run(
        self,
        urls: Sequence[str],
        policy: Optional[RobotsTxtRules],
        max_concurrent: int = 2,
        delay: Optional[float] = None,
    ) -> List[PdfHit]:
        """Scan *urls*; *delay* overrides the scheduler default for this run."""
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be >= 1")
        pause = self.delay if delay is None else delay
        hits: List[PdfHit] = []
        total = len(urls)
        stagger = pause / max_concurrent
        for start in range(0, total, max_concurrent):
            batch = urls[start:start + max_concurrent]
            logger.info(
                "Batch processing (%d~%d/%d)", start + 1, min(start + max_concurrent, total), total
            )
            results = await asyncio.gather(
                *(self._scan_after(url, idx * stagger, policy) for idx, url in enumerate(batch)),
                return_exceptions=True,
            )
            for url, result in zip(batch, results):
                if isinstance(result, BaseException):
                    if isinstance(result, asyncio.CancelledError):
                        raise result
                    logger.error("Sub-page scan failed (%s): %s", url, result)
                    continue
                hits.extend(result)
            if start + max_concurrent < total:
                await asyncio.sleep(pause)
        return hits

    async def _scan_after(
        self, url: str, wait: float, policy: Optional[RobotsTxtRules]
    ) -> List[PdfHit]:
        if wait:
            await asyncio.sleep(wait)
        logger.info("Searching sub-page: %s", url)
        return await self.scanner.scan(url, policy)
