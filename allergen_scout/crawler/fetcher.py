# allergen_scout/crawler/fetcher.py
"""
Fetcher module: thin wrapper over a shared aiohttp session.

Every failure (transport error, timeout, non-2xx status) is raised as
:class:`~allergen_scout.errors.FetchError`; callers decide how to degrade.
"""
from __future__ import annotations

import asyncio

from aiohttp import ClientError, ClientSession

from allergen_scout.crawler.models import PageData
from allergen_scout.errors import FetchError


class Fetcher:
    """Fetches text and binary resources through one :class:`ClientSession`."""

    def __init__(self, session: ClientSession) -> None:
        self.session = session

    async def fetch_text(self, url: str) -> PageData:
        """GET *url* and return its decoded body; raise FetchError on failure."""
        try:
            async with self.session.get(url, raise_for_status=False) as resp:
                if not 200 <= resp.status < 300:
                    raise FetchError(url, f"HTTP {resp.status}", status=resp.status)
                text = await resp.text(errors="replace")
                return PageData(url, text)
        except asyncio.TimeoutError as exc:
            raise FetchError(url, "timeout") from exc
        except (ClientError, UnicodeDecodeError, ValueError) as exc:
            raise FetchError(url, str(exc) or type(exc).__name__) from exc

    async def fetch_bytes(self, url: str) -> PageData:
        """GET *url* and return the raw body; raise FetchError on failure."""
        try:
            async with self.session.get(url, raise_for_status=False) as resp:
                if not 200 <= resp.status < 300:
                    raise FetchError(url, f"HTTP {resp.status}", status=resp.status)
                data = await resp.read()
                return PageData(url, data)
        except asyncio.TimeoutError as exc:
            raise FetchError(url, "timeout") from exc
        except (ClientError, ValueError) as exc:
            raise FetchError(url, str(exc) or type(exc).__name__) from exc
