# File: tests/conftest.py
from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Mapping
from pathlib import Path
from typing import Optional, Union

import pytest
import pytest_asyncio
from aiohttp import web

from allergen_scout.config import CrawlerConfig
from allergen_scout.logger import configure

Handler = Callable[[web.Request], object]
Route = Union[str, web.Response, Handler]


@pytest.fixture()
def fast_config(tmp_path: Path) -> CrawlerConfig:
    """
    Config without politeness delays, writing cache and PDFs into tmp_path.
    """
    return CrawlerConfig(
        request_timeout=5.0,
        render_timeout=5.0,
        sitemap_delay=0.0,
        batch_delay=0.0,
        cache_file=tmp_path / "url_cache.json",
        output_dir=tmp_path / "pdfs",
        google_api_key="test-key",
        google_cx="test-cx",
    )


async def serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL with trailing slash, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()
    try:
        yield f"http://127.0.0.1:{port}/"
    finally:
        await runner.cleanup()


def html(body: str) -> web.Response:
    return web.Response(text=f"<html><body>{body}</body></html>", content_type="text/html")


def build_app(routes: Mapping[str, Route]) -> web.Application:
    """aiohttp app from ``path -> html string | Response | handler``."""
    app = web.Application()
    for path, route in routes.items():
        if isinstance(route, str):
            page = html(route)
            app.router.add_get(path, _static(page.body, "text/html", charset="utf-8"))
        elif isinstance(route, web.Response):
            app.router.add_get(path, _static(route.body, route.content_type, route.status, route.charset))
        else:
            app.router.add_get(path, route)
    return app


def _static(body: bytes, content_type: str, status: int = 200, charset: Optional[str] = None):
    async def handler(_):
        return web.Response(body=body, content_type=content_type, status=status, charset=charset)

    return handler


@pytest_asyncio.fixture
async def site(unused_tcp_port: int):
    """Factory fixture: ``base = await site({...routes})`` serves a test site."""
    generators = []

    async def start(routes: Mapping[str, Route]) -> str:
        gen = serve_app(build_app(routes), unused_tcp_port)
        generators.append(gen)
        return await gen.__anext__()

    yield start

    for gen in generators:
        await gen.aclose()


@pytest.fixture(autouse=True)
def _reset_logging():
    """CLI tests point the project logger at CliRunner streams; restore it afterwards."""
    yield
    configure(level="INFO")
