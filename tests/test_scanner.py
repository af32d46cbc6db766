# File: tests/test_scanner.py
from __future__ import annotations

import pytest
from aiohttp import ClientSession, web

from allergen_scout.crawler import scanner as scanner_module
from allergen_scout.crawler.classifier import LinkClassifier
from allergen_scout.crawler.fetcher import Fetcher
from allergen_scout.crawler.models import ErrorKind, PdfHit
from allergen_scout.crawler.robots import RobotsGate, RobotsTxtRules
from allergen_scout.crawler.scanner import PageScanner, RenderedPageScanner
from allergen_scout.errors import RenderError

MIXED_PAGE = """
<a href="/docs/allergy.pdf">アレルギー情報</a>
<a href="/docs/menu.pdf">Menu</a>
<a href="/allergen/">Allergen page</a>
<a href="files/ingredients.pdf">  </a>
<a href="https://cdn.example.test/Allergen-2024.PDF">download</a>
<a href="mailto:info@example.test">mail</a>
<a>no href</a>
"""


def make_scanner(session: ClientSession) -> PageScanner:
    fetcher = Fetcher(session)
    return PageScanner(fetcher, RobotsGate(fetcher, "CustomBot"), LinkClassifier())


@pytest.mark.asyncio()
async def test_scan_returns_exactly_qualifying_links(site):
    base = await site({"/": MIXED_PAGE})
    async with ClientSession() as session:
        hits = await make_scanner(session).scan(base, None)

    assert hits == [
        PdfHit(f"{base}docs/allergy.pdf", "アレルギー情報", base),
        PdfHit(f"{base}files/ingredients.pdf", "PDF", base),
        PdfHit("https://cdn.example.test/Allergen-2024.PDF", "download", base),
    ]


@pytest.mark.asyncio()
async def test_target_blocked_by_robots(site):
    base = await site({"/": MIXED_PAGE})
    policy = RobotsTxtRules("User-agent: *\nDisallow: /docs/")
    async with ClientSession() as session:
        hits = await make_scanner(session).scan(base, policy)

    urls = [h.url for h in hits]
    assert f"{base}docs/allergy.pdf" not in urls
    assert f"{base}files/ingredients.pdf" in urls


@pytest.mark.asyncio()
async def test_source_blocked_by_robots_skips_fetch(site):
    calls = {"n": 0}

    async def page(_):
        calls["n"] += 1
        return web.Response(text=MIXED_PAGE, content_type="text/html")

    base = await site({"/secret/": page})
    policy = RobotsTxtRules("User-agent: *\nDisallow: /secret/")
    async with ClientSession() as session:
        result = await make_scanner(session).scan_result(f"{base}secret/", policy)

    assert result.hits == []
    assert result.error is not None and result.error.kind is ErrorKind.ROBOTS
    assert calls["n"] == 0


@pytest.mark.asyncio()
async def test_fetch_failure_is_empty_result(site):
    base = await site({"/": MIXED_PAGE})
    async with ClientSession() as session:
        result = await make_scanner(session).scan_result(f"{base}missing", None)

    assert result.hits == []
    assert result.error is not None
    assert result.error.kind is ErrorKind.FETCH
    assert "404" in result.error.message


@pytest.mark.asyncio()
async def test_rendered_scanner_uses_browser_links(site, monkeypatch):
    base = await site({"/": "<p>empty before scripts run</p>"})

    async def fake_render(self, url):
        return [
            {"href": "/js/allergen.pdf", "text": "アレルゲン"},
            {"href": "/js/other.pdf", "text": "成分表"},
            {"href": "javascript:void(0)", "text": "menu"},
            {"text": "no href"},
        ]

    monkeypatch.setattr(RenderedPageScanner, "_render", fake_render)
    async with ClientSession() as session:
        scanner = RenderedPageScanner(make_scanner(session))
        hits = await scanner.scan(base, None)

    assert [h.url for h in hits] == [f"{base}js/allergen.pdf", f"{base}js/other.pdf"]
    assert all(h.source == base for h in hits)


@pytest.mark.asyncio()
async def test_rendered_scanner_falls_back_to_static(site, monkeypatch):
    base = await site({"/": MIXED_PAGE})
    rendered = {"n": 0}

    async def broken_render(self, url):
        rendered["n"] += 1
        raise RenderError(url, "Timeout 30000ms exceeded")

    monkeypatch.setattr(RenderedPageScanner, "_render", broken_render)
    async with ClientSession() as session:
        static_hits = await make_scanner(session).scan(base, None)
        scanner = RenderedPageScanner(make_scanner(session))
        result = await scanner.scan_result(base, None)

    assert rendered["n"] == 1
    assert result.hits == static_hits
    assert len(result.hits) == 3
    assert [e.kind for e in result.errors] == [ErrorKind.RENDER]
    assert result.errors[0].message == "Timeout 30000ms exceeded"


@pytest.mark.asyncio()
async def test_rendered_scanner_respects_robots(monkeypatch):
    async def should_not_render(self, url):  # pragma: no cover
        raise AssertionError("render must not be called")

    monkeypatch.setattr(RenderedPageScanner, "_render", should_not_render)
    policy = RobotsTxtRules("User-agent: *\nDisallow: /")
    async with ClientSession() as session:
        scanner = RenderedPageScanner(make_scanner(session))
        hits = await scanner.scan("http://127.0.0.1:9/allergen/", policy)
    assert hits == []


@pytest.mark.asyncio()
async def test_browser_start_failure_falls_back(site, monkeypatch):
    def no_driver():
        raise RuntimeError("cannot start driver")

    monkeypatch.setattr(scanner_module, "async_playwright", no_driver)
    base = await site({"/": MIXED_PAGE})
    async with ClientSession() as session:
        result = await RenderedPageScanner(make_scanner(session)).scan_result(base, None)

    assert len(result.hits) == 3
    assert result.error is not None
    assert result.error.kind is ErrorKind.RENDER
    assert "cannot start driver" in result.error.message


@pytest.mark.asyncio()
async def test_render_and_fetch_failures_both_recorded(site, monkeypatch):
    def no_driver():
        raise NotImplementedError

    monkeypatch.setattr(scanner_module, "async_playwright", no_driver)
    base = await site({"/": MIXED_PAGE})
    async with ClientSession() as session:
        result = await RenderedPageScanner(make_scanner(session)).scan_result(f"{base}missing", None)

    assert result.hits == []
    assert [e.kind for e in result.errors] == [ErrorKind.RENDER, ErrorKind.FETCH]
    assert result.errors[0].message == "NotImplementedError"
