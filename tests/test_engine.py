# File: tests/test_engine.py
from __future__ import annotations

import pytest
from aiohttp import web

from allergen_scout.cache import UrlCache
from allergen_scout.crawler.models import PdfHit
from allergen_scout.engine import Engine
from allergen_scout.search import SearchClient, SearchItem


@pytest.mark.asyncio()
async def test_lookup_uses_cache_first(fast_config, monkeypatch):
    UrlCache(fast_config.cache_file).save({"sukiya": "https://www.sukiya.jp"})

    async def no_search(self, chain_name):  # pragma: no cover
        raise AssertionError("search must not be called on a cache hit")

    monkeypatch.setattr(SearchClient, "find_official_site", no_search)
    async with Engine(fast_config) as engine:
        assert await engine.lookup_official_site("sukiya") == "https://www.sukiya.jp"


@pytest.mark.asyncio()
async def test_lookup_searches_and_saves(fast_config, monkeypatch):
    async def fake_search(self, chain_name):
        return f"https://www.{chain_name}.co.jp/"

    monkeypatch.setattr(SearchClient, "find_official_site", fake_search)
    async with Engine(fast_config) as engine:
        assert await engine.lookup_official_site("kurasushi") == "https://www.kurasushi.co.jp/"

    assert UrlCache(fast_config.cache_file).load() == {"kurasushi": "https://www.kurasushi.co.jp/"}


@pytest.mark.asyncio()
async def test_lookup_not_found_is_not_cached(fast_config, monkeypatch):
    async def nothing(self, chain_name):
        return None

    monkeypatch.setattr(SearchClient, "find_official_site", nothing)
    async with Engine(fast_config) as engine:
        assert await engine.lookup_official_site("ghost") is None
    assert UrlCache(fast_config.cache_file).load() == {}


@pytest.mark.asyncio()
async def test_find_pdfs_crawls_site(site, fast_config):
    base = await site({"/": '<a href="/allergy.pdf">アレルギー</a>'})
    async with Engine(fast_config) as engine:
        report = await engine.find_pdfs(base)
    assert report.hits == [PdfHit(f"{base}allergy.pdf", "アレルギー", base)]


@pytest.mark.asyncio()
async def test_fast_search_records_and_downloads(site, fast_config, monkeypatch):
    base = await site({"/a.pdf": web.Response(body=b"%PDF-1.4", content_type="application/pdf")})
    UrlCache(fast_config.cache_file).save({"kura": base})

    async def best_pdf(self, site_url):
        return SearchItem("アレルギー表", f"{site_url}a.pdf")

    monkeypatch.setattr(SearchClient, "find_best_allergy_pdf", best_pdf)
    async with Engine(fast_config) as engine:
        saved = await engine.fast_search("kura")

    assert saved is not None and saved.read_bytes() == b"%PDF-1.4"
    assert saved.parent == fast_config.output_dir
    entry = UrlCache(fast_config.cache_file).load()["kura"]
    assert entry["official_site"] == base
    assert entry["pdf_links"] == [{"url": f"{base}a.pdf", "text": "アレルギー表", "source": base}]


@pytest.mark.asyncio()
async def test_engine_requires_context(fast_config):
    with pytest.raises(RuntimeError):
        await Engine(fast_config).find_pdfs("http://127.0.0.1:9/")
