# File: tests/test_cache.py
import json

from allergen_scout.cache import UrlCache
from allergen_scout.crawler.models import PdfHit


def test_load_missing_and_broken(tmp_path):
    cache = UrlCache(tmp_path / "url_cache.json")
    assert cache.load() == {}
    cache.path.write_text("{broken", encoding="utf-8")
    assert cache.load() == {}
    cache.path.write_text("[1, 2]", encoding="utf-8")
    assert cache.load() == {}


def test_official_site_both_shapes(tmp_path):
    cache = UrlCache(tmp_path / "url_cache.json")
    cache.save(
        {
            "sukiya": "https://www.sukiya.jp",
            "kurasushi": {"official_site": "https://www.kurasushi.co.jp", "pdf_links": []},
            "broken": {"pdf_links": []},
        }
    )
    assert cache.official_site("sukiya") == "https://www.sukiya.jp"
    assert cache.official_site("kurasushi") == "https://www.kurasushi.co.jp"
    assert cache.official_site("broken") is None
    assert cache.official_site("unknown") is None


def test_set_official_site_keeps_record(tmp_path):
    cache = UrlCache(tmp_path / "url_cache.json")
    cache.set_official_site("a", "https://a.test")
    cache.add_pdf_link("a", PdfHit("https://a.test/allergy.pdf", "Allergy", "https://a.test"))
    cache.set_official_site("a", "https://a2.test")
    entry = cache.load()["a"]
    assert entry["official_site"] == "https://a2.test"
    assert len(entry["pdf_links"]) == 1


def test_add_pdf_link_deduplicates(tmp_path):
    cache = UrlCache(tmp_path / "url_cache.json")
    cache.save({"gusto": "https://www.skylark.co.jp"})
    hit = PdfHit("https://www.skylark.co.jp/allergy.pdf", "アレルギー", "https://www.skylark.co.jp")

    assert cache.add_pdf_link("gusto", hit) is True
    assert cache.add_pdf_link("gusto", hit) is False

    data = json.loads(cache.path.read_text(encoding="utf-8"))
    assert data["gusto"]["official_site"] == "https://www.skylark.co.jp"
    assert data["gusto"]["pdf_links"] == [hit.as_dict()]
    # non-ASCII stays readable in the file
    assert "アレルギー" in cache.path.read_text(encoding="utf-8")


def test_normalize(tmp_path):
    cache = UrlCache(tmp_path / "url_cache.json")
    cache.save(
        {
            "a": "https://www.example.jp/menu/index.html?x=1",
            "b": "not a url",
            "c": {"official_site": "https://c.test/deep/"},
        }
    )
    fixed = cache.normalize()
    assert fixed["a"] == "https://www.example.jp"
    assert fixed["b"] == "not a url"
    assert fixed["c"] == {"official_site": "https://c.test/deep/"}
    assert cache.load() == fixed
