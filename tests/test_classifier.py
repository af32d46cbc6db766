# File: tests/test_classifier.py
import pytest

from allergen_scout.crawler.classifier import LinkClassifier
from allergen_scout.crawler.models import LinkCandidate


@pytest.fixture()
def classifier() -> LinkClassifier:
    return LinkClassifier()


@pytest.mark.parametrize(
    "url,text,expected",
    [
        ("https://example.test/docs/allergy.pdf", "", True),
        ("https://example.test/docs/menu.pdf", "アレルギー情報", True),
        ("https://example.test/docs/menu.PDF", "Allergen list", True),
        ("https://example.test/files/ALLERGEN_2024.pdf", "download", True),
        ("https://example.test/docs/menu.pdf", "特定原材料一覧", True),
        ("https://example.test/docs/menu.pdf", "Ingredients", True),
        ("https://example.test/docs/menu.pdf", "Menu", False),
        ("https://example.test/docs/allergy.html", "アレルギー情報", False),
        ("https://example.test/allergy.pdf/view", "allergy", False),
        ("https://example.test/docs/allergy.pdf?v=2", "", True),
        ("mailto:allergy@example.test.pdf", "allergy", False),
    ],
)
def test_classify_rule(classifier, url, text, expected):
    result = classifier.classify([LinkCandidate(url, text)])
    assert bool(result) is expected


def test_classify_preserves_order(classifier):
    candidates = [
        LinkCandidate("https://example.test/b-allergen.pdf", ""),
        LinkCandidate("https://example.test/news.pdf", "News"),
        LinkCandidate("https://example.test/a.pdf", "成分表"),
    ]
    result = classifier.classify(candidates)
    assert [c.url for c in result] == [
        "https://example.test/b-allergen.pdf",
        "https://example.test/a.pdf",
    ]


def test_classify_is_deterministic(classifier):
    candidates = [LinkCandidate("https://example.test/docs/allergy.pdf", "アレルギー情報")]
    first = classifier.classify(candidates)
    assert classifier.classify(first) == first


def test_malformed_url_dropped(classifier):
    candidates = [LinkCandidate("http://[::1/allergy.pdf", "allergy")]
    assert classifier.classify(candidates) == []


def test_custom_keywords():
    classifier = LinkClassifier(keywords=("nutrition",))
    assert classifier.classify([LinkCandidate("https://example.test/nutrition.pdf", "")])
    assert not classifier.classify([LinkCandidate("https://example.test/allergy.pdf", "")])
