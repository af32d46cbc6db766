# allergen_scout/crawler/classifier.py
"""
Keyword/extension heuristic deciding which links point to allergen PDFs.
"""
from __future__ import annotations

import re
from typing import Iterable, List, Sequence
from urllib.parse import urlsplit

from allergen_scout.config import ALLERGY_KEYWORDS
from allergen_scout.crawler.models import LinkCandidate

PDF_EXTENSION = ".pdf"


class LinkClassifier:
    """Keeps candidates whose path ends in ``.pdf`` and that mention an allergen keyword.

    A keyword may match either the full absolute URL or the visible link text,
    case-insensitively. Order of the input is preserved; nothing is scored.
    """

    def __init__(self, keywords: Sequence[str] = ALLERGY_KEYWORDS) -> None:
        self.keywords = tuple(keywords)
        self._patterns = [re.compile(re.escape(k), re.IGNORECASE) for k in self.keywords]

    def classify(self, candidates: Iterable[LinkCandidate]) -> List[LinkCandidate]:
        return [c for c in candidates if self.is_pdf(c.url) and self.mentions_allergen(c)]

    @staticmethod
    def is_pdf(url: str) -> bool:
        try:
            parts = urlsplit(url)
        except ValueError:
            return False
        if parts.scheme not in ("http", "https") or not parts.netloc:
            return False
        return parts.path.lower().endswith(PDF_EXTENSION)

    def mentions_allergen(self, candidate: LinkCandidate) -> bool:
        return any(p.search(candidate.url) or p.search(candidate.text) for p in self._patterns)
