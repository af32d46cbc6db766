# allergen_scout/crawler/models.py
"""
Data models for the AllergenScout crawler.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union


@dataclass(slots=True)
class PageData:
    """Holds the URL and content of a fetched page (text or binary)."""

    url: str
    content: Union[str, bytes]


@dataclass(frozen=True, slots=True)
class LinkCandidate:
    """An absolute link URL together with the visible text it was found with."""

    url: str
    text: str


@dataclass(frozen=True, slots=True)
class PdfHit:
    """A classified allergen PDF link; ``source`` is the page it was found on."""

    url: str
    text: str
    source: str

    def as_dict(self) -> Dict[str, str]:
        return asdict(self)


class ErrorKind(str, Enum):
    ROBOTS = "robots"
    FETCH = "fetch"
    RENDER = "render"
    SITEMAP = "sitemap"
    MALFORMED = "malformed"
    ORCHESTRATION = "orchestration"


@dataclass(frozen=True, slots=True)
class ScanError:
    """Why a stage produced no results for ``url``."""

    kind: ErrorKind
    url: str
    message: str


@dataclass(slots=True)
class ScanResult:
    """Outcome of scanning one URL: hits plus the errors met on the way.

    A rendered scan that fell back to static HTML carries the render error
    next to the hits of the fallback.
    """

    url: str
    hits: List[PdfHit] = field(default_factory=list)
    errors: List[ScanError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def error(self) -> Optional[ScanError]:
        return self.errors[0] if self.errors else None

    @classmethod
    def failed(cls, url: str, kind: ErrorKind, message: str) -> ScanResult:
        return cls(url=url, errors=[ScanError(kind, url, message)])


@dataclass(slots=True)
class Discovery:
    """URLs found by a discoverer for ``url``, or the error that stopped it."""

    url: str
    urls: List[str] = field(default_factory=list)
    error: Optional[ScanError] = None

    @classmethod
    def failed(cls, url: str, kind: ErrorKind, message: str) -> Discovery:
        return cls(url=url, error=ScanError(kind, url, message))


@dataclass(slots=True)
class CrawlReport:
    """Hits of one crawl run grouped by phase, plus recorded stage errors."""

    site_url: str
    seed: List[PdfHit] = field(default_factory=list)
    sitemap: List[PdfHit] = field(default_factory=list)
    subpages: List[PdfHit] = field(default_factory=list)
    errors: List[ScanError] = field(default_factory=list)

    @property
    def hits(self) -> List[PdfHit]:
        return [*self.seed, *self.sitemap, *self.subpages]
