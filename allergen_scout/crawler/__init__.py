"""allergen_scout.crawler: Ядро обхода сайта и классификации PDF-ссылок."""

from .crawler import CrawlOrchestrator
from .models import CrawlReport, Discovery, ErrorKind, LinkCandidate, PdfHit, ScanError, ScanResult
from .robots import RobotsCache, RobotsGate, RobotsTxtRules

__all__ = [
    "CrawlOrchestrator",
    "CrawlReport",
    "Discovery",
    "ErrorKind",
    "LinkCandidate",
    "PdfHit",
    "RobotsCache",
    "RobotsGate",
    "RobotsTxtRules",
    "ScanError",
    "ScanResult",
]
