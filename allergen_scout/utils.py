# File: allergen_scout/utils.py
"""allergen_scout.utils: Утилиты для URL и имён файлов."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Optional, Sequence
from urllib.parse import urlsplit, urlunsplit

__all__: Sequence[str] = (
    "origin_of",
    "site_root",
    "normalize_chain_name",
    "file_timestamp",
    "pdf_filename",
)

_WS_RE = re.compile(r"\s+")


def origin_of(url: str) -> str:
    """Возвращает ``scheme://netloc`` для URL (ключ кэша robots.txt)."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), "", "", ""))


def site_root(url: str) -> Optional[str]:
    """Сводит URL к ``scheme://hostname``; для некорректного URL возвращает None."""
    try:
        parts = urlsplit(url)
        host = parts.hostname
    except ValueError:
        return None
    if not parts.scheme or not host:
        return None
    return f"{parts.scheme}://{host}"


def normalize_chain_name(chain_name: str) -> str:
    """Заменяет пробельные последовательности на ``_``."""
    return _WS_RE.sub("_", chain_name.strip())


def file_timestamp(moment: Optional[datetime] = None) -> str:
    """Метка времени вида ``2024-05-01T12-30-05`` (безопасна для имён файлов)."""
    moment = moment or datetime.now(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H-%M-%S")


def pdf_filename(chain_name: str, timestamp: str, index: int = 0) -> str:
    """Имя файла ``<chain>_<timestamp>.pdf``; index > 0 добавляет суффикс ``_N``."""
    stem = f"{normalize_chain_name(chain_name)}_{timestamp}"
    if index:
        stem = f"{stem}_{index}"
    return f"{stem}.pdf"
