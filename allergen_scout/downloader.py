# File: allergen_scout/downloader.py
"""allergen_scout.downloader: Скачивание выбранных PDF в каталог вывода."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Union

from aiohttp import ClientSession

from allergen_scout.crawler.fetcher import Fetcher
from allergen_scout.crawler.models import PdfHit
from allergen_scout.errors import FetchError
from allergen_scout.logger import logger
from allergen_scout.utils import file_timestamp, pdf_filename


async def download_pdf(session: ClientSession, url: str, path: Union[str, Path]) -> Optional[Path]:
    """Скачивает *url* в *path*; при ошибке пишет в лог и возвращает None."""
    target = Path(path)
    try:
        page = await Fetcher(session).fetch_bytes(url)
    except FetchError as exc:
        logger.error("Failed to download PDF: %s", exc)
        return None
    content = page.content if isinstance(page.content, bytes) else page.content.encode("utf-8")
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
    except OSError as exc:
        logger.error("Failed to save PDF %s: %s", target, exc)
        return None
    logger.info("PDF saved: %s", target)
    return target


async def download_hits(
    session: ClientSession,
    hits: Sequence[PdfHit],
    chain_name: str,
    output_dir: Union[str, Path],
    moment: Optional[datetime] = None,
) -> List[Path]:
    """Скачивает все *hits* под именами ``<chain>_<timestamp>[_N].pdf``."""
    stamp = file_timestamp(moment)
    saved: List[Path] = []
    for index, hit in enumerate(hits):
        path = Path(output_dir) / pdf_filename(chain_name, stamp, index)
        logger.info("Downloading: %s", hit.url)
        result = await download_pdf(session, hit.url, path)
        if result is not None:
            saved.append(result)
    return saved
