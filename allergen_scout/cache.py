# File: allergen_scout/cache.py
"""allergen_scout.cache: Плоский JSON-кэш «сеть ресторанов → официальный сайт».

Значение записи: либо строка с URL, либо объект::

    {"official_site": "https://example.jp", "pdf_links": [{"url": ..., "text": ..., "source": ...}]}
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from allergen_scout.crawler.models import PdfHit
from allergen_scout.logger import logger
from allergen_scout.utils import site_root

CacheData = Dict[str, Any]


class UrlCache:
    """Читает и пишет JSON-файл кэша целиком; блокировок нет."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def load(self) -> CacheData:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Cannot read URL cache %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("URL cache %s is not a JSON object, ignoring", self.path)
            return {}
        return data

    def save(self, data: CacheData) -> Path:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        return self.path

    def official_site(self, chain_name: str) -> Optional[str]:
        entry = self.load().get(chain_name)
        if isinstance(entry, str):
            return entry or None
        if isinstance(entry, dict):
            site = entry.get("official_site")
            return site if isinstance(site, str) and site else None
        return None

    def set_official_site(self, chain_name: str, url: str) -> None:
        data = self.load()
        entry = data.get(chain_name)
        if isinstance(entry, dict):
            entry["official_site"] = url
        else:
            data[chain_name] = url
        self.save(data)

    def add_pdf_link(self, chain_name: str, hit: PdfHit) -> bool:
        """Добавляет PDF в ``pdf_links`` записи; False, если такой URL уже есть."""
        data = self.load()
        entry = data.get(chain_name)
        if isinstance(entry, str):
            entry = {"official_site": entry}
        elif not isinstance(entry, dict):
            entry = {}
        links = entry.setdefault("pdf_links", [])
        if any(isinstance(p, dict) and p.get("url") == hit.url for p in links):
            return False
        links.append(hit.as_dict())
        data[chain_name] = entry
        self.save(data)
        logger.info("Updated %s with PDF info.", self.path)
        return True

    def normalize(self) -> CacheData:
        """Сводит все URL-строки кэша к ``scheme://host`` и сохраняет результат."""
        data = self.load()
        fixed: CacheData = {}
        for key, value in data.items():
            if isinstance(value, str):
                root = site_root(value)
                if root is None:
                    logger.error("Invalid URL for %s: %s", key, value)
                    fixed[key] = value
                else:
                    fixed[key] = root
            else:
                fixed[key] = value
        self.save(fixed)
        logger.info("URL cache has been normalized")
        return fixed
