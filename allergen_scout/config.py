# === FILE: allergen_scout/config.py ===
"""
Модуль для загрузки и валидации конфигурации AllergenScout.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Literal, Optional, Tuple, Union

import yaml
from dotenv import load_dotenv
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from allergen_scout.errors import ConfigError

# Bilingual allergen / ingredient terms matched against PDF URLs and link text.
ALLERGY_KEYWORDS: Tuple[str, ...] = (
    "allergy",
    "アレルギー",
    "allergen",
    "pictogram",
    "特定原材料",
    "原料",
    "成分",
    "含まれる",
    "ingredient",
    "ingredients",
)

# Sitemap URLs containing one of these tokens are scanned with a headless browser.
RENDER_TOKENS: Tuple[str, ...] = ("allergen", "origin")


def _env(name: str) -> Optional[str]:
    return os.getenv(name) or None


class CrawlerConfig(BaseModel):
    """Конфигурация одного запуска поиска PDF."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    user_agent: str = Field(
        "AllergenScout/1.0", min_length=1, description="Заголовок User-Agent для HTTP-запросов."
    )
    robots_agent: str = Field(
        "CustomBot", min_length=1, description="Имя агента для проверки правил robots.txt."
    )
    request_timeout: float = Field(15.0, gt=0, description="Таймаут на один HTTP-запрос (секунд).")
    render_timeout: float = Field(30.0, gt=0, description="Таймаут рендеринга страницы (секунд).")
    sitemap_delay: float = Field(1.0, ge=0, description="Пауза между страницами из sitemap.")
    batch_delay: float = Field(2.0, ge=0, description="Пауза между пакетами подстраниц.")
    max_concurrent: int = Field(2, ge=1, description="Размер пакета параллельных запросов.")
    headless: bool = Field(True, description="Запускать браузер без окна.")

    allergy_keywords: Tuple[str, ...] = Field(ALLERGY_KEYWORDS, min_length=1)
    render_tokens: Tuple[str, ...] = Field(RENDER_TOKENS)

    cache_file: Path = Field(Path("url_cache.json"), description="JSON-кэш официальных сайтов.")
    output_dir: Path = Field(Path("pdfs"), description="Каталог для скачанных PDF.")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Уровень логирования, если не задан --log-level."
    )
    log_file: Optional[Path] = Field(None, description="Файл логов с ротацией; None - только консоль.")

    google_api_key: Optional[str] = Field(default_factory=lambda: _env("GOOGLE_API_KEY"))
    google_cx: Optional[str] = Field(default_factory=lambda: _env("GOOGLE_CX"))

    @field_validator("allergy_keywords", "render_tokens", mode="before")
    def _listify(cls, v: Any) -> Any:
        if isinstance(v, str):
            return (v,)
        return v

    @field_validator("allergy_keywords")
    def _no_blank_keywords(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        if any(not k.strip() for k in v):
            raise ValueError("allergy_keywords must not contain blank entries")
        return v


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None] = None) -> CrawlerConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект CrawlerConfig.

    Без явного пути используется configs/default.yaml, а если его нет,
    значения по умолчанию. Переменные окружения подхватываются из .env.
    """
    load_dotenv()

    if path is None:
        if not _DEFAULT_CFG.exists():
            return CrawlerConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ConfigError(f"Неподдерживаемый формат конфига: {suffix}")

    try:
        return CrawlerConfig(**data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
