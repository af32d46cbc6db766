# File: allergen_scout/errors.py
"""allergen_scout.errors: Иерархия исключений проекта."""

from __future__ import annotations

from typing import Optional


class AllergenScoutError(Exception):
    """Base class for all project errors."""


class ConfigError(AllergenScoutError):
    """Configuration file is missing, malformed or invalid."""


class FetchError(AllergenScoutError):
    """HTTP request failed: transport error or non-2xx status."""

    def __init__(self, url: str, message: str, status: Optional[int] = None) -> None:
        super().__init__(f"{url}: {message}")
        self.url = url
        self.status = status


class RenderError(AllergenScoutError):
    """Headless browser could not render a page."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{url}: {message}")
        self.url = url
        self.message = message


class SearchError(AllergenScoutError):
    """Search provider returned an error or an unexpected payload."""


__all__ = ["AllergenScoutError", "ConfigError", "FetchError", "RenderError", "SearchError"]
