# allergen_scout/crawler/robots.py
"""
Parser and checker for robots.txt rules, plus a per-origin cached gate.
"""
from __future__ import annotations

import logging
import re
from typing import Dict, Iterator, List, Optional, Tuple
from urllib.parse import urljoin, urlsplit

from allergen_scout.crawler.fetcher import Fetcher
from allergen_scout.errors import FetchError
from allergen_scout.utils import origin_of

__all__ = ("RobotsTxtRules", "RobotsCache", "RobotsGate")

logger = logging.getLogger("AllergenScout")


class RobotsTxtRules:
    """
    Парсит robots.txt (RFC 9309).
    Пустое Disallow считается разрешением всех путей.
    """
    _WILDCARD_RE = re.compile(r"(\*|\$)")

    def __init__(self, text: str) -> None:
        self._groups: List[Dict[str, object]] = []
        self._regex_cache: Dict[str, re.Pattern[str]] = {}
        self._parse(text)

    def can_fetch(self, user_agent: str, path: str) -> bool:
        group = self._match_group(user_agent)
        if group is None:
            return True
        best_len = -1
        allow: Optional[bool] = None
        for directive, pattern in group["directives"]:  # type: ignore[index]
            if not self._match_path(path, pattern):
                continue
            length = self._rule_len(pattern)
            if length > best_len or (length == best_len and directive == "allow" and allow is False):
                best_len = length
                allow = (directive == "allow")
        return True if allow is None else allow

    def crawl_delay(self, user_agent: str) -> Optional[float]:
        group = self._match_group(user_agent)
        return None if group is None else group.get("crawl_delay")  # type: ignore[return-value]

    def _new_group(self, agents: List[str]) -> Dict[str, object]:
        group: Dict[str, object] = {
            "agents": agents, "directives": [], "crawl_delay": None, "has_rules": False,
        }
        self._groups.append(group)
        return group

    def _parse(self, text: str) -> None:
        current: Optional[Dict[str, object]] = None
        for key, val in self._lines(text):
            if key == "user-agent":
                # User-agent после строк правил открывает новую группу
                if current is None or current["has_rules"]:
                    current = self._new_group([])
                current["agents"].append(val.lower())  # type: ignore[union-attr]
            elif key in ("allow", "disallow"):
                if current is None:
                    current = self._new_group(["*"])
                current["has_rules"] = True
                # пустой Disallow разрешает все, правило не сохраняем
                if not val:
                    continue
                current["directives"].append((key, val))  # type: ignore[union-attr]
            elif key == "crawl-delay":
                if current is None:
                    current = self._new_group(["*"])
                current["has_rules"] = True
                try:
                    current["crawl_delay"] = float(val)
                except ValueError:
                    pass

    @staticmethod
    def _lines(text: str) -> Iterator[Tuple[str, str]]:
        for raw in text.splitlines():
            line = raw.split("#", 1)[0].strip()
            if not line or ":" not in line:
                continue
            key, _, val = line.partition(":")
            yield key.strip().lower(), val.strip()

    def _match_group(self, user_agent: str) -> Optional[Dict[str, object]]:
        ua = user_agent.lower()
        for group in self._groups:
            if any(a != "*" and ua.startswith(a) for a in group["agents"]):  # type: ignore[union-attr]
                return group
        for group in self._groups:
            if "*" in group["agents"]:  # type: ignore[operator]
                return group
        return None

    def _match_path(self, path: str, pattern: str) -> bool:
        if pattern not in self._regex_cache:
            esc = re.escape(pattern).replace(r"\*", ".*")
            if pattern.endswith("$"):
                esc = esc[:-2] + "$"
            self._regex_cache[pattern] = re.compile(f"^{esc}")
        return bool(self._regex_cache[pattern].match(path))

    @classmethod
    def _rule_len(cls, pattern: str) -> int:
        return len(cls._WILDCARD_RE.sub("", pattern))


class RobotsCache:
    """Run-scoped map origin -> parsed rules. No TTL, no eviction."""

    def __init__(self) -> None:
        self._rules: Dict[str, RobotsTxtRules] = {}

    def get(self, origin: str) -> Optional[RobotsTxtRules]:
        return self._rules.get(origin)

    def put(self, origin: str, rules: RobotsTxtRules) -> None:
        self._rules[origin] = rules

    def __contains__(self, origin: object) -> bool:
        return origin in self._rules

    def __len__(self) -> int:
        return len(self._rules)


class RobotsGate:
    """Loads robots.txt once per origin and answers allow/deny for URLs.

    A policy of ``None`` means robots.txt could not be fetched or parsed, and
    every URL is treated as allowed.
    """

    def __init__(self, fetcher: Fetcher, agent: str, cache: Optional[RobotsCache] = None) -> None:
        self.fetcher = fetcher
        self.agent = agent
        self.cache = cache if cache is not None else RobotsCache()

    async def get(self, url: str) -> Optional[RobotsTxtRules]:
        origin = origin_of(url)
        cached = self.cache.get(origin)
        if cached is not None:
            return cached
        robots_url = urljoin(origin + "/", "/robots.txt")
        try:
            page = await self.fetcher.fetch_text(robots_url)
            rules = RobotsTxtRules(str(page.content))
        except FetchError as exc:
            logger.info("Failed to fetch robots.txt (%s). Applying default rules.", exc)
            return None
        except ValueError as exc:
            logger.warning("Failed to parse robots.txt %s: %s. Applying default rules.", robots_url, exc)
            return None
        self.cache.put(origin, rules)
        return rules

    def is_allowed(self, policy: Optional[RobotsTxtRules], url: str, agent: Optional[str] = None) -> bool:
        if policy is None:
            return True
        try:
            parts = urlsplit(url)
        except ValueError:
            return False
        path = parts.path or "/"
        if parts.query:
            path = f"{path}?{parts.query}"
        return policy.can_fetch(agent or self.agent, path)
