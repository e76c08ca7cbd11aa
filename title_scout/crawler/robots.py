# title_scout/crawler/robots.py
"""
robots.txt rules for the start host.

Parsing follows RFC 9309: the longest matching rule wins, ``allow`` wins a
tie, an empty ``Disallow`` allows everything.
"""
from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
from urllib.parse import urlsplit, urlunsplit

from aiohttp import ClientError, ClientSession, ClientTimeout

from title_scout.logger import get_logger

__all__ = ("RobotsTxtRules", "robots_url_for", "load_robots")

logger = get_logger("robots")

_WILDCARD_RE = re.compile(r"[*$]")


@dataclass(slots=True)
class _Group:
    agents: List[str] = field(default_factory=list)
    rules: List[Tuple[bool, str]] = field(default_factory=list)


class RobotsTxtRules:
    """Parsed robots.txt; ask :meth:`can_fetch` per URL."""

    def __init__(self, text: str) -> None:
        self._groups: List[_Group] = []
        self._patterns: Dict[str, re.Pattern[str]] = {}
        self._parse(text)

    def can_fetch(self, user_agent: str, url: str) -> bool:
        group = self._group_for(user_agent)
        if group is None:
            return True
        parts = urlsplit(url)
        path = (parts.path or "/") + (f"?{parts.query}" if parts.query else "")
        best_len, verdict = -1, True
        for allow, pattern in group.rules:
            if not self._compile(pattern).match(path):
                continue
            length = len(_WILDCARD_RE.sub("", pattern))
            if length > best_len or (length == best_len and allow):
                best_len, verdict = length, allow
        return verdict

    def _parse(self, text: str) -> None:
        current: Optional[_Group] = None
        for raw in text.splitlines():
            line = raw.split("#", 1)[0].strip()
            if not line:
                continue
            key, _, val = line.partition(":")
            key, val = key.strip().lower(), val.strip()
            if key == "user-agent":
                # consecutive user-agent lines share one group
                if current is None or current.rules:
                    current = _Group()
                    self._groups.append(current)
                current.agents.append(val.lower())
            elif key in ("allow", "disallow"):
                if current is None:
                    current = _Group(agents=["*"])
                    self._groups.append(current)
                if key == "disallow" and not val:
                    continue
                current.rules.append((key == "allow", val))

    def _group_for(self, user_agent: str) -> Optional[_Group]:
        ua = user_agent.lower()
        for group in self._groups:
            if any(agent != "*" and agent in ua for agent in group.agents):
                return group
        return next((g for g in self._groups if "*" in g.agents), None)

    def _compile(self, pattern: str) -> re.Pattern[str]:
        if pattern not in self._patterns:
            anchored = pattern.endswith("$")
            body = re.escape(pattern.rstrip("$")).replace(r"\*", ".*")
            self._patterns[pattern] = re.compile(f"^{body}" + ("$" if anchored else ""))
        return self._patterns[pattern]


def robots_url_for(url: str) -> str:
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, "/robots.txt", "", ""))


async def load_robots(start_url: str, user_agent: str, timeout: float) -> Optional[RobotsTxtRules]:
    """Fetch robots.txt of the start host; ``None`` means everything is allowed."""
    robots_url = robots_url_for(start_url)
    try:
        async with ClientSession(
            timeout=ClientTimeout(total=timeout),
            headers={"User-Agent": user_agent},
        ) as session:
            async with session.get(robots_url) as resp:
                if resp.status != 200:
                    logger.debug("robots.txt %s -> HTTP %s", robots_url, resp.status)
                    return None
                return RobotsTxtRules(await resp.text())
    except (ClientError, asyncio.TimeoutError) as e:
        logger.warning("Error loading robots.txt: %s", e)
        return None
