# title_scout/crawler/models.py
"""
Data models for the TitleScout crawler.
"""
from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Dict, List, Optional


@dataclass(slots=True, frozen=True)
class PageResult:
    """A page whose rendered title matched the target title."""

    url: str
    title: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass(slots=True)
class PageVisit:
    """What the extractor read from one settled page."""

    url: str
    title: str
    links: List[str] = field(default_factory=list)


class StageOutcome(enum.Enum):
    SETTLED = "settled"
    TIMED_OUT_IGNORABLE = "timed_out_ignorable"
    TIMED_OUT_FATAL = "timed_out_fatal"


@dataclass(slots=True, frozen=True)
class StageResult:
    stage: str
    outcome: StageOutcome
    detail: str = ""

    @property
    def fatal(self) -> bool:
        return self.outcome is StageOutcome.TIMED_OUT_FATAL


@dataclass(slots=True)
class SettleReport:
    """Ordered outcomes of the settle stages run for one page."""

    url: str
    stages: List[StageResult] = field(default_factory=list)

    def add(self, result: StageResult) -> StageResult:
        self.stages.append(result)
        return result

    @property
    def fatal(self) -> Optional[StageResult]:
        return next((s for s in self.stages if s.fatal), None)

    def outcome_of(self, stage: str) -> Optional[StageOutcome]:
        for s in self.stages:
            if s.stage == stage:
                return s.outcome
        return None


@dataclass(slots=True)
class CrawlReport:
    """Итог одного запуска обхода."""

    started_at: datetime = field(default_factory=datetime.now)
    matches: List[PageResult] = field(default_factory=list)
    visited: int = 0
    batches: int = 0
    failed: Dict[str, str] = field(default_factory=dict)
    disallowed: List[str] = field(default_factory=list)
    dropped: int = 0
    error: Optional[str] = None

    @property
    def completed(self) -> bool:
        return self.error is None

    def abort(self, message: str) -> None:
        self.error = message
