"""Daily usage records and the selectors that drive extraction."""

from __future__ import annotations

import datetime as dt
from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class Metric(StrEnum):
    """Which scalar is extracted from each daily record."""

    TOKENS = "tokens"
    COST = "cost"
    INPUT = "input"
    OUTPUT = "output"


class WeekStart(StrEnum):
    """First day of each calendar week in the grid."""

    SUN = "sun"
    MON = "mon"

    @property
    def offset(self) -> int:
        """Weekday offset in Sunday=0 numbering."""
        return 1 if self is WeekStart.MON else 0


class UsageSource(StrEnum):
    """Upstream usage-accounting CLIs."""

    CLAUDE = "claude"
    CODEX = "codex"


class DailyUsageRecord(BaseModel):
    """Canonical usage totals for one calendar day of one or more sources."""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_tokens: int = 0
    cache_read_tokens: int = 0
    total_tokens: int | None = None
    total_cost: float = 0.0
    models_used: tuple[str, ...] = ()
    sources: tuple[UsageSource, ...] = ()

    @property
    def effective_total_tokens(self) -> int:
        if self.total_tokens is not None:
            return self.total_tokens
        return self.input_tokens + self.output_tokens

    def merge(self, other: DailyUsageRecord) -> DailyUsageRecord:
        """Combine two records for the same date into one."""
        if other.date != self.date:
            raise ValueError(f"Cannot merge records for {self.date} and {other.date}")

        if self.total_tokens is None and other.total_tokens is None:
            total_tokens = None
        else:
            total_tokens = self.effective_total_tokens + other.effective_total_tokens

        return DailyUsageRecord(
            date=self.date,
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
            cache_creation_tokens=self.cache_creation_tokens + other.cache_creation_tokens,
            cache_read_tokens=self.cache_read_tokens + other.cache_read_tokens,
            total_tokens=total_tokens,
            total_cost=self.total_cost + other.total_cost,
            models_used=tuple(dict.fromkeys((*self.models_used, *other.models_used))),
            sources=tuple(dict.fromkeys((*self.sources, *other.sources))),
        )
