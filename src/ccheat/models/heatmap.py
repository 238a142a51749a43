"""Heatmap grid models."""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ccheat.models.usage import DailyUsageRecord, Metric, UsageSource, WeekStart

DEFAULT_THRESHOLDS: tuple[int, int, int, int] = (1, 10, 100, 1000)

_DAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


class TrailingWindow(BaseModel):
    """Inclusive range of calendar days ending today."""

    model_config = ConfigDict(frozen=True)

    start: dt.date
    end: dt.date

    @classmethod
    def ending(cls, today: dt.date, days: int = 30) -> TrailingWindow:
        if days < 1:
            raise ValueError("A trailing window needs at least one day")
        return cls(start=today - dt.timedelta(days=days - 1), end=today)

    @property
    def length(self) -> int:
        return (self.end - self.start).days + 1

    def contains(self, day: dt.date) -> bool:
        return self.start <= day <= self.end

    def days(self) -> Iterator[dt.date]:
        for offset in range(self.length):
            yield self.start + dt.timedelta(days=offset)


class IntensityThresholds(BaseModel):
    """Four ascending cut points separating intensity levels 1-4."""

    model_config = ConfigDict(frozen=True)

    values: tuple[int, int, int, int] = DEFAULT_THRESHOLDS

    @field_validator("values")
    @classmethod
    def _check_values(cls, values: tuple[int, int, int, int]) -> tuple[int, int, int, int]:
        if any(value < 1 for value in values):
            raise ValueError("thresholds must be >= 1")
        if any(a > b for a, b in zip(values, values[1:])):
            raise ValueError("thresholds must be non-decreasing")
        return values


class GridCell(BaseModel):
    """One calendar day positioned in the grid."""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    in_range: bool
    value: float | None = None
    level: int = Field(default=0, ge=0, le=4)


class MonthLabel(BaseModel):
    model_config = ConfigDict(frozen=True)

    column: int
    label: str


class CalendarGrid(BaseModel):
    """7 x weeks cells; row = day of week, column = week offset from grid_start."""

    model_config = ConfigDict(frozen=True)

    week_start: WeekStart
    window: TrailingWindow
    grid_start: dt.date
    weeks: int
    rows: tuple[tuple[GridCell | None, ...], ...]
    month_labels: tuple[MonthLabel, ...] = ()

    def cell(self, row: int, column: int) -> GridCell | None:
        return self.rows[row][column]

    def cells(self) -> Iterator[tuple[int, int, GridCell | None]]:
        """Yield (row, column, cell) in row-major order."""
        for row_index, row in enumerate(self.rows):
            for column_index, cell in enumerate(row):
                yield row_index, column_index, cell

    def position_of(self, day: dt.date) -> tuple[int, int]:
        """Row and column a date maps to, whether or not it is set."""
        row = (_sunday_weekday(day) - self.week_start.offset + 7) % 7
        column = (day - self.grid_start).days // 7
        return row, column

    def cell_for(self, day: dt.date) -> GridCell | None:
        row, column = self.position_of(day)
        if not 0 <= column < self.weeks:
            return None
        return self.rows[row][column]

    def column_labels(self) -> list[str]:
        """Month label per week column, blank where none is placed."""
        labels = [""] * self.weeks
        for month in self.month_labels:
            labels[month.column] = month.label
        return labels

    def day_labels(self) -> list[str]:
        offset = self.week_start.offset
        return [_DAY_NAMES[(offset + index) % 7] for index in range(7)]


class SourceSection(BaseModel):
    """Load outcome of one upstream source."""

    model_config = ConfigDict(frozen=True)

    source: UsageSource
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class HeatmapReport(BaseModel):
    """Everything the renderers draw for one run."""

    model_config = ConfigDict(frozen=True)

    metric: Metric
    grid: CalendarGrid
    thresholds: IntensityThresholds
    top_days: tuple[DailyUsageRecord, ...] = ()
    billing_total: float = 0.0
    sources: tuple[SourceSection, ...] = ()

    @property
    def window(self) -> TrailingWindow:
        return self.grid.window

    @property
    def failed_sources(self) -> list[SourceSection]:
        return [section for section in self.sources if section.failed]


def _sunday_weekday(day: dt.date) -> int:
    """Weekday with Sunday=0 ... Saturday=6."""
    return (day.weekday() + 1) % 7
