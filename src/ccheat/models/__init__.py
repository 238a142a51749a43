"""Pydantic models for ccheat."""

from ccheat.models.heatmap import (
    DEFAULT_THRESHOLDS,
    CalendarGrid,
    GridCell,
    HeatmapReport,
    IntensityThresholds,
    MonthLabel,
    SourceSection,
    TrailingWindow,
)
from ccheat.models.usage import DailyUsageRecord, Metric, UsageSource, WeekStart

__all__ = [
    "CalendarGrid",
    "DailyUsageRecord",
    "GridCell",
    "HeatmapReport",
    "IntensityThresholds",
    "Metric",
    "MonthLabel",
    "SourceSection",
    "TrailingWindow",
    "UsageSource",
    "WeekStart",
    "DEFAULT_THRESHOLDS",
]
