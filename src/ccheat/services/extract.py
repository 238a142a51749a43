"""Per-day value extraction and source merging."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date

from ccheat.models.heatmap import TrailingWindow
from ccheat.models.usage import DailyUsageRecord, Metric, UsageSource


def extract_value(record: DailyUsageRecord | None, metric: Metric) -> float:
    """Scalar for one day; an absent record means zero usage."""
    if record is None:
        return 0
    match metric:
        case Metric.COST:
            return record.total_cost
        case Metric.INPUT:
            return record.input_tokens
        case Metric.OUTPUT:
            return record.output_tokens
        case _:
            return record.effective_total_tokens


def merge_sources(
    per_source: Mapping[UsageSource, Iterable[DailyUsageRecord]],
) -> dict[date, DailyUsageRecord]:
    """Fold one or more sources into a single record per date."""
    merged: dict[date, DailyUsageRecord] = {}
    for records in per_source.values():
        for record in records:
            existing = merged.get(record.date)
            merged[record.date] = record if existing is None else existing.merge(record)
    return dict(sorted(merged.items()))


def series_for_window(
    records: Mapping[date, DailyUsageRecord],
    window: TrailingWindow,
    metric: Metric,
) -> dict[date, float]:
    """Value for every day of the window, zero-filled."""
    return {day: extract_value(records.get(day), metric) for day in window.days()}


def top_days(
    records: Mapping[date, DailyUsageRecord],
    metric: Metric,
    limit: int = 5,
) -> list[DailyUsageRecord]:
    """Busiest days by the selected metric, ignoring days with no usage."""
    busy = [record for record in records.values() if extract_value(record, metric) > 0]
    busy.sort(key=lambda record: extract_value(record, metric), reverse=True)
    return busy[:limit]


def billing_total(records: Mapping[date, DailyUsageRecord]) -> float:
    return sum(record.total_cost for record in records.values())
