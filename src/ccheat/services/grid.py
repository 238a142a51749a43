"""Calendar grid construction (GitHub-style, 7 rows x N week columns)."""

from __future__ import annotations

import calendar
from collections.abc import Mapping
from datetime import date, timedelta

from ccheat.models.heatmap import (
    CalendarGrid,
    GridCell,
    IntensityThresholds,
    MonthLabel,
    TrailingWindow,
)
from ccheat.models.usage import WeekStart
from ccheat.services.thresholds import classify

WEEK = timedelta(days=7)


def start_of_week(day: date, week_start: WeekStart) -> date:
    """First day of the week containing `day`."""
    sunday_weekday = (day.weekday() + 1) % 7
    return day - timedelta(days=(sunday_weekday - week_start.offset + 7) % 7)


def week_count(window: TrailingWindow, week_start: WeekStart) -> int:
    grid_start = start_of_week(window.start, week_start)
    grid_end = start_of_week(window.end, week_start)
    return (grid_end - grid_start).days // 7 + 1


def build_grid(
    window: TrailingWindow,
    week_start: WeekStart,
    values: Mapping[date, float],
    thresholds: IntensityThresholds,
) -> CalendarGrid:
    """Lay out the window's days on a week-aligned grid.

    Padding days before ``window.start`` get a cell with ``value=None`` and
    level 0. Days after ``window.end`` in the last column stay ``None``.
    """
    grid_start = start_of_week(window.start, week_start)
    weeks = week_count(window, week_start)
    rows: list[list[GridCell | None]] = [[None] * weeks for _ in range(7)]

    for offset in range(weeks * 7):
        day = grid_start + timedelta(days=offset)
        if day > window.end:
            continue
        column = offset // 7
        row = ((day.weekday() + 1) % 7 - week_start.offset + 7) % 7

        in_range = window.contains(day)
        value = values.get(day, 0) if in_range else None
        rows[row][column] = GridCell(
            date=day,
            in_range=in_range,
            value=value,
            level=classify(value, thresholds) if in_range else 0,
        )

    return CalendarGrid(
        week_start=week_start,
        window=window,
        grid_start=grid_start,
        weeks=weeks,
        rows=tuple(tuple(row) for row in rows),
        month_labels=tuple(month_labels(grid_start, weeks, window)),
    )


def month_labels(grid_start: date, weeks: int, window: TrailingWindow) -> list[MonthLabel]:
    """One label per (year, month), at the first week column touching the window."""
    labels: list[MonthLabel] = []
    placed: set[tuple[int, int]] = set()
    for column in range(weeks):
        week_begin = grid_start + column * WEEK
        key = (week_begin.year, week_begin.month)
        if key in placed:
            continue
        week_end = week_begin + timedelta(days=6)
        if week_end < window.start or week_begin > window.end:
            continue
        labels.append(MonthLabel(column=column, label=calendar.month_abbr[week_begin.month]))
        placed.add(key)
    return labels
