"""Heatmap pipeline: normalize, merge, classify, lay out."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date
from typing import TYPE_CHECKING, Any

from result import Err, Ok, Result

from ccheat.data.normalize import normalize_document
from ccheat.models.heatmap import HeatmapReport, SourceSection, TrailingWindow
from ccheat.models.usage import DailyUsageRecord, UsageSource
from ccheat.services.extract import billing_total, merge_sources, series_for_window, top_days
from ccheat.services.grid import build_grid
from ccheat.services.thresholds import compute_thresholds

if TYPE_CHECKING:
    from ccheat.config import Config

logger = logging.getLogger(__name__)


class HeatmapService:
    """Builds a HeatmapReport from already-fetched upstream documents."""

    def __init__(self, config: Config) -> None:
        self._config = config

    def window(self, today: date) -> TrailingWindow:
        return TrailingWindow.ending(today, self._config.days)

    def build(
        self,
        documents: Mapping[UsageSource, Result[Any, str]],
        today: date,
    ) -> Result[HeatmapReport, str]:
        """Build the report; fails only when every requested source failed."""
        if not documents:
            return Err("No usage sources selected")

        sections: list[SourceSection] = []
        per_source: dict[UsageSource, list[DailyUsageRecord]] = {}
        for source, outcome in documents.items():
            match outcome:
                case Ok(document):
                    per_source[source] = normalize_document(source, document)
                    sections.append(SourceSection(source=source))
                case Err(message):
                    logger.warning("Failed to load %s usage: %s", source, message)
                    sections.append(SourceSection(source=source, error=message))

        if not per_source:
            failures = "; ".join(f"{section.source}: {section.error}" for section in sections)
            return Err(failures)

        window = self.window(today)
        metric = self._config.metric
        records = {
            day: record
            for day, record in merge_sources(per_source).items()
            if window.contains(day)
        }
        series = series_for_window(records, window, metric)
        thresholds = compute_thresholds(series.values())
        grid = build_grid(window, self._config.week_start, series, thresholds)

        return Ok(
            HeatmapReport(
                metric=metric,
                grid=grid,
                thresholds=thresholds,
                top_days=tuple(top_days(records, metric)),
                billing_total=billing_total(records),
                sources=tuple(sections),
            )
        )
