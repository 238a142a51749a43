"""Source-aware normalization of `ccusage daily --json` style documents."""

from __future__ import annotations

import logging
import math
from datetime import date, datetime
from typing import Any

from ccheat.models.usage import DailyUsageRecord, UsageSource

logger = logging.getLogger(__name__)

_DATE_FORMATS = ("%Y-%m-%d", "%Y%m%d", "%b %d, %Y", "%B %d, %Y", "%b %d %Y")


def normalize_document(source: UsageSource, document: Any) -> list[DailyUsageRecord]:
    """Map a parsed upstream document onto canonical daily records."""
    rows = daily_rows(document)
    records: list[DailyUsageRecord] = []
    for index, raw in enumerate(rows):
        if not isinstance(raw, dict):
            logger.warning("Skipping non-object %s row #%d", source, index)
            continue
        record = _normalize_row(source, raw)
        if record is None:
            logger.warning(
                "Skipping %s row #%d with unreadable date %r", source, index, raw.get("date")
            )
            continue
        records.append(record)
    return records


def daily_rows(document: Any) -> list[Any]:
    """Top-level list of daily rows, under `daily`, `data`, or the document itself."""
    if isinstance(document, list):
        return document
    if not isinstance(document, dict):
        return []
    for key in ("daily", "data"):
        rows = document.get(key)
        if isinstance(rows, list):
            return rows
    return []


def parse_date(value: Any) -> date | None:
    """Parse ISO (`2026-01-07`), compact (`20260107`) or display (`Jan 7, 2026`) dates."""
    text = _as_str(value).strip()
    if not text:
        return None
    if len(text) > 10 and text[4] == "-":
        text = text[:10]
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def _normalize_row(source: UsageSource, raw: dict[str, Any]) -> DailyUsageRecord | None:
    day = parse_date(raw.get("date"))
    if day is None:
        return None

    match source:
        case UsageSource.CODEX:
            return _codex_record(day, raw)
        case _:
            return _claude_record(day, raw)


def _claude_record(day: date, raw: dict[str, Any]) -> DailyUsageRecord:
    breakdowns = _breakdown_rows(raw)
    input_tokens = _first_int(raw, "inputTokens")
    output_tokens = _first_int(raw, "outputTokens")
    if input_tokens is None and output_tokens is None and breakdowns:
        input_tokens = sum(_int(row.get("inputTokens")) for row in breakdowns)
        output_tokens = sum(_int(row.get("outputTokens")) for row in breakdowns)

    cost = _first_float(raw, "totalCost", "costUSD", "cost")
    if cost is None:
        cost = sum(_float(row.get("cost")) for row in breakdowns)

    return DailyUsageRecord(
        date=day,
        input_tokens=input_tokens or 0,
        output_tokens=output_tokens or 0,
        cache_creation_tokens=_first_int(raw, "cacheCreationTokens") or 0,
        cache_read_tokens=_first_int(raw, "cacheReadTokens") or 0,
        total_tokens=_first_int(raw, "totalTokens"),
        total_cost=cost,
        models_used=_models_used(raw, breakdowns),
        sources=(UsageSource.CLAUDE,),
    )


def _codex_record(day: date, raw: dict[str, Any]) -> DailyUsageRecord:
    models = raw.get("models")
    per_model: list[dict[str, Any]] = []
    if isinstance(models, dict):
        per_model = [row for row in models.values() if isinstance(row, dict)]

    input_tokens = _first_int(raw, "inputTokens")
    output_tokens = _first_int(raw, "outputTokens")
    cached_tokens = _first_int(raw, "cachedInputTokens")
    total_tokens = _first_int(raw, "totalTokens")
    if input_tokens is None and output_tokens is None and per_model:
        input_tokens = sum(_int(row.get("inputTokens")) for row in per_model)
        output_tokens = sum(_int(row.get("outputTokens")) for row in per_model)
        cached_tokens = sum(_int(row.get("cachedInputTokens")) for row in per_model)
        if total_tokens is None:
            model_totals = [_first_int(row, "totalTokens") for row in per_model]
            if all(total is not None for total in model_totals):
                total_tokens = sum(total or 0 for total in model_totals)

    return DailyUsageRecord(
        date=day,
        input_tokens=input_tokens or 0,
        output_tokens=output_tokens or 0,
        cache_read_tokens=cached_tokens or 0,
        total_tokens=total_tokens,
        total_cost=_first_float(raw, "costUSD", "totalCost", "cost") or 0.0,
        models_used=_models_used(raw, []),
        sources=(UsageSource.CODEX,),
    )


def _breakdown_rows(raw: dict[str, Any]) -> list[dict[str, Any]]:
    rows = raw.get("modelBreakdowns")
    if not isinstance(rows, list):
        return []
    return [row for row in rows if isinstance(row, dict)]


def _models_used(raw: dict[str, Any], breakdowns: list[dict[str, Any]]) -> tuple[str, ...]:
    names: list[str] = []
    used = raw.get("modelsUsed")
    if isinstance(used, list):
        names.extend(_as_str(name) for name in used)
    models = raw.get("models")
    if isinstance(models, dict):
        names.extend(_as_str(name) for name in models)
    elif isinstance(models, list):
        names.extend(_as_str(name) for name in models)
    names.extend(_as_str(row.get("modelName") or row.get("model")) for row in breakdowns)
    return tuple(dict.fromkeys(name for name in names if name))


def _first_int(raw: dict[str, Any], *keys: str) -> int | None:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return _int(value)
    return None


def _first_float(raw: dict[str, Any], *keys: str) -> float | None:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return _float(value)
    return None


def _int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return 0
    if isinstance(value, float):
        if not math.isfinite(value):
            logger.warning("Ignoring non-finite count %r", value)
            return 0
        return int(value)
    return 0


def _float(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return 0.0
    if isinstance(value, int | float):
        number = float(value)
        if not math.isfinite(number):
            logger.warning("Ignoring non-finite amount %r", value)
            return 0.0
        return number
    return 0.0


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""
