"""Fixed-width text rendering of a HeatmapReport."""

from __future__ import annotations

from ccheat.models.heatmap import HeatmapReport
from ccheat.models.usage import DailyUsageRecord
from ccheat.ui.theme import (
    GLYPHS,
    PALETTE,
    ColorMode,
    cell_color,
    cell_glyph,
    format_cost,
    format_number,
    paint,
    source_label,
)

CELL_WIDTH = 3
LABEL_WIDTH = 4
BILLING_MIN_WIDTH = 90

TABLE_HEADERS = ("Date", "Models", "Input", "Output", "Total", "Cost (USD)")
_NUMERIC_FROM = 2

_BORDERS = {
    "top": ("┌", "┬", "┐"),
    "mid": ("├", "┼", "┤"),
    "bot": ("└", "┴", "┘"),
}


def render_report(report: HeatmapReport, color_mode: ColorMode) -> list[str]:
    """All text output for one run, line by line."""
    lines = render_heatmap_lines(report, color_mode)
    lines.extend(render_failed_sources(report))
    lines.extend(render_top_days(report))
    lines.extend(render_legend(report, color_mode))
    lines.extend(render_billing(report))
    return lines


def sources_label(report: HeatmapReport) -> str:
    loaded = [source_label(section.source) for section in report.sources if not section.failed]
    return " + ".join(loaded) if loaded else "Claude Code"


def report_title(report: HeatmapReport) -> str:
    return f"{sources_label(report)} usage - last {report.window.length} days ({report.metric})"


def month_line(report: HeatmapReport) -> str:
    """Month labels aligned to their week columns."""
    grid = report.grid
    chars = [" "] * (LABEL_WIDTH + grid.weeks * CELL_WIDTH)
    next_free = 0
    for month in grid.month_labels:
        position = max(LABEL_WIDTH + month.column * CELL_WIDTH, next_free)
        if position + len(month.label) > len(chars):
            chars.extend(" " * (position + len(month.label) - len(chars)))
        chars[position : position + len(month.label)] = month.label
        next_free = position + len(month.label) + 1
    return "".join(chars).rstrip()


def render_cell_row(report: HeatmapReport, row: int, color_mode: ColorMode) -> str:
    grid = report.grid
    parts = [grid.day_labels()[row].ljust(LABEL_WIDTH)]
    for column in range(grid.weeks):
        cell = grid.cell(row, column)
        if color_mode is ColorMode.NONE:
            parts.append(cell_glyph(cell).ljust(CELL_WIDTH))
        else:
            parts.append(paint(cell_color(cell), "  ", color_mode) + " ")
    return "".join(parts).rstrip()


def render_heatmap_lines(report: HeatmapReport, color_mode: ColorMode) -> list[str]:
    lines = ["", report_title(report), "", month_line(report)]
    lines.extend(render_cell_row(report, row, color_mode) for row in range(7))
    return lines


def render_failed_sources(report: HeatmapReport) -> list[str]:
    return [
        f"[{source_label(section.source)}] failed to load usage data: {section.error}"
        for section in report.failed_sources
    ]


def top_day_row(record: DailyUsageRecord) -> tuple[str, ...]:
    models = ", ".join(record.models_used) if record.models_used else "N/A"
    return (
        record.date.isoformat(),
        models,
        format_number(record.input_tokens),
        format_number(record.output_tokens),
        format_number(record.effective_total_tokens),
        format_cost(record.total_cost),
    )


def render_top_days(report: HeatmapReport) -> list[str]:
    """Box-drawn table of the busiest days, empty when nothing was used."""
    if not report.top_days:
        return []

    rows = [top_day_row(record) for record in report.top_days]
    widths = [
        max(len(header), *(len(row[index]) for row in rows))
        for index, header in enumerate(TABLE_HEADERS)
    ]

    def border(kind: str) -> str:
        start, sep, end = _BORDERS[kind]
        return start + sep.join("─" * (width + 2) for width in widths) + end

    def body(cells: tuple[str, ...]) -> str:
        padded = [
            cell.rjust(widths[index]) if index >= _NUMERIC_FROM else cell.ljust(widths[index])
            for index, cell in enumerate(cells)
        ]
        return "│ " + " │ ".join(padded) + " │"

    lines = ["", f"Top {len(rows)} Days by {report.metric}:"]
    lines.append(border("top"))
    lines.append(body(TABLE_HEADERS))
    lines.append(border("mid"))
    lines.extend(body(row) for row in rows)
    lines.append(border("bot"))
    return lines


def render_legend(report: HeatmapReport, color_mode: ColorMode) -> list[str]:
    if color_mode is ColorMode.NONE:
        swatches = " ".join(glyph * 2 for glyph in GLYPHS)
    else:
        swatches = " ".join(paint(color, "  ", color_mode) for color in PALETTE)
    steps = " · ".join(format_number(value) for value in report.thresholds.values)
    return ["", f"Legend: {swatches}", f"        Less · {steps} · More", ""]


def billing_text(report: HeatmapReport) -> str:
    return (
        f"You have cumulatively used {format_cost(report.billing_total)} USD "
        f"of {sources_label(report)} in this billing cycle."
    )


def render_billing(report: HeatmapReport) -> list[str]:
    """The billing sentence centered in a box."""
    text = billing_text(report)
    width = max(len(text) + 10, BILLING_MIN_WIDTH)
    inner = width - 4
    left = (inner - len(text)) // 2
    right = inner - len(text) - left
    return [
        "┌" + "─" * (width - 2) + "┐",
        "│ " + " " * left + text + " " * right + " │",
        "└" + "─" * (width - 2) + "┘",
        "",
    ]
