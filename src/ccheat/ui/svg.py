"""Standalone SVG rendering of a HeatmapReport."""

from __future__ import annotations

import logging
from html import escape
from pathlib import Path

from result import Err, Ok, Result

from ccheat.models.heatmap import HeatmapReport
from ccheat.ui.terminal import billing_text, sources_label, top_day_row
from ccheat.ui.theme import COLORS, FONT_FAMILY, PALETTE, cell_color, format_number

logger = logging.getLogger(__name__)

CELL = 12
GAP = 3
TOP = 60
TABLE_WIDTH = 450
TABLE_GAP = 60
MIN_WIDTH = 900
TABLE_HEADERS = ("Date", "Models", "Input", "Output", "Total", "Cost")
TABLE_COLUMNS = (70, 160, 50, 50, 60, 60)
MODELS_MAX_CHARS = 25


def cell_origin(row: int, column: int, left: float) -> tuple[float, float]:
    """Top-left corner of the cell at (row, column)."""
    return left + column * (CELL + GAP), TOP + row * (CELL + GAP)


def _fmt(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


def _data_value(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else repr(float(value))


def _style() -> str:
    font = FONT_FAMILY
    c = COLORS
    return f"""<style>
.title{{font:16px {font};font-weight:600;fill:{c["text"]}}}
.small{{font:10px {font};fill:{c["text_muted"]}}}
.label{{font:9px {font};fill:{c["text_muted"]}}}
.legend-label{{font:11px {font};fill:{c["text_muted"]}}}
.table-header{{font:11px {font};font-weight:600;fill:{c["text"]}}}
.table-cell{{font:10px {font};fill:{c["text"]}}}
.billing{{font:12px {font};font-weight:600;fill:{c["billing_text"]}}}
.error{{font:11px {font};fill:{c["error"]}}}
</style>"""


def _truncate_models(models: str) -> str:
    if len(models) > MODELS_MAX_CHARS:
        return models[: MODELS_MAX_CHARS - 3] + "..."
    return models


def render_svg(report: HeatmapReport) -> str:
    """Heatmap, legend, top-days table and billing summary as one SVG document."""
    grid = report.grid
    window = report.window
    metric = str(report.metric)

    grid_width = grid.weeks * (CELL + GAP) - GAP
    grid_height = 7 * (CELL + GAP) - GAP

    table_rows = [top_day_row(record) for record in report.top_days]
    table_height = max(len(table_rows) * 25 + 60, 200)

    content_width = grid_width + TABLE_GAP + TABLE_WIDTH
    width = max(content_width + 120, MIN_WIDTH)
    height = max(TOP + grid_height + 200, TOP + table_height + 120)
    heatmap_left = (width - content_width) / 2
    table_left = heatmap_left + grid_width + TABLE_GAP

    title = f"ccheat - {sources_label(report)} Usage (Last {window.length} Days)"
    parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{_fmt(width)}" height="{_fmt(height)}" '
        f'viewBox="0 0 {_fmt(width)} {_fmt(height)}" role="img" '
        f'aria-label="{escape(title)}">',
        f'<rect width="100%" height="100%" fill="{COLORS["bg"]}"/>',
        _style(),
        f'<text x="{_fmt(width / 2)}" y="25" class="title" text-anchor="middle">'
        f"{escape(title)}</text>",
    ]

    for month in grid.month_labels:
        x, _ = cell_origin(0, month.column, heatmap_left)
        parts.append(
            f'<text x="{_fmt(x)}" y="{TOP - 10}" class="small">{escape(month.label)}</text>'
        )

    for row, column, cell in grid.cells():
        x, y = cell_origin(row, column, heatmap_left)
        rect = (
            f'<rect x="{_fmt(x)}" y="{_fmt(y)}" width="{CELL}" height="{CELL}" '
            f'rx="2" ry="2" fill="{cell_color(cell)}"'
        )
        if cell is None:
            parts.append(rect + "/>")
        elif cell.in_range:
            value = cell.value or 0
            parts.append(
                f'{rect} data-date="{cell.date.isoformat()}" data-value="{_data_value(value)}">'
                f"<title>{cell.date.isoformat()}: {format_number(value)} {escape(metric)}</title>"
                "</rect>"
            )
        else:
            parts.append(f'{rect} data-date="{cell.date.isoformat()}"/>')

    for index, label in enumerate(grid.day_labels()):
        if index % 2:
            continue
        y = TOP + index * (CELL + GAP) + CELL / 1.5
        parts.append(
            f'<text x="{_fmt(heatmap_left - 10)}" y="{_fmt(y)}" class="label" '
            f'text-anchor="end">{label}</text>'
        )

    legend_y = TOP + grid_height + 20
    parts.extend(_legend(heatmap_left + grid_width / 2, legend_y))
    parts.extend(_table(report, table_left, table_rows))

    table_bottom = TOP + 20 + len(table_rows) * 22 + 40
    billing_y = max(legend_y + 60, table_bottom)
    failed = report.failed_sources
    for offset, section in enumerate(failed):
        parts.append(
            f'<text x="{_fmt(heatmap_left)}" y="{_fmt(legend_y + 45 + offset * 14)}" '
            f'class="error">{escape(f"{section.source}: failed to load ({section.error})")}</text>'
        )
    billing_y += len(failed) * 14

    text = billing_text(report)
    box_width = max(len(text) * 7 + 20, 400)
    parts.append(
        f'<rect x="{_fmt(width / 2 - box_width / 2)}" y="{_fmt(billing_y - 15)}" '
        f'width="{_fmt(box_width)}" height="40" fill="{COLORS["billing_bg"]}" '
        f'stroke="{COLORS["billing_border"]}" stroke-width="2" rx="8"/>'
    )
    parts.append(
        f'<text x="{_fmt(width / 2)}" y="{_fmt(billing_y + 5)}" class="billing" '
        f'text-anchor="middle">{escape(text)}</text>'
    )

    thresholds = ", ".join(format_number(value) for value in report.thresholds.values)
    footer = (
        f"Date range: {window.start.isoformat()} to {window.end.isoformat()} | "
        f"Metric: {metric} | Thresholds: {thresholds}"
    )
    parts.append(
        f'<text x="{_fmt(width / 2)}" y="{_fmt(billing_y + 60)}" class="label" '
        f'text-anchor="middle">{escape(footer)}</text>'
    )
    parts.append("</svg>")
    return "\n".join(parts) + "\n"


def _legend(center_x: float, legend_y: float) -> list[str]:
    legend_width = 35 + 5 * (CELL + 2) + 30
    start_x = center_x - legend_width / 2
    parts = [
        f'<text x="{_fmt(center_x)}" y="{_fmt(legend_y)}" class="legend-label" '
        'text-anchor="middle">Contributions</text>',
        f'<text x="{_fmt(start_x)}" y="{_fmt(legend_y + 25)}" class="label">Less</text>',
    ]
    for level, color in enumerate(PALETTE):
        x = start_x + 35 + level * (CELL + 2)
        parts.append(
            f'<rect x="{_fmt(x)}" y="{_fmt(legend_y + 13)}" width="{CELL}" height="{CELL}" '
            f'rx="2" ry="2" fill="{color}"/>'
        )
    more_x = start_x + 35 + 5 * (CELL + 2) + 8
    parts.append(f'<text x="{_fmt(more_x)}" y="{_fmt(legend_y + 25)}" class="label">More</text>')
    return parts


def _table(report: HeatmapReport, left: float, rows: list[tuple[str, ...]]) -> list[str]:
    total_width = sum(TABLE_COLUMNS)
    parts = [
        f'<text x="{_fmt(left)}" y="{TOP - 10}" class="legend-label">'
        f"Top {len(rows)} Days by {escape(str(report.metric))}</text>",
        f'<rect x="{_fmt(left - 5)}" y="{TOP}" width="{total_width + 10}" height="20" '
        f'fill="{COLORS["table_header_bg"]}" stroke="{COLORS["table_header_border"]}" '
        'stroke-width="1" rx="3"/>',
    ]

    x = left
    for header, column_width in zip(TABLE_HEADERS, TABLE_COLUMNS, strict=True):
        parts.append(
            f'<text x="{_fmt(x + column_width / 2)}" y="{TOP + 14}" class="table-header" '
            f'text-anchor="middle">{header}</text>'
        )
        x += column_width

    for index, row in enumerate(rows):
        row_y = TOP + 20 + (index + 1) * 22
        if index % 2 == 0:
            parts.append(
                f'<rect x="{_fmt(left - 5)}" y="{row_y - 11}" width="{total_width + 10}" '
                f'height="22" fill="{COLORS["table_row_alt"]}"/>'
            )
        parts.append(
            f'<rect x="{_fmt(left - 5)}" y="{row_y - 11}" width="{total_width + 10}" '
            f'height="22" fill="none" stroke="{COLORS["table_row_border"]}" stroke-width="1"/>'
        )
        x = left
        cells = (row[0], _truncate_models(row[1]), *row[2:])
        for column, (text, column_width) in enumerate(zip(cells, TABLE_COLUMNS, strict=True)):
            numeric = column >= 2
            anchor = "end" if numeric else "start"
            text_x = x + column_width - 5 if numeric else x + 5
            parts.append(
                f'<text x="{_fmt(text_x)}" y="{row_y + 3}" class="table-cell" '
                f'text-anchor="{anchor}">{escape(text)}</text>'
            )
            x += column_width
    return parts


def write_svg(path: Path, svg: str) -> Result[Path, str]:
    """Write the document, creating parent directories."""
    target = path.expanduser()
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(svg, encoding="utf-8")
    except OSError as exc:
        logger.warning("Failed to write SVG to %s", target, exc_info=True)
        return Err(f"could not write {target}: {exc}")
    return Ok(target)
