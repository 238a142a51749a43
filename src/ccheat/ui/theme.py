"""Palette, terminal color capability, and display formatting utilities."""

from __future__ import annotations

import os
from collections.abc import Mapping
from enum import StrEnum
from typing import TextIO

from ccheat.models.heatmap import GridCell
from ccheat.models.usage import UsageSource

# ── Intensity palette: GitHub contribution greens, level 0..4 ──

PALETTE = ("#ebedf0", "#9be9a8", "#40c463", "#30a14e", "#216e39")

# No-color ladder, level 0..4, plus out-of-range padding.
GLYPHS = ("·", "░", "▒", "▓", "█")
PADDING_GLYPH = " "

COLORS = {
    "bg": "#ffffff",
    "text": "#24292f",
    "text_muted": "#656d76",
    "table_header_bg": "#f6f8fa",
    "table_header_border": "#d1d9e0",
    "table_row_alt": "#fafbfc",
    "table_row_border": "#e1e4e8",
    "billing_bg": "#fff3cd",
    "billing_border": "#ffeaa7",
    "billing_text": "#0969da",
    "error": "#cf222e",
}

FONT_FAMILY = "-apple-system,BlinkMacSystemFont,'Segoe UI',Helvetica,Arial,sans-serif"


class ColorMode(StrEnum):
    TRUECOLOR = "truecolor"
    ANSI256 = "ansi256"
    NONE = "none"


def detect_color_mode(
    stream: TextIO,
    environ: Mapping[str, str] | None = None,
    override: bool | None = None,
) -> ColorMode:
    """Decide once how the terminal renderer may color cells.

    ``override`` is the --color/--no-color flag; ``None`` means auto-detect.
    """
    env = os.environ if environ is None else environ
    if override is False:
        return ColorMode.NONE
    if override is None:
        if env.get("NO_COLOR"):
            return ColorMode.NONE
        is_tty = hasattr(stream, "isatty") and stream.isatty()
        if not env.get("FORCE_COLOR") and not is_tty:
            return ColorMode.NONE
        term = env.get("TERM", "")
        if term == "dumb" and not env.get("FORCE_COLOR"):
            return ColorMode.NONE
        if not (env.get("FORCE_COLOR") or env.get("COLORTERM") or term):
            return ColorMode.NONE

    colorterm = env.get("COLORTERM", "").lower()
    if colorterm in {"truecolor", "24bit"} or env.get("FORCE_COLOR") == "3":
        return ColorMode.TRUECOLOR
    if "256" in env.get("TERM", ""):
        return ColorMode.ANSI256
    return ColorMode.TRUECOLOR


def hex_to_rgb(value: str) -> tuple[int, int, int]:
    raw = value.lstrip("#")
    if len(raw) != 6:
        return (0, 0, 0)
    try:
        return (int(raw[0:2], 16), int(raw[2:4], 16), int(raw[4:6], 16))
    except ValueError:
        return (0, 0, 0)


def rgb_to_ansi256(red: int, green: int, blue: int) -> int:
    """Nearest xterm-256 color index (6x6x6 cube or grayscale ramp)."""
    if red == green == blue:
        if red < 8:
            return 16
        if red > 248:
            return 231
        return round((red - 8) / 247 * 24) + 232
    return (
        16
        + 36 * round(red / 255 * 5)
        + 6 * round(green / 255 * 5)
        + round(blue / 255 * 5)
    )


def paint(hex_color: str, text: str, mode: ColorMode) -> str:
    """Render `text` on a background color, or as-is without color support."""
    match mode:
        case ColorMode.TRUECOLOR:
            red, green, blue = hex_to_rgb(hex_color)
            return f"\x1b[48;2;{red};{green};{blue}m{text}\x1b[0m"
        case ColorMode.ANSI256:
            index = rgb_to_ansi256(*hex_to_rgb(hex_color))
            return f"\x1b[48;5;{index}m{text}\x1b[0m"
        case _:
            return text


def format_number(value: float) -> str:
    """Grouped thousands; integers without decimals."""
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"


def format_cost(amount: float) -> str:
    """Format a dollar amount with four decimals."""
    return f"${amount:.4f}"


def source_label(source: UsageSource) -> str:
    """Map source ID to display label."""
    match source:
        case UsageSource.CODEX:
            return "Codex"
        case _:
            return "Claude Code"


def cell_color(cell: GridCell | None) -> str:
    """Palette color for a cell; padding and unset cells share the empty slot."""
    if cell is None or not cell.in_range:
        return PALETTE[0]
    return PALETTE[cell.level]


def cell_glyph(cell: GridCell | None) -> str:
    if cell is None or not cell.in_range:
        return PADDING_GLYPH
    return GLYPHS[cell.level]
