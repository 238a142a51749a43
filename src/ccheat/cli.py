"""Typer CLI for ccheat: render the 30-day usage heatmap."""

from __future__ import annotations

import asyncio
import logging
import sys
from datetime import date
from enum import StrEnum
from pathlib import Path
from typing import Annotated, Any

import typer
from result import Err, Result

from ccheat.config import Config
from ccheat.models.usage import Metric, UsageSource, WeekStart

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="ccheat",
    help="Last-30-days GitHub-style heatmap for Claude Code usage.",
    invoke_without_command=True,
    add_completion=False,
)

AUTO_SVG = {"auto", "-"}


class SourceChoice(StrEnum):
    CLAUDE = "claude"
    CODEX = "codex"
    ALL = "all"

    def sources(self) -> tuple[UsageSource, ...]:
        match self:
            case SourceChoice.ALL:
                return (UsageSource.CLAUDE, UsageSource.CODEX)
            case _:
                return (UsageSource(self.value),)


@app.callback(invoke_without_command=True)
def render(
    metric: Annotated[
        Metric, typer.Option("--metric", help="Value plotted per day", case_sensitive=False)
    ] = Metric.TOKENS,
    week_start: Annotated[
        WeekStart,
        typer.Option("--week-start", help="First day of each week column", case_sensitive=False),
    ] = WeekStart.MON,
    source: Annotated[
        SourceChoice,
        typer.Option("--source", help="Usage source(s) to include", case_sensitive=False),
    ] = SourceChoice.CLAUDE,
    timezone: Annotated[
        str | None,
        typer.Option("--timezone", help="IANA zone used for 'today' and passed upstream"),
    ] = None,
    color: Annotated[
        bool | None,
        typer.Option("--color/--no-color", help="Force or disable terminal colors"),
    ] = None,
    svg: Annotated[
        str | None,
        typer.Option("--svg", help="Also write an SVG to this path ('auto' for the Desktop)"),
    ] = None,
    input_path: Annotated[
        Path | None,
        typer.Option("--input", help="Read an exported 'daily --json' document instead"),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log progress")] = False,
) -> None:
    """Render the heatmap for the trailing 30 days."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    sources = source.sources()
    if input_path is not None and len(sources) > 1:
        raise typer.BadParameter("--input reads a single source", param_hint="--source")

    try:
        config = Config(
            metric=metric,
            week_start=week_start,
            sources=sources,
            timezone=timezone,
            color=color,
            svg_path=None if svg is None or svg in AUTO_SVG else Path(svg),
            input_path=input_path,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--timezone") from exc

    exit_code = asyncio.run(_do_render(config, write_svg=svg is not None))
    if exit_code:
        raise typer.Exit(exit_code)


async def _load_documents(config: Config, today: date) -> dict[UsageSource, Result[Any, str]]:
    from ccheat.data.fetcher import fetch_sources, load_document
    from ccheat.models.heatmap import TrailingWindow

    if config.input_path is not None:
        return {config.sources[0]: load_document(config.input_path)}

    window = TrailingWindow.ending(today, config.days)
    return await fetch_sources(
        config.sources,
        window,
        timezone=config.timezone,
        timeout=config.fetch_timeout,
    )


async def _do_render(config: Config, *, write_svg: bool = False) -> int:
    """Fetch, build and print; returns the process exit code."""
    from ccheat.services.heatmap_service import HeatmapService
    from ccheat.ui.svg import render_svg
    from ccheat.ui.svg import write_svg as write_svg_file
    from ccheat.ui.terminal import render_report
    from ccheat.ui.theme import detect_color_mode

    today = config.today()
    logger.info("Rendering %s for %s ending %s", config.metric, ", ".join(config.sources), today)
    documents = await _load_documents(config, today)

    result = HeatmapService(config).build(documents, today)
    if isinstance(result, Err):
        typer.echo(f"[ccheat] Failed to read usage data from {result.err_value}", err=True)
        return 1
    report = result.ok_value

    color_mode = detect_color_mode(sys.stdout, override=config.color)
    for line in render_report(report, color_mode):
        typer.echo(line)

    if not write_svg:
        return 0

    target = config.svg_path or config.default_svg_path(today)
    written = write_svg_file(target, render_svg(report))
    if isinstance(written, Err):
        typer.echo(f"[ccheat] Failed to write SVG: {written.err_value}", err=True)
        return 1
    typer.echo(f"SVG written to {written.ok_value}")
    return 0
