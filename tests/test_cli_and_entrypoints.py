"""CLI and entrypoint tests."""

from __future__ import annotations

import runpy
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

import pytest
from result import Err, Ok
from typer.testing import CliRunner

from ccheat.cli import _do_render, app
from ccheat.config import Config
from ccheat.models.usage import Metric, UsageSource, WeekStart

TODAY = date(2025, 10, 15)


@pytest.fixture
def fixed_today(monkeypatch) -> None:
    monkeypatch.setattr(Config, "today", lambda self, now=None: TODAY)


def test_cli_renders_from_input_file(fixed_today, claude_daily_path: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--input", str(claude_daily_path), "--no-color"])
    assert result.exit_code == 0, result.output
    assert "Claude Code usage - last 30 days (tokens)" in result.output
    assert "Top 3 Days by tokens:" in result.output
    assert "Less · 1,000 · 1,500 · 20,750 · 40,000 · More" in result.output
    assert "\x1b[" not in result.output


def test_cli_passes_options_to_config(monkeypatch) -> None:
    captured: dict[str, Any] = {}

    async def fake_do_render(config: Config, *, write_svg: bool = False) -> int:
        captured["config"] = config
        captured["write_svg"] = write_svg
        return 0

    monkeypatch.setattr("ccheat.cli._do_render", fake_do_render)
    runner = CliRunner()
    result = runner.invoke(
        app,
        [
            "--metric",
            "cost",
            "--week-start",
            "sun",
            "--source",
            "all",
            "--timezone",
            "Europe/Berlin",
            "--svg",
            "auto",
        ],
    )
    assert result.exit_code == 0, result.output
    config: Config = captured["config"]
    assert config.metric is Metric.COST
    assert config.week_start is WeekStart.SUN
    assert config.sources == (UsageSource.CLAUDE, UsageSource.CODEX)
    assert config.timezone == "Europe/Berlin"
    assert config.svg_path is None
    assert captured["write_svg"] is True


def test_cli_rejects_unknown_timezone() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--timezone", "Mars/Olympus_Mons"])
    assert result.exit_code == 2


def test_cli_rejects_input_with_multiple_sources(claude_daily_path: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--input", str(claude_daily_path), "--source", "all"])
    assert result.exit_code == 2


def test_cli_reports_fetch_failure(monkeypatch, fixed_today) -> None:
    async def fake_fetch_sources(sources, window, *, timezone=None, timeout=120.0):
        return {source: Err("ccusage failed: boom") for source in sources}

    monkeypatch.setattr("ccheat.data.fetcher.fetch_sources", fake_fetch_sources)
    runner = CliRunner()
    result = runner.invoke(app, [])
    assert result.exit_code == 1
    assert "[ccheat] Failed to read usage data from claude: ccusage failed: boom" in result.output


@pytest.mark.asyncio
async def test_do_render_fetches_window_and_writes_svg(
    monkeypatch, tmp_path: Path, claude_document: dict[str, Any], capsys
) -> None:
    called: dict[str, Any] = {}

    async def fake_fetch_sources(sources, window, *, timezone=None, timeout=120.0):
        called["window"] = window
        called["timezone"] = timezone
        return {source: Ok(claude_document) for source in sources}

    monkeypatch.setattr("ccheat.data.fetcher.fetch_sources", fake_fetch_sources)
    target = tmp_path / "out" / "heat.svg"
    config = Config(timezone="UTC", svg_path=target, color=False, home=tmp_path)
    monkeypatch.setattr(Config, "today", lambda self, now=None: TODAY)

    exit_code = await _do_render(config, write_svg=True)

    assert exit_code == 0
    assert called["window"].start == date(2025, 9, 16)
    assert called["window"].end == TODAY
    assert called["timezone"] == "UTC"
    assert target.read_text(encoding="utf-8").startswith("<svg")
    assert f"SVG written to {target}" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_do_render_svg_failure_keeps_text_output(
    monkeypatch, tmp_path: Path, claude_daily_path: Path, capsys
) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")
    config = Config(
        input_path=claude_daily_path,
        svg_path=blocker / "heat.svg",
        color=False,
        home=tmp_path,
    )
    monkeypatch.setattr(Config, "today", lambda self, now=None: TODAY)

    exit_code = await _do_render(config, write_svg=True)

    captured = capsys.readouterr()
    assert exit_code == 1
    assert "Top 3 Days by tokens:" in captured.out
    assert "[ccheat] Failed to write SVG" in captured.err


def test_config_today_respects_timezone(tmp_path: Path) -> None:
    instant = datetime(2025, 10, 15, 23, 30, tzinfo=UTC)
    assert Config(timezone="UTC", home=tmp_path).today(instant) == date(2025, 10, 15)
    assert Config(timezone="Asia/Tokyo", home=tmp_path).today(instant) == date(2025, 10, 16)
    assert Config(timezone="America/Los_Angeles", home=tmp_path).today(instant) == date(
        2025, 10, 15
    )


def test_config_rejects_unknown_timezone() -> None:
    with pytest.raises(ValueError):
        Config(timezone="Not/AZone")


def test_default_svg_path_prefers_desktop(tmp_path: Path) -> None:
    config = Config(home=tmp_path)
    assert config.default_svg_path(TODAY) == tmp_path / "ccheat-20251015.svg"
    (tmp_path / "Desktop").mkdir()
    assert config.default_svg_path(TODAY) == tmp_path / "Desktop" / "ccheat-20251015.svg"


def test_python_module_entrypoint_invokes_cli_app(monkeypatch) -> None:
    called = {"count": 0}

    def fake_app() -> None:
        called["count"] += 1

    monkeypatch.setattr("ccheat.cli.app", fake_app)
    runpy.run_module("ccheat.__main__", run_name="__main__")
    assert called["count"] == 1
