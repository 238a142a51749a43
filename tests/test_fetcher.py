"""Tests for running the upstream usage CLIs (with fake subprocesses)."""

from __future__ import annotations

import asyncio
import json
from datetime import date
from pathlib import Path

import pytest
from result import Err, Ok

from ccheat.data.fetcher import (
    build_argv,
    fetch_source,
    fetch_sources,
    load_document,
    parse_document,
)
from ccheat.models.heatmap import TrailingWindow
from ccheat.models.usage import UsageSource

WINDOW = TrailingWindow.ending(date(2025, 10, 15))


class FakeProcess:
    def __init__(self, stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0) -> None:
        self._stdout = stdout
        self._stderr = stderr
        self.returncode = returncode
        self.killed = False

    async def communicate(self) -> tuple[bytes, bytes]:
        return self._stdout, self._stderr

    def kill(self) -> None:
        self.killed = True

    async def wait(self) -> int:
        return self.returncode


class HangingProcess(FakeProcess):
    async def communicate(self) -> tuple[bytes, bytes]:
        await asyncio.sleep(10)
        return b"", b""


def _install_fake_exec(monkeypatch, processes: dict[str, FakeProcess]) -> list[tuple[str, ...]]:
    calls: list[tuple[str, ...]] = []

    async def fake_exec(*argv: str, stdout=None, stderr=None) -> FakeProcess:
        calls.append(argv)
        return processes[argv[0]]

    monkeypatch.setattr("ccheat.data.fetcher.asyncio.create_subprocess_exec", fake_exec)
    return calls


def test_build_argv_uses_installed_binary(monkeypatch) -> None:
    monkeypatch.setattr("ccheat.data.fetcher.shutil.which", lambda name: f"/usr/bin/{name}")
    argv = build_argv(UsageSource.CLAUDE, WINDOW, timezone="Asia/Tokyo")
    assert argv == [
        "/usr/bin/ccusage",
        "daily",
        "--json",
        "--by-model",
        "--since",
        "20250916",
        "--until",
        "20251015",
        "--timezone",
        "Asia/Tokyo",
    ]


def test_build_argv_falls_back_to_npx(monkeypatch) -> None:
    monkeypatch.setattr("ccheat.data.fetcher.shutil.which", lambda name: None)
    argv = build_argv(UsageSource.CODEX, WINDOW)
    assert argv[:3] == ["npx", "--yes", "@ccusage/codex@latest"]
    assert "--by-model" not in argv
    assert "--timezone" not in argv
    assert argv[-4:] == ["--since", "20250916", "--until", "20251015"]


@pytest.mark.asyncio
async def test_fetch_source_parses_stdout(monkeypatch) -> None:
    monkeypatch.setattr("ccheat.data.fetcher.shutil.which", lambda name: name)
    payload = {"daily": [{"date": "2025-10-01", "totalTokens": 5}]}
    calls = _install_fake_exec(monkeypatch, {"ccusage": FakeProcess(json.dumps(payload).encode())})

    result = await fetch_source(UsageSource.CLAUDE, WINDOW)

    assert isinstance(result, Ok)
    assert result.ok_value == payload
    assert calls[0][:3] == ("ccusage", "daily", "--json")


@pytest.mark.asyncio
async def test_fetch_source_reports_non_zero_exit(monkeypatch) -> None:
    monkeypatch.setattr("ccheat.data.fetcher.shutil.which", lambda name: name)
    _install_fake_exec(
        monkeypatch,
        {"ccusage": FakeProcess(stderr=b"warming up\nno data directory\n", returncode=2)},
    )
    result = await fetch_source(UsageSource.CLAUDE, WINDOW)
    assert isinstance(result, Err)
    assert "no data directory" in result.err_value


@pytest.mark.asyncio
async def test_fetch_source_reports_invalid_json(monkeypatch) -> None:
    monkeypatch.setattr("ccheat.data.fetcher.shutil.which", lambda name: name)
    _install_fake_exec(monkeypatch, {"ccusage": FakeProcess(b"not json")})
    result = await fetch_source(UsageSource.CLAUDE, WINDOW)
    assert isinstance(result, Err)
    assert "invalid JSON" in result.err_value


@pytest.mark.asyncio
async def test_fetch_source_missing_executable(monkeypatch) -> None:
    monkeypatch.setattr("ccheat.data.fetcher.shutil.which", lambda name: None)

    async def missing(*argv: str, stdout=None, stderr=None):  # type: ignore[no-untyped-def]
        raise FileNotFoundError(argv[0])

    monkeypatch.setattr("ccheat.data.fetcher.asyncio.create_subprocess_exec", missing)
    result = await fetch_source(UsageSource.CODEX, WINDOW)
    assert isinstance(result, Err)
    assert "could not start npx" in result.err_value


@pytest.mark.asyncio
async def test_fetch_source_times_out(monkeypatch) -> None:
    monkeypatch.setattr("ccheat.data.fetcher.shutil.which", lambda name: name)
    process = HangingProcess()
    _install_fake_exec(monkeypatch, {"ccusage": process})

    result = await fetch_source(UsageSource.CLAUDE, WINDOW, timeout=0.01)

    assert isinstance(result, Err)
    assert "timed out" in result.err_value
    assert process.killed is True


@pytest.mark.asyncio
async def test_fetch_sources_keeps_each_outcome(monkeypatch) -> None:
    monkeypatch.setattr("ccheat.data.fetcher.shutil.which", lambda name: name)
    _install_fake_exec(
        monkeypatch,
        {
            "ccusage": FakeProcess(b'{"daily": []}'),
            "ccusage-codex": FakeProcess(returncode=1),
        },
    )

    outcomes = await fetch_sources(
        [UsageSource.CLAUDE, UsageSource.CODEX, UsageSource.CLAUDE], WINDOW
    )

    assert list(outcomes) == [UsageSource.CLAUDE, UsageSource.CODEX]
    assert isinstance(outcomes[UsageSource.CLAUDE], Ok)
    assert isinstance(outcomes[UsageSource.CODEX], Err)


def test_load_document(claude_daily_path: Path, tmp_path: Path) -> None:
    loaded = load_document(claude_daily_path)
    assert isinstance(loaded, Ok)
    assert len(loaded.ok_value["daily"]) == 4

    missing = load_document(tmp_path / "missing.json")
    assert isinstance(missing, Err)
    assert "could not read" in missing.err_value


def test_parse_document_rejects_scalars() -> None:
    assert isinstance(parse_document("[]"), Ok)
    assert isinstance(parse_document("42"), Err)
