"""Shared fixtures for ccheat tests."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any

import pytest

from ccheat.config import Config
from ccheat.models.usage import UsageSource

DATA_ROOT = Path(__file__).parent / "data"
CLAUDE_DAILY_PATH = DATA_ROOT / "claude_daily.json"
CODEX_DAILY_PATH = DATA_ROOT / "codex_daily.json"

TODAY = date(2025, 10, 15)


@pytest.fixture
def today() -> date:
    """Fixed 'today' the sample documents are written against."""
    return TODAY


@pytest.fixture
def claude_document() -> dict[str, Any]:
    return json.loads(CLAUDE_DAILY_PATH.read_text(encoding="utf-8"))


@pytest.fixture
def codex_document() -> dict[str, Any]:
    return json.loads(CODEX_DAILY_PATH.read_text(encoding="utf-8"))


@pytest.fixture
def claude_daily_path() -> Path:
    return CLAUDE_DAILY_PATH


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Config with a throwaway home directory."""
    return Config(home=tmp_path)


@pytest.fixture
def multi_source_config(tmp_path: Path) -> Config:
    return Config(sources=(UsageSource.CLAUDE, UsageSource.CODEX), home=tmp_path)
