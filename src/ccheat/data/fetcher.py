"""Run the upstream usage CLIs and parse their JSON output."""

from __future__ import annotations

import asyncio
import json
import logging
import shutil
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from result import Err, Ok, Result

from ccheat.models.heatmap import TrailingWindow
from ccheat.models.usage import UsageSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceCommand:
    """How to invoke one upstream CLI."""

    binary: str
    package: str
    extra_args: tuple[str, ...] = ()


COMMANDS: dict[UsageSource, SourceCommand] = {
    UsageSource.CLAUDE: SourceCommand("ccusage", "ccusage", ("--by-model",)),
    UsageSource.CODEX: SourceCommand("ccusage-codex", "@ccusage/codex"),
}


def build_argv(
    source: UsageSource,
    window: TrailingWindow,
    timezone: str | None = None,
) -> list[str]:
    """Command line for a source; `npx` fallback when the binary is not installed."""
    command = COMMANDS[source]
    args = [
        "daily",
        "--json",
        *command.extra_args,
        "--since",
        f"{window.start:%Y%m%d}",
        "--until",
        f"{window.end:%Y%m%d}",
    ]
    if timezone:
        args.extend(["--timezone", timezone])

    binary = shutil.which(command.binary)
    if binary:
        return [binary, *args]
    return ["npx", "--yes", f"{command.package}@latest", *args]


async def fetch_source(
    source: UsageSource,
    window: TrailingWindow,
    *,
    timezone: str | None = None,
    timeout: float = 120.0,
) -> Result[Any, str]:
    """Run one source's CLI and return its parsed JSON document."""
    argv = build_argv(source, window, timezone)
    logger.info("Fetching %s usage: %s", source, " ".join(argv))
    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        return Err(f"could not start {argv[0]}: {exc}")

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except TimeoutError:
        process.kill()
        await process.wait()
        return Err(f"{argv[0]} timed out after {timeout:g}s")

    if process.returncode != 0:
        detail = stderr.decode("utf-8", errors="replace").strip().splitlines()
        reason = detail[-1] if detail else f"exit status {process.returncode}"
        return Err(f"{argv[0]} failed: {reason}")

    return parse_document(stdout.decode("utf-8", errors="replace"))


async def fetch_sources(
    sources: Iterable[UsageSource],
    window: TrailingWindow,
    *,
    timezone: str | None = None,
    timeout: float = 120.0,
) -> dict[UsageSource, Result[Any, str]]:
    """Fetch several sources concurrently, keeping each outcome."""
    ordered = list(dict.fromkeys(sources))
    outcomes = await asyncio.gather(
        *(fetch_source(source, window, timezone=timezone, timeout=timeout) for source in ordered)
    )
    return dict(zip(ordered, outcomes, strict=True))


def load_document(path: Path) -> Result[Any, str]:
    """Read an exported `daily --json` document from disk."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        return Err(f"could not read {path}: {exc}")
    return parse_document(text)


def parse_document(text: str) -> Result[Any, str]:
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        return Err(f"invalid JSON output: {exc}")
    if not isinstance(document, dict | list):
        return Err("unexpected JSON document shape")
    return Ok(document)
