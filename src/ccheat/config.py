"""Configuration for ccheat."""

from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ccheat.models.usage import Metric, UsageSource, WeekStart

DAYS = 30


@dataclass(frozen=True)
class Config:
    """Application configuration."""

    metric: Metric = Metric.TOKENS
    week_start: WeekStart = WeekStart.MON
    sources: tuple[UsageSource, ...] = (UsageSource.CLAUDE,)
    timezone: str | None = None
    color: bool | None = None
    svg_path: Path | None = None
    input_path: Path | None = None
    days: int = DAYS
    fetch_timeout: float = 120.0
    home: Path = field(default_factory=Path.home)

    def __post_init__(self) -> None:
        if self.timezone is not None:
            try:
                ZoneInfo(self.timezone)
            except (ZoneInfoNotFoundError, ValueError) as exc:
                raise ValueError(f"Unknown timezone: {self.timezone}") from exc

    @property
    def multi_source(self) -> bool:
        return len(self.sources) > 1

    def today(self, now: datetime | None = None) -> date:
        """Calendar date of 'today' in the configured zone (local zone when unset)."""
        if self.timezone is not None:
            zone = ZoneInfo(self.timezone)
            current = now.astimezone(zone) if now is not None else datetime.now(zone)
        else:
            current = now.astimezone() if now is not None else datetime.now().astimezone()
        return current.date()

    def default_svg_path(self, today: date) -> Path:
        """`~/Desktop/ccheat-YYYYMMDD.svg`, or the home directory without a Desktop."""
        desktop = self.home / "Desktop"
        base = desktop if desktop.is_dir() else self.home
        return base / f"ccheat-{today:%Y%m%d}.svg"
