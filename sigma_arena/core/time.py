from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

from sigma_arena.core.config import get_settings


def game_local_date(now_utc: datetime, *, timezone_name: str | None = None) -> date:
    """Converts a UTC datetime to the game calendar date."""
    resolved = timezone_name or get_settings().game_timezone
    return now_utc.astimezone(ZoneInfo(resolved)).date()
