from __future__ import annotations

from sigma_arena.core.config import get_settings

settings = get_settings()


def _clamp_hour(value: int) -> int:
    return max(0, min(23, int(value)))


def _clamp_minute(value: int) -> int:
    return max(0, min(59, int(value)))


def _clamp_lookahead(value: int) -> int:
    return max(0, min(60, int(value)))


DAILY_SLOTS_CHECK_HOUR = _clamp_hour(settings.daily_slots_check_hour)
DAILY_SLOTS_CHECK_MINUTE = _clamp_minute(settings.daily_slots_check_minute)
DAILY_SLOTS_LOOKAHEAD_DAYS = _clamp_lookahead(settings.daily_slots_lookahead_days)

__all__ = [
    "DAILY_SLOTS_CHECK_HOUR",
    "DAILY_SLOTS_CHECK_MINUTE",
    "DAILY_SLOTS_LOOKAHEAD_DAYS",
]
