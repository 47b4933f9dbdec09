"""거리/소요 시간 표시 형식."""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_distance(distance_meters: float) -> str:
    """미터 거리를 소수 첫째 자리 km 문자열로 변환합니다. 예: `12.3 km`."""
    return f"{max(0.0, distance_meters) / 1000:.1f} km"


def format_duration_minutes(total_minutes: int) -> str:
    """분 단위 소요 시간을 표시 문자열로 변환합니다.

    60분 미만은 `45 minutes`, 이상은 `1 hour 30 min` / `2 hours` 형식입니다.
    """
    minutes_total = max(0, int(total_minutes))
    if minutes_total < 60:
        return f"{minutes_total} minute{'' if minutes_total == 1 else 's'}"

    hours, minutes = divmod(minutes_total, 60)
    result = f"{hours} hour{'s' if hours > 1 else ''}"
    if minutes > 0:
        result += f" {minutes} min"
    return result


def format_duration(duration_seconds: float) -> str:
    return format_duration_minutes(_round_half_up(max(0.0, duration_seconds) / 60))


def estimate_arrival(duration_seconds: float, now: datetime | None = None) -> datetime:
    """현재 시각에 소요 시간을 더한 도착 예정 시각."""
    start = now or datetime.now(timezone.utc)
    return start + timedelta(seconds=max(0.0, duration_seconds))
