# backend/fieldbook/services/slots/config.py
"""
Booking configuration for slot generation and availability.
"""

from dataclasses import dataclass
from datetime import date
from functools import lru_cache


SLOT_DURATION = 60  # minutes

ALL_WEEKDAYS = (0, 1, 2, 3, 4, 5, 6)  # 0 = Sunday


@dataclass(frozen=True)
class BookingConfig:
    """
    Configuration for the slots system.

    Attributes:
        slot_duration_minutes: Length of one grid slot
        lookahead_buffer_minutes: Same-day slots starting before now + buffer are hidden
        insert_batch_size: Rows per insert when materializing a grid
        limited_threshold: Share of free slots at or below which a day is "limited"
        horizon_days: How many days ahead the calendar shows
        default_opening_time: Used when a venue has no stored opening time
        default_closing_time: Used when a venue has no stored closing time
        cache_ttl_seconds: Redis TTL for cached grids
    """
    slot_duration_minutes: int = SLOT_DURATION
    lookahead_buffer_minutes: int = 30
    insert_batch_size: int = 100
    limited_threshold: float = 0.3
    horizon_days: int = 60
    default_opening_time: str = "06:00"
    default_closing_time: str = "23:00"
    cache_ttl_seconds: int = 86400  # 24 hours

    def __post_init__(self):
        """Validate configuration."""
        if self.slot_duration_minutes <= 0 or (24 * 60) % self.slot_duration_minutes:
            raise ValueError(
                f"slot_duration_minutes must divide a day evenly, got {self.slot_duration_minutes}"
            )
        if self.insert_batch_size <= 0:
            raise ValueError(f"insert_batch_size must be positive, got {self.insert_batch_size}")
        if not 0 <= self.limited_threshold <= 1:
            raise ValueError(f"limited_threshold must be within [0, 1], got {self.limited_threshold}")


@lru_cache
def get_booking_config() -> BookingConfig:
    """Get booking configuration (singleton)."""
    return BookingConfig()


# ── Time helpers ─────────────────────────────────────────────────────────


def time_str_to_minutes(value: str) -> int:
    """
    Convert "HH:MM" (or "HH:MM:SS") to minutes since midnight.

    "24:00" is accepted as the end of the day.
    Raises ValueError on malformed input.
    """
    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time string: {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    if not (0 <= hour <= 24 and 0 <= minute < 60) or (hour == 24 and minute):
        raise ValueError(f"Invalid time string: {value!r}")
    return hour * 60 + minute


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_hour(value: str) -> int:
    """Hour component of "HH:MM"; the grid is hour-granular."""
    return int(value.strip().split(":")[0])


def day_of_week(target_date: date) -> int:
    """Weekday number as stored in the grid: 0 = Sunday ... 6 = Saturday."""
    return (target_date.weekday() + 1) % 7
