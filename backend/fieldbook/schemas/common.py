# backend/fieldbook/schemas/common.py

import re
from typing import Annotated

from pydantic import AfterValidator

TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$|^24:00$")


def validate_time_str(value: str | None) -> str | None:
    """Accept "HH:MM" (and "HH:MM:SS", truncated to minutes)."""
    if value is None:
        return value
    value = value.strip()
    if len(value) == 8 and value.count(":") == 2:
        value = value[:5]
    if not TIME_RE.match(value):
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    return value


def validate_weekdays(value: list[int] | None) -> list[int] | None:
    """0 = Sunday ... 6 = Saturday, deduplicated and sorted."""
    if value is None:
        return value
    for day in value:
        if not 0 <= day <= 6:
            raise ValueError(f"Invalid weekday {day}, expected 0-6")
    return sorted(set(value))


TimeStr = Annotated[str, AfterValidator(validate_time_str)]
Weekdays = Annotated[list[int], AfterValidator(validate_weekdays)]


def check_opening_hours(opening: str | None, closing: str | None) -> None:
    """Closing must come after opening; both are validated "HH:MM" strings."""
    if opening and closing and closing <= opening:
        raise ValueError(f"closing time {closing} must be after opening time {opening}")
