# backend/fieldbook/services/slots/types.py
"""
Value types shared by the slots components.

OverrideVerdict is a tagged union: each variant carries only the payload
meaningful for its override type.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union


@dataclass(frozen=True)
class TimeSlotEntry:
    """One grid slot as returned to callers."""
    venue_id: int
    field_id: int | None
    day_of_week: int
    start_time: str  # "HH:MM"
    end_time: str    # "HH:MM"
    id: int | None = None
    is_active: bool = True

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "venue_id": self.venue_id,
            "field_id": self.field_id,
            "day_of_week": self.day_of_week,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "is_active": self.is_active,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TimeSlotEntry":
        return cls(
            venue_id=data["venue_id"],
            field_id=data.get("field_id"),
            day_of_week=data["day_of_week"],
            start_time=data["start_time"],
            end_time=data["end_time"],
            id=data.get("id"),
            is_active=data.get("is_active", True),
        )


@dataclass(frozen=True)
class FieldInfo:
    """Identity of a field as needed by the generator."""
    id: int
    field_name: str = ""
    field_number: str | None = None


class OverrideType(str, Enum):
    CLOSED = "closed"
    CUSTOM_HOURS = "custom_hours"
    CUSTOM_PRICING = "custom_pricing"


@dataclass(frozen=True)
class NoOverride:
    kind: str = "none"


@dataclass(frozen=True)
class Closed:
    reason: str
    kind: str = OverrideType.CLOSED.value


@dataclass(frozen=True)
class CustomHours:
    opening: str
    closing: str
    kind: str = OverrideType.CUSTOM_HOURS.value


@dataclass(frozen=True)
class CustomPricing:
    day_rate: float
    night_rate: float
    kind: str = OverrideType.CUSTOM_PRICING.value


OverrideVerdict = Union[NoOverride, Closed, CustomHours, CustomPricing]


class AvailabilityStatus(str, Enum):
    AVAILABLE = "available"
    LIMITED = "limited"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class DayAvailability:
    """Bookable slots for a date together with the override that shaped them."""
    date: str
    field_id: int | None
    verdict: OverrideVerdict
    slots: list[TimeSlotEntry]

    @property
    def is_closed(self) -> bool:
        return isinstance(self.verdict, Closed)
