# backend/fieldbook/schemas/special_occasions.py

from datetime import date
from typing import Literal, Optional
from pydantic import BaseModel, model_validator

from .common import TimeStr, check_opening_hours

OverrideKind = Literal["closed", "custom_hours", "custom_pricing"]
Recurrence = Literal["weekly", "monthly", "yearly"]

PAYLOAD_FIELDS = (
    "override_type",
    "custom_opening_time",
    "custom_closing_time",
    "custom_day_charges",
    "custom_night_charges",
    "is_recurring",
    "recurrence_pattern",
)


def clean_occasion_payload(values: dict) -> dict:
    """Null the payload that does not belong to the override type."""
    values = dict(values)
    if values["override_type"] != "custom_hours":
        values["custom_opening_time"] = None
        values["custom_closing_time"] = None
    else:
        check_opening_hours(values["custom_opening_time"], values["custom_closing_time"])

    if values["override_type"] != "custom_pricing":
        values["custom_day_charges"] = None
        values["custom_night_charges"] = None

    if not values["is_recurring"]:
        values["recurrence_pattern"] = None
    return values


class SpecialOccasionCreate(BaseModel):
    venue_id: int
    field_id: Optional[int] = None

    title: str
    description: Optional[str] = None

    start_date: date
    end_date: date

    override_type: OverrideKind
    custom_opening_time: Optional[TimeStr] = None
    custom_closing_time: Optional[TimeStr] = None
    custom_day_charges: Optional[float] = None
    custom_night_charges: Optional[float] = None

    # Stored only; availability does not expand recurrences
    is_recurring: bool = False
    recurrence_pattern: Optional[Recurrence] = None

    model_config = {"from_attributes": True}

    @model_validator(mode="after")
    def check_payload(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")

        cleaned = clean_occasion_payload({key: getattr(self, key) for key in PAYLOAD_FIELDS})
        for key, value in cleaned.items():
            setattr(self, key, value)
        return self


class SpecialOccasionUpdate(BaseModel):
    field_id: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None

    start_date: Optional[date] = None
    end_date: Optional[date] = None

    override_type: Optional[OverrideKind] = None
    custom_opening_time: Optional[TimeStr] = None
    custom_closing_time: Optional[TimeStr] = None
    custom_day_charges: Optional[float] = None
    custom_night_charges: Optional[float] = None

    is_recurring: Optional[bool] = None
    recurrence_pattern: Optional[Recurrence] = None

    model_config = {"from_attributes": True}


class SpecialOccasionRead(BaseModel):
    id: int
    venue_id: int
    field_id: Optional[int] = None

    title: str
    description: Optional[str] = None

    start_date: date
    end_date: date

    override_type: str
    custom_opening_time: Optional[str] = None
    custom_closing_time: Optional[str] = None
    custom_day_charges: Optional[float] = None
    custom_night_charges: Optional[float] = None

    is_recurring: bool
    recurrence_pattern: Optional[str] = None

    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    model_config = {"from_attributes": True}


class HolidayTemplate(BaseModel):
    title: str
    description: str
    override_type: OverrideKind
    dates: list[date]
