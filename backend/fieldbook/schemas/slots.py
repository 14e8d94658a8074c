# backend/fieldbook/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from datetime import date
from typing import Literal, Optional
from pydantic import BaseModel, Field


class SlotInfo(BaseModel):
    """A bookable grid slot."""
    id: Optional[int] = None
    venue_id: int
    field_id: Optional[int] = None
    day_of_week: int = Field(description="0 = Sunday ... 6 = Saturday")
    start_time: str  # "HH:MM"
    end_time: str    # "HH:MM"

    model_config = {"from_attributes": True}


class CustomHoursInfo(BaseModel):
    opening: str
    closing: str


class CustomPricingInfo(BaseModel):
    day: float
    night: float


class SlotsDayResponse(BaseModel):
    """Bookable slots for a venue (or field) on a date."""
    venue_id: int
    field_id: Optional[int] = None
    date: date
    is_closed: bool = False
    closed_reason: Optional[str] = None
    custom_hours: Optional[CustomHoursInfo] = None
    custom_pricing: Optional[CustomPricingInfo] = None
    slots: list[SlotInfo]
    total_slots: int

    model_config = {"from_attributes": True}


class SlotsDayStatus(BaseModel):
    """Status of a single day in calendar."""
    date: date
    status: Literal["available", "limited", "unavailable"]

    model_config = {"from_attributes": True}


class SlotsCalendarResponse(BaseModel):
    """Response with calendar of day statuses."""
    venue_id: int
    field_id: Optional[int] = None
    start_date: date
    end_date: date
    days: list[SlotsDayStatus]

    # Metadata
    horizon_days: int
    slot_duration_minutes: int

    model_config = {"from_attributes": True}


class SlotsRegenerateResponse(BaseModel):
    venue_id: int
    rows_inserted: int


class SlotsFixMissingResponse(BaseModel):
    regenerated_venue_ids: list[int]
