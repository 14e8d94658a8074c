# backend/fieldbook/schemas/venues.py

import json
from typing import Literal, Optional
from pydantic import BaseModel, field_validator, model_validator

from .common import TimeStr, Weekdays, check_opening_hours

VenueStatus = Literal["open", "closed", "maintenance"]
ApprovalStatus = Literal["pending", "approved", "rejected"]


class FieldCreate(BaseModel):
    field_name: str
    field_number: Optional[str] = None
    field_type: Optional[str] = "futsal"
    status: VenueStatus = "open"

    model_config = {"from_attributes": True}


class FieldUpdate(BaseModel):
    field_name: Optional[str] = None
    field_number: Optional[str] = None
    field_type: Optional[str] = None
    status: Optional[VenueStatus] = None

    model_config = {"from_attributes": True}


class FieldRead(BaseModel):
    id: int
    venue_id: int
    field_name: str
    field_number: Optional[str] = None
    field_type: Optional[str] = None
    status: str

    model_config = {"from_attributes": True}


class VenueCreate(BaseModel):
    name: str
    city: str = ""
    description: Optional[str] = None
    address: Optional[str] = None

    opening_time: TimeStr = "06:00"
    closing_time: TimeStr = "23:00"
    days_available: Weekdays = [0, 1, 2, 3, 4, 5, 6]

    status: VenueStatus = "open"
    approval_status: ApprovalStatus = "pending"
    fields: list[FieldCreate] = []

    model_config = {"from_attributes": True}

    @model_validator(mode="after")
    def check_hours(self):
        check_opening_hours(self.opening_time, self.closing_time)
        return self


class VenueUpdate(BaseModel):
    name: Optional[str] = None
    city: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None

    opening_time: Optional[TimeStr] = None
    closing_time: Optional[TimeStr] = None
    days_available: Optional[Weekdays] = None

    status: Optional[VenueStatus] = None
    approval_status: Optional[ApprovalStatus] = None

    model_config = {"from_attributes": True}

    @model_validator(mode="after")
    def check_hours(self):
        check_opening_hours(self.opening_time, self.closing_time)
        return self


class VenueRead(BaseModel):
    id: int
    name: str
    city: str
    description: Optional[str] = None
    address: Optional[str] = None

    opening_time: str
    closing_time: str
    days_available: list[int]

    status: str
    approval_status: str
    fields: list[FieldRead] = []

    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    model_config = {"from_attributes": True}

    @field_validator("days_available", mode="before")
    @classmethod
    def decode_days(cls, value):
        if isinstance(value, str):
            return json.loads(value) if value else []
        return value
