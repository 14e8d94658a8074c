"""Shared test fixtures and helpers."""

import json
from datetime import date, datetime
from typing import Optional

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fieldbook.models.generated import (
    Base,
    Bookings,
    BookingSlots,
    VenueFields,
    Venues,
    VenueSpecialOccasions,
)
from fieldbook.services.slots import SlotsRepository
from fieldbook.services.slots.generator import regenerate_from_stored_schedule


FUTURE_DATE = date(2030, 6, 5)
NOW = datetime(2030, 6, 1, 9, 0)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def enable_sqlite_fk(dbapi_connection, _):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def repo(db):
    return SlotsRepository(db)


def make_venue(
    db,
    name: str = "Arena",
    opening_time: str = "06:00",
    closing_time: str = "23:00",
    days_available: Optional[list[int]] = None,
    fields: Optional[list[str]] = None,
    approval_status: str = "approved",
    with_grid: bool = True,
) -> Venues:
    """Create a venue (and fields); materialize its grid unless with_grid=False."""
    venue = Venues(
        name=name,
        city="Lahore",
        opening_time=opening_time,
        closing_time=closing_time,
        days_available=json.dumps(
            days_available if days_available is not None else [0, 1, 2, 3, 4, 5, 6]
        ),
        approval_status=approval_status,
    )
    venue.fields = [
        VenueFields(field_name=field_name, field_number=str(i + 1))
        for i, field_name in enumerate(fields or [])
    ]
    db.add(venue)
    db.commit()
    db.refresh(venue)

    if with_grid:
        regenerate_from_stored_schedule(SlotsRepository(db), venue)
    return venue


def make_booking(
    db,
    venue: Venues,
    start_time: str,
    end_time: str,
    booking_date: date = FUTURE_DATE,
    field: Optional[VenueFields] = None,
    status: str = "confirmed",
    slots: Optional[list[tuple[str, str]]] = None,
) -> Bookings:
    booking = Bookings(
        venue_id=venue.id,
        field_id=field.id if field else None,
        booking_date=booking_date.isoformat(),
        start_time=start_time,
        end_time=end_time,
        status=status,
    )
    booking.booking_slots = [
        BookingSlots(slot_start_time=start, slot_end_time=end)
        for start, end in (slots or [])
    ]
    db.add(booking)
    db.commit()
    return booking


def make_override(
    db,
    venue: Venues,
    override_type: str = "closed",
    start_date: date = FUTURE_DATE,
    end_date: Optional[date] = None,
    field: Optional[VenueFields] = None,
    title: str = "Maintenance",
    **payload,
) -> VenueSpecialOccasions:
    occasion = VenueSpecialOccasions(
        venue_id=venue.id,
        field_id=field.id if field else None,
        title=title,
        start_date=start_date.isoformat(),
        end_date=(end_date or start_date).isoformat(),
        override_type=override_type,
        **payload,
    )
    db.add(occasion)
    db.commit()
    return occasion


def slot_times(entries) -> list[tuple[str, str]]:
    return [(entry.start_time, entry.end_time) for entry in entries]
