# backend/fieldbook/services/slots/repository.py
"""
Data access for the slots components.

Every component receives a SlotsRepository instead of reaching for a
global session, so the same logic runs against the request session in the
API and against an in-memory SQLite database in tests.

Methods raise sqlalchemy.exc.SQLAlchemyError on backend failures; the
callers decide whether that fails open or closed.
"""

import json
from datetime import date

from sqlalchemy import insert, or_
from sqlalchemy.orm import Session, selectinload

from ...models.generated import (
    Bookings,
    TimeSlots,
    VenueFields,
    Venues,
    VenueSpecialOccasions,
)


class SlotsRepository:
    """Thin query layer over an SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    # ── Venues & fields ──────────────────────────────────────────────────

    def get_venue(self, venue_id: int) -> Venues | None:
        return self.db.get(Venues, venue_id)

    def list_approved_venues(self) -> list[Venues]:
        return (
            self.db.query(Venues)
            .filter(Venues.approval_status == "approved")
            .order_by(Venues.id)
            .all()
        )

    def list_venue_fields(self, venue_id: int) -> list[VenueFields]:
        return (
            self.db.query(VenueFields)
            .filter(VenueFields.venue_id == venue_id)
            .order_by(VenueFields.id)
            .all()
        )

    def get_field_statuses(self, venue_id: int) -> dict[int, str]:
        """Map field_id → status for all fields of the venue."""
        rows = (
            self.db.query(VenueFields.id, VenueFields.status)
            .filter(VenueFields.venue_id == venue_id)
            .all()
        )
        return {field_id: status for field_id, status in rows}

    # ── Slot grid ────────────────────────────────────────────────────────

    def venue_has_grid(self, venue_id: int) -> bool:
        row = (
            self.db.query(TimeSlots.id)
            .filter(TimeSlots.venue_id == venue_id)
            .limit(1)
            .first()
        )
        return row is not None

    def list_grid_entries(
        self,
        venue_id: int,
        day_of_week: int,
        field_id: int | None = None,
    ) -> list[TimeSlots]:
        """Active grid rows for a weekday, field-level or venue-level."""
        query = self.db.query(TimeSlots).filter(
            TimeSlots.venue_id == venue_id,
            TimeSlots.day_of_week == day_of_week,
            TimeSlots.is_active == 1,
        )
        if field_id is not None:
            query = query.filter(TimeSlots.field_id == field_id)
        else:
            query = query.filter(TimeSlots.field_id.is_(None))
        return query.order_by(TimeSlots.start_time).all()

    def list_all_grid_entries(self, venue_id: int) -> list[TimeSlots]:
        return (
            self.db.query(TimeSlots)
            .filter(TimeSlots.venue_id == venue_id)
            .order_by(TimeSlots.field_id, TimeSlots.day_of_week, TimeSlots.start_time)
            .all()
        )

    def delete_grid(self, venue_id: int) -> int:
        """Delete every grid row of the venue. Commits."""
        deleted = (
            self.db.query(TimeSlots)
            .filter(TimeSlots.venue_id == venue_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return deleted

    def insert_grid_rows(self, rows: list[dict]) -> None:
        """Insert one batch of grid rows. Commits; rolls back the batch on error."""
        if not rows:
            return
        try:
            self.db.execute(insert(TimeSlots), rows)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    # ── Overrides ────────────────────────────────────────────────────────

    def list_date_overrides(
        self,
        venue_id: int,
        target_date: date,
        field_id: int | None = None,
    ) -> list[VenueSpecialOccasions]:
        """
        Overrides whose [start_date, end_date] contains target_date.

        With a field: field-scoped and venue-wide rows.
        Without a field: venue-wide rows only.
        """
        date_str = target_date.isoformat()
        query = self.db.query(VenueSpecialOccasions).filter(
            VenueSpecialOccasions.venue_id == venue_id,
            VenueSpecialOccasions.start_date <= date_str,
            VenueSpecialOccasions.end_date >= date_str,
        )
        if field_id is not None:
            query = query.filter(
                or_(
                    VenueSpecialOccasions.field_id == field_id,
                    VenueSpecialOccasions.field_id.is_(None),
                )
            )
        else:
            query = query.filter(VenueSpecialOccasions.field_id.is_(None))
        return query.order_by(VenueSpecialOccasions.start_date, VenueSpecialOccasions.id).all()

    def list_venue_occasions(
        self,
        venue_id: int,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[VenueSpecialOccasions]:
        query = self.db.query(VenueSpecialOccasions).filter(
            VenueSpecialOccasions.venue_id == venue_id,
        )
        if start_date and end_date:
            query = query.filter(
                VenueSpecialOccasions.end_date >= start_date.isoformat(),
                VenueSpecialOccasions.start_date <= end_date.isoformat(),
            )
        return query.order_by(VenueSpecialOccasions.start_date).all()

    def list_upcoming_occasions(
        self,
        venue_id: int,
        today: date,
        limit: int = 10,
    ) -> list[VenueSpecialOccasions]:
        return (
            self.db.query(VenueSpecialOccasions)
            .filter(
                VenueSpecialOccasions.venue_id == venue_id,
                VenueSpecialOccasions.start_date >= today.isoformat(),
            )
            .order_by(VenueSpecialOccasions.start_date)
            .limit(limit)
            .all()
        )

    # ── Bookings ─────────────────────────────────────────────────────────

    def list_confirmed_bookings(
        self,
        venue_id: int,
        target_date: date,
    ) -> list[Bookings]:
        """Confirmed bookings of the venue on a date, with their booking slots."""
        return (
            self.db.query(Bookings)
            .options(selectinload(Bookings.booking_slots))
            .filter(
                Bookings.venue_id == venue_id,
                Bookings.booking_date == target_date.isoformat(),
                Bookings.status == "confirmed",
            )
            .all()
        )


def parse_days_available(raw) -> list[int] | None:
    """Decode the stored weekday list; None when absent or unreadable."""
    if raw is None or raw == "":
        return None
    if isinstance(raw, (list, tuple)):
        return [int(d) for d in raw]
    try:
        days = json.loads(raw)
    except (TypeError, json.JSONDecodeError):
        return None
    if not isinstance(days, list):
        return None
    return [int(d) for d in days]
