# backend/fieldbook/routers/venues.py
# Schedule edits (opening_time, closing_time, days_available) and field
# additions/removals regenerate the venue's slot grid.

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..redis_client import redis_client
from ..models.generated import (
    Bookings as DBBookings,
    VenueFields as DBVenueFields,
    Venues as DBVenues,
)
from ..schemas.venues import (
    FieldCreate,
    FieldRead,
    FieldUpdate,
    VenueCreate,
    VenueRead,
    VenueUpdate,
)
from ..schemas.common import check_opening_hours
from ..services.slots import SlotGenerationError, SlotsRepository
from ..services.slots.generator import regenerate_from_stored_schedule

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/venues", tags=["venues"])

SCHEDULE_FIELDS = ("opening_time", "closing_time", "days_available")
REQUIRED_FIELDS = ("name", "city", "status", "approval_status") + SCHEDULE_FIELDS


@router.get("/", response_model=list[VenueRead])
def list_venues(db: Session = Depends(get_db)):
    return db.query(DBVenues).order_by(DBVenues.id).all()


@router.get("/{id}", response_model=VenueRead)
def get_venue(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBVenues, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.post("/", response_model=VenueRead, status_code=status.HTTP_201_CREATED)
def create_venue(
    data: VenueCreate,
    db: Session = Depends(get_db),
):
    payload = data.model_dump(exclude={"fields"})
    payload["days_available"] = json.dumps(payload["days_available"])

    obj = DBVenues(**payload)
    obj.fields = [DBVenueFields(**field.model_dump()) for field in data.fields]
    db.add(obj)
    db.commit()
    db.refresh(obj)

    _regenerate_grid(db, obj)
    db.refresh(obj)
    return obj


@router.patch("/{id}", response_model=VenueRead)
def update_venue(
    id: int,
    data: VenueUpdate,
    db: Session = Depends(get_db),
):
    obj = db.get(DBVenues, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")

    changes = data.model_dump(exclude_unset=True)
    for key in REQUIRED_FIELDS:
        if key in changes and changes[key] is None:
            del changes[key]

    try:
        check_opening_hours(
            changes.get("opening_time", obj.opening_time),
            changes.get("closing_time", obj.closing_time),
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    if "days_available" in changes:
        changes["days_available"] = json.dumps(changes["days_available"])

    schedule_changed = any(
        key in changes and changes[key] != getattr(obj, key)
        for key in SCHEDULE_FIELDS
    )

    for field, value in changes.items():
        setattr(obj, field, value)

    db.commit()
    db.refresh(obj)

    if schedule_changed:
        _regenerate_grid(db, obj)
        db.refresh(obj)

    return obj


# ── Fields ───────────────────────────────────────────────────────────────


@router.post("/{id}/fields", response_model=FieldRead, status_code=status.HTTP_201_CREATED)
def create_field(
    id: int,
    data: FieldCreate,
    db: Session = Depends(get_db),
):
    venue = db.get(DBVenues, id)
    if not venue:
        raise HTTPException(status_code=404, detail="Not found")

    obj = DBVenueFields(venue_id=id, **data.model_dump())
    db.add(obj)
    db.commit()
    db.refresh(obj)

    _regenerate_grid(db, venue)
    db.refresh(obj)
    return obj


@router.patch("/{id}/fields/{field_id}", response_model=FieldRead)
def update_field(
    id: int,
    field_id: int,
    data: FieldUpdate,
    db: Session = Depends(get_db),
):
    obj = _get_field_or_404(db, id, field_id)

    # Status is applied at query time; no regeneration needed
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(obj, field, value)

    db.commit()
    db.refresh(obj)
    return obj


@router.delete("/{id}/fields/{field_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_field(id: int, field_id: int, db: Session = Depends(get_db)):
    obj = _get_field_or_404(db, id, field_id)
    venue = obj.venue

    has_bookings = db.query(DBBookings.id).filter(DBBookings.field_id == field_id).first()
    if has_bookings:
        raise HTTPException(status_code=409, detail="Field has bookings; close it instead of deleting")

    db.delete(obj)
    db.commit()

    _regenerate_grid(db, venue)


def _get_field_or_404(db: Session, venue_id: int, field_id: int) -> DBVenueFields:
    obj = db.get(DBVenueFields, field_id)
    if not obj or obj.venue_id != venue_id:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


def _regenerate_grid(db: Session, venue: DBVenues) -> None:
    """Regenerate the grid; a failure is a hard error for the edit flow."""
    try:
        regenerate_from_stored_schedule(SlotsRepository(db), venue, redis=redis_client)
    except SlotGenerationError as e:
        logger.error(str(e))
        raise HTTPException(
            status_code=500,
            detail=f"Venue saved but time slot generation failed, retry regeneration: {e}",
        )
