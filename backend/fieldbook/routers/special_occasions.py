# backend/fieldbook/routers/special_occasions.py
# Overrides are resolved at query time, so changes here need no grid
# regeneration or cache invalidation.

from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.generated import (
    VenueFields as DBVenueFields,
    Venues as DBVenues,
    VenueSpecialOccasions as DBSpecialOccasions,
)
from ..schemas.special_occasions import (
    PAYLOAD_FIELDS,
    HolidayTemplate,
    SpecialOccasionCreate,
    SpecialOccasionRead,
    SpecialOccasionUpdate,
    clean_occasion_payload,
)
from ..services.slots import SlotsRepository
from ..services.special_occasions import get_holiday_templates

router = APIRouter(prefix="/special_occasions", tags=["special_occasions"])

DATE_FIELDS = ("start_date", "end_date")
REQUIRED_FIELDS = ("title", "start_date", "end_date", "override_type", "is_recurring")


@router.get("/", response_model=list[SpecialOccasionRead])
def list_special_occasions(
    venue_id: int,
    start_date: date | None = None,
    end_date: date | None = None,
    db: Session = Depends(get_db),
):
    return SlotsRepository(db).list_venue_occasions(venue_id, start_date, end_date)


@router.get("/upcoming", response_model=list[SpecialOccasionRead])
def list_upcoming_occasions(
    venue_id: int,
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return SlotsRepository(db).list_upcoming_occasions(venue_id, date.today(), limit)


@router.get("/templates", response_model=list[HolidayTemplate])
def list_holiday_templates(year: int | None = None):
    return get_holiday_templates(year)


@router.get("/{id}", response_model=SpecialOccasionRead)
def get_special_occasion(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBSpecialOccasions, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.post(
    "/", response_model=SpecialOccasionRead, status_code=status.HTTP_201_CREATED
)
def create_special_occasion(
    data: SpecialOccasionCreate,
    db: Session = Depends(get_db),
):
    if not db.get(DBVenues, data.venue_id):
        raise HTTPException(status_code=404, detail="Venue not found")
    _check_field(db, data.venue_id, data.field_id)

    payload = data.model_dump()
    for key in DATE_FIELDS:
        payload[key] = payload[key].isoformat()
    payload["is_recurring"] = int(payload["is_recurring"])

    obj = DBSpecialOccasions(**payload)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@router.patch("/{id}", response_model=SpecialOccasionRead)
def update_special_occasion(
    id: int,
    data: SpecialOccasionUpdate,
    db: Session = Depends(get_db),
):
    obj = db.get(DBSpecialOccasions, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")

    changes = data.model_dump(exclude_unset=True)
    for key in REQUIRED_FIELDS:
        if key in changes and changes[key] is None:
            del changes[key]
    if "field_id" in changes:
        _check_field(db, obj.venue_id, changes["field_id"])
    for key in DATE_FIELDS:
        if changes.get(key) is not None:
            changes[key] = changes[key].isoformat()
    if "is_recurring" in changes:
        changes["is_recurring"] = int(bool(changes["is_recurring"]))

    start = changes.get("start_date", obj.start_date)
    end = changes.get("end_date", obj.end_date)
    if end < start:
        raise HTTPException(status_code=400, detail="end_date must not be before start_date")

    # Re-apply the per-type payload rules to the merged row
    merged = {key: changes.get(key, getattr(obj, key)) for key in PAYLOAD_FIELDS}
    try:
        changes.update(clean_occasion_payload(merged))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    for field, value in changes.items():
        setattr(obj, field, value)
    obj.updated_at = datetime.now().isoformat(sep=" ", timespec="seconds")

    db.commit()
    db.refresh(obj)
    return obj


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_special_occasion(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBSpecialOccasions, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    db.delete(obj)
    db.commit()


def _check_field(db: Session, venue_id: int, field_id: int | None) -> None:
    if field_id is None:
        return
    field = db.get(DBVenueFields, field_id)
    if not field or field.venue_id != venue_id:
        raise HTTPException(status_code=400, detail="Field does not belong to venue")
