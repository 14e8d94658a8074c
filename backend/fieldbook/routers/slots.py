# backend/fieldbook/routers/slots.py
"""
Slots API endpoints.

GET  /slots/day         - Bookable slots for a date (venue-level or one field)
GET  /slots/calendar    - Per-day availability status for a date range
POST /slots/regenerate  - Rebuild a venue's grid from its stored schedule
POST /slots/fix-missing - Build grids for approved venues that have none
POST /slots/invalidate  - Drop cached grids of a venue
"""

import logging
from datetime import date, datetime, timedelta
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import get_db
from ..redis_client import redis_client
from ..schemas.slots import (
    CustomHoursInfo,
    CustomPricingInfo,
    SlotInfo,
    SlotsCalendarResponse,
    SlotsDayResponse,
    SlotsDayStatus,
    SlotsFixMissingResponse,
    SlotsRegenerateResponse,
)
from ..services.slots import (
    SlotGenerationError,
    SlotsRepository,
    fix_missing_time_slots,
    get_booking_config,
    get_day_availability,
    get_venue_availability,
    invalidate_venue_cache,
)
from ..services.slots.generator import regenerate_from_stored_schedule
from ..services.slots.types import AvailabilityStatus, Closed, CustomHours, CustomPricing


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("/day", response_model=SlotsDayResponse)
def get_slots_day(
    venue_id: int,
    field_id: int | None = None,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    """Get bookable slots for a venue or field on a specific day."""
    config = get_booking_config()
    today = date.today()

    if target_date < today:
        raise HTTPException(status_code=400, detail="Date cannot be in the past")

    if target_date > today + timedelta(days=config.horizon_days):
        raise HTTPException(status_code=400, detail=f"Date cannot be more than {config.horizon_days} days ahead")

    repo = SlotsRepository(db)
    if not _venue_readable(repo, venue_id):
        return SlotsDayResponse(
            venue_id=venue_id,
            field_id=field_id,
            date=target_date,
            slots=[],
            total_slots=0,
        )

    result = get_day_availability(
        repo,
        venue_id,
        target_date,
        field_id=field_id,
        config=config,
        now=datetime.now(),
        redis=redis_client,
    )
    verdict = result.verdict

    return SlotsDayResponse(
        venue_id=venue_id,
        field_id=field_id,
        date=target_date,
        is_closed=isinstance(verdict, Closed),
        closed_reason=verdict.reason if isinstance(verdict, Closed) else None,
        custom_hours=(
            CustomHoursInfo(opening=verdict.opening, closing=verdict.closing)
            if isinstance(verdict, CustomHours) else None
        ),
        custom_pricing=(
            CustomPricingInfo(day=verdict.day_rate, night=verdict.night_rate)
            if isinstance(verdict, CustomPricing) else None
        ),
        slots=[SlotInfo(**slot.to_dict()) for slot in result.slots],
        total_slots=len(result.slots),
    )


@router.get("/calendar", response_model=SlotsCalendarResponse)
def get_slots_calendar(
    venue_id: int,
    field_id: int | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    db: Session = Depends(get_db),
):
    """Get availability status per day for a venue or field."""
    config = get_booking_config()
    today = date.today()
    horizon = today + timedelta(days=config.horizon_days)

    if start_date is None:
        start_date = today
    if end_date is None:
        end_date = start_date + timedelta(days=config.horizon_days)

    if start_date < today:
        start_date = today
    if end_date > horizon:
        end_date = horizon
    if end_date < start_date:
        end_date = start_date

    repo = SlotsRepository(db)
    if _venue_readable(repo, venue_id):
        availability = get_venue_availability(
            repo,
            venue_id,
            start_date,
            end_date,
            field_id=field_id,
            config=config,
            redis=redis_client,
        )
    else:
        # Unreadable venue: every day is shown as unavailable
        availability = {
            (start_date + timedelta(days=offset)).isoformat(): AvailabilityStatus.UNAVAILABLE
            for offset in range((end_date - start_date).days + 1)
        }

    return SlotsCalendarResponse(
        venue_id=venue_id,
        field_id=field_id,
        start_date=start_date,
        end_date=end_date,
        days=[
            SlotsDayStatus(date=date.fromisoformat(day), status=status.value)
            for day, status in availability.items()
        ],
        horizon_days=config.horizon_days,
        slot_duration_minutes=config.slot_duration_minutes,
    )


@router.post("/regenerate", response_model=SlotsRegenerateResponse)
def regenerate_slots(
    venue_id: int,
    db: Session = Depends(get_db),
):
    """Rebuild the venue's grid from its stored schedule (admin endpoint)."""
    repo = SlotsRepository(db)
    venue = _get_venue_or_404(repo, venue_id)

    try:
        inserted = regenerate_from_stored_schedule(repo, venue, redis=redis_client)
    except SlotGenerationError as e:
        logger.error(str(e))
        raise HTTPException(status_code=500, detail=str(e))

    return SlotsRegenerateResponse(venue_id=venue_id, rows_inserted=inserted)


@router.post("/fix-missing", response_model=SlotsFixMissingResponse)
def fix_missing_slots(db: Session = Depends(get_db)):
    """Generate grids for approved venues without one (admin endpoint)."""
    repo = SlotsRepository(db)

    try:
        fixed = fix_missing_time_slots(repo, redis=redis_client)
    except (SlotGenerationError, SQLAlchemyError) as e:
        logger.error(f"Error fixing time slots: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return SlotsFixMissingResponse(regenerated_venue_ids=fixed)


@router.post("/invalidate")
def invalidate_slots_cache(venue_id: int):
    """Manually invalidate cached grids for a venue (admin endpoint)."""
    deleted = invalidate_venue_cache(redis_client, venue_id)

    return {
        "venue_id": venue_id,
        "deleted_keys": deleted,
    }


def _get_venue_or_404(repo: SlotsRepository, venue_id: int):
    try:
        venue = repo.get_venue(venue_id)
    except SQLAlchemyError as e:
        logger.error(f"Error loading venue {venue_id}: {e}")
        raise HTTPException(status_code=503, detail="Venue lookup failed")
    if not venue:
        raise HTTPException(status_code=404, detail="Venue not found")
    return venue


def _venue_readable(repo: SlotsRepository, venue_id: int) -> bool:
    """404 for an unknown venue; False when the lookup itself failed."""
    try:
        venue = repo.get_venue(venue_id)
    except SQLAlchemyError as e:
        logger.error(f"Error loading venue {venue_id}: {e}")
        return False
    if not venue:
        raise HTTPException(status_code=404, detail="Venue not found")
    return True
