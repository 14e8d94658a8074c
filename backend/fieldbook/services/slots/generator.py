# backend/fieldbook/services/slots/generator.py
"""
Slot grid generation.

Materializes the canonical grid of fixed-duration slots for a venue:
one venue-level row (field_id NULL) plus one row per field for every
active weekday and every step in [opening, closing).

Regeneration is destructive and total: all existing rows of the venue are
deleted, then the new grid is inserted in sequential batches. There is no
rollback across batches; a failed batch leaves a partial grid and raises
SlotGenerationError so the schedule-edit flow can report it and retry.
"""

import logging
from typing import Iterable

from redis import Redis
from sqlalchemy.exc import SQLAlchemyError

from .config import (
    ALL_WEEKDAYS,
    BookingConfig,
    get_booking_config,
    minutes_to_time_str,
    parse_hour,
)
from .invalidator import invalidate_venue_cache
from .repository import SlotsRepository, parse_days_available
from .types import FieldInfo

logger = logging.getLogger(__name__)


class SlotGenerationError(Exception):
    """Grid generation failed; the venue may be left with a partial grid."""

    def __init__(self, venue_id: int, inserted: int, message: str):
        self.venue_id = venue_id
        self.inserted = inserted
        super().__init__(
            f"Slot generation failed for venue {venue_id} after {inserted} rows: {message}"
        )


def build_grid_rows(
    venue_id: int,
    opening_time: str,
    closing_time: str,
    days_available: Iterable[int],
    fields: list[FieldInfo] | None = None,
    config: BookingConfig | None = None,
) -> list[dict]:
    """
    Build grid rows without touching the store.

    Opening and closing are read hour-granular ("06:30" → 06:00).
    """
    config = config or get_booking_config()
    step = config.slot_duration_minutes
    start_min = parse_hour(opening_time) * 60
    end_min = parse_hour(closing_time) * 60

    if end_min <= start_min:
        logger.warning(
            f"Venue {venue_id}: closing {closing_time} is not after opening {opening_time}, empty grid"
        )
        return []

    fields = fields or []
    rows: list[dict] = []

    for dow in sorted(set(days_available)):
        t = start_min
        while t + step <= end_min:
            start_time = minutes_to_time_str(t)
            end_time = minutes_to_time_str(t + step)

            # Venue-level slot (used when no field is selected)
            rows.append({
                "venue_id": venue_id,
                "field_id": None,
                "day_of_week": dow,
                "start_time": start_time,
                "end_time": end_time,
                "is_active": 1,
            })

            for field in fields:
                rows.append({
                    "venue_id": venue_id,
                    "field_id": field.id,
                    "day_of_week": dow,
                    "start_time": start_time,
                    "end_time": end_time,
                    "is_active": 1,
                })

            t += step

    return rows


def generate_time_slots_for_venue(
    repo: SlotsRepository,
    venue_id: int,
    opening_time: str,
    closing_time: str,
    days_available: Iterable[int],
    fields: list[FieldInfo] | None = None,
    config: BookingConfig | None = None,
    redis: Redis | None = None,
) -> int:
    """
    Replace the venue's grid.

    Returns:
        Number of rows inserted.

    Raises:
        SlotGenerationError: delete or any insert batch failed.
    """
    config = config or get_booking_config()
    days = list(days_available)

    try:
        rows = build_grid_rows(venue_id, opening_time, closing_time, days, fields, config)
    except ValueError as e:
        raise SlotGenerationError(venue_id, 0, f"invalid schedule: {e}") from e

    logger.info(
        f"Generating time slots for venue {venue_id}: "
        f"{opening_time}-{closing_time}, days={days}, fields={len(fields or [])}, rows={len(rows)}"
    )

    try:
        repo.delete_grid(venue_id)
    except SQLAlchemyError as e:
        raise SlotGenerationError(venue_id, 0, f"delete failed: {e}") from e

    inserted = 0
    batch_size = config.insert_batch_size
    try:
        for i in range(0, len(rows), batch_size):
            batch = rows[i:i + batch_size]
            repo.insert_grid_rows(batch)
            inserted += len(batch)
    except SQLAlchemyError as e:
        logger.error(f"Error inserting time slots batch for venue {venue_id}: {e}")
        raise SlotGenerationError(venue_id, inserted, str(e)) from e
    finally:
        # Stale cache must go even when the grid is partial
        invalidate_venue_cache(redis, venue_id)

    logger.info(f"Time slots generated for venue {venue_id}: {inserted} rows")
    return inserted


def update_venue_time_slots(
    repo: SlotsRepository,
    venue_id: int,
    opening_time: str,
    closing_time: str,
    days_available: Iterable[int],
    config: BookingConfig | None = None,
    redis: Redis | None = None,
) -> int:
    """Regenerate the grid after a schedule edit, using the venue's current fields."""
    try:
        fields = _field_infos(repo.list_venue_fields(venue_id))
    except SQLAlchemyError as e:
        raise SlotGenerationError(venue_id, 0, f"loading fields failed: {e}") from e

    return generate_time_slots_for_venue(
        repo, venue_id, opening_time, closing_time, days_available, fields, config, redis
    )


def regenerate_from_stored_schedule(
    repo: SlotsRepository,
    venue,
    config: BookingConfig | None = None,
    redis: Redis | None = None,
) -> int:
    """Regenerate using the schedule stored on the venue row (with defaults)."""
    config = config or get_booking_config()
    days = parse_days_available(venue.days_available)
    if days is None:
        days = list(ALL_WEEKDAYS)

    return update_venue_time_slots(
        repo,
        venue.id,
        venue.opening_time or config.default_opening_time,
        venue.closing_time or config.default_closing_time,
        days,
        config,
        redis,
    )


def venue_has_time_slots(repo: SlotsRepository, venue_id: int) -> bool:
    """Check if a venue has any grid rows (False on read failure)."""
    try:
        return repo.venue_has_grid(venue_id)
    except SQLAlchemyError as e:
        logger.error(f"Error checking time slots for venue {venue_id}: {e}")
        return False


def ensure_time_slots_exist(
    repo: SlotsRepository,
    venue_id: int,
    config: BookingConfig | None = None,
    redis: Redis | None = None,
) -> bool:
    """
    Generate the grid from the stored schedule when the venue has none.

    Never raises: this runs on the read path.

    Returns:
        True if a grid was generated.
    """
    try:
        if repo.venue_has_grid(venue_id):
            return False
        venue = repo.get_venue(venue_id)
    except SQLAlchemyError as e:
        logger.error(f"Error checking time slots for venue {venue_id}: {e}")
        return False

    if venue is None:
        logger.error(f"Cannot generate time slots: venue {venue_id} not found")
        return False

    logger.info(f"No time slots found, generating for venue {venue_id}")
    try:
        regenerate_from_stored_schedule(repo, venue, config, redis)
    except SlotGenerationError as e:
        logger.error(f"Error ensuring time slots exist: {e}")
        return False
    return True


def fix_missing_time_slots(
    repo: SlotsRepository,
    config: BookingConfig | None = None,
    redis: Redis | None = None,
) -> list[int]:
    """
    Generate grids for approved venues that have none.

    Returns:
        IDs of venues that got a new grid.

    Raises:
        SQLAlchemyError: the venue list could not be loaded.
        SlotGenerationError: generation failed for a venue.
    """
    venues = repo.list_approved_venues()
    logger.info(f"Checking {len(venues)} approved venues for missing time slots")

    fixed: list[int] = []
    for venue in venues:
        try:
            has_grid = repo.venue_has_grid(venue.id)
        except SQLAlchemyError as e:
            logger.error(f"Error checking time slots for venue {venue.id}: {e}")
            continue

        if not has_grid:
            logger.info(f"Generating time slots for venue {venue.id} ({venue.name})")
            regenerate_from_stored_schedule(repo, venue, config, redis)
            fixed.append(venue.id)

    logger.info(f"Time slots fix completed: {len(fixed)} venues regenerated")
    return fixed


def _field_infos(fields) -> list[FieldInfo]:
    return [
        FieldInfo(id=f.id, field_name=f.field_name, field_number=f.field_number)
        for f in fields
    ]
