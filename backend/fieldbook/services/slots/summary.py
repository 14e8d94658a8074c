# backend/fieldbook/services/slots/summary.py
"""
Per-day availability summary for calendar display.

Coarser than the calculator: no same-day lookahead filtering, just
"how much of the day's grid is still free".

  unavailable  closed override, empty grid, or nothing free
  limited      free slots ≤ limited_threshold × total (30%)
  available    otherwise
"""

import logging
from datetime import date

from redis import Redis
from sqlalchemy.exc import SQLAlchemyError

from .calculator import (
    apply_custom_hours,
    collect_occupied_intervals,
    is_occupied,
    load_open_grid,
)
from .config import BookingConfig, day_of_week, get_booking_config
from .generator import ensure_time_slots_exist
from .invalidator import get_affected_dates
from .overrides import resolve_date_override
from .repository import SlotsRepository
from .types import AvailabilityStatus, Closed, CustomHours

logger = logging.getLogger(__name__)


def classify_day(total: int, available: int, config: BookingConfig | None = None) -> AvailabilityStatus:
    """Classify a day from its total and free slot counts."""
    config = config or get_booking_config()
    if total <= 0 or available <= 0:
        return AvailabilityStatus.UNAVAILABLE
    if available <= total * config.limited_threshold:
        return AvailabilityStatus.LIMITED
    return AvailabilityStatus.AVAILABLE


def get_venue_availability(
    repo: SlotsRepository,
    venue_id: int,
    start_date: date,
    end_date: date,
    field_id: int | None = None,
    config: BookingConfig | None = None,
    redis: Redis | None = None,
) -> dict[str, AvailabilityStatus]:
    """
    Availability status for every day of [start_date, end_date].

    Returns:
        Dict mapping ISO date → status, in date order.
    """
    config = config or get_booking_config()
    ensure_time_slots_exist(repo, venue_id, config, redis)

    availability: dict[str, AvailabilityStatus] = {}
    for dt in get_affected_dates(start_date, end_date):
        availability[dt.isoformat()] = _day_status(repo, venue_id, dt, field_id, config, redis)

    return availability


def _day_status(
    repo: SlotsRepository,
    venue_id: int,
    dt: date,
    field_id: int | None,
    config: BookingConfig,
    redis: Redis | None,
) -> AvailabilityStatus:
    verdict = resolve_date_override(repo, venue_id, dt, field_id)
    if isinstance(verdict, Closed):
        return AvailabilityStatus.UNAVAILABLE

    try:
        grid = load_open_grid(repo, venue_id, day_of_week(dt), field_id, config, redis)
        if isinstance(verdict, CustomHours):
            grid = apply_custom_hours(grid, verdict)

        total = len(grid)
        if total == 0:
            return AvailabilityStatus.UNAVAILABLE

        bookings = repo.list_confirmed_bookings(venue_id, dt)
    except SQLAlchemyError as e:
        logger.error(f"Error computing availability for venue {venue_id} on {dt}: {e}")
        return AvailabilityStatus.UNAVAILABLE

    occupied = collect_occupied_intervals(bookings, field_id)
    booked_count = sum(1 for entry in grid if is_occupied(entry, occupied))

    return classify_day(total, total - booked_count, config)
