# backend/fieldbook/services/slots/calculator.py
"""
Slot availability calculation for a single date.

Pipeline:
  1. Override verdict (Closed → nothing; CustomHours → trim the grid)
  2. Canonical grid for the weekday (Redis cache → store, self-healing)
  3. Closed fields removed (venue-level rows are never removed here)
  4. Slots overlapping a confirmed booking removed
  5. Same-day slots inside the lookahead buffer removed

Failure policy: reading the grid or the bookings fails closed (empty list),
the override lookup fails open (see overrides.py). Malformed times keep
their slot.
"""

import logging
from datetime import date, datetime, timedelta

from redis import Redis, RedisError
from sqlalchemy.exc import SQLAlchemyError

from .config import BookingConfig, day_of_week, get_booking_config, time_str_to_minutes
from .generator import ensure_time_slots_exist
from .overrides import resolve_date_override
from .redis_store import SlotsRedisStore
from .repository import SlotsRepository
from .types import Closed, CustomHours, DayAvailability, OverrideVerdict, TimeSlotEntry

logger = logging.getLogger(__name__)


FIELD_OPEN = "open"


def get_available_slots(
    repo: SlotsRepository,
    venue_id: int,
    target_date: date,
    field_id: int | None = None,
    config: BookingConfig | None = None,
    now: datetime | None = None,
    redis: Redis | None = None,
) -> list[TimeSlotEntry]:
    """
    Bookable slots for a venue (or one of its fields) on a date.

    Returns:
        Entries sorted by start time. Empty list = nothing bookable.
    """
    return get_day_availability(
        repo, venue_id, target_date, field_id, config, now, redis
    ).slots


def get_day_availability(
    repo: SlotsRepository,
    venue_id: int,
    target_date: date,
    field_id: int | None = None,
    config: BookingConfig | None = None,
    now: datetime | None = None,
    redis: Redis | None = None,
) -> DayAvailability:
    """Same as get_available_slots, keeping the override verdict for display."""
    config = config or get_booking_config()
    now = now or datetime.now()

    # Step 1: Special occasions
    verdict = resolve_date_override(repo, venue_id, target_date, field_id)
    if isinstance(verdict, Closed):
        logger.info(f"Venue {venue_id} closed on {target_date}: {verdict.reason}")
        return _result(target_date, field_id, verdict, [])

    # Step 2-4: Grid for the weekday, open fields only
    dow = day_of_week(target_date)
    ensure_time_slots_exist(repo, venue_id, config, redis)

    try:
        grid = load_open_grid(repo, venue_id, dow, field_id, config, redis)
    except SQLAlchemyError as e:
        logger.error(f"Error loading time slots for venue {venue_id}: {e}")
        return _result(target_date, field_id, verdict, [])

    if isinstance(verdict, CustomHours):
        grid = apply_custom_hours(grid, verdict)

    if not grid:
        return _result(target_date, field_id, verdict, [])

    # Step 5: Confirmed bookings
    try:
        bookings = repo.list_confirmed_bookings(venue_id, target_date)
    except SQLAlchemyError as e:
        logger.error(f"Error loading bookings for venue {venue_id} on {target_date}: {e}")
        return _result(target_date, field_id, verdict, [])

    occupied = collect_occupied_intervals(bookings, field_id)
    available = [entry for entry in grid if not is_occupied(entry, occupied)]

    # Step 6: Lead time for today
    if target_date == now.date():
        cutoff = now + timedelta(minutes=config.lookahead_buffer_minutes)
        available = [entry for entry in available if not _starts_before(entry, target_date, cutoff)]

    return _result(target_date, field_id, verdict, sort_by_start(available))


# ── Grid ─────────────────────────────────────────────────────────────────


def load_open_grid(
    repo: SlotsRepository,
    venue_id: int,
    dow: int,
    field_id: int | None,
    config: BookingConfig,
    redis: Redis | None,
) -> list[TimeSlotEntry]:
    """
    Active grid entries for the weekday with closed-field rows removed.

    Raises:
        SQLAlchemyError: the grid or the field list could not be read.
    """
    grid = load_grid(repo, venue_id, dow, field_id, config, redis)
    if field_id is None:
        return grid

    statuses = repo.get_field_statuses(venue_id)
    return [
        entry for entry in grid
        if entry.field_id is None or statuses.get(entry.field_id) == FIELD_OPEN
    ]


def load_grid(
    repo: SlotsRepository,
    venue_id: int,
    dow: int,
    field_id: int | None,
    config: BookingConfig,
    redis: Redis | None,
) -> list[TimeSlotEntry]:
    """Get grid entries, using the Redis cache when available."""
    store = SlotsRedisStore(redis, config) if redis is not None else None

    if store is not None:
        try:
            cached = store.get_grid(venue_id, field_id, dow)
        except RedisError as e:
            logger.warning(f"Grid cache read error for venue {venue_id}: {e}")
            cached = None
        if cached is not None:
            return cached

    rows = repo.list_grid_entries(venue_id, dow, field_id)
    entries = [
        TimeSlotEntry(
            id=row.id,
            venue_id=row.venue_id,
            field_id=row.field_id,
            day_of_week=row.day_of_week,
            start_time=row.start_time,
            end_time=row.end_time,
            is_active=bool(row.is_active),
        )
        for row in rows
    ]

    if store is not None:
        try:
            store.store_grid(venue_id, field_id, dow, entries)
        except RedisError as e:
            logger.warning(f"Grid cache write error for venue {venue_id}: {e}")

    return entries


def apply_custom_hours(grid: list[TimeSlotEntry], hours: CustomHours) -> list[TimeSlotEntry]:
    """Keep entries inside [opening, closing) of a custom-hours override."""
    try:
        open_min = time_str_to_minutes(hours.opening)
        close_min = time_str_to_minutes(hours.closing)
    except ValueError:
        logger.warning(f"Ignoring custom hours with malformed times: {hours}")
        return grid

    kept = []
    for entry in grid:
        interval = _interval_minutes(entry.start_time, entry.end_time)
        if interval is None or (interval[0] >= open_min and interval[1] <= close_min):
            kept.append(entry)
    return kept


# ── Bookings ─────────────────────────────────────────────────────────────


def collect_occupied_intervals(bookings: list, field_id: int | None = None) -> set[tuple[str, str]]:
    """
    Distinct (start, end) intervals blocked by confirmed bookings.

    With a field, bookings scoped to another field are skipped. Without a
    field, only venue-level bookings (field_id NULL) count, so a booking on
    one field never blocks the venue-level grid.
    A booking's slot rows take precedence over its own start/end.
    """
    occupied: set[tuple[str, str]] = set()

    for booking in bookings:
        if booking.field_id is not None and booking.field_id != field_id:
            continue

        slots = list(booking.booking_slots or [])
        if slots:
            for slot in slots:
                occupied.add((slot.slot_start_time, slot.slot_end_time))
        else:
            occupied.add((booking.start_time, booking.end_time))

    return occupied


def is_occupied(entry: TimeSlotEntry, occupied: set[tuple[str, str]]) -> bool:
    """
    True when the entry overlaps an occupied interval (half-open).

    Intervals with unparseable times fall back to exact string matching.
    """
    entry_interval = _interval_minutes(entry.start_time, entry.end_time)

    for start, end in occupied:
        if (entry.start_time, entry.end_time) == (start, end):
            return True
        busy = _interval_minutes(start, end)
        if entry_interval is None or busy is None:
            continue
        if entry_interval[0] < busy[1] and busy[0] < entry_interval[1]:
            return True

    return False


# ── Helpers ──────────────────────────────────────────────────────────────


def sort_by_start(entries: list[TimeSlotEntry]) -> list[TimeSlotEntry]:
    def key(entry: TimeSlotEntry):
        interval = _interval_minutes(entry.start_time, entry.end_time)
        return (interval is None, interval[0] if interval else 0, entry.start_time)

    return sorted(entries, key=key)


def _interval_minutes(start: str, end: str) -> tuple[int, int] | None:
    try:
        return time_str_to_minutes(start), time_str_to_minutes(end)
    except (ValueError, AttributeError):
        return None


def _starts_before(entry: TimeSlotEntry, target_date: date, cutoff: datetime) -> bool:
    """True when the slot starts at or before cutoff. Malformed times → False (kept)."""
    try:
        start_min = time_str_to_minutes(entry.start_time)
    except (ValueError, AttributeError):
        logger.warning(f"Invalid slot time {entry.start_time!r} (slot {entry.id}), keeping it")
        return False

    slot_dt = datetime.combine(target_date, datetime.min.time()) + timedelta(minutes=start_min)
    return slot_dt <= cutoff


def _result(
    target_date: date,
    field_id: int | None,
    verdict: OverrideVerdict,
    slots: list[TimeSlotEntry],
) -> DayAvailability:
    return DayAvailability(
        date=target_date.isoformat(),
        field_id=field_id,
        verdict=verdict,
        slots=slots,
    )
