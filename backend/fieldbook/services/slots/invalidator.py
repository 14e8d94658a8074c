# backend/fieldbook/services/slots/invalidator.py
"""
Cache invalidation for venue slot grids.

Triggers:
✓ Grid regenerated (schedule edit, field added/removed, self-healing)
✓ Manual admin invalidation

Does NOT trigger:
✗ Booking created/cancelled (bookings are read live)
✗ Special occasion created/deleted (resolved at query time)
✗ Field status toggled (applied after the cache read)
"""

import logging
from datetime import date, timedelta
from redis import Redis, RedisError

from .redis_store import SlotsRedisStore

logger = logging.getLogger(__name__)


def invalidate_venue_cache(redis: Redis | None, venue_id: int) -> int:
    """
    Invalidate cached grids for a venue.

    Returns:
        Number of deleted cache keys (0 without Redis or on Redis error).
    """
    if redis is None:
        return 0
    store = SlotsRedisStore(redis)
    try:
        return store.delete_venue_grids(venue_id)
    except RedisError as e:
        logger.warning(f"Grid cache invalidation failed for venue {venue_id}: {e}")
        return 0


def get_affected_dates(
    date_start: date,
    date_end: date,
) -> list[date]:
    """
    Get list of dates in range [date_start, date_end].

    A reversed range is swapped.
    """
    if date_start > date_end:
        date_start, date_end = date_end, date_start

    dates = []
    current = date_start
    while current <= date_end:
        dates.append(current)
        current += timedelta(days=1)

    return dates
