# backend/fieldbook/services/slots/redis_store.py
"""
Redis cache for the canonical slot grid using Sorted Sets.

Key format: slots:grid:{venue_id}:{scope}:{day_of_week}
            scope = field id, or "venue" for the venue-level grid
Value: Sorted Set where member = JSON slot entry, score = start minute.

Sentinel: "__empty__" with score=-1 marks "loaded, zero rows".
The grid only changes on regeneration, which drops every key of the venue.
"""

import json
from redis import Redis

from .config import BookingConfig, get_booking_config, time_str_to_minutes
from .types import TimeSlotEntry


EMPTY_SENTINEL = "__empty__"


class SlotsRedisStore:
    """Redis storage wrapper using Sorted Sets for grid data."""

    KEY_PREFIX = "slots:grid"

    def __init__(self, redis: Redis, config: BookingConfig | None = None):
        self.redis = redis
        self.config = config or get_booking_config()

    def _key(self, venue_id: int, field_id: int | None, day_of_week: int) -> str:
        scope = "venue" if field_id is None else str(field_id)
        return f"{self.KEY_PREFIX}:{venue_id}:{scope}:{day_of_week}"

    # ── Write ────────────────────────────────────────────────────────────

    def store_grid(
        self,
        venue_id: int,
        field_id: int | None,
        day_of_week: int,
        entries: list[TimeSlotEntry],
    ) -> None:
        """Replace the cached grid of one (venue, scope, weekday)."""
        key = self._key(venue_id, field_id, day_of_week)
        pipe = self.redis.pipeline()

        pipe.delete(key)

        if entries:
            mapping = {
                json.dumps(entry.to_dict(), sort_keys=True): _score(entry)
                for entry in entries
            }
            pipe.zadd(key, mapping)
        else:
            # Empty grid — sentinel so EXISTS returns True
            pipe.zadd(key, {EMPTY_SENTINEL: -1})

        pipe.expire(key, self.config.cache_ttl_seconds)
        pipe.execute()

    # ── Read ─────────────────────────────────────────────────────────────

    def get_grid(
        self,
        venue_id: int,
        field_id: int | None,
        day_of_week: int,
    ) -> list[TimeSlotEntry] | None:
        """
        Get the cached grid ordered by start time.

        Returns:
            List of entries, or None on cache miss.
        """
        key = self._key(venue_id, field_id, day_of_week)
        if not self.redis.exists(key):
            return None

        members = self.redis.zrange(key, 0, -1)
        entries = []
        for member in members:
            raw = member.decode() if isinstance(member, bytes) else member
            if raw == EMPTY_SENTINEL:
                continue
            entries.append(TimeSlotEntry.from_dict(json.loads(raw)))
        return entries

    # ── Delete ───────────────────────────────────────────────────────────

    def delete_venue_grids(self, venue_id: int) -> int:
        """
        Delete every cached grid of a venue.

        Returns:
            Number of deleted keys.
        """
        keys = list(self.redis.scan_iter(match=f"{self.KEY_PREFIX}:{venue_id}:*"))
        if not keys:
            return 0
        return self.redis.delete(*keys)


def _score(entry: TimeSlotEntry) -> float:
    try:
        return float(time_str_to_minutes(entry.start_time))
    except ValueError:
        # Malformed rows sort last but stay in the grid
        return float(24 * 60)
