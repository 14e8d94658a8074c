# backend/fieldbook/services/slots/__init__.py
"""
Slots module.

Grid: canonical per-weekday slots, materialized in the store (cached in Redis Sorted Sets)
Availability: per-date bookable slots and per-day summaries (calculated on-the-fly)
"""

from .config import SLOT_DURATION, BookingConfig, get_booking_config
from .repository import SlotsRepository
from .overrides import resolve_date_override
from .generator import (
    SlotGenerationError,
    ensure_time_slots_exist,
    fix_missing_time_slots,
    generate_time_slots_for_venue,
    update_venue_time_slots,
)
from .calculator import get_available_slots, get_day_availability
from .summary import get_venue_availability
from .redis_store import SlotsRedisStore
from .invalidator import invalidate_venue_cache

__all__ = [
    "SLOT_DURATION",
    "BookingConfig",
    "get_booking_config",
    "SlotsRepository",
    "resolve_date_override",
    "SlotGenerationError",
    "ensure_time_slots_exist",
    "fix_missing_time_slots",
    "generate_time_slots_for_venue",
    "update_venue_time_slots",
    "get_available_slots",
    "get_day_availability",
    "get_venue_availability",
    "SlotsRedisStore",
    "invalidate_venue_cache",
]
