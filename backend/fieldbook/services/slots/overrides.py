# backend/fieldbook/services/slots/overrides.py
"""
Availability override resolver.

Turns the special-occasion rows in effect on a date into one verdict:

  Closed        → nothing bookable (wins over everything else)
  CustomHours   → grid trimmed to [opening, closing)
  CustomPricing → slots unchanged, rates shown to the player
  NoOverride    → normal availability

Only literal start/end date containment is checked. is_recurring and
recurrence_pattern are stored but not expanded: a yearly closure has to be
re-entered with next year's dates.

Lookup failures fail open (NoOverride) so browsing and booking are never
blocked by the override table.
"""

import logging
from datetime import date

from sqlalchemy.exc import SQLAlchemyError

from .repository import SlotsRepository
from .types import (
    Closed,
    CustomHours,
    CustomPricing,
    NoOverride,
    OverrideType,
    OverrideVerdict,
)

logger = logging.getLogger(__name__)


DEFAULT_CUSTOM_OPENING = "06:00"
DEFAULT_CUSTOM_CLOSING = "23:00"


def resolve_date_override(
    repo: SlotsRepository,
    venue_id: int,
    target_date: date,
    field_id: int | None = None,
) -> OverrideVerdict:
    """Resolve the override verdict for a venue (and optional field) on a date."""
    try:
        overrides = repo.list_date_overrides(venue_id, target_date, field_id)
    except SQLAlchemyError as e:
        logger.error(f"Override lookup failed for venue {venue_id} on {target_date}: {e}")
        return NoOverride()

    return pick_verdict(overrides, field_id)


def pick_verdict(overrides: list, field_id: int | None = None) -> OverrideVerdict:
    """
    Apply precedence to the override rows already known to cover the date.

    closed > custom_hours > custom_pricing. Within one type a row scoped to
    field_id beats a venue-wide row; otherwise the first row wins.
    """
    if not overrides:
        return NoOverride()

    closure = _first_of_type(overrides, OverrideType.CLOSED, field_id)
    if closure is not None:
        return Closed(reason=closure.title)

    hours = _first_of_type(overrides, OverrideType.CUSTOM_HOURS, field_id)
    if hours is not None:
        return CustomHours(
            opening=hours.custom_opening_time or DEFAULT_CUSTOM_OPENING,
            closing=hours.custom_closing_time or DEFAULT_CUSTOM_CLOSING,
        )

    pricing = _first_of_type(overrides, OverrideType.CUSTOM_PRICING, field_id)
    if pricing is not None:
        return CustomPricing(
            day_rate=pricing.custom_day_charges or 0,
            night_rate=pricing.custom_night_charges or 0,
        )

    return NoOverride()


def _first_of_type(overrides: list, override_type: OverrideType, field_id: int | None):
    matching = [o for o in overrides if o.override_type == override_type.value]
    if not matching:
        return None
    if field_id is not None:
        for ovr in matching:
            if ovr.field_id == field_id:
                return ovr
    return matching[0]
