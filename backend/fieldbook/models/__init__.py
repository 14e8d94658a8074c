from .generated import (
    Base,
    Bookings,
    BookingSlots,
    TimeSlots,
    VenueFields,
    Venues,
    VenueSpecialOccasions,
)

__all__ = [
    "Base",
    "Bookings",
    "BookingSlots",
    "TimeSlots",
    "VenueFields",
    "Venues",
    "VenueSpecialOccasions",
]
