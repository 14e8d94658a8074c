"""
backend/fieldbook/services/special_occasions.py

Holiday templates offered when a venue owner adds closures.
Dates are fixed-calendar approximations; religious holidays move every
year and must be checked before saving.
"""

from datetime import date


def get_holiday_templates(year: int | None = None) -> list[dict]:
    year = year or date.today().year

    return [
        {
            "title": "New Year's Day",
            "description": "Venue closed for New Year celebration",
            "override_type": "closed",
            "dates": [date(year, 1, 1)],
        },
        {
            "title": "Independence Day",
            "description": "Venue closed for Independence Day",
            "override_type": "closed",
            "dates": [date(year, 8, 14)],
        },
        {
            "title": "Eid ul-Fitr",
            "description": "Venue closed for Eid celebration",
            "override_type": "closed",
            "dates": [date(year, 4, 21), date(year, 4, 22)],
        },
        {
            "title": "Eid ul-Adha",
            "description": "Venue closed for Eid celebration",
            "override_type": "closed",
            "dates": [date(year, 6, 28), date(year, 6, 29)],
        },
        {
            "title": "Christmas Day",
            "description": "Venue closed for Christmas",
            "override_type": "closed",
            "dates": [date(year, 12, 25)],
        },
    ]
