"""Tests for the slot availability calculator."""

from datetime import datetime
from unittest.mock import MagicMock

from redis import RedisError
from sqlalchemy.exc import OperationalError

from fieldbook.models.generated import TimeSlots
from fieldbook.services.slots import (
    SlotsRepository,
    get_available_slots,
    get_day_availability,
)
from fieldbook.services.slots.calculator import collect_occupied_intervals, is_occupied
from fieldbook.services.slots.config import day_of_week
from fieldbook.services.slots.types import Closed, CustomPricing, TimeSlotEntry
from tests.conftest import (
    FUTURE_DATE,
    NOW,
    make_booking,
    make_override,
    make_venue,
    slot_times,
)


def _slots(repo, venue, field=None, target_date=FUTURE_DATE, now=NOW, **kwargs):
    field_id = field.id if field is not None else None
    return get_available_slots(repo, venue.id, target_date, field_id, now=now, **kwargs)


def _db_error():
    return OperationalError("SELECT", {}, Exception("backend unavailable"))


class TestBaseGrid:
    def test_full_day_for_venue_and_field(self, db, repo):
        venue = make_venue(db, fields=["Field A"])

        venue_slots = _slots(repo, venue)
        field_slots = _slots(repo, venue, venue.fields[0])

        assert len(venue_slots) == 17
        assert len(field_slots) == 17
        assert slot_times(venue_slots) == slot_times(field_slots)
        assert slot_times(venue_slots)[0] == ("06:00", "07:00")
        assert slot_times(venue_slots)[-1] == ("22:00", "23:00")
        assert all(s.field_id is None for s in venue_slots)
        assert all(s.field_id == venue.fields[0].id for s in field_slots)
        assert all(s.day_of_week == day_of_week(FUTURE_DATE) for s in venue_slots)

    def test_inactive_weekday(self, db, repo):
        other_days = [d for d in range(7) if d != day_of_week(FUTURE_DATE)]
        venue = make_venue(db, days_available=other_days)

        assert _slots(repo, venue) == []

    def test_generates_missing_grid_on_read(self, db, repo):
        venue = make_venue(db, fields=["Field A"], with_grid=False)

        assert len(_slots(repo, venue, venue.fields[0])) == 17
        assert repo.venue_has_grid(venue.id)

    def test_sorted_by_start_time(self, db, repo):
        venue = make_venue(db, opening_time="08:00", closing_time="11:00")
        starts = [s.start_time for s in _slots(repo, venue)]
        assert starts == ["08:00", "09:00", "10:00"]


class TestBookings:
    def test_field_booking_blocks_only_that_field(self, db, repo):
        venue = make_venue(db, fields=["Field A"])
        field = venue.fields[0]
        make_booking(db, venue, "10:00", "11:00", field=field)

        field_slots = _slots(repo, venue, field)
        assert len(field_slots) == 16
        assert ("10:00", "11:00") not in slot_times(field_slots)
        assert len(_slots(repo, venue)) == 17

    def test_booking_on_other_field_does_not_block(self, db, repo):
        venue = make_venue(db, fields=["Field A", "Field B"])
        field_a, field_b = venue.fields
        make_booking(db, venue, "10:00", "11:00", field=field_b)

        assert len(_slots(repo, venue, field_a)) == 17
        assert len(_slots(repo, venue, field_b)) == 16

    def test_venue_level_booking_blocks_venue_grid(self, db, repo):
        venue = make_venue(db, fields=["Field A"])
        make_booking(db, venue, "18:00", "19:00")

        venue_slots = _slots(repo, venue)
        assert len(venue_slots) == 16
        assert ("18:00", "19:00") not in slot_times(venue_slots)

    def test_only_confirmed_bookings_block(self, db, repo):
        venue = make_venue(db)
        make_booking(db, venue, "10:00", "11:00", status="pending")
        make_booking(db, venue, "11:00", "12:00", status="cancelled")
        make_booking(db, venue, "12:00", "13:00", status="completed")

        assert len(_slots(repo, venue)) == 17

    def test_booking_on_other_date_does_not_block(self, db, repo):
        venue = make_venue(db)
        make_booking(db, venue, "10:00", "11:00", booking_date=FUTURE_DATE.replace(day=6))

        assert len(_slots(repo, venue)) == 17

    def test_booking_slots_take_precedence(self, db, repo):
        venue = make_venue(db)
        make_booking(
            db, venue, "10:00", "11:00",
            slots=[("14:00", "15:00"), ("15:00", "16:00")],
        )

        times = slot_times(_slots(repo, venue))
        assert len(times) == 15
        assert ("10:00", "11:00") in times
        assert ("14:00", "15:00") not in times
        assert ("15:00", "16:00") not in times

    def test_multi_hour_booking_without_slots_blocks_overlapped_entries(self, db, repo):
        venue = make_venue(db)
        make_booking(db, venue, "10:00", "12:00")

        times = slot_times(_slots(repo, venue))
        assert ("10:00", "11:00") not in times
        assert ("11:00", "12:00") not in times
        assert ("09:00", "10:00") in times
        assert ("12:00", "13:00") in times

    def test_straddling_booking_blocks_both_entries(self, db, repo):
        venue = make_venue(db)
        make_booking(db, venue, "10:30", "11:30")

        times = slot_times(_slots(repo, venue))
        assert len(times) == 15
        assert ("10:00", "11:00") not in times
        assert ("11:00", "12:00") not in times

    def test_seconds_in_booking_times(self, db, repo):
        venue = make_venue(db)
        make_booking(db, venue, "10:00:00", "11:00:00")

        assert ("10:00", "11:00") not in slot_times(_slots(repo, venue))

    def test_booking_read_failure_fails_closed(self, db):
        venue = make_venue(db)
        repo = SlotsRepository(db)
        repo.list_confirmed_bookings = MagicMock(side_effect=_db_error())

        assert _slots(repo, venue) == []


class TestOverrides:
    def test_closed_override_empties_every_scope(self, db, repo):
        venue = make_venue(db, fields=["Field A"])
        make_override(db, venue, "closed", title="Tournament")

        assert _slots(repo, venue) == []
        assert _slots(repo, venue, venue.fields[0]) == []

        result = get_day_availability(repo, venue.id, FUTURE_DATE, now=NOW)
        assert result.is_closed
        assert result.verdict == Closed(reason="Tournament")

    def test_custom_hours_trim_grid(self, db, repo):
        venue = make_venue(db)
        make_override(
            db, venue, "custom_hours",
            custom_opening_time="10:00", custom_closing_time="14:00",
        )

        assert slot_times(_slots(repo, venue)) == [
            ("10:00", "11:00"),
            ("11:00", "12:00"),
            ("12:00", "13:00"),
            ("13:00", "14:00"),
        ]

    def test_custom_pricing_keeps_slots(self, db, repo):
        venue = make_venue(db)
        make_override(db, venue, "custom_pricing", custom_day_charges=1200, custom_night_charges=1800)

        result = get_day_availability(repo, venue.id, FUTURE_DATE, now=NOW)
        assert len(result.slots) == 17
        assert result.verdict == CustomPricing(day_rate=1200, night_rate=1800)

    def test_override_failure_fails_open(self, db):
        venue = make_venue(db)
        repo = SlotsRepository(db)
        repo.list_date_overrides = MagicMock(side_effect=_db_error())

        assert len(_slots(repo, venue)) == 17


class TestFieldStatus:
    def test_closed_field_has_no_slots(self, db, repo):
        venue = make_venue(db, fields=["Field A"])
        field = venue.fields[0]
        field.status = "closed"
        db.commit()

        assert _slots(repo, venue, field) == []
        assert len(_slots(repo, venue)) == 17

    def test_maintenance_field_has_no_slots(self, db, repo):
        venue = make_venue(db, fields=["Field A"])
        field = venue.fields[0]
        field.status = "maintenance"
        db.commit()

        assert _slots(repo, venue, field) == []

    def test_grid_read_failure_fails_closed(self, db):
        venue = make_venue(db)
        repo = SlotsRepository(db)
        repo.list_grid_entries = MagicMock(side_effect=_db_error())

        assert _slots(repo, venue) == []


class TestSameDayBuffer:
    def test_slot_at_buffer_boundary_excluded(self, db, repo):
        venue = make_venue(db)
        now = datetime.combine(FUTURE_DATE, datetime.min.time()).replace(hour=9, minute=30)

        starts = [s.start_time for s in _slots(repo, venue, now=now)]
        assert "10:00" not in starts
        assert starts[0] == "11:00"

    def test_slot_just_after_buffer_retained(self, db, repo):
        venue = make_venue(db)
        now = datetime.combine(FUTURE_DATE, datetime.min.time()).replace(hour=9, minute=29)

        starts = [s.start_time for s in _slots(repo, venue, now=now)]
        assert starts[0] == "10:00"
        assert len(starts) == 13

    def test_future_date_not_filtered(self, db, repo):
        venue = make_venue(db)
        late_evening = datetime.combine(FUTURE_DATE.replace(day=4), datetime.min.time()).replace(hour=23)

        assert len(_slots(repo, venue, now=late_evening)) == 17

    def test_malformed_slot_time_kept(self, db, repo):
        venue = make_venue(db, opening_time="20:00", closing_time="22:00")
        db.add(TimeSlots(
            venue_id=venue.id,
            day_of_week=day_of_week(FUTURE_DATE),
            start_time="late",
            end_time="later",
        ))
        db.commit()
        now = datetime.combine(FUTURE_DATE, datetime.min.time()).replace(hour=20, minute=45)

        times = slot_times(_slots(repo, venue, now=now))
        assert times == [("late", "later")]


class TestGridCache:
    def test_cache_miss_reads_store_and_fills_cache(self, db, repo):
        venue = make_venue(db)
        redis = MagicMock()
        redis.exists.return_value = 0
        pipe = redis.pipeline.return_value

        assert len(_slots(repo, venue, redis=redis)) == 17
        pipe.zadd.assert_called_once()
        mapping = pipe.zadd.call_args.args[1]
        assert len(mapping) == 17
        pipe.execute.assert_called_once()

    def test_cache_hit_skips_store(self, db):
        venue = make_venue(db)
        repo = SlotsRepository(db)
        repo.list_grid_entries = MagicMock(side_effect=AssertionError("store read"))
        cached = [
            TimeSlotEntry(venue_id=venue.id, field_id=None, day_of_week=day_of_week(FUTURE_DATE),
                          start_time="09:00", end_time="10:00", id=1),
        ]
        redis = MagicMock()
        redis.exists.return_value = 1
        redis.zrange.return_value = [
            '{"day_of_week": %d, "end_time": "10:00", "field_id": null, "id": 1, '
            '"is_active": true, "start_time": "09:00", "venue_id": %d}'
            % (day_of_week(FUTURE_DATE), venue.id)
        ]

        assert _slots(repo, venue, redis=redis) == cached

    def test_cache_error_falls_back_to_store(self, db, repo):
        venue = make_venue(db)
        redis = MagicMock()
        redis.exists.side_effect = RedisError("connection refused")
        redis.pipeline.side_effect = RedisError("connection refused")

        assert len(_slots(repo, venue, redis=redis)) == 17


class TestOccupiedIntervals:
    def _booking(self, start, end, field_id=None, slots=()):
        booking = MagicMock()
        booking.start_time = start
        booking.end_time = end
        booking.field_id = field_id
        booking.booking_slots = [
            MagicMock(slot_start_time=s, slot_end_time=e) for s, e in slots
        ]
        return booking

    def test_distinct_intervals(self):
        bookings = [
            self._booking("10:00", "11:00"),
            self._booking("09:00", "11:00", slots=[("09:00", "10:00"), ("10:00", "11:00")]),
        ]
        assert collect_occupied_intervals(bookings) == {("10:00", "11:00"), ("09:00", "10:00")}

    def test_field_scoping(self):
        bookings = [
            self._booking("10:00", "11:00", field_id=1),
            self._booking("11:00", "12:00", field_id=2),
            self._booking("12:00", "13:00"),
        ]
        assert collect_occupied_intervals(bookings, 1) == {("10:00", "11:00"), ("12:00", "13:00")}
        assert collect_occupied_intervals(bookings) == {("12:00", "13:00")}

    def test_malformed_interval_matches_exactly(self):
        entry = TimeSlotEntry(venue_id=1, field_id=None, day_of_week=0, start_time="x", end_time="y")
        assert is_occupied(entry, {("x", "y")})
        assert not is_occupied(entry, {("10:00", "11:00")})

    def test_adjacent_interval_not_occupied(self):
        entry = TimeSlotEntry(venue_id=1, field_id=None, day_of_week=0, start_time="11:00", end_time="12:00")
        assert not is_occupied(entry, {("10:00", "11:00"), ("12:00", "13:00")})
