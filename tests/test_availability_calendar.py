from __future__ import annotations

from datetime import date, datetime, time
from uuid import uuid4

import pytest

from app.core.enums import BookingStatusEnum, WeekdayEnum
from app.modules.matching.availability import (
    daily_load,
    free_slots,
    has_contiguous_free_span,
    requested_range,
    template_slots,
)
from app.modules.matching.domain import BookedSlot, PhotographerSnapshot, TimeOffBlock
from app.modules.matching.geo import GeoPoint
from app.shared.exceptions import CrossesMidnightException, InvalidDurationException

MONDAY = date(2030, 1, 7)


def make_photographer(
    starts: list[str],
    *,
    slot_minutes: int = 60,
    bookings: tuple[BookedSlot, ...] = (),
    time_offs: tuple[TimeOffBlock, ...] = (),
) -> PhotographerSnapshot:
    return PhotographerSnapshot(
        id=uuid4(),
        name="Ana",
        services=frozenset({"foto"}),
        base=GeoPoint(0, 0),
        radius_km=20,
        slot_minutes=slot_minutes,
        availability={WeekdayEnum.MONDAY: tuple(time.fromisoformat(item) for item in starts)},
        bookings=bookings,
        time_offs=time_offs,
    )


def booked(start: str, end: str, status: BookingStatusEnum = BookingStatusEnum.CONFIRMED, day: date = MONDAY):
    return BookedSlot(
        booking_id=uuid4(),
        day=day,
        start_time=time.fromisoformat(start),
        end_time=time.fromisoformat(end),
        status=status,
    )


def test_free_slots_expand_template_in_order() -> None:
    photographer = make_photographer(["11:00", "09:00", "10:00"])

    slots = free_slots(photographer, MONDAY)

    assert [slot.start.time() for slot in slots] == [time(9), time(10), time(11)]
    assert all(slot.minutes == 60 for slot in slots)


def test_other_weekdays_have_no_slots() -> None:
    photographer = make_photographer(["09:00"])
    assert free_slots(photographer, date(2030, 1, 8)) == []


def test_confirmed_and_completed_bookings_remove_slots() -> None:
    photographer = make_photographer(
        ["09:00", "10:00", "11:00"],
        bookings=(
            booked("09:00", "10:00"),
            booked("11:00", "12:00", BookingStatusEnum.COMPLETED),
        ),
    )
    assert [slot.start.time() for slot in free_slots(photographer, MONDAY)] == [time(10)]


def test_cancelled_and_draft_bookings_do_not_block() -> None:
    photographer = make_photographer(
        ["09:00", "10:00"],
        bookings=(
            booked("09:00", "10:00", BookingStatusEnum.CANCELLED),
            booked("10:00", "11:00", BookingStatusEnum.DRAFT),
        ),
    )
    assert len(free_slots(photographer, MONDAY)) == 2


def test_back_to_back_booking_does_not_remove_adjacent_slot() -> None:
    photographer = make_photographer(["09:00", "10:00"], bookings=(booked("08:00", "09:00"),))
    assert len(free_slots(photographer, MONDAY)) == 2


def test_booking_overrunning_by_one_minute_blocks_next_slot() -> None:
    photographer = make_photographer(["09:00", "10:00"], bookings=(booked("09:00", "10:01"),))
    assert free_slots(photographer, MONDAY) == []


def test_multi_day_time_off_blocks_whole_day() -> None:
    block = TimeOffBlock(id=uuid4(), start=datetime(2030, 1, 5, 12), end=datetime(2030, 1, 9, 0))
    photographer = make_photographer(["09:00", "15:00"], time_offs=(block,))
    assert free_slots(photographer, MONDAY) == []


def test_partial_time_off_blocks_intersecting_slots_only() -> None:
    block = TimeOffBlock(id=uuid4(), start=datetime(2030, 1, 7, 9, 30), end=datetime(2030, 1, 7, 10, 0))
    photographer = make_photographer(["09:00", "10:00"], time_offs=(block,))
    assert [slot.start.time() for slot in free_slots(photographer, MONDAY)] == [time(10)]


def test_template_slot_reaching_midnight_is_dropped() -> None:
    photographer = make_photographer(["22:00", "23:00"])
    assert [slot.start.time() for slot in template_slots(photographer, MONDAY)] == [time(22)]


def test_ninety_minutes_needs_two_adjacent_free_slots() -> None:
    photographer = make_photographer(["09:00", "10:00", "11:00"])
    assert has_contiguous_free_span(photographer, MONDAY, 90, time(9)) is True


def test_ninety_minutes_fails_when_second_slot_is_booked() -> None:
    photographer = make_photographer(
        ["09:00", "10:00", "11:00", "14:00", "15:00"],
        bookings=(booked("10:00", "11:00"),),
    )

    assert has_contiguous_free_span(photographer, MONDAY, 90, time(9)) is False
    assert has_contiguous_free_span(photographer, MONDAY, 90, time(14)) is True


def test_gap_in_template_breaks_contiguity() -> None:
    photographer = make_photographer(["09:00", "11:00"])
    assert has_contiguous_free_span(photographer, MONDAY, 90, time(9)) is False


def test_desired_start_must_be_a_template_start() -> None:
    photographer = make_photographer(["09:00", "10:00"])
    assert has_contiguous_free_span(photographer, MONDAY, 30, time(9, 30)) is False


def test_excluded_booking_is_ignored() -> None:
    own = booked("09:00", "10:00")
    photographer = make_photographer(["09:00"], bookings=(own,))

    assert has_contiguous_free_span(photographer, MONDAY, 60, time(9)) is False
    assert has_contiguous_free_span(photographer, MONDAY, 60, time(9), excluding_booking_id=own.booking_id) is True


@pytest.mark.parametrize("minutes", [0, -30])
def test_non_positive_duration_is_rejected(minutes: int) -> None:
    with pytest.raises(InvalidDurationException):
        requested_range(MONDAY, time(9), minutes)


def test_request_crossing_midnight_is_rejected() -> None:
    with pytest.raises(CrossesMidnightException):
        requested_range(MONDAY, time(23, 30), 60)
    with pytest.raises(CrossesMidnightException):
        requested_range(MONDAY, time(23), 60)


def test_daily_load_counts_busy_bookings_on_day() -> None:
    photographer = make_photographer(
        ["09:00"],
        bookings=(
            booked("09:00", "10:00"),
            booked("13:00", "14:00", BookingStatusEnum.COMPLETED),
            booked("15:00", "16:00", BookingStatusEnum.CANCELLED),
            booked("09:00", "10:00", day=date(2030, 1, 8)),
        ),
    )
    assert daily_load(photographer, MONDAY) == 2
