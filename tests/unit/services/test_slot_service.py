from datetime import date, datetime, time, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import DOCTOR_ID, NOW, PATIENT_ID
from app.core.exceptions import (
    InPastError,
    InvalidSlotTimeError,
    SameDayNotAllowedError,
    SlotError,
    TooFarInAdvanceError,
    ValidationError,
)
from app.services.appointment_service import book_appointment
from app.services.slot_service import (
    bookable_dates,
    get_available_slots_for_date,
    is_valid_slot,
    slot_start_times,
    slot_times_for_date,
    to_clinic_naive,
    validate_slot,
)

VALID_TIMES = [time(16 + i // 2, 30 * (i % 2)) for i in range(12)]


class TestSlotGrid:
    def test_twelve_half_hour_slots_from_four_pm(self) -> None:
        assert slot_start_times() == VALID_TIMES
        assert slot_start_times()[0] == time(16, 0)
        assert slot_start_times()[-1] == time(21, 30)

    def test_slot_times_for_date(self) -> None:
        slots = slot_times_for_date(date(2025, 7, 20))

        assert len(slots) == 12
        assert slots[0] == datetime(2025, 7, 20, 16, 0)
        assert all(b - a == timedelta(minutes=30) for a, b in zip(slots, slots[1:]))

    def test_bookable_dates_are_the_next_seven_days(self) -> None:
        days = bookable_dates(NOW)

        assert days[0] == date(2025, 7, 16)
        assert days[-1] == date(2025, 7, 22)
        assert len(days) == 7


class TestValidateSlot:
    @pytest.mark.parametrize("days_ahead", range(1, 8))
    def test_accepts_every_slot_in_window(self, days_ahead: int) -> None:
        day = NOW.date() + timedelta(days=days_ahead)
        for t in VALID_TIMES:
            validate_slot(datetime.combine(day, t), NOW)

    def test_window_holds_84_bookable_slots(self) -> None:
        candidates = [s for d in bookable_dates(NOW) for s in slot_times_for_date(d)]

        assert len(candidates) == 84
        assert all(is_valid_slot(c, NOW) for c in candidates)

    def test_rejects_same_day(self) -> None:
        with pytest.raises(SameDayNotAllowedError, match="Same-day"):
            validate_slot(datetime.combine(NOW.date(), time(18, 0)), NOW)

    def test_rejects_same_day_even_when_later_than_now(self) -> None:
        early = datetime(2025, 7, 15, 8, 0)

        with pytest.raises(SameDayNotAllowedError):
            validate_slot(datetime(2025, 7, 15, 21, 30), early)

    def test_rejects_day_eight(self) -> None:
        with pytest.raises(TooFarInAdvanceError):
            validate_slot(datetime.combine(NOW.date() + timedelta(days=8), time(16, 0)), NOW)

    def test_rejects_past_day(self) -> None:
        with pytest.raises(InPastError):
            validate_slot(datetime(2025, 7, 14, 16, 0), NOW)

    @pytest.mark.parametrize(
        "slot_time",
        [time(15, 30), time(22, 0), time(16, 15), time(16, 0, 30), time(9, 0)],
    )
    def test_rejects_off_grid_times(self, slot_time: time) -> None:
        with pytest.raises(InvalidSlotTimeError, match="16:00 and 21:30"):
            validate_slot(datetime.combine(date(2025, 7, 17), slot_time), NOW)

    def test_window_rule_wins_over_time_rule(self) -> None:
        # Off-grid and too far: the first failing rule is reported
        with pytest.raises(TooFarInAdvanceError):
            validate_slot(datetime(2025, 7, 30, 15, 30), NOW)

    def test_slot_errors_are_validation_errors(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_slot(datetime(2025, 7, 17, 22, 0), NOW)

        assert isinstance(exc_info.value, SlotError)
        assert exc_info.value.kind == "invalid_slot_time"
        assert exc_info.value.status_code == 422


class TestToClinicNaive:
    def test_naive_is_taken_as_clinic_time(self) -> None:
        assert to_clinic_naive(datetime(2025, 7, 20, 16, 0)) == datetime(2025, 7, 20, 16, 0)

    def test_aware_is_converted_and_stripped(self) -> None:
        aware = datetime(2025, 7, 20, 13, 0, tzinfo=timezone.utc)

        converted = to_clinic_naive(aware)

        assert converted.tzinfo is None
        # Africa/Cairo is UTC+3 in July
        assert converted == datetime(2025, 7, 20, 16, 0)


class TestAvailableSlots:
    @pytest.mark.asyncio
    async def test_marks_booked_slot_unavailable(self, session: AsyncSession) -> None:
        await book_appointment(session, PATIENT_ID, DOCTOR_ID, datetime(2025, 7, 20, 17, 0), now=NOW)

        slots = await get_available_slots_for_date(session, DOCTOR_ID, date(2025, 7, 20), now=NOW)

        availability = dict(slots)
        assert len(slots) == 12
        assert availability[datetime(2025, 7, 20, 17, 0)] is False
        assert sum(availability.values()) == 11

    @pytest.mark.asyncio
    async def test_same_day_slots_are_unavailable(self, session: AsyncSession) -> None:
        slots = await get_available_slots_for_date(session, DOCTOR_ID, NOW.date(), now=NOW)

        assert [available for _, available in slots] == [False] * 12
