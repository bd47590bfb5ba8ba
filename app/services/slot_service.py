from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import (
    InPastError,
    InvalidSlotTimeError,
    SameDayNotAllowedError,
    SlotError,
    TooFarInAdvanceError,
)
from app.models.appointment import Appointment


def clinic_now() -> datetime:
    """Current wall-clock time in the clinic's zone, naive like the stored appointment times."""
    return datetime.now(UTC).astimezone(ZoneInfo(settings.clinic_timezone)).replace(tzinfo=None)


def to_clinic_naive(dt: datetime) -> datetime:
    """Convert an aware datetime to naive clinic time; naive input is taken as clinic time already."""
    if dt.tzinfo is not None:
        return dt.astimezone(ZoneInfo(settings.clinic_timezone)).replace(tzinfo=None)
    return dt


def slot_start_times() -> list[time]:
    first = datetime.combine(date.min, time(settings.first_slot_hour, settings.first_slot_minute))
    step = timedelta(minutes=settings.slot_duration_minutes)
    return [(first + i * step).time() for i in range(settings.slots_per_day)]


def slot_times_for_date(d: date) -> list[datetime]:
    """Slot start times for the given date, in clinic time."""
    return [datetime.combine(d, t) for t in slot_start_times()]


def bookable_dates(now: datetime) -> list[date]:
    today = now.date()
    return [today + timedelta(days=i) for i in range(1, settings.booking_window_days + 1)]


def validate_slot(candidate: datetime, now: datetime) -> None:
    """Check a candidate appointment time against the booking window and slot grid.

    Rules are applied in order and the first failure is raised:

    * more than ``booking_window_days`` calendar days ahead -> TooFarInAdvanceError
    * same calendar day as ``now`` -> SameDayNotAllowedError
    * an earlier calendar day -> InPastError
    * time of day not on the slot grid -> InvalidSlotTimeError
    """
    days_ahead = (candidate.date() - now.date()).days
    if days_ahead > settings.booking_window_days:
        raise TooFarInAdvanceError(
            f"You can only make appointments up to {settings.booking_window_days} days in advance."
        )
    if days_ahead == 0:
        raise SameDayNotAllowedError("Same-day appointments are not allowed.")
    if days_ahead < 0:
        raise InPastError("You cannot choose a past date.")
    slots = slot_start_times()
    if candidate.time() not in slots:
        raise InvalidSlotTimeError(
            "Invalid appointment time. Available slots are every "
            f"{settings.slot_duration_minutes} minutes between "
            f"{slots[0].strftime('%H:%M')} and {slots[-1].strftime('%H:%M')}."
        )


def is_valid_slot(candidate: datetime, now: datetime) -> bool:
    try:
        validate_slot(candidate, now)
    except SlotError:
        return False
    return True


async def get_booked_slot_starts(
    session: AsyncSession, doctor_id: int, start_inclusive: datetime, end_exclusive: datetime
) -> set[datetime]:
    result = await session.execute(
        select(Appointment.scheduled_at).where(
            Appointment.doctor_id == doctor_id,
            Appointment.is_confirmed == True,  # noqa: E712
            Appointment.scheduled_at >= start_inclusive,
            Appointment.scheduled_at < end_exclusive,
        )
    )
    return {row[0] for row in result.all()}


async def get_available_slots_for_date(
    session: AsyncSession, doctor_id: int, d: date, now: datetime | None = None
) -> list[tuple[datetime, bool]]:
    """Returns list of (slot_start, available) for one doctor's day.

    A slot is available when nobody holds it and it can be booked right now.
    """
    now = now or clinic_now()
    slots = slot_times_for_date(d)
    start = datetime.combine(d, time.min)
    booked = await get_booked_slot_starts(session, doctor_id, start, start + timedelta(days=1))
    return [(s, s not in booked and is_valid_slot(s, now)) for s in slots]
