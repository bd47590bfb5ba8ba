import logging
from datetime import date, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    AppointmentNotActiveError,
    AppointmentNotFoundError,
    AuthorizationError,
    OriginalNotFoundError,
    SameSlotRescheduleError,
    SlotTakenError,
    TooEarlyError,
)
from app.models.appointment import Appointment, AppointmentState, AppointmentView
from app.models.person import ActorRole
from app.services import appointment_store as store
from app.services.directory_service import ensure_actor_exists, ensure_doctor_exists
from app.services.slot_service import clinic_now, to_clinic_naive, validate_slot
from app.services.status_service import resolve_status

logger = logging.getLogger(__name__)


async def book_appointment(
    session: AsyncSession,
    patient_id: int,
    doctor_id: int,
    scheduled_at: datetime,
    now: datetime | None = None,
) -> Appointment:
    """Book a confirmed appointment for ``patient_id`` with ``doctor_id``.

    Everything before the insert is read-only, so a failure leaves no trace.
    """
    scheduled_at = to_clinic_naive(scheduled_at)
    await ensure_doctor_exists(session, doctor_id)
    await ensure_actor_exists(session, patient_id, ActorRole.PATIENT)
    validate_slot(scheduled_at, now or clinic_now())
    # Early exit; the partial unique index is what actually guarantees exclusivity
    existing = await store.find_active_slot(session, doctor_id, ActorRole.DOCTOR, scheduled_at)
    if existing is not None:
        raise SlotTakenError(doctor_id, scheduled_at)
    confirmed = await resolve_status(session, AppointmentState.CONFIRMED)
    appointment = await store.insert_appointment(session, doctor_id, patient_id, scheduled_at, confirmed)
    logger.info(
        "Appointment %s booked: doctor=%s patient=%s at %s",
        appointment.id,
        doctor_id,
        patient_id,
        scheduled_at,
    )
    return appointment


async def list_appointments_by_day(
    session: AsyncSession, actor_id: int, role: ActorRole | str, day: date
) -> list[AppointmentView]:
    await ensure_actor_exists(session, actor_id, role)
    appointments = await store.find_active_by_day(session, actor_id, role, day)
    return await store.load_views(session, appointments)


async def get_appointment_by_slot(
    session: AsyncSession, actor_id: int, role: ActorRole | str, instant: datetime
) -> AppointmentView:
    await ensure_actor_exists(session, actor_id, role)
    appointment = await store.find_active_slot(session, actor_id, role, to_clinic_naive(instant))
    if appointment is None:
        raise AppointmentNotFoundError("No appointment found at the specified date and time.")
    return await appointment_view(session, appointment)


async def appointment_view(session: AsyncSession, appointment: Appointment) -> AppointmentView:
    views = await store.load_views(session, [appointment])
    return views[0]


def _ensure_patient_owns(appointment: Appointment, patient_id: int, action: str) -> None:
    if appointment.patient_id != patient_id:
        raise AuthorizationError(f"Only the patient who booked the appointment can {action} it.")


async def reschedule_appointment(
    session: AsyncSession,
    patient_id: int,
    doctor_id: int,
    old_at: datetime,
    new_at: datetime,
    now: datetime | None = None,
) -> bool:
    """Move a confirmed appointment to a new slot with the same doctor.

    The old row is postponed and a new one booked inside a single SAVEPOINT;
    if booking the new slot fails for any reason the old appointment stays confirmed.
    """
    old_at = to_clinic_naive(old_at)
    new_at = to_clinic_naive(new_at)
    await ensure_doctor_exists(session, doctor_id)
    appointment = await store.find_active_slot(session, doctor_id, ActorRole.DOCTOR, old_at)
    if appointment is None:
        raise OriginalNotFoundError("Original appointment not found or already cancelled.")
    _ensure_patient_owns(appointment, patient_id, "reschedule")
    if new_at == old_at:
        raise SameSlotRescheduleError("The new appointment time must differ from the current one.")

    # Attributes of rows touched inside a rolled-back SAVEPOINT are expired
    original_id = appointment.id
    try:
        async with session.begin_nested():
            postponed = await resolve_status(session, AppointmentState.POSTPONED)
            await store.update_state(session, appointment, postponed)
            new_appointment = await book_appointment(session, patient_id, doctor_id, new_at, now=now)
    except Exception as exc:
        logger.info("Reschedule of appointment %s rolled back: %s", original_id, exc)
        raise
    logger.info(
        "Appointment %s rescheduled to %s as appointment %s",
        original_id,
        new_at,
        new_appointment.id,
    )
    return True


async def cancel_appointment(
    session: AsyncSession, patient_id: int, doctor_id: int, scheduled_at: datetime
) -> bool:
    await ensure_doctor_exists(session, doctor_id)
    appointment = await store.find_active_slot(
        session, doctor_id, ActorRole.DOCTOR, to_clinic_naive(scheduled_at)
    )
    if appointment is None:
        raise AppointmentNotFoundError("Appointment not found or already cancelled.")
    _ensure_patient_owns(appointment, patient_id, "cancel")
    cancelled = await resolve_status(session, AppointmentState.CANCELLED)
    await store.update_state(session, appointment, cancelled)
    logger.info("Appointment %s cancelled by patient %s", appointment.id, patient_id)
    return True


async def mark_appointment_outcome(
    session: AsyncSession,
    appointment_id: int,
    doctor_id: int,
    completed: bool,
    now: datetime | None = None,
) -> bool:
    """Record whether a past appointment took place (Completed) or not (Missed)."""
    appointment = await store.find_by_id(session, appointment_id)
    if appointment is None:
        raise AppointmentNotFoundError("Appointment not found.")
    if appointment.doctor_id != doctor_id:
        raise AuthorizationError("You are not authorized to mark this appointment.")
    if appointment.scheduled_at > (now or clinic_now()):
        raise TooEarlyError("Cannot mark future appointments.")
    current = await store.get_state(session, appointment)
    if current.is_terminal:
        raise AppointmentNotActiveError(appointment_id, current.value)
    outcome = AppointmentState.COMPLETED if completed else AppointmentState.MISSED
    status = await resolve_status(session, outcome)
    await store.update_state(session, appointment, status)
    logger.info("Appointment %s marked %s by doctor %s", appointment_id, outcome.value, doctor_id)
    return True


async def _get_or_raise(session: AsyncSession, appointment_id: int) -> Appointment:
    appointment = await store.find_by_id(session, appointment_id)
    if appointment is None:
        raise AppointmentNotFoundError("Appointment not found")
    return appointment


async def is_appointment_completed(session: AsyncSession, appointment_id: int) -> bool:
    appointment = await _get_or_raise(session, appointment_id)
    return await store.get_state(session, appointment) is AppointmentState.COMPLETED


async def is_same_doctor(session: AsyncSession, appointment_id: int, doctor_id: int) -> bool:
    appointment = await _get_or_raise(session, appointment_id)
    return appointment.doctor_id == doctor_id


async def is_same_patient(session: AsyncSession, appointment_id: int, patient_id: int) -> bool:
    appointment = await _get_or_raise(session, appointment_id)
    return appointment.patient_id == patient_id
