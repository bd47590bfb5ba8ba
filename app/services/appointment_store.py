from datetime import UTC, date, datetime, time, timedelta

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import SlotTakenError
from app.models.appointment import (
    SLOT_INDEX_NAME,
    Appointment,
    AppointmentState,
    AppointmentStatus,
    AppointmentView,
)
from app.models.person import ActorRole, Doctor, Patient


def _utc_naive_now() -> datetime:
    """Naive UTC for comparison with TIMESTAMP WITHOUT TIME ZONE."""
    return datetime.now(UTC).replace(tzinfo=None)


def _is_slot_conflict(exc: IntegrityError) -> bool:
    """True when the violation came from the one-confirmed-appointment-per-slot index.

    PostgreSQL names the index in its message; SQLite lists the indexed columns.
    """
    message = str(exc.orig)
    return SLOT_INDEX_NAME in message or (
        "UNIQUE constraint failed: appointments.doctor_id, appointments.scheduled_at" in message
    )


def _actor_column(role: ActorRole | str):
    if ActorRole(role) is ActorRole.DOCTOR:
        return Appointment.doctor_id
    return Appointment.patient_id


async def find_active_slot(
    session: AsyncSession, actor_id: int, role: ActorRole | str, instant: datetime
) -> Appointment | None:
    """The confirmed appointment held by this doctor/patient at exactly ``instant``, if any."""
    result = await session.execute(
        select(Appointment).where(
            _actor_column(role) == actor_id,
            Appointment.scheduled_at == instant,
            Appointment.is_confirmed == True,  # noqa: E712
        )
    )
    return result.scalars().first()


async def find_active_by_day(
    session: AsyncSession, actor_id: int, role: ActorRole | str, day: date
) -> list[Appointment]:
    start = datetime.combine(day, time.min)
    end = start + timedelta(days=1)
    result = await session.execute(
        select(Appointment)
        .where(
            _actor_column(role) == actor_id,
            Appointment.is_confirmed == True,  # noqa: E712
            Appointment.scheduled_at >= start,
            Appointment.scheduled_at < end,
        )
        .order_by(Appointment.scheduled_at)
    )
    return list(result.scalars().all())


async def find_by_id(session: AsyncSession, appointment_id: int) -> Appointment | None:
    result = await session.execute(select(Appointment).where(Appointment.id == appointment_id))
    return result.scalar_one_or_none()


async def get_state(session: AsyncSession, appointment: Appointment) -> AppointmentState:
    result = await session.execute(
        select(AppointmentStatus.name).where(AppointmentStatus.id == appointment.status_id)
    )
    return AppointmentState(result.scalar_one())


async def insert_appointment(
    session: AsyncSession,
    doctor_id: int,
    patient_id: int,
    scheduled_at: datetime,
    status: AppointmentStatus,
) -> Appointment:
    """Insert a confirmed appointment.

    The insert runs in its own SAVEPOINT so a unique-index violation (another
    transaction committed the same doctor slot first) surfaces as SlotTakenError
    and leaves the caller's transaction usable. Any other integrity error
    (an unknown doctor or patient id, say) propagates unchanged.
    """
    appointment = Appointment(
        doctor_id=doctor_id,
        patient_id=patient_id,
        scheduled_at=scheduled_at,
        status_id=status.id,
        is_confirmed=status.name == AppointmentState.CONFIRMED.value,
    )
    try:
        async with session.begin_nested():
            session.add(appointment)
            await session.flush()
    except IntegrityError as exc:
        if not _is_slot_conflict(exc):
            raise
        raise SlotTakenError(doctor_id, scheduled_at) from exc
    await session.refresh(appointment)
    return appointment


async def update_state(session: AsyncSession, appointment: Appointment, status: AppointmentStatus) -> Appointment:
    appointment.status_id = status.id
    appointment.is_confirmed = status.name == AppointmentState.CONFIRMED.value
    appointment.updated_at = _utc_naive_now()
    session.add(appointment)
    await session.flush()
    return appointment


async def load_views(session: AsyncSession, appointments: list[Appointment]) -> list[AppointmentView]:
    """Expand appointments with doctor name, patient name and state name, keeping input order."""
    if not appointments:
        return []
    ids = [a.id for a in appointments]
    result = await session.execute(
        select(Appointment, Doctor.full_name, Patient.full_name, AppointmentStatus.name)
        .join(Doctor, Doctor.id == Appointment.doctor_id)
        .join(Patient, Patient.id == Appointment.patient_id)
        .join(AppointmentStatus, AppointmentStatus.id == Appointment.status_id)
        .where(Appointment.id.in_(ids))
    )
    by_id = {
        a.id: AppointmentView(
            id=a.id,
            scheduled_at=a.scheduled_at,
            doctor_id=a.doctor_id,
            doctor_name=doctor_name,
            patient_id=a.patient_id,
            patient_name=patient_name,
            status=status_name,
        )
        for a, doctor_name, patient_name, status_name in result.all()
    }
    return [by_id[i] for i in ids if i in by_id]
