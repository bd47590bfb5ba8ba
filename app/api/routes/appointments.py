from datetime import date, datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import Actor, get_current_actor, get_current_doctor, get_current_patient, get_session
from app.api.schemas.appointment import (
    BookAppointmentRequest,
    CancelAppointmentRequest,
    MarkOutcomeRequest,
    OperationResult,
    RescheduleAppointmentRequest,
)
from app.models.appointment import AppointmentView
from app.services.appointment_service import (
    appointment_view,
    book_appointment,
    cancel_appointment,
    get_appointment_by_slot,
    list_appointments_by_day,
    mark_appointment_outcome,
    reschedule_appointment,
)

router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.post("", response_model=AppointmentView, status_code=status.HTTP_201_CREATED)
async def book(
    body: BookAppointmentRequest,
    session: AsyncSession = Depends(get_session),
    patient: Actor = Depends(get_current_patient),
) -> AppointmentView:
    appointment = await book_appointment(session, patient.id, body.doctor_id, body.scheduled_at)
    return await appointment_view(session, appointment)


@router.get("", response_model=list[AppointmentView])
async def list_for_day(
    day: date = Query(...),
    session: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
) -> list[AppointmentView]:
    return await list_appointments_by_day(session, actor.id, actor.role, day)


@router.get("/slot", response_model=AppointmentView)
async def get_by_slot(
    at: datetime = Query(...),
    session: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
) -> AppointmentView:
    return await get_appointment_by_slot(session, actor.id, actor.role, at)


@router.post("/reschedule", response_model=OperationResult)
async def reschedule(
    body: RescheduleAppointmentRequest,
    session: AsyncSession = Depends(get_session),
    patient: Actor = Depends(get_current_patient),
) -> OperationResult:
    await reschedule_appointment(
        session, patient.id, body.doctor_id, body.scheduled_at, body.new_scheduled_at
    )
    return OperationResult(
        message=f"Appointment rescheduled successfully to {body.new_scheduled_at:%Y-%m-%d %H:%M}"
    )


@router.post("/cancel", response_model=OperationResult)
async def cancel(
    body: CancelAppointmentRequest,
    session: AsyncSession = Depends(get_session),
    patient: Actor = Depends(get_current_patient),
) -> OperationResult:
    await cancel_appointment(session, patient.id, body.doctor_id, body.scheduled_at)
    return OperationResult(
        message=f"Appointment with date {body.scheduled_at:%Y-%m-%d %H:%M} successfully cancelled"
    )


@router.post("/{appointment_id}/outcome", response_model=OperationResult)
async def mark_outcome(
    appointment_id: int,
    body: MarkOutcomeRequest,
    session: AsyncSession = Depends(get_session),
    doctor: Actor = Depends(get_current_doctor),
) -> OperationResult:
    await mark_appointment_outcome(session, appointment_id, doctor.id, body.completed)
    return OperationResult(message="Appointment has been marked successfully")
