from datetime import date, timedelta

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_session
from app.api.schemas.appointment import AvailableSlotsResponse, SlotInfo
from app.core.config import settings
from app.services.directory_service import ensure_doctor_exists
from app.services.slot_service import get_available_slots_for_date

router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("/available", response_model=AvailableSlotsResponse)
async def available_slots(
    doctor_id: int = Query(..., ge=1),
    date_param: date = Query(..., alias="date"),
    session: AsyncSession = Depends(get_session),
) -> AvailableSlotsResponse:
    """Return every slot of the doctor's day (clinic time) with start, end and availability."""
    await ensure_doctor_exists(session, doctor_id)
    slots_with_availability = await get_available_slots_for_date(session, doctor_id, date_param)
    slot_infos = [
        SlotInfo(
            start=s,
            end=s + timedelta(minutes=settings.slot_duration_minutes),
            available=avail,
        )
        for s, avail in slots_with_availability
    ]
    return AvailableSlotsResponse(
        doctor_id=doctor_id,
        date=date_param.isoformat(),
        slots=slot_infos,
    )
