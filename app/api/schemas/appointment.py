from datetime import datetime
from pydantic import BaseModel, Field


class SlotInfo(BaseModel):
    start: datetime
    end: datetime
    available: bool


class AvailableSlotsResponse(BaseModel):
    doctor_id: int
    date: str  # YYYY-MM-DD
    slots: list[SlotInfo]


class BookAppointmentRequest(BaseModel):
    doctor_id: int = Field(ge=1)
    scheduled_at: datetime


class CancelAppointmentRequest(BaseModel):
    doctor_id: int = Field(ge=1)
    scheduled_at: datetime


class RescheduleAppointmentRequest(BaseModel):
    doctor_id: int = Field(ge=1)
    scheduled_at: datetime
    new_scheduled_at: datetime


class MarkOutcomeRequest(BaseModel):
    completed: bool


class OperationResult(BaseModel):
    success: bool = True
    message: str
