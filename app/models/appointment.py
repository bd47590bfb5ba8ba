from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import DateTime, Index, text
from sqlmodel import Field, SQLModel

SLOT_INDEX_NAME = "uq_appointments_doctor_slot_confirmed"


def _utc_naive_now() -> datetime:
    """Naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


class AppointmentState(str, Enum):
    """Appointment states; values are the names stored in the status catalog."""

    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"
    POSTPONED = "Postponed"
    COMPLETED = "Completed"
    MISSED = "Missed"

    @property
    def is_terminal(self) -> bool:
        return self is not AppointmentState.CONFIRMED


class AppointmentStatus(SQLModel, table=True):
    __tablename__ = "appointment_statuses"
    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(unique=True, index=True)


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    # One confirmed appointment per doctor and slot; terminal rows free the slot
    __table_args__ = (
        Index(
            SLOT_INDEX_NAME,
            "doctor_id",
            "scheduled_at",
            unique=True,
            postgresql_where=text("is_confirmed"),
            sqlite_where=text("is_confirmed"),
        ),
    )

    id: int | None = Field(default=None, primary_key=True)
    doctor_id: int = Field(foreign_key="doctors.id", index=True)
    patient_id: int = Field(foreign_key="patients.id", index=True)
    scheduled_at: datetime = Field(sa_type=DateTime(), index=True)
    status_id: int = Field(foreign_key="appointment_statuses.id")
    is_confirmed: bool = True
    created_at: datetime = Field(default_factory=_utc_naive_now, sa_type=DateTime())
    updated_at: datetime | None = Field(default=None, sa_type=DateTime())


class AppointmentView(SQLModel):
    """Appointment expanded with display names, as shown to doctors and patients."""

    id: int
    scheduled_at: datetime
    doctor_id: int
    doctor_name: str
    patient_id: int
    patient_name: str
    status: str
