from enum import Enum

from sqlmodel import Field, SQLModel


class Lifecycle(str, Enum):
    """Record lifecycle shared by directory entities; deleted rows are kept for history."""

    ACTIVE = "active"
    DELETED = "deleted"


class ActorRole(str, Enum):
    DOCTOR = "Doctor"
    PATIENT = "Patient"


class PersonBase(SQLModel):
    full_name: str
    lifecycle: Lifecycle = Field(default=Lifecycle.ACTIVE, index=True)


class Doctor(PersonBase, table=True):
    __tablename__ = "doctors"
    id: int | None = Field(default=None, primary_key=True)


class Patient(PersonBase, table=True):
    __tablename__ = "patients"
    id: int | None = Field(default=None, primary_key=True)
