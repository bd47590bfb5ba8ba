from app.models.person import ActorRole, Doctor, Lifecycle, Patient
from app.models.appointment import Appointment, AppointmentState, AppointmentStatus, AppointmentView

__all__ = [
    "ActorRole",
    "Doctor",
    "Lifecycle",
    "Patient",
    "Appointment",
    "AppointmentState",
    "AppointmentStatus",
    "AppointmentView",
]
