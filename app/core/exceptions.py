from fastapi import status


class SchedulingError(Exception):
    """Base exception for all scheduling failures.

    ``kind`` is a stable machine-readable code; ``status_code`` is what the
    request layer answers with.
    """

    kind = "scheduling_error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(SchedulingError):
    """Raised when the status catalog is missing an expected state."""

    kind = "configuration_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ValidationError(SchedulingError):
    """Raised when caller input is malformed; the caller should correct it."""

    kind = "validation_error"
    status_code = 422  # Unprocessable Content


class SlotError(ValidationError):
    """Raised when a candidate time is outside the booking window or off the slot grid."""

    kind = "invalid_slot"


class TooFarInAdvanceError(SlotError):
    kind = "too_far_in_advance"


class SameDayNotAllowedError(SlotError):
    kind = "same_day_not_allowed"


class InPastError(SlotError):
    kind = "in_past"


class InvalidSlotTimeError(SlotError):
    kind = "invalid_slot_time"


class TooEarlyError(ValidationError):
    """Raised when marking the outcome of an appointment that has not happened yet."""

    kind = "too_early"


class SameSlotRescheduleError(ValidationError):
    kind = "same_slot_reschedule"


class InvalidActorIdError(ValidationError):
    kind = "invalid_actor_id"


class ConflictError(SchedulingError):
    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT


class SlotTakenError(ConflictError):
    """Raised when the doctor already has a confirmed appointment at that time."""

    kind = "slot_taken"

    def __init__(self, doctor_id: int, scheduled_at: object) -> None:
        self.doctor_id = doctor_id
        self.scheduled_at = scheduled_at
        super().__init__("This time slot is already taken.")


class AppointmentNotActiveError(ConflictError):
    """Raised when a transition is attempted on an appointment in a terminal state."""

    kind = "appointment_not_active"

    def __init__(self, appointment_id: int, state: str) -> None:
        self.appointment_id = appointment_id
        self.state = state
        super().__init__(f"Appointment {appointment_id} is {state} and can no longer change state.")


class NotFoundError(SchedulingError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class DoctorNotFoundError(NotFoundError):
    kind = "doctor_not_found"

    def __init__(self, doctor_id: int) -> None:
        self.doctor_id = doctor_id
        super().__init__("Doctor not found")


class PatientNotFoundError(NotFoundError):
    kind = "patient_not_found"

    def __init__(self, patient_id: int) -> None:
        self.patient_id = patient_id
        super().__init__("Patient not found")


class AppointmentNotFoundError(NotFoundError):
    kind = "appointment_not_found"


class OriginalNotFoundError(AppointmentNotFoundError):
    kind = "original_not_found"


class AuthorizationError(SchedulingError):
    """Raised when the actor does not own the appointment."""

    kind = "unauthorized"
    status_code = status.HTTP_403_FORBIDDEN
