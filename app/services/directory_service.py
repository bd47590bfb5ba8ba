from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DoctorNotFoundError, InvalidActorIdError, PatientNotFoundError
from app.models.person import ActorRole, Doctor, Lifecycle, Patient

_MODELS: dict[ActorRole, type[Doctor] | type[Patient]] = {
    ActorRole.DOCTOR: Doctor,
    ActorRole.PATIENT: Patient,
}


def _model_for(role: ActorRole | str) -> type[Doctor] | type[Patient]:
    # ActorRole(...) raises ValueError for anything that is not a known role
    return _MODELS[ActorRole(role)]


async def actor_exists(session: AsyncSession, actor_id: int, role: ActorRole | str) -> bool:
    """True when the doctor/patient exists and has not been deleted."""
    model = _model_for(role)
    result = await session.execute(
        select(model.id).where(model.id == actor_id, model.lifecycle == Lifecycle.ACTIVE)
    )
    return result.scalar_one_or_none() is not None


async def ensure_actor_exists(session: AsyncSession, actor_id: int | None, role: ActorRole | str) -> None:
    if actor_id is None or actor_id < 1:
        raise InvalidActorIdError("A valid ID must be provided.")
    if await actor_exists(session, actor_id, role):
        return
    if ActorRole(role) is ActorRole.DOCTOR:
        raise DoctorNotFoundError(actor_id)
    raise PatientNotFoundError(actor_id)


async def ensure_doctor_exists(session: AsyncSession, doctor_id: int) -> None:
    await ensure_actor_exists(session, doctor_id, ActorRole.DOCTOR)
