import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import DELETED_PATIENT_ID, DOCTOR_ID, PATIENT_ID, RETIRED_DOCTOR_ID
from app.core.exceptions import DoctorNotFoundError, InvalidActorIdError, PatientNotFoundError
from app.models import ActorRole
from app.services.directory_service import actor_exists, ensure_actor_exists, ensure_doctor_exists


class TestActorExists:
    @pytest.mark.asyncio
    async def test_active_doctor_and_patient(self, session: AsyncSession) -> None:
        assert await actor_exists(session, DOCTOR_ID, ActorRole.DOCTOR) is True
        assert await actor_exists(session, PATIENT_ID, "Patient") is True

    @pytest.mark.asyncio
    async def test_deleted_records_do_not_count(self, session: AsyncSession) -> None:
        assert await actor_exists(session, RETIRED_DOCTOR_ID, ActorRole.DOCTOR) is False
        assert await actor_exists(session, DELETED_PATIENT_ID, ActorRole.PATIENT) is False

    @pytest.mark.asyncio
    async def test_roles_are_separate_directories(self, session: AsyncSession) -> None:
        assert await actor_exists(session, PATIENT_ID, ActorRole.DOCTOR) is False
        assert await actor_exists(session, DOCTOR_ID, ActorRole.PATIENT) is False

    @pytest.mark.asyncio
    async def test_unknown_role_is_rejected(self, session: AsyncSession) -> None:
        with pytest.raises(ValueError):
            await actor_exists(session, DOCTOR_ID, "Admin")


class TestEnsureActorExists:
    @pytest.mark.asyncio
    async def test_missing_doctor(self, session: AsyncSession) -> None:
        with pytest.raises(DoctorNotFoundError, match="Doctor not found"):
            await ensure_doctor_exists(session, 999)

    @pytest.mark.asyncio
    async def test_retired_doctor(self, session: AsyncSession) -> None:
        with pytest.raises(DoctorNotFoundError) as exc_info:
            await ensure_doctor_exists(session, RETIRED_DOCTOR_ID)

        assert exc_info.value.doctor_id == RETIRED_DOCTOR_ID

    @pytest.mark.asyncio
    async def test_missing_patient(self, session: AsyncSession) -> None:
        with pytest.raises(PatientNotFoundError):
            await ensure_actor_exists(session, DELETED_PATIENT_ID, ActorRole.PATIENT)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("actor_id", [None, 0, -3])
    async def test_rejects_invalid_ids(self, session: AsyncSession, actor_id: int | None) -> None:
        with pytest.raises(InvalidActorIdError, match="valid ID"):
            await ensure_actor_exists(session, actor_id, ActorRole.PATIENT)
