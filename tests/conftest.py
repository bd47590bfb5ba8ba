import os
from collections.abc import AsyncGenerator
from datetime import datetime

# Settings are read at import time; point them at a throwaway database first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENV", "test")

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from app.core.db import build_engine, build_session_maker
from app.models import Doctor, Lifecycle, Patient
from app.services.status_service import seed_statuses

# Tuesday morning; bookable days are 2025-07-16 .. 2025-07-22
NOW = datetime(2025, 7, 15, 10, 0)
SLOT = datetime(2025, 7, 20, 16, 0)

DOCTOR_ID = 3
OTHER_DOCTOR_ID = 5
RETIRED_DOCTOR_ID = 4
PATIENT_ID = 7
OTHER_PATIENT_ID = 9
DELETED_PATIENT_ID = 11


async def populate_directory(session: AsyncSession) -> None:
    session.add_all(
        [
            Doctor(id=DOCTOR_ID, full_name="Dr. Mona Adel"),
            Doctor(id=OTHER_DOCTOR_ID, full_name="Dr. Karim Fathy"),
            Doctor(id=RETIRED_DOCTOR_ID, full_name="Dr. Samir Nabil", lifecycle=Lifecycle.DELETED),
            Patient(id=PATIENT_ID, full_name="Omar Khaled"),
            Patient(id=OTHER_PATIENT_ID, full_name="Laila Hany"),
            Patient(id=DELETED_PATIENT_ID, full_name="Youssef Ali", lifecycle=Lifecycle.DELETED),
        ]
    )
    await session.flush()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = build_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def bare_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """A session over empty tables: no directory rows, no status catalog."""
    async with build_session_maker(engine)() as session:
        yield session


@pytest_asyncio.fixture
async def session(bare_session: AsyncSession) -> AsyncSession:
    """A session over a seeded directory and a complete status catalog."""
    await populate_directory(bare_session)
    await seed_statuses(bare_session)
    await bare_session.commit()
    return bare_session
