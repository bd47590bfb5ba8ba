import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConfigurationError
from app.models.appointment import AppointmentState, AppointmentStatus

logger = logging.getLogger(__name__)


async def resolve_status(session: AsyncSession, name: AppointmentState | str) -> AppointmentStatus:
    """Look up the stored catalog row for a state name."""
    state_name = name.value if isinstance(name, AppointmentState) else name
    result = await session.execute(select(AppointmentStatus).where(AppointmentStatus.name == state_name))
    status = result.scalar_one_or_none()
    if status is None:
        raise ConfigurationError(f"{state_name} status is not configured in the database.")
    return status


async def seed_statuses(
    session: AsyncSession, states: list[AppointmentState] | None = None
) -> list[AppointmentStatus]:
    """Insert any missing catalog rows. Returns the rows for the requested states."""
    wanted = states if states is not None else list(AppointmentState)
    result = await session.execute(select(AppointmentStatus))
    existing = {s.name: s for s in result.scalars().all()}
    rows: list[AppointmentStatus] = []
    for state in wanted:
        row = existing.get(state.value)
        if row is None:
            row = AppointmentStatus(name=state.value)
            session.add(row)
            logger.info("Seeding appointment status %s", state.value)
        rows.append(row)
    await session.flush()
    return rows
