from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, status

from app.core.db import get_session  # noqa: F401 - re-exported for routers
from app.models.person import ActorRole


@dataclass(frozen=True)
class Actor:
    """The already-authenticated caller, as forwarded by the gateway."""

    id: int
    role: ActorRole


def get_current_actor(
    x_actor_id: int | None = Header(default=None, alias="X-Actor-Id"),
    x_actor_role: str | None = Header(default=None, alias="X-Actor-Role"),
) -> Actor:
    if x_actor_id is None or not x_actor_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing actor identity headers",
        )
    try:
        role = ActorRole(x_actor_role)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Unsupported actor role: {x_actor_role}",
        )
    return Actor(id=x_actor_id, role=role)


def require_role(role: ActorRole):
    def _dependency(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role is not role:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Only a {role.value.lower()} can perform this action",
            )
        return actor

    return _dependency


get_current_patient = require_role(ActorRole.PATIENT)
get_current_doctor = require_role(ActorRole.DOCTOR)
