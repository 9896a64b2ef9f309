"""FastAPI dependencies: authentication, permissions and paging."""

from dataclasses import dataclass

from fastapi import Depends, Header, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..config import get_settings
from ..errors import ForbiddenError, UnauthorizedError
from ..models.identity import Actor
from ..models.permissions import Action, Resource
from ..services import AuthService

bearer = HTTPBearer(auto_error=False)


async def current_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> str:
    if credentials is None:
        raise UnauthorizedError("Authentication required")
    return credentials.credentials


async def current_actor(
    token: str = Depends(current_token),
    x_gym_id: str | None = Header(None),
) -> Actor:
    """Resolve the caller; super admins pick their tenant with X-Gym-Id."""
    return await AuthService().authenticate(token, x_gym_id)


def require_permission(resource: Resource, action: Action):
    """Dependency that yields the actor only if the role grants the pair."""

    async def dependency(actor: Actor = Depends(current_actor)) -> Actor:
        if not actor.can(resource, action):
            raise ForbiddenError(
                f"Missing permission: {resource.value}.{action.value}"
            )
        return actor

    return dependency


@dataclass
class Paging:
    page: int
    limit: int


def paging(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
) -> Paging:
    settings = get_settings()
    return Paging(
        page=page,
        limit=min(limit or settings.default_page_size, settings.max_page_size),
    )
