"""Login sessions and request authentication."""

import logging
import secrets
from datetime import timedelta
from pathlib import Path

from werkzeug.security import check_password_hash, generate_password_hash

from ..config import get_settings
from ..db.repositories import (
    GymRepository,
    RoleRepository,
    SessionRepository,
    UserRepository,
)
from ..errors import ForbiddenError, NotFoundError, UnauthorizedError, ValidationError
from ..models.common import format_timestamp, utcnow
from ..models.identity import Actor
from ..models.permissions import SUPER_ADMIN

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def hash_password(password: str) -> str:
    """Hash a new password, enforcing the minimum length."""
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    return check_password_hash(password_hash, password)


class AuthService:
    """Issues and resolves bearer tokens."""

    def __init__(self, db_path: Path | None = None):
        self.users = UserRepository(db_path)
        self.roles = RoleRepository(db_path)
        self.gyms = GymRepository(db_path)
        self.sessions = SessionRepository(db_path)

    async def login(self, email: str, password: str) -> dict:
        """Check credentials and open a session.

        Returns:
            Token, expiry and the user's profile with permissions
        """
        user = await self.users.get_by_email(email)
        if user is None or not verify_password(user.password_hash, password):
            raise UnauthorizedError("Invalid email or password")
        if user.gym_id is not None:
            gym = await self.gyms.get(user.gym_id)
            if gym is None or not gym.is_active:
                raise UnauthorizedError("Your gym is not active")

        token = secrets.token_urlsafe(32)
        expires_at = utcnow() + timedelta(hours=get_settings().session_ttl_hours)
        await self.sessions.create(token, user.id, expires_at)
        role = await self.roles.get(user.role_id)
        logger.info("User %s logged in", user.id)
        return {
            "token": token,
            "expiresAt": format_timestamp(expires_at),
            "user": {**user.to_dict(), "permissions": role.permissions.to_dict()},
        }

    async def logout(self, token: str) -> None:
        await self.sessions.revoke(token)

    async def authenticate(self, token: str, selected_gym_id: str | None = None) -> Actor:
        """Resolve a bearer token to the acting user.

        Args:
            token: Bearer token from the Authorization header
            selected_gym_id: Tenant chosen by a super admin (X-Gym-Id); ignored
                for everyone else
        """
        user_id = await self.sessions.get_user_id(token, utcnow())
        if user_id is None:
            raise UnauthorizedError("Invalid or expired token")
        user = await self.users.get(user_id)
        role = await self.roles.get(user.role_id) if user else None
        if user is None or role is None:
            raise UnauthorizedError("Invalid or expired token")

        gym_id = user.gym_id
        if role.name == SUPER_ADMIN:
            gym_id = selected_gym_id or None
            if gym_id is not None and await self.gyms.get(gym_id) is None:
                raise NotFoundError("Gym not found")
        else:
            gym = await self.gyms.get(gym_id) if gym_id else None
            if gym is None or not gym.is_active:
                raise ForbiddenError("Your gym is not active")

        return Actor(
            user_id=user.id,
            gym_id=gym_id,
            role_id=role.id,
            role_name=role.name,
            permissions=role.permissions,
        )

    async def me(self, actor: Actor) -> dict:
        user = await self.users.get(actor.user_id)
        if user is None:
            raise NotFoundError("User not found")
        return {**user.to_dict(), "permissions": actor.permissions.to_dict()}
