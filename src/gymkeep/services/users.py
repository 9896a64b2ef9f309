"""User accounts inside a gym."""

import logging
from pathlib import Path

from ..db.repositories import RoleRepository, SessionRepository, UserRepository
from ..errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ..models.common import Page
from ..models.identity import Actor, Role, User
from ..models.permissions import SUPER_ADMIN, PermissionSet
from .auth import hash_password, verify_password
from .base import tenant_of

logger = logging.getLogger(__name__)


class UserService:
    """Register and manage gym members."""

    def __init__(self, db_path: Path | None = None):
        self.users = UserRepository(db_path)
        self.roles = RoleRepository(db_path)
        self.sessions = SessionRepository(db_path)

    async def register(
        self,
        actor: Actor,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role_id: str,
        phone: str | None = None,
    ) -> User:
        """Create a user in the actor's gym."""
        gym_id = tenant_of(actor)
        if await self.roles.get(role_id, gym_id) is None:
            raise ValidationError("Invalid role for this gym")
        if await self.users.email_taken(email):
            raise ConflictError("Email already registered")

        user = await self.users.create(
            User(
                email=email,
                first_name=first_name,
                last_name=last_name,
                phone=phone,
                gym_id=gym_id,
                role_id=role_id,
                password_hash=hash_password(password),
            )
        )
        logger.info("Registered user %s in gym %s", user.id, gym_id)
        return user

    async def list_page(
        self,
        actor: Actor,
        page: int,
        limit: int,
        search: str | None = None,
        role_name: str | None = None,
    ) -> Page:
        return await self.users.list_page(
            tenant_of(actor), page, limit, search=search, role_name=role_name
        )

    async def get(self, actor: Actor, user_id: str) -> User:
        user = await self.users.get(user_id, tenant_of(actor))
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def update(self, actor: Actor, user_id: str, fields: dict) -> User:
        gym_id = tenant_of(actor)
        user = await self.get(actor, user_id)
        email = fields.get("email")
        if email and email.lower() != user.email and await self.users.email_taken(email):
            raise ConflictError("Email already registered")
        if "role_id" in fields and await self.roles.get(fields["role_id"], gym_id) is None:
            raise ValidationError("Invalid role for this gym")
        return await self.users.update(user_id, fields)

    async def change_password(
        self, actor: Actor, user_id: str, current_password: str, new_password: str
    ) -> None:
        """Change the actor's own password."""
        if user_id != actor.user_id:
            raise ForbiddenError("You can only change your own password")
        user = await self.users.get(actor.user_id)
        if user is None:
            raise NotFoundError("User not found")
        if not verify_password(user.password_hash, current_password):
            raise ValidationError("Current password is incorrect")
        await self.users.update(user.id, {"password_hash": hash_password(new_password)})
        logger.info("User %s changed their password", user.id)

    async def delete(self, actor: Actor, user_id: str) -> None:
        if user_id == actor.user_id:
            raise ValidationError("You cannot delete your own account")
        await self.get(actor, user_id)
        await self.users.soft_delete(user_id)
        await self.sessions.revoke_user(user_id)
        logger.info("Deleted user %s", user_id)

    async def create_super_admin(
        self, email: str, password: str, first_name: str, last_name: str
    ) -> User:
        """Create a cross-tenant administrator (command line only)."""
        if await self.users.email_taken(email):
            raise ConflictError("Email already registered")
        role = await self.roles.get_by_name(None, SUPER_ADMIN)
        if role is None:
            role = await self.roles.create(
                Role(name=SUPER_ADMIN, gym_id=None, permissions=PermissionSet.everything())
            )
        user = await self.users.create(
            User(
                email=email,
                first_name=first_name,
                last_name=last_name,
                gym_id=None,
                role_id=role.id,
                password_hash=hash_password(password),
            )
        )
        logger.info("Created super admin %s", user.id)
        return user
