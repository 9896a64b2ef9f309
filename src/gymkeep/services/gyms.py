"""Gym (tenant) management."""

import logging
import re
from pathlib import Path

from ..db.repositories import GymRepository, UserRepository
from ..errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ..models.common import Page
from ..models.identity import Actor, Gym, User
from .auth import hash_password

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def slugify(name: str) -> str:
    """Turn a gym name into a URL-safe slug."""
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


class GymService:
    """Create and administer gyms."""

    def __init__(self, db_path: Path | None = None):
        self.gyms = GymRepository(db_path)
        self.users = UserRepository(db_path)

    async def create(
        self,
        actor: Actor | None,
        name: str,
        slug: str | None = None,
        address: str | None = None,
        contact_phone: str | None = None,
        owner: dict | None = None,
    ) -> Gym:
        """Create a gym with its default roles and optionally its owner.

        ``actor`` is None when called from the command line.

        Args:
            owner: ``email``, ``password``, ``first_name``, ``last_name`` and
                optional ``phone`` of the GymOwner account to create
        """
        if actor is not None and not actor.is_super_admin:
            raise ForbiddenError("Only super admins can create gyms")
        slug = slug or slugify(name)
        if not SLUG_PATTERN.match(slug):
            raise ValidationError("Slug may only contain lowercase letters, digits and dashes")
        if await self.gyms.slug_taken(slug):
            raise ConflictError("Gym slug already exists")

        owner_user = None
        if owner is not None:
            if await self.users.email_taken(owner["email"]):
                raise ConflictError("Email already registered")
            owner_user = User(
                email=owner["email"],
                first_name=owner["first_name"],
                last_name=owner["last_name"],
                phone=owner.get("phone"),
                gym_id=None,
                role_id="",
                password_hash=hash_password(owner["password"]),
            )

        gym = await self.gyms.create_with_roles(
            Gym(name=name, slug=slug, address=address, contact_phone=contact_phone),
            owner=owner_user,
        )
        logger.info("Created gym %s (%s)", gym.slug, gym.id)
        return gym

    async def list_page(self, actor: Actor, page: int, limit: int, search: str | None = None) -> Page:
        if not actor.is_super_admin:
            raise ForbiddenError("Only super admins can list gyms")
        return await self.gyms.list_page(page, limit, search)

    async def get(self, actor: Actor, gym_id: str) -> Gym:
        if not actor.is_super_admin and gym_id != actor.gym_id:
            raise NotFoundError("Gym not found")
        gym = await self.gyms.get(gym_id)
        if gym is None:
            raise NotFoundError("Gym not found")
        return gym

    async def update(self, actor: Actor, gym_id: str, fields: dict) -> Gym:
        await self.get(actor, gym_id)
        fields.pop("is_active", None)
        if "slug" in fields:
            if not SLUG_PATTERN.match(fields["slug"]):
                raise ValidationError(
                    "Slug may only contain lowercase letters, digits and dashes"
                )
            if await self.gyms.slug_taken(fields["slug"], exclude_id=gym_id):
                raise ConflictError("Gym slug already exists")
        return await self.gyms.update(gym_id, fields)

    async def toggle_active(self, actor: Actor, gym_id: str) -> Gym:
        if not actor.is_super_admin:
            raise ForbiddenError("Only super admins can activate or deactivate gyms")
        gym = await self.get(actor, gym_id)
        updated = await self.gyms.update(gym_id, {"is_active": not gym.is_active})
        logger.info("Gym %s is now %s", gym_id, "active" if updated.is_active else "inactive")
        return updated

    async def delete(self, actor: Actor, gym_id: str) -> None:
        if not actor.is_super_admin:
            raise ForbiddenError("Only super admins can delete gyms")
        await self.get(actor, gym_id)
        await self.gyms.soft_delete(gym_id)
        logger.info("Deleted gym %s", gym_id)

    async def stats(self, actor: Actor, gym_id: str) -> dict:
        await self.get(actor, gym_id)
        return await self.gyms.stats(gym_id)
