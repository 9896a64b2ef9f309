"""Roles and their permission maps."""

import logging
from pathlib import Path

from ..db.repositories import RoleRepository
from ..errors import ConflictError, NotFoundError, ValidationError
from ..models.common import Page
from ..models.identity import Actor, Role
from ..models.permissions import ROLE_TEMPLATES, SYSTEM_ROLE_NAMES, PermissionSet
from .base import tenant_of

logger = logging.getLogger(__name__)


class RoleService:
    """Custom and system roles of a gym.

    System roles keep their names and cannot be deleted, but their
    permissions may be tuned per gym.
    """

    def __init__(self, db_path: Path | None = None):
        self.roles = RoleRepository(db_path)

    async def list_page(self, actor: Actor, page: int, limit: int) -> Page:
        return await self.roles.list_page(tenant_of(actor), page, limit)

    async def get(self, actor: Actor, role_id: str) -> Role:
        role = await self.roles.get(role_id, tenant_of(actor))
        if role is None:
            raise NotFoundError("Role not found")
        return role

    async def create(self, actor: Actor, name: str, permissions: dict | None) -> Role:
        gym_id = tenant_of(actor)
        name = name.strip()
        if not name:
            raise ValidationError("Role name is required")
        if name in SYSTEM_ROLE_NAMES or await self.roles.get_by_name(gym_id, name):
            raise ConflictError("Role with this name already exists")
        role = await self.roles.create(
            Role(name=name, gym_id=gym_id, permissions=PermissionSet.from_dict(permissions))
        )
        logger.info("Created role %s in gym %s", role.name, gym_id)
        return role

    async def update(
        self,
        actor: Actor,
        role_id: str,
        name: str | None = None,
        permissions: dict | None = None,
    ) -> Role:
        gym_id = tenant_of(actor)
        role = await self.get(actor, role_id)
        if name is not None and name != role.name:
            if role.is_system:
                raise ValidationError("System roles cannot be renamed")
            if name in SYSTEM_ROLE_NAMES or await self.roles.get_by_name(gym_id, name):
                raise ConflictError("Role with this name already exists")
        else:
            name = None
        parsed = PermissionSet.from_dict(permissions) if permissions is not None else None
        return await self.roles.update(role_id, name, parsed)

    async def delete(self, actor: Actor, role_id: str) -> None:
        role = await self.get(actor, role_id)
        if role.is_system:
            raise ValidationError("System roles cannot be deleted")
        if await self.roles.count_users(role_id) > 0:
            raise ValidationError("Cannot delete role that is assigned to users")
        await self.roles.soft_delete(role_id)
        logger.info("Deleted role %s", role_id)

    def templates(self) -> list[dict]:
        return [template.to_dict() for template in ROLE_TEMPLATES.values()]

    async def create_from_template(
        self, actor: Actor, template_name: str, name: str | None = None
    ) -> Role:
        """Instantiate a ready-made template, optionally under another name."""
        template = ROLE_TEMPLATES.get(template_name)
        if template is None:
            raise NotFoundError("Role template not found")
        return await self.create(
            actor, name or template.name, template.permissions.to_dict()
        )
