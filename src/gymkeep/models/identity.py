"""Tenant and identity models: gyms, roles, users and the request actor."""

from dataclasses import dataclass, field
from datetime import datetime

from .common import format_timestamp
from .permissions import (
    STUDENT,
    SUPER_ADMIN,
    SYSTEM_ROLE_NAMES,
    TRAINER,
    Action,
    PermissionSet,
    Resource,
)


@dataclass
class Gym:
    """A tenant. Every other record is scoped by a gym id."""

    name: str
    slug: str
    address: str | None = None
    contact_phone: str | None = None
    is_active: bool = True
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "address": self.address,
            "contactPhone": self.contact_phone,
            "isActive": self.is_active,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }


@dataclass
class Role:
    """A named permission set inside a gym."""

    name: str
    gym_id: str | None
    permissions: PermissionSet = field(default_factory=PermissionSet)
    id: str | None = None
    user_count: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_system(self) -> bool:
        return self.name in SYSTEM_ROLE_NAMES

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "gymId": self.gym_id,
            "name": self.name,
            "permissions": self.permissions.to_dict(),
            "isSystem": self.is_system,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }
        if self.user_count is not None:
            data["userCount"] = self.user_count
        return data


@dataclass
class User:
    """A member of a gym (or the cross-tenant super admin)."""

    email: str
    first_name: str
    last_name: str
    gym_id: str | None
    role_id: str
    password_hash: str = ""
    phone: str | None = None
    id: str | None = None
    role_name: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def summary(self) -> dict:
        """Short form embedded in other resources."""
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
        }

    def to_dict(self) -> dict:
        # password_hash never leaves the service layer
        return {
            **self.summary(),
            "phone": self.phone,
            "gymId": self.gym_id,
            "roleId": self.role_id,
            "role": self.role_name,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }


@dataclass
class Actor:
    """The authenticated caller of a request.

    ``gym_id`` is the tenant the request operates on. For a super admin it is
    whatever gym the request selected, or None when no gym was selected.
    """

    user_id: str
    gym_id: str | None
    role_id: str
    role_name: str
    permissions: PermissionSet = field(default_factory=PermissionSet)

    @property
    def is_super_admin(self) -> bool:
        return self.role_name == SUPER_ADMIN

    @property
    def is_student(self) -> bool:
        return self.role_name == STUDENT

    @property
    def is_trainer(self) -> bool:
        return self.role_name == TRAINER

    def can(self, resource: Resource, action: Action) -> bool:
        return self.is_super_admin or self.permissions.allows(resource, action)
