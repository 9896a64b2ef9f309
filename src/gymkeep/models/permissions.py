"""Role permission registry.

Permissions are a closed set of ``(Resource, Action)`` pairs. On the wire
and in the database they are stored as a nested boolean map::

    {"products": {"read": true, "create": false}}

Unknown resources or actions are rejected when a role is created or updated.
"""

from dataclasses import dataclass
from enum import Enum

from ..errors import ValidationError


class Resource(str, Enum):
    """Things a role can be granted access to."""

    USERS = "users"
    ROLES = "roles"
    GYMS = "gyms"
    TRAINERS = "trainers"
    STUDENTS = "students"
    PROGRAMS = "programs"
    EXERCISES = "exercises"
    EQUIPMENT = "equipment"
    PRODUCTS = "products"
    PRODUCT_CATEGORIES = "product_categories"
    ORDERS = "orders"
    WORKOUT_LOGS = "workout_logs"
    TRAINER_MATCHES = "trainer_matches"


class Action(str, Enum):
    """Operations on a resource."""

    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


SUPER_ADMIN = "SuperAdmin"
GYM_OWNER = "GymOwner"
TRAINER = "Trainer"
STUDENT = "Student"

# Names that can never be renamed or deleted
SYSTEM_ROLE_NAMES = (SUPER_ADMIN, GYM_OWNER, TRAINER, STUDENT)

# Roles seeded automatically for every new gym
DEFAULT_ROLE_NAMES = (GYM_OWNER, TRAINER, STUDENT)


@dataclass(frozen=True)
class PermissionSet:
    """An immutable set of granted ``(Resource, Action)`` pairs."""

    grants: frozenset[tuple[Resource, Action]] = frozenset()

    def allows(self, resource: Resource, action: Action) -> bool:
        """Check whether the pair is granted."""
        return (resource, action) in self.grants

    def to_dict(self) -> dict:
        """Nested ``resource -> action -> bool`` map of granted pairs."""
        result: dict[str, dict[str, bool]] = {}
        for resource in Resource:
            actions = {
                action.value: True
                for action in Action
                if (resource, action) in self.grants
            }
            if actions:
                result[resource.value] = actions
        return result

    @classmethod
    def from_dict(cls, data: dict | None) -> "PermissionSet":
        """Validate and build from a nested boolean map."""
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ValidationError("Permissions must be an object")

        grants = set()
        for resource_name, actions in data.items():
            try:
                resource = Resource(resource_name)
            except ValueError:
                raise ValidationError(f"Unknown permission resource: {resource_name}")
            if not isinstance(actions, dict):
                raise ValidationError(
                    f"Permissions for {resource_name} must map actions to booleans"
                )
            for action_name, granted in actions.items():
                try:
                    action = Action(action_name)
                except ValueError:
                    raise ValidationError(
                        f"Unknown permission action: {resource_name}.{action_name}"
                    )
                if not isinstance(granted, bool):
                    raise ValidationError(
                        f"Permission {resource_name}.{action_name} must be true or false"
                    )
                if granted:
                    grants.add((resource, action))
        return cls(frozenset(grants))

    @classmethod
    def of(cls, table: dict[Resource, tuple[Action, ...]]) -> "PermissionSet":
        """Build from a ``{Resource: (Action, ...)}`` literal."""
        return cls(
            frozenset(
                (resource, action)
                for resource, actions in table.items()
                for action in actions
            )
        )

    @classmethod
    def everything(cls) -> "PermissionSet":
        return cls(frozenset((r, a) for r in Resource for a in Action))


_CRUD = (Action.READ, Action.CREATE, Action.UPDATE, Action.DELETE)


@dataclass(frozen=True)
class RoleTemplate:
    """A named, ready-made permission set."""

    name: str
    description: str
    permissions: PermissionSet

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "permissions": self.permissions.to_dict(),
        }


ROLE_TEMPLATES: dict[str, RoleTemplate] = {
    template.name: template
    for template in (
        RoleTemplate(
            name=GYM_OWNER,
            description="Full access to all gym resources",
            permissions=PermissionSet.of(
                {
                    Resource.USERS: _CRUD,
                    Resource.ROLES: _CRUD,
                    Resource.GYMS: (Action.READ, Action.UPDATE),
                    Resource.TRAINERS: _CRUD,
                    Resource.STUDENTS: _CRUD,
                    Resource.PROGRAMS: _CRUD,
                    Resource.EXERCISES: _CRUD,
                    Resource.EQUIPMENT: _CRUD,
                    Resource.PRODUCTS: _CRUD,
                    Resource.PRODUCT_CATEGORIES: _CRUD,
                    Resource.ORDERS: _CRUD,
                    Resource.WORKOUT_LOGS: _CRUD,
                    Resource.TRAINER_MATCHES: _CRUD,
                }
            ),
        ),
        RoleTemplate(
            name=TRAINER,
            description="Can manage students and training programs",
            permissions=PermissionSet.of(
                {
                    Resource.USERS: (Action.READ,),
                    Resource.STUDENTS: (Action.READ, Action.UPDATE),
                    Resource.PROGRAMS: _CRUD,
                    Resource.EXERCISES: _CRUD,
                    Resource.EQUIPMENT: (Action.READ,),
                    Resource.PRODUCTS: (Action.READ,),
                    Resource.PRODUCT_CATEGORIES: (Action.READ,),
                    Resource.ORDERS: (Action.READ, Action.CREATE),
                    Resource.WORKOUT_LOGS: (Action.READ, Action.CREATE, Action.UPDATE),
                    Resource.TRAINER_MATCHES: (Action.READ,),
                }
            ),
        ),
        RoleTemplate(
            name=STUDENT,
            description="Can view and log workouts, order products",
            permissions=PermissionSet.of(
                {
                    Resource.PROGRAMS: (Action.READ,),
                    Resource.EXERCISES: (Action.READ,),
                    Resource.EQUIPMENT: (Action.READ,),
                    Resource.PRODUCTS: (Action.READ,),
                    Resource.PRODUCT_CATEGORIES: (Action.READ,),
                    Resource.ORDERS: (Action.READ, Action.CREATE, Action.DELETE),
                    Resource.WORKOUT_LOGS: (Action.READ, Action.CREATE, Action.UPDATE),
                }
            ),
        ),
        RoleTemplate(
            name="Receptionist",
            description="Can manage students and view basic information",
            permissions=PermissionSet.of(
                {
                    Resource.USERS: (Action.READ, Action.CREATE),
                    Resource.STUDENTS: (Action.READ, Action.CREATE, Action.UPDATE),
                    Resource.PRODUCTS: (Action.READ,),
                    Resource.PRODUCT_CATEGORIES: (Action.READ,),
                    Resource.ORDERS: (Action.READ, Action.CREATE, Action.UPDATE),
                }
            ),
        ),
        RoleTemplate(
            name="Assistant Trainer",
            description="Can view and update training programs",
            permissions=PermissionSet.of(
                {
                    Resource.USERS: (Action.READ,),
                    Resource.STUDENTS: (Action.READ,),
                    Resource.PROGRAMS: (Action.READ, Action.UPDATE),
                    Resource.EXERCISES: (Action.READ,),
                    Resource.WORKOUT_LOGS: (Action.READ,),
                }
            ),
        ),
    )
}
