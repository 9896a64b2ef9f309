"""Repositories for gyms, roles, users and sessions."""

import json
from datetime import datetime

import aiosqlite

from ...models.common import Page, format_timestamp, money, new_id, parse_timestamp
from ...models.identity import Gym, Role, User
from ...models.permissions import DEFAULT_ROLE_NAMES, ROLE_TEMPLATES, PermissionSet
from ..engine import connect, transaction
from .base import Repository, in_clause, live, now_iso


class GymRepository(Repository):
    """Repository for gyms (tenants)."""

    table = "gyms"

    async def create_with_roles(self, gym: Gym, owner: User | None = None) -> Gym:
        """Create a gym together with its system roles.

        If ``owner`` is given it is created with the GymOwner role in the same
        transaction.
        """
        stamp = now_iso()
        gym.id = gym.id or new_id()
        async with transaction(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO gyms
                (id, name, slug, address, contact_phone, is_active, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    gym.id,
                    gym.name,
                    gym.slug,
                    gym.address,
                    gym.contact_phone,
                    int(gym.is_active),
                    stamp,
                    stamp,
                ),
            )
            role_ids = {}
            for name in DEFAULT_ROLE_NAMES:
                role_ids[name] = new_id()
                await db.execute(
                    """
                    INSERT INTO roles (id, gym_id, name, permissions, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        role_ids[name],
                        gym.id,
                        name,
                        json.dumps(ROLE_TEMPLATES[name].permissions.to_dict()),
                        stamp,
                        stamp,
                    ),
                )
            if owner is not None:
                owner.gym_id = gym.id
                owner.role_id = role_ids["GymOwner"]
                await UserRepository.insert(db, owner, stamp)

        return await self.get(gym.id)

    async def get(self, gym_id: str) -> Gym | None:
        """Get a live gym by ID."""
        return await self._get_live("id = ?", (gym_id,))

    async def get_by_slug(self, slug: str) -> Gym | None:
        return await self._get_live("slug = ?", (slug,))

    async def slug_taken(self, slug: str, exclude_id: str | None = None) -> bool:
        # Slugs stay reserved by soft-deleted gyms
        row = await self._fetch_one(
            "SELECT id FROM gyms WHERE slug = ? AND id != ?", (slug, exclude_id or "")
        )
        return row is not None

    async def list_page(self, page: int, limit: int, search: str | None = None) -> Page:
        where, params = "1 = 1", []
        if search:
            where = "name LIKE ? OR slug LIKE ?"
            params = [f"%{search}%", f"%{search}%"]
        return await self._paginate(where, params, page, limit)

    async def update(self, gym_id: str, fields: dict) -> Gym | None:
        if "is_active" in fields:
            fields["is_active"] = int(fields["is_active"])
        await self._update_fields(gym_id, fields)
        return await self.get(gym_id)

    async def stats(self, gym_id: str) -> dict:
        """Headline counts for a gym's dashboard."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT r.name AS role_name, COUNT(u.id) AS members
                FROM roles r
                LEFT JOIN users u ON u.role_id = r.id AND u.deleted_at IS NULL
                WHERE r.gym_id = ? AND r.deleted_at IS NULL
                GROUP BY r.name
                """,
                (gym_id,),
            )
            members = {row["role_name"]: row["members"] for row in await cursor.fetchall()}
            counts = {}
            for key, table in (
                ("equipment", "equipment"),
                ("exercises", "exercises"),
                ("programs", "workout_programs"),
                ("products", "products"),
                ("orders", "orders"),
            ):
                cursor = await db.execute(
                    f"SELECT COUNT(*) FROM {table} WHERE gym_id = ? AND deleted_at IS NULL",
                    (gym_id,),
                )
                counts[key] = (await cursor.fetchone())[0]
            cursor = await db.execute(
                "SELECT total_amount FROM orders "
                "WHERE gym_id = ? AND status = 'completed' AND deleted_at IS NULL",
                (gym_id,),
            )
            revenue = sum((money(row[0]) for row in await cursor.fetchall()), money(0))
        return {
            "membersByRole": members,
            "totalMembers": sum(members.values()),
            **counts,
            "revenue": str(revenue),
        }

    def _row_to_entity(self, row: aiosqlite.Row) -> Gym:
        return Gym(
            id=row["id"],
            name=row["name"],
            slug=row["slug"],
            address=row["address"],
            contact_phone=row["contact_phone"],
            is_active=bool(row["is_active"]),
            created_at=parse_timestamp(row["created_at"]),
            updated_at=parse_timestamp(row["updated_at"]),
        )


class RoleRepository(Repository):
    """Repository for roles and their permission maps."""

    table = "roles"

    @property
    def _select(self) -> str:
        return (
            "SELECT roles.*, "
            "(SELECT COUNT(*) FROM users u WHERE u.role_id = roles.id "
            "AND u.deleted_at IS NULL) AS user_count "
            "FROM roles"
        )

    async def create(self, role: Role) -> Role:
        stamp = now_iso()
        role.id = role.id or new_id()
        async with connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO roles (id, gym_id, name, permissions, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    role.id,
                    role.gym_id,
                    role.name,
                    json.dumps(role.permissions.to_dict()),
                    stamp,
                    stamp,
                ),
            )
        return await self.get(role.id)

    async def get(self, role_id: str, gym_id: str | None = None) -> Role | None:
        """Get a live role, optionally restricted to one gym."""
        if gym_id is None:
            return await self._get_live("roles.id = ?", (role_id,))
        return await self._get_live("roles.id = ? AND roles.gym_id = ?", (role_id, gym_id))

    async def get_by_name(self, gym_id: str | None, name: str) -> Role | None:
        if gym_id is None:
            return await self._get_live("roles.gym_id IS NULL AND roles.name = ?", (name,))
        return await self._get_live("roles.gym_id = ? AND roles.name = ?", (gym_id, name))

    async def list_page(self, gym_id: str, page: int, limit: int) -> Page:
        return await self._paginate(
            "roles.gym_id = ?", (gym_id,), page, limit, order_by="roles.created_at ASC"
        )

    async def update(self, role_id: str, name: str | None, permissions: PermissionSet | None) -> Role:
        fields = {}
        if name is not None:
            fields["name"] = name
        if permissions is not None:
            fields["permissions"] = json.dumps(permissions.to_dict())
        await self._update_fields(role_id, fields)
        return await self.get(role_id)

    async def count_users(self, role_id: str) -> int:
        return await self._scalar(
            f"SELECT COUNT(*) FROM users WHERE role_id = ? AND {live()}", (role_id,)
        )

    def _row_to_entity(self, row: aiosqlite.Row) -> Role:
        return Role(
            id=row["id"],
            gym_id=row["gym_id"],
            name=row["name"],
            permissions=PermissionSet.from_dict(json.loads(row["permissions"])),
            user_count=row["user_count"] if "user_count" in row.keys() else None,
            created_at=parse_timestamp(row["created_at"]),
            updated_at=parse_timestamp(row["updated_at"]),
        )


class UserRepository(Repository):
    """Repository for users."""

    table = "users"

    @property
    def _select(self) -> str:
        return (
            "SELECT users.*, roles.name AS role_name FROM users "
            "JOIN roles ON roles.id = users.role_id"
        )

    @staticmethod
    async def insert(db: aiosqlite.Connection, user: User, stamp: str) -> None:
        """Insert a user on an open connection (used inside transactions)."""
        user.id = user.id or new_id()
        await db.execute(
            """
            INSERT INTO users
            (id, gym_id, role_id, email, password_hash, first_name, last_name,
             phone, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                user.id,
                user.gym_id,
                user.role_id,
                user.email.lower(),
                user.password_hash,
                user.first_name,
                user.last_name,
                user.phone,
                stamp,
                stamp,
            ),
        )

    async def create(self, user: User) -> User:
        async with connect(self.db_path) as db:
            await self.insert(db, user, now_iso())
        return await self.get(user.id)

    async def get(self, user_id: str, gym_id: str | None = None) -> User | None:
        """Get a live user, optionally restricted to one gym."""
        if gym_id is None:
            return await self._get_live("users.id = ?", (user_id,))
        return await self._get_live("users.id = ? AND users.gym_id = ?", (user_id, gym_id))

    async def get_by_email(self, email: str) -> User | None:
        return await self._get_live("users.email = ?", (email.lower(),))

    async def email_taken(self, email: str) -> bool:
        # Email uniqueness spans deleted accounts too
        row = await self._fetch_one("SELECT id FROM users WHERE email = ?", (email.lower(),))
        return row is not None

    async def list_page(
        self,
        gym_id: str,
        page: int,
        limit: int,
        search: str | None = None,
        role_name: str | None = None,
        user_ids: list[str] | None = None,
    ) -> Page:
        where = ["users.gym_id = ?"]
        params: list = [gym_id]
        if search:
            where.append(
                "(users.first_name LIKE ? OR users.last_name LIKE ? OR users.email LIKE ?)"
            )
            params += [f"%{search}%"] * 3
        if role_name:
            where.append(
                "users.role_id IN (SELECT id FROM roles WHERE name = ? AND gym_id = ?)"
            )
            params += [role_name, gym_id]
        if user_ids is not None:
            where.append(in_clause("users.id", user_ids))
            params += user_ids
        return await self._paginate(" AND ".join(where), params, page, limit)

    async def update(self, user_id: str, fields: dict) -> User:
        if "email" in fields:
            fields["email"] = fields["email"].lower()
        await self._update_fields(user_id, fields)
        return await self.get(user_id)

    async def summaries(self, user_ids: list[str]) -> dict[str, dict]:
        """Short user descriptions keyed by id (deleted users included)."""
        if not user_ids:
            return {}
        rows = await self._fetch_all(
            f"SELECT id, first_name, last_name, email FROM users "
            f"WHERE {in_clause('id', user_ids)}",
            user_ids,
        )
        return {
            row["id"]: {
                "id": row["id"],
                "firstName": row["first_name"],
                "lastName": row["last_name"],
                "email": row["email"],
            }
            for row in rows
        }

    def _row_to_entity(self, row: aiosqlite.Row) -> User:
        return User(
            id=row["id"],
            gym_id=row["gym_id"],
            role_id=row["role_id"],
            role_name=row["role_name"],
            email=row["email"],
            password_hash=row["password_hash"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            phone=row["phone"],
            created_at=parse_timestamp(row["created_at"]),
            updated_at=parse_timestamp(row["updated_at"]),
        )


class SessionRepository(Repository):
    """Opaque bearer tokens issued at login."""

    table = "sessions"

    async def create(self, token: str, user_id: str, expires_at: datetime) -> None:
        async with connect(self.db_path) as db:
            await db.execute(
                "INSERT INTO sessions (token, user_id, created_at, expires_at) VALUES (?, ?, ?, ?)",
                (token, user_id, now_iso(), format_timestamp(expires_at)),
            )

    async def get_user_id(self, token: str, now: datetime) -> str | None:
        """Resolve a token to its user id if it has not expired."""
        row = await self._fetch_one(
            "SELECT user_id, expires_at FROM sessions WHERE token = ?", (token,)
        )
        if row is None or parse_timestamp(row["expires_at"]) <= now:
            return None
        return row["user_id"]

    async def revoke(self, token: str) -> None:
        async with connect(self.db_path) as db:
            await db.execute("DELETE FROM sessions WHERE token = ?", (token,))

    async def revoke_user(self, user_id: str) -> None:
        async with connect(self.db_path) as db:
            await db.execute("DELETE FROM sessions WHERE user_id = ?", (user_id,))
