"""Shared plumbing for repositories over soft-deletable tables."""

from pathlib import Path
from typing import Any, Callable, Iterable

import aiosqlite

from ...models.common import Page, format_timestamp, utcnow
from ..engine import connect, get_db_path


def live(column: str = "deleted_at", alias: str | None = None) -> str:
    """SQL predicate selecting rows that have not been soft-deleted."""
    prefix = f"{alias}." if alias else ""
    return f"{prefix}{column} IS NULL"


def now_iso() -> str:
    return format_timestamp(utcnow())


def in_clause(column: str, values: list) -> str:
    """``column IN (?, ?, ...)``; an empty list matches nothing."""
    if not values:
        return "0 = 1"
    return f"{column} IN ({', '.join('?' for _ in values)})"


class Repository:
    """Base repository.

    Subclasses set ``table`` and implement ``_row_to_entity``. Reads through
    :meth:`_get_live` and :meth:`_find_live` always exclude soft-deleted rows,
    so callers never repeat the ``deleted_at IS NULL`` filter themselves.
    """

    table: str = ""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    def _row_to_entity(self, row: aiosqlite.Row) -> Any:
        raise NotImplementedError

    @property
    def _select(self) -> str:
        """Base SELECT for this repository's entities; override to join."""
        return f"SELECT {self.table}.* FROM {self.table}"

    async def _fetch_one(self, sql: str, params: Iterable = ()) -> aiosqlite.Row | None:
        async with connect(self.db_path) as db:
            cursor = await db.execute(sql, tuple(params))
            return await cursor.fetchone()

    async def _fetch_all(self, sql: str, params: Iterable = ()) -> list[aiosqlite.Row]:
        async with connect(self.db_path) as db:
            cursor = await db.execute(sql, tuple(params))
            return list(await cursor.fetchall())

    async def _scalar(self, sql: str, params: Iterable = ()) -> Any:
        row = await self._fetch_one(sql, params)
        return row[0] if row is not None else None

    async def _get_live(self, where: str, params: Iterable = ()) -> Any | None:
        """Fetch one live entity matching ``where``."""
        row = await self._fetch_one(
            f"{self._select} WHERE {live(alias=self.table)} AND ({where}) LIMIT 1",
            params,
        )
        return self._row_to_entity(row) if row is not None else None

    async def _find_live(
        self, where: str = "1 = 1", params: Iterable = (), order_by: str | None = None
    ) -> list[Any]:
        """Fetch all live entities matching ``where``, newest first by default."""
        order_by = order_by or f"{self.table}.created_at DESC"
        rows = await self._fetch_all(
            f"{self._select} WHERE {live(alias=self.table)} AND ({where}) "
            f"ORDER BY {order_by}",
            params,
        )
        return [self._row_to_entity(row) for row in rows]

    async def _count_live(self, where: str = "1 = 1", params: Iterable = ()) -> int:
        return await self._scalar(
            f"SELECT COUNT(*) FROM {self.table} WHERE {live()} AND ({where})", params
        )

    async def _paginate(
        self,
        where: str,
        params: Iterable,
        page: int,
        limit: int,
        order_by: str | None = None,
        mapper: Callable[[aiosqlite.Row], Any] | None = None,
    ) -> Page:
        """Fetch one page of live entities plus the total match count."""
        params = tuple(params)
        mapper = mapper or self._row_to_entity
        order_by = order_by or f"{self.table}.created_at DESC"
        scope = f"{live(alias=self.table)} AND ({where})"
        offset = (page - 1) * limit
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                f"{self._select} WHERE {scope} ORDER BY {order_by} LIMIT ? OFFSET ?",
                params + (limit, offset),
            )
            rows = await cursor.fetchall()
            cursor = await db.execute(
                f"SELECT COUNT(*) FROM {self.table} WHERE {scope}", params
            )
            total = (await cursor.fetchone())[0]
        return Page(items=[mapper(row) for row in rows], total=total, page=page, limit=limit)

    async def soft_delete(self, entity_id: str) -> None:
        """Mark a row deleted; the row itself is kept."""
        stamp = now_iso()
        async with connect(self.db_path) as db:
            await db.execute(
                f"UPDATE {self.table} SET deleted_at = ? WHERE id = ?",
                (stamp, entity_id),
            )

    async def _update_fields(self, entity_id: str, fields: dict[str, Any]) -> None:
        """Update the given columns and bump ``updated_at``."""
        if not fields:
            return
        assignments = ", ".join(f"{column} = ?" for column in fields)
        async with connect(self.db_path) as db:
            await db.execute(
                f"UPDATE {self.table} SET {assignments}, updated_at = ? WHERE id = ?",
                (*fields.values(), now_iso(), entity_id),
            )
