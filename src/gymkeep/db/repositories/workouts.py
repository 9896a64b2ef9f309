"""Repositories for workout sessions and their logged sets."""

import sqlite3
from datetime import datetime

import aiosqlite

from ...errors import ConflictError
from ...models.common import Page, format_timestamp, new_id, parse_timestamp
from ...models.workout_log import WorkoutLog, WorkoutLogEntry
from ..engine import connect
from .base import Repository, in_clause, now_iso


ACTIVE_WORKOUT_MESSAGE = (
    "You have an active workout. Please finish it before starting a new one."
)


class WorkoutLogRepository(Repository):
    """Repository for workout logs.

    Logs carry no gym id of their own; they are scoped to a gym through the
    user who trained.
    """

    table = "workout_logs"

    @property
    def _select(self) -> str:
        return (
            "SELECT workout_logs.*, workout_programs.name AS program_name, "
            "(SELECT COUNT(*) FROM workout_log_entries e WHERE e.workout_log_id = workout_logs.id "
            "AND e.deleted_at IS NULL) AS entry_count "
            "FROM workout_logs "
            "JOIN workout_programs ON workout_programs.id = workout_logs.program_id"
        )

    async def start(self, log: WorkoutLog) -> WorkoutLog:
        """Insert a new active log.

        The partial unique index on unfinished logs turns a concurrent second
        start into a conflict.
        """
        log.id = log.id or new_id()
        try:
            async with connect(self.db_path) as db:
                await db.execute(
                    """
                    INSERT INTO workout_logs (id, user_id, program_id, started_at, notes)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        log.id,
                        log.user_id,
                        log.program_id,
                        format_timestamp(log.started_at),
                        log.notes,
                    ),
                )
        except sqlite3.IntegrityError as e:
            # UNIQUE failures on user_id come from idx_workout_logs_active
            if "workout_logs.user_id" not in str(e):
                raise
            raise ConflictError(ACTIVE_WORKOUT_MESSAGE) from e
        return await self._get_live("workout_logs.id = ?", (log.id,))

    async def get(self, log_id: str, gym_id: str) -> WorkoutLog | None:
        return await self._get_live(
            "workout_logs.id = ? AND workout_logs.user_id IN "
            "(SELECT id FROM users WHERE gym_id = ? AND deleted_at IS NULL)",
            (log_id, gym_id),
        )

    async def get_owned(self, log_id: str, user_id: str) -> WorkoutLog | None:
        """Get a log only if it belongs to ``user_id``."""
        return await self._get_live(
            "workout_logs.id = ? AND workout_logs.user_id = ?", (log_id, user_id)
        )

    async def get_active(self, user_id: str) -> WorkoutLog | None:
        return await self._get_live(
            "workout_logs.user_id = ? AND workout_logs.ended_at IS NULL", (user_id,)
        )

    async def end(self, log_id: str, ended_at: datetime, notes: str | None = None) -> bool:
        """Mark a log finished. Returns False if it was already finished."""
        assignments = "ended_at = ?"
        params: list = [format_timestamp(ended_at)]
        if notes is not None:
            assignments += ", notes = ?"
            params.append(notes)
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                f"UPDATE workout_logs SET {assignments} "
                "WHERE id = ? AND ended_at IS NULL AND deleted_at IS NULL",
                (*params, log_id),
            )
            return cursor.rowcount == 1

    async def list_page(
        self,
        gym_id: str,
        page: int,
        limit: int,
        user_ids: list[str] | None = None,
        program_id: str | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> Page:
        where = [
            "workout_logs.user_id IN "
            "(SELECT id FROM users WHERE gym_id = ? AND deleted_at IS NULL)"
        ]
        params: list = [gym_id]
        if user_ids is not None:
            where.append(in_clause("workout_logs.user_id", user_ids))
            params += user_ids
        if program_id:
            where.append("workout_logs.program_id = ?")
            params.append(program_id)
        if start_date is not None:
            where.append("workout_logs.started_at >= ?")
            params.append(format_timestamp(start_date))
        if end_date is not None:
            where.append("workout_logs.started_at <= ?")
            params.append(format_timestamp(end_date))
        return await self._paginate(
            " AND ".join(where), params, page, limit, order_by="workout_logs.started_at DESC"
        )

    async def stats(self, user_id: str) -> dict:
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT COUNT(*) AS total,
                       COALESCE(SUM(ended_at IS NOT NULL), 0) AS completed
                FROM workout_logs WHERE user_id = ? AND deleted_at IS NULL
                """,
                (user_id,),
            )
            totals = await cursor.fetchone()
            cursor = await db.execute(
                """
                SELECT COUNT(*) FROM workout_log_entries e
                JOIN workout_logs l ON l.id = e.workout_log_id
                WHERE l.user_id = ? AND l.deleted_at IS NULL AND e.deleted_at IS NULL
                """,
                (user_id,),
            )
            total_sets = (await cursor.fetchone())[0]
        recent = await self._find_live(
            "workout_logs.user_id = ?", (user_id,), order_by="workout_logs.started_at DESC"
        )
        return {
            "totalWorkouts": totals["total"],
            "completedWorkouts": totals["completed"],
            "activeWorkouts": totals["total"] - totals["completed"],
            "totalSets": total_sets,
            "recentWorkouts": [log.to_dict() for log in recent[:10]],
        }

    def _row_to_entity(self, row: aiosqlite.Row) -> WorkoutLog:
        return WorkoutLog(
            id=row["id"],
            user_id=row["user_id"],
            program_id=row["program_id"],
            program_name=row["program_name"],
            started_at=parse_timestamp(row["started_at"]),
            ended_at=parse_timestamp(row["ended_at"]),
            notes=row["notes"],
            entry_count=row["entry_count"],
        )


class WorkoutLogEntryRepository(Repository):
    """Repository for logged sets."""

    table = "workout_log_entries"

    @property
    def _select(self) -> str:
        return (
            "SELECT workout_log_entries.*, exercises.name AS exercise_name "
            "FROM workout_log_entries "
            "JOIN exercises ON exercises.id = workout_log_entries.exercise_id"
        )

    async def create(self, entry: WorkoutLogEntry) -> WorkoutLogEntry:
        entry.id = entry.id or new_id()
        async with connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO workout_log_entries
                (id, workout_log_id, exercise_id, set_number, weight_kg,
                 reps_completed, rpe, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.id,
                    entry.workout_log_id,
                    entry.exercise_id,
                    entry.set_number,
                    entry.weight_kg,
                    entry.reps_completed,
                    entry.rpe,
                    now_iso(),
                ),
            )
        return await self.get(entry.id, entry.workout_log_id)

    async def get(self, entry_id: str, log_id: str) -> WorkoutLogEntry | None:
        return await self._get_live(
            "workout_log_entries.id = ? AND workout_log_entries.workout_log_id = ?",
            (entry_id, log_id),
        )

    async def list_for_log(self, log_id: str) -> list[WorkoutLogEntry]:
        return await self._find_live(
            "workout_log_entries.workout_log_id = ?",
            (log_id,),
            order_by="workout_log_entries.exercise_id, workout_log_entries.set_number",
        )

    async def update(self, entry_id: str, log_id: str, fields: dict) -> WorkoutLogEntry:
        # Entries are append-only records without an updated_at column
        if fields:
            assignments = ", ".join(f"{column} = ?" for column in fields)
            async with connect(self.db_path) as db:
                await db.execute(
                    f"UPDATE workout_log_entries SET {assignments} WHERE id = ?",
                    (*fields.values(), entry_id),
                )
        return await self.get(entry_id, log_id)

    def _row_to_entity(self, row: aiosqlite.Row) -> WorkoutLogEntry:
        return WorkoutLogEntry(
            id=row["id"],
            workout_log_id=row["workout_log_id"],
            exercise_id=row["exercise_id"],
            exercise_name=row["exercise_name"],
            set_number=row["set_number"],
            weight_kg=row["weight_kg"],
            reps_completed=row["reps_completed"],
            rpe=row["rpe"],
            created_at=parse_timestamp(row["created_at"]),
        )
