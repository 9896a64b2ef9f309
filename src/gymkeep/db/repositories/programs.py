"""Repositories for workout programs and their ordered exercise slots."""

import logging

import aiosqlite

from ...errors import ConflictError, NotFoundError, ValidationError
from ...models.common import Page, new_id, parse_timestamp
from ...models.program import (
    DifficultyLevel,
    ProgramExercise,
    WorkoutProgram,
    check_reorder,
)
from ..engine import connect, transaction
from .base import Repository, now_iso

logger = logging.getLogger(__name__)


class ProgramRepository(Repository):
    """Repository for workout programs."""

    table = "workout_programs"

    @property
    def _select(self) -> str:
        return (
            "SELECT workout_programs.*, "
            "(SELECT COUNT(*) FROM program_exercises pe WHERE pe.program_id = workout_programs.id "
            "AND pe.deleted_at IS NULL) AS exercise_count "
            "FROM workout_programs"
        )

    @staticmethod
    async def _insert(db: aiosqlite.Connection, program: WorkoutProgram, stamp: str) -> None:
        await db.execute(
            """
            INSERT INTO workout_programs
            (id, gym_id, creator_id, assigned_user_id, name, description,
             difficulty_level, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                program.id,
                program.gym_id,
                program.creator_id,
                program.assigned_user_id,
                program.name,
                program.description,
                program.difficulty_level.value,
                stamp,
                stamp,
            ),
        )

    async def create(self, program: WorkoutProgram) -> WorkoutProgram:
        program.id = program.id or new_id()
        async with connect(self.db_path) as db:
            await self._insert(db, program, now_iso())
        return await self.get(program.id, program.gym_id)

    async def clone(self, source: WorkoutProgram, copy: WorkoutProgram) -> WorkoutProgram:
        """Create ``copy`` with the same exercise slots as ``source``."""
        stamp = now_iso()
        copy.id = copy.id or new_id()
        async with transaction(self.db_path) as db:
            await self._insert(db, copy, stamp)
            cursor = await db.execute(
                "SELECT exercise_id, order_index, sets, reps, rest_time_seconds, notes "
                "FROM program_exercises WHERE program_id = ? AND deleted_at IS NULL",
                (source.id,),
            )
            slots = await cursor.fetchall()
            await db.executemany(
                """
                INSERT INTO program_exercises
                (id, program_id, exercise_id, order_index, sets, reps,
                 rest_time_seconds, notes, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [(new_id(), copy.id, *tuple(slot), stamp, stamp) for slot in slots],
            )
        return await self.get(copy.id, copy.gym_id)

    async def get(self, program_id: str, gym_id: str) -> WorkoutProgram | None:
        return await self._get_live(
            "workout_programs.id = ? AND workout_programs.gym_id = ?", (program_id, gym_id)
        )

    async def list_page(
        self,
        gym_id: str,
        page: int,
        limit: int,
        search: str | None = None,
        difficulty_level: DifficultyLevel | None = None,
        creator_id: str | None = None,
        assigned_user_id: str | None = None,
        visible_to: str | None = None,
    ) -> Page:
        """List programs in a gym.

        ``visible_to`` limits the page to programs a member created or was
        assigned.
        """
        where = ["workout_programs.gym_id = ?"]
        params: list = [gym_id]
        if search:
            where.append(
                "(workout_programs.name LIKE ? OR workout_programs.description LIKE ?)"
            )
            params += [f"%{search}%", f"%{search}%"]
        if difficulty_level is not None:
            where.append("workout_programs.difficulty_level = ?")
            params.append(difficulty_level.value)
        if creator_id:
            where.append("workout_programs.creator_id = ?")
            params.append(creator_id)
        if assigned_user_id:
            where.append("workout_programs.assigned_user_id = ?")
            params.append(assigned_user_id)
        if visible_to:
            where.append(
                "(workout_programs.creator_id = ? OR workout_programs.assigned_user_id = ?)"
            )
            params += [visible_to, visible_to]
        return await self._paginate(" AND ".join(where), params, page, limit)

    async def update(self, program_id: str, gym_id: str, fields: dict) -> WorkoutProgram:
        if isinstance(fields.get("difficulty_level"), DifficultyLevel):
            fields["difficulty_level"] = fields["difficulty_level"].value
        await self._update_fields(program_id, fields)
        return await self.get(program_id, gym_id)

    async def stats(self, gym_id: str) -> dict:
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT COUNT(*) AS total,
                       COALESCE(SUM(assigned_user_id IS NOT NULL), 0) AS assigned
                FROM workout_programs WHERE gym_id = ? AND deleted_at IS NULL
                """,
                (gym_id,),
            )
            totals = await cursor.fetchone()
            cursor = await db.execute(
                """
                SELECT difficulty_level, COUNT(*) AS n FROM workout_programs
                WHERE gym_id = ? AND deleted_at IS NULL GROUP BY difficulty_level
                """,
                (gym_id,),
            )
            by_difficulty = {row["difficulty_level"]: row["n"] for row in await cursor.fetchall()}
        return {
            "totalPrograms": totals["total"],
            "assignedPrograms": totals["assigned"],
            "unassignedPrograms": totals["total"] - totals["assigned"],
            "byDifficulty": by_difficulty,
        }

    def _row_to_entity(self, row: aiosqlite.Row) -> WorkoutProgram:
        return WorkoutProgram(
            id=row["id"],
            gym_id=row["gym_id"],
            creator_id=row["creator_id"],
            assigned_user_id=row["assigned_user_id"],
            name=row["name"],
            description=row["description"],
            difficulty_level=DifficultyLevel(row["difficulty_level"]),
            exercise_count=row["exercise_count"],
            created_at=parse_timestamp(row["created_at"]),
            updated_at=parse_timestamp(row["updated_at"]),
        )


class ProgramExerciseRepository(Repository):
    """Ordered exercise slots of a program.

    Every mutation keeps the live ``order_index`` values of a program equal to
    ``0..N-1``. Shifts and the write that needs them run in one transaction.
    """

    table = "program_exercises"

    @property
    def _select(self) -> str:
        return (
            "SELECT program_exercises.*, exercises.name AS exercise_name, "
            "exercises.target_muscle_group AS target_muscle_group "
            "FROM program_exercises "
            "JOIN exercises ON exercises.id = program_exercises.exercise_id"
        )

    async def list_for_program(self, program_id: str) -> list[ProgramExercise]:
        return await self._find_live(
            "program_exercises.program_id = ?",
            (program_id,),
            order_by="program_exercises.order_index ASC",
        )

    async def get(self, entry_id: str, program_id: str) -> ProgramExercise | None:
        return await self._get_live(
            "program_exercises.id = ? AND program_exercises.program_id = ?",
            (entry_id, program_id),
        )

    async def insert(self, entry: ProgramExercise, index: int | None = None) -> ProgramExercise:
        """Add an exercise to a program.

        Without ``index`` the exercise is appended. An explicit index is
        clamped to ``[0, N]`` and the rows at or after it move up by one.
        """
        stamp = now_iso()
        entry.id = entry.id or new_id()
        async with transaction(self.db_path) as db:
            cursor = await db.execute(
                "SELECT 1 FROM program_exercises "
                "WHERE program_id = ? AND exercise_id = ? AND deleted_at IS NULL",
                (entry.program_id, entry.exercise_id),
            )
            if await cursor.fetchone() is not None:
                raise ConflictError("Exercise already exists in this program")

            size = await _live_count(db, entry.program_id)
            position = size if index is None else max(0, min(index, size))
            if position < size:
                await db.execute(
                    "UPDATE program_exercises SET order_index = order_index + 1, updated_at = ? "
                    "WHERE program_id = ? AND deleted_at IS NULL AND order_index >= ?",
                    (stamp, entry.program_id, position),
                )
            entry.order_index = position
            await db.execute(
                """
                INSERT INTO program_exercises
                (id, program_id, exercise_id, order_index, sets, reps,
                 rest_time_seconds, notes, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.id,
                    entry.program_id,
                    entry.exercise_id,
                    position,
                    entry.sets,
                    entry.reps,
                    entry.rest_time_seconds,
                    entry.notes,
                    stamp,
                    stamp,
                ),
            )
        return await self.get(entry.id, entry.program_id)

    async def update(
        self,
        entry_id: str,
        program_id: str,
        fields: dict,
        new_index: int | None = None,
    ) -> ProgramExercise:
        """Update a slot's details and optionally move it.

        Moving from ``o`` to ``n`` shifts the rows in ``(o, n]`` down, or the
        rows in ``[n, o)`` up. ``n`` is clamped to ``[0, N-1]``.
        """
        stamp = now_iso()
        async with transaction(self.db_path) as db:
            current = await _live_index(db, entry_id, program_id)
            if new_index is not None:
                size = await _live_count(db, program_id)
                target = max(0, min(new_index, size - 1))
                if target > current:
                    await db.execute(
                        "UPDATE program_exercises "
                        "SET order_index = order_index - 1, updated_at = ? "
                        "WHERE program_id = ? AND deleted_at IS NULL "
                        "AND order_index > ? AND order_index <= ?",
                        (stamp, program_id, current, target),
                    )
                elif target < current:
                    await db.execute(
                        "UPDATE program_exercises "
                        "SET order_index = order_index + 1, updated_at = ? "
                        "WHERE program_id = ? AND deleted_at IS NULL "
                        "AND order_index >= ? AND order_index < ?",
                        (stamp, program_id, target, current),
                    )
                fields = {**fields, "order_index": target}
            if fields:
                assignments = ", ".join(f"{column} = ?" for column in fields)
                await db.execute(
                    f"UPDATE program_exercises SET {assignments}, updated_at = ? WHERE id = ?",
                    (*fields.values(), stamp, entry_id),
                )
        return await self.get(entry_id, program_id)

    async def remove(self, entry_id: str, program_id: str) -> None:
        """Soft-delete a slot and close the gap it leaves."""
        stamp = now_iso()
        async with transaction(self.db_path) as db:
            current = await _live_index(db, entry_id, program_id)
            await db.execute(
                "UPDATE program_exercises SET deleted_at = ? WHERE id = ?", (stamp, entry_id)
            )
            await db.execute(
                "UPDATE program_exercises SET order_index = order_index - 1, updated_at = ? "
                "WHERE program_id = ? AND deleted_at IS NULL AND order_index > ?",
                (stamp, program_id, current),
            )

    async def reorder(self, program_id: str, orders: list[tuple[str, int]]) -> list[ProgramExercise]:
        """Assign every live slot a new index in one batch.

        ``orders`` must name each live slot exactly once with indices forming
        ``0..N-1``.
        """
        stamp = now_iso()
        async with transaction(self.db_path) as db:
            cursor = await db.execute(
                "SELECT id FROM program_exercises WHERE program_id = ? AND deleted_at IS NULL",
                (program_id,),
            )
            current_ids = {row["id"] for row in await cursor.fetchall()}
            unknown = {entry_id for entry_id, _ in orders} - current_ids
            if unknown:
                raise NotFoundError("Some program exercises not found")
            problem = check_reorder(current_ids, orders)
            if problem:
                raise ValidationError(problem)
            await db.executemany(
                "UPDATE program_exercises SET order_index = ?, updated_at = ? WHERE id = ?",
                [(index, stamp, entry_id) for entry_id, index in orders],
            )
        logger.info("Reordered %d exercises in program %s", len(orders), program_id)
        return await self.list_for_program(program_id)

    def _row_to_entity(self, row: aiosqlite.Row) -> ProgramExercise:
        return ProgramExercise(
            id=row["id"],
            program_id=row["program_id"],
            exercise_id=row["exercise_id"],
            order_index=row["order_index"],
            sets=row["sets"],
            reps=row["reps"],
            rest_time_seconds=row["rest_time_seconds"],
            notes=row["notes"],
            exercise_name=row["exercise_name"],
            target_muscle_group=row["target_muscle_group"],
            created_at=parse_timestamp(row["created_at"]),
        )


async def _live_count(db: aiosqlite.Connection, program_id: str) -> int:
    cursor = await db.execute(
        "SELECT COUNT(*) FROM program_exercises WHERE program_id = ? AND deleted_at IS NULL",
        (program_id,),
    )
    return (await cursor.fetchone())[0]


async def _live_index(db: aiosqlite.Connection, entry_id: str, program_id: str) -> int:
    cursor = await db.execute(
        "SELECT order_index FROM program_exercises "
        "WHERE id = ? AND program_id = ? AND deleted_at IS NULL",
        (entry_id, program_id),
    )
    row = await cursor.fetchone()
    if row is None:
        raise NotFoundError("Program exercise not found")
    return row["order_index"]
