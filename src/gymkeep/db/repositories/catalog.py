"""Repositories for the equipment and exercise catalogs."""

import aiosqlite

from ...models.catalog import Equipment, EquipmentStatus, Exercise
from ...models.common import Page, new_id, parse_timestamp
from ..engine import connect
from .base import Repository, now_iso


class EquipmentRepository(Repository):
    """Repository for gym equipment."""

    table = "equipment"

    @property
    def _select(self) -> str:
        return (
            "SELECT equipment.*, "
            "(SELECT COUNT(*) FROM exercises x WHERE x.equipment_id = equipment.id "
            "AND x.deleted_at IS NULL) AS exercise_count "
            "FROM equipment"
        )

    async def create(self, equipment: Equipment) -> Equipment:
        """Create equipment with a fresh QR identity."""
        stamp = now_iso()
        equipment.id = equipment.id or new_id()
        equipment.qr_code_uuid = equipment.qr_code_uuid or new_id()
        async with connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO equipment
                (id, gym_id, name, description, video_url, status, qr_code_uuid,
                 created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    equipment.id,
                    equipment.gym_id,
                    equipment.name,
                    equipment.description,
                    equipment.video_url,
                    equipment.status.value,
                    equipment.qr_code_uuid,
                    stamp,
                    stamp,
                ),
            )
        return await self.get(equipment.id, equipment.gym_id)

    async def get(self, equipment_id: str, gym_id: str) -> Equipment | None:
        return await self._get_live(
            "equipment.id = ? AND equipment.gym_id = ?", (equipment_id, gym_id)
        )

    async def get_by_qr(self, qr_code_uuid: str, gym_id: str) -> Equipment | None:
        """Resolve the UUID printed on a QR label."""
        return await self._get_live(
            "equipment.qr_code_uuid = ? AND equipment.gym_id = ?", (qr_code_uuid, gym_id)
        )

    async def name_taken(self, gym_id: str, name: str, exclude_id: str | None = None) -> bool:
        count = await self._count_live(
            "gym_id = ? AND name = ? AND id != ?", (gym_id, name, exclude_id or "")
        )
        return count > 0

    async def list_page(
        self,
        gym_id: str,
        page: int,
        limit: int,
        status: EquipmentStatus | None = None,
        search: str | None = None,
    ) -> Page:
        where = ["equipment.gym_id = ?"]
        params: list = [gym_id]
        if status is not None:
            where.append("equipment.status = ?")
            params.append(status.value)
        if search:
            where.append("(equipment.name LIKE ? OR equipment.description LIKE ?)")
            params += [f"%{search}%", f"%{search}%"]
        return await self._paginate(" AND ".join(where), params, page, limit)

    async def update(self, equipment_id: str, gym_id: str, fields: dict) -> Equipment:
        if isinstance(fields.get("status"), EquipmentStatus):
            fields["status"] = fields["status"].value
        await self._update_fields(equipment_id, fields)
        return await self.get(equipment_id, gym_id)

    async def count_exercises(self, equipment_id: str) -> int:
        return await self._scalar(
            "SELECT COUNT(*) FROM exercises WHERE equipment_id = ? AND deleted_at IS NULL",
            (equipment_id,),
        )

    async def stats(self, gym_id: str) -> dict:
        rows = await self._fetch_all(
            "SELECT status, COUNT(*) AS n FROM equipment "
            "WHERE gym_id = ? AND deleted_at IS NULL GROUP BY status",
            (gym_id,),
        )
        by_status = {status.value: 0 for status in EquipmentStatus}
        for row in rows:
            by_status[row["status"]] = row["n"]
        return {"total": sum(by_status.values()), "byStatus": by_status}

    def _row_to_entity(self, row: aiosqlite.Row) -> Equipment:
        return Equipment(
            id=row["id"],
            gym_id=row["gym_id"],
            name=row["name"],
            description=row["description"],
            video_url=row["video_url"],
            status=EquipmentStatus(row["status"]),
            qr_code_uuid=row["qr_code_uuid"],
            exercise_count=row["exercise_count"],
            created_at=parse_timestamp(row["created_at"]),
            updated_at=parse_timestamp(row["updated_at"]),
        )


class ExerciseRepository(Repository):
    """Repository for a gym's exercise library."""

    table = "exercises"

    @property
    def _select(self) -> str:
        return (
            "SELECT exercises.*, equipment.name AS equipment_name FROM exercises "
            "LEFT JOIN equipment ON equipment.id = exercises.equipment_id"
        )

    async def create(self, exercise: Exercise) -> Exercise:
        stamp = now_iso()
        exercise.id = exercise.id or new_id()
        async with connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO exercises
                (id, gym_id, created_by, name, description, video_url,
                 target_muscle_group, equipment_id, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    exercise.id,
                    exercise.gym_id,
                    exercise.created_by,
                    exercise.name,
                    exercise.description,
                    exercise.video_url,
                    exercise.target_muscle_group,
                    exercise.equipment_id,
                    stamp,
                    stamp,
                ),
            )
        return await self.get(exercise.id, exercise.gym_id)

    async def get(self, exercise_id: str, gym_id: str) -> Exercise | None:
        return await self._get_live(
            "exercises.id = ? AND exercises.gym_id = ?", (exercise_id, gym_id)
        )

    async def name_taken(self, gym_id: str, name: str, exclude_id: str | None = None) -> bool:
        """Case-insensitive name check among live exercises."""
        count = await self._count_live(
            "gym_id = ? AND name = ? COLLATE NOCASE AND id != ?",
            (gym_id, name, exclude_id or ""),
        )
        return count > 0

    async def list_page(
        self,
        gym_id: str,
        page: int,
        limit: int,
        search: str | None = None,
        muscle_group: str | None = None,
        equipment_id: str | None = None,
    ) -> Page:
        where = ["exercises.gym_id = ?"]
        params: list = [gym_id]
        if search:
            where.append("(exercises.name LIKE ? OR exercises.description LIKE ?)")
            params += [f"%{search}%", f"%{search}%"]
        if muscle_group:
            where.append("exercises.target_muscle_group = ? COLLATE NOCASE")
            params.append(muscle_group)
        if equipment_id:
            where.append("exercises.equipment_id = ?")
            params.append(equipment_id)
        return await self._paginate(
            " AND ".join(where), params, page, limit, order_by="exercises.name ASC"
        )

    async def update(self, exercise_id: str, gym_id: str, fields: dict) -> Exercise:
        await self._update_fields(exercise_id, fields)
        return await self.get(exercise_id, gym_id)

    async def count_program_uses(self, exercise_id: str) -> int:
        """Count live program slots, in live programs, that use the exercise."""
        return await self._scalar(
            """
            SELECT COUNT(*) FROM program_exercises pe
            JOIN workout_programs p ON p.id = pe.program_id
            WHERE pe.exercise_id = ? AND pe.deleted_at IS NULL AND p.deleted_at IS NULL
            """,
            (exercise_id,),
        )

    async def muscle_groups(self, gym_id: str) -> list[str]:
        rows = await self._fetch_all(
            "SELECT DISTINCT target_muscle_group FROM exercises "
            "WHERE gym_id = ? AND deleted_at IS NULL AND target_muscle_group IS NOT NULL "
            "ORDER BY target_muscle_group",
            (gym_id,),
        )
        return [row[0] for row in rows]

    async def stats(self, gym_id: str) -> dict:
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT COUNT(*) AS total,
                       COALESCE(SUM(equipment_id IS NOT NULL), 0) AS with_equipment
                FROM exercises WHERE gym_id = ? AND deleted_at IS NULL
                """,
                (gym_id,),
            )
            totals = await cursor.fetchone()
            cursor = await db.execute(
                """
                SELECT target_muscle_group AS grp, COUNT(*) AS n FROM exercises
                WHERE gym_id = ? AND deleted_at IS NULL AND target_muscle_group IS NOT NULL
                GROUP BY target_muscle_group ORDER BY n DESC
                """,
                (gym_id,),
            )
            groups = {row["grp"]: row["n"] for row in await cursor.fetchall()}
        return {
            "total": totals["total"],
            "withEquipment": totals["with_equipment"],
            "byMuscleGroup": groups,
        }

    def _row_to_entity(self, row: aiosqlite.Row) -> Exercise:
        return Exercise(
            id=row["id"],
            gym_id=row["gym_id"],
            created_by=row["created_by"],
            name=row["name"],
            description=row["description"],
            video_url=row["video_url"],
            target_muscle_group=row["target_muscle_group"],
            equipment_id=row["equipment_id"],
            equipment_name=row["equipment_name"],
            created_at=parse_timestamp(row["created_at"]),
            updated_at=parse_timestamp(row["updated_at"]),
        )
