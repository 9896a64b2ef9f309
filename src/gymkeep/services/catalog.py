"""Equipment and exercise catalog services."""

import logging
from pathlib import Path

from ..db.repositories import EquipmentRepository, ExerciseRepository
from ..errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ..models.catalog import Equipment, EquipmentStatus, Exercise
from ..models.common import Page
from ..models.identity import Actor
from .base import tenant_of

logger = logging.getLogger(__name__)


def parse_equipment_status(value: str) -> EquipmentStatus:
    try:
        return EquipmentStatus(value)
    except ValueError:
        allowed = ", ".join(status.value for status in EquipmentStatus)
        raise ValidationError(f"Invalid status. Must be one of: {allowed}")


class EquipmentService:
    """Gym equipment and its QR identities."""

    def __init__(self, db_path: Path | None = None):
        self.equipment = EquipmentRepository(db_path)

    async def create(
        self,
        actor: Actor,
        name: str,
        description: str | None = None,
        video_url: str | None = None,
        status: str | None = None,
    ) -> Equipment:
        gym_id = tenant_of(actor)
        if await self.equipment.name_taken(gym_id, name):
            raise ConflictError("Equipment with this name already exists")
        equipment = await self.equipment.create(
            Equipment(
                gym_id=gym_id,
                name=name,
                description=description,
                video_url=video_url,
                status=parse_equipment_status(status) if status else EquipmentStatus.ACTIVE,
            )
        )
        logger.info("Created equipment %s in gym %s", equipment.id, gym_id)
        return equipment

    async def list_page(
        self,
        actor: Actor,
        page: int,
        limit: int,
        status: str | None = None,
        search: str | None = None,
    ) -> Page:
        return await self.equipment.list_page(
            tenant_of(actor),
            page,
            limit,
            status=parse_equipment_status(status) if status else None,
            search=search,
        )

    async def get(self, actor: Actor, equipment_id: str) -> Equipment:
        equipment = await self.equipment.get(equipment_id, tenant_of(actor))
        if equipment is None:
            raise NotFoundError("Equipment not found")
        return equipment

    async def get_by_qr(self, actor: Actor, qr_code_uuid: str) -> dict:
        """Look up scanned equipment, with a warning if it is not usable."""
        equipment = await self.equipment.get_by_qr(qr_code_uuid, tenant_of(actor))
        if equipment is None:
            raise NotFoundError("Equipment not found")
        return {**equipment.to_dict(), "warning": equipment.warning}

    async def qr_code(self, actor: Actor, equipment_id: str) -> dict:
        """Data to print on the equipment's QR label."""
        equipment = await self.get(actor, equipment_id)
        return {
            "equipmentId": equipment.id,
            "name": equipment.name,
            "qrCodeUuid": equipment.qr_code_uuid,
            "payload": equipment.qr_code_uuid,
        }

    async def update(self, actor: Actor, equipment_id: str, fields: dict) -> Equipment:
        gym_id = tenant_of(actor)
        await self.get(actor, equipment_id)
        if fields.get("name") and await self.equipment.name_taken(
            gym_id, fields["name"], exclude_id=equipment_id
        ):
            raise ConflictError("Equipment with this name already exists")
        if fields.get("status"):
            fields["status"] = parse_equipment_status(fields["status"])
        return await self.equipment.update(equipment_id, gym_id, fields)

    async def delete(self, actor: Actor, equipment_id: str) -> None:
        await self.get(actor, equipment_id)
        if await self.equipment.count_exercises(equipment_id) > 0:
            raise ValidationError("Cannot delete equipment that is used by exercises")
        await self.equipment.soft_delete(equipment_id)
        logger.info("Deleted equipment %s", equipment_id)

    async def stats(self, actor: Actor) -> dict:
        return await self.equipment.stats(tenant_of(actor))


class ExerciseService:
    """A gym's exercise library.

    Trainers may only change exercises they created; owners may change any.
    """

    def __init__(self, db_path: Path | None = None):
        self.exercises = ExerciseRepository(db_path)
        self.equipment = EquipmentRepository(db_path)

    async def _check_equipment(self, gym_id: str, equipment_id: str | None) -> None:
        if equipment_id and await self.equipment.get(equipment_id, gym_id) is None:
            raise NotFoundError("Equipment not found")

    async def create(
        self,
        actor: Actor,
        name: str,
        description: str | None = None,
        video_url: str | None = None,
        target_muscle_group: str | None = None,
        equipment_id: str | None = None,
    ) -> Exercise:
        gym_id = tenant_of(actor)
        if await self.exercises.name_taken(gym_id, name):
            raise ConflictError("Exercise with this name already exists")
        await self._check_equipment(gym_id, equipment_id)
        exercise = await self.exercises.create(
            Exercise(
                gym_id=gym_id,
                name=name,
                created_by=actor.user_id,
                description=description,
                video_url=video_url,
                target_muscle_group=target_muscle_group,
                equipment_id=equipment_id,
            )
        )
        logger.info("Created exercise %s in gym %s", exercise.id, gym_id)
        return exercise

    async def list_page(
        self,
        actor: Actor,
        page: int,
        limit: int,
        search: str | None = None,
        muscle_group: str | None = None,
        equipment_id: str | None = None,
    ) -> Page:
        return await self.exercises.list_page(
            tenant_of(actor),
            page,
            limit,
            search=search,
            muscle_group=muscle_group,
            equipment_id=equipment_id,
        )

    async def get(self, actor: Actor, exercise_id: str) -> Exercise:
        exercise = await self.exercises.get(exercise_id, tenant_of(actor))
        if exercise is None:
            raise NotFoundError("Exercise not found")
        return exercise

    async def update(self, actor: Actor, exercise_id: str, fields: dict) -> Exercise:
        gym_id = tenant_of(actor)
        exercise = await self.get(actor, exercise_id)
        if actor.is_trainer and exercise.created_by != actor.user_id:
            raise ForbiddenError("You can only edit exercises you created")
        if fields.get("name") and await self.exercises.name_taken(
            gym_id, fields["name"], exclude_id=exercise_id
        ):
            raise ConflictError("Exercise with this name already exists")
        await self._check_equipment(gym_id, fields.get("equipment_id"))
        return await self.exercises.update(exercise_id, gym_id, fields)

    async def delete(self, actor: Actor, exercise_id: str) -> None:
        exercise = await self.get(actor, exercise_id)
        if actor.is_trainer and exercise.created_by != actor.user_id:
            raise ForbiddenError("You can only delete exercises you created")
        if await self.exercises.count_program_uses(exercise_id) > 0:
            raise ValidationError("Cannot delete exercise that is used in programs")
        await self.exercises.soft_delete(exercise_id)
        logger.info("Deleted exercise %s", exercise_id)

    async def muscle_groups(self, actor: Actor) -> list[str]:
        return await self.exercises.muscle_groups(tenant_of(actor))

    async def stats(self, actor: Actor) -> dict:
        return await self.exercises.stats(tenant_of(actor))
