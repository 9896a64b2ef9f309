"""Workout program authoring."""

import logging
from pathlib import Path

from ..db.repositories import (
    ExerciseRepository,
    ProgramExerciseRepository,
    ProgramRepository,
    UserRepository,
)
from ..errors import NotFoundError, ValidationError
from ..models.common import Page
from ..models.identity import Actor
from ..models.program import DifficultyLevel, ProgramExercise, WorkoutProgram
from .base import tenant_of

logger = logging.getLogger(__name__)


def parse_difficulty(value: str) -> DifficultyLevel:
    try:
        return DifficultyLevel(value)
    except ValueError:
        allowed = ", ".join(level.value for level in DifficultyLevel)
        raise ValidationError(f"Invalid difficulty level. Must be one of: {allowed}")


class ProgramService:
    """Programs and their metadata.

    Students only see programs they created or were assigned.
    """

    def __init__(self, db_path: Path | None = None):
        self.programs = ProgramRepository(db_path)
        self.entries = ProgramExerciseRepository(db_path)
        self.users = UserRepository(db_path)

    async def _check_assignee(self, gym_id: str, user_id: str | None) -> None:
        if user_id and await self.users.get(user_id, gym_id) is None:
            raise NotFoundError("Assigned user not found in your gym")

    async def create(
        self,
        actor: Actor,
        name: str,
        description: str | None = None,
        difficulty_level: str | None = None,
        assigned_user_id: str | None = None,
    ) -> WorkoutProgram:
        gym_id = tenant_of(actor)
        await self._check_assignee(gym_id, assigned_user_id)
        program = await self.programs.create(
            WorkoutProgram(
                gym_id=gym_id,
                creator_id=actor.user_id,
                name=name,
                description=description,
                difficulty_level=(
                    parse_difficulty(difficulty_level)
                    if difficulty_level
                    else DifficultyLevel.BEGINNER
                ),
                assigned_user_id=assigned_user_id,
            )
        )
        logger.info("Created program %s in gym %s", program.id, gym_id)
        return program

    async def list_page(
        self,
        actor: Actor,
        page: int,
        limit: int,
        search: str | None = None,
        difficulty_level: str | None = None,
        creator_id: str | None = None,
        assigned_user_id: str | None = None,
    ) -> Page:
        return await self.programs.list_page(
            tenant_of(actor),
            page,
            limit,
            search=search,
            difficulty_level=parse_difficulty(difficulty_level) if difficulty_level else None,
            creator_id=creator_id,
            assigned_user_id=assigned_user_id,
            visible_to=actor.user_id if actor.is_student else None,
        )

    async def get(self, actor: Actor, program_id: str) -> WorkoutProgram:
        """Get a program visible to the actor, without its exercises."""
        program = await self.programs.get(program_id, tenant_of(actor))
        if program is None or (
            actor.is_student
            and actor.user_id not in (program.creator_id, program.assigned_user_id)
        ):
            raise NotFoundError("Program not found")
        return program

    async def get_with_exercises(self, actor: Actor, program_id: str) -> WorkoutProgram:
        program = await self.get(actor, program_id)
        program.exercises = await self.entries.list_for_program(program_id)
        return program

    async def update(self, actor: Actor, program_id: str, fields: dict) -> WorkoutProgram:
        gym_id = tenant_of(actor)
        await self.get(actor, program_id)
        if fields.get("difficulty_level"):
            fields["difficulty_level"] = parse_difficulty(fields["difficulty_level"])
        await self._check_assignee(gym_id, fields.get("assigned_user_id"))
        return await self.programs.update(program_id, gym_id, fields)

    async def delete(self, actor: Actor, program_id: str) -> None:
        await self.get(actor, program_id)
        await self.programs.soft_delete(program_id)
        logger.info("Deleted program %s", program_id)

    async def clone(
        self,
        actor: Actor,
        program_id: str,
        name: str | None = None,
        assigned_user_id: str | None = None,
    ) -> WorkoutProgram:
        """Copy a program and its exercise slots; the actor becomes creator."""
        gym_id = tenant_of(actor)
        source = await self.get(actor, program_id)
        await self._check_assignee(gym_id, assigned_user_id)
        copy = await self.programs.clone(
            source,
            WorkoutProgram(
                gym_id=gym_id,
                creator_id=actor.user_id,
                name=name or f"{source.name} (Copy)",
                description=source.description,
                difficulty_level=source.difficulty_level,
                assigned_user_id=assigned_user_id,
            ),
        )
        copy.exercises = await self.entries.list_for_program(copy.id)
        logger.info("Cloned program %s into %s", source.id, copy.id)
        return copy

    async def stats(self, actor: Actor) -> dict:
        return await self.programs.stats(tenant_of(actor))


class ProgramExerciseService:
    """Ordered exercise slots within a program."""

    def __init__(self, db_path: Path | None = None):
        self.programs = ProgramService(db_path)
        self.exercises = ExerciseRepository(db_path)
        self.entries = ProgramExerciseRepository(db_path)

    async def list_for_program(self, actor: Actor, program_id: str) -> list[ProgramExercise]:
        await self.programs.get(actor, program_id)
        return await self.entries.list_for_program(program_id)

    async def get(self, actor: Actor, program_id: str, entry_id: str) -> ProgramExercise:
        await self.programs.get(actor, program_id)
        entry = await self.entries.get(entry_id, program_id)
        if entry is None:
            raise NotFoundError("Program exercise not found")
        return entry

    async def add(
        self,
        actor: Actor,
        program_id: str,
        exercise_id: str,
        sets: int,
        reps: str,
        rest_time_seconds: int | None = None,
        notes: str | None = None,
        order_index: int | None = None,
    ) -> ProgramExercise:
        """Insert an exercise, appending unless ``order_index`` is given."""
        await self.programs.get(actor, program_id)
        if await self.exercises.get(exercise_id, tenant_of(actor)) is None:
            raise NotFoundError("Exercise not found")
        entry = await self.entries.insert(
            ProgramExercise(
                program_id=program_id,
                exercise_id=exercise_id,
                order_index=0,
                sets=sets,
                reps=reps,
                rest_time_seconds=rest_time_seconds,
                notes=notes,
            ),
            index=order_index,
        )
        logger.info(
            "Added exercise %s to program %s at %d", exercise_id, program_id, entry.order_index
        )
        return entry

    async def update(
        self,
        actor: Actor,
        program_id: str,
        entry_id: str,
        fields: dict,
        order_index: int | None = None,
    ) -> ProgramExercise:
        await self.programs.get(actor, program_id)
        return await self.entries.update(entry_id, program_id, fields, new_index=order_index)

    async def remove(self, actor: Actor, program_id: str, entry_id: str) -> None:
        await self.programs.get(actor, program_id)
        await self.entries.remove(entry_id, program_id)
        logger.info("Removed program exercise %s from program %s", entry_id, program_id)

    async def reorder(
        self, actor: Actor, program_id: str, orders: list[tuple[str, int]]
    ) -> list[ProgramExercise]:
        await self.programs.get(actor, program_id)
        return await self.entries.reorder(program_id, orders)
