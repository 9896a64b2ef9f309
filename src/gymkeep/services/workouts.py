"""Workout sessions and logged sets."""

import logging
from datetime import datetime
from pathlib import Path

from ..db.repositories import (
    ProgramExerciseRepository,
    ProgramRepository,
    TrainerMatchRepository,
    UserRepository,
    WorkoutLogEntryRepository,
    WorkoutLogRepository,
)
from ..db.repositories.workouts import ACTIVE_WORKOUT_MESSAGE
from ..errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ..models.common import Page, utcnow
from ..models.identity import Actor
from ..models.workout_log import WorkoutLog, WorkoutLogEntry
from .base import tenant_of, visible_user_ids

logger = logging.getLogger(__name__)


class WorkoutService:
    """Start, log and finish workouts.

    Only the member who started a workout can log sets in it or finish it.
    """

    def __init__(self, db_path: Path | None = None):
        self.logs = WorkoutLogRepository(db_path)
        self.entries = WorkoutLogEntryRepository(db_path)
        self.programs = ProgramRepository(db_path)
        self.program_exercises = ProgramExerciseRepository(db_path)
        self.users = UserRepository(db_path)
        self.matches = TrainerMatchRepository(db_path)

    async def start(self, actor: Actor, program_id: str, notes: str | None = None) -> WorkoutLog:
        """Start a workout on a program the actor created or was assigned."""
        program = await self.programs.get(program_id, tenant_of(actor))
        if program is None or actor.user_id not in (
            program.creator_id,
            program.assigned_user_id,
        ):
            raise NotFoundError("Program not found or not accessible")
        if await self.logs.get_active(actor.user_id) is not None:
            raise ConflictError(ACTIVE_WORKOUT_MESSAGE)

        log = await self.logs.start(
            WorkoutLog(
                user_id=actor.user_id,
                program_id=program_id,
                started_at=utcnow(),
                notes=notes,
            )
        )
        logger.info("User %s started workout %s", actor.user_id, log.id)
        return log

    async def _own_log(self, actor: Actor, log_id: str) -> WorkoutLog:
        tenant_of(actor)
        log = await self.logs.get_owned(log_id, actor.user_id)
        if log is None:
            raise NotFoundError("Workout log not found")
        return log

    async def end(self, actor: Actor, log_id: str, notes: str | None = None) -> WorkoutLog:
        log = await self._own_log(actor, log_id)
        if not log.is_active or not await self.logs.end(log_id, utcnow(), notes):
            raise ValidationError("Workout has already been finished")
        logger.info("User %s finished workout %s", actor.user_id, log_id)
        return await self._with_entries(await self.logs.get_owned(log_id, actor.user_id))

    async def log_set(
        self,
        actor: Actor,
        log_id: str,
        exercise_id: str,
        set_number: int,
        reps_completed: int,
        weight_kg: float | None = None,
        rpe: float | None = None,
    ) -> WorkoutLogEntry:
        log = await self._own_log(actor, log_id)
        if not log.is_active:
            raise ValidationError("Cannot add sets to a finished workout")
        slots = await self.program_exercises.list_for_program(log.program_id)
        if exercise_id not in {slot.exercise_id for slot in slots}:
            raise NotFoundError("Exercise not found in this program")
        return await self.entries.create(
            WorkoutLogEntry(
                workout_log_id=log_id,
                exercise_id=exercise_id,
                set_number=set_number,
                reps_completed=reps_completed,
                weight_kg=weight_kg,
                rpe=rpe,
            )
        )

    async def update_set(
        self, actor: Actor, log_id: str, entry_id: str, fields: dict
    ) -> WorkoutLogEntry:
        log = await self._own_log(actor, log_id)
        if not log.is_active:
            raise ValidationError("Cannot update sets in a finished workout")
        if await self.entries.get(entry_id, log_id) is None:
            raise NotFoundError("Set entry not found")
        return await self.entries.update(entry_id, log_id, fields)

    async def delete_set(self, actor: Actor, log_id: str, entry_id: str) -> None:
        log = await self._own_log(actor, log_id)
        if not log.is_active:
            raise ValidationError("Cannot delete sets from a finished workout")
        if await self.entries.get(entry_id, log_id) is None:
            raise NotFoundError("Set entry not found")
        await self.entries.soft_delete(entry_id)

    async def active(self, actor: Actor) -> WorkoutLog | None:
        tenant_of(actor)
        log = await self.logs.get_active(actor.user_id)
        return await self._with_entries(log) if log else None

    async def list_page(
        self,
        actor: Actor,
        page: int,
        limit: int,
        user_id: str | None = None,
        program_id: str | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> Page:
        """List logs the actor may see, optionally for one member."""
        visible = await visible_user_ids(actor, self.matches)
        user_ids = visible
        if user_id:
            if visible is not None and user_id not in visible:
                raise ForbiddenError("You can only view workout logs of your students")
            user_ids = [user_id]
        return await self.logs.list_page(
            tenant_of(actor),
            page,
            limit,
            user_ids=user_ids,
            program_id=program_id,
            start_date=start_date,
            end_date=end_date,
        )

    async def get(self, actor: Actor, log_id: str) -> WorkoutLog:
        log = await self.logs.get(log_id, tenant_of(actor))
        visible = await visible_user_ids(actor, self.matches)
        if log is None or (
            visible is not None and log.user_id not in visible and log.user_id != actor.user_id
        ):
            raise NotFoundError("Workout log not found")
        return await self._with_entries(log)

    async def stats(self, actor: Actor, user_id: str | None = None) -> dict:
        gym_id = tenant_of(actor)
        target = user_id or actor.user_id
        if target != actor.user_id:
            visible = await visible_user_ids(actor, self.matches)
            if visible is not None and target not in visible:
                raise ForbiddenError("You can only view workout statistics of your students")
        if await self.users.get(target, gym_id) is None:
            raise NotFoundError("User not found")
        return await self.logs.stats(target)

    async def _with_entries(self, log: WorkoutLog) -> WorkoutLog:
        log.entries = await self.entries.list_for_log(log.id)
        return log
