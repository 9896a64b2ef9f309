"""Trainer-student matching."""

import logging
from pathlib import Path

from ..db.repositories import TrainerMatchRepository, UserRepository
from ..errors import ConflictError, NotFoundError, ValidationError
from ..models.common import Page
from ..models.identity import Actor
from ..models.permissions import STUDENT, TRAINER
from ..models.trainer_match import MatchStatus, TrainerMatch
from .base import tenant_of

logger = logging.getLogger(__name__)


def parse_match_status(value: str) -> MatchStatus:
    try:
        return MatchStatus(value)
    except ValueError:
        allowed = ", ".join(status.value for status in MatchStatus)
        raise ValidationError(f"Invalid status. Must be one of: {allowed}")


class TrainerMatchService:
    def __init__(self, db_path: Path | None = None):
        self.matches = TrainerMatchRepository(db_path)
        self.users = UserRepository(db_path)

    async def create(self, actor: Actor, trainer_id: str, student_id: str) -> TrainerMatch:
        """Pair a trainer with a student, reviving an ended pairing if any."""
        gym_id = tenant_of(actor)
        trainer = await self.users.get(trainer_id, gym_id)
        if trainer is None:
            raise NotFoundError("Trainer not found")
        if trainer.role_name != TRAINER:
            raise ValidationError("User is not a trainer")
        student = await self.users.get(student_id, gym_id)
        if student is None:
            raise NotFoundError("Student not found")
        if student.role_name != STUDENT:
            raise ValidationError("User is not a student")

        existing = await self.matches.find_pair(trainer_id, student_id)
        if existing is not None and existing.status == MatchStatus.ACTIVE:
            raise ConflictError("This trainer-student match already exists")

        match = await self.matches.activate(gym_id, trainer_id, student_id)
        logger.info("Matched trainer %s with student %s", trainer_id, student_id)
        return match

    async def get(self, actor: Actor, match_id: str) -> TrainerMatch:
        match = await self.matches.get(match_id, tenant_of(actor))
        if match is None or (
            actor.is_student and match.student_id != actor.user_id
        ) or (actor.is_trainer and match.trainer_id != actor.user_id):
            raise NotFoundError("Match not found")
        return match

    async def list_page(
        self,
        actor: Actor,
        page: int,
        limit: int,
        status: str | None = None,
        trainer_id: str | None = None,
        student_id: str | None = None,
    ) -> Page:
        """List matches; trainers and students only see their own."""
        if actor.is_trainer:
            trainer_id = actor.user_id
        if actor.is_student:
            student_id = actor.user_id
        return await self.matches.list_page(
            tenant_of(actor),
            page,
            limit,
            status=parse_match_status(status) if status else None,
            trainer_id=trainer_id,
            student_id=student_id,
        )

    async def update_status(self, actor: Actor, match_id: str, status: str) -> TrainerMatch:
        new_status = parse_match_status(status)
        await self.get(actor, match_id)
        return await self.matches.set_status(match_id, tenant_of(actor), new_status)

    async def end(self, actor: Actor, match_id: str) -> None:
        await self.get(actor, match_id)
        await self.matches.end(match_id)
        logger.info("Ended trainer match %s", match_id)

    async def students_of(
        self, actor: Actor, page: int, limit: int, trainer_id: str | None = None
    ) -> Page:
        """Active matches of a trainer (the actor by default)."""
        gym_id = tenant_of(actor)
        trainer_id = actor.user_id if actor.is_trainer else (trainer_id or actor.user_id)
        if await self.users.get(trainer_id, gym_id) is None:
            raise NotFoundError("Trainer not found")
        return await self.matches.list_page(
            gym_id, page, limit, status=MatchStatus.ACTIVE, trainer_id=trainer_id
        )

    async def trainer_of(self, actor: Actor, student_id: str | None = None) -> TrainerMatch | None:
        """The active match of a student (the actor by default), if any."""
        student_id = actor.user_id if actor.is_student else (student_id or actor.user_id)
        return await self.matches.active_for_student(student_id, tenant_of(actor))
