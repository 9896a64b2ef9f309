"""Helpers shared by the service layer."""

from ..db.repositories import TrainerMatchRepository
from ..errors import ValidationError
from ..models.identity import Actor


def tenant_of(actor: Actor) -> str:
    """The gym a request operates on.

    A super admin has no gym of their own and must pick one per request.
    """
    if actor.gym_id is None:
        raise ValidationError("Select a gym with the X-Gym-Id header")
    return actor.gym_id


async def visible_user_ids(
    actor: Actor, matches: TrainerMatchRepository
) -> list[str] | None:
    """Users whose records the actor may list.

    Students see only themselves, trainers see their active students, and
    everyone else sees the whole gym (None).
    """
    if actor.is_student:
        return [actor.user_id]
    if actor.is_trainer:
        return await matches.active_student_ids(actor.user_id)
    return None
