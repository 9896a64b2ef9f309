"""Tests for trainer-student matching."""

import pytest

from gymkeep.errors import ConflictError, NotFoundError, ValidationError
from gymkeep.models.trainer_match import MatchStatus
from gymkeep.services import TrainerMatchService


class TestTrainerMatches:
    async def test_create_and_duplicate(self, db_path, world):
        service = TrainerMatchService(db_path)

        match = await service.create(world.owner, world.trainer.user_id, world.student.user_id)

        assert match.status == MatchStatus.ACTIVE
        assert match.trainer["id"] == world.trainer.user_id
        assert match.student["id"] == world.student.user_id
        with pytest.raises(ConflictError):
            await service.create(world.owner, world.trainer.user_id, world.student.user_id)

    async def test_ended_match_is_reactivated_in_place(self, db_path, world):
        """Test that re-creating an ended pairing reuses the same row."""
        service = TrainerMatchService(db_path)
        match = await service.create(world.owner, world.trainer.user_id, world.student.user_id)

        await service.end(world.owner, match.id)
        assert await service.trainer_of(world.student) is None
        with pytest.raises(NotFoundError):
            await service.get(world.owner, match.id)

        again = await service.create(world.owner, world.trainer.user_id, world.student.user_id)

        assert again.id == match.id
        assert again.status == MatchStatus.ACTIVE

    async def test_roles_must_fit(self, db_path, world):
        service = TrainerMatchService(db_path)

        with pytest.raises(ValidationError, match="not a trainer"):
            await service.create(world.owner, world.student.user_id, world.student.user_id)
        with pytest.raises(ValidationError, match="not a student"):
            await service.create(world.owner, world.trainer.user_id, world.owner.user_id)

    async def test_people_must_belong_to_the_gym(self, db_path, world, other_world):
        with pytest.raises(NotFoundError):
            await TrainerMatchService(db_path).create(
                world.owner, world.trainer.user_id, other_world.student.user_id
            )

    async def test_participants_see_only_their_matches(self, db_path, world):
        service = TrainerMatchService(db_path)
        match = await service.create(world.owner, world.trainer.user_id, world.student.user_id)

        assert [m.id for m in (await service.list_page(world.trainer, 1, 20)).items] == [match.id]
        assert [m.id for m in (await service.list_page(world.student, 1, 20)).items] == [match.id]
        assert (await service.students_of(world.trainer, 1, 20)).total == 1
        assert (await service.trainer_of(world.student)).trainer_id == world.trainer.user_id

    async def test_status_update(self, db_path, world):
        service = TrainerMatchService(db_path)
        match = await service.create(world.owner, world.trainer.user_id, world.student.user_id)

        ended = await service.update_status(world.owner, match.id, "ended")
        assert ended.status == MatchStatus.ENDED
        assert (await service.students_of(world.trainer, 1, 20)).total == 0

        with pytest.raises(ValidationError, match="Invalid status"):
            await service.update_status(world.owner, match.id, "paused")
