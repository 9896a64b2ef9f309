"""Tests for workout sessions."""

import sqlite3

import pytest

from gymkeep.db.repositories import WorkoutLogRepository
from gymkeep.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from gymkeep.models.common import utcnow
from gymkeep.models.workout_log import WorkoutLog
from gymkeep.services import (
    ExerciseService,
    ProgramExerciseService,
    ProgramService,
    TrainerMatchService,
    WorkoutService,
)


@pytest.fixture
async def plan(db_path, world):
    """A program assigned to the student with squats and bench press."""
    exercises = ExerciseService(db_path)
    squat = await exercises.create(world.owner, "Squat", target_muscle_group="Legs")
    bench = await exercises.create(world.owner, "Bench Press", target_muscle_group="Chest")
    await exercises.create(world.owner, "Curl", target_muscle_group="Arms")

    program = await ProgramService(db_path).create(
        world.trainer, "Push Legs", assigned_user_id=world.student.user_id
    )
    slots = ProgramExerciseService(db_path)
    await slots.add(world.trainer, program.id, squat.id, sets=3, reps="5")
    await slots.add(world.trainer, program.id, bench.id, sets=3, reps="8")
    return program, squat, bench


class TestWorkoutSessions:
    """Tests for starting and finishing workouts."""

    async def test_one_active_workout_per_user(self, db_path, world, plan):
        program, _, _ = plan
        service = WorkoutService(db_path)

        first = await service.start(world.student, program.id)
        assert first.is_active

        with pytest.raises(ConflictError, match="active workout"):
            await service.start(world.student, program.id)

        await service.end(world.student, first.id, notes="Felt strong")
        second = await service.start(world.student, program.id)

        assert second.id != first.id
        assert (await service.active(world.student)).id == second.id

    async def test_ending_twice_is_rejected(self, db_path, world, plan):
        program, _, _ = plan
        service = WorkoutService(db_path)
        log = await service.start(world.student, program.id)

        ended = await service.end(world.student, log.id)
        assert not ended.is_active
        assert ended.to_dict()["isActive"] is False

        with pytest.raises(ValidationError, match="already been finished"):
            await service.end(world.student, log.id)

    async def test_only_the_owner_can_finish(self, db_path, world, plan):
        program, _, _ = plan
        service = WorkoutService(db_path)
        log = await service.start(world.student, program.id)

        with pytest.raises(NotFoundError):
            await service.end(world.owner, log.id)

    async def test_unassigned_program_cannot_be_started(self, db_path, world):
        other = await ProgramService(db_path).create(world.owner, "Owner Only")

        with pytest.raises(NotFoundError, match="not accessible"):
            await WorkoutService(db_path).start(world.student, other.id)

    async def test_no_active_workout(self, db_path, world):
        assert await WorkoutService(db_path).active(world.student) is None

    async def test_second_active_log_rejected_by_index(self, db_path, world, plan):
        program, _, _ = plan
        repo = WorkoutLogRepository(db_path)
        await repo.start(WorkoutLog(world.student.user_id, program.id, utcnow()))

        with pytest.raises(ConflictError):
            await repo.start(WorkoutLog(world.student.user_id, program.id, utcnow()))

    async def test_other_integrity_errors_are_not_conflicts(self, db_path, world):
        repo = WorkoutLogRepository(db_path)

        with pytest.raises(sqlite3.IntegrityError):
            await repo.start(WorkoutLog(world.student.user_id, "missing-program", utcnow()))


class TestLoggedSets:
    """Tests for logging sets inside a workout."""

    async def test_sets_are_attached_to_the_log(self, db_path, world, plan):
        program, squat, bench = plan
        service = WorkoutService(db_path)
        log = await service.start(world.student, program.id)

        await service.log_set(world.student, log.id, squat.id, 1, 5, weight_kg=100.0, rpe=7)
        await service.log_set(world.student, log.id, squat.id, 2, 5, weight_kg=102.5)
        entry = await service.log_set(world.student, log.id, bench.id, 1, 8, weight_kg=60.0)

        assert entry.exercise_name == "Bench Press"
        detail = await service.get(world.student, log.id)
        assert len(detail.entries) == 3
        assert detail.to_dict(include_entries=True)["entries"][0]["weightKg"] is not None

    async def test_exercise_outside_program_rejected(self, db_path, world, plan):
        program, _, _ = plan
        curl = (await ExerciseService(db_path).list_page(world.owner, 1, 20, search="Curl")).items[0]
        service = WorkoutService(db_path)
        log = await service.start(world.student, program.id)

        with pytest.raises(NotFoundError, match="not found in this program"):
            await service.log_set(world.student, log.id, curl.id, 1, 10)

    async def test_finished_workout_is_read_only(self, db_path, world, plan):
        program, squat, _ = plan
        service = WorkoutService(db_path)
        log = await service.start(world.student, program.id)
        entry = await service.log_set(world.student, log.id, squat.id, 1, 5)
        await service.end(world.student, log.id)

        with pytest.raises(ValidationError):
            await service.log_set(world.student, log.id, squat.id, 2, 5)
        with pytest.raises(ValidationError):
            await service.update_set(world.student, log.id, entry.id, {"reps_completed": 6})
        with pytest.raises(ValidationError):
            await service.delete_set(world.student, log.id, entry.id)

    async def test_update_and_delete_set(self, db_path, world, plan):
        program, squat, _ = plan
        service = WorkoutService(db_path)
        log = await service.start(world.student, program.id)
        entry = await service.log_set(world.student, log.id, squat.id, 1, 5)

        updated = await service.update_set(
            world.student, log.id, entry.id, {"reps_completed": 4, "rpe": 9.0}
        )
        assert updated.reps_completed == 4
        assert updated.rpe == 9.0

        await service.delete_set(world.student, log.id, entry.id)
        assert (await service.get(world.student, log.id)).entries == []
        with pytest.raises(NotFoundError):
            await service.delete_set(world.student, log.id, entry.id)


class TestWorkoutVisibility:
    """Tests for who can read whose workouts."""

    async def test_trainer_needs_a_match(self, db_path, world, plan):
        program, _, _ = plan
        service = WorkoutService(db_path)
        log = await service.start(world.student, program.id)

        with pytest.raises(ForbiddenError):
            await service.list_page(world.trainer, 1, 20, user_id=world.student.user_id)
        with pytest.raises(NotFoundError):
            await service.get(world.trainer, log.id)

        await TrainerMatchService(db_path).create(
            world.owner, world.trainer.user_id, world.student.user_id
        )
        page = await service.list_page(world.trainer, 1, 20, user_id=world.student.user_id)
        assert [item.id for item in page.items] == [log.id]
        assert (await service.get(world.trainer, log.id)).id == log.id

    async def test_owner_sees_all_but_other_gym_sees_nothing(
        self, db_path, world, other_world, plan
    ):
        program, _, _ = plan
        service = WorkoutService(db_path)
        log = await service.start(world.student, program.id)

        assert (await service.list_page(world.owner, 1, 20)).total == 1
        assert (await service.list_page(other_world.owner, 1, 20)).total == 0
        with pytest.raises(NotFoundError):
            await service.get(other_world.owner, log.id)

    async def test_stats(self, db_path, world, plan):
        program, squat, _ = plan
        service = WorkoutService(db_path)
        done = await service.start(world.student, program.id)
        await service.log_set(world.student, done.id, squat.id, 1, 5)
        await service.log_set(world.student, done.id, squat.id, 2, 5)
        await service.end(world.student, done.id)
        await service.start(world.student, program.id)

        stats = await service.stats(world.student)

        assert stats["totalWorkouts"] == 2
        assert stats["completedWorkouts"] == 1
        assert stats["activeWorkouts"] == 1
        assert stats["totalSets"] == 2
        assert len(stats["recentWorkouts"]) == 2

    async def test_student_cannot_read_others_stats(self, db_path, world):
        with pytest.raises(ForbiddenError):
            await WorkoutService(db_path).stats(world.student, user_id=world.trainer.user_id)
