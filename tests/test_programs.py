"""Tests for program authoring and exercise ordering."""

import pytest

from gymkeep.errors import ConflictError, NotFoundError, ValidationError
from gymkeep.models.program import DifficultyLevel
from gymkeep.services import ExerciseService, ProgramExerciseService, ProgramService


@pytest.fixture
async def exercises(db_path, world):
    service = ExerciseService(db_path)
    return [
        await service.create(world.owner, name, target_muscle_group=group)
        for name, group in (
            ("Squat", "Legs"),
            ("Bench Press", "Chest"),
            ("Deadlift", "Back"),
            ("Plank", "Core"),
        )
    ]


@pytest.fixture
async def program(db_path, world):
    return await ProgramService(db_path).create(
        world.trainer, "Strength Block", assigned_user_id=world.student.user_id
    )


async def names_in_order(db_path, actor, program_id):
    entries = await ProgramExerciseService(db_path).list_for_program(actor, program_id)
    return [(entry.exercise_name, entry.order_index) for entry in entries]


class TestProgramExerciseOrdering:
    """Tests that slot indices stay dense under every mutation."""

    async def test_append_assigns_next_index(self, db_path, world, program, exercises):
        service = ProgramExerciseService(db_path)
        for exercise in exercises[:3]:
            await service.add(world.trainer, program.id, exercise.id, sets=3, reps="5")

        assert await names_in_order(db_path, world.trainer, program.id) == [
            ("Squat", 0),
            ("Bench Press", 1),
            ("Deadlift", 2),
        ]

    async def test_move_then_delete_keeps_indices_contiguous(
        self, db_path, world, program, exercises
    ):
        """Test insert 3, move index 0 to 2, delete the new index 0."""
        service = ProgramExerciseService(db_path)
        added = [
            await service.add(world.trainer, program.id, exercise.id, sets=3, reps="5")
            for exercise in exercises[:3]
        ]

        await service.update(world.trainer, program.id, added[0].id, {}, order_index=2)
        assert await names_in_order(db_path, world.trainer, program.id) == [
            ("Bench Press", 0),
            ("Deadlift", 1),
            ("Squat", 2),
        ]

        await service.remove(world.trainer, program.id, added[1].id)
        assert await names_in_order(db_path, world.trainer, program.id) == [
            ("Deadlift", 0),
            ("Squat", 1),
        ]

    async def test_move_up_shifts_rows_down(self, db_path, world, program, exercises):
        service = ProgramExerciseService(db_path)
        added = [
            await service.add(world.trainer, program.id, exercise.id, sets=3, reps="5")
            for exercise in exercises[:3]
        ]

        moved = await service.update(
            world.trainer, program.id, added[2].id, {"sets": 5}, order_index=0
        )

        assert moved.sets == 5
        assert await names_in_order(db_path, world.trainer, program.id) == [
            ("Deadlift", 0),
            ("Squat", 1),
            ("Bench Press", 2),
        ]

    async def test_insert_at_index_shifts_later_rows(self, db_path, world, program, exercises):
        service = ProgramExerciseService(db_path)
        for exercise in exercises[:3]:
            await service.add(world.trainer, program.id, exercise.id, sets=3, reps="5")

        await service.add(world.trainer, program.id, exercises[3].id, 3, "30s", order_index=1)

        assert await names_in_order(db_path, world.trainer, program.id) == [
            ("Squat", 0),
            ("Plank", 1),
            ("Bench Press", 2),
            ("Deadlift", 3),
        ]

    async def test_out_of_range_indices_are_clamped(self, db_path, world, program, exercises):
        service = ProgramExerciseService(db_path)
        first = await service.add(world.trainer, program.id, exercises[0].id, 3, "5")
        await service.add(world.trainer, program.id, exercises[1].id, 3, "5", order_index=99)

        assert (await names_in_order(db_path, world.trainer, program.id))[-1] == (
            "Bench Press",
            1,
        )

        moved = await service.update(world.trainer, program.id, first.id, {}, order_index=50)
        assert moved.order_index == 1

    async def test_same_exercise_twice_conflicts(self, db_path, world, program, exercises):
        service = ProgramExerciseService(db_path)
        await service.add(world.trainer, program.id, exercises[0].id, 3, "5")

        with pytest.raises(ConflictError):
            await service.add(world.trainer, program.id, exercises[0].id, 4, "8")

    async def test_removed_exercise_can_be_added_again(self, db_path, world, program, exercises):
        service = ProgramExerciseService(db_path)
        entry = await service.add(world.trainer, program.id, exercises[0].id, 3, "5")
        await service.remove(world.trainer, program.id, entry.id)

        again = await service.add(world.trainer, program.id, exercises[0].id, 3, "5")

        assert again.order_index == 0


class TestBulkReorder:
    """Tests for reordering all slots at once."""

    @pytest.fixture
    async def entries(self, db_path, world, program, exercises):
        service = ProgramExerciseService(db_path)
        return [
            await service.add(world.trainer, program.id, exercise.id, sets=3, reps="5")
            for exercise in exercises[:3]
        ]

    async def test_full_permutation_is_applied(self, db_path, world, program, entries):
        result = await ProgramExerciseService(db_path).reorder(
            world.trainer,
            program.id,
            [(entries[0].id, 2), (entries[1].id, 0), (entries[2].id, 1)],
        )

        assert [(e.exercise_name, e.order_index) for e in result] == [
            ("Bench Press", 0),
            ("Deadlift", 1),
            ("Squat", 2),
        ]

    async def test_unknown_id_is_not_found(self, db_path, world, program, entries):
        with pytest.raises(NotFoundError):
            await ProgramExerciseService(db_path).reorder(
                world.trainer,
                program.id,
                [(entries[0].id, 0), (entries[1].id, 1), ("missing", 2)],
            )

    async def test_partial_list_rejected(self, db_path, world, program, entries):
        with pytest.raises(ValidationError, match="every exercise"):
            await ProgramExerciseService(db_path).reorder(
                world.trainer, program.id, [(entries[0].id, 1), (entries[1].id, 0)]
            )

    async def test_gaps_and_duplicates_rejected(self, db_path, world, program, entries):
        service = ProgramExerciseService(db_path)
        with pytest.raises(ValidationError):
            await service.reorder(
                world.trainer,
                program.id,
                [(entries[0].id, 0), (entries[1].id, 0), (entries[2].id, 1)],
            )
        with pytest.raises(ValidationError):
            await service.reorder(
                world.trainer,
                program.id,
                [(entries[0].id, 0), (entries[1].id, 1), (entries[2].id, 5)],
            )

        # Nothing changed
        assert [i for _, i in await names_in_order(db_path, world.trainer, program.id)] == [
            0,
            1,
            2,
        ]


class TestPrograms:
    """Tests for program metadata, visibility and cloning."""

    async def test_defaults_to_beginner(self, db_path, world, program):
        assert program.difficulty_level == DifficultyLevel.BEGINNER
        assert program.to_dict()["difficultyLevel"] == "Beginner"

    async def test_invalid_difficulty_rejected(self, db_path, world):
        with pytest.raises(ValidationError, match="difficulty"):
            await ProgramService(db_path).create(world.owner, "Bad", difficulty_level="Expert")

    async def test_assignee_must_belong_to_gym(self, db_path, world, other_world):
        with pytest.raises(NotFoundError):
            await ProgramService(db_path).create(
                world.owner, "Remote", assigned_user_id=other_world.student.user_id
            )

    async def test_students_see_only_their_programs(self, db_path, world, program):
        service = ProgramService(db_path)
        hidden = await service.create(world.owner, "Staff Only")

        page = await service.list_page(world.student, 1, 20)

        assert [p.id for p in page.items] == [program.id]
        with pytest.raises(NotFoundError):
            await service.get(world.student, hidden.id)

    async def test_clone_copies_exercises_in_order(self, db_path, world, program, exercises):
        slots = ProgramExerciseService(db_path)
        for exercise in exercises[:3]:
            await slots.add(world.trainer, program.id, exercise.id, sets=4, reps="6")

        copy = await ProgramService(db_path).clone(world.owner, program.id)

        assert copy.id != program.id
        assert copy.name == "Strength Block (Copy)"
        assert copy.creator_id == world.owner.user_id
        assert [(e.exercise_name, e.order_index) for e in copy.exercises] == [
            ("Squat", 0),
            ("Bench Press", 1),
            ("Deadlift", 2),
        ]
        assert {e.id for e in copy.exercises}.isdisjoint(
            {e.id for e in await slots.list_for_program(world.owner, program.id)}
        )

    async def test_other_gym_cannot_see_program(self, db_path, world, other_world, program):
        with pytest.raises(NotFoundError):
            await ProgramService(db_path).get(other_world.owner, program.id)
        with pytest.raises(NotFoundError):
            await ProgramService(db_path).delete(other_world.owner, program.id)

    async def test_exercise_in_program_cannot_be_deleted(
        self, db_path, world, program, exercises
    ):
        await ProgramExerciseService(db_path).add(
            world.trainer, program.id, exercises[0].id, 3, "5"
        )

        with pytest.raises(ValidationError, match="used in programs"):
            await ExerciseService(db_path).delete(world.owner, exercises[0].id)
