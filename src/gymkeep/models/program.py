"""Workout program data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .common import format_timestamp


class DifficultyLevel(str, Enum):
    """How demanding a program is."""

    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


@dataclass
class ProgramExercise:
    """An exercise slot inside a program.

    ``order_index`` values of a program's live rows always form ``0..N-1``.
    """

    program_id: str
    exercise_id: str
    order_index: int
    sets: int
    reps: str
    rest_time_seconds: int | None = None
    notes: str | None = None
    id: str | None = None
    exercise_name: str | None = None
    target_muscle_group: str | None = None
    created_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "programId": self.program_id,
            "exerciseId": self.exercise_id,
            "orderIndex": self.order_index,
            "sets": self.sets,
            "reps": self.reps,
            "restTimeSeconds": self.rest_time_seconds,
            "notes": self.notes,
            "exercise": {
                "id": self.exercise_id,
                "name": self.exercise_name,
                "targetMuscleGroup": self.target_muscle_group,
            },
        }


@dataclass
class WorkoutProgram:
    """A program authored by a trainer, optionally assigned to one member."""

    gym_id: str
    creator_id: str
    name: str
    description: str | None = None
    difficulty_level: DifficultyLevel = DifficultyLevel.BEGINNER
    assigned_user_id: str | None = None
    id: str | None = None
    exercises: list[ProgramExercise] = field(default_factory=list)
    exercise_count: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self, include_exercises: bool = False) -> dict:
        data = {
            "id": self.id,
            "gymId": self.gym_id,
            "creatorId": self.creator_id,
            "name": self.name,
            "description": self.description,
            "difficultyLevel": self.difficulty_level.value,
            "assignedUserId": self.assigned_user_id,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }
        if self.exercise_count is not None:
            data["exerciseCount"] = self.exercise_count
        if include_exercises:
            data["exercises"] = [e.to_dict() for e in self.exercises]
        return data


def check_reorder(current_ids: set[str], orders: list[tuple[str, int]]) -> str | None:
    """Check a full reorder request against a program's live rows.

    Args:
        current_ids: Ids of the program's non-deleted exercises
        orders: Requested ``(id, order_index)`` pairs

    Returns:
        A problem description, or None if the request is a valid permutation
    """
    ids = [entry_id for entry_id, _ in orders]
    if len(set(ids)) != len(ids):
        return "Each exercise may appear only once"
    if set(ids) != current_ids:
        return "Reorder must include every exercise in the program"
    indices = sorted(index for _, index in orders)
    if indices != list(range(len(current_ids))):
        return f"Order indices must be exactly 0..{len(current_ids) - 1}"
    return None
