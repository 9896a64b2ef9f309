"""Workout session logging models."""

from dataclasses import dataclass, field
from datetime import datetime

from .common import format_timestamp


@dataclass
class WorkoutLogEntry:
    """One completed set."""

    workout_log_id: str
    exercise_id: str
    set_number: int
    reps_completed: int
    weight_kg: float | None = None
    rpe: float | None = None
    id: str | None = None
    exercise_name: str | None = None
    created_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "workoutLogId": self.workout_log_id,
            "exerciseId": self.exercise_id,
            "exerciseName": self.exercise_name,
            "setNumber": self.set_number,
            "weightKg": self.weight_kg,
            "repsCompleted": self.reps_completed,
            "rpe": self.rpe,
            "createdAt": format_timestamp(self.created_at),
        }


@dataclass
class WorkoutLog:
    """A training session against a program.

    A log with ``ended_at`` unset is the user's active workout; a user has at
    most one of those at a time.
    """

    user_id: str
    program_id: str
    started_at: datetime
    ended_at: datetime | None = None
    notes: str | None = None
    id: str | None = None
    program_name: str | None = None
    entries: list[WorkoutLogEntry] = field(default_factory=list)
    entry_count: int | None = None

    @property
    def is_active(self) -> bool:
        return self.ended_at is None

    def to_dict(self, include_entries: bool = False) -> dict:
        data = {
            "id": self.id,
            "userId": self.user_id,
            "programId": self.program_id,
            "programName": self.program_name,
            "startedAt": format_timestamp(self.started_at),
            "endedAt": format_timestamp(self.ended_at),
            "notes": self.notes,
            "isActive": self.is_active,
        }
        if self.entry_count is not None:
            data["entryCount"] = self.entry_count
        if include_entries:
            data["entries"] = [e.to_dict() for e in self.entries]
        return data
