"""Trainer-student relationship model."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .common import format_timestamp


class MatchStatus(str, Enum):
    """State of a trainer-student pairing."""

    ACTIVE = "active"
    ENDED = "ended"


@dataclass
class TrainerMatch:
    """Pairs a trainer with a student inside one gym.

    There is at most one row per ``(trainer, student)`` pair; ending and
    re-creating a match reuses that row.
    """

    gym_id: str
    trainer_id: str
    student_id: str
    status: MatchStatus = MatchStatus.ACTIVE
    id: str | None = None
    trainer: dict | None = None
    student: dict | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "gymId": self.gym_id,
            "trainerId": self.trainer_id,
            "studentId": self.student_id,
            "status": self.status.value,
            "trainer": self.trainer,
            "student": self.student,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }
