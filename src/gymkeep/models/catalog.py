"""Equipment and exercise catalog models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .common import format_timestamp


class EquipmentStatus(str, Enum):
    """Operational state of a piece of equipment."""

    ACTIVE = "active"
    MAINTENANCE = "maintenance"
    BROKEN = "broken"


EQUIPMENT_WARNINGS = {
    EquipmentStatus.BROKEN: "This equipment is currently out of service",
    EquipmentStatus.MAINTENANCE: "This equipment is under maintenance",
}


@dataclass
class Equipment:
    """A machine or station in a gym.

    ``qr_code_uuid`` is printed on the physical QR label and is decoupled
    from the primary key so labels survive data migrations.
    """

    gym_id: str
    name: str
    description: str | None = None
    video_url: str | None = None
    status: EquipmentStatus = EquipmentStatus.ACTIVE
    qr_code_uuid: str | None = None
    id: str | None = None
    exercise_count: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def warning(self) -> str | None:
        """Warning shown to members who scan a non-operational machine."""
        return EQUIPMENT_WARNINGS.get(self.status)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "gymId": self.gym_id,
            "name": self.name,
            "description": self.description,
            "videoUrl": self.video_url,
            "status": self.status.value,
            "qrCodeUuid": self.qr_code_uuid,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }
        if self.exercise_count is not None:
            data["exerciseCount"] = self.exercise_count
        return data


@dataclass
class Exercise:
    """An exercise in a gym's library, optionally tied to equipment."""

    gym_id: str
    name: str
    created_by: str | None = None
    description: str | None = None
    video_url: str | None = None
    target_muscle_group: str | None = None
    equipment_id: str | None = None
    equipment_name: str | None = None
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "gymId": self.gym_id,
            "createdBy": self.created_by,
            "name": self.name,
            "description": self.description,
            "videoUrl": self.video_url,
            "targetMuscleGroup": self.target_muscle_group,
            "equipment": (
                {"id": self.equipment_id, "name": self.equipment_name}
                if self.equipment_id
                else None
            ),
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }
