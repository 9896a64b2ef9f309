"""Tests for the equipment and exercise catalog."""

import pytest

from gymkeep.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from gymkeep.services import EquipmentService, ExerciseService


@pytest.fixture
async def rack(db_path, world):
    return await EquipmentService(db_path).create(world.owner, "Squat Rack")


class TestEquipment:
    """Tests for EquipmentService."""

    async def test_scan_resolves_qr_label(self, db_path, world, rack):
        scanned = await EquipmentService(db_path).get_by_qr(world.student, rack.qr_code_uuid)

        assert scanned["id"] == rack.id
        assert scanned["warning"] is None

    async def test_scan_warns_about_broken_equipment(self, db_path, world, rack):
        service = EquipmentService(db_path)
        await service.update(world.owner, rack.id, {"status": "broken"})

        scanned = await service.get_by_qr(world.student, rack.qr_code_uuid)

        assert scanned["status"] == "broken"
        assert scanned["warning"] == "This equipment is currently out of service"

    async def test_qr_labels_stay_inside_their_gym(self, db_path, other_world, rack):
        with pytest.raises(NotFoundError):
            await EquipmentService(db_path).get_by_qr(other_world.student, rack.qr_code_uuid)

    async def test_qr_code_payload(self, db_path, world, rack):
        label = await EquipmentService(db_path).qr_code(world.owner, rack.id)

        assert label["payload"] == rack.qr_code_uuid
        assert label["name"] == "Squat Rack"

    async def test_names_unique_per_gym(self, db_path, world, other_world, rack):
        service = EquipmentService(db_path)

        with pytest.raises(ConflictError):
            await service.create(world.owner, "Squat Rack")
        assert (await service.create(other_world.owner, "Squat Rack")).id != rack.id

    async def test_invalid_status(self, db_path, world):
        with pytest.raises(ValidationError, match="Invalid status"):
            await EquipmentService(db_path).create(world.owner, "Bike", status="lost")

    async def test_equipment_in_use_cannot_be_deleted(self, db_path, world, rack):
        exercises = ExerciseService(db_path)
        squat = await exercises.create(world.owner, "Back Squat", equipment_id=rack.id)
        equipment = EquipmentService(db_path)

        with pytest.raises(ValidationError, match="used by exercises"):
            await equipment.delete(world.owner, rack.id)

        await exercises.delete(world.owner, squat.id)
        await equipment.delete(world.owner, rack.id)
        with pytest.raises(NotFoundError):
            await equipment.get_by_qr(world.owner, rack.qr_code_uuid)


class TestExercises:
    """Tests for ExerciseService."""

    async def test_trainers_edit_only_their_own(self, db_path, world):
        service = ExerciseService(db_path)
        owned = await service.create(world.owner, "Lunge")
        mine = await service.create(world.trainer, "Step-up")

        with pytest.raises(ForbiddenError):
            await service.update(world.trainer, owned.id, {"description": "Walking"})
        updated = await service.update(world.trainer, mine.id, {"description": "Box"})

        assert updated.description == "Box"
        assert updated.created_by == world.trainer.user_id

    async def test_equipment_must_belong_to_the_gym(self, db_path, other_world, rack):
        with pytest.raises(NotFoundError, match="Equipment not found"):
            await ExerciseService(db_path).create(
                other_world.owner, "Front Squat", equipment_id=rack.id
            )

    async def test_names_ignore_case(self, db_path, world):
        service = ExerciseService(db_path)
        await service.create(world.owner, "Romanian Deadlift")

        with pytest.raises(ConflictError):
            await service.create(world.trainer, "romanian deadlift")
