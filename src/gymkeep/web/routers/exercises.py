"""Exercise library routes."""

from fastapi import APIRouter, Depends, Query

from ...models.identity import Actor
from ...models.permissions import Action, Resource
from ...services import ExerciseService
from ..deps import Paging, paging, require_permission
from ..responses import handle_errors, page_response, success_response
from ..schemas import ExerciseCreate, ExerciseUpdate

router = APIRouter(prefix="/api/exercises", tags=["exercises"])

can_read = require_permission(Resource.EXERCISES, Action.READ)


@router.get("/muscle-groups")
@handle_errors("Failed to fetch muscle groups")
async def muscle_groups(actor: Actor = Depends(can_read)):
    return success_response(await ExerciseService().muscle_groups(actor))


@router.get("/stats")
@handle_errors("Failed to fetch exercise statistics")
async def exercise_stats(actor: Actor = Depends(can_read)):
    return success_response(await ExerciseService().stats(actor))


@router.get("")
@handle_errors("Failed to fetch exercises")
async def list_exercises(
    search: str | None = None,
    muscle_group: str | None = Query(None, alias="muscleGroup"),
    equipment_id: str | None = Query(None, alias="equipmentId"),
    paged: Paging = Depends(paging),
    actor: Actor = Depends(can_read),
):
    return page_response(
        await ExerciseService().list_page(
            actor,
            paged.page,
            paged.limit,
            search=search,
            muscle_group=muscle_group,
            equipment_id=equipment_id,
        )
    )


@router.get("/{exercise_id}")
@handle_errors("Failed to fetch exercise")
async def get_exercise(exercise_id: str, actor: Actor = Depends(can_read)):
    return success_response((await ExerciseService().get(actor, exercise_id)).to_dict())


@router.post("", status_code=201)
@handle_errors("Failed to create exercise")
async def create_exercise(
    body: ExerciseCreate,
    actor: Actor = Depends(require_permission(Resource.EXERCISES, Action.CREATE)),
):
    exercise = await ExerciseService().create(
        actor,
        name=body.name,
        description=body.description,
        video_url=body.video_url,
        target_muscle_group=body.target_muscle_group,
        equipment_id=body.equipment_id,
    )
    return success_response(exercise.to_dict(), message="Exercise created", status_code=201)


@router.put("/{exercise_id}")
@handle_errors("Failed to update exercise")
async def update_exercise(
    exercise_id: str,
    body: ExerciseUpdate,
    actor: Actor = Depends(require_permission(Resource.EXERCISES, Action.UPDATE)),
):
    exercise = await ExerciseService().update(actor, exercise_id, body.changes())
    return success_response(exercise.to_dict(), message="Exercise updated")


@router.delete("/{exercise_id}")
@handle_errors("Failed to delete exercise")
async def delete_exercise(
    exercise_id: str,
    actor: Actor = Depends(require_permission(Resource.EXERCISES, Action.DELETE)),
):
    await ExerciseService().delete(actor, exercise_id)
    return success_response(message="Exercise deleted")
