"""Workout logging routes."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from ...models.identity import Actor
from ...models.permissions import Action, Resource
from ...services import WorkoutService
from ..deps import Paging, paging, require_permission
from ..responses import handle_errors, page_response, success_response
from ..schemas import SetCreate, SetUpdate, WorkoutEnd, WorkoutStart

router = APIRouter(prefix="/api/workout-logs", tags=["workout-logs"])

can_read = require_permission(Resource.WORKOUT_LOGS, Action.READ)
can_create = require_permission(Resource.WORKOUT_LOGS, Action.CREATE)
can_update = require_permission(Resource.WORKOUT_LOGS, Action.UPDATE)


@router.get("/stats")
@handle_errors("Failed to fetch workout statistics")
async def workout_stats(
    user_id: str | None = Query(None, alias="userId"),
    actor: Actor = Depends(can_read),
):
    return success_response(await WorkoutService().stats(actor, user_id))


@router.get("/active")
@handle_errors("Failed to fetch active workout")
async def active_workout(actor: Actor = Depends(can_read)):
    log = await WorkoutService().active(actor)
    if log is None:
        return success_response(message="No active workout")
    return success_response(log.to_dict(include_entries=True))


@router.get("")
@handle_errors("Failed to fetch workout logs")
async def list_workout_logs(
    program_id: str | None = Query(None, alias="programId"),
    user_id: str | None = Query(None, alias="userId"),
    start_date: datetime | None = Query(None, alias="startDate"),
    end_date: datetime | None = Query(None, alias="endDate"),
    paged: Paging = Depends(paging),
    actor: Actor = Depends(can_read),
):
    return page_response(
        await WorkoutService().list_page(
            actor,
            paged.page,
            paged.limit,
            user_id=user_id,
            program_id=program_id,
            start_date=start_date,
            end_date=end_date,
        )
    )


@router.get("/{log_id}")
@handle_errors("Failed to fetch workout log")
async def get_workout_log(log_id: str, actor: Actor = Depends(can_read)):
    log = await WorkoutService().get(actor, log_id)
    return success_response(log.to_dict(include_entries=True))


@router.post("/start", status_code=201)
@handle_errors("Failed to start workout")
async def start_workout(body: WorkoutStart, actor: Actor = Depends(can_create)):
    log = await WorkoutService().start(actor, body.program_id, body.notes)
    return success_response(log.to_dict(), message="Workout started", status_code=201)


@router.put("/{log_id}/end")
@handle_errors("Failed to end workout")
async def end_workout(log_id: str, body: WorkoutEnd, actor: Actor = Depends(can_update)):
    log = await WorkoutService().end(actor, log_id, body.notes)
    return success_response(log.to_dict(include_entries=True), message="Workout completed")


@router.post("/{log_id}/sets", status_code=201)
@handle_errors("Failed to log set")
async def log_set(log_id: str, body: SetCreate, actor: Actor = Depends(can_create)):
    entry = await WorkoutService().log_set(
        actor,
        log_id,
        exercise_id=body.exercise_id,
        set_number=body.set_number,
        reps_completed=body.reps_completed,
        weight_kg=body.weight_kg,
        rpe=body.rpe,
    )
    return success_response(entry.to_dict(), message="Set logged", status_code=201)


@router.put("/{log_id}/sets/{entry_id}")
@handle_errors("Failed to update set")
async def update_set(
    log_id: str, entry_id: str, body: SetUpdate, actor: Actor = Depends(can_update)
):
    entry = await WorkoutService().update_set(actor, log_id, entry_id, body.changes())
    return success_response(entry.to_dict(), message="Set updated")


@router.delete("/{log_id}/sets/{entry_id}")
@handle_errors("Failed to delete set")
async def delete_set(log_id: str, entry_id: str, actor: Actor = Depends(can_update)):
    await WorkoutService().delete_set(actor, log_id, entry_id)
    return success_response(message="Set deleted")
