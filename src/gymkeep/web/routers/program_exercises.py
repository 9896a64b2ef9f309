"""Exercise slots inside a program, kept in a dense 0..N-1 order."""

from fastapi import APIRouter, Depends

from ...models.identity import Actor
from ...models.permissions import Action, Resource
from ...services import ProgramExerciseService
from ..deps import require_permission
from ..responses import handle_errors, success_response
from ..schemas import ProgramExerciseCreate, ProgramExerciseUpdate, ReorderRequest

router = APIRouter(prefix="/api/programs/{program_id}/exercises", tags=["programs"])

can_read = require_permission(Resource.PROGRAMS, Action.READ)
can_update = require_permission(Resource.PROGRAMS, Action.UPDATE)


@router.get("")
@handle_errors("Failed to fetch program exercises")
async def list_program_exercises(program_id: str, actor: Actor = Depends(can_read)):
    entries = await ProgramExerciseService().list_for_program(actor, program_id)
    return success_response([entry.to_dict() for entry in entries])


@router.get("/{entry_id}")
@handle_errors("Failed to fetch program exercise")
async def get_program_exercise(
    program_id: str, entry_id: str, actor: Actor = Depends(can_read)
):
    entry = await ProgramExerciseService().get(actor, program_id, entry_id)
    return success_response(entry.to_dict())


@router.post("", status_code=201)
@handle_errors("Failed to add exercise to program")
async def add_program_exercise(
    program_id: str, body: ProgramExerciseCreate, actor: Actor = Depends(can_update)
):
    entry = await ProgramExerciseService().add(
        actor,
        program_id,
        exercise_id=body.exercise_id,
        sets=body.sets,
        reps=body.reps,
        rest_time_seconds=body.rest_time_seconds,
        notes=body.notes,
        order_index=body.order_index,
    )
    return success_response(
        entry.to_dict(), message="Exercise added to program", status_code=201
    )


@router.post("/reorder")
@handle_errors("Failed to reorder program exercises")
async def reorder_program_exercises(
    program_id: str, body: ReorderRequest, actor: Actor = Depends(can_update)
):
    entries = await ProgramExerciseService().reorder(
        actor,
        program_id,
        [(item.id, item.order_index) for item in body.exercise_orders],
    )
    return success_response(
        [entry.to_dict() for entry in entries], message="Exercises reordered"
    )


@router.put("/{entry_id}")
@handle_errors("Failed to update program exercise")
async def update_program_exercise(
    program_id: str,
    entry_id: str,
    body: ProgramExerciseUpdate,
    actor: Actor = Depends(can_update),
):
    fields = body.changes()
    order_index = fields.pop("order_index", None)
    entry = await ProgramExerciseService().update(
        actor, program_id, entry_id, fields, order_index=order_index
    )
    return success_response(entry.to_dict(), message="Program exercise updated")


@router.delete("/{entry_id}")
@handle_errors("Failed to remove exercise from program")
async def remove_program_exercise(
    program_id: str, entry_id: str, actor: Actor = Depends(can_update)
):
    await ProgramExerciseService().remove(actor, program_id, entry_id)
    return success_response(message="Exercise removed from program")
