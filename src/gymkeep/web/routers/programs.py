"""Workout program routes."""

from fastapi import APIRouter, Depends, Query

from ...models.identity import Actor
from ...models.permissions import Action, Resource
from ...services import ProgramService
from ..deps import Paging, paging, require_permission
from ..responses import handle_errors, page_response, success_response
from ..schemas import ProgramClone, ProgramCreate, ProgramUpdate

router = APIRouter(prefix="/api/programs", tags=["programs"])

can_read = require_permission(Resource.PROGRAMS, Action.READ)
can_create = require_permission(Resource.PROGRAMS, Action.CREATE)


@router.get("/stats")
@handle_errors("Failed to fetch program statistics")
async def program_stats(actor: Actor = Depends(can_read)):
    return success_response(await ProgramService().stats(actor))


@router.get("")
@handle_errors("Failed to fetch programs")
async def list_programs(
    search: str | None = None,
    difficulty_level: str | None = Query(None, alias="difficultyLevel"),
    creator_id: str | None = Query(None, alias="creatorId"),
    assigned_user_id: str | None = Query(None, alias="assignedUserId"),
    paged: Paging = Depends(paging),
    actor: Actor = Depends(can_read),
):
    return page_response(
        await ProgramService().list_page(
            actor,
            paged.page,
            paged.limit,
            search=search,
            difficulty_level=difficulty_level,
            creator_id=creator_id,
            assigned_user_id=assigned_user_id,
        )
    )


@router.get("/{program_id}")
@handle_errors("Failed to fetch program")
async def get_program(program_id: str, actor: Actor = Depends(can_read)):
    """A program with its exercises in order."""
    program = await ProgramService().get_with_exercises(actor, program_id)
    return success_response(program.to_dict(include_exercises=True))


@router.post("", status_code=201)
@handle_errors("Failed to create program")
async def create_program(body: ProgramCreate, actor: Actor = Depends(can_create)):
    program = await ProgramService().create(
        actor,
        name=body.name,
        description=body.description,
        difficulty_level=body.difficulty_level,
        assigned_user_id=body.assigned_user_id,
    )
    return success_response(program.to_dict(), message="Program created", status_code=201)


@router.put("/{program_id}")
@handle_errors("Failed to update program")
async def update_program(
    program_id: str,
    body: ProgramUpdate,
    actor: Actor = Depends(require_permission(Resource.PROGRAMS, Action.UPDATE)),
):
    program = await ProgramService().update(actor, program_id, body.changes())
    return success_response(program.to_dict(), message="Program updated")


@router.delete("/{program_id}")
@handle_errors("Failed to delete program")
async def delete_program(
    program_id: str,
    actor: Actor = Depends(require_permission(Resource.PROGRAMS, Action.DELETE)),
):
    await ProgramService().delete(actor, program_id)
    return success_response(message="Program deleted")


@router.post("/{program_id}/clone", status_code=201)
@handle_errors("Failed to clone program")
async def clone_program(
    program_id: str, body: ProgramClone, actor: Actor = Depends(can_create)
):
    program = await ProgramService().clone(
        actor, program_id, name=body.name, assigned_user_id=body.assigned_user_id
    )
    return success_response(
        program.to_dict(include_exercises=True),
        message="Program cloned",
        status_code=201,
    )
