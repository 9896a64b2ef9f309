"""Trainer-student matching routes."""

from fastapi import APIRouter, Depends, Query

from ...models.identity import Actor
from ...models.permissions import Action, Resource
from ...services import TrainerMatchService
from ..deps import Paging, paging, require_permission
from ..responses import handle_errors, page_response, success_response
from ..schemas import MatchCreate, MatchStatusUpdate

router = APIRouter(prefix="/api/trainer-matches", tags=["trainer-matches"])

can_read = require_permission(Resource.TRAINER_MATCHES, Action.READ)


@router.get("/trainer/{trainer_id}/students")
@handle_errors("Failed to fetch trainer's students")
async def trainer_students(
    trainer_id: str, paged: Paging = Depends(paging), actor: Actor = Depends(can_read)
):
    return page_response(
        await TrainerMatchService().students_of(actor, paged.page, paged.limit, trainer_id)
    )


@router.get("/student/{student_id}/trainer")
@handle_errors("Failed to fetch student's trainer")
async def student_trainer(student_id: str, actor: Actor = Depends(can_read)):
    match = await TrainerMatchService().trainer_of(actor, student_id)
    if match is None:
        return success_response(message="No active trainer found for this student")
    return success_response(match.to_dict())


@router.get("")
@handle_errors("Failed to fetch trainer matches")
async def list_matches(
    status: str | None = None,
    trainer_id: str | None = Query(None, alias="trainerId"),
    student_id: str | None = Query(None, alias="studentId"),
    paged: Paging = Depends(paging),
    actor: Actor = Depends(can_read),
):
    return page_response(
        await TrainerMatchService().list_page(
            actor,
            paged.page,
            paged.limit,
            status=status,
            trainer_id=trainer_id,
            student_id=student_id,
        )
    )


@router.get("/{match_id}")
@handle_errors("Failed to fetch trainer match")
async def get_match(match_id: str, actor: Actor = Depends(can_read)):
    return success_response((await TrainerMatchService().get(actor, match_id)).to_dict())


@router.post("", status_code=201)
@handle_errors("Failed to create trainer match")
async def create_match(
    body: MatchCreate,
    actor: Actor = Depends(require_permission(Resource.TRAINER_MATCHES, Action.CREATE)),
):
    match = await TrainerMatchService().create(actor, body.trainer_id, body.student_id)
    return success_response(match.to_dict(), message="Trainer matched", status_code=201)


@router.patch("/{match_id}/status")
@handle_errors("Failed to update trainer match")
async def update_match_status(
    match_id: str,
    body: MatchStatusUpdate,
    actor: Actor = Depends(require_permission(Resource.TRAINER_MATCHES, Action.UPDATE)),
):
    match = await TrainerMatchService().update_status(actor, match_id, body.status)
    return success_response(match.to_dict(), message="Match status updated")


@router.delete("/{match_id}")
@handle_errors("Failed to end trainer match")
async def end_match(
    match_id: str,
    actor: Actor = Depends(require_permission(Resource.TRAINER_MATCHES, Action.DELETE)),
):
    await TrainerMatchService().end(actor, match_id)
    return success_response(message="Trainer match ended")
