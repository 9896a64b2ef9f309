"""Gym (tenant) routes."""

from fastapi import APIRouter, Depends

from ...models.identity import Actor
from ...models.permissions import Action, Resource
from ...services import GymService
from ..deps import Paging, current_actor, paging, require_permission
from ..responses import handle_errors, page_response, success_response
from ..schemas import GymCreate, GymUpdate

router = APIRouter(prefix="/api/gyms", tags=["gyms"])

can_read = require_permission(Resource.GYMS, Action.READ)
can_update = require_permission(Resource.GYMS, Action.UPDATE)


@router.get("")
@handle_errors("Failed to fetch gyms")
async def list_gyms(
    search: str | None = None,
    paged: Paging = Depends(paging),
    actor: Actor = Depends(current_actor),
):
    return page_response(
        await GymService().list_page(actor, paged.page, paged.limit, search)
    )


@router.post("", status_code=201)
@handle_errors("Failed to create gym")
async def create_gym(body: GymCreate, actor: Actor = Depends(current_actor)):
    gym = await GymService().create(
        actor,
        name=body.name,
        slug=body.slug,
        address=body.address,
        contact_phone=body.contact_phone,
        owner=body.owner.model_dump() if body.owner else None,
    )
    return success_response(gym.to_dict(), message="Gym created", status_code=201)


@router.get("/{gym_id}")
@handle_errors("Failed to fetch gym")
async def get_gym(gym_id: str, actor: Actor = Depends(can_read)):
    return success_response((await GymService().get(actor, gym_id)).to_dict())


@router.get("/{gym_id}/stats")
@handle_errors("Failed to fetch gym statistics")
async def gym_stats(gym_id: str, actor: Actor = Depends(can_read)):
    return success_response(await GymService().stats(actor, gym_id))


@router.put("/{gym_id}")
@handle_errors("Failed to update gym")
async def update_gym(gym_id: str, body: GymUpdate, actor: Actor = Depends(can_update)):
    gym = await GymService().update(actor, gym_id, body.changes())
    return success_response(gym.to_dict(), message="Gym updated")


@router.patch("/{gym_id}/toggle-active")
@handle_errors("Failed to change gym status")
async def toggle_gym(gym_id: str, actor: Actor = Depends(current_actor)):
    gym = await GymService().toggle_active(actor, gym_id)
    state = "activated" if gym.is_active else "deactivated"
    return success_response(gym.to_dict(), message=f"Gym {state}")


@router.delete("/{gym_id}")
@handle_errors("Failed to delete gym")
async def delete_gym(gym_id: str, actor: Actor = Depends(current_actor)):
    await GymService().delete(actor, gym_id)
    return success_response(message="Gym deleted")
