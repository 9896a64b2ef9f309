"""Equipment routes, including QR lookups."""

from fastapi import APIRouter, Depends

from ...models.identity import Actor
from ...models.permissions import Action, Resource
from ...services import EquipmentService
from ..deps import Paging, paging, require_permission
from ..responses import handle_errors, page_response, success_response
from ..schemas import EquipmentCreate, EquipmentUpdate

router = APIRouter(prefix="/api/equipment", tags=["equipment"])

can_read = require_permission(Resource.EQUIPMENT, Action.READ)


@router.get("/stats")
@handle_errors("Failed to fetch equipment statistics")
async def equipment_stats(actor: Actor = Depends(can_read)):
    return success_response(await EquipmentService().stats(actor))


@router.get("/qr/{qr_code_uuid}")
@handle_errors("Failed to look up equipment")
async def equipment_by_qr(qr_code_uuid: str, actor: Actor = Depends(can_read)):
    """Resolve a scanned QR code to the equipment it labels."""
    return success_response(await EquipmentService().get_by_qr(actor, qr_code_uuid))


@router.get("/{equipment_id}/qr-code")
@handle_errors("Failed to fetch QR code")
async def equipment_qr_code(equipment_id: str, actor: Actor = Depends(can_read)):
    return success_response(await EquipmentService().qr_code(actor, equipment_id))


@router.get("")
@handle_errors("Failed to fetch equipment")
async def list_equipment(
    status: str | None = None,
    search: str | None = None,
    paged: Paging = Depends(paging),
    actor: Actor = Depends(can_read),
):
    return page_response(
        await EquipmentService().list_page(
            actor, paged.page, paged.limit, status=status, search=search
        )
    )


@router.get("/{equipment_id}")
@handle_errors("Failed to fetch equipment")
async def get_equipment(equipment_id: str, actor: Actor = Depends(can_read)):
    equipment = await EquipmentService().get(actor, equipment_id)
    return success_response(equipment.to_dict())


@router.post("", status_code=201)
@handle_errors("Failed to create equipment")
async def create_equipment(
    body: EquipmentCreate,
    actor: Actor = Depends(require_permission(Resource.EQUIPMENT, Action.CREATE)),
):
    equipment = await EquipmentService().create(
        actor,
        name=body.name,
        description=body.description,
        video_url=body.video_url,
        status=body.status,
    )
    return success_response(
        equipment.to_dict(), message="Equipment created", status_code=201
    )


@router.put("/{equipment_id}")
@handle_errors("Failed to update equipment")
async def update_equipment(
    equipment_id: str,
    body: EquipmentUpdate,
    actor: Actor = Depends(require_permission(Resource.EQUIPMENT, Action.UPDATE)),
):
    equipment = await EquipmentService().update(actor, equipment_id, body.changes())
    return success_response(equipment.to_dict(), message="Equipment updated")


@router.delete("/{equipment_id}")
@handle_errors("Failed to delete equipment")
async def delete_equipment(
    equipment_id: str,
    actor: Actor = Depends(require_permission(Resource.EQUIPMENT, Action.DELETE)),
):
    await EquipmentService().delete(actor, equipment_id)
    return success_response(message="Equipment deleted")
