"""Role and permission routes."""

from fastapi import APIRouter, Depends

from ...models.identity import Actor
from ...models.permissions import Action, Resource
from ...services import RoleService
from ..deps import Paging, paging, require_permission
from ..responses import handle_errors, page_response, success_response
from ..schemas import RoleCreate, RoleFromTemplate, RoleUpdate

router = APIRouter(prefix="/api/roles", tags=["roles"])

can_read = require_permission(Resource.ROLES, Action.READ)
can_create = require_permission(Resource.ROLES, Action.CREATE)


@router.get("/templates")
@handle_errors("Failed to fetch role templates")
async def role_templates(actor: Actor = Depends(can_read)):
    return success_response(RoleService().templates())


@router.post("/from-template", status_code=201)
@handle_errors("Failed to create role from template")
async def create_from_template(body: RoleFromTemplate, actor: Actor = Depends(can_create)):
    role = await RoleService().create_from_template(
        actor, body.template_name, body.custom_name
    )
    return success_response(role.to_dict(), message="Role created", status_code=201)


@router.get("")
@handle_errors("Failed to fetch roles")
async def list_roles(paged: Paging = Depends(paging), actor: Actor = Depends(can_read)):
    return page_response(await RoleService().list_page(actor, paged.page, paged.limit))


@router.get("/{role_id}")
@handle_errors("Failed to fetch role")
async def get_role(role_id: str, actor: Actor = Depends(can_read)):
    return success_response((await RoleService().get(actor, role_id)).to_dict())


@router.post("", status_code=201)
@handle_errors("Failed to create role")
async def create_role(body: RoleCreate, actor: Actor = Depends(can_create)):
    role = await RoleService().create(actor, body.name, body.permissions)
    return success_response(role.to_dict(), message="Role created", status_code=201)


@router.put("/{role_id}")
@handle_errors("Failed to update role")
async def update_role(
    role_id: str,
    body: RoleUpdate,
    actor: Actor = Depends(require_permission(Resource.ROLES, Action.UPDATE)),
):
    role = await RoleService().update(actor, role_id, body.name, body.permissions)
    return success_response(role.to_dict(), message="Role updated")


@router.delete("/{role_id}")
@handle_errors("Failed to delete role")
async def delete_role(
    role_id: str,
    actor: Actor = Depends(require_permission(Resource.ROLES, Action.DELETE)),
):
    await RoleService().delete(actor, role_id)
    return success_response(message="Role deleted")
