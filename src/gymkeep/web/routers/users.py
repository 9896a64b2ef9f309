"""User management routes."""

from fastapi import APIRouter, Depends

from ...models.identity import Actor
from ...models.permissions import Action, Resource
from ...services import UserService
from ..deps import Paging, current_actor, paging, require_permission
from ..responses import handle_errors, page_response, success_response
from ..schemas import PasswordChange, UserCreate, UserUpdate

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("")
@handle_errors("Failed to fetch users")
async def list_users(
    search: str | None = None,
    role: str | None = None,
    paged: Paging = Depends(paging),
    actor: Actor = Depends(require_permission(Resource.USERS, Action.READ)),
):
    return page_response(
        await UserService().list_page(
            actor, paged.page, paged.limit, search=search, role_name=role
        )
    )


@router.post("", status_code=201)
@handle_errors("Failed to register user")
async def register_user(
    body: UserCreate,
    actor: Actor = Depends(require_permission(Resource.USERS, Action.CREATE)),
):
    user = await UserService().register(
        actor,
        email=body.email,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
        role_id=body.role_id,
        phone=body.phone,
    )
    return success_response(user.to_dict(), message="User registered", status_code=201)


@router.get("/{user_id}")
@handle_errors("Failed to fetch user")
async def get_user(
    user_id: str,
    actor: Actor = Depends(require_permission(Resource.USERS, Action.READ)),
):
    return success_response((await UserService().get(actor, user_id)).to_dict())


@router.put("/{user_id}")
@handle_errors("Failed to update user")
async def update_user(
    user_id: str,
    body: UserUpdate,
    actor: Actor = Depends(require_permission(Resource.USERS, Action.UPDATE)),
):
    user = await UserService().update(actor, user_id, body.changes())
    return success_response(user.to_dict(), message="User updated")


@router.put("/{user_id}/password")
@handle_errors("Failed to change password")
async def change_password(
    user_id: str, body: PasswordChange, actor: Actor = Depends(current_actor)
):
    await UserService().change_password(
        actor, user_id, body.current_password, body.new_password
    )
    return success_response(message="Password changed")


@router.delete("/{user_id}")
@handle_errors("Failed to delete user")
async def delete_user(
    user_id: str,
    actor: Actor = Depends(require_permission(Resource.USERS, Action.DELETE)),
):
    await UserService().delete(actor, user_id)
    return success_response(message="User deleted")
