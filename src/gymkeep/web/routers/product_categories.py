"""Shop category routes."""

from fastapi import APIRouter, Depends

from ...models.identity import Actor
from ...models.permissions import Action, Resource
from ...services import CategoryService
from ..deps import require_permission
from ..responses import handle_errors, success_response
from ..schemas import CategoryCreate, CategoryUpdate

router = APIRouter(prefix="/api/product-categories", tags=["marketplace"])

can_read = require_permission(Resource.PRODUCT_CATEGORIES, Action.READ)


@router.get("")
@handle_errors("Failed to fetch categories")
async def list_categories(search: str | None = None, actor: Actor = Depends(can_read)):
    categories = await CategoryService().list_all(actor, search)
    return success_response([category.to_dict() for category in categories])


@router.get("/{category_id}")
@handle_errors("Failed to fetch category")
async def get_category(category_id: str, actor: Actor = Depends(can_read)):
    return success_response((await CategoryService().get(actor, category_id)).to_dict())


@router.post("", status_code=201)
@handle_errors("Failed to create category")
async def create_category(
    body: CategoryCreate,
    actor: Actor = Depends(require_permission(Resource.PRODUCT_CATEGORIES, Action.CREATE)),
):
    category = await CategoryService().create(actor, body.name, body.description)
    return success_response(category.to_dict(), message="Category created", status_code=201)


@router.put("/{category_id}")
@handle_errors("Failed to update category")
async def update_category(
    category_id: str,
    body: CategoryUpdate,
    actor: Actor = Depends(require_permission(Resource.PRODUCT_CATEGORIES, Action.UPDATE)),
):
    category = await CategoryService().update(actor, category_id, body.changes())
    return success_response(category.to_dict(), message="Category updated")


@router.delete("/{category_id}")
@handle_errors("Failed to delete category")
async def delete_category(
    category_id: str,
    actor: Actor = Depends(require_permission(Resource.PRODUCT_CATEGORIES, Action.DELETE)),
):
    await CategoryService().delete(actor, category_id)
    return success_response(message="Category deleted")
