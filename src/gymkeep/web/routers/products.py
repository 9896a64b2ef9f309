"""Shop product routes."""

from fastapi import APIRouter, Depends, Query

from ...models.identity import Actor
from ...models.permissions import Action, Resource
from ...services import ProductService
from ..deps import Paging, paging, require_permission
from ..responses import handle_errors, page_response, success_response
from ..schemas import ProductCreate, ProductUpdate, StockUpdate

router = APIRouter(prefix="/api/products", tags=["marketplace"])

can_read = require_permission(Resource.PRODUCTS, Action.READ)
can_update = require_permission(Resource.PRODUCTS, Action.UPDATE)


@router.get("/stats")
@handle_errors("Failed to fetch product statistics")
async def product_stats(actor: Actor = Depends(can_read)):
    return success_response(await ProductService().stats(actor))


@router.get("")
@handle_errors("Failed to fetch products")
async def list_products(
    search: str | None = None,
    category_id: str | None = Query(None, alias="categoryId"),
    is_active: bool | None = Query(None, alias="isActive"),
    in_stock: bool | None = Query(None, alias="inStock"),
    paged: Paging = Depends(paging),
    actor: Actor = Depends(can_read),
):
    return page_response(
        await ProductService().list_page(
            actor,
            paged.page,
            paged.limit,
            category_id=category_id,
            search=search,
            is_active=is_active,
            in_stock=in_stock,
        )
    )


@router.get("/{product_id}")
@handle_errors("Failed to fetch product")
async def get_product(product_id: str, actor: Actor = Depends(can_read)):
    return success_response((await ProductService().get(actor, product_id)).to_dict())


@router.post("", status_code=201)
@handle_errors("Failed to create product")
async def create_product(
    body: ProductCreate,
    actor: Actor = Depends(require_permission(Resource.PRODUCTS, Action.CREATE)),
):
    product = await ProductService().create(
        actor,
        category_id=body.category_id,
        name=body.name,
        price=body.price,
        stock_quantity=body.stock_quantity,
        description=body.description,
        image_url=body.image_url,
        is_active=body.is_active,
    )
    return success_response(product.to_dict(), message="Product created", status_code=201)


@router.put("/{product_id}")
@handle_errors("Failed to update product")
async def update_product(
    product_id: str, body: ProductUpdate, actor: Actor = Depends(can_update)
):
    product = await ProductService().update(actor, product_id, body.changes())
    return success_response(product.to_dict(), message="Product updated")


@router.patch("/{product_id}/stock")
@handle_errors("Failed to update stock")
async def set_stock(product_id: str, body: StockUpdate, actor: Actor = Depends(can_update)):
    product = await ProductService().set_stock(actor, product_id, body.stock_quantity)
    return success_response(product.to_dict(), message="Stock updated")


@router.patch("/{product_id}/toggle")
@handle_errors("Failed to change product status")
async def toggle_product(product_id: str, actor: Actor = Depends(can_update)):
    product = await ProductService().toggle_active(actor, product_id)
    state = "activated" if product.is_active else "deactivated"
    return success_response(product.to_dict(), message=f"Product {state}")


@router.delete("/{product_id}")
@handle_errors("Failed to delete product")
async def delete_product(
    product_id: str,
    actor: Actor = Depends(require_permission(Resource.PRODUCTS, Action.DELETE)),
):
    await ProductService().delete(actor, product_id)
    return success_response(message="Product deleted")
