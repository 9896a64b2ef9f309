"""Order routes: placement, lifecycle and statistics."""

from fastapi import APIRouter, Depends, Query

from ...models.identity import Actor
from ...models.marketplace import OrderLine
from ...models.permissions import Action, Resource
from ...services import OrderService
from ..deps import Paging, paging, require_permission
from ..responses import handle_errors, page_response, success_response
from ..schemas import OrderCreate, OrderStatusUpdate

router = APIRouter(prefix="/api/orders", tags=["marketplace"])

can_read = require_permission(Resource.ORDERS, Action.READ)


@router.get("/stats")
@handle_errors("Failed to fetch order statistics")
async def order_stats(actor: Actor = Depends(can_read)):
    return success_response(await OrderService().stats(actor))


@router.get("")
@handle_errors("Failed to fetch orders")
async def list_orders(
    status: str | None = None,
    search: str | None = None,
    user_id: str | None = Query(None, alias="userId"),
    paged: Paging = Depends(paging),
    actor: Actor = Depends(can_read),
):
    return page_response(
        await OrderService().list_page(
            actor, paged.page, paged.limit, status=status, user_id=user_id, search=search
        )
    )


@router.get("/{order_id}")
@handle_errors("Failed to fetch order")
async def get_order(order_id: str, actor: Actor = Depends(can_read)):
    return success_response((await OrderService().get(actor, order_id)).to_dict())


@router.post("", status_code=201)
@handle_errors("Failed to create order")
async def create_order(
    body: OrderCreate,
    actor: Actor = Depends(require_permission(Resource.ORDERS, Action.CREATE)),
):
    """Place an order; stock is reserved in the same transaction."""
    order = await OrderService().create(
        actor,
        [OrderLine(product_id=item.product_id, quantity=item.quantity) for item in body.items],
        user_id=body.user_id,
        metadata=body.metadata,
    )
    return success_response(order.to_dict(), message="Order created", status_code=201)


@router.patch("/{order_id}/status")
@handle_errors("Failed to update order status")
async def update_order_status(
    order_id: str,
    body: OrderStatusUpdate,
    actor: Actor = Depends(require_permission(Resource.ORDERS, Action.UPDATE)),
):
    order = await OrderService().update_status(
        actor, order_id, body.status, body.metadata
    )
    return success_response(order.to_dict(), message="Order status updated")


@router.delete("/{order_id}")
@handle_errors("Failed to cancel order")
async def delete_order(
    order_id: str,
    actor: Actor = Depends(require_permission(Resource.ORDERS, Action.DELETE)),
):
    await OrderService().delete(actor, order_id)
    return success_response(message="Order cancelled")
