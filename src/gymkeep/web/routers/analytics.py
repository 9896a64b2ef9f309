"""Dashboard analytics routes."""

from fastapi import APIRouter, Depends, Query

from ...models.identity import Actor
from ...models.permissions import Action, Resource
from ...services import AnalyticsService
from ..deps import current_actor, require_permission
from ..responses import handle_errors, success_response

router = APIRouter(prefix="/api/analytics", tags=["analytics"])

can_read_orders = require_permission(Resource.ORDERS, Action.READ)


@router.get("/revenue-trend")
@handle_errors("Failed to fetch revenue trend")
async def revenue_trend(
    days: int = Query(30, ge=1, le=365), actor: Actor = Depends(can_read_orders)
):
    """Completed-order revenue per day over the last ``days`` days."""
    return success_response(
        await AnalyticsService().revenue_trend(actor, days),
        message="Revenue trend retrieved successfully",
    )


@router.get("/order-status")
@handle_errors("Failed to fetch order status distribution")
async def order_status(actor: Actor = Depends(can_read_orders)):
    return success_response(
        await AnalyticsService().order_status(actor),
        message="Order status distribution retrieved successfully",
    )


@router.get("/top-products")
@handle_errors("Failed to fetch top products")
async def top_products(
    limit: int = Query(10, ge=1, le=100), actor: Actor = Depends(can_read_orders)
):
    return success_response(
        await AnalyticsService().top_products(actor, limit),
        message="Top products retrieved successfully",
    )


@router.get("/active-students")
@handle_errors("Failed to fetch active students trend")
async def active_students(
    days: int = Query(30, ge=1, le=365),
    actor: Actor = Depends(require_permission(Resource.TRAINER_MATCHES, Action.READ)),
):
    return success_response(
        await AnalyticsService().active_students(actor, days),
        message="Active students trend retrieved successfully",
    )


@router.get("/summary")
@handle_errors("Failed to fetch dashboard summary")
async def summary(actor: Actor = Depends(current_actor)):
    return success_response(
        await AnalyticsService().summary(actor),
        message="Dashboard summary retrieved successfully",
    )
