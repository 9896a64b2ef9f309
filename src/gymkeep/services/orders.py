"""Order placement and the order lifecycle.

``pending_approval -> prepared -> completed``, with ``cancelled`` reachable
from anything but ``completed``. Cancelling puts the ordered quantities back
in stock in the same transaction that changes the status.
"""

import logging
from pathlib import Path

from ..db.repositories import OrderRepository, TrainerMatchRepository, UserRepository
from ..errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ..models.common import Page
from ..models.identity import Actor
from ..models.marketplace import Order, OrderLine, OrderStatus
from .base import tenant_of, visible_user_ids

logger = logging.getLogger(__name__)


def parse_order_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        allowed = ", ".join(status.value for status in OrderStatus)
        raise ValidationError(f"Invalid status. Must be one of: {allowed}")


class OrderService:
    def __init__(self, db_path: Path | None = None):
        self.orders = OrderRepository(db_path)
        self.users = UserRepository(db_path)
        self.matches = TrainerMatchRepository(db_path)

    async def create(
        self,
        actor: Actor,
        items: list[OrderLine],
        user_id: str | None = None,
        metadata: dict | None = None,
    ) -> Order:
        """Place an order for the actor or, for staff, on behalf of a member."""
        gym_id = tenant_of(actor)
        target = user_id or actor.user_id
        if actor.is_student and target != actor.user_id:
            raise ForbiddenError("Students can only create orders for themselves")
        if target != actor.user_id and await self.users.get(target, gym_id) is None:
            raise NotFoundError("Target user not found")
        if not items:
            raise ValidationError("Order must contain at least one item")
        if any(line.quantity < 1 for line in items):
            raise ValidationError("Quantity must be a positive integer")

        return await self.orders.create(gym_id, target, items, metadata=metadata)

    async def get(self, actor: Actor, order_id: str) -> Order:
        order = await self.orders.get(order_id, tenant_of(actor))
        visible = await visible_user_ids(actor, self.matches)
        if order is None or (visible is not None and order.user_id not in visible):
            raise NotFoundError("Order not found")
        return order

    async def list_page(
        self,
        actor: Actor,
        page: int,
        limit: int,
        status: str | None = None,
        user_id: str | None = None,
        search: str | None = None,
    ) -> Page:
        return await self.orders.list_page(
            tenant_of(actor),
            page,
            limit,
            user_ids=await visible_user_ids(actor, self.matches),
            status=parse_order_status(status) if status else None,
            user_id=user_id,
            search=search,
        )

    async def update_status(
        self,
        actor: Actor,
        order_id: str,
        status: str,
        metadata: dict | None = None,
    ) -> Order:
        """Move an order to another status.

        Cancelling restores stock. A cancelled order cannot be reopened since
        its items are already back on the shelf.
        """
        if actor.is_student:
            raise ForbiddenError("Students cannot update order status")
        new_status = parse_order_status(status)
        order = await self.get(actor, order_id)

        if new_status == OrderStatus.CANCELLED:
            previous = await self.orders.cancel(order.id, metadata=metadata)
            logger.info("Order %s cancelled (was %s)", order.order_number, previous.value)
        elif order.status == OrderStatus.CANCELLED:
            raise ConflictError("Cancelled orders cannot be reopened")
        else:
            await self.orders.set_status(order.id, new_status, metadata)
            logger.info("Order %s moved to %s", order.order_number, new_status.value)
        return await self.orders.get(order.id, order.gym_id)

    async def delete(self, actor: Actor, order_id: str) -> None:
        """Cancel and soft-delete an order.

        Students may only withdraw their own orders that are still pending
        approval.
        """
        gym_id = tenant_of(actor)
        if actor.is_student:
            order = await self.orders.get(order_id, gym_id, user_id=actor.user_id)
            if order is None or order.status != OrderStatus.PENDING_APPROVAL:
                raise NotFoundError("Order not found or cannot be cancelled")
        else:
            order = await self.get(actor, order_id)
        if order.status == OrderStatus.COMPLETED:
            raise ValidationError("Cannot delete completed orders")

        await self.orders.cancel(
            order.id,
            soft_delete=True,
            only_from=OrderStatus.PENDING_APPROVAL if actor.is_student else None,
        )
        logger.info("Order %s deleted by %s", order.order_number, actor.user_id)

    async def stats(self, actor: Actor) -> dict:
        return await self.orders.stats(
            tenant_of(actor), user_id=actor.user_id if actor.is_student else None
        )
