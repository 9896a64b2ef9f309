"""Marketplace models: categories, products and orders."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from .common import format_timestamp, money


class OrderStatus(str, Enum):
    """Lifecycle of an order.

    ``pending_approval -> prepared -> completed``; anything that is not
    completed can be cancelled. Cancelling returns the items to stock.
    """

    PENDING_APPROVAL = "pending_approval"
    PREPARED = "prepared"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


ORDER_NUMBER_PREFIX = "ORD"


def format_order_number(day: date, sequence: int) -> str:
    """Build an order number like ``ORD-20240131-00007``."""
    return f"{ORDER_NUMBER_PREFIX}-{day:%Y%m%d}-{sequence:05d}"


def parse_order_sequence(order_number: str) -> int:
    """Extract the per-day sequence from an order number."""
    return int(order_number.rsplit("-", 1)[1])


@dataclass
class ProductCategory:
    """A grouping of products inside a gym's shop."""

    gym_id: str
    name: str
    description: str | None = None
    id: str | None = None
    product_count: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "gymId": self.gym_id,
            "name": self.name,
            "description": self.description,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }
        if self.product_count is not None:
            data["productCount"] = self.product_count
        return data


@dataclass
class Product:
    """A sellable item. ``price`` is fixed-point, never a float."""

    gym_id: str
    category_id: str
    name: str
    price: Decimal
    stock_quantity: int = 0
    description: str | None = None
    image_url: str | None = None
    is_active: bool = True
    id: str | None = None
    category_name: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "gymId": self.gym_id,
            "categoryId": self.category_id,
            "category": {"id": self.category_id, "name": self.category_name},
            "name": self.name,
            "description": self.description,
            "imageUrl": self.image_url,
            "price": str(money(self.price)),
            "stockQuantity": self.stock_quantity,
            "isActive": self.is_active,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }


@dataclass
class OrderLine:
    """A requested line of a new order."""

    product_id: str
    quantity: int


def aggregate_quantities(lines: list[OrderLine]) -> dict[str, int]:
    """Sum requested quantities per product, keeping first-seen order."""
    totals: dict[str, int] = {}
    for line in lines:
        totals[line.product_id] = totals.get(line.product_id, 0) + line.quantity
    return totals


@dataclass
class OrderItem:
    """A line of a placed order.

    ``unit_price`` is the product price at the moment the order was placed.
    """

    product_id: str
    quantity: int
    unit_price: Decimal
    order_id: str | None = None
    id: str | None = None
    product_name: str | None = None

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "orderId": self.order_id,
            "productId": self.product_id,
            "product": {"id": self.product_id, "name": self.product_name},
            "quantity": self.quantity,
            "unitPrice": str(money(self.unit_price)),
            "lineTotal": str(money(self.line_total)),
        }


@dataclass
class Order:
    """A purchase by a gym member."""

    gym_id: str
    user_id: str
    order_number: str
    total_amount: Decimal
    status: OrderStatus = OrderStatus.PENDING_APPROVAL
    metadata: dict | None = None
    id: str | None = None
    items: list[OrderItem] = field(default_factory=list)
    purchaser: dict | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "gymId": self.gym_id,
            "userId": self.user_id,
            "orderNumber": self.order_number,
            "totalAmount": str(money(self.total_amount)),
            "status": self.status.value,
            "metadata": self.metadata,
            "items": [item.to_dict() for item in self.items],
            "user": self.purchaser,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }
