"""Repositories for the marketplace: categories, products and orders."""

import json
import logging
from datetime import date

import aiosqlite

from ...errors import InsufficientStockError, NotFoundError, ValidationError
from ...models.common import Page, money, new_id, parse_timestamp
from ...models.marketplace import (
    Order,
    OrderItem,
    OrderLine,
    OrderStatus,
    Product,
    ProductCategory,
    aggregate_quantities,
    format_order_number,
)
from ..engine import connect, transaction
from .base import Repository, in_clause, now_iso
from .identity import UserRepository

logger = logging.getLogger(__name__)


class CategoryRepository(Repository):
    """Repository for product categories."""

    table = "product_categories"

    @property
    def _select(self) -> str:
        return (
            "SELECT product_categories.*, "
            "(SELECT COUNT(*) FROM products p WHERE p.category_id = product_categories.id "
            "AND p.deleted_at IS NULL) AS product_count "
            "FROM product_categories"
        )

    async def create(self, category: ProductCategory) -> ProductCategory:
        stamp = now_iso()
        category.id = category.id or new_id()
        async with connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO product_categories
                (id, gym_id, name, description, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (category.id, category.gym_id, category.name, category.description, stamp, stamp),
            )
        return await self.get(category.id, category.gym_id)

    async def get(self, category_id: str, gym_id: str) -> ProductCategory | None:
        return await self._get_live(
            "product_categories.id = ? AND product_categories.gym_id = ?",
            (category_id, gym_id),
        )

    async def name_taken(self, gym_id: str, name: str, exclude_id: str | None = None) -> bool:
        count = await self._count_live(
            "gym_id = ? AND name = ? AND id != ?", (gym_id, name, exclude_id or "")
        )
        return count > 0

    async def list_all(self, gym_id: str, search: str | None = None) -> list[ProductCategory]:
        where, params = "product_categories.gym_id = ?", [gym_id]
        if search:
            where += " AND product_categories.name LIKE ?"
            params.append(f"%{search}%")
        return await self._find_live(where, params, order_by="product_categories.name ASC")

    async def update(self, category_id: str, gym_id: str, fields: dict) -> ProductCategory:
        await self._update_fields(category_id, fields)
        return await self.get(category_id, gym_id)

    async def count_products(self, category_id: str) -> int:
        return await self._scalar(
            "SELECT COUNT(*) FROM products WHERE category_id = ? AND deleted_at IS NULL",
            (category_id,),
        )

    def _row_to_entity(self, row: aiosqlite.Row) -> ProductCategory:
        return ProductCategory(
            id=row["id"],
            gym_id=row["gym_id"],
            name=row["name"],
            description=row["description"],
            product_count=row["product_count"],
            created_at=parse_timestamp(row["created_at"]),
            updated_at=parse_timestamp(row["updated_at"]),
        )


class ProductRepository(Repository):
    """Repository for products.

    Order flows change ``stock_quantity`` through :class:`OrderRepository`;
    this class only handles catalog edits and manual stock corrections.
    """

    table = "products"

    @property
    def _select(self) -> str:
        return (
            "SELECT products.*, product_categories.name AS category_name FROM products "
            "JOIN product_categories ON product_categories.id = products.category_id"
        )

    async def create(self, product: Product) -> Product:
        stamp = now_iso()
        product.id = product.id or new_id()
        async with connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO products
                (id, gym_id, category_id, name, description, image_url, price,
                 stock_quantity, is_active, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    product.id,
                    product.gym_id,
                    product.category_id,
                    product.name,
                    product.description,
                    product.image_url,
                    str(money(product.price)),
                    product.stock_quantity,
                    int(product.is_active),
                    stamp,
                    stamp,
                ),
            )
        return await self.get(product.id, product.gym_id)

    async def get(self, product_id: str, gym_id: str) -> Product | None:
        return await self._get_live(
            "products.id = ? AND products.gym_id = ?", (product_id, gym_id)
        )

    async def name_taken(
        self, category_id: str, name: str, exclude_id: str | None = None
    ) -> bool:
        count = await self._count_live(
            "category_id = ? AND name = ? AND id != ?", (category_id, name, exclude_id or "")
        )
        return count > 0

    async def list_page(
        self,
        gym_id: str,
        page: int,
        limit: int,
        category_id: str | None = None,
        search: str | None = None,
        is_active: bool | None = None,
        in_stock: bool | None = None,
    ) -> Page:
        where = ["products.gym_id = ?"]
        params: list = [gym_id]
        if category_id:
            where.append("products.category_id = ?")
            params.append(category_id)
        if search:
            where.append("(products.name LIKE ? OR products.description LIKE ?)")
            params += [f"%{search}%", f"%{search}%"]
        if is_active is not None:
            where.append("products.is_active = ?")
            params.append(int(is_active))
        if in_stock is not None:
            where.append("products.stock_quantity > 0" if in_stock else "products.stock_quantity = 0")
        return await self._paginate(" AND ".join(where), params, page, limit)

    async def update(self, product_id: str, gym_id: str, fields: dict) -> Product:
        if "price" in fields:
            fields["price"] = str(money(fields["price"]))
        if "is_active" in fields:
            fields["is_active"] = int(fields["is_active"])
        await self._update_fields(product_id, fields)
        return await self.get(product_id, gym_id)

    async def stats(self, gym_id: str) -> dict:
        row = await self._fetch_one(
            """
            SELECT COUNT(*) AS total,
                   COALESCE(SUM(is_active = 1), 0) AS active,
                   COALESCE(SUM(stock_quantity > 0), 0) AS in_stock,
                   COALESCE(SUM(stock_quantity), 0) AS stock_items
            FROM products WHERE gym_id = ? AND deleted_at IS NULL
            """,
            (gym_id,),
        )
        return {
            "total": row["total"],
            "active": row["active"],
            "inactive": row["total"] - row["active"],
            "inStock": row["in_stock"],
            "outOfStock": row["total"] - row["in_stock"],
            "totalStockItems": row["stock_items"],
        }

    def _row_to_entity(self, row: aiosqlite.Row) -> Product:
        return Product(
            id=row["id"],
            gym_id=row["gym_id"],
            category_id=row["category_id"],
            category_name=row["category_name"],
            name=row["name"],
            description=row["description"],
            image_url=row["image_url"],
            price=money(row["price"]),
            stock_quantity=row["stock_quantity"],
            is_active=bool(row["is_active"]),
            created_at=parse_timestamp(row["created_at"]),
            updated_at=parse_timestamp(row["updated_at"]),
        )


class OrderRepository(Repository):
    """Repository for orders and the stock they reserve.

    Creating and cancelling an order each run in a single immediate
    transaction: stock changes, the order row and its items either all commit
    or none do.
    """

    table = "orders"

    async def create(
        self,
        gym_id: str,
        user_id: str,
        lines: list[OrderLine],
        metadata: dict | None = None,
        day: date | None = None,
    ) -> Order:
        """Place an order and take its items out of stock.

        Quantities for the same product are summed before stock is checked.
        Each line keeps the product price at the time of the order.

        Raises:
            ValidationError: If a product is missing, inactive or from
                another gym
            InsufficientStockError: If a product cannot cover the summed
                quantity
        """
        day = day or date.today()
        quantities = aggregate_quantities(lines)
        product_ids = list(quantities)
        order_id = new_id()
        stamp = now_iso()

        async with transaction(self.db_path) as db:
            cursor = await db.execute(
                f"""
                SELECT id, name, price, stock_quantity FROM products
                WHERE gym_id = ? AND is_active = 1 AND deleted_at IS NULL
                AND {in_clause('id', product_ids)}
                """,
                (gym_id, *product_ids),
            )
            products = {row["id"]: row for row in await cursor.fetchall()}
            if len(products) != len(product_ids):
                raise ValidationError("One or more products not found or inactive")

            # Check every product before touching any stock
            for product_id, quantity in quantities.items():
                product = products[product_id]
                if quantity > product["stock_quantity"]:
                    raise InsufficientStockError(
                        product["name"], quantity, product["stock_quantity"]
                    )

            for product_id, quantity in quantities.items():
                cursor = await db.execute(
                    "UPDATE products SET stock_quantity = stock_quantity - ?, updated_at = ? "
                    "WHERE id = ? AND stock_quantity >= ?",
                    (quantity, stamp, product_id, quantity),
                )
                if cursor.rowcount != 1:
                    available = await _stock_of(db, product_id)
                    raise InsufficientStockError(
                        products[product_id]["name"], quantity, available
                    )

            items = [
                OrderItem(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_price=money(products[line.product_id]["price"]),
                    order_id=order_id,
                    id=new_id(),
                )
                for line in lines
            ]
            total = sum((item.line_total for item in items), money(0))
            order_number = await self._next_order_number(db, gym_id, day)

            await db.execute(
                """
                INSERT INTO orders
                (id, gym_id, user_id, order_number, total_amount, status, metadata,
                 created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    order_id,
                    gym_id,
                    user_id,
                    order_number,
                    str(money(total)),
                    OrderStatus.PENDING_APPROVAL.value,
                    json.dumps(metadata) if metadata is not None else None,
                    stamp,
                    stamp,
                ),
            )
            await db.executemany(
                """
                INSERT INTO order_items
                (id, order_id, product_id, line_number, quantity, unit_price)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        item.id,
                        order_id,
                        item.product_id,
                        line_number,
                        item.quantity,
                        str(item.unit_price),
                    )
                    for line_number, item in enumerate(items, start=1)
                ],
            )

        logger.info("Created order %s (%s) for user %s", order_number, total, user_id)
        return await self.get(order_id, gym_id)

    @staticmethod
    async def _next_order_number(db: aiosqlite.Connection, gym_id: str, day: date) -> str:
        """Bump the gym's counter for ``day`` and format the new number."""
        day_key = day.isoformat()
        await db.execute(
            """
            INSERT INTO order_sequences (gym_id, day, last_value) VALUES (?, ?, 1)
            ON CONFLICT (gym_id, day) DO UPDATE SET last_value = last_value + 1
            """,
            (gym_id, day_key),
        )
        cursor = await db.execute(
            "SELECT last_value FROM order_sequences WHERE gym_id = ? AND day = ?",
            (gym_id, day_key),
        )
        sequence = (await cursor.fetchone())[0]
        return format_order_number(day, sequence)

    async def get(
        self, order_id: str, gym_id: str, user_id: str | None = None
    ) -> Order | None:
        """Get a live order, optionally only if ``user_id`` placed it."""
        where, params = "orders.id = ? AND orders.gym_id = ?", [order_id, gym_id]
        if user_id is not None:
            where += " AND orders.user_id = ?"
            params.append(user_id)
        order = await self._get_live(where, params)
        if order is None:
            return None
        await self._attach_details([order])
        return order

    async def list_page(
        self,
        gym_id: str,
        page: int,
        limit: int,
        user_ids: list[str] | None = None,
        status: OrderStatus | None = None,
        user_id: str | None = None,
        search: str | None = None,
    ) -> Page:
        where = ["orders.gym_id = ?"]
        params: list = [gym_id]
        if user_ids is not None:
            where.append(in_clause("orders.user_id", user_ids))
            params += user_ids
        if status is not None:
            where.append("orders.status = ?")
            params.append(status.value)
        if user_id:
            where.append("orders.user_id = ?")
            params.append(user_id)
        if search:
            where.append(
                "(orders.order_number LIKE ? OR orders.user_id IN ("
                "SELECT id FROM users WHERE first_name LIKE ? OR last_name LIKE ? "
                "OR email LIKE ?))"
            )
            params += [f"%{search}%"] * 4
        result = await self._paginate(" AND ".join(where), params, page, limit)
        await self._attach_details(result.items)
        return result

    async def set_status(
        self, order_id: str, status: OrderStatus, metadata: dict | None = None
    ) -> None:
        """Plain status change with no stock side effects."""
        fields = {"status": status.value}
        if metadata is not None:
            fields["metadata"] = json.dumps(metadata)
        await self._update_fields(order_id, fields)

    async def cancel(
        self,
        order_id: str,
        soft_delete: bool = False,
        metadata: dict | None = None,
        only_from: OrderStatus | None = None,
    ) -> OrderStatus:
        """Cancel an order and put its items back in stock.

        Stock is only restored if the order was not already cancelled. The
        current status is re-read under the write lock so two cancellations
        cannot both restore stock. With ``only_from`` the order must still be in
        that status.

        Returns:
            The status the order had before cancelling
        """
        stamp = now_iso()
        async with transaction(self.db_path) as db:
            cursor = await db.execute(
                "SELECT status FROM orders WHERE id = ? AND deleted_at IS NULL", (order_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                raise NotFoundError("Order not found")
            previous = OrderStatus(row["status"])
            if only_from is not None and previous != only_from:
                raise NotFoundError("Order not found or cannot be cancelled")
            if previous == OrderStatus.COMPLETED:
                raise ValidationError("Cannot cancel completed orders")

            assignments = ["status = ?", "updated_at = ?"]
            params: list = [OrderStatus.CANCELLED.value, stamp]
            if soft_delete:
                assignments.append("deleted_at = ?")
                params.append(stamp)
            if metadata is not None:
                assignments.append("metadata = ?")
                params.append(json.dumps(metadata))
            await db.execute(
                f"UPDATE orders SET {', '.join(assignments)} WHERE id = ?",
                (*params, order_id),
            )

            if previous != OrderStatus.CANCELLED:
                cursor = await db.execute(
                    "SELECT product_id, quantity FROM order_items WHERE order_id = ?",
                    (order_id,),
                )
                items = await cursor.fetchall()
                await db.executemany(
                    "UPDATE products SET stock_quantity = stock_quantity + ?, updated_at = ? "
                    "WHERE id = ?",
                    [(item["quantity"], stamp, item["product_id"]) for item in items],
                )
                logger.info("Restored stock for %d lines of order %s", len(items), order_id)
        return previous

    async def stats(self, gym_id: str, user_id: str | None = None) -> dict:
        where, params = "gym_id = ? AND deleted_at IS NULL", [gym_id]
        if user_id is not None:
            where += " AND user_id = ?"
            params.append(user_id)
        rows = await self._fetch_all(
            f"SELECT status, total_amount FROM orders WHERE {where}", params
        )
        by_status = {status: 0 for status in OrderStatus}
        revenue = money(0)
        for row in rows:
            status = OrderStatus(row["status"])
            by_status[status] += 1
            if status == OrderStatus.COMPLETED:
                revenue += money(row["total_amount"])
        return {
            "totalOrders": len(rows),
            "byStatus": {
                "pending": by_status[OrderStatus.PENDING_APPROVAL],
                "prepared": by_status[OrderStatus.PREPARED],
                "completed": by_status[OrderStatus.COMPLETED],
                "cancelled": by_status[OrderStatus.CANCELLED],
            },
            "totalRevenue": str(money(revenue)),
        }

    async def _attach_details(self, orders: list[Order]) -> None:
        """Load items and purchaser summaries for a batch of orders."""
        if not orders:
            return
        order_ids = [order.id for order in orders]
        rows = await self._fetch_all(
            f"""
            SELECT order_items.*, products.name AS product_name FROM order_items
            JOIN products ON products.id = order_items.product_id
            WHERE {in_clause('order_items.order_id', order_ids)}
            ORDER BY order_items.line_number
            """,
            order_ids,
        )
        by_order: dict[str, list[OrderItem]] = {order_id: [] for order_id in order_ids}
        for row in rows:
            by_order[row["order_id"]].append(
                OrderItem(
                    id=row["id"],
                    order_id=row["order_id"],
                    product_id=row["product_id"],
                    product_name=row["product_name"],
                    quantity=row["quantity"],
                    unit_price=money(row["unit_price"]),
                )
            )
        purchasers = await UserRepository(self.db_path).summaries(
            list({order.user_id for order in orders})
        )
        for order in orders:
            order.items = by_order[order.id]
            order.purchaser = purchasers.get(order.user_id)

    def _row_to_entity(self, row: aiosqlite.Row) -> Order:
        return Order(
            id=row["id"],
            gym_id=row["gym_id"],
            user_id=row["user_id"],
            order_number=row["order_number"],
            total_amount=money(row["total_amount"]),
            status=OrderStatus(row["status"]),
            metadata=json.loads(row["metadata"]) if row["metadata"] else None,
            created_at=parse_timestamp(row["created_at"]),
            updated_at=parse_timestamp(row["updated_at"]),
            deleted_at=parse_timestamp(row["deleted_at"]),
        )


async def _stock_of(db: aiosqlite.Connection, product_id: str) -> int:
    cursor = await db.execute("SELECT stock_quantity FROM products WHERE id = ?", (product_id,))
    row = await cursor.fetchone()
    return row[0] if row is not None else 0
