"""Read-only aggregates behind the dashboard charts."""

from datetime import datetime
from decimal import Decimal

from ...models.common import format_timestamp, money
from ...models.marketplace import OrderStatus
from ...models.permissions import STUDENT
from .base import Repository


def _day(column: str) -> str:
    # Timestamps are stored as UTC ISO strings, so the date is the prefix
    return f"substr({column}, 1, 10)"


class AnalyticsRepository(Repository):
    """Aggregate queries over orders, products and trainer matches.

    Every query is scoped to one gym. Order figures can be narrowed to a
    single purchaser with ``user_id``.
    """

    table = "orders"

    @staticmethod
    def _orders_where(gym_id: str, user_id: str | None) -> tuple[str, list]:
        where, params = "orders.gym_id = ? AND orders.deleted_at IS NULL", [gym_id]
        if user_id is not None:
            where += " AND orders.user_id = ?"
            params.append(user_id)
        return where, params

    async def revenue_by_day(
        self, gym_id: str, since: datetime, user_id: str | None = None
    ) -> list[dict]:
        """Completed-order revenue per day, oldest day first."""
        where, params = self._orders_where(gym_id, user_id)
        rows = await self._fetch_all(
            f"SELECT {_day('created_at')} AS day, total_amount FROM orders "
            f"WHERE {where} AND status = ? AND created_at >= ? ORDER BY created_at",
            [*params, OrderStatus.COMPLETED.value, format_timestamp(since)],
        )
        # Amounts are decimal strings, so they are summed here rather than in SQL
        revenue: dict[str, Decimal] = {}
        for row in rows:
            revenue[row["day"]] = revenue.get(row["day"], money(0)) + money(row["total_amount"])
        return [{"date": day, "revenue": str(money(total))} for day, total in revenue.items()]

    async def status_counts(self, gym_id: str, user_id: str | None = None) -> dict[str, int]:
        where, params = self._orders_where(gym_id, user_id)
        rows = await self._fetch_all(
            f"SELECT status, COUNT(*) AS n FROM orders WHERE {where} GROUP BY status",
            params,
        )
        return {row["status"]: row["n"] for row in rows}

    async def completed_revenue(self, gym_id: str, user_id: str | None = None) -> Decimal:
        where, params = self._orders_where(gym_id, user_id)
        rows = await self._fetch_all(
            f"SELECT total_amount FROM orders WHERE {where} AND status = ?",
            [*params, OrderStatus.COMPLETED.value],
        )
        return sum((money(row["total_amount"]) for row in rows), money(0))

    async def top_products(
        self, gym_id: str, limit: int, user_id: str | None = None
    ) -> list[dict]:
        """Best sellers by quantity across completed orders."""
        where, params = self._orders_where(gym_id, user_id)
        rows = await self._fetch_all(
            f"""
            SELECT order_items.product_id, products.name,
                   SUM(order_items.quantity) AS total_sold
            FROM order_items
            JOIN orders ON orders.id = order_items.order_id
            JOIN products ON products.id = order_items.product_id
            WHERE {where} AND orders.status = ?
            GROUP BY order_items.product_id, products.name
            ORDER BY total_sold DESC, products.name
            LIMIT ?
            """,
            [*params, OrderStatus.COMPLETED.value, limit],
        )
        return [
            {"productId": row["product_id"], "name": row["name"], "totalSold": row["total_sold"]}
            for row in rows
        ]

    async def product_counts(self, gym_id: str, low_stock_below: int) -> dict:
        """Active products, and how many of them are running low."""
        row = await self._fetch_one(
            """
            SELECT COUNT(*) AS total,
                   COALESCE(SUM(stock_quantity < ?), 0) AS low_stock
            FROM products
            WHERE gym_id = ? AND deleted_at IS NULL AND is_active = 1
            """,
            (low_stock_below, gym_id),
        )
        return {"total": row["total"], "lowStock": row["low_stock"]}

    async def match_activity(
        self,
        gym_id: str,
        since: datetime,
        recent_since: datetime,
        trainer_id: str | None = None,
    ) -> list[dict]:
        """Matches created since ``since`` per day, split by recent activity.

        A match counts as active when it was touched after ``recent_since``.
        """
        where, params = "gym_id = ? AND deleted_at IS NULL AND created_at >= ?", [
            gym_id,
            format_timestamp(since),
        ]
        if trainer_id is not None:
            where += " AND trainer_id = ?"
            params.append(trainer_id)
        recent = format_timestamp(recent_since)
        rows = await self._fetch_all(
            f"""
            SELECT {_day('created_at')} AS day,
                   SUM(updated_at >= ?) AS active,
                   SUM(updated_at < ?) AS inactive
            FROM trainer_matches
            WHERE {where}
            GROUP BY day
            ORDER BY day
            """,
            [recent, recent, *params],
        )
        return [
            {"date": row["day"], "active": row["active"], "inactive": row["inactive"]}
            for row in rows
        ]

    async def recently_active_matches(
        self, gym_id: str, recent_since: datetime, trainer_id: str | None = None
    ) -> int:
        where, params = "gym_id = ? AND deleted_at IS NULL AND updated_at >= ?", [
            gym_id,
            format_timestamp(recent_since),
        ]
        if trainer_id is not None:
            where += " AND trainer_id = ?"
            params.append(trainer_id)
        return await self._scalar(f"SELECT COUNT(*) FROM trainer_matches WHERE {where}", params)

    async def student_count(self, gym_id: str) -> int:
        return await self._scalar(
            """
            SELECT COUNT(*) FROM users
            JOIN roles ON roles.id = users.role_id
            WHERE users.gym_id = ? AND users.deleted_at IS NULL AND roles.name = ?
            """,
            (gym_id, STUDENT),
        )
