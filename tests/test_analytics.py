"""Tests for dashboard analytics."""

from datetime import timedelta
from decimal import Decimal

import pytest

from gymkeep.db import connect
from gymkeep.errors import ForbiddenError
from gymkeep.models.common import format_timestamp, utcnow
from gymkeep.models.marketplace import OrderLine
from gymkeep.services import (
    AnalyticsService,
    OrderService,
    ProductService,
    TrainerMatchService,
)


def today() -> str:
    return utcnow().date().isoformat()


@pytest.fixture
async def sales(db_path, world, product):
    """Two completed orders and one pending, across two products.

    The student buys 2 whey and 4 bars (60.00) and the owner buys 1 whey
    (25.00); both are completed. A pending student order for 1 bar stays
    out of the revenue and best-seller figures.
    """
    bar = await ProductService(db_path).create(
        world.owner, product.category_id, "Protein Bar", Decimal("2.50"), stock_quantity=50
    )
    orders = OrderService(db_path)
    student_order = await orders.create(
        world.student, [OrderLine(product.id, 2), OrderLine(bar.id, 4)]
    )
    owner_order = await orders.create(world.owner, [OrderLine(product.id, 1)])
    await orders.create(world.student, [OrderLine(bar.id, 1)])
    for order in (student_order, owner_order):
        await orders.update_status(world.owner, order.id, "completed")
    return product, bar


class TestOrderAnalytics:
    """Tests for the order and product figures."""

    async def test_revenue_trend(self, db_path, world, sales):
        service = AnalyticsService(db_path)

        assert await service.revenue_trend(world.owner) == [
            {"date": today(), "revenue": "85.00"}
        ]
        assert await service.revenue_trend(world.student) == [
            {"date": today(), "revenue": "60.00"}
        ]

    async def test_order_status_includes_every_status(self, db_path, world, sales):
        distribution = await AnalyticsService(db_path).order_status(world.owner)

        assert distribution == [
            {"status": "pending_approval", "count": 1},
            {"status": "prepared", "count": 0},
            {"status": "completed", "count": 2},
            {"status": "cancelled", "count": 0},
        ]

    async def test_top_products_count_completed_orders_only(self, db_path, world, sales):
        whey, bar = sales
        service = AnalyticsService(db_path)

        top = await service.top_products(world.owner)

        assert [(p["productId"], p["totalSold"]) for p in top] == [(bar.id, 4), (whey.id, 3)]
        assert top[0]["name"] == "Protein Bar"
        assert len(await service.top_products(world.owner, limit=1)) == 1

    async def test_students_see_their_own_purchases(self, db_path, world, sales):
        whey, bar = sales

        top = await AnalyticsService(db_path).top_products(world.student)

        assert [(p["productId"], p["totalSold"]) for p in top] == [(bar.id, 4), (whey.id, 2)]

    async def test_other_gyms_see_nothing(self, db_path, other_world, sales):
        service = AnalyticsService(db_path)

        assert await service.revenue_trend(other_world.owner) == []
        assert await service.top_products(other_world.owner) == []

    async def test_summary(self, db_path, world, sales):
        summary = await AnalyticsService(db_path).summary(world.owner)

        assert summary == {
            "totalRevenue": "85.00",
            "pendingOrders": 1,
            "totalProducts": 2,
            # whey is down to 7
            "lowStockProducts": 1,
            "totalStudents": 1,
            "activeStudents": 0,
        }

    async def test_student_summary_has_no_student_activity(self, db_path, world, sales):
        summary = await AnalyticsService(db_path).summary(world.student)

        assert summary["totalRevenue"] == "60.00"
        assert summary["pendingOrders"] == 1
        assert "activeStudents" not in summary


class TestStudentActivity:
    """Tests for the trainer-match activity trend."""

    async def test_new_match_counts_as_active(self, db_path, world, other_world):
        await TrainerMatchService(db_path).create(
            world.owner, world.trainer.user_id, world.student.user_id
        )
        service = AnalyticsService(db_path)

        expected = [{"date": today(), "active": 1, "inactive": 0}]
        assert await service.active_students(world.owner) == expected
        assert await service.active_students(world.trainer) == expected
        assert await service.active_students(other_world.trainer) == []
        assert (await service.summary(world.trainer))["activeStudents"] == 1

    async def test_untouched_match_counts_as_inactive(self, db_path, world):
        await TrainerMatchService(db_path).create(
            world.owner, world.trainer.user_id, world.student.user_id
        )
        async with connect(db_path) as db:
            await db.execute(
                "UPDATE trainer_matches SET updated_at = ?",
                (format_timestamp(utcnow() - timedelta(days=10)),),
            )
        service = AnalyticsService(db_path)

        assert await service.active_students(world.owner) == [
            {"date": today(), "active": 0, "inactive": 1}
        ]
        assert (await service.summary(world.owner))["activeStudents"] == 0

    async def test_students_cannot_see_activity(self, db_path, world):
        with pytest.raises(ForbiddenError):
            await AnalyticsService(db_path).active_students(world.student)
