"""Dashboard analytics: revenue, order mix, best sellers and student activity.

Students only ever see figures for their own orders. Trainers see the shop
figures for the whole gym but student activity only for their own matches.
"""

from datetime import timedelta
from pathlib import Path

from ..db.repositories import AnalyticsRepository
from ..errors import ForbiddenError
from ..models.common import utcnow
from ..models.identity import Actor
from ..models.marketplace import OrderStatus
from .base import tenant_of

LOW_STOCK_THRESHOLD = 10
RECENT_ACTIVITY = timedelta(days=7)


class AnalyticsService:
    def __init__(self, db_path: Path | None = None):
        self.analytics = AnalyticsRepository(db_path)

    @staticmethod
    def _purchaser(actor: Actor) -> str | None:
        return actor.user_id if actor.is_student else None

    @staticmethod
    def _trainer(actor: Actor) -> str | None:
        return actor.user_id if actor.is_trainer else None

    async def revenue_trend(self, actor: Actor, days: int = 30) -> list[dict]:
        return await self.analytics.revenue_by_day(
            tenant_of(actor), utcnow() - timedelta(days=days), user_id=self._purchaser(actor)
        )

    async def order_status(self, actor: Actor) -> list[dict]:
        """Order counts for every status, zeros included."""
        counts = await self.analytics.status_counts(
            tenant_of(actor), user_id=self._purchaser(actor)
        )
        return [
            {"status": status.value, "count": counts.get(status.value, 0)}
            for status in OrderStatus
        ]

    async def top_products(self, actor: Actor, limit: int = 10) -> list[dict]:
        return await self.analytics.top_products(
            tenant_of(actor), limit, user_id=self._purchaser(actor)
        )

    async def active_students(self, actor: Actor, days: int = 30) -> list[dict]:
        if actor.is_student:
            raise ForbiddenError("Only trainers and gym owners can access this data")
        now = utcnow()
        return await self.analytics.match_activity(
            tenant_of(actor),
            now - timedelta(days=days),
            now - RECENT_ACTIVITY,
            trainer_id=self._trainer(actor),
        )

    async def summary(self, actor: Actor) -> dict:
        gym_id = tenant_of(actor)
        purchaser = self._purchaser(actor)
        statuses = await self.analytics.status_counts(gym_id, user_id=purchaser)
        products = await self.analytics.product_counts(gym_id, LOW_STOCK_THRESHOLD)
        summary = {
            "totalRevenue": str(await self.analytics.completed_revenue(gym_id, user_id=purchaser)),
            "pendingOrders": statuses.get(OrderStatus.PENDING_APPROVAL.value, 0),
            "totalProducts": products["total"],
            "lowStockProducts": products["lowStock"],
            "totalStudents": await self.analytics.student_count(gym_id),
        }
        if not actor.is_student:
            summary["activeStudents"] = await self.analytics.recently_active_matches(
                gym_id, utcnow() - RECENT_ACTIVITY, trainer_id=self._trainer(actor)
            )
        return summary
