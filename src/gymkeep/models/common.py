"""Helpers shared by the data models."""

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any
from uuid import uuid4

CENTS = Decimal("0.01")


def new_id() -> str:
    """Generate an opaque primary key."""
    return str(uuid4())


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO timestamp stored in the database."""
    if not value:
        return None
    return datetime.fromisoformat(value)


def format_timestamp(value: datetime | None) -> str | None:
    """Format a datetime for storage or JSON output."""
    return value.isoformat() if value else None


def money(value: Decimal | int | str) -> Decimal:
    """Normalize a monetary amount to two decimal places."""
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass
class Page:
    """One page of a list query."""

    items: list[Any]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return math.ceil(self.total / self.limit)

    def pagination(self) -> dict:
        """Pagination block for the response envelope."""
        return {
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "totalPages": self.total_pages,
        }
