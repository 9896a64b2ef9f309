"""Tests for data models."""

from datetime import date
from decimal import Decimal

import pytest

from gymkeep.errors import ValidationError
from gymkeep.models.catalog import Equipment, EquipmentStatus
from gymkeep.models.common import Page, money
from gymkeep.models.marketplace import (
    OrderItem,
    OrderLine,
    Product,
    aggregate_quantities,
    format_order_number,
    parse_order_sequence,
)
from gymkeep.models.permissions import (
    ROLE_TEMPLATES,
    Action,
    PermissionSet,
    Resource,
)
from gymkeep.models.program import check_reorder


class TestPermissionSet:
    """Tests for PermissionSet."""

    def test_from_dict_keeps_only_granted_pairs(self):
        perms = PermissionSet.from_dict(
            {"orders": {"read": True, "delete": False}, "products": {"read": True}}
        )

        assert perms.allows(Resource.ORDERS, Action.READ)
        assert not perms.allows(Resource.ORDERS, Action.DELETE)
        assert perms.to_dict() == {"products": {"read": True}, "orders": {"read": True}}

    def test_empty_input(self):
        assert PermissionSet.from_dict(None).grants == frozenset()
        assert PermissionSet.from_dict({}).to_dict() == {}

    @pytest.mark.parametrize(
        "data",
        [
            {"rockets": {"read": True}},
            {"orders": {"fly": True}},
            {"orders": {"read": "yes"}},
            {"orders": ["read"]},
        ],
    )
    def test_malformed_maps_rejected(self, data):
        with pytest.raises(ValidationError):
            PermissionSet.from_dict(data)

    def test_everything_covers_every_pair(self):
        perms = PermissionSet.everything()

        assert len(perms.grants) == len(Resource) * len(Action)

    def test_student_template_cannot_manage_shop(self):
        student = ROLE_TEMPLATES["Student"].permissions

        assert student.allows(Resource.ORDERS, Action.CREATE)
        assert not student.allows(Resource.PRODUCTS, Action.CREATE)
        assert not student.allows(Resource.ORDERS, Action.UPDATE)


class TestCheckReorder:
    """Tests for reorder validation."""

    def test_valid_permutation(self):
        assert check_reorder({"a", "b", "c"}, [("a", 2), ("b", 0), ("c", 1)]) is None

    def test_duplicate_id(self):
        assert "only once" in check_reorder({"a", "b"}, [("a", 0), ("a", 1)])

    def test_missing_id(self):
        assert "every exercise" in check_reorder({"a", "b", "c"}, [("a", 0), ("b", 1)])

    def test_indices_must_be_dense(self):
        assert "0..2" in check_reorder({"a", "b", "c"}, [("a", 0), ("b", 1), ("c", 3)])
        assert "0..1" in check_reorder({"a", "b"}, [("a", 1), ("b", 1)])


class TestOrderHelpers:
    """Tests for order numbering and line handling."""

    def test_order_number_format(self):
        assert format_order_number(date(2024, 1, 31), 7) == "ORD-20240131-00007"
        assert parse_order_sequence("ORD-20240131-00007") == 7

    def test_aggregate_quantities(self):
        lines = [OrderLine("p1", 3), OrderLine("p2", 1), OrderLine("p1", 3)]

        assert aggregate_quantities(lines) == {"p1": 6, "p2": 1}
        assert list(aggregate_quantities(lines)) == ["p1", "p2"]

    def test_item_serialization_uses_strings_for_money(self):
        item = OrderItem(product_id="p1", quantity=3, unit_price=Decimal("19.99"))

        data = item.to_dict()

        assert data["unitPrice"] == "19.99"
        assert data["lineTotal"] == "59.97"

    def test_product_price_is_rounded(self):
        product = Product(gym_id="g", category_id="c", name="Bar", price=Decimal("2.5"))

        assert product.to_dict()["price"] == "2.50"


class TestCommon:
    def test_money_rounds_half_up(self):
        assert money("10.005") == Decimal("10.01")
        assert money(3) == Decimal("3.00")

    @pytest.mark.parametrize("total,limit,pages", [(0, 20, 0), (20, 20, 1), (21, 20, 2)])
    def test_total_pages(self, total, limit, pages):
        page = Page(items=[], total=total, page=1, limit=limit)

        assert page.total_pages == pages
        assert page.pagination()["totalPages"] == pages


class TestEquipment:
    def test_warning_only_for_unusable_equipment(self):
        assert Equipment(gym_id="g", name="Rack").warning is None
        broken = Equipment(gym_id="g", name="Rack", status=EquipmentStatus.BROKEN)
        assert "out of service" in broken.warning
        assert broken.to_dict()["status"] == "broken"
