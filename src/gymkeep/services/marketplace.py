"""Shop catalog: product categories and products."""

import logging
from decimal import Decimal
from pathlib import Path

from ..db.repositories import CategoryRepository, ProductRepository
from ..errors import ConflictError, NotFoundError, ValidationError
from ..models.common import Page
from ..models.identity import Actor
from ..models.marketplace import Product, ProductCategory
from .base import tenant_of

logger = logging.getLogger(__name__)


class CategoryService:
    def __init__(self, db_path: Path | None = None):
        self.categories = CategoryRepository(db_path)

    async def create(
        self, actor: Actor, name: str, description: str | None = None
    ) -> ProductCategory:
        gym_id = tenant_of(actor)
        if await self.categories.name_taken(gym_id, name):
            raise ConflictError("Category with this name already exists")
        return await self.categories.create(
            ProductCategory(gym_id=gym_id, name=name, description=description)
        )

    async def list_all(self, actor: Actor, search: str | None = None) -> list[ProductCategory]:
        return await self.categories.list_all(tenant_of(actor), search)

    async def get(self, actor: Actor, category_id: str) -> ProductCategory:
        category = await self.categories.get(category_id, tenant_of(actor))
        if category is None:
            raise NotFoundError("Category not found")
        return category

    async def update(self, actor: Actor, category_id: str, fields: dict) -> ProductCategory:
        gym_id = tenant_of(actor)
        await self.get(actor, category_id)
        if fields.get("name") and await self.categories.name_taken(
            gym_id, fields["name"], exclude_id=category_id
        ):
            raise ConflictError("Category with this name already exists")
        return await self.categories.update(category_id, gym_id, fields)

    async def delete(self, actor: Actor, category_id: str) -> None:
        await self.get(actor, category_id)
        if await self.categories.count_products(category_id) > 0:
            raise ValidationError("Cannot delete category with existing products")
        await self.categories.soft_delete(category_id)
        logger.info("Deleted category %s", category_id)


class ProductService:
    """Products in a gym's shop.

    Students only ever see active products.
    """

    def __init__(self, db_path: Path | None = None):
        self.products = ProductRepository(db_path)
        self.categories = CategoryRepository(db_path)

    async def _check_category(self, gym_id: str, category_id: str) -> None:
        if await self.categories.get(category_id, gym_id) is None:
            raise NotFoundError("Category not found")

    async def create(
        self,
        actor: Actor,
        category_id: str,
        name: str,
        price: Decimal,
        stock_quantity: int = 0,
        description: str | None = None,
        image_url: str | None = None,
        is_active: bool = True,
    ) -> Product:
        gym_id = tenant_of(actor)
        _check_amounts(price, stock_quantity)
        await self._check_category(gym_id, category_id)
        if await self.products.name_taken(category_id, name):
            raise ConflictError("Product with this name already exists in this category")
        product = await self.products.create(
            Product(
                gym_id=gym_id,
                category_id=category_id,
                name=name,
                price=price,
                stock_quantity=stock_quantity,
                description=description,
                image_url=image_url,
                is_active=is_active,
            )
        )
        logger.info("Created product %s in gym %s", product.id, gym_id)
        return product

    async def list_page(
        self,
        actor: Actor,
        page: int,
        limit: int,
        category_id: str | None = None,
        search: str | None = None,
        is_active: bool | None = None,
        in_stock: bool | None = None,
    ) -> Page:
        return await self.products.list_page(
            tenant_of(actor),
            page,
            limit,
            category_id=category_id,
            search=search,
            is_active=True if actor.is_student else is_active,
            in_stock=in_stock,
        )

    async def get(self, actor: Actor, product_id: str) -> Product:
        product = await self.products.get(product_id, tenant_of(actor))
        if product is None or (actor.is_student and not product.is_active):
            raise NotFoundError("Product not found")
        return product

    async def update(self, actor: Actor, product_id: str, fields: dict) -> Product:
        gym_id = tenant_of(actor)
        product = await self.get(actor, product_id)
        _check_amounts(fields.get("price"), fields.get("stock_quantity"))
        category_id = fields.get("category_id") or product.category_id
        if fields.get("category_id"):
            await self._check_category(gym_id, category_id)
        name = fields.get("name") or product.name
        if (fields.get("name") or fields.get("category_id")) and await self.products.name_taken(
            category_id, name, exclude_id=product_id
        ):
            raise ConflictError("Product with this name already exists in this category")
        return await self.products.update(product_id, gym_id, fields)

    async def set_stock(self, actor: Actor, product_id: str, stock_quantity: int) -> Product:
        """Manual stock correction, e.g. after a delivery or a count."""
        _check_amounts(None, stock_quantity)
        await self.get(actor, product_id)
        product = await self.products.update(
            product_id, tenant_of(actor), {"stock_quantity": stock_quantity}
        )
        logger.info("Stock of product %s set to %d", product_id, stock_quantity)
        return product

    async def toggle_active(self, actor: Actor, product_id: str) -> Product:
        product = await self.get(actor, product_id)
        return await self.products.update(
            product_id, tenant_of(actor), {"is_active": not product.is_active}
        )

    async def delete(self, actor: Actor, product_id: str) -> None:
        await self.get(actor, product_id)
        await self.products.soft_delete(product_id)
        logger.info("Deleted product %s", product_id)

    async def stats(self, actor: Actor) -> dict:
        return await self.products.stats(tenant_of(actor))


def _check_amounts(price: Decimal | None, stock_quantity: int | None) -> None:
    if price is not None and price < 0:
        raise ValidationError("Price must be zero or greater")
    if stock_quantity is not None and stock_quantity < 0:
        raise ValidationError("Stock quantity must be zero or greater")
