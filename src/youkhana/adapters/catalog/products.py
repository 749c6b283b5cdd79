"""Rental product repository backed by the key-value store.

Layout:
    product:{id}             JSON record
    product:handle:{handle}  handle -> id
    products:all             sorted set of ids scored by creation millis
    products:active          set of active ids
    products:featured        set of featured ids
    products:category:{c}    set of ids per category
    products:search:{tag}    set of ids per tag
    categories:all, tags:all sets of known names

Index updates are not atomic with the record write; a crash between the
two can leave stale index entries, which readers tolerate.
"""

from __future__ import annotations

import asyncio
import re
import uuid
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from youkhana.adapters.catalog.types import (
    DEFAULT_CATEGORY,
    Money,
    PriceRange,
    ProductFields,
    ProductFilters,
    ProductStats,
    ProductStatus,
    ProductUpdate,
    RentalProduct,
)
from youkhana.adapters.kv import KeyValueStore, keys
from youkhana.core.clock import Clock, epoch_millis, utcnow
from youkhana.core.errors import NotFoundError, ValidationError

logger = structlog.get_logger()

_NON_SLUG = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def generate_handle(title: str) -> str:
    """Slugify a title, e.g. ``"Silk Slip Dress!"`` -> ``"silk-slip-dress"``."""
    handle = _NON_SLUG.sub("", title.lower()).strip()
    handle = _HYPHENS.sub("-", _WHITESPACE.sub("-", handle))
    return handle or "product"


def _check_quantities(total: int, available: int) -> None:
    if total < 0 or available < 0:
        raise ValidationError("Quantities cannot be negative")
    if available > total:
        raise ValidationError("Available quantity cannot exceed total quantity")


class ProductRepository:
    """CRUD and queries over rental products."""

    def __init__(self, store: KeyValueStore, clock: Clock = utcnow) -> None:
        """Initialize the repository.

        Args:
            store: Key-value store adapter.
            clock: Source of the current time.
        """
        self._store = store
        self._clock = clock

    async def _ensure_unique_handle(self, base: str) -> str:
        handle = base
        counter = 1
        while await self._store.get(keys.product_handle(handle)):
            handle = f"{base}-{counter}"
            counter += 1
        return handle

    async def create_product(self, data: ProductFields, created_by: str) -> RentalProduct:
        """Create a product and index it.

        Raises:
            ValidationError: If required fields are missing or quantities are invalid.
        """
        if not data.title or not data.description:
            raise ValidationError("Title and description are required")

        if data.rental_price.daily <= 0:
            raise ValidationError("Daily rental price is required and must be positive")

        _check_quantities(data.total_quantity, data.available_quantity)

        product_id = str(uuid.uuid4())
        handle = await self._ensure_unique_handle(data.handle or generate_handle(data.title))
        now = self._clock()

        daily = Money(amount=str(data.rental_price.daily), currency_code=data.currency)
        product = RentalProduct.model_validate(
            {
                **data.model_dump(),
                "id": product_id,
                "handle": handle,
                "price_range": data.price_range
                or PriceRange(min_variant_price=daily, max_variant_price=daily),
                "featured_image": data.featured_image or (data.images[0] if data.images else None),
                "category": data.category or DEFAULT_CATEGORY,
                "created_at": now,
                "updated_at": now,
                "created_by": created_by,
            }
        )

        await self._store.set(keys.product(product_id), product.to_json())
        await self._store.set(keys.product_handle(handle), product_id)
        await self._store.zadd(keys.PRODUCTS_ALL, product_id, epoch_millis(now))

        if product.status is ProductStatus.ACTIVE:
            await self._store.sadd(keys.PRODUCTS_ACTIVE, product_id)
        if product.featured:
            await self._store.sadd(keys.PRODUCTS_FEATURED, product_id)

        await self._store.sadd(keys.products_by_category(product.category), product_id)
        await self._store.sadd(keys.CATEGORIES_ALL, product.category)

        for tag in product.tags:
            await self._store.sadd(keys.products_by_tag(tag), product_id)
            await self._store.sadd(keys.TAGS_ALL, tag)

        logger.info("product_created", product_id=product_id, handle=handle, created_by=created_by)
        return product

    async def get_product(self, product_id: str) -> RentalProduct | None:
        if not product_id:
            return None

        raw = await self._store.get(keys.product(product_id))
        if not raw:
            return None

        try:
            return RentalProduct.model_validate_json(raw)
        except PydanticValidationError:
            logger.warning("product_unparseable", product_id=product_id)
            return None

    async def get_product_by_handle(self, handle: str) -> RentalProduct | None:
        if not handle:
            return None

        product_id = await self._store.get(keys.product_handle(handle))
        if not product_id:
            return None

        return await self.get_product(product_id)

    async def list_products(self, filters: ProductFilters | None = None) -> list[RentalProduct]:
        """List products, newest first.

        One index is read by specificity (category, active, featured, all)
        and the remaining filters are applied in memory.
        """
        filters = filters or ProductFilters()

        if filters.category:
            ids: list[str] | set[str] = await self._store.smembers(
                keys.products_by_category(filters.category)
            )
        elif filters.status is ProductStatus.ACTIVE:
            ids = await self._store.smembers(keys.PRODUCTS_ACTIVE)
        elif filters.featured:
            ids = await self._store.smembers(keys.PRODUCTS_FEATURED)
        else:
            ids = await self._store.zrange(keys.PRODUCTS_ALL, 0, -1, desc=True)

        if not ids:
            return []

        found = await asyncio.gather(*(self.get_product(i) for i in ids))
        products = [p for p in found if p is not None]

        if filters.status is not None:
            products = [p for p in products if p.status is filters.status]
        if filters.featured:
            products = [p for p in products if p.featured]
        if filters.tags:
            wanted = set(filters.tags)
            products = [p for p in products if wanted.intersection(p.tags)]
        if filters.min_price is not None:
            products = [p for p in products if p.rental_price.daily >= filters.min_price]
        if filters.max_price is not None:
            products = [p for p in products if p.rental_price.daily <= filters.max_price]
        if filters.available:
            products = [p for p in products if p.available_quantity > 0]

        products.sort(key=lambda p: p.created_at, reverse=True)
        return products

    async def update_product(
        self,
        product_id: str,
        updates: ProductUpdate,
        modified_by: str | None = None,
    ) -> RentalProduct:
        """Apply a partial update and move index entries to match.

        Raises:
            ValidationError: If product_id is empty or quantities are invalid.
            NotFoundError: If the product does not exist.
        """
        if not product_id:
            raise ValidationError("Product ID is required")

        existing = await self.get_product(product_id)
        if existing is None:
            raise NotFoundError("Product not found")

        changes: dict[str, Any] = updates.changes()

        if "total_quantity" in changes or "available_quantity" in changes:
            _check_quantities(
                changes.get("total_quantity", existing.total_quantity),
                changes.get("available_quantity", existing.available_quantity),
            )

        new_handle = changes.get("handle")
        if new_handle and new_handle != existing.handle:
            unique = await self._ensure_unique_handle(new_handle)
            changes["handle"] = unique
            await self._store.delete(keys.product_handle(existing.handle))
            await self._store.set(keys.product_handle(unique), product_id)
        else:
            changes.pop("handle", None)

        if modified_by:
            changes["last_modified_by"] = modified_by

        updated = RentalProduct.model_validate(
            {
                **existing.model_dump(),
                **changes,
                "id": product_id,
                "created_at": existing.created_at,
                "updated_at": self._clock(),
            }
        )

        await self._store.set(keys.product(product_id), updated.to_json())

        if updated.status is not existing.status:
            if existing.status is ProductStatus.ACTIVE:
                await self._store.srem(keys.PRODUCTS_ACTIVE, product_id)
            if updated.status is ProductStatus.ACTIVE:
                await self._store.sadd(keys.PRODUCTS_ACTIVE, product_id)

        if updated.featured != existing.featured:
            if updated.featured:
                await self._store.sadd(keys.PRODUCTS_FEATURED, product_id)
            else:
                await self._store.srem(keys.PRODUCTS_FEATURED, product_id)

        if updated.category != existing.category:
            await self._store.srem(keys.products_by_category(existing.category), product_id)
            await self._store.sadd(keys.products_by_category(updated.category), product_id)
            await self._store.sadd(keys.CATEGORIES_ALL, updated.category)

        if "tags" in changes:
            for tag in existing.tags:
                await self._store.srem(keys.products_by_tag(tag), product_id)
            for tag in updated.tags:
                await self._store.sadd(keys.products_by_tag(tag), product_id)
                await self._store.sadd(keys.TAGS_ALL, tag)

        logger.info("product_updated", product_id=product_id, fields=sorted(changes))
        return updated

    async def delete_product(self, product_id: str) -> RentalProduct:
        """Delete a product and every index entry pointing at it.

        Returns:
            The deleted product.

        Raises:
            ValidationError: If product_id is empty.
            NotFoundError: If the product does not exist.
        """
        if not product_id:
            raise ValidationError("Product ID is required")

        product = await self.get_product(product_id)
        if product is None:
            raise NotFoundError("Product not found")

        await self._store.delete(keys.product(product_id))
        await self._store.delete(keys.product_handle(product.handle))
        await self._store.zrem(keys.PRODUCTS_ALL, product_id)
        await self._store.srem(keys.PRODUCTS_ACTIVE, product_id)
        await self._store.srem(keys.PRODUCTS_FEATURED, product_id)
        await self._store.srem(keys.products_by_category(product.category), product_id)
        for tag in product.tags:
            await self._store.srem(keys.products_by_tag(tag), product_id)

        logger.info("product_deleted", product_id=product_id)
        return product

    async def set_product_status(
        self,
        product_id: str,
        status: ProductStatus,
        modified_by: str | None = None,
    ) -> RentalProduct:
        return await self.update_product(product_id, ProductUpdate(status=status), modified_by)

    async def toggle_featured(self, product_id: str, modified_by: str | None = None) -> RentalProduct:
        """Flip the featured flag.

        Raises:
            NotFoundError: If the product does not exist.
        """
        product = await self.get_product(product_id)
        if product is None:
            raise NotFoundError("Product not found")

        return await self.update_product(
            product_id, ProductUpdate(featured=not product.featured), modified_by
        )

    async def get_products_by_category(self, category: str) -> list[RentalProduct]:
        return await self.list_products(ProductFilters(category=category))

    async def search_products(self, query: str) -> list[RentalProduct]:
        """Case-insensitive substring search over text fields, category and tags."""
        products = await self.list_products()
        if not query or not query.strip():
            return products

        term = query.strip().lower()

        def matches(p: RentalProduct) -> bool:
            return (
                term in p.title.lower()
                or term in p.description.lower()
                or term in p.category.lower()
                or any(term in tag.lower() for tag in p.tags)
                or (p.short_description is not None and term in p.short_description.lower())
            )

        return [p for p in products if matches(p)]

    async def get_all_categories(self) -> list[str]:
        return sorted(await self._store.smembers(keys.CATEGORIES_ALL))

    async def get_all_tags(self) -> list[str]:
        return sorted(await self._store.smembers(keys.TAGS_ALL))

    async def get_product_stats(self) -> ProductStats:
        """Dashboard counters.

        ``total_value`` sums deposit times total quantity.
        """
        products = await self.list_products()

        by_category: dict[str, int] = {}
        for p in products:
            by_category[p.category] = by_category.get(p.category, 0) + 1

        average = (
            sum(p.rental_price.daily for p in products) / len(products) if products else 0
        )

        return ProductStats(
            total=len(products),
            active=sum(1 for p in products if p.status is ProductStatus.ACTIVE),
            inactive=sum(1 for p in products if p.status is ProductStatus.INACTIVE),
            drafts=sum(1 for p in products if p.status is ProductStatus.DRAFT),
            featured=sum(1 for p in products if p.featured),
            by_category=by_category,
            total_value=sum((p.deposit or 0) * p.total_quantity for p in products),
            average_rental_price=average,
        )

    async def product_exists(self, product_id: str) -> bool:
        return await self.get_product(product_id) is not None

    async def get_product_count(self) -> int:
        return await self._store.zcard(keys.PRODUCTS_ALL)
