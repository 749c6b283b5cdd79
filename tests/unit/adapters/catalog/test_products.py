"""Tests for the rental product repository."""

from __future__ import annotations

import json
from typing import Any

import pytest
from youkhana.adapters.catalog import (
    ProductFields,
    ProductFilters,
    ProductRepository,
    ProductStatus,
    ProductUpdate,
    generate_handle,
)
from youkhana.adapters.kv import KeyValueStore
from youkhana.core.errors import NotFoundError, ValidationError

from tests.helpers import ADMIN_EMAIL, FakeClock


def _fields(base: dict[str, Any], **overrides: Any) -> ProductFields:
    return ProductFields.model_validate({**base, **overrides})


class TestGenerateHandle:
    """Tests for generate_handle."""

    @pytest.mark.parametrize(
        ("title", "expected"),
        [
            ("Silk Slip Dress!", "silk-slip-dress"),
            ("  Velvet   Blazer -- Navy ", "velvet-blazer-navy"),
            ("!!!", "product"),
        ],
    )
    def test_slugifies(self, title: str, expected: str) -> None:
        assert generate_handle(title) == expected


class TestCreateProduct:
    """Tests for create_product."""

    async def test_creates_and_indexes(
        self,
        products: ProductRepository,
        store: KeyValueStore,
        product_fields: dict[str, Any],
    ) -> None:
        product = await products.create_product(_fields(product_fields), ADMIN_EMAIL)

        assert product.handle == "silk-slip-dress"
        assert product.created_by == ADMIN_EMAIL
        assert product.price_range is not None
        assert product.price_range.min_variant_price.amount == "45.0"
        assert await store.get("product:handle:silk-slip-dress") == product.id
        assert await store.zrange("products:all", 0, -1) == [product.id]
        assert await store.smembers("products:active") == {product.id}
        assert await store.smembers("products:category:Dresses") == {product.id}
        assert await store.smembers("products:search:silk") == {product.id}
        assert await store.smembers("tags:all") == {"silk", "evening"}

    async def test_stored_as_camel_case_json(
        self,
        products: ProductRepository,
        store: KeyValueStore,
        product_fields: dict[str, Any],
    ) -> None:
        product = await products.create_product(_fields(product_fields), ADMIN_EMAIL)

        raw = await store.get(f"product:{product.id}")
        assert raw is not None
        payload = json.loads(raw)
        assert payload["rentalPrice"] == {"daily": 45.0, "weekly": 250.0}
        assert payload["availableQuantity"] == 2
        assert payload["createdAt"] == "2025-01-15T09:00:00.000Z"
        assert await products.get_product(product.id) == product

    async def test_duplicate_titles_get_suffixed_handles(
        self, products: ProductRepository, product_fields: dict[str, Any]
    ) -> None:
        first = await products.create_product(_fields(product_fields), ADMIN_EMAIL)
        second = await products.create_product(_fields(product_fields), ADMIN_EMAIL)
        third = await products.create_product(_fields(product_fields), ADMIN_EMAIL)

        assert [first.handle, second.handle, third.handle] == [
            "silk-slip-dress",
            "silk-slip-dress-1",
            "silk-slip-dress-2",
        ]
        fetched = await products.get_product_by_handle("silk-slip-dress-1")
        assert fetched is not None and fetched.id == second.id

    async def test_defaults(self, products: ProductRepository) -> None:
        product = await products.create_product(
            ProductFields.model_validate(
                {"title": "Plain Tote", "description": "Canvas.", "rentalPrice": {"daily": 5}}
            ),
            ADMIN_EMAIL,
        )

        assert product.status is ProductStatus.DRAFT
        assert product.category == "Uncategorized"
        assert product.currency == "AUD"
        assert not product.featured

    async def test_requires_title_and_description(
        self, products: ProductRepository, product_fields: dict[str, Any]
    ) -> None:
        with pytest.raises(ValidationError, match="Title and description are required"):
            await products.create_product(_fields(product_fields, title=""), ADMIN_EMAIL)

    async def test_requires_positive_daily_price(
        self, products: ProductRepository, product_fields: dict[str, Any]
    ) -> None:
        with pytest.raises(ValidationError, match="Daily rental price"):
            await products.create_product(
                _fields(product_fields, rentalPrice={"daily": 0}), ADMIN_EMAIL
            )

    async def test_available_cannot_exceed_total(
        self, products: ProductRepository, product_fields: dict[str, Any]
    ) -> None:
        with pytest.raises(ValidationError, match="cannot exceed total"):
            await products.create_product(
                _fields(product_fields, availableQuantity=3), ADMIN_EMAIL
            )

    async def test_negative_quantity(
        self, products: ProductRepository, product_fields: dict[str, Any]
    ) -> None:
        with pytest.raises(ValidationError, match="cannot be negative"):
            await products.create_product(
                _fields(product_fields, totalQuantity=-1, availableQuantity=-1), ADMIN_EMAIL
            )


class TestListProducts:
    """Tests for list_products and its derivatives."""

    async def _seed(
        self, products: ProductRepository, clock: FakeClock, product_fields: dict[str, Any]
    ) -> list[str]:
        dress = await products.create_product(_fields(product_fields), ADMIN_EMAIL)
        clock.advance(minutes=1)
        blazer = await products.create_product(
            _fields(
                product_fields,
                title="Velvet Blazer",
                category="Outerwear",
                tags=["velvet"],
                rentalPrice={"daily": 30},
                featured=True,
            ),
            ADMIN_EMAIL,
        )
        clock.advance(minutes=1)
        draft = await products.create_product(
            _fields(product_fields, title="Draft Gown", status="draft", availableQuantity=0),
            ADMIN_EMAIL,
        )
        return [dress.id, blazer.id, draft.id]

    async def test_newest_first(
        self, products: ProductRepository, clock: FakeClock, product_fields: dict[str, Any]
    ) -> None:
        dress, blazer, draft = await self._seed(products, clock, product_fields)

        assert [p.id for p in await products.list_products()] == [draft, blazer, dress]

    async def test_filters(
        self, products: ProductRepository, clock: FakeClock, product_fields: dict[str, Any]
    ) -> None:
        dress, blazer, draft = await self._seed(products, clock, product_fields)

        async def ids(**kwargs: Any) -> list[str]:
            return [p.id for p in await products.list_products(ProductFilters(**kwargs))]

        assert await ids(category="Dresses") == [draft, dress]
        assert await ids(status=ProductStatus.ACTIVE) == [blazer, dress]
        assert await ids(status=ProductStatus.DRAFT) == [draft]
        assert await ids(featured=True) == [blazer]
        assert await ids(tags=["velvet", "nothing"]) == [blazer]
        assert await ids(min_price=40) == [draft, dress]
        assert await ids(max_price=40) == [blazer]
        assert await ids(available=True) == [blazer, dress]
        assert await ids(category="Shoes") == []

    async def test_search(
        self, products: ProductRepository, clock: FakeClock, product_fields: dict[str, Any]
    ) -> None:
        dress, blazer, draft = await self._seed(products, clock, product_fields)

        assert [p.id for p in await products.search_products("VELVET")] == [blazer]
        assert [p.id for p in await products.search_products("outerwear")] == [blazer]
        assert len(await products.search_products("  ")) == 3

    async def test_categories_tags_and_stats(
        self, products: ProductRepository, clock: FakeClock, product_fields: dict[str, Any]
    ) -> None:
        await self._seed(products, clock, product_fields)

        assert await products.get_all_categories() == ["Dresses", "Outerwear"]
        assert await products.get_all_tags() == ["evening", "silk", "velvet"]

        stats = await products.get_product_stats()
        assert stats.total == 3
        assert stats.active == 2
        assert stats.drafts == 1
        assert stats.featured == 1
        assert stats.by_category == {"Dresses": 2, "Outerwear": 1}
        assert stats.total_value == 600
        assert stats.average_rental_price == 40
        assert await products.get_product_count() == 3

    async def test_empty(self, products: ProductRepository) -> None:
        assert await products.list_products() == []
        stats = await products.get_product_stats()
        assert stats.total == 0
        assert stats.average_rental_price == 0


class TestUpdateProduct:
    """Tests for update_product and friends."""

    async def test_partial_update_keeps_other_fields(
        self, products: ProductRepository, clock: FakeClock, product_fields: dict[str, Any]
    ) -> None:
        product = await products.create_product(_fields(product_fields), ADMIN_EMAIL)
        clock.advance(hours=1)

        updated = await products.update_product(
            product.id, ProductUpdate.model_validate({"shortDescription": "Champagne silk"}),
            "owner@youkhana.com",
        )

        assert updated.short_description == "Champagne silk"
        assert updated.title == product.title
        assert updated.created_at == product.created_at
        assert updated.updated_at == clock.now
        assert updated.last_modified_by == "owner@youkhana.com"

    async def test_moves_index_entries(
        self,
        products: ProductRepository,
        store: KeyValueStore,
        product_fields: dict[str, Any],
    ) -> None:
        product = await products.create_product(_fields(product_fields), ADMIN_EMAIL)

        await products.update_product(
            product.id,
            ProductUpdate(
                status=ProductStatus.INACTIVE,
                category="Gowns",
                tags=["satin"],
                handle="champagne-slip",
            ),
        )

        assert await store.smembers("products:active") == set()
        assert await store.smembers("products:category:Dresses") == set()
        assert await store.smembers("products:category:Gowns") == {product.id}
        assert await store.smembers("products:search:silk") == set()
        assert await store.smembers("products:search:satin") == {product.id}
        assert await store.get("product:handle:silk-slip-dress") is None
        assert await store.get("product:handle:champagne-slip") == product.id

    async def test_quantity_checked_against_existing(
        self, products: ProductRepository, product_fields: dict[str, Any]
    ) -> None:
        product = await products.create_product(_fields(product_fields), ADMIN_EMAIL)

        with pytest.raises(ValidationError, match="cannot exceed total"):
            await products.update_product(product.id, ProductUpdate(available_quantity=5))

    async def test_missing_product(self, products: ProductRepository) -> None:
        with pytest.raises(NotFoundError, match="Product not found"):
            await products.update_product("nope", ProductUpdate(title="x"))

        with pytest.raises(ValidationError, match="Product ID is required"):
            await products.update_product("", ProductUpdate(title="x"))

    async def test_status_and_featured_toggle(
        self,
        products: ProductRepository,
        store: KeyValueStore,
        product_fields: dict[str, Any],
    ) -> None:
        product = await products.create_product(_fields(product_fields), ADMIN_EMAIL)

        featured = await products.toggle_featured(product.id)
        assert featured.featured
        assert await store.smembers("products:featured") == {product.id}

        unfeatured = await products.toggle_featured(product.id)
        assert not unfeatured.featured
        assert await store.smembers("products:featured") == set()

        drafted = await products.set_product_status(product.id, ProductStatus.DRAFT)
        assert drafted.status is ProductStatus.DRAFT
        assert await store.smembers("products:active") == set()

    async def test_toggle_missing(self, products: ProductRepository) -> None:
        with pytest.raises(NotFoundError):
            await products.toggle_featured("nope")


class TestDeleteProduct:
    """Tests for delete_product."""

    async def test_removes_record_and_indices(
        self,
        products: ProductRepository,
        store: KeyValueStore,
        product_fields: dict[str, Any],
    ) -> None:
        product = await products.create_product(
            _fields(product_fields, featured=True), ADMIN_EMAIL
        )

        deleted = await products.delete_product(product.id)

        assert deleted.id == product.id
        assert not await products.product_exists(product.id)
        assert await store.get("product:handle:silk-slip-dress") is None
        assert await store.zcard("products:all") == 0
        assert await store.smembers("products:active") == set()
        assert await store.smembers("products:featured") == set()
        assert await store.smembers("products:category:Dresses") == set()
        assert await store.smembers("products:search:evening") == set()

    async def test_handle_is_reusable_after_delete(
        self, products: ProductRepository, product_fields: dict[str, Any]
    ) -> None:
        product = await products.create_product(_fields(product_fields), ADMIN_EMAIL)
        await products.delete_product(product.id)

        again = await products.create_product(_fields(product_fields), ADMIN_EMAIL)

        assert again.handle == "silk-slip-dress"

    async def test_missing(self, products: ProductRepository) -> None:
        with pytest.raises(NotFoundError):
            await products.delete_product("nope")
