"""Rental product admin actions."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from youkhana.adapters.audit import AuditAction, AuditLogger, AuditResult
from youkhana.adapters.catalog import (
    ProductFields,
    ProductFilters,
    ProductRepository,
    ProductStatus,
    ProductUpdate,
)
from youkhana.core.auth.types import SessionUser
from youkhana.core.errors import AdminError
from youkhana.core.rbac import Permission
from youkhana.services.gate import (
    ActionResult,
    FailureHook,
    authorize,
    run_guarded,
    validated,
)


class _ProductId(BaseModel):
    id: str = Field(min_length=1)


class _ProductStatusChange(_ProductId):
    status: ProductStatus


class ProductService:
    """Create, edit, publish and remove rental products."""

    def __init__(self, products: ProductRepository, audit: AuditLogger) -> None:
        """Initialize the service.

        Args:
            products: Product repository.
            audit: Audit logger.
        """
        self._products = products
        self._audit = audit

    def _failure_hook(
        self, action: AuditAction, actor: SessionUser, resource: str
    ) -> FailureHook:
        async def on_failure(message: str) -> None:
            await self._audit.log_product_action(
                action,
                actor.email,
                actor.role.value,
                resource,
                AuditResult.FAILURE,
                None,
                message,
            )

        return on_failure

    async def create_product(
        self, session: SessionUser | None, data: dict[str, Any]
    ) -> ActionResult:
        try:
            actor = authorize(
                session,
                Permission.MANAGE_PRODUCTS,
                "You do not have permission to create products",
            )
        except AdminError as e:
            return ActionResult.from_error(e)

        async def operation() -> ActionResult:
            fields = validated(ProductFields, data)
            product = await self._products.create_product(fields, actor.email)

            await self._audit.log_product_action(
                AuditAction.PRODUCT_CREATE,
                actor.email,
                actor.role.value,
                product.id,
                AuditResult.SUCCESS,
                {"title": product.title, "handle": product.handle, "status": product.status.value},
            )
            return ActionResult.ok("Product created successfully", product)

        return await run_guarded(
            operation,
            action="create_product",
            fallback_message="Failed to create product",
            on_failure=self._failure_hook(
                AuditAction.PRODUCT_CREATE, actor, str(data.get("title") or "unknown")
            ),
        )

    async def update_product(
        self,
        session: SessionUser | None,
        product_id: str,
        updates: dict[str, Any],
    ) -> ActionResult:
        """Apply a partial update. Keys absent from ``updates`` are left alone."""
        try:
            actor = authorize(
                session,
                Permission.MANAGE_PRODUCTS,
                "You do not have permission to update products",
            )
        except AdminError as e:
            return ActionResult.from_error(e)

        async def operation() -> ActionResult:
            target = validated(_ProductId, {"id": product_id})
            changes = validated(ProductUpdate, updates)
            product = await self._products.update_product(target.id, changes, actor.email)

            await self._audit.log_product_action(
                AuditAction.PRODUCT_UPDATE,
                actor.email,
                actor.role.value,
                product.id,
                AuditResult.SUCCESS,
                {"title": product.title, "fields": sorted(changes.changes())},
            )
            return ActionResult.ok("Product updated successfully", product)

        return await run_guarded(
            operation,
            action="update_product",
            fallback_message="Failed to update product",
            on_failure=self._failure_hook(AuditAction.PRODUCT_UPDATE, actor, product_id),
        )

    async def delete_product(self, session: SessionUser | None, product_id: str) -> ActionResult:
        try:
            actor = authorize(
                session,
                Permission.MANAGE_PRODUCTS,
                "You do not have permission to delete products",
            )
        except AdminError as e:
            return ActionResult.from_error(e)

        async def operation() -> ActionResult:
            target = validated(_ProductId, {"id": product_id})
            product = await self._products.delete_product(target.id)

            await self._audit.log_product_action(
                AuditAction.PRODUCT_DELETE,
                actor.email,
                actor.role.value,
                product.id,
                AuditResult.SUCCESS,
                {"title": product.title, "handle": product.handle},
            )
            return ActionResult.ok("Product deleted successfully")

        return await run_guarded(
            operation,
            action="delete_product",
            fallback_message="Failed to delete product",
            on_failure=self._failure_hook(AuditAction.PRODUCT_DELETE, actor, product_id),
        )

    async def set_product_status(
        self,
        session: SessionUser | None,
        product_id: str,
        status: str,
    ) -> ActionResult:
        try:
            actor = authorize(
                session,
                Permission.MANAGE_PRODUCTS,
                "You do not have permission to update product status",
            )
        except AdminError as e:
            return ActionResult.from_error(e)

        async def operation() -> ActionResult:
            data = validated(_ProductStatusChange, {"id": product_id, "status": status})
            product = await self._products.set_product_status(data.id, data.status, actor.email)

            await self._audit.log_product_action(
                AuditAction.PRODUCT_STATUS_TOGGLE,
                actor.email,
                actor.role.value,
                product.id,
                AuditResult.SUCCESS,
                {"title": product.title, "status": product.status.value},
            )
            return ActionResult.ok(f"Product status changed to {product.status.value}", product)

        return await run_guarded(
            operation,
            action="set_product_status",
            fallback_message="Failed to update product status",
            on_failure=self._failure_hook(AuditAction.PRODUCT_STATUS_TOGGLE, actor, product_id),
        )

    async def toggle_featured(self, session: SessionUser | None, product_id: str) -> ActionResult:
        try:
            actor = authorize(
                session,
                Permission.MANAGE_PRODUCTS,
                "You do not have permission to update product featured status",
            )
        except AdminError as e:
            return ActionResult.from_error(e)

        async def operation() -> ActionResult:
            target = validated(_ProductId, {"id": product_id})
            product = await self._products.toggle_featured(target.id, actor.email)

            await self._audit.log_product_action(
                AuditAction.PRODUCT_FEATURED_TOGGLE,
                actor.email,
                actor.role.value,
                product.id,
                AuditResult.SUCCESS,
                {"title": product.title, "featured": product.featured},
            )
            message = (
                "Product marked as featured"
                if product.featured
                else "Product unmarked as featured"
            )
            return ActionResult.ok(message, product)

        return await run_guarded(
            operation,
            action="toggle_featured",
            fallback_message="Failed to update featured status",
            on_failure=self._failure_hook(AuditAction.PRODUCT_FEATURED_TOGGLE, actor, product_id),
        )

    async def list_products(
        self,
        session: SessionUser | None,
        filters: ProductFilters | None = None,
    ) -> ActionResult:
        try:
            authorize(
                session,
                Permission.VIEW_PRODUCTS,
                "You do not have permission to view products",
            )
        except AdminError as e:
            return ActionResult.from_error(e)

        async def operation() -> ActionResult:
            return ActionResult.ok("Products loaded", await self._products.list_products(filters))

        return await run_guarded(
            operation,
            action="list_products",
            fallback_message="Failed to load products",
        )
