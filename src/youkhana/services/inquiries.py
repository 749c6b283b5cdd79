"""Rental inquiry actions: public submission and admin follow-up."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from youkhana.adapters.audit import AuditAction, AuditLogger, AuditResult
from youkhana.adapters.catalog import (
    InquiryFields,
    InquiryFilters,
    InquiryRepository,
    InquiryStatus,
    InquirySubmission,
    InquiryUpdate,
    ProductRepository,
    ProductStatus,
)
from youkhana.core.auth.types import SessionUser
from youkhana.core.clock import Clock, utcnow
from youkhana.core.errors import AdminError, NotFoundError, PolicyError
from youkhana.core.rbac import Permission
from youkhana.services.gate import (
    ActionResult,
    FailureHook,
    authorize,
    run_guarded,
    validated,
)

SUBMITTED_MESSAGE = (
    "Your rental inquiry has been submitted successfully! We will contact you soon."
)


class _InquiryId(BaseModel):
    id: str = Field(min_length=1)


class _InquiryStatusChange(_InquiryId):
    status: InquiryStatus


class _InquiryNotes(_InquiryId):
    notes: str = Field(max_length=5000)


class InquiryService:
    """Public inquiry submission and admin follow-up on rental inquiries."""

    def __init__(
        self,
        inquiries: InquiryRepository,
        products: ProductRepository,
        audit: AuditLogger,
        clock: Clock = utcnow,
    ) -> None:
        """Initialize the service.

        Args:
            inquiries: Inquiry repository.
            products: Product repository, used to price and check availability.
            audit: Audit logger.
            clock: Source of the response timestamps.
        """
        self._inquiries = inquiries
        self._products = products
        self._audit = audit
        self._clock = clock

    def _failure_hook(
        self, action: AuditAction, actor: SessionUser, inquiry_id: str
    ) -> FailureHook:
        async def on_failure(message: str) -> None:
            await self._audit.log_inquiry_action(
                action,
                actor.email,
                actor.role.value,
                inquiry_id,
                AuditResult.FAILURE,
                None,
                message,
            )

        return on_failure

    async def submit_inquiry(self, data: dict[str, Any]) -> ActionResult:
        """Record a customer's rental inquiry. No session is required.

        The product must be active with stock available. When the customer
        gives a rental length, the estimate is ``daily * days + deposit``.
        """

        async def operation() -> ActionResult:
            submission = validated(InquirySubmission, data)

            product = await self._products.get_product(submission.product_id)
            if product is None:
                raise NotFoundError("Product not found")
            if product.status is not ProductStatus.ACTIVE or product.available_quantity <= 0:
                raise PolicyError("Product is not available for rent")

            estimated_total = None
            if submission.rental_days:
                estimated_total = product.rental_price.daily * submission.rental_days
                if product.deposit:
                    estimated_total += product.deposit

            inquiry = await self._inquiries.create_inquiry(
                InquiryFields(
                    product_id=product.id,
                    product_handle=product.handle,
                    product_title=product.title,
                    customer_name=submission.customer_name,
                    customer_email=submission.customer_email,
                    customer_phone=submission.customer_phone,
                    selected_variant=submission.selected_variant,
                    start_date=submission.start_date,
                    end_date=submission.end_date,
                    rental_days=submission.rental_days,
                    message=submission.message,
                    daily_rate=product.rental_price.daily,
                    weekly_rate=product.rental_price.weekly,
                    monthly_rate=product.rental_price.monthly,
                    deposit=product.deposit,
                    estimated_total=estimated_total,
                )
            )
            return ActionResult.ok(
                SUBMITTED_MESSAGE,
                {
                    "id": inquiry.id,
                    "productTitle": inquiry.product_title,
                    "status": inquiry.status.value,
                },
            )

        return await run_guarded(
            operation,
            action="submit_inquiry",
            fallback_message="Failed to submit rental inquiry",
        )

    async def update_inquiry_status(
        self,
        session: SessionUser | None,
        inquiry_id: str,
        status: str,
    ) -> ActionResult:
        """Move an inquiry to a new status, stamping who responded and when."""
        try:
            actor = authorize(
                session,
                Permission.MANAGE_PRODUCTS,
                "You do not have permission to update inquiries",
            )
        except AdminError as e:
            return ActionResult.from_error(e)

        async def operation() -> ActionResult:
            data = validated(_InquiryStatusChange, {"id": inquiry_id, "status": status})
            inquiry = await self._inquiries.update_inquiry(
                data.id,
                InquiryUpdate(
                    status=data.status,
                    responded_at=self._clock(),
                    responded_by=actor.email,
                ),
            )

            await self._audit.log_inquiry_action(
                AuditAction.INQUIRY_STATUS_UPDATE,
                actor.email,
                actor.role.value,
                inquiry.id,
                AuditResult.SUCCESS,
                {
                    "newStatus": data.status.value,
                    "productTitle": inquiry.product_title,
                    "customerEmail": inquiry.customer_email,
                },
            )
            return ActionResult.ok(f"Inquiry status updated to {data.status.value}", inquiry)

        return await run_guarded(
            operation,
            action="update_inquiry_status",
            fallback_message="Failed to update inquiry status",
            on_failure=self._failure_hook(AuditAction.INQUIRY_STATUS_UPDATE, actor, inquiry_id),
        )

    async def add_inquiry_notes(
        self,
        session: SessionUser | None,
        inquiry_id: str,
        notes: str,
    ) -> ActionResult:
        try:
            actor = authorize(
                session,
                Permission.MANAGE_PRODUCTS,
                "You do not have permission to update inquiries",
            )
        except AdminError as e:
            return ActionResult.from_error(e)

        async def operation() -> ActionResult:
            data = validated(_InquiryNotes, {"id": inquiry_id, "notes": notes})
            inquiry = await self._inquiries.update_inquiry(
                data.id, InquiryUpdate(notes=data.notes)
            )

            await self._audit.log_inquiry_action(
                AuditAction.INQUIRY_NOTES_UPDATE,
                actor.email,
                actor.role.value,
                inquiry.id,
                AuditResult.SUCCESS,
                {"productTitle": inquiry.product_title},
            )
            return ActionResult.ok("Notes added successfully", inquiry)

        return await run_guarded(
            operation,
            action="add_inquiry_notes",
            fallback_message="Failed to add notes",
            on_failure=self._failure_hook(AuditAction.INQUIRY_NOTES_UPDATE, actor, inquiry_id),
        )

    async def delete_inquiry(self, session: SessionUser | None, inquiry_id: str) -> ActionResult:
        try:
            actor = authorize(
                session,
                Permission.MANAGE_PRODUCTS,
                "You do not have permission to delete inquiries",
            )
        except AdminError as e:
            return ActionResult.from_error(e)

        async def operation() -> ActionResult:
            data = validated(_InquiryId, {"id": inquiry_id})
            inquiry = await self._inquiries.delete_inquiry(data.id)

            await self._audit.log_inquiry_action(
                AuditAction.INQUIRY_DELETE,
                actor.email,
                actor.role.value,
                inquiry.id,
                AuditResult.SUCCESS,
                {"productTitle": inquiry.product_title, "customerEmail": inquiry.customer_email},
            )
            return ActionResult.ok("Inquiry deleted successfully")

        return await run_guarded(
            operation,
            action="delete_inquiry",
            fallback_message="Failed to delete inquiry",
            on_failure=self._failure_hook(AuditAction.INQUIRY_DELETE, actor, inquiry_id),
        )

    async def list_inquiries(
        self,
        session: SessionUser | None,
        filters: InquiryFilters | None = None,
    ) -> ActionResult:
        try:
            authorize(
                session,
                Permission.VIEW_PRODUCTS,
                "You do not have permission to view inquiries",
            )
        except AdminError as e:
            return ActionResult.from_error(e)

        async def operation() -> ActionResult:
            return ActionResult.ok(
                "Inquiries loaded", await self._inquiries.list_inquiries(filters)
            )

        return await run_guarded(
            operation,
            action="list_inquiries",
            fallback_message="Failed to load inquiries",
        )
