"""Rental inquiry repository backed by the key-value store.

Layout:
    inquiry:{id}                  JSON record
    inquiries:all                 sorted set of ids scored by creation millis
    inquiries:pending             set of pending ids
    inquiries:product:{id}        set of ids per product
    inquiries:customer:{email}    set of ids per customer
"""

from __future__ import annotations

import asyncio
import uuid

import structlog
from pydantic import ValidationError as PydanticValidationError

from youkhana.adapters.catalog.types import (
    InquiryFields,
    InquiryFilters,
    InquiryStats,
    InquiryStatus,
    InquiryUpdate,
    RentalInquiry,
)
from youkhana.adapters.kv import KeyValueStore, keys
from youkhana.core.clock import Clock, epoch_millis, utcnow
from youkhana.core.errors import NotFoundError, ValidationError

logger = structlog.get_logger()

RECENT_INQUIRIES = 10


class InquiryRepository:
    """CRUD and queries over rental inquiries."""

    def __init__(self, store: KeyValueStore, clock: Clock = utcnow) -> None:
        self._store = store
        self._clock = clock

    async def create_inquiry(self, data: InquiryFields) -> RentalInquiry:
        """Store a new inquiry and index it.

        Raises:
            ValidationError: If customer or product details are missing.
        """
        if not data.customer_name or not data.customer_email:
            raise ValidationError("Customer name and email are required")

        if not data.product_id or not data.product_title:
            raise ValidationError("Product information is required")

        inquiry_id = str(uuid.uuid4())
        now = self._clock()
        inquiry = RentalInquiry.model_validate(
            {**data.model_dump(), "id": inquiry_id, "created_at": now, "updated_at": now}
        )

        await self._store.set(keys.inquiry(inquiry_id), inquiry.to_json())
        await self._store.zadd(keys.INQUIRIES_ALL, inquiry_id, epoch_millis(now))

        if inquiry.status is InquiryStatus.PENDING:
            await self._store.sadd(keys.INQUIRIES_PENDING, inquiry_id)

        await self._store.sadd(keys.inquiries_by_product(inquiry.product_id), inquiry_id)
        await self._store.sadd(keys.inquiries_by_customer(inquiry.customer_email), inquiry_id)

        logger.info("inquiry_created", inquiry_id=inquiry_id, product_id=inquiry.product_id)
        return inquiry

    async def get_inquiry(self, inquiry_id: str) -> RentalInquiry | None:
        if not inquiry_id:
            return None

        raw = await self._store.get(keys.inquiry(inquiry_id))
        if not raw:
            return None

        try:
            return RentalInquiry.model_validate_json(raw)
        except PydanticValidationError:
            logger.warning("inquiry_unparseable", inquiry_id=inquiry_id)
            return None

    async def list_inquiries(self, filters: InquiryFilters | None = None) -> list[RentalInquiry]:
        """List inquiries, newest first.

        One index is read by specificity (pending, product, customer, all)
        and the remaining filters are applied in memory.
        """
        filters = filters or InquiryFilters()

        if filters.status is InquiryStatus.PENDING:
            ids: list[str] | set[str] = await self._store.smembers(keys.INQUIRIES_PENDING)
        elif filters.product_id:
            ids = await self._store.smembers(keys.inquiries_by_product(filters.product_id))
        elif filters.customer_email:
            ids = await self._store.smembers(keys.inquiries_by_customer(filters.customer_email))
        else:
            ids = await self._store.zrange(keys.INQUIRIES_ALL, 0, -1, desc=True)

        if not ids:
            return []

        found = await asyncio.gather(*(self.get_inquiry(i) for i in ids))
        inquiries = [i for i in found if i is not None]

        if filters.status is not None:
            inquiries = [i for i in inquiries if i.status is filters.status]
        if filters.product_id:
            inquiries = [i for i in inquiries if i.product_id == filters.product_id]
        if filters.start_date:
            inquiries = [i for i in inquiries if i.created_at >= filters.start_date]
        if filters.end_date:
            inquiries = [i for i in inquiries if i.created_at <= filters.end_date]

        inquiries.sort(key=lambda i: i.created_at, reverse=True)
        return inquiries

    async def update_inquiry(self, inquiry_id: str, updates: InquiryUpdate) -> RentalInquiry:
        """Apply a partial update, moving pending-index membership on status change.

        Raises:
            ValidationError: If inquiry_id is empty.
            NotFoundError: If the inquiry does not exist.
        """
        if not inquiry_id:
            raise ValidationError("Inquiry ID is required")

        existing = await self.get_inquiry(inquiry_id)
        if existing is None:
            raise NotFoundError("Inquiry not found")

        updated = RentalInquiry.model_validate(
            {
                **existing.model_dump(),
                **updates.changes(),
                "id": inquiry_id,
                "created_at": existing.created_at,
                "updated_at": self._clock(),
            }
        )

        await self._store.set(keys.inquiry(inquiry_id), updated.to_json())

        if updated.status is not existing.status:
            if existing.status is InquiryStatus.PENDING:
                await self._store.srem(keys.INQUIRIES_PENDING, inquiry_id)
            if updated.status is InquiryStatus.PENDING:
                await self._store.sadd(keys.INQUIRIES_PENDING, inquiry_id)

        return updated

    async def delete_inquiry(self, inquiry_id: str) -> RentalInquiry:
        """Delete an inquiry and its index entries.

        Raises:
            ValidationError: If inquiry_id is empty.
            NotFoundError: If the inquiry does not exist.
        """
        if not inquiry_id:
            raise ValidationError("Inquiry ID is required")

        inquiry = await self.get_inquiry(inquiry_id)
        if inquiry is None:
            raise NotFoundError("Inquiry not found")

        await self._store.delete(keys.inquiry(inquiry_id))
        await self._store.zrem(keys.INQUIRIES_ALL, inquiry_id)
        await self._store.srem(keys.INQUIRIES_PENDING, inquiry_id)
        await self._store.srem(keys.inquiries_by_product(inquiry.product_id), inquiry_id)
        await self._store.srem(keys.inquiries_by_customer(inquiry.customer_email), inquiry_id)

        logger.info("inquiry_deleted", inquiry_id=inquiry_id)
        return inquiry

    async def get_inquiry_stats(self) -> InquiryStats:
        inquiries = await self.list_inquiries()

        counts = {status: 0 for status in InquiryStatus}
        by_product: dict[str, int] = {}
        for i in inquiries:
            counts[i.status] += 1
            by_product[i.product_title] = by_product.get(i.product_title, 0) + 1

        return InquiryStats(
            total=len(inquiries),
            pending=counts[InquiryStatus.PENDING],
            contacted=counts[InquiryStatus.CONTACTED],
            confirmed=counts[InquiryStatus.CONFIRMED],
            cancelled=counts[InquiryStatus.CANCELLED],
            completed=counts[InquiryStatus.COMPLETED],
            by_product=by_product,
            recent_inquiries=inquiries[:RECENT_INQUIRIES],
        )

    async def get_inquiries_by_product(self, product_id: str) -> list[RentalInquiry]:
        return await self.list_inquiries(InquiryFilters(product_id=product_id))

    async def get_inquiries_by_customer(self, customer_email: str) -> list[RentalInquiry]:
        return await self.list_inquiries(InquiryFilters(customer_email=customer_email))

    async def inquiry_exists(self, inquiry_id: str) -> bool:
        return await self.get_inquiry(inquiry_id) is not None

    async def get_inquiry_count(self) -> int:
        return await self._store.zcard(keys.INQUIRIES_ALL)
