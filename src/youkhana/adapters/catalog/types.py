"""Rental catalog types.

Records are stored as camelCase JSON so they stay readable by the
storefront, which shares the store.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from youkhana.core.clock import to_iso
from youkhana.core.validation import Email

DEFAULT_CURRENCY = "AUD"
DEFAULT_CATEGORY = "Uncategorized"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


class ProductStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DRAFT = "draft"


class InquiryStatus(str, Enum):
    PENDING = "pending"
    CONTACTED = "contacted"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class ProductImage(_CamelModel):
    url: str
    pathname: str = ""
    alt: str = ""
    order: int = 0


class ProductOption(_CamelModel):
    id: str
    name: str
    values: list[str] = Field(default_factory=list)


class OptionValue(_CamelModel):
    name: str
    value: str


class RentalPrice(_CamelModel):
    daily: float
    weekly: float | None = None
    monthly: float | None = None


class ProductVariant(_CamelModel):
    id: str
    title: str
    available_for_sale: bool = True
    selected_options: list[OptionValue] = Field(default_factory=list)
    rental_price: RentalPrice | None = None
    available_quantity: int = 0


class Money(_CamelModel):
    amount: str
    currency_code: str


class PriceRange(_CamelModel):
    min_variant_price: Money
    max_variant_price: Money


class ProductFields(_CamelModel):
    """Fields an admin supplies when creating a product."""

    title: str = ""
    description: str = ""
    short_description: str | None = Field(default=None, max_length=150)
    handle: str | None = None
    rental_price: RentalPrice
    price_range: PriceRange | None = None
    deposit: float | None = Field(default=None, ge=0)
    currency: str = DEFAULT_CURRENCY
    total_quantity: int = 0
    available_quantity: int = 0
    images: list[ProductImage] = Field(default_factory=list)
    featured_image: ProductImage | None = None
    options: list[ProductOption] = Field(default_factory=list)
    variants: list[ProductVariant] = Field(default_factory=list)
    category: str = DEFAULT_CATEGORY
    tags: list[str] = Field(default_factory=list)
    specifications: dict[str, str] | None = None
    terms: str | None = None
    min_rental_days: int | None = Field(default=None, ge=1)
    max_rental_days: int | None = Field(default=None, ge=1)
    status: ProductStatus = ProductStatus.DRAFT
    featured: bool = False


class RentalProduct(ProductFields):
    """A rental product as stored at ``product:{id}``."""

    id: str
    handle: str  # type: ignore[assignment]
    created_at: datetime
    updated_at: datetime
    created_by: str
    last_modified_by: str | None = None

    @field_serializer("created_at", "updated_at")
    def _serialize_timestamp(self, value: datetime) -> str:
        return to_iso(value)


class ProductUpdate(_CamelModel):
    """Partial update. Only fields that were explicitly set are applied."""

    title: str | None = None
    description: str | None = None
    short_description: str | None = Field(default=None, max_length=150)
    handle: str | None = None
    rental_price: RentalPrice | None = None
    price_range: PriceRange | None = None
    deposit: float | None = Field(default=None, ge=0)
    currency: str | None = None
    total_quantity: int | None = None
    available_quantity: int | None = None
    images: list[ProductImage] | None = None
    featured_image: ProductImage | None = None
    options: list[ProductOption] | None = None
    variants: list[ProductVariant] | None = None
    category: str | None = None
    tags: list[str] | None = None
    specifications: dict[str, str] | None = None
    terms: str | None = None
    min_rental_days: int | None = Field(default=None, ge=1)
    max_rental_days: int | None = Field(default=None, ge=1)
    status: ProductStatus | None = None
    featured: bool | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class ProductFilters(_CamelModel):
    category: str | None = None
    status: ProductStatus | None = None
    featured: bool | None = None
    tags: list[str] | None = None
    min_price: float | None = None
    max_price: float | None = None
    available: bool | None = None


class ProductStats(_CamelModel):
    total: int = 0
    active: int = 0
    inactive: int = 0
    drafts: int = 0
    featured: int = 0
    by_category: dict[str, int] = Field(default_factory=dict)
    total_value: float = 0
    average_rental_price: float = 0


class SelectedVariant(_CamelModel):
    id: str
    title: str
    options: list[OptionValue] = Field(default_factory=list)


class InquiryFields(_CamelModel):
    """Fields captured when a customer submits an inquiry."""

    product_id: str
    product_handle: str
    product_title: str
    customer_name: str
    customer_email: str
    customer_phone: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    rental_days: int | None = None
    selected_variant: SelectedVariant | None = None
    message: str | None = None
    daily_rate: float
    weekly_rate: float | None = None
    monthly_rate: float | None = None
    deposit: float | None = None
    estimated_total: float | None = None
    status: InquiryStatus = InquiryStatus.PENDING


class RentalInquiry(InquiryFields):
    """A rental inquiry as stored at ``inquiry:{id}``."""

    id: str
    notes: str | None = None
    created_at: datetime
    updated_at: datetime
    responded_at: datetime | None = None
    responded_by: str | None = None

    @field_serializer("created_at", "updated_at", "responded_at")
    def _serialize_timestamp(self, value: datetime | None) -> str | None:
        return to_iso(value) if value else None


class InquiryUpdate(_CamelModel):
    status: InquiryStatus | None = None
    notes: str | None = None
    responded_at: datetime | None = None
    responded_by: str | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class InquiryFilters(_CamelModel):
    status: InquiryStatus | None = None
    product_id: str | None = None
    customer_email: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


class InquiryStats(_CamelModel):
    total: int = 0
    pending: int = 0
    contacted: int = 0
    confirmed: int = 0
    cancelled: int = 0
    completed: int = 0
    by_product: dict[str, int] = Field(default_factory=dict)
    recent_inquiries: list[RentalInquiry] = Field(default_factory=list)


class InquirySubmission(_CamelModel):
    """Public inquiry form."""

    product_id: str = Field(min_length=1)
    customer_name: str = Field(min_length=2)
    customer_email: Email
    customer_phone: str | None = None
    selected_variant: SelectedVariant | None = None
    start_date: str | None = None
    end_date: str | None = None
    rental_days: int | None = Field(default=None, ge=1)
    message: str | None = Field(default=None, max_length=1000)
