"""Rental catalog: products and customer inquiries."""

from youkhana.adapters.catalog.inquiries import InquiryRepository
from youkhana.adapters.catalog.products import ProductRepository, generate_handle
from youkhana.adapters.catalog.types import (
    InquiryFields,
    InquiryFilters,
    InquiryStats,
    InquiryStatus,
    InquirySubmission,
    InquiryUpdate,
    ProductFields,
    ProductFilters,
    ProductStats,
    ProductStatus,
    ProductUpdate,
    RentalInquiry,
    RentalProduct,
)

__all__ = [
    "InquiryFields",
    "InquiryFilters",
    "InquiryRepository",
    "InquiryStats",
    "InquiryStatus",
    "InquirySubmission",
    "InquiryUpdate",
    "ProductFields",
    "ProductFilters",
    "ProductRepository",
    "ProductStats",
    "ProductStatus",
    "ProductUpdate",
    "RentalInquiry",
    "RentalProduct",
    "generate_handle",
]
