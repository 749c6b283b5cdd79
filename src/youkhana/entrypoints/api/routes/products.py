"""Rental product admin routes."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from youkhana.adapters.catalog import ProductFilters, ProductStatus
from youkhana.entrypoints.api.deps import ProductServiceDep
from youkhana.entrypoints.api.middleware import OptionalSession
from youkhana.entrypoints.api.responses import to_response

router = APIRouter(prefix="/products", tags=["products"])


class StatusChangeRequest(BaseModel):
    status: str = ""


@router.get("")
async def list_products(
    session: OptionalSession,
    products: ProductServiceDep,
    category: str | None = None,
    status: ProductStatus | None = None,
    featured: bool | None = None,
    tags: Annotated[list[str] | None, Query()] = None,
    min_price: float | None = None,
    max_price: float | None = None,
    available: bool | None = None,
) -> JSONResponse:
    filters = ProductFilters(
        category=category,
        status=status,
        featured=featured,
        tags=tags,
        min_price=min_price,
        max_price=max_price,
        available=available,
    )
    return to_response(await products.list_products(session, filters))


@router.post("")
async def create_product(
    session: OptionalSession,
    products: ProductServiceDep,
    payload: Annotated[dict[str, Any], Body()],
) -> JSONResponse:
    """Create a product from camelCase or snake_case fields."""
    return to_response(await products.create_product(session, payload), success_status=201)


@router.patch("/{product_id}")
async def update_product(
    product_id: str,
    session: OptionalSession,
    products: ProductServiceDep,
    payload: Annotated[dict[str, Any], Body()],
) -> JSONResponse:
    return to_response(await products.update_product(session, product_id, payload))


@router.delete("/{product_id}")
async def delete_product(
    product_id: str,
    session: OptionalSession,
    products: ProductServiceDep,
) -> JSONResponse:
    return to_response(await products.delete_product(session, product_id))


@router.put("/{product_id}/status")
async def set_product_status(
    product_id: str,
    body: StatusChangeRequest,
    session: OptionalSession,
    products: ProductServiceDep,
) -> JSONResponse:
    return to_response(await products.set_product_status(session, product_id, body.status))


@router.post("/{product_id}/featured")
async def toggle_featured(
    product_id: str,
    session: OptionalSession,
    products: ProductServiceDep,
) -> JSONResponse:
    return to_response(await products.toggle_featured(session, product_id))
