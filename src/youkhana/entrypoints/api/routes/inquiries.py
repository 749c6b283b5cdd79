"""Rental inquiry routes.

Submitting an inquiry is public; everything else is for admins.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from youkhana.adapters.catalog import InquiryFilters, InquiryStatus
from youkhana.entrypoints.api.deps import InquiryServiceDep
from youkhana.entrypoints.api.middleware import OptionalSession
from youkhana.entrypoints.api.responses import to_response

router = APIRouter(prefix="/inquiries", tags=["inquiries"])


class InquiryStatusRequest(BaseModel):
    status: str = ""


class InquiryNotesRequest(BaseModel):
    notes: str = ""


@router.post("")
async def submit_inquiry(
    inquiries: InquiryServiceDep,
    payload: Annotated[dict[str, Any], Body()],
) -> JSONResponse:
    return to_response(await inquiries.submit_inquiry(payload), success_status=201)


@router.get("")
async def list_inquiries(
    session: OptionalSession,
    inquiries: InquiryServiceDep,
    status: InquiryStatus | None = None,
    product_id: str | None = None,
    customer_email: str | None = None,
) -> JSONResponse:
    filters = InquiryFilters(status=status, product_id=product_id, customer_email=customer_email)
    return to_response(await inquiries.list_inquiries(session, filters))


@router.patch("/{inquiry_id}/status")
async def update_inquiry_status(
    inquiry_id: str,
    body: InquiryStatusRequest,
    session: OptionalSession,
    inquiries: InquiryServiceDep,
) -> JSONResponse:
    return to_response(await inquiries.update_inquiry_status(session, inquiry_id, body.status))


@router.put("/{inquiry_id}/notes")
async def add_inquiry_notes(
    inquiry_id: str,
    body: InquiryNotesRequest,
    session: OptionalSession,
    inquiries: InquiryServiceDep,
) -> JSONResponse:
    return to_response(await inquiries.add_inquiry_notes(session, inquiry_id, body.notes))


@router.delete("/{inquiry_id}")
async def delete_inquiry(
    inquiry_id: str,
    session: OptionalSession,
    inquiries: InquiryServiceDep,
) -> JSONResponse:
    return to_response(await inquiries.delete_inquiry(session, inquiry_id))
