"""Invitation routes."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from youkhana.entrypoints.api.deps import InvitationServiceDep
from youkhana.entrypoints.api.middleware import OptionalSession
from youkhana.entrypoints.api.responses import to_response

router = APIRouter(prefix="/invitations", tags=["invitations"])


class InvitationRequest(BaseModel):
    email: str = ""
    role: str = ""


@router.get("")
async def list_invitations(
    session: OptionalSession,
    invitations: InvitationServiceDep,
    include_all: bool = False,
) -> JSONResponse:
    """Pending invitations, or the full history with ``include_all=true``."""
    if include_all:
        return to_response(await invitations.list_all_invitations(session))
    return to_response(await invitations.list_pending_invitations(session))


@router.post("")
async def send_invitation(
    body: InvitationRequest,
    session: OptionalSession,
    invitations: InvitationServiceDep,
) -> JSONResponse:
    result = await invitations.send_invitation(session, body.email, body.role)
    return to_response(result, success_status=201)


@router.post("/{token}/resend")
async def resend_invitation(
    token: str,
    session: OptionalSession,
    invitations: InvitationServiceDep,
) -> JSONResponse:
    return to_response(await invitations.resend_invitation(session, token))


@router.delete("/{token}")
async def cancel_invitation(
    token: str,
    session: OptionalSession,
    invitations: InvitationServiceDep,
) -> JSONResponse:
    return to_response(await invitations.cancel_invitation(session, token))
