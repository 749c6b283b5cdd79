"""Sign-in, sign-out and invitation signup routes."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from youkhana.core.clock import to_iso
from youkhana.core.errors import AdminError, NotFoundError
from youkhana.entrypoints.api.deps import AuthServiceDep, ComponentsDep
from youkhana.entrypoints.api.middleware import CurrentSession
from youkhana.entrypoints.api.responses import to_response
from youkhana.services.gate import ActionResult

router = APIRouter(prefix="/auth", tags=["auth"])


class SignInRequest(BaseModel):
    email: str = ""


class VerifyRequest(BaseModel):
    token: str = ""


class SignupRequest(BaseModel):
    token: str = ""
    name: str = ""


@router.post("/signin")
async def request_sign_in(body: SignInRequest, auth: AuthServiceDep) -> JSONResponse:
    """Email a sign-in link. The answer does not reveal whether the account exists."""
    return to_response(await auth.request_sign_in(body.email))


@router.post("/verify")
async def verify_sign_in(body: VerifyRequest, auth: AuthServiceDep) -> JSONResponse:
    """Exchange a sign-in link token for a session token."""
    return to_response(await auth.complete_sign_in(body.token))


@router.post("/signout")
async def sign_out(session: CurrentSession, auth: AuthServiceDep) -> JSONResponse:
    return to_response(await auth.sign_out(session))


@router.get("/me")
async def current_user(session: CurrentSession) -> JSONResponse:
    return to_response(ActionResult.ok("Signed in", session))


@router.get("/signup/{token}")
async def check_invitation(token: str, components: ComponentsDep) -> JSONResponse:
    """Describe a still-valid invitation so the signup page can prefill it."""
    try:
        invitation = await components.invitations.validate_invitation_token(token)
    except AdminError as e:
        return to_response(ActionResult.from_error(e))

    if invitation is None:
        return to_response(
            ActionResult.from_error(NotFoundError("This invitation is invalid or has expired"))
        )

    return to_response(
        ActionResult.ok(
            "Invitation is valid",
            {
                "email": invitation.email,
                "role": invitation.role.value,
                "expiresAt": to_iso(invitation.expires_at),
            },
        )
    )


@router.post("/signup")
async def complete_signup(body: SignupRequest, auth: AuthServiceDep) -> JSONResponse:
    return to_response(await auth.complete_signup(body.token, body.name), success_status=201)
