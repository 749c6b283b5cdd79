"""User management routes."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from youkhana.entrypoints.api.deps import UserServiceDep
from youkhana.entrypoints.api.middleware import OptionalSession
from youkhana.entrypoints.api.responses import to_response

router = APIRouter(prefix="/users", tags=["users"])


class RoleChangeRequest(BaseModel):
    role: str = ""


class NameChangeRequest(BaseModel):
    name: str = ""


@router.get("")
async def list_users(session: OptionalSession, users: UserServiceDep) -> JSONResponse:
    return to_response(await users.list_users(session))


@router.patch("/{email}/role")
async def update_user_role(
    email: str,
    body: RoleChangeRequest,
    session: OptionalSession,
    users: UserServiceDep,
) -> JSONResponse:
    return to_response(await users.update_user_role(session, email, body.role))


@router.patch("/{email}/name")
async def update_user_name(
    email: str,
    body: NameChangeRequest,
    session: OptionalSession,
    users: UserServiceDep,
) -> JSONResponse:
    return to_response(await users.update_user_name(session, email, body.name))


@router.delete("/{email}")
async def delete_user(email: str, session: OptionalSession, users: UserServiceDep) -> JSONResponse:
    return to_response(await users.delete_user(session, email))
