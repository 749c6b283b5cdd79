"""Audit log routes."""

from typing import Annotated

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from youkhana.entrypoints.api.deps import AuditServiceDep
from youkhana.entrypoints.api.middleware import OptionalSession
from youkhana.entrypoints.api.responses import to_response

router = APIRouter(prefix="/audit-logs", tags=["audit"])


@router.get("")
async def list_audit_logs(
    session: OptionalSession,
    audit: AuditServiceDep,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    category: str | None = None,
    user_email: str | None = None,
) -> JSONResponse:
    """List recent audit logs, newest first.

    Args:
        session: The signed-in user.
        audit: Audit service dependency.
        limit: Maximum entries to return.
        category: Only entries in this category.
        user_email: Only entries performed by this user. Takes precedence
            over ``category``.
    """
    return to_response(await audit.list_audit_logs(session, limit, category, user_email))
