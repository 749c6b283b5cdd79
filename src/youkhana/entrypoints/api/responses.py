"""Translate action results into HTTP responses."""

from fastapi.responses import JSONResponse

from youkhana.core.errors import ErrorCode
from youkhana.services.gate import ActionResult

STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.UNAUTHENTICATED: 401,
    ErrorCode.PERMISSION_DENIED: 403,
    ErrorCode.POLICY_VIOLATION: 403,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
    ErrorCode.VALIDATION_FAILED: 422,
    ErrorCode.RATE_LIMITED: 429,
    ErrorCode.INFRASTRUCTURE: 503,
    ErrorCode.INTERNAL_ERROR: 500,
}


def status_for(result: ActionResult, success_status: int = 200) -> int:
    if result.success:
        return success_status
    return STATUS_BY_CODE.get(result.code or ErrorCode.INTERNAL_ERROR, 500)


def to_response(result: ActionResult, success_status: int = 200) -> JSONResponse:
    """Render an ``ActionResult`` with a status code matching its error code.

    Catalog records keep their camelCase field names on the wire.
    """
    headers = {"WWW-Authenticate": "Bearer"} if result.code is ErrorCode.UNAUTHENTICATED else None
    return JSONResponse(
        status_code=status_for(result, success_status),
        content=result.model_dump(mode="json", by_alias=True, exclude_none=True),
        headers=headers,
    )
