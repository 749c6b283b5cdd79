"""Bearer session resolution."""

from typing import Annotated

import structlog
from fastapi import Depends, HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from youkhana.core.auth.types import SessionUser
from youkhana.entrypoints.api.deps import AuthServiceDep
from youkhana.services.gate import SIGN_IN_REQUIRED

logger = structlog.get_logger()

bearer_scheme = HTTPBearer(auto_error=False)


async def get_session(
    request: Request,
    auth: AuthServiceDep,
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),  # noqa: B008
) -> SessionUser | None:
    """Resolve the bearer token to the current user, or None.

    Missing, invalid and expired tokens all resolve to None; the admin
    actions themselves reject a missing session.
    """
    if not credentials:
        return None

    session = await auth.resolve_session(credentials.credentials)
    if session is None:
        logger.info("session_not_resolved", path=request.url.path)
        return None

    request.state.user = session
    return session


async def require_session(
    session: Annotated[SessionUser | None, Depends(get_session)],
) -> SessionUser:
    """Like ``get_session`` but answers 401 when nobody is signed in."""
    if session is None:
        raise HTTPException(
            status_code=401,
            detail=SIGN_IN_REQUIRED,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session


OptionalSession = Annotated[SessionUser | None, Depends(get_session)]
CurrentSession = Annotated[SessionUser, Depends(require_session)]
