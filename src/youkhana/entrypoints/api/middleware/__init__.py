"""Request-level auth dependencies."""

from youkhana.entrypoints.api.middleware.session import (
    CurrentSession,
    OptionalSession,
    get_session,
    require_session,
)

__all__ = ["CurrentSession", "OptionalSession", "get_session", "require_session"]
