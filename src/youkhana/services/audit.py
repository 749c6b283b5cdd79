"""Audit log viewing."""

from __future__ import annotations

from youkhana.adapters.audit import AuditCategory, AuditLogger
from youkhana.core.auth.types import SessionUser
from youkhana.core.errors import AdminError, ValidationError
from youkhana.core.rbac import Permission
from youkhana.services.gate import ActionResult, authorize, run_guarded


class AuditService:
    """Read access to the audit trail for admins with analytics access."""

    def __init__(self, audit: AuditLogger) -> None:
        """Initialize the service.

        Args:
            audit: Audit logger to read from.
        """
        self._audit = audit

    async def list_audit_logs(
        self,
        session: SessionUser | None,
        limit: int = 50,
        category: str | None = None,
        user_email: str | None = None,
    ) -> ActionResult:
        """Most recent audit entries, newest first, optionally narrowed."""
        try:
            authorize(
                session,
                Permission.VIEW_ANALYTICS,
                "You do not have permission to view audit logs",
            )
        except AdminError as e:
            return ActionResult.from_error(e)

        async def operation() -> ActionResult:
            if category is not None and category not in {c.value for c in AuditCategory}:
                raise ValidationError("Invalid audit category")

            logs = await self._audit.get_audit_logs(
                limit=limit,
                category=category,
                user_email=user_email.strip().lower() if user_email else None,
            )
            return ActionResult.ok("Audit logs loaded", logs)

        return await run_guarded(
            operation,
            action="list_audit_logs",
            fallback_message="Failed to load audit logs",
        )
