"""Invitation admin actions."""

from __future__ import annotations

import structlog

from youkhana.adapters.audit import AuditAction, AuditLogger, AuditResult
from youkhana.adapters.auth import InvitationManager
from youkhana.core.auth.mailer import AuthMailer
from youkhana.core.auth.tokens import build_signup_url
from youkhana.core.auth.types import Invitation, SessionUser
from youkhana.core.errors import AdminError
from youkhana.core.rbac import Permission
from youkhana.core.validation import CreateInvitationInput, InvitationTokenInput
from youkhana.safety.rate_limit import INVITATION_CREATION, RateLimiter
from youkhana.services.gate import (
    ActionResult,
    authorize,
    enforce_rate_limit,
    run_guarded,
    validated,
)

logger = structlog.get_logger()

DELIVERY_FAILED_SUFFIX = ", but the email could not be delivered. Share the signup link manually."


class InvitationService:
    """Send, resend, cancel and list invitations on behalf of an admin.

    Delivery happens after the invitation is stored. A delivery failure is
    reported in the result but never undoes the invitation.
    """

    def __init__(
        self,
        invitations: InvitationManager,
        audit: AuditLogger,
        rate_limiter: RateLimiter,
        mailer: AuthMailer,
        signup_base_url: str,
    ) -> None:
        """Initialize the service.

        Args:
            invitations: Invitation manager.
            audit: Audit logger.
            rate_limiter: Rate limiter for invitation creation.
            mailer: Delivers signup links.
            signup_base_url: Base for signup links, e.g. ``https://example.com/auth``.
        """
        self._invitations = invitations
        self._audit = audit
        self._rate_limiter = rate_limiter
        self._mailer = mailer
        self._signup_base_url = signup_base_url

    async def _deliver(self, invitation: Invitation) -> tuple[str, bool]:
        url = build_signup_url(self._signup_base_url, invitation.token)
        try:
            sent = await self._mailer.send_invitation(
                invitation.email,
                url,
                invitation.role,
                self._invitations.config.expiry_days,
            )
        except Exception:
            logger.exception("invitation_delivery_failed", email=invitation.email)
            sent = False
        if not sent:
            logger.warning("invitation_not_delivered", email=invitation.email)
        return url, sent

    async def send_invitation(
        self,
        session: SessionUser | None,
        email: str,
        role: str,
    ) -> ActionResult:
        try:
            actor = authorize(
                session,
                Permission.CREATE_INVITATIONS,
                "You do not have permission to send invitations",
            )
        except AdminError as e:
            return ActionResult.from_error(e)

        async def operation() -> ActionResult:
            data = validated(CreateInvitationInput, {"email": email, "role": role})
            await enforce_rate_limit(self._rate_limiter, actor.email, INVITATION_CREATION)

            invitation = await self._invitations.create_invitation(
                data.email, data.role, actor.email
            )
            url, sent = await self._deliver(invitation)

            await self._audit.log_invitation_action(
                AuditAction.INVITATION_CREATE,
                actor.email,
                actor.role.value,
                data.email,
                AuditResult.SUCCESS,
                {"role": data.role.value, "token": invitation.token, "emailSent": sent},
            )

            message = "Invitation sent successfully"
            if not sent:
                message = "Invitation created" + DELIVERY_FAILED_SUFFIX
            return ActionResult.ok(
                message,
                {"token": invitation.token, "invitationUrl": url, "emailSent": sent},
            )

        async def on_failure(message: str) -> None:
            await self._audit.log_invitation_action(
                AuditAction.INVITATION_CREATE,
                actor.email,
                actor.role.value,
                email,
                AuditResult.FAILURE,
                {"role": role},
                message,
            )

        return await run_guarded(
            operation,
            action="send_invitation",
            fallback_message="Failed to send invitation",
            on_failure=on_failure,
        )

    async def resend_invitation(self, session: SessionUser | None, token: str) -> ActionResult:
        """Replace an invitation with a fresh token and deliver the new link.

        The old link stops working as soon as this runs.
        """
        try:
            actor = authorize(
                session,
                Permission.RESEND_INVITATIONS,
                "You do not have permission to resend invitations",
            )
        except AdminError as e:
            return ActionResult.from_error(e)

        async def operation() -> ActionResult:
            data = validated(InvitationTokenInput, {"token": token})
            new = await self._invitations.resend_invitation(data.token, actor.email)
            url, sent = await self._deliver(new)

            await self._audit.log_invitation_action(
                AuditAction.INVITATION_RESEND,
                actor.email,
                actor.role.value,
                new.email,
                AuditResult.SUCCESS,
                {"oldToken": data.token, "newToken": new.token, "emailSent": sent},
            )

            message = "Invitation resent successfully"
            if not sent:
                message = "Invitation renewed" + DELIVERY_FAILED_SUFFIX
            return ActionResult.ok(
                message,
                {"token": new.token, "invitationUrl": url, "emailSent": sent},
            )

        async def on_failure(message: str) -> None:
            await self._audit.log_invitation_action(
                AuditAction.INVITATION_RESEND,
                actor.email,
                actor.role.value,
                token,
                AuditResult.FAILURE,
                {"token": token},
                message,
            )

        return await run_guarded(
            operation,
            action="resend_invitation",
            fallback_message="Failed to resend invitation",
            on_failure=on_failure,
        )

    async def cancel_invitation(self, session: SessionUser | None, token: str) -> ActionResult:
        try:
            actor = authorize(
                session,
                Permission.CANCEL_INVITATIONS,
                "You do not have permission to cancel invitations",
            )
        except AdminError as e:
            return ActionResult.from_error(e)

        async def operation() -> ActionResult:
            data = validated(InvitationTokenInput, {"token": token})
            cancelled = await self._invitations.delete_invitation(data.token)

            await self._audit.log_invitation_action(
                AuditAction.INVITATION_CANCEL,
                actor.email,
                actor.role.value,
                cancelled.email,
                AuditResult.SUCCESS,
                {"token": data.token},
            )
            return ActionResult.ok("Invitation cancelled successfully")

        async def on_failure(message: str) -> None:
            await self._audit.log_invitation_action(
                AuditAction.INVITATION_CANCEL,
                actor.email,
                actor.role.value,
                token,
                AuditResult.FAILURE,
                {"token": token},
                message,
            )

        return await run_guarded(
            operation,
            action="cancel_invitation",
            fallback_message="Failed to cancel invitation",
            on_failure=on_failure,
        )

    async def list_pending_invitations(self, session: SessionUser | None) -> ActionResult:
        try:
            authorize(
                session,
                Permission.VIEW_INVITATIONS,
                "You do not have permission to view invitations",
            )
        except AdminError as e:
            return ActionResult.from_error(e)

        async def operation() -> ActionResult:
            pending = await self._invitations.get_pending_invitations()
            return ActionResult.ok("Pending invitations loaded", pending)

        return await run_guarded(
            operation,
            action="list_pending_invitations",
            fallback_message="Failed to load invitations",
        )

    async def list_all_invitations(self, session: SessionUser | None) -> ActionResult:
        """Every invitation on record, including used and expired ones."""
        try:
            authorize(
                session,
                Permission.VIEW_INVITATIONS,
                "You do not have permission to view invitations",
            )
        except AdminError as e:
            return ActionResult.from_error(e)

        async def operation() -> ActionResult:
            invitations = await self._invitations.get_all_invitations()
            return ActionResult.ok("Invitations loaded", invitations)

        return await run_guarded(
            operation,
            action="list_all_invitations",
            fallback_message="Failed to load invitations",
        )
