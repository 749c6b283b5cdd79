"""Auth service: sessions, sign-in links and invitation signup.

Sessions are stateless bearer tokens carrying the user's email. The role
is always read from the user directory, never from the token, so a role
change or deletion takes effect on the next request.
"""

from __future__ import annotations

from urllib.parse import urlencode

import structlog

from youkhana.adapters.audit import AuditAction, AuditLogger, AuditResult
from youkhana.adapters.auth import InvitationManager, UserDirectory
from youkhana.core.auth.jwt import (
    SessionConfig,
    TokenError,
    create_session_token,
    create_sign_in_token,
    decode_session_token,
    decode_sign_in_token,
)
from youkhana.core.auth.mailer import AuthMailer
from youkhana.core.auth.types import SessionUser
from youkhana.core.errors import AdminError, NotFoundError, ValidationError
from youkhana.core.validation import SignInInput, SignupInput
from youkhana.services.gate import ActionResult, run_guarded, validated

logger = structlog.get_logger()

SIGN_IN_REQUESTED = "If an account exists for this email, a sign-in link has been sent."
INVALID_INVITATION = "This invitation is invalid or has expired"
INVALID_SIGN_IN_LINK = "This sign-in link is invalid or has expired"


class AuthService:
    """Session issuance and resolution plus invitation-based signup."""

    def __init__(
        self,
        users: UserDirectory,
        invitations: InvitationManager,
        audit: AuditLogger,
        mailer: AuthMailer,
        session_config: SessionConfig,
        sign_in_base_url: str,
    ) -> None:
        """Initialize the auth service.

        Args:
            users: User directory.
            invitations: Invitation manager.
            audit: Audit logger.
            mailer: Delivers sign-in links.
            session_config: Token signing configuration.
            sign_in_base_url: Base for sign-in links, e.g. ``https://example.com/auth``.
        """
        self._users = users
        self._invitations = invitations
        self._audit = audit
        self._mailer = mailer
        self._session_config = session_config
        self._sign_in_base_url = sign_in_base_url.rstrip("/")

    async def resolve_session(self, token: str) -> SessionUser | None:
        """Resolve a bearer token to the current user.

        Returns None for invalid or expired tokens and for deleted users.
        """
        try:
            payload = decode_session_token(token, self._session_config)
        except TokenError as e:
            logger.debug("session_token_rejected", error=str(e))
            return None

        user = await self._users.get_user(payload.sub)
        if user is None:
            return None

        return SessionUser(email=user.email, role=user.role, name=user.name)

    async def record_sign_in(self, email: str) -> None:
        await self._users.update_last_sign_in(email)

    async def issue_session(self, email: str) -> str:
        """Issue a session token for an existing user and stamp the sign-in.

        Raises:
            NotFoundError: If the user does not exist.
        """
        if not await self._users.user_exists(email):
            raise NotFoundError("User not found")

        await self.record_sign_in(email)
        return create_session_token(email, self._session_config)

    async def request_sign_in(self, email: str) -> ActionResult:
        """Email a sign-in link if the account exists.

        The response is the same whether or not the account exists.
        """

        async def operation() -> ActionResult:
            data = validated(SignInInput, {"email": email})
            if not await self._users.user_exists(data.email):
                logger.info("sign_in_requested_for_unknown_email")
                return ActionResult.ok(SIGN_IN_REQUESTED)

            token = create_sign_in_token(data.email, self._session_config)
            url = f"{self._sign_in_base_url}/verify?{urlencode({'token': token})}"
            try:
                sent = await self._mailer.send_sign_in_link(data.email, url)
            except Exception:
                logger.exception("sign_in_delivery_failed", email=data.email)
                sent = False
            if not sent:
                logger.warning("sign_in_link_not_delivered", email=data.email)
            return ActionResult.ok(SIGN_IN_REQUESTED)

        return await run_guarded(
            operation,
            action="request_sign_in",
            fallback_message="Failed to send sign-in link",
        )

    async def complete_sign_in(self, token: str) -> ActionResult:
        """Exchange a sign-in link token for a session token."""
        try:
            payload = decode_sign_in_token(token, self._session_config)
        except TokenError:
            return ActionResult.from_error(ValidationError(INVALID_SIGN_IN_LINK))

        email = payload.sub

        async def operation() -> ActionResult:
            user = await self._users.get_user(email)
            if user is None:
                raise ValidationError(INVALID_SIGN_IN_LINK)

            session_token = await self.issue_session(email)
            await self._audit.log_auth_action(
                AuditAction.AUTH_SIGNIN, email, user.role.value, AuditResult.SUCCESS
            )
            return ActionResult.ok(
                "Signed in successfully",
                {"sessionToken": session_token, "user": user},
            )

        async def on_failure(message: str) -> None:
            await self._audit.log_auth_action(
                AuditAction.AUTH_SIGNIN, email, "unknown", AuditResult.FAILURE, None, message
            )

        return await run_guarded(
            operation,
            action="complete_sign_in",
            fallback_message="Failed to sign in",
            on_failure=on_failure,
        )

    async def sign_out(self, session: SessionUser) -> ActionResult:
        """Record a sign-out. Tokens are stateless; the client discards its own."""
        await self._audit.log_auth_action(
            AuditAction.AUTH_SIGNOUT, session.email, session.role.value, AuditResult.SUCCESS
        )
        return ActionResult.ok("Signed out successfully")

    async def complete_signup(self, token: str, name: str) -> ActionResult:
        """Create an account from a valid invitation.

        The new user takes the invitation's email and role, with the
        inviter recorded as ``invited_by``. The invitation is then marked
        used, so the link cannot be replayed.
        """
        try:
            data = validated(SignupInput, {"token": token, "name": name})
            invitation = await self._invitations.validate_invitation_token(data.token)
        except AdminError as e:
            return ActionResult.from_error(e)

        if invitation is None:
            return ActionResult.from_error(ValidationError(INVALID_INVITATION))

        async def operation() -> ActionResult:
            user = await self._users.create_user(
                invitation.email,
                data.name,
                invitation.role,
                invited_by=invitation.created_by,
            )
            await self._invitations.mark_invitation_used(data.token)

            await self._audit.log_auth_action(
                AuditAction.AUTH_SIGNUP,
                user.email,
                user.role.value,
                AuditResult.SUCCESS,
                {"invitedBy": invitation.created_by},
            )
            await self._audit.log_invitation_action(
                AuditAction.INVITATION_ACCEPT,
                user.email,
                user.role.value,
                user.email,
                AuditResult.SUCCESS,
                {"token": data.token},
            )

            session_token = await self.issue_session(user.email)
            return ActionResult.ok(
                "Account created successfully",
                {"user": user, "sessionToken": session_token},
            )

        async def on_failure(message: str) -> None:
            await self._audit.log_auth_action(
                AuditAction.AUTH_SIGNUP,
                invitation.email,
                invitation.role.value,
                AuditResult.FAILURE,
                None,
                message,
            )

        return await run_guarded(
            operation,
            action="complete_signup",
            fallback_message="Failed to create account",
            on_failure=on_failure,
        )
