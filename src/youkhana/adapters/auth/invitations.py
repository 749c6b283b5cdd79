"""Invitation manager backed by the key-value store.

Layout:
    invitation:{token}        hash, the invitation record
    invitation:email:{email}  string, email -> pending token
    invitations:pending       set of pending tokens
    invitations:all           set of every token still on record

Used and expired records are kept for a retention period, then left to the
store's expiry; the cleanup pass drops their tokens from ``invitations:all``.

State machine: pending -> used, or pending -> expired once the expiry
timestamp has passed. Expiry is applied lazily by the read paths through
``sweep_expired``. Cancellation is a hard delete.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import structlog

from youkhana.adapters.auth.users import UserDirectory
from youkhana.adapters.kv import KeyValueStore, drop_empty, keys
from youkhana.core.auth.tokens import (
    DEFAULT_INVITATION_EXPIRY_DAYS,
    DEFAULT_INVITATION_RETENTION_DAYS,
    generate_invitation_token,
    get_token_expiry,
)
from youkhana.core.auth.types import Invitation, InvitationStatus
from youkhana.core.clock import Clock, parse_iso, to_iso, utcnow
from youkhana.core.errors import ConflictError, NotFoundError, PolicyError, ValidationError
from youkhana.core.rbac import Role, coerce_role

logger = structlog.get_logger()


@dataclass(frozen=True)
class InvitationConfig:
    """Invitation configuration.

    Attributes:
        expiry_days: Days an invitation stays valid after creation or resend.
        retention_days: Days a used or expired invitation stays on record.
    """

    expiry_days: int = DEFAULT_INVITATION_EXPIRY_DAYS
    retention_days: int = DEFAULT_INVITATION_RETENTION_DAYS


class InvitationManager:
    """Issues, validates, expires and revokes single-use onboarding tokens."""

    def __init__(
        self,
        store: KeyValueStore,
        users: UserDirectory,
        config: InvitationConfig | None = None,
        clock: Clock = utcnow,
    ) -> None:
        """Initialize the manager.

        Args:
            store: Key-value store adapter.
            users: User directory, consulted for existing accounts.
            config: Invitation configuration.
            clock: Source of the current time.
        """
        self._store = store
        self._users = users
        self.config = config or InvitationConfig()
        self._clock = clock

    async def create_invitation(
        self,
        email: str,
        role: Role | str,
        created_by: str,
    ) -> Invitation:
        """Create a pending invitation.

        Raises:
            ValidationError: If a required field is missing or the role is invalid.
            PolicyError: If the role is MASTER_ADMIN.
            ConflictError: If the user exists or a pending invitation exists.
        """
        if not email or not role or not created_by:
            raise ValidationError("Email, role, and createdBy are required")

        resolved = coerce_role(role)
        if resolved is None:
            raise ValidationError("Invalid role")

        if resolved is Role.MASTER_ADMIN:
            raise PolicyError("Cannot invite master admin through invitation system")

        if await self._users.user_exists(email):
            raise ConflictError("User with this email already exists")

        if await self.get_pending_invitation_by_email(email) is not None:
            raise ConflictError("Pending invitation already exists for this email")

        now = self._clock()
        invitation = Invitation(
            email=email,
            role=resolved,
            token=generate_invitation_token(),
            expires_at=get_token_expiry(self.config.expiry_days, now=now),
            created_by=created_by,
            created_at=now,
        )

        token = invitation.token
        await self._store.hset(keys.invitation(token), self._invitation_to_hash(invitation))
        await self._store.sadd(keys.INVITATIONS_PENDING, token)
        await self._store.sadd(keys.INVITATIONS_ALL, token)
        await self._store.set(keys.invitation_by_email(email), token)

        logger.info(
            "invitation_created",
            email=email,
            role=resolved.value,
            created_by=created_by,
            expires_at=to_iso(invitation.expires_at),
        )
        return invitation

    async def get_invitation(self, token: str) -> Invitation | None:
        if not token:
            return None

        data = await self._store.hgetall(keys.invitation(token))
        if not data:
            return None

        return self._hash_to_invitation(data)

    async def get_pending_invitation_by_email(self, email: str) -> Invitation | None:
        """Resolve the pending invitation for an email via the reverse index.

        A reverse-index entry pointing at a record that is no longer pending
        resolves to None. An overdue invitation is expired on the spot.
        """
        if not email:
            return None

        token = await self._store.get(keys.invitation_by_email(email))
        if not token:
            return None

        invitation = await self.get_invitation(token)
        if invitation is None or invitation.status is not InvitationStatus.PENDING:
            return None

        if invitation.is_expired(self._clock()):
            await self.mark_invitation_expired(token)
            return None

        return invitation

    async def sweep_expired(self, invitations: list[Invitation]) -> list[Invitation]:
        """Expire every pending invitation that is past due.

        Args:
            invitations: Invitations to inspect.

        Returns:
            The invitations that are still pending afterwards.
        """
        now = self._clock()
        still_pending: list[Invitation] = []
        for invitation in invitations:
            if invitation.status is not InvitationStatus.PENDING:
                continue
            if invitation.is_expired(now):
                await self.mark_invitation_expired(invitation.token)
                continue
            still_pending.append(invitation)
        return still_pending

    async def get_pending_invitations(self) -> list[Invitation]:
        """Get pending invitations, newest first, expiring any past due."""
        invitations = await self._resolve_tokens(await self._store.smembers(keys.INVITATIONS_PENDING))
        pending = await self.sweep_expired(invitations)
        pending.sort(key=lambda i: i.created_at, reverse=True)
        return pending

    async def get_all_invitations(self) -> list[Invitation]:
        """Get every invitation on record (pending, used and expired), newest first."""
        invitations = await self._resolve_tokens(await self._store.smembers(keys.INVITATIONS_ALL))
        await self.sweep_expired(invitations)

        now = self._clock()
        result = [
            i.model_copy(update={"status": InvitationStatus.EXPIRED})
            if i.status is InvitationStatus.PENDING and i.is_expired(now)
            else i
            for i in invitations
        ]
        result.sort(key=lambda i: i.created_at, reverse=True)
        return result

    async def get_pending_invitations_count(self) -> int:
        return len(await self.get_pending_invitations())

    async def mark_invitation_used(self, token: str) -> None:
        """Transition an invitation to used and release its email.

        Raises:
            ValidationError: If token is empty.
            NotFoundError: If the invitation does not exist.
        """
        invitation = await self._require(token)

        await self._store.hset(
            keys.invitation(token),
            {"status": InvitationStatus.USED.value, "usedAt": to_iso(self._clock())},
        )
        await self._retire(token)
        await self._store.srem(keys.INVITATIONS_PENDING, token)
        await self._store.delete(keys.invitation_by_email(invitation.email))

        logger.info("invitation_used", email=invitation.email)

    async def mark_invitation_expired(self, token: str) -> None:
        """Transition an invitation to expired and release its email.

        Raises:
            ValidationError: If token is empty.
            NotFoundError: If the invitation does not exist.
        """
        invitation = await self._require(token)

        await self._store.hset(keys.invitation(token), {"status": InvitationStatus.EXPIRED.value})
        await self._retire(token)
        await self._store.srem(keys.INVITATIONS_PENDING, token)
        await self._store.delete(keys.invitation_by_email(invitation.email))

        logger.info("invitation_expired", email=invitation.email)

    async def delete_invitation(self, token: str) -> Invitation:
        """Cancel an invitation by deleting the record and its index entries.

        Returns:
            The deleted invitation.

        Raises:
            ValidationError: If token is empty.
            NotFoundError: If the invitation does not exist.
        """
        invitation = await self._require(token)

        await self._store.delete(keys.invitation(token))
        await self._store.srem(keys.INVITATIONS_PENDING, token)
        await self._store.srem(keys.INVITATIONS_ALL, token)
        await self._store.delete(keys.invitation_by_email(invitation.email))

        logger.info("invitation_deleted", email=invitation.email)
        return invitation

    async def validate_invitation_token(self, token: str) -> Invitation | None:
        """Check a token at signup time.

        Returns None when the token is unknown, already used, expired (which
        also records the expiry), or its email already has an account.
        """
        if not token:
            return None

        invitation = await self.get_invitation(token)
        if invitation is None:
            return None

        if invitation.status is InvitationStatus.USED:
            return None

        if invitation.status is InvitationStatus.EXPIRED:
            return None

        if invitation.is_expired(self._clock()):
            await self.mark_invitation_expired(token)
            return None

        if await self._users.user_exists(invitation.email):
            return None

        return invitation

    async def resend_invitation(self, old_token: str, resend_by: str) -> Invitation:
        """Replace an invitation with a fresh token and expiry.

        The old token stops working immediately, before the new link has
        been delivered.

        Raises:
            ValidationError: If old_token is empty.
            NotFoundError: If the invitation does not exist.
            ConflictError: If the invitee has signed up in the meantime.
        """
        old = await self._require(old_token)
        await self.delete_invitation(old_token)
        return await self.create_invitation(old.email, old.role, resend_by)

    async def cleanup_expired_invitations(self) -> int:
        """Expire every overdue pending invitation.

        Meant to be run periodically by an external scheduler.

        Also drops tokens from ``invitations:all`` whose records have expired
        from the store.

        Returns:
            Number of invitations transitioned to expired.
        """
        invitations = await self._resolve_tokens(await self._store.smembers(keys.INVITATIONS_PENDING))
        candidates = [i for i in invitations if i.status is InvitationStatus.PENDING]
        remaining = await self.sweep_expired(candidates)
        count = len(candidates) - len(remaining)

        if count:
            logger.info("expired_invitations_cleaned", count=count)

        await self._prune_index()
        return count

    async def _prune_index(self) -> None:
        """Drop tokens whose records have reached the end of their retention."""
        tokens = await self._store.smembers(keys.INVITATIONS_ALL)
        invitations = await self._resolve_tokens(tokens)
        stale = tokens - {i.token for i in invitations}
        if stale:
            await self._store.srem(keys.INVITATIONS_ALL, *stale)
            logger.info("invitation_index_pruned", count=len(stale))

    async def _retire(self, token: str) -> None:
        await self._store.expire(keys.invitation(token), self.config.retention_days * 86400)

    async def _require(self, token: str) -> Invitation:
        if not token:
            raise ValidationError("Token is required")

        invitation = await self.get_invitation(token)
        if invitation is None:
            raise NotFoundError("Invitation not found")
        return invitation

    async def _resolve_tokens(self, tokens: set[str]) -> list[Invitation]:
        if not tokens:
            return []
        invitations = await asyncio.gather(*(self.get_invitation(t) for t in tokens))
        return [i for i in invitations if i is not None]

    @staticmethod
    def _invitation_to_hash(invitation: Invitation) -> dict[str, str]:
        return drop_empty(
            {
                "email": invitation.email,
                "role": invitation.role.value,
                "token": invitation.token,
                "expiresAt": to_iso(invitation.expires_at),
                "createdBy": invitation.created_by,
                "createdAt": to_iso(invitation.created_at),
                "status": invitation.status.value,
                "usedAt": to_iso(invitation.used_at) if invitation.used_at else None,
            }
        )

    @staticmethod
    def _hash_to_invitation(data: dict[str, str]) -> Invitation:
        return Invitation(
            email=data["email"],
            role=coerce_role(data.get("role")) or Role.MEMBER,
            token=data["token"],
            expires_at=parse_iso(data.get("expiresAt")) or utcnow(),
            created_by=data.get("createdBy", ""),
            created_at=parse_iso(data.get("createdAt")) or utcnow(),
            status=InvitationStatus(data.get("status", InvitationStatus.PENDING.value)),
            used_at=parse_iso(data.get("usedAt")),
        )
