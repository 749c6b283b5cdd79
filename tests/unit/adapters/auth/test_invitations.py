"""Tests for the invitation manager."""

from __future__ import annotations

from datetime import timedelta

import pytest
from youkhana.adapters.auth import InvitationManager, UserDirectory
from youkhana.adapters.kv import KeyValueStore
from youkhana.core.auth.types import InvitationStatus
from youkhana.core.errors import ConflictError, NotFoundError, PolicyError, ValidationError
from youkhana.core.rbac import Role

from tests.helpers import FakeClock

INVITER = "admin@youkhana.com"


class TestCreateInvitation:
    """Tests for create_invitation."""

    async def test_creates_pending_invitation(
        self, invitations: InvitationManager, store: KeyValueStore, clock: FakeClock
    ) -> None:
        invitation = await invitations.create_invitation("jane@example.com", Role.MEMBER, INVITER)

        assert invitation.status is InvitationStatus.PENDING
        assert len(invitation.token) == 64
        assert (invitation.expires_at - clock.now).days == 7
        assert await store.smembers("invitations:pending") == {invitation.token}
        assert await store.smembers("invitations:all") == {invitation.token}
        assert await store.get("invitation:email:jane@example.com") == invitation.token
        stored = await store.hgetall(f"invitation:{invitation.token}")
        assert stored["createdBy"] == INVITER
        assert stored["status"] == "pending"

    async def test_round_trip(self, invitations: InvitationManager) -> None:
        created = await invitations.create_invitation("jane@example.com", "ADMIN", INVITER)

        fetched = await invitations.get_invitation(created.token)

        assert fetched == created

    async def test_master_admin_role_refused(self, invitations: InvitationManager) -> None:
        with pytest.raises(PolicyError, match="Cannot invite master admin"):
            await invitations.create_invitation("jane@example.com", Role.MASTER_ADMIN, INVITER)

    async def test_invalid_role(self, invitations: InvitationManager) -> None:
        with pytest.raises(ValidationError, match="Invalid role"):
            await invitations.create_invitation("jane@example.com", "OWNER", INVITER)

    async def test_missing_fields(self, invitations: InvitationManager) -> None:
        with pytest.raises(ValidationError, match="Email, role, and createdBy are required"):
            await invitations.create_invitation("jane@example.com", Role.MEMBER, "")

    async def test_existing_user(
        self, invitations: InvitationManager, users: UserDirectory
    ) -> None:
        await users.create_user("jane@example.com", "Jane", Role.MEMBER)

        with pytest.raises(ConflictError, match="User with this email already exists"):
            await invitations.create_invitation("jane@example.com", Role.MEMBER, INVITER)

    async def test_duplicate_pending_invitation(self, invitations: InvitationManager) -> None:
        await invitations.create_invitation("jane@example.com", Role.MEMBER, INVITER)

        with pytest.raises(ConflictError, match="Pending invitation already exists"):
            await invitations.create_invitation("jane@example.com", Role.ADMIN, INVITER)

    async def test_email_can_be_reinvited_after_expiry(
        self, invitations: InvitationManager, clock: FakeClock
    ) -> None:
        first = await invitations.create_invitation("jane@example.com", Role.MEMBER, INVITER)
        clock.advance(days=8)

        second = await invitations.create_invitation("jane@example.com", Role.MEMBER, INVITER)

        assert second.token != first.token
        expired = await invitations.get_invitation(first.token)
        assert expired is not None and expired.status is InvitationStatus.EXPIRED

    async def test_overdue_invitation_is_not_pending_by_email(
        self, invitations: InvitationManager, store: KeyValueStore, clock: FakeClock
    ) -> None:
        created = await invitations.create_invitation("jane@example.com", Role.MEMBER, INVITER)
        clock.advance(days=7, seconds=1)

        assert await invitations.get_pending_invitation_by_email("jane@example.com") is None
        assert await store.smembers("invitations:pending") == set()
        assert await store.get("invitation:email:jane@example.com") is None
        stored = await invitations.get_invitation(created.token)
        assert stored is not None and stored.status is InvitationStatus.EXPIRED


class TestValidateInvitationToken:
    """Tests for signup-time token validation."""

    async def test_valid(self, invitations: InvitationManager) -> None:
        created = await invitations.create_invitation("jane@example.com", Role.MEMBER, INVITER)

        assert await invitations.validate_invitation_token(created.token) == created

    async def test_unknown_token(self, invitations: InvitationManager) -> None:
        assert await invitations.validate_invitation_token("f" * 64) is None
        assert await invitations.validate_invitation_token("") is None

    async def test_expired_token_is_marked_expired(
        self, invitations: InvitationManager, store: KeyValueStore, clock: FakeClock
    ) -> None:
        created = await invitations.create_invitation("jane@example.com", Role.MEMBER, INVITER)
        clock.advance(days=7, seconds=1)

        assert await invitations.validate_invitation_token(created.token) is None

        stored = await invitations.get_invitation(created.token)
        assert stored is not None
        assert stored.status is InvitationStatus.EXPIRED
        assert await store.smembers("invitations:pending") == set()
        assert await store.get("invitation:email:jane@example.com") is None

    async def test_still_valid_at_the_deadline(
        self, invitations: InvitationManager, clock: FakeClock
    ) -> None:
        created = await invitations.create_invitation("jane@example.com", Role.MEMBER, INVITER)
        clock.advance(days=7)

        assert await invitations.validate_invitation_token(created.token) is not None

    async def test_used_token(self, invitations: InvitationManager) -> None:
        created = await invitations.create_invitation("jane@example.com", Role.MEMBER, INVITER)
        await invitations.mark_invitation_used(created.token)

        assert await invitations.validate_invitation_token(created.token) is None

    async def test_user_created_out_of_band(
        self, invitations: InvitationManager, users: UserDirectory
    ) -> None:
        created = await invitations.create_invitation("jane@example.com", Role.MEMBER, INVITER)
        await users.create_user("jane@example.com", "Jane", Role.MEMBER)

        assert await invitations.validate_invitation_token(created.token) is None


class TestLifecycle:
    """Tests for used, cancelled and resent invitations."""

    async def test_mark_used(
        self, invitations: InvitationManager, store: KeyValueStore, clock: FakeClock
    ) -> None:
        created = await invitations.create_invitation("jane@example.com", Role.MEMBER, INVITER)
        clock.advance(hours=1)

        await invitations.mark_invitation_used(created.token)

        stored = await invitations.get_invitation(created.token)
        assert stored is not None
        assert stored.status is InvitationStatus.USED
        assert stored.used_at == clock.now
        assert await store.smembers("invitations:pending") == set()
        assert await store.get("invitation:email:jane@example.com") is None

    async def test_mark_used_unknown_token(self, invitations: InvitationManager) -> None:
        with pytest.raises(NotFoundError, match="Invitation not found"):
            await invitations.mark_invitation_used("f" * 64)

    async def test_delete(self, invitations: InvitationManager, store: KeyValueStore) -> None:
        created = await invitations.create_invitation("jane@example.com", Role.MEMBER, INVITER)

        deleted = await invitations.delete_invitation(created.token)

        assert deleted.email == "jane@example.com"
        assert await invitations.get_invitation(created.token) is None
        assert await store.smembers("invitations:pending") == set()
        assert await store.smembers("invitations:all") == set()
        assert await store.get("invitation:email:jane@example.com") is None

    async def test_delete_requires_token(self, invitations: InvitationManager) -> None:
        with pytest.raises(ValidationError, match="Token is required"):
            await invitations.delete_invitation("")

    async def test_resend_replaces_token(
        self, invitations: InvitationManager, clock: FakeClock
    ) -> None:
        old = await invitations.create_invitation("jane@example.com", Role.ADMIN, INVITER)
        clock.advance(days=3)

        new = await invitations.resend_invitation(old.token, "owner@youkhana.com")

        assert new.token != old.token
        assert new.role is Role.ADMIN
        assert new.created_by == "owner@youkhana.com"
        assert new.expires_at == clock.now + timedelta(days=7)
        assert await invitations.validate_invitation_token(old.token) is None
        assert await invitations.validate_invitation_token(new.token) == new

    async def test_resend_unknown(self, invitations: InvitationManager) -> None:
        with pytest.raises(NotFoundError):
            await invitations.resend_invitation("f" * 64, INVITER)


class TestListings:
    """Tests for pending and full listings."""

    async def test_pending_newest_first_and_expired_swept(
        self, invitations: InvitationManager, clock: FakeClock
    ) -> None:
        stale = await invitations.create_invitation("old@example.com", Role.MEMBER, INVITER)
        clock.advance(days=5)
        older = await invitations.create_invitation("a@example.com", Role.MEMBER, INVITER)
        clock.advance(days=1)
        newer = await invitations.create_invitation("b@example.com", Role.MEMBER, INVITER)
        clock.advance(days=2)

        pending = await invitations.get_pending_invitations()

        assert [i.token for i in pending] == [newer.token, older.token]
        expired = await invitations.get_invitation(stale.token)
        assert expired is not None and expired.status is InvitationStatus.EXPIRED
        assert await invitations.get_pending_invitations_count() == 2

    async def test_all_invitations_include_history(
        self, invitations: InvitationManager, clock: FakeClock
    ) -> None:
        used = await invitations.create_invitation("used@example.com", Role.MEMBER, INVITER)
        await invitations.mark_invitation_used(used.token)
        clock.advance(minutes=1)
        pending = await invitations.create_invitation("new@example.com", Role.ADMIN, INVITER)

        listed = await invitations.get_all_invitations()

        assert [(i.token, i.status) for i in listed] == [
            (pending.token, InvitationStatus.PENDING),
            (used.token, InvitationStatus.USED),
        ]

    async def test_all_invitations_report_overdue_as_expired(
        self, invitations: InvitationManager, clock: FakeClock
    ) -> None:
        created = await invitations.create_invitation("jane@example.com", Role.MEMBER, INVITER)
        clock.advance(days=10)

        listed = await invitations.get_all_invitations()

        assert [(i.token, i.status) for i in listed] == [
            (created.token, InvitationStatus.EXPIRED)
        ]

    async def test_cleanup_expired(
        self, invitations: InvitationManager, clock: FakeClock
    ) -> None:
        await invitations.create_invitation("a@example.com", Role.MEMBER, INVITER)
        await invitations.create_invitation("b@example.com", Role.MEMBER, INVITER)
        clock.advance(days=6)
        await invitations.create_invitation("c@example.com", Role.MEMBER, INVITER)
        clock.advance(days=2)

        assert await invitations.cleanup_expired_invitations() == 2
        assert await invitations.cleanup_expired_invitations() == 0
        assert await invitations.get_pending_invitations_count() == 1

    async def test_terminal_invitations_get_retention_ttl(
        self, invitations: InvitationManager, store: KeyValueStore, clock: FakeClock
    ) -> None:
        used = await invitations.create_invitation("used@example.com", Role.MEMBER, INVITER)
        stale = await invitations.create_invitation("stale@example.com", Role.MEMBER, INVITER)
        live = await invitations.create_invitation("live@example.com", Role.MEMBER, INVITER)
        await invitations.mark_invitation_used(used.token)
        await invitations.mark_invitation_expired(stale.token)

        retention = 90 * 86400
        assert 0 < await store.ttl(f"invitation:{used.token}") <= retention
        assert 0 < await store.ttl(f"invitation:{stale.token}") <= retention
        assert await store.ttl(f"invitation:{live.token}") == -1

    async def test_cleanup_prunes_tokens_without_records(
        self, invitations: InvitationManager, store: KeyValueStore
    ) -> None:
        gone = await invitations.create_invitation("gone@example.com", Role.MEMBER, INVITER)
        kept = await invitations.create_invitation("kept@example.com", Role.MEMBER, INVITER)
        await invitations.mark_invitation_used(gone.token)
        await store.delete(f"invitation:{gone.token}")

        await invitations.cleanup_expired_invitations()

        assert await store.smembers("invitations:all") == {kept.token}
