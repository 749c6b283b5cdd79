"""User directory backed by the key-value store.

Each user is a hash at ``user:{email}``; ``users:all`` indexes every email.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import structlog

from youkhana.adapters.kv import KeyValueStore, drop_empty, keys
from youkhana.core.auth.types import User
from youkhana.core.clock import Clock, parse_iso, to_iso, utcnow
from youkhana.core.errors import ConflictError, NotFoundError, PolicyError, ValidationError
from youkhana.core.rbac import Role, coerce_role

logger = structlog.get_logger()


@dataclass(frozen=True)
class UserDirectoryConfig:
    """User directory configuration.

    Attributes:
        master_admin_email: The single protected master admin account.
    """

    master_admin_email: str | None = None


class UserDirectory:
    """CRUD over user records."""

    def __init__(
        self,
        store: KeyValueStore,
        config: UserDirectoryConfig | None = None,
        clock: Clock = utcnow,
    ) -> None:
        """Initialize the directory.

        Args:
            store: Key-value store adapter.
            config: Directory configuration.
            clock: Source of the current time.
        """
        self._store = store
        self.config = config or UserDirectoryConfig()
        self._clock = clock

    def is_master_admin_email(self, email: str) -> bool:
        master = self.config.master_admin_email
        return bool(master) and email.strip().lower() == master.strip().lower()

    async def create_user(
        self,
        email: str,
        name: str,
        role: Role | str,
        invited_by: str | None = None,
    ) -> User:
        """Create a new user.

        The existence check and the write are separate store calls, so two
        concurrent creates for the same email can both succeed.

        Raises:
            ValidationError: If a required field is missing or the role is invalid.
            ConflictError: If a user with this email already exists.
        """
        if not email or not name or not role:
            raise ValidationError("Email, name, and role are required")

        resolved = coerce_role(role)
        if resolved is None:
            raise ValidationError("Invalid role")

        if await self.user_exists(email):
            raise ConflictError("User already exists")

        user = User(
            email=email,
            name=name,
            role=resolved,
            created_at=self._clock(),
            invited_by=invited_by,
        )

        await self._store.hset(keys.user(email), self._user_to_hash(user))
        await self._store.sadd(keys.USERS_ALL, email)

        logger.info("user_created", email=email, role=resolved.value, invited_by=invited_by)
        return user

    async def get_user(self, email: str) -> User | None:
        """Get a user by email. Returns None if absent."""
        if not email:
            return None

        data = await self._store.hgetall(keys.user(email))
        if not data:
            return None

        return self._hash_to_user(data)

    async def get_all_users(self) -> list[User]:
        """Get every indexed user, newest first.

        Index members whose record is missing are skipped.
        """
        emails = await self._store.smembers(keys.USERS_ALL)
        if not emails:
            return []

        users = await asyncio.gather(*(self.get_user(e) for e in emails))
        found = [u for u in users if u is not None]
        found.sort(key=lambda u: u.created_at, reverse=True)
        return found

    async def update_user_role(self, email: str, new_role: Role | str) -> User:
        """Change a user's role.

        Raises:
            ValidationError: If inputs are missing or the role is invalid.
            NotFoundError: If the user does not exist.
            PolicyError: If this would demote the master admin.
        """
        if not email or not new_role:
            raise ValidationError("Email and new role are required")

        resolved = coerce_role(new_role)
        if resolved is None:
            raise ValidationError("Invalid role")

        user = await self.get_user(email)
        if user is None:
            raise NotFoundError("User not found")

        if self.is_master_admin_email(email) and resolved is not Role.MASTER_ADMIN:
            raise PolicyError("Cannot change master admin role")

        await self._store.hset(keys.user(email), {"role": resolved.value})

        logger.info("user_role_updated", email=email, role=resolved.value)
        return user.model_copy(update={"role": resolved})

    async def update_user_name(self, email: str, new_name: str) -> User:
        """Change a user's display name.

        Raises:
            ValidationError: If inputs are missing.
            NotFoundError: If the user does not exist.
        """
        if not email or not new_name:
            raise ValidationError("Email and new name are required")

        user = await self.get_user(email)
        if user is None:
            raise NotFoundError("User not found")

        await self._store.hset(keys.user(email), {"name": new_name})
        return user.model_copy(update={"name": new_name})

    async def update_last_sign_in(self, email: str) -> None:
        """Stamp the last sign-in time. Unknown users are ignored."""
        if not email or not await self.user_exists(email):
            return

        await self._store.hset(keys.user(email), {"lastSignIn": to_iso(self._clock())})

    async def delete_user(self, email: str) -> None:
        """Delete a user record and its index entry.

        Raises:
            ValidationError: If email is missing.
            PolicyError: If email is the master admin.
            NotFoundError: If the user does not exist.
        """
        if not email:
            raise ValidationError("Email is required")

        if self.is_master_admin_email(email):
            raise PolicyError("Cannot delete master admin")

        if not await self.user_exists(email):
            raise NotFoundError("User not found")

        await self._store.delete(keys.user(email))
        await self._store.srem(keys.USERS_ALL, email)

        logger.info("user_deleted", email=email)

    async def user_exists(self, email: str) -> bool:
        if not email:
            return False
        return await self.get_user(email) is not None

    async def get_user_count(self) -> int:
        return await self._store.scard(keys.USERS_ALL)

    async def get_users_by_role(self, role: Role | str) -> list[User]:
        """Filter all users by role. O(n); there is no per-role index.

        Raises:
            ValidationError: If the role is invalid.
        """
        resolved = coerce_role(role)
        if resolved is None:
            raise ValidationError("Invalid role")

        return [u for u in await self.get_all_users() if u.role is resolved]

    @staticmethod
    def _user_to_hash(user: User) -> dict[str, str]:
        return drop_empty(
            {
                "email": user.email,
                "name": user.name,
                "role": user.role.value,
                "createdAt": to_iso(user.created_at),
                "invitedBy": user.invited_by,
                "lastSignIn": to_iso(user.last_sign_in) if user.last_sign_in else None,
            }
        )

    @staticmethod
    def _hash_to_user(data: dict[str, str]) -> User:
        # Records written by other clients may carry unknown roles; treat as MEMBER
        role = coerce_role(data.get("role")) or Role.MEMBER
        return User(
            email=data["email"],
            name=data.get("name", ""),
            role=role,
            created_at=parse_iso(data.get("createdAt")) or utcnow(),
            invited_by=data.get("invitedBy") or None,
            last_sign_in=parse_iso(data.get("lastSignIn")),
        )
