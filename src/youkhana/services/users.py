"""User management admin actions."""

from __future__ import annotations

from youkhana.adapters.audit import AuditAction, AuditLogger, AuditResult
from youkhana.adapters.auth import UserDirectory
from youkhana.core.auth.types import SessionUser
from youkhana.core.errors import AdminError, PermissionDeniedError, PolicyError
from youkhana.core.rbac import Permission, Role
from youkhana.core.validation import (
    DeleteUserInput,
    UpdateUserNameInput,
    UpdateUserRoleInput,
)
from youkhana.safety.rate_limit import USER_DELETION, RateLimiter
from youkhana.services.gate import (
    ActionResult,
    authorize,
    enforce_rate_limit,
    run_guarded,
    validated,
)


class UserService:
    """Role changes, renames, deletions and listings on behalf of an admin."""

    def __init__(
        self,
        users: UserDirectory,
        audit: AuditLogger,
        rate_limiter: RateLimiter,
    ) -> None:
        """Initialize the service.

        Args:
            users: User directory.
            audit: Audit logger.
            rate_limiter: Rate limiter for user deletion.
        """
        self._users = users
        self._audit = audit
        self._rate_limiter = rate_limiter

    async def update_user_role(
        self,
        session: SessionUser | None,
        email: str,
        role: str,
    ) -> ActionResult:
        """Change a user's role. Only a master admin may grant MASTER_ADMIN."""
        try:
            actor = authorize(
                session,
                Permission.UPDATE_USER_ROLE,
                "You do not have permission to update user roles",
            )
        except AdminError as e:
            return ActionResult.from_error(e)

        async def operation() -> ActionResult:
            data = validated(UpdateUserRoleInput, {"email": email, "role": role})

            if data.role is Role.MASTER_ADMIN and actor.role is not Role.MASTER_ADMIN:
                raise PermissionDeniedError("Only master admins can assign the master admin role")

            user = await self._users.update_user_role(data.email, data.role)

            await self._audit.log_user_action(
                AuditAction.USER_UPDATE_ROLE,
                actor.email,
                actor.role.value,
                data.email,
                AuditResult.SUCCESS,
                {"newRole": data.role.value},
            )
            return ActionResult.ok("User role updated successfully", user)

        async def on_failure(message: str) -> None:
            await self._audit.log_user_action(
                AuditAction.USER_UPDATE_ROLE,
                actor.email,
                actor.role.value,
                email,
                AuditResult.FAILURE,
                {"attemptedRole": role},
                message,
            )

        return await run_guarded(
            operation,
            action="update_user_role",
            fallback_message="Failed to update user role",
            on_failure=on_failure,
        )

    async def update_user_name(
        self,
        session: SessionUser | None,
        email: str,
        name: str,
    ) -> ActionResult:
        try:
            actor = authorize(
                session,
                Permission.UPDATE_USER_ROLE,
                "You do not have permission to update users",
            )
        except AdminError as e:
            return ActionResult.from_error(e)

        async def operation() -> ActionResult:
            data = validated(UpdateUserNameInput, {"email": email, "name": name})
            user = await self._users.update_user_name(data.email, data.name)

            await self._audit.log_user_action(
                AuditAction.USER_UPDATE_NAME,
                actor.email,
                actor.role.value,
                data.email,
                AuditResult.SUCCESS,
                {"newName": data.name},
            )
            return ActionResult.ok("User name updated successfully", user)

        async def on_failure(message: str) -> None:
            await self._audit.log_user_action(
                AuditAction.USER_UPDATE_NAME,
                actor.email,
                actor.role.value,
                email,
                AuditResult.FAILURE,
                {"attemptedName": name},
                message,
            )

        return await run_guarded(
            operation,
            action="update_user_name",
            fallback_message="Failed to update user name",
            on_failure=on_failure,
        )

    async def delete_user(self, session: SessionUser | None, email: str) -> ActionResult:
        try:
            actor = authorize(
                session,
                Permission.DELETE_USERS,
                "You do not have permission to delete users",
            )
        except AdminError as e:
            return ActionResult.from_error(e)

        async def operation() -> ActionResult:
            data = validated(DeleteUserInput, {"email": email})

            if data.email == actor.email.lower():
                raise PolicyError("You cannot delete your own account")

            await enforce_rate_limit(self._rate_limiter, actor.email, USER_DELETION)
            await self._users.delete_user(data.email)

            await self._audit.log_user_action(
                AuditAction.USER_DELETE,
                actor.email,
                actor.role.value,
                data.email,
                AuditResult.SUCCESS,
            )
            return ActionResult.ok("User deleted successfully")

        async def on_failure(message: str) -> None:
            await self._audit.log_user_action(
                AuditAction.USER_DELETE,
                actor.email,
                actor.role.value,
                email,
                AuditResult.FAILURE,
                None,
                message,
            )

        return await run_guarded(
            operation,
            action="delete_user",
            fallback_message="Failed to delete user",
            on_failure=on_failure,
        )

    async def list_users(self, session: SessionUser | None) -> ActionResult:
        try:
            authorize(session, Permission.VIEW_USERS, "You do not have permission to view users")
        except AdminError as e:
            return ActionResult.from_error(e)

        async def operation() -> ActionResult:
            return ActionResult.ok("Users loaded", await self._users.get_all_users())

        return await run_guarded(
            operation,
            action="list_users",
            fallback_message="Failed to load users",
        )
