"""RBAC domain types.

Permissions are never persisted. They are derived from the role at
lookup time through ``ROLE_PERMISSIONS``.
"""

from enum import Enum


class Role(str, Enum):
    """User roles, ordered MEMBER < ADMIN < MASTER_ADMIN."""

    MASTER_ADMIN = "MASTER_ADMIN"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class Permission(str, Enum):
    """Capabilities granted by roles."""

    # User management
    VIEW_USERS = "VIEW_USERS"
    CREATE_USERS = "CREATE_USERS"
    UPDATE_USER_ROLE = "UPDATE_USER_ROLE"
    DELETE_USERS = "DELETE_USERS"

    # Invitations
    VIEW_INVITATIONS = "VIEW_INVITATIONS"
    CREATE_INVITATIONS = "CREATE_INVITATIONS"
    CANCEL_INVITATIONS = "CANCEL_INVITATIONS"
    RESEND_INVITATIONS = "RESEND_INVITATIONS"

    # Settings
    VIEW_SETTINGS = "VIEW_SETTINGS"
    UPDATE_SETTINGS = "UPDATE_SETTINGS"

    # Dashboard
    VIEW_DASHBOARD = "VIEW_DASHBOARD"
    VIEW_ANALYTICS = "VIEW_ANALYTICS"

    # Products
    VIEW_PRODUCTS = "VIEW_PRODUCTS"
    MANAGE_PRODUCTS = "MANAGE_PRODUCTS"


_ADMIN_PERMISSIONS = frozenset(
    {
        Permission.VIEW_USERS,
        Permission.CREATE_USERS,
        Permission.UPDATE_USER_ROLE,
        Permission.DELETE_USERS,
        Permission.VIEW_INVITATIONS,
        Permission.CREATE_INVITATIONS,
        Permission.CANCEL_INVITATIONS,
        Permission.RESEND_INVITATIONS,
        Permission.VIEW_SETTINGS,
        Permission.VIEW_DASHBOARD,
        Permission.VIEW_ANALYTICS,
        Permission.VIEW_PRODUCTS,
        Permission.MANAGE_PRODUCTS,
    }
)

ROLE_PERMISSIONS: dict[Role, frozenset[Permission]] = {
    Role.MASTER_ADMIN: frozenset(Permission),
    Role.ADMIN: _ADMIN_PERMISSIONS,
    Role.MEMBER: frozenset(
        {
            Permission.VIEW_DASHBOARD,
            Permission.VIEW_SETTINGS,
            Permission.VIEW_PRODUCTS,
        }
    ),
}

# Higher number = more privileged
ROLE_HIERARCHY: dict[Role, int] = {
    Role.MEMBER: 1,
    Role.ADMIN: 2,
    Role.MASTER_ADMIN: 3,
}

ROLE_LABELS: dict[Role, str] = {
    Role.MASTER_ADMIN: "Master Admin",
    Role.ADMIN: "Admin",
    Role.MEMBER: "Member",
}

ROLE_DESCRIPTIONS: dict[Role, str] = {
    Role.MASTER_ADMIN: (
        "Full system access with all permissions. Can manage all users and settings."
    ),
    Role.ADMIN: "Can manage users, send invitations, and access most admin features.",
    Role.MEMBER: "Limited access to view dashboard and settings only.",
}
