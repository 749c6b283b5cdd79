"""Store-backed user directory and invitation manager."""

from youkhana.adapters.auth.invitations import InvitationConfig, InvitationManager
from youkhana.adapters.auth.users import UserDirectory, UserDirectoryConfig

__all__ = [
    "InvitationConfig",
    "InvitationManager",
    "UserDirectory",
    "UserDirectoryConfig",
]
