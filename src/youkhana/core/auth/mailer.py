"""Auth mail delivery protocol.

Delivery is outside the invitation lifecycle: after an invitation is
created or resent, the caller hands the signup link to a mailer. A
delivery failure never undoes the invitation.
"""

from typing import Protocol, runtime_checkable

from youkhana.core.rbac import Role


@runtime_checkable
class AuthMailer(Protocol):
    """Protocol for delivering invitation and sign-in links.

    Example implementations:
    - SMTPAuthMailer: Sends HTML email through an SMTP relay
    - ConsoleAuthMailer: Prints links for local development
    """

    async def send_invitation(
        self,
        email: str,
        invitation_url: str,
        role: Role,
        expiry_days: int,
    ) -> bool:
        """Deliver an invitation link.

        Args:
            email: Invitee address.
            invitation_url: Full signup URL containing the token.
            role: Role the invitee will receive.
            expiry_days: Days until the link expires.

        Returns:
            True if the invitation was delivered.
        """
        ...

    async def send_sign_in_link(self, email: str, sign_in_url: str) -> bool:
        """Deliver a one-click sign-in link to an existing user.

        Returns:
            True if the link was delivered.
        """
        ...
