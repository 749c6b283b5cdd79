"""Console auth mailer for local development.

Prints signup and sign-in links to stdout so developers can follow them
directly.
"""

from youkhana.core.auth.mailer import AuthMailer
from youkhana.core.rbac import Role


class ConsoleAuthMailer:
    """Prints links instead of emailing them.

    Useful for local development without SMTP setup and for demo
    environments.
    """

    async def send_invitation(
        self,
        email: str,
        invitation_url: str,
        role: Role,
        expiry_days: int,
    ) -> bool:
        """Print the invitation link to the console.

        Returns:
            True (console printing always succeeds).
        """
        print("\n" + "=" * 70, flush=True)
        print("[INVITATION] Signup link generated for dev mode", flush=True)
        print(f"  Email:   {email}", flush=True)
        print(f"  Role:    {role.value}", flush=True)
        print(f"  Link:    {invitation_url}", flush=True)
        print(f"  Expires: in {expiry_days} days", flush=True)
        print("=" * 70 + "\n", flush=True)
        return True

    async def send_sign_in_link(self, email: str, sign_in_url: str) -> bool:
        """Print the sign-in link to the console."""
        print("\n" + "=" * 70, flush=True)
        print("[SIGN IN] Sign-in link generated for dev mode", flush=True)
        print(f"  Email:   {email}", flush=True)
        print(f"  Link:    {sign_in_url}", flush=True)
        print("=" * 70 + "\n", flush=True)
        return True


# Verify we implement the protocol
_mailer: AuthMailer = ConsoleAuthMailer()
