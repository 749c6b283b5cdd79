"""SMTP auth mailer."""

import asyncio
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import structlog

from youkhana.core.auth.mailer import AuthMailer
from youkhana.core.rbac import Role
from youkhana.core.rbac.permissions import get_role_label

logger = structlog.get_logger()


@dataclass(frozen=True)
class EmailConfig:
    """Email configuration."""

    smtp_host: str
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    from_email: str = "noreply@youkhana.com"
    from_name: str = "Youkhana Admin"
    use_tls: bool = True


class SMTPAuthMailer:
    """Delivers invitation and sign-in links via email (SMTP)."""

    def __init__(self, config: EmailConfig):
        """Initialize the mailer.

        Args:
            config: Email configuration settings.
        """
        self.config = config

    def send(
        self,
        to_emails: list[str],
        subject: str,
        body_html: str,
        body_text: str | None = None,
    ) -> bool:
        """Send an email.

        Returns True if the email was sent successfully.
        Note: This is synchronous; ``send_invitation`` runs it in a thread.
        """
        try:
            msg = MIMEMultipart("alternative")
            msg["Subject"] = subject
            msg["From"] = f"{self.config.from_name} <{self.config.from_email}>"
            msg["To"] = ", ".join(to_emails)

            if body_text:
                msg.attach(MIMEText(body_text, "plain"))
            msg.attach(MIMEText(body_html, "html"))

            with smtplib.SMTP(self.config.smtp_host, self.config.smtp_port) as server:
                if self.config.use_tls:
                    server.starttls()

                if self.config.smtp_user and self.config.smtp_password:
                    server.login(self.config.smtp_user, self.config.smtp_password)

                server.sendmail(self.config.from_email, to_emails, msg.as_string())

            logger.info("email_sent", to=to_emails, subject=subject)
            return True

        except (smtplib.SMTPException, OSError) as e:
            logger.error("email_error", to=to_emails, subject=subject, error=str(e))
            return False

    async def send_invitation(
        self,
        email: str,
        invitation_url: str,
        role: Role,
        expiry_days: int,
    ) -> bool:
        """Send the invitation email."""
        role_label = get_role_label(role)
        subject = "You've been invited to Youkhana Admin"

        body_html = f"""
        <html>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
            <h2>You're invited</h2>

            <p>You have been invited to join the Youkhana admin dashboard
            as <strong>{role_label}</strong>.</p>

            <p style="text-align: center; margin: 30px 0;">
                <a href="{invitation_url}" style="background: #667eea; color: white;
                padding: 12px 24px; text-decoration: none; border-radius: 5px; font-weight: bold;">
                    Accept Invitation
                </a>
            </p>

            <p>Or copy and paste this URL into your browser:</p>
            <p style="word-break: break-all;">{invitation_url}</p>

            <p>This invitation expires in {expiry_days} days.</p>

            <hr style="border: none; border-top: 1px solid #ddd; margin: 30px 0;">
            <p style="color: #666; font-size: 12px;">
                If you weren't expecting this invitation, you can safely ignore this email.
            </p>
        </body>
        </html>
        """

        body_text = f"""
You've been invited to Youkhana Admin as {role_label}.

Accept the invitation: {invitation_url}

This invitation expires in {expiry_days} days.

---
If you weren't expecting this invitation, you can safely ignore this email.
        """

        return await asyncio.to_thread(self.send, [email], subject, body_html, body_text)

    async def send_sign_in_link(self, email: str, sign_in_url: str) -> bool:
        """Send a one-click sign-in email."""
        subject = "Sign in to Youkhana"

        body_html = f"""
        <html>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
            <h2>Sign in to Youkhana</h2>

            <p>Click the button below to sign in to your account:</p>

            <p style="text-align: center; margin: 30px 0;">
                <a href="{sign_in_url}" style="background: #667eea; color: white;
                padding: 12px 24px; text-decoration: none; border-radius: 5px; font-weight: bold;">
                    Sign In
                </a>
            </p>

            <p>Or copy and paste this URL into your browser:</p>
            <p style="word-break: break-all;">{sign_in_url}</p>

            <hr style="border: none; border-top: 1px solid #ddd; margin: 30px 0;">
            <p style="color: #666; font-size: 12px;">
                If you didn't request this email, you can safely ignore it.
            </p>
        </body>
        </html>
        """

        body_text = f"""
Sign in to Youkhana: {sign_in_url}

---
If you didn't request this email, you can safely ignore it.
        """

        return await asyncio.to_thread(self.send, [email], subject, body_html, body_text)


_mailer: AuthMailer = SMTPAuthMailer(EmailConfig(smtp_host="localhost"))
