"""Auth mail delivery adapters."""

from youkhana.adapters.notifications.console import ConsoleAuthMailer
from youkhana.adapters.notifications.email import EmailConfig, SMTPAuthMailer

__all__ = ["ConsoleAuthMailer", "EmailConfig", "SMTPAuthMailer"]
