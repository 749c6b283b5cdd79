"""Admin actions behind the authorization gate."""

from youkhana.services.audit import AuditService
from youkhana.services.auth import AuthService
from youkhana.services.bootstrap import create_master_admin
from youkhana.services.gate import ActionResult
from youkhana.services.inquiries import InquiryService
from youkhana.services.invitations import InvitationService
from youkhana.services.products import ProductService
from youkhana.services.users import UserService

__all__ = [
    "ActionResult",
    "AuditService",
    "AuthService",
    "InquiryService",
    "InvitationService",
    "ProductService",
    "UserService",
    "create_master_admin",
]
