"""Persisted key layout.

These names are shared with other clients of the same store and must not
change.
"""

USERS_ALL = "users:all"
INVITATIONS_PENDING = "invitations:pending"
INVITATIONS_ALL = "invitations:all"
AUDIT_LOGS_ALL = "auditlogs:all"

PRODUCTS_ALL = "products:all"
PRODUCTS_ACTIVE = "products:active"
PRODUCTS_FEATURED = "products:featured"
CATEGORIES_ALL = "categories:all"
TAGS_ALL = "tags:all"

INQUIRIES_ALL = "inquiries:all"
INQUIRIES_PENDING = "inquiries:pending"


def user(email: str) -> str:
    return f"user:{email}"


def invitation(token: str) -> str:
    return f"invitation:{token}"


def invitation_by_email(email: str) -> str:
    return f"invitation:email:{email}"


def rate_limit(action: str, identifier: str) -> str:
    return f"ratelimit:{action}:{identifier}"


def audit_log(log_id: str) -> str:
    return f"auditlog:{log_id}"


def audit_logs_by_category(category: str) -> str:
    return f"auditlogs:{category}"


def audit_logs_by_user(email: str) -> str:
    return f"auditlogs:user:{email}"


def product(product_id: str) -> str:
    return f"product:{product_id}"


def product_handle(handle: str) -> str:
    return f"product:handle:{handle}"


def products_by_category(category: str) -> str:
    return f"products:category:{category}"


def products_by_tag(tag: str) -> str:
    return f"products:search:{tag}"


def inquiry(inquiry_id: str) -> str:
    return f"inquiry:{inquiry_id}"


def inquiries_by_product(product_id: str) -> str:
    return f"inquiries:product:{product_id}"


def inquiries_by_customer(email: str) -> str:
    return f"inquiries:customer:{email}"
