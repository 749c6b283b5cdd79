"""Dependency injection and application lifespan management."""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated

import structlog
from fastapi import Depends, Request

from youkhana.adapters.audit import AuditConfig, AuditLogger
from youkhana.adapters.auth import (
    InvitationConfig,
    InvitationManager,
    UserDirectory,
    UserDirectoryConfig,
)
from youkhana.adapters.catalog import InquiryRepository, ProductRepository
from youkhana.adapters.kv import KeyValueStore
from youkhana.adapters.notifications import ConsoleAuthMailer, EmailConfig, SMTPAuthMailer
from youkhana.core.auth.jwt import SessionConfig
from youkhana.core.auth.mailer import AuthMailer
from youkhana.core.clock import Clock, utcnow
from youkhana.safety.rate_limit import RateLimiter
from youkhana.services import (
    AuditService,
    AuthService,
    InquiryService,
    InvitationService,
    ProductService,
    UserService,
)

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = structlog.get_logger()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    """Application settings loaded from environment."""

    def __init__(self) -> None:
        """Load settings from environment variables."""
        self.redis_url = os.getenv("REDIS_URL", "redis://localhost:6379/0")
        self.master_admin_email = os.getenv("MASTER_ADMIN_EMAIL") or None
        self.auth_url = os.getenv("AUTH_URL", "http://localhost:3000").rstrip("/")

        self.invitation_expiry_days = int(os.getenv("INVITATION_EXPIRY_DAYS", "7"))
        self.invitation_retention_days = int(os.getenv("INVITATION_RETENTION_DAYS", "90"))
        self.audit_retention_days = int(os.getenv("AUDIT_RETENTION_DAYS", "90"))
        self.rate_limit_fail_open = _env_bool("RATE_LIMIT_FAIL_OPEN", True)

        # Session tokens
        self.jwt_secret_key = os.getenv(
            "JWT_SECRET_KEY", "dev-secret-change-in-production"  # pragma: allowlist secret
        )
        self.session_expire_days = int(os.getenv("SESSION_EXPIRE_DAYS", "30"))

        # SMTP; with no host, links are printed to the console
        self.smtp_host = os.getenv("SMTP_HOST", "")
        self.smtp_port = int(os.getenv("SMTP_PORT", "587"))
        self.smtp_user = os.getenv("SMTP_USER") or None
        self.smtp_password = os.getenv("SMTP_PASSWORD") or None
        self.email_from = os.getenv("EMAIL_FROM", "noreply@youkhana.com")
        self.email_from_name = os.getenv("EMAIL_FROM_NAME", "Youkhana Admin")
        self.smtp_use_tls = _env_bool("SMTP_USE_TLS", True)

    @property
    def auth_base_url(self) -> str:
        """Base for signup and sign-in links."""
        return f"{self.auth_url}/auth"

    @property
    def session_config(self) -> SessionConfig:
        return SessionConfig(
            secret_key=self.jwt_secret_key,
            expire_days=self.session_expire_days,
        )


settings = Settings()


def build_mailer(settings: Settings) -> AuthMailer:
    if not settings.smtp_host:
        return ConsoleAuthMailer()

    return SMTPAuthMailer(
        EmailConfig(
            smtp_host=settings.smtp_host,
            smtp_port=settings.smtp_port,
            smtp_user=settings.smtp_user,
            smtp_password=settings.smtp_password,
            from_email=settings.email_from,
            from_name=settings.email_from_name,
            use_tls=settings.smtp_use_tls,
        )
    )


@dataclass
class Components:
    """Everything the routes need, built once per process."""

    store: KeyValueStore
    users: UserDirectory
    invitations: InvitationManager
    audit: AuditLogger
    rate_limiter: RateLimiter
    products: ProductRepository
    inquiries: InquiryRepository
    auth_service: AuthService
    user_service: UserService
    invitation_service: InvitationService
    audit_service: AuditService
    product_service: ProductService
    inquiry_service: InquiryService


def build_components(
    store: KeyValueStore,
    settings: Settings,
    mailer: AuthMailer | None = None,
    clock: Clock = utcnow,
) -> Components:
    """Wire adapters and services around one store.

    Args:
        store: Connected key-value store.
        settings: Application settings.
        mailer: Override for mail delivery (defaults from settings).
        clock: Source of the current time for every component.
    """
    mailer = mailer or build_mailer(settings)

    users = UserDirectory(
        store, UserDirectoryConfig(master_admin_email=settings.master_admin_email), clock
    )
    invitation_config = InvitationConfig(
        expiry_days=settings.invitation_expiry_days,
        retention_days=settings.invitation_retention_days,
    )
    invitations = InvitationManager(store, users, invitation_config, clock)
    audit = AuditLogger(store, AuditConfig(retention_days=settings.audit_retention_days), clock)
    rate_limiter = RateLimiter(store, fail_open=settings.rate_limit_fail_open)
    products = ProductRepository(store, clock)
    inquiries = InquiryRepository(store, clock)

    return Components(
        store=store,
        users=users,
        invitations=invitations,
        audit=audit,
        rate_limiter=rate_limiter,
        products=products,
        inquiries=inquiries,
        auth_service=AuthService(
            users,
            invitations,
            audit,
            mailer,
            settings.session_config,
            settings.auth_base_url,
        ),
        user_service=UserService(users, audit, rate_limiter),
        invitation_service=InvitationService(
            invitations, audit, rate_limiter, mailer, settings.auth_base_url
        ),
        audit_service=AuditService(audit),
        product_service=ProductService(products, audit),
        inquiry_service=InquiryService(inquiries, products, audit, clock),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan - connect the store and wire components."""
    store = KeyValueStore(settings.redis_url)
    await store.connect()

    if not settings.master_admin_email:
        logger.warning("master_admin_email_not_configured")

    app.state.components = build_components(store, settings)

    yield

    await store.close()


def get_components(request: Request) -> Components:
    """Get the wired components from app state.

    Args:
        request: The current request.

    Returns:
        The application's components.
    """
    components: Components = request.app.state.components
    return components


ComponentsDep = Annotated[Components, Depends(get_components)]


def get_auth_service(components: ComponentsDep) -> AuthService:
    return components.auth_service


def get_user_service(components: ComponentsDep) -> UserService:
    return components.user_service


def get_invitation_service(components: ComponentsDep) -> InvitationService:
    return components.invitation_service


def get_audit_service(components: ComponentsDep) -> AuditService:
    return components.audit_service


def get_product_service(components: ComponentsDep) -> ProductService:
    return components.product_service


def get_inquiry_service(components: ComponentsDep) -> InquiryService:
    return components.inquiry_service


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
InvitationServiceDep = Annotated[InvitationService, Depends(get_invitation_service)]
AuditServiceDep = Annotated[AuditService, Depends(get_audit_service)]
ProductServiceDep = Annotated[ProductService, Depends(get_product_service)]
InquiryServiceDep = Annotated[InquiryService, Depends(get_inquiry_service)]
