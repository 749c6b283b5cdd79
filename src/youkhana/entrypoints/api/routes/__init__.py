"""API route modules."""

from fastapi import APIRouter

from youkhana.entrypoints.api.routes.audit import router as audit_router
from youkhana.entrypoints.api.routes.auth import router as auth_router
from youkhana.entrypoints.api.routes.inquiries import router as inquiries_router
from youkhana.entrypoints.api.routes.invitations import router as invitations_router
from youkhana.entrypoints.api.routes.products import router as products_router
from youkhana.entrypoints.api.routes.users import router as users_router

# Create main API router
api_router = APIRouter()

api_router.include_router(auth_router)
api_router.include_router(users_router)
api_router.include_router(invitations_router)
api_router.include_router(audit_router)
api_router.include_router(products_router)
api_router.include_router(inquiries_router)

__all__ = ["api_router"]
