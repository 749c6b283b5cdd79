"""FastAPI application definition."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from youkhana import __version__
from youkhana.entrypoints.api.deps import lifespan, settings
from youkhana.entrypoints.api.routes import api_router


def create_app() -> FastAPI:
    app = FastAPI(
        title="youkhana-admin",
        description="Admin backend for the Youkhana rental storefront",
        version=__version__,
        lifespan=lifespan,
        redirect_slashes=False,  # Prevent 307 redirects that lose auth headers
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.auth_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/api")

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
