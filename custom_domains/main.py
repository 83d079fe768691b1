"""FastAPI application factory and configuration."""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from custom_domains.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info(f"Starting Custom Domain Service in {settings.ENVIRONMENT} mode")
    logger.info(f"App domain: {settings.APP_DOMAIN}, CNAME target: {settings.cname_target}")
    logger.info(f"Database: {settings.DATABASE_URL.split('@')[-1]}")  # Hide credentials
    yield
    # Shutdown
    logger.info("Shutting down Custom Domain Service")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Custom Domain Service",
        description="Custom domain verification, deployment tracking and host routing",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure based on environment in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check endpoint
    @app.get("/health", tags=["Health"])
    async def health_check() -> dict[str, Any]:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": "custom-domain-service",
            "version": "0.1.0",
            "environment": settings.ENVIRONMENT,
        }

    # Mount routes
    from custom_domains.routes import domains, resolve, webhooks

    app.include_router(domains.router, prefix="/api", tags=["Domains"])
    app.include_router(webhooks.router, prefix="/api", tags=["Webhooks"])
    app.include_router(resolve.router, prefix="/api", tags=["Routing"])

    return app


# Create application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "custom_domains.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )
