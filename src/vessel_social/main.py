# src/vessel_social/main.py
"""Main entry point for the Vessel social service."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError

from vessel_social.api.v1 import (
    follows_router,
    message_requests_router,
    notifications_router,
    threads_router,
    users_router,
)
from vessel_social.core.errors import SocialGraphError, Unavailable
from vessel_social.core.settings import settings
from vessel_social.services.moderation import close_content_reviewer

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Follow graph, message requests, direct threads and notifications",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(follows_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(message_requests_router, prefix="/api/v1")
app.include_router(threads_router, prefix="/api/v1")
app.include_router(notifications_router, prefix="/api/v1")


@app.exception_handler(SocialGraphError)
async def social_graph_error_handler(request: Request, exc: SocialGraphError) -> JSONResponse:
    """Render domain errors with their status code and machine-readable reason."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(DBAPIError)
async def database_unavailable_handler(request: Request, exc: DBAPIError) -> JSONResponse:
    """Render driver failures outside a unit of work as ``Unavailable``."""
    logger.warning("Database unavailable while serving %s: %s", request.url.path, exc)
    error = Unavailable("Storage is temporarily unavailable")
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


@app.on_event("startup")
async def on_startup() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info("%s %s starting", settings.app_name, settings.app_version)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    close_content_reviewer()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("vessel_social.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
