"""
Resource Actions - Main Application
===================================

FastAPI application exposing action listing and execution over HTTP.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shared.utils.logging import setup_logging, get_logger, set_correlation_id
from src.config import get_settings
from src.api.routes import router as api_router
from src.core.application_client import create_application_client
from src.core.dispatcher import ActionDispatcher


settings = get_settings()

setup_logging(
    service_name=settings.service_name,
    log_level=settings.log_level,
    json_output=settings.log_json
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan manager."""
    logger.info(
        f"Starting {settings.service_name} v{settings.service_version}",
        extra={
            "version": settings.service_version,
            "backend": settings.backend.value
        }
    )

    backend = create_application_client(settings)
    app.state.backend = backend
    app.state.dispatcher = ActionDispatcher(backend, settings.cli_command)

    yield

    logger.info(f"Shutting down {settings.service_name}...")
    await backend.close()


app = FastAPI(
    title="Resource Actions",
    description="List and run actions on the live resources of an application",
    version=settings.service_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def correlation_id_middleware(request: Request, call_next):
    correlation_id = request.headers.get("X-Correlation-ID")
    if not correlation_id:
        correlation_id = str(uuid.uuid4())

    set_correlation_id(correlation_id)
    response = await call_next(request)
    response.headers["X-Correlation-ID"] = correlation_id

    return response


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "internal_server_error", "message": str(exc) if settings.debug else "An error occurred"}
    )


@app.get("/health", tags=["health"])
async def health_check():
    return {
        "status": "healthy",
        "service": settings.service_name,
        "version": settings.service_version
    }


@app.get("/ready", tags=["health"])
async def readiness_check(request: Request):
    backend_ok = await request.app.state.backend.health_check()
    return JSONResponse(
        status_code=200 if backend_ok else 503,
        content={
            "status": "ready" if backend_ok else "not_ready",
            "service": settings.service_name,
            "backend": settings.backend.value
        }
    )


app.include_router(api_router, prefix="/api/v1")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("src.main:app", host=settings.host, port=settings.port, reload=settings.debug)
