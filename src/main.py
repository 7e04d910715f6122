"""Red Protocol API — FastAPI application entry point.

Run locally:
    uvicorn src.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.config import get_settings
from src.cycle.errors import InvalidProfile, SnapshotError
from src.dependencies import get_cycle_engine
from src.middleware.security import SecurityHeadersMiddleware
from src.routers import cycle, health

# ---------- Logging ----------

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger("redprotocol")


# ---------- Lifespan ----------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup / shutdown hooks."""
    settings = get_settings()
    logger.info(
        "Starting Red Protocol API v%s [%s]",
        settings.app_version,
        settings.environment,
    )
    get_cycle_engine()  # load and validate cycle_config.yaml before serving
    yield
    logger.info("Red Protocol API shut down")


# ---------- Error handlers ----------

async def invalid_profile_handler(request: Request, exc: InvalidProfile) -> JSONResponse:
    logger.warning("Invalid profile on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


async def snapshot_error_handler(request: Request, exc: SnapshotError) -> JSONResponse:
    logger.warning("Rejected snapshot on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


# ---------- App factory ----------

def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Red Protocol API",
        description=(
            "Cycle phase estimation, daily checklists, symptom logging and "
            "pattern radar forecasts."
        ),
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_exception_handler(InvalidProfile, invalid_profile_handler)
    app.add_exception_handler(SnapshotError, snapshot_error_handler)
    app.add_exception_handler(ValueError, value_error_handler)

    app.add_middleware(SecurityHeadersMiddleware, api_prefix="/api/")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------- Health check (outside v1 prefix — always at /health) ----------
    app.include_router(health.router)

    # ---------- API v1 routes ----------
    app.include_router(cycle.router, prefix="/api/v1")

    return app


app = create_app()
