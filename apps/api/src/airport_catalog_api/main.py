"""FastAPI application factory."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from airport_catalog_api.config import settings

# Propagate DB URL so airport_catalog_db.database picks it up via os.getenv.
os.environ.setdefault("DATABASE_URL", settings.database_url)

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from airport_catalog_api.cache.redis_client import close_redis, init_redis
from airport_catalog_api.dependencies import get_main_airport_selector
from airport_catalog_api.routers import admin, airports
from airport_catalog_db.database import dispose_engine, init_models

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage startup / shutdown resources."""
    await init_models()
    await init_redis(settings.redis_url, settings.redis_socket_timeout)
    selector = get_main_airport_selector()
    logger.info(
        "Main airport advisor %s",
        f"enabled ({settings.llm_model})" if selector.advisor_enabled else "disabled",
    )
    yield
    await selector.close()
    get_main_airport_selector.cache_clear()
    await close_redis()
    await dispose_engine()


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    # Bad query or path parameters are client errors, reported as 400.
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="Airport Catalog API",
        version="0.1.0",
        lifespan=_lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    app.include_router(airports.router)
    app.include_router(admin.router)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run(
        "airport_catalog_api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
