from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from coursehub.api.access_requests import router as access_requests_router
from coursehub.api.admin_courses import router as admin_courses_router
from coursehub.api.admin_users import router as admin_users_router
from coursehub.api.catalog import router as catalog_router
from coursehub.api.courses import router as courses_router
from coursehub.api.dependencies import memory_stores
from coursehub.api.enrollments import router as enrollments_router
from coursehub.api.health import router as health_router
from coursehub.api.metrics_endpoint import router as metrics_router
from coursehub.core.config import SETTINGS
from coursehub.core.logging import setup_logging
from coursehub.core.metrics import STORE_FAILURES
from coursehub.db import engine as db
from coursehub.db.engine import lifespan_db
from coursehub.middleware.metrics import MetricsMiddleware
from coursehub.middleware.request_context import RequestContextMiddleware
from coursehub.services.errors import StoreUnavailableError
from coursehub.services.seed_service import seed_basics

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    async with lifespan_db():
        # PostgreSQL is seeded out of band by scripts/seed.py.
        if SETTINGS.seed_demo and db.engine is None:
            await seed_basics(memory_stores())
        yield


app = FastAPI(
    title="coursehub",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)


@app.exception_handler(StoreUnavailableError)
async def store_unavailable_handler(
    request: Request, exc: StoreUnavailableError
) -> JSONResponse:
    # Nothing partial is rendered: the whole request fails.
    STORE_FAILURES.inc()
    logger.exception(
        "Store unavailable during %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=503,
        content={"detail": "Service temporarily unavailable"},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Middleware execution order: last-added runs first (outermost layer).
# RequestContext (outermost) → Metrics → CORS → route handler
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(catalog_router)
app.include_router(courses_router)
app.include_router(admin_users_router)
app.include_router(admin_courses_router)
app.include_router(enrollments_router)
app.include_router(access_requests_router)

logger.info(
    "coursehub started  env=%s log_level=%s port=%d docs=%s store=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "on" if SETTINGS.is_dev else "off",
    "postgres" if db.engine is not None else "memory",
)
