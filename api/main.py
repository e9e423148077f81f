"""FastAPI application for the Habit Battles API.

``create_app`` wires settings, middleware, exception handlers and routers;
``app`` is the instance uvicorn serves (``uvicorn main:app``).
"""

import asyncio
import subprocess
import sys
from contextlib import asynccontextmanager
from pathlib import Path

import fastapi
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from core import get_logger
from core.config import Settings, get_settings
from core.database import (
    create_engine,
    create_session_maker,
    dispose_engine,
    init_db,
)
from core.logger import configure_logging
from core.middleware import SecurityHeadersMiddleware
from core.ratelimit import limiter, rate_limit_exceeded_handler
from core.telemetry import SERVICE_VERSION, RequestTimingMiddleware
from routes import (
    battles_router,
    habits_router,
    health_router,
    leaderboard_router,
    stats_router,
)

configure_logging()
logger = get_logger(__name__)

API_DIR = Path(__file__).parent

DB_CONNECT_TIMEOUT_SECONDS = 60
MIGRATION_TIMEOUT_SECONDS = 120


async def unhandled_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    logger.exception(
        "unhandled.exception",
        exc_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "An unexpected error occurred. Please try again."},
    )


async def validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """422 with pydantic's error list, minus the unserializable ``ctx``."""
    if not isinstance(exc, RequestValidationError):
        return JSONResponse(status_code=500, content={"detail": "Unexpected error"})

    errors = [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in exc.errors()
    ]
    logger.warning(
        "request.validation_error",
        path=request.url.path,
        method=request.method,
        error_count=len(errors),
        fields=[".".join(str(part) for part in e.get("loc", ())) for e in errors],
    )
    return JSONResponse(status_code=422, content={"detail": errors})


async def run_startup_migrations() -> None:
    """Upgrade to head via ``python -m cli migrate``.

    Runs in a subprocess: psycopg2 pool cleanup deadlocks inside
    asyncio.to_thread under uvloop.
    """
    result = await asyncio.to_thread(
        subprocess.run,
        [sys.executable, "-m", "cli", "migrate", "upgrade", "head"],
        cwd=API_DIR,
        capture_output=True,
        text=True,
        timeout=MIGRATION_TIMEOUT_SECONDS,
    )
    if result.returncode != 0:
        stderr = result.stderr.strip()
        logger.error("migrations.failed", stderr=stderr)
        raise RuntimeError(f"Alembic migration failed:\n{stderr}")

    logger.info("migrations.complete")


@asynccontextmanager
async def lifespan(app: fastapi.FastAPI):
    """Create the engine, verify the DB and migrate; dispose on shutdown.

    ``init_done``/``init_error`` on app.state drive the /ready probe.
    """
    app.state.engine = create_engine()
    app.state.session_maker = create_session_maker(app.state.engine)
    app.state.init_done = False
    app.state.init_error = None

    try:
        async with asyncio.timeout(DB_CONNECT_TIMEOUT_SECONDS):
            await init_db(app.state.engine)
        async with asyncio.timeout(MIGRATION_TIMEOUT_SECONDS):
            await run_startup_migrations()
    except TimeoutError:
        app.state.init_error = "startup timed out"
        logger.error("init.timeout", hint="check DB connectivity and migration lock")
        raise RuntimeError("Application startup timed out")
    except Exception as e:
        app.state.init_error = str(e)
        logger.error("init.failed", error=str(e), exc_info=True)
        raise

    app.state.init_done = True
    logger.info("init.complete", version=SERVICE_VERSION)

    try:
        yield
    finally:
        await dispose_engine(app.state.engine)


def create_app(settings: Settings | None = None) -> fastapi.FastAPI:
    settings = settings or get_settings()
    docs_enabled = settings.enable_docs or settings.debug

    app = fastapi.FastAPI(
        title="Habit Battles API",
        version=SERVICE_VERSION,
        lifespan=lifespan,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(SecurityHeadersMiddleware)

    if settings.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.allowed_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["Authorization", "Content-Type", "X-Timezone"],
            expose_headers=["X-Request-Duration-Ms", "X-Request-Id"],
            max_age=600,
        )

    # Outermost: times the full request and emits the wide event
    app.add_middleware(RequestTimingMiddleware)

    for router in (
        health_router,
        habits_router,
        stats_router,
        battles_router,
        leaderboard_router,
    ):
        app.include_router(router)

    return app


app = create_app()
