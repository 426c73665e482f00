"""FastAPI application entry point with APScheduler."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from daycare.auth.hmac_auth import verify_request_signature
from daycare.config import get_settings
from daycare.errors import DomainError
from daycare.services.scheduler_service import scheduler, setup_scheduler

logger = logging.getLogger(__name__)
settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.APP_DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
)


class HmacMiddleware(BaseHTTPMiddleware):
    """Verify HMAC-signed requests when HMAC_SECRET is configured.

    Only requests that carry the X-User-Id header are checked.
    Requests without that header pass through (dependencies still guard access).
    When HMAC_SECRET is empty the middleware is a no-op (dev/test mode).
    """

    async def dispatch(self, request, call_next):
        if not settings.HMAC_SECRET:
            return await call_next(request)

        user_id_header = request.headers.get("x-user-id")
        if user_id_header is None:
            return await call_next(request)

        ok = verify_request_signature(
            settings.HMAC_SECRET,
            user_id_header,
            request.headers.get("x-request-timestamp"),
            request.headers.get("x-nonce"),
            request.headers.get("x-signature"),
        )
        if not ok:
            return JSONResponse({"detail": "Invalid request signature"}, status_code=401)
        return await call_next(request)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting day-care backend...")
    if settings.SCHEDULER_ENABLED:
        setup_scheduler()
        scheduler.start()
        logger.info("APScheduler started with %d jobs", len(scheduler.get_jobs()))
    else:
        logger.info("SCHEDULER_ENABLED is false – ownership backfill disabled")

    yield

    # Shutdown
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("APScheduler stopped")


app = FastAPI(
    title="Day-care Reports",
    description="Day-care reporting backend with parent/child ownership engine",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_ORIGIN],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# HMAC signature verification: must be added after CORS
app.add_middleware(HmacMiddleware)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        {"detail": exc.message, "reason": exc.reason}, status_code=exc.status_code
    )


# REST API router
from daycare.api.v1.router import router as api_router  # noqa: E402

app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
async def health():
    """Basic liveness probe."""
    return {"status": "ok", "service": "daycare"}


@app.get("/health/ready")
async def health_ready():
    """Readiness probe with database check."""
    from daycare.database import engine
    from sqlalchemy import text

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return {"status": "ready", "database": "ok"}
    except Exception as e:
        logger.error("Health ready check failed: %s", e)
        return JSONResponse(
            {"status": "not_ready", "database": "error"},
            status_code=503
        )
