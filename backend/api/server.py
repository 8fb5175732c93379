# api/server.py
# ============================================================================
# LEADERSHIP COMPANION LANDING API — FASTAPI SERVER
# ============================================================================
# Landing page handlers: signup counter, founding-member checkout, waitlist
# submissions and the Stripe card-capture webhook.
# ============================================================================

import logging
import os
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog
import uvicorn

from config import LandingConfig, get_config
from errors import LandingError, MethodNotAllowed
from pipeline.capture_pipeline import CapturePipeline, get_capture_pipeline
from pipeline.checkout import CheckoutService, get_checkout_service
from pipeline.signature import SIGNATURE_HEADER
from schemas.landing_models import CheckoutRequest, SubmitRequest
from services.count_cache import CountCache, get_count_cache
from services.signups import submit_signup
from storage.ledger import LedgerSink, get_ledger_sink

VERSION = "1.0.0"

# Short shared-cache freshness, longer serve-stale window; matches the
# in-process TTL of the count cache.
COUNT_CACHE_CONTROL = "s-maxage=60, stale-while-revalidate=300"


# ============================================================================
# LOGGING
# ============================================================================

def configure_logging(config: LandingConfig) -> None:
    """Structured logs: coloured console in development, JSON elsewhere."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )
    renderer = (
        structlog.dev.ConsoleRenderer(colors=True)
        if config.debug
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )


config = get_config()
configure_logging(config)
logger = structlog.get_logger(component="server")


# ============================================================================
# LIFESPAN MANAGEMENT
# ============================================================================

START_TIME = datetime.now(timezone.utc)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown logic."""
    logger.info("server_starting", version=VERSION, ledger_backend=config.ledger_backend, env=config.env)

    if not config.stripe_secret_key:
        logger.warning("stripe_secret_key_missing", effect="checkout will fail")
    if not config.stripe_webhook_secret:
        logger.warning("stripe_webhook_secret_missing", effect="webhooks will be rejected")

    yield

    logger.info("server_stopped")


# ============================================================================
# FASTAPI APP
# ============================================================================

app = FastAPI(
    title="Leadership Companion Landing API",
    description="Signup counter, founding-member checkout and card-capture webhook",
    version=VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(LandingError)
async def landing_error_handler(request: Request, exc: LandingError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message}, headers=exc.headers)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # Routing errors (404, 405) in the same {"error"} shape
    if exc.status_code == 405:
        allow = (exc.headers or {}).get("Allow", "")
        error = MethodNotAllowed([m.strip() for m in allow.split(",") if m.strip()])
        return await landing_error_handler(request, error)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.info("invalid_request_body", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


# ============================================================================
# MIDDLEWARE
# ============================================================================

@app.middleware("http")
async def add_timing_header(request: Request, call_next):
    """Add response timing header."""
    start = time.perf_counter()
    response = await call_next(request)
    duration = (time.perf_counter() - start) * 1000
    response.headers["X-Response-Time-Ms"] = f"{duration:.2f}"
    return response


# ============================================================================
# RESPONSE MODELS
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    uptime_seconds: float
    ledger_backend: str


# ============================================================================
# ENDPOINTS
# ============================================================================

@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    uptime = (datetime.now(timezone.utc) - START_TIME).total_seconds()
    return HealthResponse(
        status="healthy",
        version=VERSION,
        uptime_seconds=uptime,
        ledger_backend=config.ledger_backend,
    )


@app.get("/api/count")
async def signup_count(cache: CountCache = Depends(get_count_cache)):
    """
    Signup count for the spots counter.

    Never fails: a stale or zero count beats a broken counter.
    """
    count = await cache.get_count()
    return JSONResponse(
        content={"count": count},
        headers={
            "Access-Control-Allow-Origin": "*",
            "Cache-Control": COUNT_CACHE_CONTROL,
        },
    )


@app.post("/api/create-checkout")
async def create_checkout(
    body: CheckoutRequest,
    service: CheckoutService = Depends(get_checkout_service),
):
    """Create a setup-mode Stripe Checkout Session and return its URL."""
    result = await service.create_checkout(body.email, body.tier, body.utm_data)
    return {"url": result.checkout_url}


@app.post("/api/submit")
async def submit(
    body: SubmitRequest,
    sink: LedgerSink = Depends(get_ledger_sink),
):
    """Record a waitlist or founding-member signup."""
    tier = await submit_signup(
        sink,
        email=body.email,
        tier=body.tier,
        utm=body.utm_data,
        page_url=body.page_url,
    )
    return {"success": True, "message": tier.submit_message}


@app.post("/api/stripe-webhook")
async def stripe_webhook(
    request: Request,
    pipeline: CapturePipeline = Depends(get_capture_pipeline),
):
    """
    Stripe webhook receiver.

    The raw body goes to signature verification untouched.
    """
    raw_body = await request.body()
    outcome = await pipeline.process(raw_body, request.headers.get(SIGNATURE_HEADER))
    return JSONResponse(status_code=outcome.status_code, content=outcome.body)


# ============================================================================
# MAIN
# ============================================================================

if __name__ == "__main__":
    port = int(os.getenv("PORT", str(config.port)))
    uvicorn.run(
        "api.server:app",
        host=config.host,
        port=port,
        reload=config.debug,
        log_level="info"
    )
