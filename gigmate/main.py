"""
GigMate API — Application entry point.

Bootstraps FastAPI, wires up middleware, registers route groups, and
builds the process-wide services (Gemini client, hotspot service, session
registry) in the lifespan.

Extension points:
  - Add new route groups with app.include_router() below
  - Add new middleware in the middleware block
  - Change startup behaviour in the lifespan context manager
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from gigmate.ai.advice_service import AdviceService
from gigmate.ai.gemini_client import build_gemini_client
from gigmate.ai.hotspot_service import HotspotService
from gigmate.core.config import settings
from gigmate.core.rate_limit import limiter
from gigmate.core.retry import RetryPolicy
from gigmate.routes.advice import router as advice_router
from gigmate.routes.demand import router as demand_router
from gigmate.routes.health import router as health_router
from gigmate.services.session import SessionRegistry

# ─── Logging ───────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ─── Lifespan ──────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage startup and shutdown lifecycle.

    Startup builds the shared services once and starts the idle-session
    sweeper; shutdown stops it and closes every open map session so no
    debounce timer or retry sleep outlives the server.
    """
    logger.info("Starting GigMate API (env: %s)", settings.environment)

    client = build_gemini_client(settings)
    app.state.hotspot_service = HotspotService(
        client,
        live_policy=RetryPolicy(settings.live_max_attempts, settings.retry_delay_ms),
        forecast_policy=RetryPolicy(settings.forecast_max_attempts, settings.retry_delay_ms),
        model=settings.gemini_model,
    )
    app.state.advice_service = AdviceService(
        client,
        policy=RetryPolicy(delay_ms=settings.retry_delay_ms),
        model=settings.gemini_model,
    )
    app.state.registry = SessionRegistry(app.state.hotspot_service, settings)
    sweeper = asyncio.create_task(app.state.registry.run_sweeper())

    yield

    logger.info("Shutting down GigMate API (%d open sessions)", len(app.state.registry))
    sweeper.cancel()
    await asyncio.gather(sweeper, return_exceptions=True)
    await app.state.registry.close_all()


# ─── App ───────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="GigMate API",
    description=(
        "Demand hotspots and financial coaching for gig workers. "
        "Hotspots are AI estimates, not guarantees."
    ),
    version="0.1.0",
    lifespan=lifespan,
    # Disable docs in production to reduce attack surface
    docs_url="/docs" if settings.environment != "production" else None,
    redoc_url="/redoc" if settings.environment != "production" else None,
)


# ─── Rate limiting ─────────────────────────────────────────────────────────────
# Routes opt-in with @limiter.limit("N/minute") + request: Request parameter.
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# ─── Middleware ─────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ─── Routes ────────────────────────────────────────────────────────────────────
app.include_router(health_router, prefix="/health", tags=["health"])
app.include_router(demand_router)
app.include_router(advice_router)


@app.get("/", tags=["root"])
async def root():
    """API root — basic metadata."""
    return {
        "name": "GigMate API",
        "version": "0.1.0",
        "status": "running",
        "environment": settings.environment,
        "docs": "/docs",
    }
