"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (logging, tables, Redis).
Middleware, error handlers and routers are all registered here.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from inkwell import __version__
from inkwell.api import api_router
from inkwell.config import settings
from inkwell.errors import install_error_handlers
from inkwell.log import configure_logging

logger = structlog.get_logger("inkwell")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging, create tables and connect Redis; undo on shutdown."""
    configure_logging(settings.log_level, json=settings.log_json)
    logger.info(
        "inkwell.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    from inkwell.db.engine import engine, init_models
    await init_models(engine)

    from inkwell.cache import close_redis, init_redis
    try:
        await init_redis()
        logger.info("inkwell.redis_connected", url=settings.redis_url)
    except Exception as e:
        # Redis only backs rate limiting; the API works without it.
        logger.warning("inkwell.redis_unavailable", error=str(e))

    yield

    logger.info("inkwell.shutdown")
    await close_redis()
    await engine.dispose()


def create_app() -> FastAPI:
    """Assemble middleware, error handlers and routers into one app."""
    app = FastAPI(
        title="Inkwell",
        description="Blogging backend — users, posts, comments",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware ──────────────────────────────────────────
    # Last added runs first, so a request passes through
    # RequestId, Security, RateLimit, then CORS before reaching a route.

    from inkwell.middleware.rate_limit import RateLimitMiddleware
    from inkwell.middleware.request_id import RequestIdMiddleware
    from inkwell.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=settings.rate_limit_rpm,
        auth_rpm=settings.rate_limit_auth_rpm,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)

    install_error_handlers(app)
    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: inkwell.main:app)
app = create_app()
