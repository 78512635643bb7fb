"""FastAPI application entrypoint. No business logic; only wiring and middleware.

Run locally with:
  python -m app.main
"""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1 import health
from app.api.v1 import router as v1_router
from app.core.config import Settings, get_settings
from app.core.database import build_user_gateway, create_client
from app.exception_handlers import register_exception_handlers
from app.middleware import JSONContentTypeMiddleware, RequestLoggingMiddleware
from app.services.user_gateway import UserGateway

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Acquire the database once at startup and release it at shutdown."""
    if getattr(app.state, "user_gateway", None) is not None:
        # Gateway injected by the caller (tests); nothing to open or close.
        yield
        return

    settings: Settings = app.state.settings
    client = None
    if settings.STORAGE_BACKEND == "mongo":
        client = create_client(settings)
    app.state.user_gateway = build_user_gateway(settings, client)
    try:
        yield
    finally:
        app.state.user_gateway = None
        if client is not None:
            client.close()
            logger.info("MongoDB client closed")


def create_app(
    settings: Settings | None = None,
    user_gateway: UserGateway | None = None,
) -> FastAPI:
    """
    Build the application. Pass user_gateway to skip the database connection
    (the gateway is used as-is for every request).
    """
    settings = settings or get_settings()
    app = FastAPI(
        title="User Management API",
        debug=settings.DEBUG,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.user_gateway = user_gateway

    app.add_middleware(JSONContentTypeMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    register_exception_handlers(app)

    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)
    return app


app = create_app()


def main() -> None:
    settings = app.state.settings
    configure_logging(settings)
    logger.info("Starting server on %s:%s", settings.HOST, settings.PORT)
    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        timeout_graceful_shutdown=settings.SHUTDOWN_GRACE_SEC,
        log_config=None,
    )


if __name__ == "__main__":
    main()
