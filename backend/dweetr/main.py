# dweetr/main.py

import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dweetr import config
from dweetr.api import dweets, health
from dweetr.core.errors import RateLimited, StorageUnavailable, ValidationError
from dweetr.core.rate_limit import create_limiter
from dweetr.core.retention import RetentionPolicy
from dweetr.core.store import MessageStore
from dweetr.core.waiter import LongPollWaiter
from dweetr.infra.database import create_db_engine
from dweetr.services.dweet_service import DweetService
from dweetr.utils.logger import setup_logger

logger = logging.getLogger(__name__)


def build_service(
    store: MessageStore,
    max_dweets: int = config.MAX_DWEETS_PER_THING,
    max_age_hours: float = config.MAX_AGE_HOURS,
    listen_max_wait: float = config.LISTEN_MAX_WAIT_SECONDS,
    listen_poll_interval: float = config.LISTEN_POLL_INTERVAL_SECONDS,
    listen_deadline: float = config.LISTEN_DEADLINE_SECONDS,
) -> DweetService:
    return DweetService(
        store=store,
        retention=RetentionPolicy(
            store, max_age=timedelta(hours=max_age_hours), max_count=max_dweets
        ),
        waiter=LongPollWaiter(
            store,
            max_wait_seconds=listen_max_wait,
            poll_interval_seconds=listen_poll_interval,
        ),
        listen_deadline_seconds=listen_deadline,
    )


def create_app(
    service: Optional[DweetService] = None,
    database_url: str = config.DATABASE_URL,
    publish_rate_limit: str = config.PUBLISH_RATE_LIMIT,
    configure_logging: bool = True,
) -> FastAPI:
    if configure_logging:
        setup_logger(config.LOG_LEVEL, json_logs=config.LOG_JSON)

    if service is None:
        service = build_service(MessageStore(create_db_engine(database_url)))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        service.store.create_schema()
        logger.info("dweetr started")
        yield
        service.store.engine.dispose()
        logger.info("dweetr stopped")

    app = FastAPI(
        title="dweetr",
        version="1.0.0",
        description="Machine-to-machine message board",
        lifespan=lifespan,
    )
    app.state.service = service
    app.state.limiter = create_limiter()
    app.state.publish_rate_limit = publish_rate_limit

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"status": "error", "message": exc.message})

    @app.exception_handler(StorageUnavailable)
    async def storage_error_handler(request: Request, exc: StorageUnavailable):
        logger.error(f"Storage failure on {request.method} {request.url.path}")
        return JSONResponse(status_code=503, content={"status": "error", "message": exc.message})

    @app.exception_handler(RateLimited)
    async def rate_limited_handler(request: Request, exc: RateLimited):
        return JSONResponse(status_code=429, content={"status": "error", "message": exc.message})

    # Register routers
    app.include_router(dweets.router, tags=["Dweets"])
    app.include_router(health.router, tags=["Health"])

    return app


app = create_app()
