"""PondWatch FastAPI application package."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from prometheus_client import make_asgi_app

from .core.config import Settings, settings as default_settings
from .core.logging_config import setup_logging


def create_app(config: Settings | None = None, runtime=None) -> FastAPI:
    """Build the API; the monitoring runtime is created at startup unless injected."""

    from .api import api_router, realtime_router
    from .db.session import build_engine, engine as default_engine, init_db
    from .services.runtime import build_runtime

    config = config or default_settings
    setup_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        active = runtime
        if active is None:
            engine = default_engine if config is default_settings else build_engine(config.database_url)
            active = build_runtime(config, engine)
        init_db(active.engine)
        app.state.runtime = active
        if config.scheduler_enabled:
            active.scheduler.start()
        logger.info("PondWatch API ready (scheduler=%s)", config.scheduler_enabled)
        try:
            yield
        finally:
            await active.aclose()

    app = FastAPI(title=config.app_name, version=config.app_version, lifespan=lifespan)
    app.include_router(api_router, prefix=config.api_prefix)
    app.include_router(realtime_router)
    if config.metrics_enabled:
        app.mount("/metrics", make_asgi_app())

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        return {
            "message": (
                f"{config.app_name} API is online. Try GET "
                f"{config.api_prefix}/health for a health check."
            )
        }

    return app


__all__ = ["create_app"]
