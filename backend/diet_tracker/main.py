import asyncio
import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from diet_tracker import __version__
from diet_tracker.api import api_router
from diet_tracker.core.db import Database
from diet_tracker.core.errors import register_exception_handlers
from diet_tracker.core.logging import configure_logging
from diet_tracker.core.settings import Settings, get_settings
from diet_tracker.models.diet_log import DietLog

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    settings = settings or get_settings()
    if database is None:
        database = Database(settings.database.url, echo=settings.database.echo)

    app = FastAPI(title="Diet Tracker API", version=__version__)
    app.state.settings = settings
    app.state.database = database
    app.state.startup_probe = None

    allow_all = "*" in settings.api.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=not allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, expose_error_details=settings.api.expose_error_details)
    app.include_router(api_router)

    @app.on_event("startup")
    async def startup_event() -> None:
        # Fire and forget; startup never waits on the database.
        logger.info("Testing database connection...")
        app.state.startup_probe = asyncio.create_task(database.probe(DietLog.__tablename__))

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        probe = app.state.startup_probe
        if probe is not None and not probe.done():
            probe.cancel()
        await database.dispose()

    return app


def run() -> None:
    settings = get_settings()
    logger.info("Server starting on %s:%s", settings.server.host, settings.server.port)
    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,
    )


configure_logging()
app = create_app()


if __name__ == "__main__":
    run()
