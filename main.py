import asyncio
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import ConfigurationError, Settings, load_settings
from db.db import Database
from logger import logger, setup_logging
from routers.grade_records import API_VERSION, grade_records_router
from routers.system import system_router
from service.gateway import AbstractGradeRecordGateway, MongoGradeRecordGateway
from telemetry import instrument_fastapi, setup_telemetry
from utils.error_handlers import add_error_handlers
from utils.tracing import TimingMiddleware, TraceIdMiddleware


def log_unhandled_task_error(loop: asyncio.AbstractEventLoop, context: dict) -> None:
    logger.error(
        f"Unhandled error in background task: {context.get('message')}",
        exc_info=context.get("exception"),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    asyncio.get_running_loop().set_exception_handler(log_unhandled_task_error)

    if app.state.gateway is not None:
        yield
        return

    settings: Settings = app.state.settings
    database: Database = app.state.database or Database()
    await database.connect(
        settings.mongodb_uri,
        settings.mongodb_database,
        timeout_ms=settings.mongodb_timeout_ms,
    )
    try:
        gateway = MongoGradeRecordGateway(
            database.get_collection(settings.mongodb_collection)
        )
        await gateway.ensure_indexes()
        app.state.database = database
        app.state.gateway = gateway
        yield
    finally:
        app.state.gateway = None
        await database.disconnect()


def create_app(
    settings: Optional[Settings] = None,
    gateway: Optional[AbstractGradeRecordGateway] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """Build the API.

    Without a ``gateway`` the lifespan connects ``database`` (a new one when
    none is given) to MongoDB and builds the gateway on it; an injected
    gateway is used as is and no connection is opened.
    """
    settings = settings or load_settings()

    app = FastAPI(
        title="Student Grades API",
        description="Stores three grades per student and keeps their average.",
        version=API_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.gateway = gateway
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(TimingMiddleware)
    app.add_middleware(TraceIdMiddleware)

    add_error_handlers(app, expose_details=settings.expose_error_details)

    app.include_router(system_router)
    app.include_router(grade_records_router, prefix=settings.api_prefix)

    if settings.otlp_endpoint is not None:
        instrument_fastapi(app)

    return app


def run():
    try:
        settings = load_settings()
    except ConfigurationError as e:
        setup_logging()
        logger.error(f"Error starting server: {e}")
        sys.exit(1)

    logger_provider = setup_logging(
        settings.log_level, settings.otlp_endpoint, settings.app_env
    )
    tracer_provider = setup_telemetry(settings)
    app = create_app(settings)

    base_url = f"http://localhost:{settings.port}"
    logger.info(f"Starting server on port {settings.port} ({settings.app_env})")
    logger.info(f"API available at {base_url}{settings.api_prefix}/")
    logger.info(f"Health check at {base_url}/health")

    try:
        # exits with a non-zero code when startup fails
        uvicorn.run(
            app,
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level.lower(),
        )
    finally:
        for provider in (tracer_provider, logger_provider):
            if provider is not None:
                provider.shutdown()


if __name__ == "__main__":
    run()
