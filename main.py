# main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import IntegrityError, OperationalError, TimeoutError as PoolTimeoutError

from inventory_api.routers import (
    auth_router,
    user_router,
    category_router,
    product_router,
    report_router,
)

from inventory_api.core.config import (
    APP_ENV,
    APP_NAME,
    APP_VERSION,
    CORS_ORIGINS,
    ENABLE_SCHEDULER,
    IS_PRODUCTION,
)
from inventory_api.core.db import Database, init_models
from inventory_api.core.scheduler import build_scheduler
from inventory_api.core.exceptions import AppException
from inventory_api.core.logging import setup_logging
from inventory_api.middleware.request_logging import request_logging_middleware
from inventory_api.core.error_handlers import (
    app_exception_handler,
    validation_exception_handler,
    http_exception_handler,
    integrity_error_handler,
    store_failure_handler,
    unhandled_exception_handler,
)
from inventory_api.utils.logger import get_logger

# ------------------------------------------------------------------------------
# LOGGING
# ------------------------------------------------------------------------------
setup_logging()
logger = get_logger(__name__)


# ------------------------------------------------------------------------------
# LIFESPAN
# ------------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting application", extra={"environment": APP_ENV})

    # tests install their own handle before startup
    database = getattr(app.state, "database", None)
    owns_database = database is None
    if owns_database:
        database = Database()
        app.state.database = database

    if APP_ENV == "development":
        await init_models(database)
        logger.info("Database models initialized (development)")
    else:
        logger.info("init_models() skipped", extra={"environment": APP_ENV})

    scheduler = None
    if ENABLE_SCHEDULER:
        scheduler = build_scheduler(database)
        scheduler.start()
        logger.info("Scheduler started")
    else:
        logger.info("Scheduler disabled")

    yield

    logger.info("Shutting down application")
    if scheduler and scheduler.running:
        scheduler.shutdown()
    if owns_database:
        await database.dispose()


# ------------------------------------------------------------------------------
# APP FACTORY
# ------------------------------------------------------------------------------
def create_app(database: Database | None = None) -> FastAPI:
    app = FastAPI(
        title=APP_NAME,
        description="Inventory tracking API with an audited quantity ledger",
        version=APP_VERSION,
        docs_url=None if IS_PRODUCTION else "/docs",
        redoc_url=None,
        lifespan=lifespan,
    )

    if database is not None:
        app.state.database = database

    # --------------------------------------------------------------------------
    # EXCEPTION HANDLERS
    # --------------------------------------------------------------------------
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(OperationalError, store_failure_handler)
    app.add_exception_handler(PoolTimeoutError, store_failure_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --------------------------------------------------------------------------
    # MIDDLEWARE
    # --------------------------------------------------------------------------
    app.middleware("http")(request_logging_middleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --------------------------------------------------------------------------
    # HEALTH CHECK
    # --------------------------------------------------------------------------
    @app.get("/", tags=["Health"])
    async def health_check():
        return {
            "status": "ok",
            "service": "inventory-tracker-api",
            "environment": APP_ENV,
            "version": APP_VERSION,
        }

    # --------------------------------------------------------------------------
    # ROUTERS
    # --------------------------------------------------------------------------
    app.include_router(auth_router)
    app.include_router(user_router)
    app.include_router(category_router)
    app.include_router(product_router)
    app.include_router(report_router)

    return app


app = create_app()
