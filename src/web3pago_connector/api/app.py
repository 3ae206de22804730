"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

import httpx
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from web3pago_connector.api.routes import (
    confirmations_router,
    health_router,
    manifest_router,
    payments_router,
)
from web3pago_connector.config import get_settings
from web3pago_connector.connector import Web3PagoConnector, connector_config_from_settings
from web3pago_connector.database import create_tables, dispose_db, init_db
from web3pago_connector.exceptions import ConfigurationError, ConnectorError, StoreError
from web3pago_connector.store.sql import SqlKeyValueStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    Wires a SQL-backed connector unless one was injected into create_app().
    """
    if getattr(app.state, "connector", None) is not None:
        yield
        return

    # Startup
    settings = get_settings()
    engine, session_factory = init_db(settings.database_url)
    await create_tables(engine)
    async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as http_client:
        app.state.connector = Web3PagoConnector.create(
            SqlKeyValueStore(session_factory),
            config=connector_config_from_settings(settings),
            http_client=http_client,
        )
        logger.info("Connector started with database %s", engine.url.render_as_string())
        yield
    # Shutdown
    app.state.connector = None
    await dispose_db()


def create_app(connector: Web3PagoConnector | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        connector: Pre-wired connector. When omitted the lifespan builds one
            from environment settings.
    """
    app = FastAPI(
        title="Web3Pago Connector API",
        description="Payment connector between the checkout platform and Web3Pago",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.connector = connector

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Unknown paths and methods are reported as a missing endpoint."""
        if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
            return JSONResponse(
                status_code=status.HTTP_404_NOT_FOUND,
                content={"error": "Endpoint not found"},
            )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(StoreError)
    async def store_exception_handler(request: Request, exc: StoreError) -> JSONResponse:
        """Store failures are server errors, not bad requests."""
        logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error", "code": exc.code},
        )

    @app.exception_handler(ConfigurationError)
    async def configuration_exception_handler(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        """Wiring faults are server errors."""
        logger.error("Configuration error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error", "code": exc.code},
        )

    @app.exception_handler(ConnectorError)
    async def connector_exception_handler(
        request: Request, exc: ConnectorError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": exc.message, "code": exc.code, "details": exc.details},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(manifest_router)
    app.include_router(payments_router)
    app.include_router(confirmations_router)

    return app
