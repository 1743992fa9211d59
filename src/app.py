"""Storefront FastAPI application.

Catalogue, payments and ordering routes served from one process. Everything
with a lifecycle (database engine, payment gateway client, checkout
coordinator) is built once in the lifespan and kept on ``app.state``.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

import time
from contextlib import asynccontextmanager
from uuid import uuid4

from catalogue.api import category_router, product_router
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from ordering.api.routes import checkout_validation_error
from ordering.api.routes import router as ordering_router
from ordering.checkout.coordinator import CheckoutCoordinator
from ordering.order.ledger import OrderLedger
from payments.api.routes import client_token_router, gateway_router
from payments.gateway import build_gateway
from payments.gateway.port import PaymentGateway
from shared.api import register_error_handlers
from shared.database import build_engine, build_session_factory, setup_db
from shared.logging import add_context, clear_context, configure_logging, get_logger
from shared.settings import Settings

logger = get_logger(__name__)


def create_app(settings: Settings | None = None, gateway: PaymentGateway | None = None) -> FastAPI:
    """Build the application.

    ``settings`` default to the environment, read when the app starts so a
    misconfigured gateway fails startup rather than import. ``gateway``
    overrides the adapter the settings would build.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        resolved = settings or Settings.from_env()
        configure_logging(log_dir=resolved.log_dir)

        engine = build_engine(resolved.database_url, query_timeout=resolved.query_timeout)
        setup_db(engine)
        session_factory = build_session_factory(engine)

        app.state.settings = resolved
        app.state.engine = engine
        app.state.session_factory = session_factory
        app.state.gateway = gateway or build_gateway(resolved.gateway)
        app.state.ledger = OrderLedger(session_factory)
        app.state.coordinator = CheckoutCoordinator(
            gateway=app.state.gateway,
            ledger=app.state.ledger,
            charge_timeout=resolved.charge_timeout,
            persist_attempts=resolved.persist_attempts,
        )
        logger.info("app.started", environment=resolved.environment, gateway=type(app.state.gateway).__name__)

        yield

        await app.state.gateway.close()
        engine.dispose()
        logger.info("app.stopped")

    app = FastAPI(
        title="Storefront API",
        description="Product catalog with checkout: Catalogue, Payments & Ordering domains",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        """Bind a request id to every log line emitted while serving the request."""
        clear_context()
        add_context(request_id=request.headers.get("x-request-id") or uuid4().hex, path=request.url.path)
        started = time.perf_counter()
        try:
            response = await call_next(request)
            logger.debug(
                "request.completed",
                method=request.method,
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            return response
        finally:
            clear_context()

    register_error_handlers(app)
    app.add_exception_handler(RequestValidationError, checkout_validation_error)

    # -----------------------------------------------------------------------
    # Routers
    # -----------------------------------------------------------------------
    app.include_router(product_router)
    app.include_router(category_router)
    app.include_router(client_token_router)
    app.include_router(gateway_router)
    app.include_router(ordering_router)

    # -----------------------------------------------------------------------
    # Health / root
    # -----------------------------------------------------------------------
    @app.get("/health")
    async def health(request: Request):
        return JSONResponse(
            content={
                "status": "ok",
                "environment": request.app.state.settings.environment,
                "gateway": type(request.app.state.gateway).__name__,
            }
        )

    return app


app = create_app()
