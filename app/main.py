# app/main.py
import asyncio
from contextlib import asynccontextmanager
from datetime import datetime
import logging
from typing import Callable

from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi import FastAPI, Request, status

from app.core.config import Settings, get_settings
from app.core.exceptions import (
    InvalidOrder,
    InvalidState,
    InvalidStatus,
    LedgerError,
    OrderNotFound,
    PersistenceFailure,
)
from app.services.ledger_service import LedgerService
from app.storage import create_catalog, create_ledger

# Routers
from app.routers.orders import router as orders_router
from app.routers.sales import router as sales_router
from app.routers.stats import router as stats_router
from app.routers.ledger import router as ledger_router

logger = logging.getLogger("uvicorn")


async def _refresh_periodically(ledger: LedgerService, interval: float) -> None:
    """
    Reload the ledger from disk every `interval` seconds so edits made by
    another process show up. A failed reload keeps the previous state.
    """
    while True:
        await asyncio.sleep(interval)
        try:
            await asyncio.to_thread(ledger.refresh)
        except LedgerError as e:
            logger.error(f"❌ Background refresh FAILED: {e}")
        except Exception:
            logger.exception("❌ Background refresh FAILED unexpectedly")


# -------- Error mapping --------

_ERROR_STATUS = {
    InvalidStatus: status.HTTP_400_BAD_REQUEST,
    InvalidOrder: status.HTTP_400_BAD_REQUEST,
    InvalidState: status.HTTP_409_CONFLICT,
    OrderNotFound: status.HTTP_404_NOT_FOUND,
    PersistenceFailure: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _register_exception_handlers(app: FastAPI) -> None:
    def make_handler(code: int):
        async def handler(request: Request, exc: LedgerError):
            if code >= 500:
                logger.error(f"❌ {request.method} {request.url.path}: {exc}")
            return JSONResponse(status_code=code, content={"detail": str(exc)})

        return handler

    for exc_type, code in _ERROR_STATUS.items():
        app.add_exception_handler(exc_type, make_handler(code))


def create_app(
    settings: Settings | None = None,
    clock: Callable[[], datetime] | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.

        Startup:
          - Load orders and sales from the configured files.
          - Load the product catalog (optional).
          - Start the periodic refresh when REFRESH_INTERVAL_SECONDS > 0.

        Shutdown:
          - Cancel the periodic refresh.
        """
        logger.info(f"🔄 Startup: Loading ledger from {settings.DATA_DIR}...")
        try:
            app.state.ledger = create_ledger(settings)
        except LedgerError as e:
            logger.error(f"❌ Startup: Ledger load FAILED: {e}")
            raise
        app.state.catalog = create_catalog(settings)
        logger.info(
            f"✅ Startup: {len(app.state.ledger.orders)} orders, "
            f"{len(app.state.ledger.sales)} sales loaded."
        )

        refresher = None
        if settings.REFRESH_INTERVAL_SECONDS > 0:
            refresher = asyncio.create_task(
                _refresh_periodically(app.state.ledger, settings.REFRESH_INTERVAL_SECONDS)
            )
        try:
            yield
        finally:
            if refresher is not None:
                refresher.cancel()
                try:
                    await refresher
                except asyncio.CancelledError:
                    pass

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.clock = clock or datetime.now

    # --- CORS configuration ---
    origins = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://0.0.0.0:3000",
        "http://[::1]:3000",
        "http://localhost:3001",
    ]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)

    # Versioned API prefix, e.g. /api/v1
    app.include_router(orders_router, prefix=settings.API_V1_STR)
    app.include_router(sales_router, prefix=settings.API_V1_STR)
    app.include_router(stats_router, prefix=settings.API_V1_STR)
    app.include_router(ledger_router, prefix=settings.API_V1_STR)

    @app.get("/")
    def root():
        """Health check endpoint."""
        return {"status": "ok", "service": "wondertrack-ledger"}

    return app


app = create_app()
