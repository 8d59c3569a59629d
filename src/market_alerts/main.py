"""Main module for the market alerts service."""
import asyncio
import logging
import subprocess
import sys
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from market_alerts.container import Container, init_container
from market_alerts.errors import MarketAlertsError
from market_alerts.providers.core import ErrorMapper
from market_alerts.routers import (alerts_router, budgets_router,
                                   currency_router, stocks_router)
from market_alerts.schemas import ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

error_mapper = ErrorMapper()


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


def _lifespan(container: Container):
    @asynccontextmanager
    async def lifespan(fastapi_app: FastAPI):
        """Create tables and start the scheduler; drain writes and close providers on shutdown."""
        settings = container.settings()
        database = container.database()
        await asyncio.to_thread(database.init_db)

        scheduler = container.scheduler()
        if settings.scheduler_enabled:
            scheduler.start()

        fastapi_app.state.container = container

        yield

        scheduler.stop()
        for service in (container.currency_service(), container.stock_service()):
            await service.drain_pending_writes()
            await service.close()
        database.dispose()

    return lifespan


async def market_alerts_error_handler(request: Request, exc: MarketAlertsError) -> JSONResponse:
    """Render a domain error as the {success: false, error, timestamp} envelope."""
    status_code, code, message = error_mapper.to_http(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    body = ErrorResponse(error=ErrorDetail(code=code, message=message))
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def create_app(container: Container | None = None) -> FastAPI:
    """Build the FastAPI app around a container (a fresh one from the environment by default)."""
    container = container or init_container()
    fastapi_app = FastAPI(
        title="Market Alerts",
        description="Threshold alerts, exchange rates, stock quotes, and budgets",
        version="0.1.0",
        lifespan=_lifespan(container),
    )
    # Set before startup too, so the container is reachable without the lifespan.
    fastapi_app.state.container = container
    fastapi_app.add_exception_handler(MarketAlertsError, market_alerts_error_handler)

    fastapi_app.include_router(alerts_router)
    fastapi_app.include_router(currency_router)
    fastapi_app.include_router(stocks_router)
    fastapi_app.include_router(budgets_router)

    @fastapi_app.get("/")
    def health():
        """Return health check status."""
        return {"status": "ok"}

    return fastapi_app


def _app_from_env() -> FastAPI:
    container = init_container()
    configure_logging(container.settings().log_level)
    return create_app(container)


def run():
    """Run the server (uvicorn). Use for `poetry run start`."""
    uvicorn.run("market_alerts.main:_app_from_env", factory=True, host="127.0.0.1", port=8001)


def run_dev():
    """Run the development server with Postgres running via Docker."""
    project_root = Path(__file__).resolve().parent.parent.parent
    try:
        subprocess.run(
            ["docker", "compose", "up", "-d", "postgres"],
            cwd=project_root,
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        print("Failed to start Postgres:", e.stderr or e.stdout, file=sys.stderr)
        sys.exit(1)
    uvicorn.run(
        "market_alerts.main:_app_from_env", factory=True, host="0.0.0.0", port=8000, reload=True
    )
