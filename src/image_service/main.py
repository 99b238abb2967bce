"""FastAPI application entry point.

Run with ``uvicorn image_service.main:create_app --factory`` or
``python -m image_service.main``.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .auth.auth_service import ServiceAuthClient
from .config import AppConfig, load_config
from .dependencies import include_routers
from .lifecycle import run_periodic_cache_sweep
from .logging import configure_logging
from .media.media_models import FailureReason

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    shutdown_event = asyncio.Event()
    task = asyncio.create_task(
        run_periodic_cache_sweep(
            cache=app.state.asset_cache,
            shutdown_event=shutdown_event,
        ),
        name="image-service-cache-sweep",
    )
    app.state.cache_sweep_task = task
    try:
        yield
    finally:
        shutdown_event.set()
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        app.state.asset_cache.clear()
        app.state.cache_sweep_task = None


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("app.unhandled_error", extra={"path": request.url.path})
    return JSONResponse(
        status_code=500,
        content={"status": "error", "failure_reason": FailureReason.INTERNAL_ERROR.value},
    )


def create_app(
    config: AppConfig | None = None,
    *,
    service_auth: ServiceAuthClient | None = None,
) -> FastAPI:
    """Build FastAPI instance with configured dependencies."""
    cfg = config or load_config()
    configure_logging(service_name=cfg.service_name)
    app = FastAPI(title="Image Service", lifespan=_lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(Exception, _unhandled_error)
    include_routers(app, cfg, service_auth=service_auth)

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


def main() -> None:
    config = load_config()
    uvicorn.run(create_app(config), host="0.0.0.0", port=config.port)


if __name__ == "__main__":
    main()
