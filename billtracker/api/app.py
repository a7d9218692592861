from __future__ import annotations

from pathlib import Path
from time import perf_counter
from uuid import uuid4

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from billtracker.api.dependencies import build_context
from billtracker.api.error_handlers import register_error_handlers
from billtracker.api.routers.bills import router as bills_router
from billtracker.api.routers.health import router as health_router
from billtracker.logger import (
    get_logger,
    reset_request_id,
    set_request_id,
    setup_logging,
)
from billtracker.settings import Settings, load_settings

API_PREFIX = "/api/v1"


def create_app(root: Path, settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    setup_logging(settings)

    app = FastAPI(title="Bill Tracker API", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )
    app.state.ctx = build_context(root, settings)

    logger = get_logger()

    @app.middleware("http")
    async def request_log_middleware(request: Request, call_next):
        request_id = (
            str(request.headers.get("x-request-id", "") or "").strip()
            or uuid4().hex[:16]
        )
        token = set_request_id(request_id)
        started = perf_counter()
        req_logger = logger.bind(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (perf_counter() - started) * 1000
            req_logger.bind(status_code=500).opt(exception=True).error(
                f"{request.method} {request.url.path} failed duration_ms={duration_ms:.2f}"
            )
            reset_request_id(token)
            raise

        duration_ms = (perf_counter() - started) * 1000
        response.headers["X-Request-Id"] = request_id
        status_code = int(response.status_code)
        message = (
            f"{request.method} {request.url.path} status={status_code} "
            f"duration_ms={duration_ms:.2f}"
        )
        if status_code >= 500:
            req_logger.bind(status_code=status_code).error(message)
        elif status_code >= 400:
            req_logger.bind(status_code=status_code).warning(message)
        else:
            req_logger.bind(status_code=status_code).info(message)
        reset_request_id(token)
        return response

    register_error_handlers(app)

    app.include_router(health_router, prefix=API_PREFIX)
    app.include_router(bills_router, prefix=API_PREFIX)

    return app


def serve(root: Path, host: str = "127.0.0.1", port: int = 8000) -> None:
    settings = load_settings()
    setup_logging(settings)
    app = create_app(root, settings)
    get_logger().info(f"bill tracker API listening on http://{host}:{port}{API_PREFIX}")
    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
        log_config=None,
    )


def main() -> None:
    settings = load_settings()
    serve(root=Path.cwd(), host=settings.host, port=settings.port)
