from __future__ import annotations

from collections.abc import Mapping

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from billtracker.api.schemas.common import err
from billtracker.domain.errors import DomainError, UnsupportedOperationError
from billtracker.logger import current_request_id, get_logger

_HTTP_CODES = {
    401: "unauthorized",
    404: "not_found",
    422: "validation_error",
}


def _domain_response(exc: DomainError, headers: Mapping[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(
            err(
                request_id=current_request_id(),
                code=exc.code,
                message=exc.message,
                details=exc.details,
            )
        ),
        headers=headers,
    )


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def _domain_error_handler(_: Request, exc: DomainError) -> JSONResponse:
        return _domain_response(exc)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 405:
            unsupported = UnsupportedOperationError(
                details={"method": request.method, "path": request.url.path}
            )
            return _domain_response(unsupported, headers=exc.headers)
        return JSONResponse(
            status_code=exc.status_code,
            content=err(
                request_id=current_request_id(),
                code=_HTTP_CODES.get(exc.status_code, "http_error"),
                message=str(exc.detail),
            ),
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(
        _: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content=jsonable_encoder(
                err(
                    request_id=current_request_id(),
                    code="validation_error",
                    message="request validation failed",
                    details=exc.errors(),
                )
            ),
        )

    @app.exception_handler(Exception)
    async def _generic_error_handler(_: Request, exc: Exception) -> JSONResponse:
        get_logger().opt(exception=exc).error("unhandled error")
        return JSONResponse(
            status_code=500,
            content=err(
                request_id=current_request_id(),
                code="internal_error",
                message="internal server error",
            ),
        )
