import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from roster.models import ErrorResponse
from roster.repositories.errors import StorageUnavailableError

log = logging.getLogger(__name__)


def error_response(request: Request, status_code: int, message: str) -> JSONResponse:
    body = ErrorResponse(status=status_code, message=message, path=request.url.path)
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return error_response(request, exc.status_code, str(exc.detail))


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    message = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return error_response(request, status.HTTP_400_BAD_REQUEST, message)


async def storage_exception_handler(
    request: Request, exc: StorageUnavailableError
) -> JSONResponse:
    log.error(f"{request.method} {request.url.path} failed: {exc}")
    return error_response(
        request, status.HTTP_500_INTERNAL_SERVER_ERROR, f"Storage error: {exc}"
    )


async def unhandled_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    log.error(f"{request.method} {request.url.path} failed: {exc!r}", exc_info=exc)
    return error_response(
        request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StorageUnavailableError, storage_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
