"""Exception handlers: map error kinds to the response envelope.

- not found (``ObjectNotFoundError``) -> 404, ``fail``
- invalid input (``ValidationError``, request validation) -> 400, ``fail``
- review not allowed (``ReviewNotAllowed``) -> 403, ``fail``
- duplicate review (``DuplicateReview``) -> 409, ``fail``
- upstream failure (payment or push provider, catalog) -> 502, ``error``
- anything else -> 500, ``error``

Details of server-side failures are logged, never returned.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from florist.errors import DuplicateReview, ReviewNotAllowed, UpstreamFailure

logger = structlog.get_logger(__name__)


def envelope(status_code: int, status: str, message: str, errors=None) -> JSONResponse:
    content = {"status": status, "message": message}
    if errors:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content)


async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    messages = getattr(exc, "messages", None) or (exc.args[0] if exc.args else None)
    if isinstance(messages, dict):
        message = "; ".join(str(value) for value in messages.values())
    else:
        message = str(messages or "Resource not found")
    return envelope(404, "fail", message)


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return envelope(400, "fail", "Invalid input", errors=exc.messages)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"] if part != "body") or "body"
        errors.setdefault(field, []).append(error["msg"])
    return envelope(400, "fail", "Invalid input", errors=errors)


async def review_not_allowed_handler(request: Request, exc: ReviewNotAllowed) -> JSONResponse:
    return envelope(403, "fail", str(exc))


async def duplicate_review_handler(request: Request, exc: DuplicateReview) -> JSONResponse:
    return envelope(409, "fail", str(exc))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    status = "fail" if exc.status_code < 500 else "error"
    return envelope(exc.status_code, status, str(exc.detail))


async def upstream_failure_handler(request: Request, exc: UpstreamFailure) -> JSONResponse:
    logger.error("upstream_failure", path=request.url.path, provider=exc.provider, error=str(exc))
    return envelope(502, "error", "An upstream service is unavailable, please try again later")


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_error", path=request.url.path, error=str(exc), exc_info=exc)
    return envelope(500, "error", "Internal server error")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ReviewNotAllowed, review_not_allowed_handler)
    app.add_exception_handler(DuplicateReview, duplicate_review_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(UpstreamFailure, upstream_failure_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
