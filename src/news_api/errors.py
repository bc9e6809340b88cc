"""Map domain errors onto JSON error responses."""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ingest_articles.errors import IngestError
from retrieve_articles.errors import RetrievalError

logger = logging.getLogger(__name__)

STATUS_BY_CODE = {
    "AUTHENTICATION_REQUIRED": 401,
    "PROFILE_NOT_FOUND": 404,
    "ARTICLE_NOT_FOUND": 404,
    "RSS_SOURCE_NOT_FOUND": 404,
    "RSS_SOURCE_INACTIVE": 409,
    "DUPLICATE_URL": 409,
    "TOPIC_NOT_FOUND": 404,
    "ARTICLE_ALREADY_EXISTS": 409,
    "INVALID_TOPIC_IDS": 422,
    "VALIDATION_ERROR": 422,
}


def error_response(message: str, code: str, status_code: int | None = None, **extra) -> JSONResponse:
    body = {
        "error": message,
        "code": code,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        **extra,
    }
    return JSONResponse(status_code=status_code or STATUS_BY_CODE.get(code, 500), content=jsonable_encoder(body))


async def _domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
    code = getattr(exc, "code", "INTERNAL_ERROR")
    message = getattr(exc, "message", str(exc))
    if STATUS_BY_CODE.get(code, 500) >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, message, code)
    return error_response(message, code)


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response("Invalid request parameters", "VALIDATION_ERROR", details=exc.errors())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RetrievalError, _domain_error_handler)
    app.add_exception_handler(IngestError, _domain_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
