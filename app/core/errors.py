import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import HTTP_400_BAD_REQUEST

logger = logging.getLogger(__name__)


class ApiError(HTTPException):
    """
    Erreur métier rendue en JSON sous la forme {"error": "...", ...extras}.
    Les extras (raw, detail...) servent au diagnostic côté client.
    """

    def __init__(self, status_code: int, error: str, **extras: Any):
        super().__init__(status_code=status_code, detail={"error": error, **extras})
        self.error = error


def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict) and "error" in detail:
        content = detail
    else:
        content = {"error": str(detail)}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


def describe_validation_error(exc: RequestValidationError) -> str:
    """
    Construit un message court qui nomme le premier champ fautif.
    """
    errors = exc.errors()
    if not errors:
        return "Invalid request"

    first = errors[0]
    # loc = ("body", "material") ou ("body",) si le corps entier manque
    loc = [str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path", "form")]
    field = ".".join(loc) or "body"

    if first.get("type") == "missing":
        return f"Missing required field: {field}"
    if first.get("type") == "string_too_short":
        return f"Missing required field: {field} (empty)"
    return f"Invalid field: {field} ({first.get('msg', 'invalid value')})"


def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = describe_validation_error(exc)
    logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
    return JSONResponse(status_code=HTTP_400_BAD_REQUEST, content={"error": message})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
