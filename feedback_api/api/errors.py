from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


def _format_errors(errors: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    details = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        details.append(
            {
                "field": ".".join(loc),
                "message": error.get("msg", "Invalid value"),
                "type": error.get("type"),
            }
        )
    return details


def validation_failed(errors: Iterable[Mapping[str, Any]]) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "Validation failed", "details": _format_errors(errors)},
    )


def not_found(message: str = "Feedback not found") -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": message})


def internal_error() -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected request to %s: %s", request.url.path, exc.errors())
    return validation_failed(exc.errors())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_handler)


__all__ = [
    "validation_failed",
    "not_found",
    "internal_error",
    "request_validation_handler",
    "register_exception_handlers",
]
