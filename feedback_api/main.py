from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import feedback_router, register_exception_handlers
from .config import get_settings
from .db.database import get_database
from .db.migrations import init_db, ping
from .log import setup_logging
from .middleware.rate_limit import RateLimitMiddleware

logger = logging.getLogger(__name__)


def _resolve_cors_options() -> tuple[list[str], bool, list[str], list[str]]:
    settings = get_settings()
    allow_origins = settings.cors_allow_origins or ["*"]
    allow_credentials = settings.cors_allow_credentials

    if "*" in allow_origins and allow_credentials:
        logger.warning(
            "CORS_ALLOW_CREDENTIALS is true while CORS_ALLOW_ORIGINS contains '*'; forcing credentials=false"
        )
        allow_credentials = False

    return (
        allow_origins,
        allow_credentials,
        settings.cors_allow_methods or ["*"],
        settings.cors_allow_headers or ["*"],
    )


@asynccontextmanager
async def _lifespan(_: FastAPI):
    init_db(get_database())
    logger.info("Database ready")
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(
        log_dir=Path(settings.log_dir) if settings.log_dir else None,
        level=settings.log_level,
        json_format=settings.log_json,
    )

    app = FastAPI(title="Feedback API", lifespan=_lifespan)

    allow_origins, allow_credentials, allow_methods, allow_headers = _resolve_cors_options()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=allow_credentials,
        allow_methods=allow_methods,
        allow_headers=allow_headers,
    )

    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=settings.rate_limit_rpm,
        submit_rpm=settings.submit_rate_limit_rpm,
        trust_forwarded=settings.trust_forwarded_for,
    )

    register_exception_handlers(app)
    app.include_router(feedback_router)

    @app.get("/health")
    def health() -> dict:
        checks: dict[str, str] = {}
        overall = "ok"
        try:
            ping()
            checks["database"] = "ok"
        except Exception as exc:
            checks["database"] = f"error: {exc}"
            overall = "degraded"
        return {"status": overall, "checks": checks}

    return app


app = create_app()

__all__ = ["create_app", "app"]
