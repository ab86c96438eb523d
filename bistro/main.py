"""FastAPI entrypoint for the ordering and reservation API."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from bistro.api.v1.api import api_router
from bistro.core.config import settings
from bistro.core.errors import DomainError
from bistro.db import session as db_session
from bistro.db.base import Base
from bistro.db.seed import ensure_default_tables
from bistro.services.idempotency import purge_expired

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, debug=settings.debug)
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def startup() -> None:
    Base.metadata.create_all(bind=db_session.engine)
    with db_session.SessionLocal() as session:
        try:
            ensure_default_tables(session)
            purged: int = purge_expired(session)
            if purged:
                logger.info("[BOOTSTRAP] Purged %s expired idempotency keys", purged)
        except Exception:
            logger.exception("[BOOTSTRAP] Seed/bootstrap failed; continuing startup.")


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("[API] %s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: list[dict[str, str]] = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())[1:]),
            "message": str(error.get("msg", "Invalid value.")),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "code": "validation_error",
            "message": errors[0]["message"] if errors else "Invalid data.",
            "errors": errors,
        },
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("[API] Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "code": "internal_error",
            "message": "Something went wrong while processing the request.",
            "errors": [],
        },
    )


@app.get("/")
def root() -> dict[str, str]:
    return {"name": settings.app_name, "status": "ok"}
