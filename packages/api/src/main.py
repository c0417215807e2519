# This project was developed with assistance from AI tools.
"""FastAPI application entry point."""

import logging
import uuid
from contextlib import asynccontextmanager
from http import HTTPStatus

from db.database import db_service
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .admin import setup_admin
from .core.config import settings
from .routes import (
    admin,
    audit,
    beneficiaries,
    clients,
    documents,
    health,
    insurers,
    invite_portal,
    policies,
    receipts,
)
from .schemas.error import ErrorResponse
from .services.email import log_email_status
from .services.storage import init_storage_service, log_storage_status

REQUEST_ID_HEADER = "X-Request-ID"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    log_email_status(settings)
    log_storage_status(settings)
    await init_storage_service(settings).ensure_bucket()
    yield
    await db_service.close()


app = FastAPI(
    title="HeirVault API",
    description="Life insurance and beneficiary registry with tamper-evident receipts",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
    expose_headers=[REQUEST_ID_HEADER],
)


def _problem(request: Request, status_code: int, detail: str) -> JSONResponse:
    """Problem Details (RFC 7807) body, echoing or minting the request id."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    try:
        title = HTTPStatus(status_code).phrase
    except ValueError:
        title = "Error"
    body = ErrorResponse(
        title=title,
        status=status_code,
        detail=detail,
        request_id=request_id,
        instance=request.url.path,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(),
        headers={REQUEST_ID_HEADER: request_id},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    response = _problem(request, exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return _problem(request, 422, str(exc.errors()))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Log with the request id; clients only see a generic 500."""
    response = _problem(request, 500, "An unexpected error occurred.")
    logger.exception(
        "Unhandled %s on %s %s (request_id=%s)",
        type(exc).__name__,
        request.method,
        request.url.path,
        response.headers[REQUEST_ID_HEADER],
    )
    return response


_ROUTERS = (
    (health.router, "/health", "health"),
    (clients.router, "/api/clients", "clients"),
    (policies.router, "/api/policies", "policies"),
    (beneficiaries.router, "/api/beneficiaries", "beneficiaries"),
    (insurers.router, "/api/insurers", "insurers"),
    (documents.router, "/api", "documents"),
    (receipts.router, "/api", "receipts"),
    (audit.router, "/api/audit", "audit"),
    (invite_portal.router, "/api/invite", "invite"),
    (admin.router, "/api/admin", "admin"),
)
for router, prefix, tag in _ROUTERS:
    app.include_router(router, prefix=prefix, tags=[tag])

setup_admin(app)


@app.get("/")
async def root() -> dict[str, str]:
    return {"service": settings.APP_NAME, "docs": "/docs"}
