# This project was developed with assistance from AI tools.
"""FastAPI application entry point."""

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .core.config import settings
from .routes import applications, categories, decisions, eligibility, form_fields, health, loans, otp
from .schemas.error import ErrorResponse, FieldErrorItem
from .services.errors import LoanDeskError, ValidationFailed
from .services.notifier import init_notifier, log_notifier_status
from .services.storage import init_storage_service

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application startup/shutdown lifecycle."""
    init_storage_service(settings)
    init_notifier(settings)
    log_notifier_status(settings)
    if settings.AUTH_DISABLED:
        logger.warning("AUTH_DISABLED is set -- every request runs as a dev admin")
    yield


app = FastAPI(
    title="LoanDesk API",
    description="Loan catalog, application intake and review",
    version=__version__,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
)

_HTTP_STATUS_TITLES: dict[int, str] = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    409: "Conflict",
    413: "Payload Too Large",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
}


def _request_id(request: Request) -> str:
    return request.headers.get("x-request-id", str(uuid.uuid4()))


def _build_error(
    status_code: int,
    detail: str,
    request: Request,
    *,
    title: str | None = None,
    errors: list[FieldErrorItem] | None = None,
) -> ErrorResponse:
    return ErrorResponse(
        type="about:blank",
        title=title or _HTTP_STATUS_TITLES.get(status_code, "Error"),
        status=status_code,
        detail=detail,
        request_id=_request_id(request),
        instance=request.url.path,
        errors=errors or [],
    )


@app.exception_handler(LoanDeskError)
async def domain_exception_handler(request: Request, exc: LoanDeskError):
    """Convert domain errors raised by services to RFC 7807 Problem Details."""
    errors = None
    if isinstance(exc, ValidationFailed):
        errors = [FieldErrorItem(field=e.field, message=e.message) for e in exc.errors]
    body = _build_error(exc.status_code, exc.detail, request, title=exc.title, errors=errors)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Convert HTTPException to RFC 7807 Problem Details."""
    body = _build_error(exc.status_code, str(exc.detail), request)
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Convert Pydantic validation errors to RFC 7807 Problem Details."""
    errors = [
        FieldErrorItem(field=".".join(str(p) for p in err["loc"] if p != "body"), message=err["msg"])
        for err in exc.errors()
    ]
    body = _build_error(422, "Request validation failed", request, errors=errors)
    return JSONResponse(status_code=422, content=body.model_dump())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all for unhandled exceptions -- log and return 500."""
    body = _build_error(500, "An unexpected error occurred.", request)
    logger.exception("Unhandled exception (request_id=%s)", body.request_id)
    return JSONResponse(status_code=500, content=body.model_dump())


# Include routers
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(otp.router, prefix="/api/otp", tags=["otp"])
app.include_router(loans.router, prefix="/api/loans", tags=["loans"])
app.include_router(categories.router, prefix="/api/categories", tags=["categories"])
app.include_router(form_fields.router, prefix="/api/form-fields", tags=["form-fields"])
app.include_router(applications.router, prefix="/api/applications", tags=["applications"])
app.include_router(decisions.router, prefix="/api/applications", tags=["decisions"])
app.include_router(eligibility.router, prefix="/api/eligibility", tags=["eligibility"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint"""
    return {"message": "Welcome to the LoanDesk API"}
