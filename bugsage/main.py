"""FastAPI application entrypoint. No business logic; only wiring, middleware and error envelopes."""

from dotenv import load_dotenv

load_dotenv()

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from bugsage.api.v1 import router as api_router
from bugsage.core.config import settings
from bugsage.core.errors import BugSageError, InternalError, MethodNotAllowed
from bugsage.schemas.common import ErrorEnvelope

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="BugSage API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Credentialed cross-origin requests only for an explicit origin list, never for "*".
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials="*" not in settings.CORS_ALLOW_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorEnvelope(message=message).model_dump(),
    )


@app.exception_handler(BugSageError)
async def handle_bugsage_error(request: Request, exc: BugSageError) -> JSONResponse:
    return _error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report only the first problem, like the service-level checks do."""
    errors = exc.errors()
    if not errors:
        return _error_response(400, "Invalid request")
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return _error_response(400, f"{field}: {message}" if field else message)


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 405:
        return _error_response(405, MethodNotAllowed().message)
    return _error_response(exc.status_code, str(exc.detail))


@app.exception_handler(SQLAlchemyError)
async def handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Database detail stays in the server log; the caller gets a generic message."""
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return _error_response(InternalError.status_code, InternalError().message)


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Last resort for anything the handlers above do not cover."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(InternalError.status_code, InternalError().message)


app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/")
def root() -> dict[str, str | bool]:
    """Root route; minimal payload for discovery."""
    return {"success": True, "message": "BugSage API"}
