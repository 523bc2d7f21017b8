"""FastAPI application entrypoint. No business logic; only wiring and error mapping."""

from dotenv import load_dotenv

load_dotenv()

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import router as api_router
from app.core.config import Settings, settings
from app.core.errors import AppError, ErrorKind
from app.schemas.auth import ErrorResponse

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def check_jwt_secret(cfg: Settings) -> None:
    """Refuse to run prod on the built-in signing key; warn about it in dev."""
    if not cfg.uses_insecure_jwt_secret:
        return
    if cfg.APP_ENV == "prod":
        raise RuntimeError("JWT_SECRET must be configured when APP_ENV=prod")
    logger.warning("JWT_SECRET is not set; using the insecure built-in default key")


def _error_response(status_code: int, body: ErrorResponse, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


def _expose_details() -> bool:
    return settings.EXPOSE_ERROR_DETAILS and settings.APP_ENV == "dev"


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    """Map a domain error to its status by kind."""
    headers = None
    if exc.kind is ErrorKind.AUTHENTICATION:
        headers = {"WWW-Authenticate": "Bearer"}
    if exc.kind is ErrorKind.INTERNAL:
        logger.error(
            "Request failed with internal error",
            exc_info=exc,
            extra={"path": request.url.path, "code": exc.code},
        )
        detail = repr(exc.__cause__) if _expose_details() and exc.__cause__ else None
        return _error_response(exc.status_code, ErrorResponse(message=exc.message, code=exc.code, detail=detail))
    return _error_response(exc.status_code, ErrorResponse(message=exc.message, code=exc.code), headers)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Unparseable or mistyped bodies are client errors (400), same as missing fields."""
    detail = None
    if exc.errors():
        first = exc.errors()[0]
        loc = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = f"{loc}: {first.get('msg')}" if loc else first.get("msg")
    return _error_response(
        400,
        ErrorResponse(message="Invalid request body", code="VALIDATION_ERROR", detail=detail),
    )


HTTP_ERROR_CODES = {
    404: ("Route not found", "NOT_FOUND"),
    405: ("Method not allowed", "METHOD_NOT_ALLOWED"),
}


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing errors (unknown path, wrong method) in the same body shape as domain errors."""
    message, code = HTTP_ERROR_CODES.get(exc.status_code, (str(exc.detail), "HTTP_ERROR"))
    return _error_response(exc.status_code, ErrorResponse(message=message, code=code), exc.headers)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: generic 500, no internal text unless explicitly enabled in dev."""
    logger.exception("Unhandled error", extra={"path": request.url.path})
    detail = repr(exc) if _expose_details() else None
    return _error_response(
        500,
        ErrorResponse(message="Internal server error", code="INTERNAL_ERROR", detail=detail),
    )


check_jwt_secret(settings)

app = FastAPI(
    title="Storefront Admin API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_exception_handler(AppError, handle_app_error)
app.add_exception_handler(RequestValidationError, handle_request_validation_error)
app.add_exception_handler(StarletteHTTPException, handle_http_exception)
app.add_exception_handler(Exception, handle_unexpected_error)

app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "Storefront Admin API"}
