from contextlib import asynccontextmanager
import traceback

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from stockroom.core.config import settings
from stockroom.core.response_utils import fail
from stockroom.core.logging_config import LoggingConfig, get_logger
from stockroom.core.error_codes import BizCode, HTTP_MAPPING
from stockroom.core.exceptions import (
    BusinessException,
    ValidationException,
    ResourceNotFoundException,
    PermissionDeniedException,
    AuthenticationException,
    AuthorizationException,
)
from stockroom.core.sensitive_filter import SensitiveDataFilter
from stockroom.controllers import manager_router

# Initialize logging system
LoggingConfig.setup_logging()
logger = get_logger(__name__)


def _upgrade_database():
    import subprocess

    logger.info("Upgrading database schema...")
    try:
        result = subprocess.run(
            ["alembic", "upgrade", "head"],
            capture_output=True,
            text=True,
            check=True
        )
        logger.info(f"Database upgraded: {result.stdout}")
    except subprocess.CalledProcessError as e:
        logger.error(f"Database upgrade failed: {e.stderr}")
        raise RuntimeError(f"Database upgrade failed: {e.stderr}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: schema, then the initial administrator."""
    from stockroom.db import Base, SessionLocal, engine
    from stockroom.services.user_service import create_initial_admin
    import stockroom.models  # noqa: F401

    if settings.DB_AUTO_UPGRADE:
        _upgrade_database()
    else:
        logger.info("Automatic database upgrade disabled (DB_AUTO_UPGRADE=false)")

    if settings.DB_AUTO_CREATE:
        Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        create_initial_admin(db)
    finally:
        db.close()

    logger.info("Application startup complete")
    yield
    logger.info("Application shutting down")


app = FastAPI(
    title="stockroom",
    description="Warehouse user and permission service",
    version="1.0.0",
    lifespan=lifespan,
)

allowed_origins = list({o for o in ([settings.WEB_URL] + settings.CORS_ORIGINS) if o})

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/", tags=["General"])
def read_root():
    """
    A simple health check endpoint.
    """
    logger.debug("Health check")
    return {"message": "FastAPI is running"}


app.include_router(manager_router, prefix="/api")

logger.info("Routes registered")


def _biz_code(exc: BusinessException, default: BizCode) -> BizCode:
    raw_code = exc.code
    if isinstance(raw_code, BizCode):
        return raw_code
    if isinstance(raw_code, int):
        try:
            return BizCode(raw_code)
        except ValueError:
            return default
    return default


def _log_extra(request: Request, exc: BusinessException, context: dict) -> dict:
    return {
        "path": request.url.path,
        "method": request.method,
        "context": context,
        "error_code": exc.code.value if isinstance(exc.code, BizCode) else exc.code,
        "cause": str(exc.cause) if exc.cause else None
    }


def _business_response(exc: BusinessException, biz_code: BizCode) -> JSONResponse:
    filtered_message, _ = SensitiveDataFilter.filter_message(exc.message, exc.context)
    return JSONResponse(
        status_code=HTTP_MAPPING.get(biz_code, 400),
        content=fail(code=biz_code.value, msg=filtered_message, error=filtered_message)
    )


@app.exception_handler(ValidationException)
async def validation_exception_handler(request: Request, exc: ValidationException):
    filtered_message, filtered_context = SensitiveDataFilter.filter_message(exc.message, exc.context)
    logger.warning(f"Validation error: {filtered_message}", extra=_log_extra(request, exc, filtered_context))
    return _business_response(exc, _biz_code(exc, BizCode.VALIDATION_FAILED))


@app.exception_handler(ResourceNotFoundException)
async def not_found_exception_handler(request: Request, exc: ResourceNotFoundException):
    filtered_message, filtered_context = SensitiveDataFilter.filter_message(exc.message, exc.context)
    logger.info(f"Resource not found: {filtered_message}", extra=_log_extra(request, exc, filtered_context))
    return _business_response(exc, _biz_code(exc, BizCode.NOT_FOUND))


@app.exception_handler(PermissionDeniedException)
async def permission_denied_handler(request: Request, exc: PermissionDeniedException):
    filtered_message, filtered_context = SensitiveDataFilter.filter_message(exc.message, exc.context)
    logger.warning(f"Permission denied: {filtered_message}", extra=_log_extra(request, exc, filtered_context))
    return _business_response(exc, _biz_code(exc, BizCode.PERMISSION_DENIED))


@app.exception_handler(AuthenticationException)
async def authentication_exception_handler(request: Request, exc: AuthenticationException):
    filtered_message, filtered_context = SensitiveDataFilter.filter_message(exc.message, exc.context)
    logger.warning(f"Authentication error: {filtered_message}", extra=_log_extra(request, exc, filtered_context))
    return _business_response(exc, _biz_code(exc, BizCode.UNAUTHORIZED))


@app.exception_handler(AuthorizationException)
async def authorization_exception_handler(request: Request, exc: AuthorizationException):
    filtered_message, filtered_context = SensitiveDataFilter.filter_message(exc.message, exc.context)
    logger.warning(f"Authorization error: {filtered_message}", extra=_log_extra(request, exc, filtered_context))
    return _business_response(exc, _biz_code(exc, BizCode.FORBIDDEN))


@app.exception_handler(BusinessException)
async def business_exception_handler(request: Request, exc: BusinessException):
    """Any other business error, mapped through its code."""
    filtered_message, filtered_context = SensitiveDataFilter.filter_message(exc.message, exc.context)
    logger.error(
        f"Business error: {filtered_message}",
        extra=_log_extra(request, exc, filtered_context),
        exc_info=exc.cause is not None
    )
    return _business_response(exc, _biz_code(exc, BizCode.BAD_REQUEST))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Request body or query did not validate."""
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    message = SensitiveDataFilter.filter_string("; ".join(
        f"{'.'.join(str(part) for part in e['loc'])}: {e['msg']}" for e in errors
    ))
    logger.warning(f"Request validation failed: {message}", extra={"path": request.url.path, "method": request.method})
    return JSONResponse(
        status_code=HTTP_MAPPING[BizCode.VALIDATION_FAILED],
        content=fail(code=BizCode.VALIDATION_FAILED.value, msg="Request validation failed", error=message)
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Convert HTTPException into the common envelope."""
    filtered_detail = SensitiveDataFilter.filter_string(str(exc.detail))

    logger.warning(
        f"HTTP exception: {filtered_detail}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "status_code": exc.status_code
        }
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=fail(code=exc.status_code, msg=filtered_detail, error=filtered_detail),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled exception: {exc}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
            "traceback": traceback.format_exc()
        },
        exc_info=True
    )

    # Hide details in production
    if settings.ENVIRONMENT == "production":
        message = "Internal server error, please retry later"
    else:
        message = SensitiveDataFilter.filter_string(str(exc))

    return JSONResponse(
        status_code=500,
        content=fail(code=BizCode.INTERNAL_ERROR.value, msg=message, error=message)
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
