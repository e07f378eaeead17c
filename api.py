"""
GiftTech Innovators API

Main entry point for the course platform backend.
"""

import logging
import sys
import time
from contextlib import asynccontextmanager

from bson.errors import InvalidId
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError
from starlette.exceptions import HTTPException as StarletteHTTPException

# Common library imports
from common.database import MongoDB, set_main_database
from common.utils import APIException, error_response, success_response

# App-specific imports
from academy.config import settings
from academy.routers import auth_router, courses_router, users_router
from academy.services import COURSE_INDEXES, USER_INDEXES
from academy.dependencies import init_all_services, get_jwt_auth, get_user_service


# =============================================================================
# Logging Configuration
# =============================================================================
def setup_logging() -> logging.Logger:
    """Configure logging for the application."""
    log_level = logging.DEBUG if settings.DEBUG else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    log_format = "%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Suppress verbose third-party logs
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    return logging.getLogger(__name__)


logger = setup_logging()


# =============================================================================
# Database Instance
# =============================================================================
main_db = MongoDB()


async def bootstrap_admin() -> None:
    """Create the configured admin account if it does not exist yet."""
    if not (settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD):
        return

    jwt_auth = get_jwt_auth()
    admin = await get_user_service().ensure_admin(
        name=settings.ADMIN_NAME,
        email=settings.ADMIN_EMAIL,
        password_hash=jwt_auth.hash_password(settings.ADMIN_PASSWORD),
    )
    logger.info(f"Admin account ready: {admin['_id']}")


# =============================================================================
# Application Lifespan
# =============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown tasks like database connections
    and service initialization.
    """
    logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})...")
    settings.validate_required()

    await main_db.connect(
        uri=settings.MONGODB_URI,
        database_name=settings.MONGODB_DATABASE,
        indexes={"courses": COURSE_INDEXES, "users": USER_INDEXES},
        server_selection_timeout_ms=settings.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
    )
    set_main_database(main_db)

    init_all_services(db=main_db.db, client=main_db.client)
    logger.info("All services initialized")

    await bootstrap_admin()

    if settings.MONGODB_TRANSACTIONS:
        logger.info("Multi-document transactions enabled")

    logger.info(f"{settings.APP_NAME} started on port {settings.PORT}")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")
    await main_db.disconnect()
    logger.info("Shutdown complete")


# =============================================================================
# FastAPI Application
# =============================================================================
app = FastAPI(
    title=settings.APP_NAME,
    description="Online course platform: catalog, enrollment and lesson progress",
    version=settings.APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.is_development() else None,
    redoc_url="/redoc" if settings.is_development() else None,
)

# =============================================================================
# Middleware
# =============================================================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    response.headers["X-Process-Time"] = f"{time.time() - start_time:.4f}"
    return response


# =============================================================================
# Exception Handlers
# =============================================================================
@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    else:
        logger.debug(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")

    details = exc.detail.get("details") if isinstance(exc.detail, dict) else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.message, code=exc.code, details=details, errors=exc.errors),
        headers=exc.headers,
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(message),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(location), "message": error.get("msg", "Invalid value")})

    logger.warning(f"Validation error on {request.url.path}: {errors}")
    return JSONResponse(
        status_code=400,
        content=error_response("Validation failed", code="VALIDATION_ERROR", errors=errors),
    )


@app.exception_handler(InvalidId)
async def invalid_id_handler(request: Request, exc: InvalidId):
    return JSONResponse(
        status_code=400,
        content=error_response("Invalid ID", code="INVALID_ID"),
    )


@app.exception_handler(DuplicateKeyError)
async def duplicate_key_handler(request: Request, exc: DuplicateKeyError):
    logger.warning(f"Duplicate key on {request.url.path}: {exc.details}")
    return JSONResponse(
        status_code=400,
        content=error_response("Resource already exists", code="DUPLICATE_KEY"),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=error_response("Internal server error", code="INTERNAL_ERROR"),
    )


# =============================================================================
# Include Routers
# =============================================================================
app.include_router(auth_router, prefix=settings.API_PREFIX)
app.include_router(courses_router, prefix=settings.API_PREFIX)
app.include_router(users_router, prefix=settings.API_PREFIX)


# =============================================================================
# Health Check Endpoints
# =============================================================================
@app.get("/", tags=["Health"])
async def root():
    """Welcome message."""
    return success_response(message=f"Welcome to {settings.APP_NAME}")


@app.get("/health", tags=["Health"])
@app.get(f"{settings.API_PREFIX}/health", tags=["Health"])
async def health():
    """
    Health check endpoint.

    Returns the status of the API and the database connection.
    """
    database_ok = await main_db.ping()
    return success_response({
        "status": "ok" if database_ok else "degraded",
        "version": settings.APP_VERSION,
        "database": database_ok,
    })


# =============================================================================
# Run with Uvicorn
# =============================================================================
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development(),
    )
