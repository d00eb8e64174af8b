"""
learnpath/main.py
FastAPI application: lifespan, middleware, error handlers, routers

Run locally:
    uvicorn learnpath.main:app --reload
"""
import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from learnpath import __version__
from learnpath.config import settings
from learnpath.database import close_db, init_db
from learnpath.errors import (
    ERROR_MAPPING,
    APIError,
    ErrorCode,
    ErrorResponse,
    InternalError,
    RateLimitError,
    ValidationError,
    get_error_summary,
    request_validation_details,
    translate_integrity_error,
)
from learnpath.rate_limit import limiter
from learnpath.routes import router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger(__name__)

settings.validate()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting application...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    try:
        await init_db()
        logger.info("Database connected successfully")
    except Exception as e:
        logger.error(f"Failed to connect to database: {str(e)}")
        raise

    yield

    logger.info("Shutting down application...")
    try:
        await close_db()
    except Exception as e:
        logger.error(f"Error closing database connection: {str(e)}")


app = FastAPI(
    title="LearnPath API",
    description="Learning paths, node outlines, lesson content, quizzes and progress tracking",
    version=__version__,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
    lifespan=lifespan
)

# ============================================
# Rate Limiter
# ============================================
app.state.limiter = limiter

# ============================================
# CORS
# ============================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["*"],
)


# ============================================
# Error Handlers
# ============================================

@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError):
    logger.warning(f"API error on {request.method} {request.url.path}: {exc.code} - {exc.message}")
    return exc.to_response()


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = request_validation_details(exc.errors())
    logger.warning(f"Validation error on {request.url.path}: {details}")
    return ValidationError("Request validation failed", errors=details).to_response()


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    error = translate_integrity_error(exc)
    logger.warning(f"Integrity error on {request.url.path}: {error.code}")
    return error.to_response()


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(f"Rate limit exceeded on {request.url.path} from {request.client.host if request.client else 'unknown'}")
    return RateLimitError(limit=str(exc.detail)).to_response()


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    error, code = ERROR_MAPPING.get(exc.status_code, ("Error", ErrorCode.INVALID_INPUT))
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": error,
            "message": str(exc.detail),
            "code": code
        },
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    log_id = str(uuid.uuid4())[:8]
    logger.error(
        f"[{log_id}] Unhandled exception on {request.url.path}: {type(exc).__name__}: {str(exc)}",
        exc_info=exc
    )
    return InternalError(log_id=log_id).to_response()


# ============================================
# Health
# ============================================

@app.get("/health", tags=["Health"])
async def health_check():
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "version": __version__
    }


@app.get(f"{settings.API_PREFIX}/errors/health", tags=["Health"])
async def error_handling_health():
    return get_error_summary()


app.include_router(
    router,
    prefix=settings.API_PREFIX,
    responses={code: {"model": ErrorResponse} for code in (400, 401, 403, 404, 409)},
)
