"""
Career Guidance Platform - Main Application

FastAPI backend connecting students, institutions, companies and admins:
- MongoDB document store (or the in-memory store for local runs)
- JWT authentication
- Course admissions with single-offer exclusivity
- Job matching: qualification gating and applicant ranking

Run: uvicorn app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.routes import api_router
from app.core.config import get_settings
from app.core.errors import InternalError, PlatformError
from app.core.logging_config import setup_logging
from app.schemas.schemas import ErrorResponse

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and, for MongoDB, create indexes on startup."""
    setup_logging()
    if settings.storage_backend.lower() == "mongo":
        from app.db.mongodb import init_mongo_indexes
        try:
            init_mongo_indexes()
        except Exception as e:
            logger.warning("MongoDB index initialization failed: %s", e)
    logger.info("Career Guidance Platform started (storage: %s)", settings.storage_backend)
    yield


# Create FastAPI app
app = FastAPI(
    title="Career Guidance Platform",
    description="""
    Backend for a career-guidance platform.

    ## Features
    - **Authentication**: JWT auth with email verification
    - **Students**: Profile, grades, documents, course and job applications
    - **Institutions**: Faculties, courses, admissions decisions
    - **Companies**: Job postings with ranked, pre-qualified applicants
    - **Admin**: Moderation, course administration, admissions publishing
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================
# ERROR HANDLERS: every error renders {"success": false, "error": "..."}
# ============================================================

def error_response(status_code: int, message: str, **extra) -> JSONResponse:
    content = ErrorResponse(error=message).model_dump()
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(PlatformError)
async def platform_error_handler(request: Request, exc: PlatformError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else first.get("msg", "Invalid request")
    else:
        message = "Invalid request"
    return error_response(400, message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == 404 and message == "Not Found":
        return error_response(404, "Route not found", path=request.url.path)
    return error_response(exc.status_code, message)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    error = InternalError()
    if settings.debug:
        return error_response(error.status_code, error.message, details=str(exc))
    return error_response(error.status_code, error.message)


# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/", tags=["Health"])
async def root():
    return {
        "message": "Career Guidance Platform API",
        "version": "1.0.0",
        "status": "Running",
        "endpoints": {
            "auth": "/api/auth",
            "students": "/api/students",
            "institutions": "/api/institutions",
            "companies": "/api/companies",
            "admin": "/api/admin",
            "public": "/api/public"
        }
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    result = {"status": "healthy", "storage": settings.storage_backend}
    if settings.storage_backend.lower() == "mongo":
        from app.db.mongodb import test_mongo_connection
        result["mongodb"] = "connected" if test_mongo_connection() else "disconnected"
    return result
