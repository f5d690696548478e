"""
College Quest - FastAPI Application

Main entry point for the backend API.
Provides college search, similar colleges, favorites and admin endpoints.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from college_quest.config.settings import settings
from college_quest.infrastructure.exceptions import (
    CollegeQuestError,
    ValidationError,
    NotFoundError,
    DuplicateError,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    logger.info(f"College Quest Backend starting in {settings.environment} mode...")

    database_configured = bool(settings.database_url or settings.supabase_password)
    if database_configured:
        from college_quest.infrastructure.db.database import init_db
        await init_db()
        logger.info("Database connection pool initialized")
    else:
        logger.warning("No database configured; data endpoints will fail")

    yield

    if database_configured:
        from college_quest.infrastructure.db.database import close_db
        await close_db()
        logger.info("Database connection pool closed")

    logger.info("College Quest Backend shutting down...")


app = FastAPI(
    title="College Quest",
    description="Search, compare and bookmark US colleges",
    version="1.0.0",
    lifespan=lifespan,
    debug=settings.debug,
)

# CORS configuration from Settings
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Exception Handlers
# ============================================================================

@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    """Handle validation errors."""
    return JSONResponse(
        status_code=400,
        content=exc.to_dict(),
    )


@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError):
    """Handle not found errors."""
    return JSONResponse(
        status_code=404,
        content=exc.to_dict(),
    )


@app.exception_handler(DuplicateError)
async def duplicate_error_handler(request: Request, exc: DuplicateError):
    return JSONResponse(
        status_code=409,
        content=exc.to_dict(),
    )


@app.exception_handler(CollegeQuestError)
async def general_error_handler(request: Request, exc: CollegeQuestError):
    """Handle all other application errors."""
    logger.error(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=500,
        content={
            "error": exc.__class__.__name__,
            "message": "Internal server error",
            "details": {},
        },
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """Driver errors that escaped a repository."""
    logger.error(f"Unhandled database error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "DatabaseError",
            "message": "Internal server error",
            "details": {},
        },
    )


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "college-quest"}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "College Quest API",
        "version": "1.0.0",
        "docs": "/docs",
    }


# ============================================================================
# Import and register routers
# ============================================================================

from college_quest.api.routes import (  # noqa: E402
    admin,
    auth,
    colleges,
    favorites,
    folders,
    me,
    schools,
)

app.include_router(colleges.router)
app.include_router(schools.router)
app.include_router(favorites.router)
app.include_router(folders.router)
app.include_router(me.router)
app.include_router(auth.router)
app.include_router(admin.router)
