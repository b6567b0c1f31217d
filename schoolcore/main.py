import asyncio
import logging
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from schoolcore.config import settings
from schoolcore.core.exceptions import (
    CascadeBlockedException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
)
from schoolcore.core.logging import configure_logging
from schoolcore.database import get_session_factory
from schoolcore.routes import (
    audit_routes,
    auth_routes,
    department_routes,
    fee_routes,
    role_routes,
    student_routes,
    teacher_routes,
)
from schoolcore.services.audit_service import AuditRecorder

configure_logging(settings.LOG_LEVEL, settings.JSON_LOGS)
logger = logging.getLogger(__name__)


async def purge_audit_trail_forever(interval: int) -> None:
    """Apply audit retention every `interval` seconds until cancelled"""
    while True:
        try:
            recorder = AuditRecorder(get_session_factory())
            await run_in_threadpool(recorder.purge_expired)
        except Exception:
            logger.error("Audit retention purge failed", exc_info=True)
        await asyncio.sleep(interval)


@asynccontextmanager
async def lifespan(app: FastAPI):
    purge_task = None
    if settings.AUDIT_PURGE_INTERVAL_SECONDS > 0:
        purge_task = asyncio.create_task(
            purge_audit_trail_forever(settings.AUDIT_PURGE_INTERVAL_SECONDS)
        )
    logger.info("%s %s started", settings.APP_NAME, settings.APP_VERSION)
    yield
    if purge_task is not None:
        purge_task.cancel()
        with suppress(asyncio.CancelledError):
            await purge_task


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,  # Disable in production
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# CORS middleware
cors_origins = settings.cors_origins_list
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# Exception handlers
@app.exception_handler(UnauthorizedException)
async def unauthorized_exception_handler(request: Request, exc: UnauthorizedException):
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": str(exc)},
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(NotFoundException)
async def not_found_exception_handler(request: Request, exc: NotFoundException):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(ForbiddenException)
async def forbidden_exception_handler(request: Request, exc: ForbiddenException):
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"detail": str(exc)})


@app.exception_handler(ConflictException)
async def conflict_exception_handler(request: Request, exc: ConflictException):
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


@app.exception_handler(CascadeBlockedException)
async def cascade_blocked_exception_handler(request: Request, exc: CascadeBlockedException):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": str(exc), "count": exc.count},
    )


@app.exception_handler(ValidationException)
async def validation_exception_handler(request: Request, exc: ValidationException):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# Health check endpoint
@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": settings.APP_VERSION}


# Root endpoint
@app.get("/")
async def root():
    return {
        "message": "School Core API",
        "version": settings.APP_VERSION,
        "docs": "/docs" if settings.DEBUG else "Documentation disabled in production",
    }


# Include routers
app.include_router(auth_routes.router, prefix="/api/auth", tags=["Auth"])
app.include_router(teacher_routes.router, prefix="/api/teachers", tags=["Teachers"])
app.include_router(student_routes.router, prefix="/api/students", tags=["Students"])
app.include_router(department_routes.router, prefix="/api/departments", tags=["Departments"])
app.include_router(fee_routes.router, prefix="/api/fees", tags=["Fees"])
app.include_router(role_routes.router, prefix="/api/roles", tags=["Roles"])
app.include_router(audit_routes.router, prefix="/api/audit-logs", tags=["Audit"])
