"""
FastAPI Application Entry Point - Application initialization and configuration
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import sys
import time

from app.core.config import Settings, get_settings, validate_config
from app.core.exceptions import AppError, field_errors, is_foreign_key_violation, is_unique_violation
from app.database import Database
from app.utils.file_storage import FileStore

# Configure application logging with timestamp and log level
logging.basicConfig(
    level=logging.DEBUG if get_settings().DEBUG else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)

def create_application(config: Optional[Settings] = None) -> FastAPI:
    """
    Factory function to create and configure FastAPI application.
    Tests pass their own Settings; production uses the environment.
    """
    config = config or get_settings()
    app = FastAPI(
        title=config.APP_NAME,
        version=config.APP_VERSION,
        debug=config.DEBUG,
        docs_url="/api/docs" if not config.is_production else None,  # Hide Swagger docs in production
        redoc_url="/api/redoc" if not config.is_production else None,
        description="Multi-user task tracking with PDF attachments",
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.file_store = FileStore(config.UPLOAD_DIR, config.MAX_UPLOAD_SIZE)

    setup_middleware(app, config)  # Configure CORS and request logging
    setup_exception_handlers(app, config)  # Configure global error handling
    setup_routers(app)  # Mount API route handlers

    return app

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: validate config, connect to the store (fixed retry budget), create
    tables. Any failure exits the process instead of serving degraded traffic.
    Shutdown: dispose the connection pool.
    """
    config: Settings = app.state.settings
    logger.info(f"🚀 Starting {config.APP_NAME}...")

    try:
        validate_config(config)
    except ValueError as e:
        logger.error(f"❌ Configuration validation failed: {e}")
        sys.exit(1)

    database = Database(config)
    if not database.wait_until_ready():
        logger.error("❌ Cannot connect to database. Exiting.")
        sys.exit(1)
    try:
        database.init_db()
    except Exception as e:
        logger.error(f"❌ Failed to initialize database: {e}", exc_info=True)
        sys.exit(1)

    app.state.database = database
    app.state.file_store.ensure_root()
    logger.info(f"📊 Database pool: {database.pool_stats()}")
    logger.info("✅ Application started successfully")
    logger.info(f"🌍 Environment: {config.ENVIRONMENT}")

    yield

    logger.info(f"🛑 Shutting down {config.APP_NAME}...")
    database.dispose()
    logger.info("✅ Shutdown complete")

def setup_middleware(app: FastAPI, config: Settings) -> None:
    """Configure application middleware - runs on every request/response"""

    # CORS middleware - allows the front-end to call the API from its own origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log every request with method, path, status, and processing time"""
        start_time = time.time()
        logger.info(f"➡️  {request.method} {request.url.path}")

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            f"⬅️  {request.method} {request.url.path} "
            f"- Status: {response.status_code} - Time: {process_time:.2f}s"
        )
        response.headers["X-Process-Time"] = str(process_time)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        return response

def _log_context(request: Request) -> str:
    actor = getattr(request.state, "user_id", None)
    return f"{request.method} {request.url.path} (user: {actor if actor is not None else 'anonymous'})"

def setup_exception_handlers(app: FastAPI, config: Settings) -> None:
    """Configure global exception handlers - every error leaves as the same envelope"""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        """Known, classified failures raised by routes and services"""
        if exc.status_code >= 500:
            logger.error(f"❌ {exc.message} on {_log_context(request)}")
        else:
            logger.warning(f"⚠️  {exc.status_code} {exc.message} on {_log_context(request)}")
        body = exc.to_dict()
        if config.is_production:
            body.pop("error", None)
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Pydantic validation of bodies, path and query parameters - field -> message map"""
        errors = field_errors(exc)
        logger.warning(f"❌ Validation error on {request.url.path}: {errors}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": "Validation failed", "errors": errors},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
            return JSONResponse(
                status_code=exc.status_code,
                content={"success": False, "message": "Route not found", "path": request.url.path},
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(IntegrityError)
    async def integrity_exception_handler(request: Request, exc: IntegrityError):
        """Constraint violations that escaped a route: duplicates and dangling references"""
        logger.warning(f"⚠️  Integrity error on {_log_context(request)}: {exc.orig}")
        if is_unique_violation(exc):
            return JSONResponse(
                status_code=status.HTTP_409_CONFLICT,
                content={"success": False, "message": "Resource already exists"},
            )
        if is_foreign_key_violation(exc):
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"success": False, "message": "Related resource not found"},
            )
        return await unhandled_exception_handler(request, exc)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        """
        Catch-all for unexpected exceptions.
        Full details go to the log; the client sees them only outside production.
        """
        logger.error(f"❌ Unhandled exception on {_log_context(request)}: {str(exc)}", exc_info=exc)
        if config.is_production:
            content = {"success": False, "message": "Something went wrong"}
        else:
            content = {"success": False, "message": str(exc) or "Internal Server Error", "type": type(exc).__name__}
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)

def setup_routers(app: FastAPI) -> None:
    """Mount API routers and the health check"""

    @app.get("/api/health", tags=["Health"])
    def health_check(request: Request):
        """
        Health check endpoint for monitoring and load balancers.
        Returns process status, timestamp, environment and database connectivity.
        """
        config: Settings = request.app.state.settings
        database: Optional[Database] = getattr(request.app.state, "database", None)
        db_healthy = database is not None and database.check_connection()
        return {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": config.ENVIRONMENT,
            "database": "connected" if db_healthy else "disconnected",
            "version": config.APP_VERSION,
        }

    from app.api import auth, users, tasks, documents
    app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
    app.include_router(users.router, prefix="/api/users", tags=["Users"])
    app.include_router(tasks.router, prefix="/api/tasks", tags=["Tasks"])
    app.include_router(documents.router, prefix="/api/tasks", tags=["Task Documents"])

# Create application instance
app = create_application()

if __name__ == "__main__":
    """
    Direct execution entry point - for development only.
    Production: Use `uvicorn app.main:app --host 0.0.0.0 --port 5000`
    """
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info"
    )
