# =============================================
# workhub/main.py
# =============================================
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
import time
import uvicorn

from workhub.api.v1.router import api_router
from workhub.config.database import check_database_health, close_database, init_database
from workhub.config.settings import get_settings, validate_environment
from workhub.core.exception_handlers import register_exception_handlers
from workhub.services.otp_service import close_otp_store
from workhub.services.notification_service import notification_hub

# =============================================
# SETTINGS
# =============================================
settings = get_settings()

# =============================================
# LOGGING CONFIGURATION
# =============================================
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)

# =============================================
# LIFESPAN CONTEXT MANAGER
# =============================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events"""
    logger.info(f"Starting {settings.APP_NAME} v{settings.VERSION} ({settings.ENVIRONMENT})")
    validate_environment()
    await init_database()
    logger.info(f"{settings.APP_NAME} started successfully")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")
    await notification_hub.flush()
    await close_otp_store()
    await close_database()
    logger.info(f"{settings.APP_NAME} shut down successfully")

# =============================================
# FASTAPI APPLICATION
# =============================================
app = FastAPI(
    title=settings.APP_NAME,
    description="""
    Job marketplace backend connecting workers and employers.

    ## Main Features

    * **Phone login**: OTP verification with JWT bearer tokens
    * **Jobs**: posting, editing, search with filters and sorting
    * **Applications**: apply, status workflow with history, interviews, withdrawal
    * **Statistics**: employer and worker dashboards
    * **Notifications**: WebSocket push for new applications and status changes
    """,
    version=settings.VERSION,
    openapi_tags=[
        {"name": "Authentication", "description": "OTP login and current user"},
        {"name": "Jobs", "description": "Job posting, search and lifecycle"},
        {"name": "Job Applications", "description": "Application workflow"},
        {"name": "Notifications", "description": "Real-time push channel"},
        {"name": "Health", "description": "Health checks and API status"},
    ],
    lifespan=lifespan,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
)

# =============================================
# MIDDLEWARE CONFIGURATION
# =============================================

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request and add processing time to response headers"""
    start_time = time.time()
    logger.info(f"Request: {request.method} {request.url.path}")

    response = await call_next(request)

    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = f"{process_time:.4f}"
    logger.info(
        f"Response: {request.method} {request.url.path} - "
        f"Status: {response.status_code} - Time: {process_time:.4f}s"
    )
    return response

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Process-Time"],
)

# =============================================
# EXCEPTION HANDLERS
# =============================================
register_exception_handlers(app)

# =============================================
# ROUTERS
# =============================================
app.include_router(api_router, prefix="/api/v1")

# =============================================
# BASIC ROUTES
# =============================================
@app.get("/", tags=["Health"])
async def root():
    return {
        "message": settings.APP_NAME,
        "version": settings.VERSION,
        "docs": "/docs",
        "health": "/health"
    }

@app.get("/health", tags=["Health"])
async def health():
    database_ok = await check_database_health()
    return {
        "status": "healthy" if database_ok else "degraded",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "database": "connected" if database_ok else "disconnected"
    }

# =============================================
# DEVELOPMENT SERVER
# =============================================
if __name__ == "__main__":
    uvicorn.run(
        "workhub.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
