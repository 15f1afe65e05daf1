import structlog
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.api import blog, bookings, case_studies, inquiries, newsletter, pricing, testimonials
from app.config import get_settings
from app.database import get_engine, init_db
from app.logging_config import configure_logging
from app.middleware.request_id import RequestIdMiddleware
from app.services.client_storage import cleanup_client_storage

# Configure structured logging
configure_logging()
logger = structlog.get_logger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info("Database initialized")
    if not settings.redis_url:
        logger.warning("REDIS_URL not set - client drafts and submission quotas kept in process memory")
    if not settings.notification_endpoint:
        logger.warning("Notification endpoint not configured - inquiry emails disabled")

    yield

    await cleanup_client_storage()
    logger.info("Shutting down...")


app = FastAPI(
    title="Rare Find Talent API",
    description="Lead capture for the Rare Find Talent website: consultations, bookings, newsletter, pricing",
    version="0.1.0",
    lifespan=lifespan,
    docs_url=None if settings.app_env == "production" else "/docs",
    redoc_url=None if settings.app_env == "production" else "/redoc",
    openapi_url=None if settings.app_env == "production" else "/openapi.json",
)

# Prometheus metrics
if settings.prometheus_enabled:
    from prometheus_fastapi_instrumentator import Instrumentator

    Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        excluded_handlers=["/health", "/metrics"],
    ).instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)

# CORS middleware - allow both www and non-www versions
cors_origins = [
    settings.frontend_url,
    "http://localhost:5173",
]
if "://www." not in settings.frontend_url:
    cors_origins.append(settings.frontend_url.replace("://", "://www."))
else:
    cors_origins.append(settings.frontend_url.replace("://www.", "://"))

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization", "X-Client-ID"],
)

app.add_middleware(RequestIdMiddleware)

# Include routers
app.include_router(inquiries.router, prefix="/api")
app.include_router(newsletter.router, prefix="/api")
app.include_router(bookings.router, prefix="/api")
app.include_router(pricing.router, prefix="/api")
app.include_router(blog.router, prefix="/api")
app.include_router(testimonials.router, prefix="/api")
app.include_router(case_studies.router, prefix="/api")


@app.get("/")
async def root():
    if settings.app_env == "production":
        return {"status": "ok"}
    return {
        "message": "Rare Find Talent API",
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    """Health check endpoint that verifies database connectivity."""
    try:
        engine = get_engine()
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return {"status": "healthy", "database": "connected"}
    except (SQLAlchemyError, OSError, ConnectionError, TimeoutError) as e:
        logger.warning(f"Health check failed: {type(e).__name__}: {e}")
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "database": "disconnected"}
        )
