"""
TailorReach - AI-assisted CRM

FastAPI application entry point.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.app.api import analysis, campaigns, customers, dashboard, health, messaging, onboarding, products
from backend.app.core.config import get_settings
from backend.app.core.logging import setup_logging, get_logger
from backend.app.middleware.trace import TracingMiddleware

settings = get_settings()

# Initialize logging
setup_logging(level=settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version} (llm_provider={settings.llm_provider})")

    if settings.database_auto_create:
        from backend.app.core.database import create_all_tables
        await create_all_tables()
        logger.info("Database tables ensured")

    yield
    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")

    from backend.app.services.llm_adapter import close_llm_adapter
    await close_llm_adapter()

    from backend.app.core.database import engine
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="Customer-interest scoring and personalised outreach for small sellers",
    version=settings.app_version,
    lifespan=lifespan,
)

# Initialize Tracing
if settings.tracing_enabled:
    from backend.app.core.observability import setup_tracing
    setup_tracing(app)

# Add Middleware
app.add_middleware(TracingMiddleware)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Correlation-ID"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """All error bodies are {"error": message}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    fields = sorted({".".join(str(p) for p in err["loc"] if p != "body") for err in exc.errors()})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Missing required data", "fields": fields},
    )


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(analysis.router, prefix=settings.api_prefix, tags=["Interest Analysis"])
app.include_router(messaging.router, prefix=settings.api_prefix, tags=["Message Drafting"])
app.include_router(onboarding.router, prefix=settings.api_prefix, tags=["Onboarding"])
app.include_router(customers.router, prefix=settings.api_prefix, tags=["Customers"])
app.include_router(products.router, prefix=settings.api_prefix, tags=["Products"])
app.include_router(campaigns.router, prefix=settings.api_prefix, tags=["Campaigns"])
app.include_router(dashboard.router, prefix=settings.api_prefix, tags=["Dashboard"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "AI-assisted CRM",
        "docs": "/docs",
    }
