import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Import all models to ensure they're registered with SQLAlchemy Base
from . import models, models_inventory, models_invoice  # noqa: F401
from .config import APP_NAME, FRONTEND_URL
from .database import Base, engine
from .domain.auth.router import router as auth_router
from .domain.booking_requests.router import router as booking_requests_router
from .domain.checkins.router import router as checkins_router
from .domain.cleaning_plans.router import router as cleaning_plans_router
from .domain.company.router import router as company_router
from .domain.customer_portal.router import router as customer_portal_router
from .domain.customers.router import router as customers_router
from .domain.dashboard.router import router as dashboard_router
from .domain.employee_portal.router import router as employee_portal_router
from .domain.employees.router import router as employees_router
from .domain.equipment.router import router as equipment_router
from .domain.event_log.router import router as event_log_router
from .domain.feedback.router import router as feedback_router
from .domain.invoices.router import router as invoices_router
from .domain.jobs.router import router as jobs_router
from .domain.payments.router import router as payments_router
from .domain.shift_swaps.router import router as shift_swaps_router
from .domain.supplies.router import router as supplies_router
from .domain.time_off.router import router as time_off_router
from .security_headers import SecurityHeadersMiddleware

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"
API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")

    try:
        from .rate_limiter import get_redis_client

        redis_client = get_redis_client()
        if redis_client is None:
            logger.info("ℹ️ REDIS_URL not set - rate limits and login codes use process memory")
        else:
            redis_client.ping()
            logger.info("Redis connection established")
    except Exception as e:
        logger.warning(f"Redis connection failed - falling back to process memory: {e}")

    yield
    logger.info("Application shutting down...")


app = FastAPI(title=f"{APP_NAME} API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Convert 422 validation errors from HTTPBearer to 401 authentication errors
    when the issue is with the Authorization header
    """
    for error in exc.errors():
        if error.get("loc") and "authorization" in str(error.get("loc")).lower():
            logger.warning(
                f"Authentication failed for {request.url.path}: Missing or invalid Authorization header"
            )
            return JSONResponse(
                status_code=401,
                content={
                    "detail": "Not authenticated. Please provide a valid Bearer token in the Authorization header."
                },
            )

    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


if SECURITY_HEADERS_ENABLED:
    app.add_middleware(SecurityHeadersMiddleware, exclude_paths=["/health", "/docs", "/openapi.json"])
    logger.info("Security headers enabled")
else:
    logger.warning("Security headers DISABLED - only use in development!")


# CORS Configuration
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", f"{FRONTEND_URL},http://localhost:3000").split(",")
logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
for router in (
    auth_router,
    company_router,
    customers_router,
    employees_router,
    cleaning_plans_router,
    jobs_router,
    employee_portal_router,
    checkins_router,
    invoices_router,
    payments_router,
    feedback_router,
    equipment_router,
    supplies_router,
    time_off_router,
    shift_swaps_router,
    dashboard_router,
    customer_portal_router,
    booking_requests_router,
    event_log_router,
):
    app.include_router(router, prefix=API_PREFIX)


@app.get("/")
def root():
    return {"message": f"{APP_NAME} API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
