import sys
import logging
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from slowapi.errors import RateLimitExceeded
from app.api.routes import router
from app.api.projects import router as projects_router
from app.api.metrics import router as metrics_router
from app.core.config import get_settings
from app.core.logging import configure_logging
from app.core.middleware import CorrelationIDMiddleware, TimeoutMiddleware
from app.core.rate_limit import limiter, rate_limit_handler

# Load environment variables
load_dotenv()

# Load and validate configuration
try:
    settings = get_settings()
except Exception as e:
    logging.basicConfig(level=logging.ERROR)
    logging.getLogger(__name__).error(f"Failed to load configuration: {e}")
    sys.exit(1)

configure_logging(settings)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Dashboard Layout Engine API",
    description="Dataset analysis, layout suggestions and canvas editing for dashboard prototypes",
    version="1.0.0"
)

# Store limiter and settings in app state for use in routes
app.state.limiter = limiter
app.state.settings = settings

app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

# Middleware runs in reverse order of registration: correlation id first,
# then timeout, CORS and compression.
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["Content-Type", "Authorization", "X-Correlation-ID"],
    expose_headers=["X-Correlation-ID"]
)
app.add_middleware(TimeoutMiddleware, timeout_seconds=settings.request_timeout_seconds)
app.add_middleware(CorrelationIDMiddleware)

logger.info(f"CORS allowed origins: {settings.allowed_origins_list}")

app.include_router(router, prefix="/api")
app.include_router(projects_router, prefix="/api")
app.include_router(metrics_router, prefix="/api")


@app.get("/")
async def root():
    return {"message": "Dashboard Layout Engine API is running"}

logger.info("Application started successfully")
