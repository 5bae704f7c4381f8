"""Main application file for the Interview Problems API service."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse

from app.utils.config import get_settings
from app.utils.errors import AppError
from app.routers import auth, interviews, problems
from app.middleware.rate_limiter import RateLimitMiddleware
from app.services.generation_client import generation_client
from app.services.mongodb_service import mongodb_service

# Load settings
settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """
    Application lifespan events.
    """
    logger.info("Interview Problems API starting up...")
    await mongodb_service.connect()

    yield

    logger.info("Interview Problems API shutting down...")
    await generation_client.close()
    mongodb_service.disconnect()


app = FastAPI(
    title="Interview Problems API",
    description="Interview scheduling and AI-generated coding problems",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render service errors as structured responses."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers
    )


# Middleware
app.add_middleware(
    RateLimitMiddleware,
    requests_per_minute=settings.rate_limit_per_minute,
    path_prefixes=[f"{API_PREFIX}/problems/generate"],
    trust_forwarded=settings.rate_limit_trust_proxy,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.trusted_hosts)

# Include routers
app.include_router(problems.router, prefix=API_PREFIX, tags=["problems"])
app.include_router(interviews.router, prefix=API_PREFIX, tags=["interviews"])
app.include_router(auth.router, prefix=API_PREFIX, tags=["auth"])


@app.get("/")
async def root():
    """Root endpoint providing basic info about the API."""
    return {
        "message": "Interview Problems API",
        "version": "1.0.0",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    healthy = await mongodb_service.ping()
    return {"status": "healthy" if healthy else "degraded", "database": "mongodb"}
