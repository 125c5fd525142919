"""
FastAPI Application - Main Entry Point

REST API exposing the price-time and pro-rata order matchers.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from orderbook_matcher.api.models import ErrorResponse, HealthResponse
from orderbook_matcher.api.routes import matching
from orderbook_matcher.config import get_settings
from orderbook_matcher.services.matching_service import MatchingService
from orderbook_matcher.utils.exceptions import (
    BaseMatchingEngineException,
    UnknownPolicyException,
    ValidationException,
)

API_VERSION = "1.0.0"

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Global instances
matching_service: MatchingService = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    Initializes the matching service on startup unless one was installed
    beforehand (tests do this).
    """
    global matching_service

    logger.info("Starting Orderbook Matcher API")

    if matching_service is None:
        matching_service = MatchingService(get_settings())
    matching.set_matching_service(matching_service)

    logger.info("API startup complete")

    yield

    logger.info("API shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Orderbook Matcher API",
    description="""
    Batch order matching under interchangeable allocation policies.

    ## Policies
    * **price_time**: best price first, earlier arrival breaking ties, sequential fills
    * **pro_rata**: proportional split per exact notional with largest-remainder rounding

    ## Endpoints
    * **POST /api/v1/match**: Match a batch of orders
    * **GET /api/v1/policies**: List policies
    """,
    version=API_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request ID middleware
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add unique request ID to each request for tracking."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id

    return response


# Logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests and responses."""
    request_id = getattr(request.state, "request_id", "unknown")

    logger.info(
        f"Request [{request_id}]: {request.method} {request.url.path} "
        f"from {request.client.host if request.client else 'unknown'}"
    )

    response = await call_next(request)

    logger.info(f"Response [{request_id}]: {response.status_code}")

    return response


def _error_response(status_code: int, error: str, message: str, detail: str = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=error,
            message=message,
            detail=detail,
            timestamp=datetime.now(timezone.utc)
        ).model_dump(mode='json')
    )


# Exception handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors."""
    request_id = getattr(request.state, "request_id", "unknown")
    logger.warning(f"Validation error [{request_id}]: {exc.errors()}")

    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "ValidationError",
        "Request validation failed",
        str(exc.errors()),
    )


@app.exception_handler(ValidationException)
async def custom_validation_exception_handler(request: Request, exc: ValidationException):
    """Handle failed result audits."""
    request_id = getattr(request.state, "request_id", "unknown")
    logger.error(f"Audit failure [{request_id}]: {exc.message} {exc.details}")

    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "ValidationException",
        exc.message,
    )


@app.exception_handler(UnknownPolicyException)
async def unknown_policy_exception_handler(request: Request, exc: UnknownPolicyException):
    """Handle unknown policy names."""
    request_id = getattr(request.state, "request_id", "unknown")
    logger.warning(f"Unknown policy [{request_id}]: {exc.message}")

    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "UnknownPolicyException",
        exc.message,
    )


@app.exception_handler(BaseMatchingEngineException)
async def batch_rejected_exception_handler(request: Request, exc: BaseMatchingEngineException):
    """Handle batch admission failures."""
    request_id = getattr(request.state, "request_id", "unknown")
    logger.warning(f"Batch rejected [{request_id}]: {exc.message}")

    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        type(exc).__name__,
        exc.message,
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions."""
    request_id = getattr(request.state, "request_id", "unknown")
    logger.error(f"Unhandled exception [{request_id}]: {str(exc)}", exc_info=True)

    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "InternalServerError",
        "An internal error occurred",
        "Contact support with request ID: " + request_id,
    )


# Health check endpoint
@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Check API and matching service health status"
)
async def health_check() -> HealthResponse:
    """
    Health check endpoint.

    Returns service status and matching statistics.
    """
    stats = matching_service.get_statistics() if matching_service else {}

    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=API_VERSION,
        matching_service=stats
    )


# Include routers
app.include_router(matching.router)


# Root endpoint
@app.get("/", tags=["root"])
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Orderbook Matcher API",
        "version": API_VERSION,
        "status": "operational",
        "docs": "/docs",
        "health": "/health"
    }


def run() -> None:
    """Serve the API with uvicorn using configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "orderbook_matcher.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    run()
