"""FastAPI application entry point"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from redis.exceptions import RedisError

from keyrelay.api import health, keys, media_keys, publish
from keyrelay.config import settings
from keyrelay.database import create_redis
from keyrelay.utils.logger import logger, setup_logging

# Setup logging
setup_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    # Startup
    app.state.redis = create_redis(settings)
    logger.info("KeyRelay starting up", extra={
        "version": "0.1.0",
        "log_level": settings.LOG_LEVEL,
        "monitoring": settings.METRICS_ENABLED
    })
    yield
    # Shutdown
    await app.state.redis.aclose()
    logger.info("KeyRelay shutting down")


# Create FastAPI app
app = FastAPI(
    title="KeyRelay",
    description="API key issuance, media key storage and multi-platform article publishing",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# ===== Middleware Setup =====

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Monitoring middleware
if settings.METRICS_ENABLED:
    from keyrelay.middleware.monitoring import MonitoringMiddleware
    app.add_middleware(MonitoringMiddleware, slow_request_seconds=settings.SLOW_REQUEST_SECONDS)

    # Prometheus metrics
    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        should_respect_env_var=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=["/metrics", "/health", "/health/ready", "/health/live"],
        inprogress_name="keyrelay_requests_inprogress",
        inprogress_labels=True
    )
    instrumentator.instrument(app)
    instrumentator.expose(app, endpoint=settings.METRICS_PATH, include_in_schema=False)

# ===== Route Setup =====

app.include_router(health.router)
app.include_router(keys.router)
app.include_router(media_keys.router)
app.include_router(publish.router)


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "service": "KeyRelay",
        "version": "0.1.0",
        "status": "operational",
        "docs": "/docs",
        "health": "/health",
        "metrics": settings.METRICS_PATH if settings.METRICS_ENABLED else None
    }


# ===== Error Handlers =====

def jsonable_errors(exc: RequestValidationError) -> list:
    """Field locations and messages, without echoing submitted values back"""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed bodies and query parameters as 400 Bad Request"""
    logger.info(
        "Invalid request",
        extra={"method": request.method, "endpoint": request.url.path}
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "bad_request",
            "message": "Invalid request",
            "detail": jsonable_errors(exc)
        }
    )


@app.exception_handler(RedisError)
async def redis_exception_handler(request: Request, exc: RedisError):
    """Store communication failures surface as a generic internal error"""
    logger.error(
        f"Redis error: {exc.__class__.__name__}",
        extra={"method": request.method, "endpoint": request.url.path},
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_server_error",
            "message": "An internal server error occurred"
        }
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for uncaught errors"""
    logger.error(
        f"Unhandled exception: {str(exc)}",
        extra={"method": request.method, "endpoint": request.url.path},
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Please contact support."
        }
    )