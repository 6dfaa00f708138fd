from contextlib import asynccontextmanager

import structlog
import structlog.contextvars
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from prometheus_fastapi_instrumentator import Instrumentator
from redis.exceptions import RedisError

from backend.config import settings
from backend.plugins import init_plugins
from backend.plugins.kintone.messages import UNEXPECTED_ERROR
from backend.utils.exceptions import ServiceError, serialize_error
from backend.utils.fallback_client import FallbackClient
from backend.utils.middleware import structured_logging_middleware
from backend.utils.redis_client import close_redis_client, init_redis_client
from ribbit_core.logging_config import setup_structlog
from ribbit_core.tracing import setup_tracing

EXCLUDED_PLUGINS: list[str] = []

setup_structlog(json_logs=settings.json_logs, log_level=settings.log_level)
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage the application's lifespan.
    Connects to all required services on startup and gracefully disconnects on shutdown.
    """
    if settings.tracing_enabled:
        setup_tracing(service_name=settings.service_name)
        HTTPXClientInstrumentor().instrument()
    logger.info(
        "Application starting up...",
        service=settings.service_name,
        environment=settings.environment,
    )

    instrumentator.expose(app)
    logger.info("Prometheus metrics endpoint exposed at /metrics.")

    try:
        app.state.redis = await init_redis_client()
    except RedisError as e:
        logger.fatal("Failed to connect to Redis on startup.", error=str(e))
        raise
    logger.info("Successfully connected to Redis.")

    app.state.fallback_client = FallbackClient(
        endpoint=str(settings.gas_end_point) if settings.gas_end_point else None,
        timeout=settings.fallback_timeout_seconds,
    )
    if not app.state.fallback_client.configured:
        logger.warning("GAS_END_POINT is not set, failed events will not be forwarded.")

    yield

    logger.info("Application shutting down...")
    await app.state.fallback_client.close()
    await close_redis_client()
    logger.info("Redis connection closed.")


app = FastAPI(
    version="1.0.0",
    title="Ribbit API",
    description="Usage telemetry for kintone plugins, backed by a Redis tree store.",
    lifespan=lifespan,
)

FastAPIInstrumentor.instrument_app(app)

instrumentator = Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=True,
    excluded_handlers=["/metrics", "/health"],
)

instrumentator.instrument(app, metric_namespace="ribbit", metric_subsystem="backend")


@app.exception_handler(ServiceError)
async def service_exception_handler(request: Request, exc: ServiceError):
    logger.warning(
        "Service error occurred, returning HTTP response",
        detail=exc.detail,
        status_code=exc.status_code,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"result": exc.detail},
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    # Starlette re-raises the exception once this response is sent.
    logger.exception(
        "An unhandled exception occurred",
        error=str(exc),
    )
    context_vars = structlog.contextvars.get_contextvars()
    correlation_id = context_vars.get("correlation_id", "not-available")
    return JSONResponse(
        status_code=500,
        content={
            "result": f"{UNEXPECTED_ERROR}{serialize_error(exc)}",
            "error_id": correlation_id,
        },
    )


app.middleware("http")(structured_logging_middleware)

init_plugins(app, excluded_plugins=EXCLUDED_PLUGINS)


@app.get("/health", tags=["Health Check"], include_in_schema=False)
def health_check():
    return {"status": "ok"}
