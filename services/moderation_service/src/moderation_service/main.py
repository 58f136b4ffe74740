from __future__ import annotations

import asyncio
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse

from moderation_service.api.routes import router
from moderation_service.domain.cache import ResultCache
from moderation_service.domain.exceptions import ModerationError
from moderation_service.domain.interfaces import KeyValueStorePort
from moderation_service.domain.patterns import ValidatorConfig
from moderation_service.domain.services import KeyValueViolationAuditLog
from moderation_service.domain.validator import ContentValidator
from moderation_service.infrastructure.kv_store import SqlKeyValueStore
from moderation_service.settings import Settings
from shared.logging.config import (
    bind_request_context,
    clear_request_context,
    configure_logging,
)
from shared.schemas.base import ErrorResponse, HealthResponse

settings = Settings()
configure_logging(settings.service_name, settings.log_level, json_logs=not settings.debug)
logger = structlog.get_logger(__name__)


async def purge_expired_periodically(store: KeyValueStorePort, interval_seconds: int) -> None:
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await store.purge_expired()
        except ModerationError as exc:
            logger.warning("kv_store.purge.skipped", error_code=exc.error_code, error=str(exc))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info(
        "service.starting",
        version=settings.app_version,
        environment=settings.environment,
    )

    store = SqlKeyValueStore(
        database_url=settings.database_url.get_secret_value(),
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        echo=settings.database_echo,
    )
    try:
        await store.ensure_schema()
    except Exception as exc:
        logger.critical("service.startup.failed", component="kv_store", error=str(exc))
        raise

    audit_log = KeyValueViolationAuditLog(
        store,
        ttl_seconds=settings.violation_audit_ttl_seconds,
        snippet_length=settings.audit_snippet_length,
    )
    validator = ContentValidator(
        config=ValidatorConfig(),
        cache=ResultCache(capacity=settings.validation_cache_size),
        audit_log=audit_log,
    )
    purge_task = asyncio.create_task(
        purge_expired_periodically(store, settings.audit_purge_interval_seconds)
    )

    app.state.store = store
    app.state.audit_log = audit_log
    app.state.validator = validator

    logger.info(
        "service.ready",
        port=settings.service_port,
        cache_capacity=settings.validation_cache_size,
    )
    yield

    purge_task.cancel()
    await store.dispose()
    logger.info("service.stopped")


app = FastAPI(
    title="Moderation Service",
    description="Content validation for marketplace text: contact leaks, profanity, spam and contextual rules.",
    version=settings.app_version,
    lifespan=lifespan,
)


@app.middleware("http")
async def correlation_context(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    correlation_id = request.headers.get("X-Correlation-ID", str(uuid.uuid4()))
    request.state.correlation_id = correlation_id
    bind_request_context(correlation_id=correlation_id)
    try:
        response = await call_next(request)
    finally:
        clear_request_context()
    response.headers["X-Correlation-ID"] = correlation_id
    return response


@app.exception_handler(ModerationError)
async def moderation_error_handler(request: Request, exc: ModerationError) -> JSONResponse:
    logger.error("moderation.request.failed", error_code=exc.error_code, error=str(exc))
    body = ErrorResponse(
        error_code=exc.error_code,
        message=str(exc),
        correlation_id=getattr(request.state, "correlation_id", None),
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body.model_dump(),
    )


@app.get("/health", response_model=HealthResponse, tags=["ops"])
async def health(request: Request) -> HealthResponse:
    checks: dict[str, str] = {}
    store: KeyValueStorePort | None = getattr(request.app.state, "store", None)
    if store is not None:
        try:
            await store.ping()
            checks["store"] = "ok"
        except ModerationError as exc:
            logger.warning("health.store.unavailable", error_code=exc.error_code, error=str(exc))
            checks["store"] = "unavailable"

    return HealthResponse(
        status="ok" if all(v == "ok" for v in checks.values()) else "degraded",
        service=settings.service_name,
        version=settings.app_version,
        checks=checks,
    )


app.include_router(router)
