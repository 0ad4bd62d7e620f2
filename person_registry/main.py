import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, Counter, generate_latest

from .config import Settings, get_settings
from .database import Database
from .errors import RegistryError, StorageFailure
from .health import router as health_router
from .logging import configure_logging
from .observability.tracing import configure_tracing
from .routes.history import router as history_router
from .routes.person import router as person_router
from .services.person import PersonMutationOrchestrator

logger = logging.getLogger(__name__)

REQUESTS = Counter(
    "person_registry_http_requests_total",
    "HTTP requests",
    ["method", "path", "status"],
)


def _envelope_error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
    )


def create_app(
    settings: Settings | None = None, database: Database | None = None
) -> FastAPI:
    """Build the application.

    ``database`` is injected by tests; otherwise one is created from the
    settings at startup and disposed at shutdown.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(settings.log_level)

        owns_database = database is None
        db = database or Database.from_settings(settings)
        if owns_database and settings.db_create_schema:
            await db.create_schema()
        app.state.database = db
        app.state.orchestrator = PersonMutationOrchestrator.from_settings(db, settings)
        logger.info(
            "person-registry.start",
            extra={"env": settings.env, "pool_size": settings.db_pool_size},
        )
        try:
            yield
        finally:
            if owns_database:
                await db.dispose()
            logger.info("person-registry.stop")

    app = FastAPI(lifespan=lifespan, title="Person Registry", version="0.1.0")
    configure_tracing(
        app,
        service_name="person-registry",
        environment=settings.env,
        otlp_endpoint=settings.otel_exporter_otlp_endpoint,
    )

    @app.exception_handler(RegistryError)
    async def registry_error_handler(request: Request, exc: RegistryError) -> JSONResponse:
        if isinstance(exc, StorageFailure):
            logger.error(
                "request.storage_failure",
                extra={"path": request.url.path, "error": exc.message},
            )
        else:
            logger.info(
                "request.rejected",
                extra={
                    "path": request.url.path,
                    "status": exc.status_code,
                    "error": exc.message,
                },
            )
        return _envelope_error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = jsonable_encoder(exc.errors())
        message = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in errors
        )
        return _envelope_error(422, message)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("request.unhandled_error", extra={"path": request.url.path})
        return _envelope_error(500, "Internal server error")

    @app.middleware("http")
    async def metrics_middleware(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        response: Response = await call_next(request)
        try:
            route = request.scope.get("route")
            path = getattr(route, "path", request.url.path)
            REQUESTS.labels(request.method, path, str(response.status_code)).inc()
        except Exception:
            logger.warning("Failed to update metrics", exc_info=True)
        return response

    @app.get("/metrics", include_in_schema=False)
    def metrics() -> Response:
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(health_router)
    app.include_router(person_router)
    app.include_router(history_router)
    return app


app = create_app()
