"""
Product Search API
==================

HTTP surface for the search engine: ``POST /search/products``,
``GET /health`` and Prometheus metrics under ``/metrics``.
"""

import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator
from uuid import uuid4

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from product_search import __version__
from product_search.api.routes import search_router
from product_search.api.routes.search import failure_response
from product_search.config.settings import Settings, get_settings
from product_search.db.connection import close_database, init_database
from product_search.db.connection import health_check as db_health_check
from product_search.metrics import get_metrics_app
from product_search.schemas.responses import HealthCheckResponse
from product_search.schemas.result import SearchFailure
from product_search.search.engine import get_search_engine
from product_search.utils.errors import ProductSearchError
from product_search.utils.logger import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
)

configure_logging()
logger = get_logger(__name__)

SERVICE_NAME = "product-search"


async def shutdown_search_engine() -> None:
    """Close the cached engine's HTTP clients, if one was ever built."""
    if not get_search_engine.cache_info().currsize:
        return
    try:
        await get_search_engine().aclose()
    except Exception as e:
        logger.error("Failed to close search engine clients", error=str(e))
    finally:
        get_search_engine.cache_clear()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()
    logger.info(
        "Starting product search",
        version=__version__,
        environment=settings.environment,
        embedding_provider=settings.embedding_provider,
        rerank_enabled=settings.rerank_enabled,
    )

    try:
        await init_database(settings)
    except Exception as e:
        # Searches return a database failure until the pool comes up
        logger.error("Database pool unavailable at startup", error=str(e))

    yield

    logger.info("Stopping product search")
    await shutdown_search_engine()
    try:
        await close_database()
    except Exception as e:
        logger.error("Failed to close database pool", error=str(e))


async def collect_health(settings: Settings) -> HealthCheckResponse:
    """Database probe plus the configured embedding and rerank backends."""
    database = await db_health_check()
    return HealthCheckResponse(
        status="healthy" if database.get("status") == "healthy" else "degraded",
        version=__version__,
        service=SERVICE_NAME,
        checks={
            "database": database,
            "embedding": {"provider": settings.embedding_provider},
            "rerank": {"status": "configured" if settings.rerank_enabled else "passthrough"},
        },
    )


def create_app() -> FastAPI:
    settings = get_settings()
    expose_docs = settings.is_development

    app = FastAPI(
        title="Product Search API",
        description="Filtered semantic search over supplier product catalogs.",
        version=__version__,
        docs_url="/docs" if expose_docs else None,
        redoc_url="/redoc" if expose_docs else None,
        openapi_url="/openapi.json" if expose_docs else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if expose_docs else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next: Any) -> Any:
        """Tag every log event of the request with its id; report timing headers."""
        request_id = request.headers.get("x-request-id") or uuid4().hex
        bind_request_context(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        started = time.perf_counter()
        try:
            response = await call_next(request)
            elapsed = time.perf_counter() - started
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Process-Time"] = f"{elapsed:.4f}"
            logger.info(
                "Request handled",
                status_code=response.status_code,
                duration_ms=round(elapsed * 1000, 2),
            )
            return response
        finally:
            clear_request_context()

    @app.exception_handler(ProductSearchError)
    async def product_search_error_handler(
        request: Request, exc: ProductSearchError
    ) -> JSONResponse:
        """Errors raised outside the engine, e.g. building it from bad settings."""
        failure = SearchFailure.from_exception(exc)
        logger.error(
            "Request failed",
            error_type=exc.error_type,
            message=exc.message,
            details=exc.details,
        )
        return failure_response(failure)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error", error_class=type(exc).__name__)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "internal",
                "message": "An unexpected error occurred",
                "details": {},
            },
        )

    @app.get("/health", tags=["Health"], response_model=HealthCheckResponse)
    async def health() -> HealthCheckResponse:
        """Service status; ``degraded`` while the database is unreachable."""
        return await collect_health(settings)

    @app.get("/", tags=["Info"])
    async def api_info() -> dict[str, str]:
        return {
            "service": SERVICE_NAME,
            "version": __version__,
            "search": "/search/products",
            "docs": "/docs",
        }

    app.mount("/metrics", get_metrics_app())
    app.include_router(search_router, prefix="/search", tags=["Search"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "product_search.api.main:app",
        host=settings.fastapi_host,
        port=settings.fastapi_port,
        log_level=settings.log_level.lower(),
    )
