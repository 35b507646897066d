"""Broker CRM — FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from brokercrm.adapters.persistence.database import engine
from brokercrm.config import settings
from brokercrm.domain.errors import NotFoundError, PermissionDeniedError, ValidationError
from brokercrm.infrastructure.api.routes_agents import router as agents_router
from brokercrm.infrastructure.api.routes_analytics import router as analytics_router
from brokercrm.infrastructure.api.routes_clients import router as clients_router
from brokercrm.infrastructure.api.routes_health import router as health_router
from brokercrm.infrastructure.api.routes_smart_assignment import router as smart_assignment_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    try:
        async with engine.begin():
            pass  # Connection pool warmed up
        logger.info("Database connection established")
    except Exception as e:
        logger.warning("Database not available on startup: %s", e)
    yield
    await engine.dispose()


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ValidationError)
    async def _invalid(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(PermissionDeniedError)
    async def _forbidden(request: Request, exc: PermissionDeniedError):
        logger.info("Forbidden %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=403, content={"detail": str(exc)})


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s | %(message)s",
    )

    app = FastAPI(
        title="Broker CRM — Smart Assignment",
        description="Client intake, rule-based agent assignment and workload management",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)

    # Register routers
    app.include_router(health_router, prefix="/api")
    app.include_router(smart_assignment_router, prefix="/api")
    app.include_router(clients_router, prefix="/api")
    app.include_router(agents_router, prefix="/api")
    app.include_router(analytics_router, prefix="/api")

    return app


app = create_app()
