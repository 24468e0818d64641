"""FastAPI application factory.

Learn: create_app() returns a configured FastAPI instance. Lifespan
manages startup/shutdown, and middleware, error handlers, REST routes,
the GraphQL endpoint and the static image mount are all registered here.
"""

from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from inkpost import __version__
from inkpost.api import api_router
from inkpost.config import settings
from inkpost.errors import InkpostError
from inkpost.graphql.router import create_graphql_router
from inkpost.middleware.auth_gate import AuthGateMiddleware
from inkpost.middleware.request_id import RequestIdMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info(
        "inkpost.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )
    Path(settings.image_dir).mkdir(parents=True, exist_ok=True)

    yield

    logger.info("inkpost.shutdown")

    from inkpost.db.engine import engine
    await engine.dispose()


async def inkpost_error_handler(request: Request, exc: InkpostError) -> JSONResponse:
    """Render domain errors raised by REST routes as {message, data}."""
    return JSONResponse(
        status_code=exc.code,
        content={"message": exc.message, "data": exc.data},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log anything unexpected and still answer with {message, data}."""
    logger.error(
        "inkpost.unhandled_error",
        method=request.method,
        path=request.url.path,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"message": str(exc) or "Internal server error.", "data": None},
    )


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="Inkpost",
        description="Blog publishing backend — GraphQL posts API with image upload",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Starlette executes middleware in reverse order of registration.
    # Request flow: RequestId → CORS → AuthGate → handler
    app.add_middleware(AuthGateMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["OPTIONS", "GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_middleware(RequestIdMiddleware)

    app.add_exception_handler(InkpostError, inkpost_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(api_router)
    app.include_router(create_graphql_router(), prefix="/graphql", tags=["graphql"])

    # check_dir=False: the directory is created at startup / first upload
    app.mount(
        "/images",
        StaticFiles(directory=settings.image_dir, check_dir=False),
        name="images",
    )

    return app


# Default app instance (used by uvicorn: inkpost.main:app)
app = create_app()
