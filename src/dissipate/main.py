"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (schema creation, engine).
Middleware, error handlers and routers are all registered here.

Every error leaves the API as {"error": "<message>"}.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from dissipate import __version__
from dissipate.api import api_router, health_router
from dissipate.auth.errors import HashingFailureError, MalformedCredentialError
from dissipate.config import settings

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    from dissipate.db.engine import engine, init_db

    logger.info(
        "dissipate.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )
    await init_db()

    yield

    logger.info("dissipate.shutdown")
    await engine.dispose()


# ── Error handlers ───────────────────────────────────────────


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


async def credential_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Hashing failures and corrupt stored credentials are server faults
    logger.error("auth.credential_failure", error_type=type(exc).__name__, error=str(exc))
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="Dissipate",
        description="Personal journal API — short messages behind bearer-token auth",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RequestId → Security → Identity → handler

    from dissipate.middleware.identity import IdentityMiddleware
    from dissipate.middleware.request_id import RequestIdMiddleware
    from dissipate.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(
        IdentityMiddleware,
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HashingFailureError, credential_error_handler)
    app.add_exception_handler(MalformedCredentialError, credential_error_handler)

    app.include_router(health_router, tags=["health"])
    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: dissipate.main:app)
app = create_app()
