"""FastAPI application for the devfile index server.

Serves the stack catalog once startup has pushed every stack:
- /devfiles/{name}: the stack's devfile, pulled from the registry
- /index: the index file
- /health: liveness check
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from devreg import __version__
from web.backend.app.context import ServerContext
from web.backend.app.models.api import ApiInfoResponse, HealthResponse
from web.backend.app.routers import devfiles


def create_app(context: ServerContext) -> FastAPI:
    """Create the FastAPI application around a completed startup's context."""
    app = FastAPI(
        title="devreg index server",
        description="Serves devfile stacks stored in an OCI registry.",
        version=__version__,
    )
    app.state.context = context

    # ---------------------------------------------------------------------------
    # CORS middleware (the index is read by browser-based tooling)
    # ---------------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(devfiles.router)

    @app.get("/", response_model=ApiInfoResponse, tags=["meta"])
    async def root():
        """Return basic API information."""
        return ApiInfoResponse(
            name="devreg",
            version=__version__,
            description="Devfile index server",
            stacks=context.index.names,
        )

    @app.get("/health", response_model=HealthResponse, tags=["meta"])
    async def health_check():
        """Health check endpoint."""
        return HealthResponse()

    return app
