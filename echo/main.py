"""Echo mock server application."""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from echo import __version__
from echo.errors import JSONAPIResponse, install_error_handlers
from echo.registry import Registry
from echo.routers import dispatch, endpoints

logger = logging.getLogger(__name__)


def seed_enabled() -> bool:
    return os.getenv("ECHO_SEED", "true").lower() in ("1", "true", "yes", "on")


def create_app(registry: Registry = None, seed: bool = False) -> FastAPI:
    """Build the app around a single registry instance."""
    if registry is None:
        registry = Registry()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open (and optionally seed) the registry on startup."""
        await registry.open()
        if seed:
            await registry.seed()
        logger.info(f"Registry ready at {registry.database_url}")
        yield
        await registry.close()

    # Docs routes are disabled so that /docs and friends stay available as mock paths
    app = FastAPI(
        title="Echo",
        description="Register mock HTTP endpoints and serve them back",
        version=__version__,
        lifespan=lifespan,
        default_response_class=JSONAPIResponse,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.registry = registry

    install_error_handlers(app)

    app.include_router(endpoints.router)
    # Must stay last: matches every path
    app.include_router(dispatch.router)

    return app


app = create_app(Registry(os.getenv("DATABASE_URL")), seed=seed_enabled())
