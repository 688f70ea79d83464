#!/usr/bin/env python3
import logging

import click
import uvicorn

from echo.database import DEFAULT_DATABASE_URL
from echo.main import create_app
from echo.registry import Registry

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@click.command()
@click.option("--host", envvar="ECHO_HOST", default="0.0.0.0", show_default=True, help="Interface to bind")
@click.option("--port", envvar="ECHO_PORT", default=3000, show_default=True, help="Port to listen on")
@click.option("--database-url", envvar="DATABASE_URL", default=DEFAULT_DATABASE_URL, show_default=True,
              help="SQLAlchemy URL of the endpoint store")
@click.option("--seed/--no-seed", envvar="ECHO_SEED", default=True, show_default=True,
              help="Load the demo endpoints on startup")
@click.option("--log-level", envvar="LOG_LEVEL", default="INFO", show_default=True,
              type=click.Choice(LOG_LEVELS, case_sensitive=False))
def cli(host: str, port: int, database_url: str, seed: bool, log_level: str):
    """Run the Echo mock server."""
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=log_level.upper()
    )

    app = create_app(Registry(database_url), seed=seed)

    logger.info(f"Starting server on {host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level=log_level.lower())


if __name__ == "__main__":
    cli()
