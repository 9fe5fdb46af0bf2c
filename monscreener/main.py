"""Main entry point for the MonScreener API server."""

# Standard library imports
import argparse
import sys
from contextlib import asynccontextmanager
from typing import Optional

# Third-party library imports
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Internal imports
from monscreener import __version__
from monscreener.api import routers
from monscreener.api.dependencies import ServiceContainer, build_container
from monscreener.api.error_handling import unhandled_exception_handler
from monscreener.config import get_server_config
from monscreener.logging_config import RequestIdMiddleware, configure_logging, get_logger

# Get logger
logger = get_logger(__name__)


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        container: Pre-built services. When omitted, services are built from
            the environment at startup and closed at shutdown.

    Returns:
        Configured application
    """
    server_config = get_server_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_container = container is None
        app.state.services = container or build_container()
        logger.info(f"MonScreener API v{__version__} started ({server_config.environment})")
        try:
            yield
        finally:
            if owns_container:
                await app.state.services.close()
            logger.info("MonScreener API stopped")

    app = FastAPI(
        title="MonScreener API",
        description="Token discovery, market data and wallet lookups for Monad",
        version=__version__,
        lifespan=lifespan
    )

    # Add middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=server_config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIdMiddleware)

    # Include routers
    for router in routers:
        app.include_router(router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    app.add_exception_handler(Exception, unhandled_exception_handler)
    return app


def run_server(port: Optional[int] = None) -> None:
    """Run the server from the command line.

    Args:
        port: Optional port override
    """
    config = get_server_config()
    configure_logging(config.log_level)

    if port is not None:
        config.port = port

    logger.info(
        f"Starting MonScreener API on {config.bind_address} (Environment: {config.environment})"
    )

    uvicorn.run(
        "monscreener.main:create_app",
        factory=True,
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level=config.log_level.lower(),
    )


def main(argv: Optional[list] = None) -> None:
    """Parse command line arguments and run the server."""
    parser = argparse.ArgumentParser(description="MonScreener API server")
    parser.add_argument("--port", type=int, help="Server port")
    args = parser.parse_args(argv)

    try:
        run_server(port=args.port)
    except ValueError as e:
        logger.error(f"Invalid configuration: {str(e)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
