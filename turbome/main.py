"""
The main entry point for the TurboMe server.

This script handles environment loading, logging configuration, and server execution.
"""

import logging
import os
import sys

from dotenv import load_dotenv


def setup_environment() -> bool:
    """
    Loads environment variables and configures application-wide logging.
    """
    load_dotenv()  # Load environment variables from .env file.

    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.info("Environment and logging configured.")
    return True


def run_server() -> None:
    """
    Sets up the environment, validates the storage root and runs the server.
    """
    if not setup_environment():
        logging.critical("Initial environment setup failed. Exiting.")
        sys.exit(1)

    import uvicorn

    # Import server components after setup to ensure environment is loaded first.
    from .server import app, server_config
    from .services.base import ConfigurationError
    from .utils.dependencies import get_storage_root

    logger = logging.getLogger(__name__)
    try:
        storage_root = get_storage_root()
    except ConfigurationError as e:
        logger.critical(str(e))
        sys.exit(1)

    logger.info("--- TurboMe Server ---")
    logger.info("Serving %s on %s:%s", storage_root, server_config.HOST, server_config.PORT)

    uvicorn.run(
        app,
        host=server_config.HOST,
        port=server_config.PORT,
        log_level=server_config.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run_server()
