#!/usr/bin/env python3
"""
Virtual Card Platform Entry Point

Starts the FastAPI server with settings taken from VCARD_* environment variables.
"""

import sys

from card_platform.config import get_config
from card_platform.logging_config import setup_logging
from card_platform.api import run_server


if __name__ == "__main__":
    config = get_config()
    logger = setup_logging(config.log_level, config.log_format)
    logger.info(f"Starting Virtual Card Platform on {config.api_host}:{config.api_port}")

    try:
        run_server(
            host=config.api_host,
            port=config.api_port,
            debug=False
        )
    except KeyboardInterrupt:
        logger.info("Shutting down Virtual Card Platform")
    except Exception as e:
        logger.error(f"Error starting server: {e}")
        sys.exit(1)
