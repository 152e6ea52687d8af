#!/usr/bin/env python3
"""Script for serving the recommendation API."""

import argparse
import logging
import sys
from pathlib import Path

import structlog
import uvicorn

from cinematch.service.config import config
from cinematch.service.api import app

logger = structlog.get_logger(__name__)

def check_catalog(data_dir: str) -> bool:
    """Check that the catalog CSV exists."""
    catalog_path = Path(data_dir) / config.CATALOG_FILE

    if not catalog_path.exists():
        logger.warning("Catalog file missing", path=str(catalog_path))
        return False

    logger.info("Catalog file found", path=str(catalog_path))
    return True

def main():
    """Main serving function."""
    parser = argparse.ArgumentParser(description="Serve the CineMatch recommendation API")
    parser.add_argument("--host", type=str, default=config.API_HOST, help="Host to bind to")
    parser.add_argument("--port", type=int, default=config.API_PORT, help="Port to bind to")
    parser.add_argument("--data-dir", type=str, default=config.DATA_DIR, help="Directory holding the catalog CSV")
    parser.add_argument("--log-level", type=str, default=config.LOG_LEVEL, help="Logging level")
    parser.add_argument("--skip-check", action="store_true", help="Start even if the catalog file is missing")

    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(message)s", stream=sys.stdout)

    # The catalog loader reads these at load time
    config.DATA_DIR = args.data_dir
    config.LOG_LEVEL = args.log_level.upper()

    if not args.skip_check and not check_catalog(args.data_dir):
        logger.error("Catalog not available, use --skip-check to start anyway")
        sys.exit(1)

    logger.info("Starting API server", host=args.host, port=args.port, data_dir=args.data_dir)

    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower()
    )

if __name__ == "__main__":
    main()
