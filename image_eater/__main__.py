"""Command line entry point: ``python -m image_eater --config config.toml``."""

from __future__ import annotations

import argparse
import logging

import uvicorn

from .config import DEFAULT_CONFIG_FILE, get_settings, load_settings
from .main import app

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve the image ingestion API")
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_FILE,
        help="Path to the TOML config file",
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Interface to bind the HTTP server to",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    settings = load_settings(args.config)
    app.dependency_overrides[get_settings] = lambda: settings

    logger.info("Starting HTTP server", extra={"host": args.host, "port": settings.port})
    uvicorn.run(app, host=args.host, port=settings.port)
    logger.info("Server stopped")


if __name__ == "__main__":
    main()
