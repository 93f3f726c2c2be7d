from __future__ import annotations

import argparse
import logging
import sys

import uvicorn

from .app import create_app_from_config
from .config import DEFAULT_CONFIG_PATH, load_config, log_level_from_string
from .providers.errors import BlobStoreError, ConfigLoadError

_logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(log_level_from_string(level))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Serve blobs from a remote object store over HTTP.")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help=f"Path to configuration file (default: {DEFAULT_CONFIG_PATH})")
    parser.add_argument("--port", type=int, default=0, help="Port to run the server on (overrides the config file)")
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigLoadError as exc:
        print(f"Error loading config: {exc}", file=sys.stderr)
        return 2

    if args.port:
        config = config.model_copy(update={"port": args.port})

    configure_logging(config.log_level)

    try:
        app = create_app_from_config(config)
    except (BlobStoreError, ValueError) as exc:
        _logger.error("Startup failed, stopping initialization: %s", exc)
        return 1

    _logger.info("Running server on %s:%d", config.host, config.port)
    uvicorn.run(app, host=config.host, port=config.port, log_config=None)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
