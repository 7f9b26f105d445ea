from __future__ import annotations

import argparse
import copy
import logging
import os
import sys
from typing import Any

import uvicorn
from uvicorn.config import LOGGING_CONFIG

from form_intake.core.config import settings
from form_intake.core.registry import ConfigError, load_configuration

# uvicorn has no "warn"; "trace" sits below debug.
UVICORN_LOG_LEVELS = {"warn": "warning"}


def _python_level_name(uvicorn_level: str) -> str:
    return "DEBUG" if uvicorn_level == "trace" else uvicorn_level.upper()


def configure_logging(level: str) -> str:
    uvicorn_level = UVICORN_LOG_LEVELS.get(level, level)
    python_level = getattr(logging, _python_level_name(uvicorn_level))
    logging.basicConfig(
        level=python_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("form_intake").setLevel(python_level)
    return uvicorn_level


def build_log_config(uvicorn_level: str) -> dict[str, Any]:
    """uvicorn's dictConfig with the ``form_intake`` loggers added.

    uvicorn applies it again inside every worker process, where the
    parent's ``basicConfig`` is gone.
    """
    log_config = copy.deepcopy(LOGGING_CONFIG)
    log_config["loggers"]["form_intake"] = {
        "handlers": ["default"],
        "level": _python_level_name(uvicorn_level),
        "propagate": False,
    }
    return log_config


def main() -> None:
    parser = argparse.ArgumentParser(description="Serve the configured intake forms")
    parser.add_argument("--config", default=settings.CONFIG_PATH, help="Path to the YAML form configuration")
    parser.add_argument("--host", default=settings.HOST, help="Interface to bind")
    parser.add_argument("--port", type=int, default=None, help="Listen port (overrides the configuration)")
    parser.add_argument("--workers", type=int, default=settings.WORKERS, help="Worker processes")
    args = parser.parse_args()

    try:
        configuration = load_configuration(args.config)
    except ConfigError as exc:
        print(str(exc), file=sys.stderr)
        sys.exit(1)

    uvicorn_level = configure_logging(configuration.log_level)
    port = args.port or configuration.port
    logging.getLogger("form_intake").debug("Port: %s", port)

    # Worker processes build their own app from the same file.
    settings.CONFIG_PATH = args.config
    os.environ["CONFIG_PATH"] = args.config
    uvicorn.run(
        "form_intake.main:create_app",
        factory=True,
        host=args.host,
        port=port,
        workers=max(int(args.workers), 1),
        log_level=uvicorn_level,
        log_config=build_log_config(uvicorn_level),
    )


if __name__ == "__main__":
    main()
