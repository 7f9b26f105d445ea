from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from form_intake.schemas.form_config import Configuration

_LOG = logging.getLogger("form_intake.registry")


class ConfigError(Exception):
    pass


def _format_validation_error(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        problems.append(f"{location or '<root>'}: {error.get('msg')}")
    return "; ".join(problems)


def parse_configuration(content: str) -> Configuration:
    try:
        document = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Configuration is not valid YAML: {exc}") from exc
    if not isinstance(document, dict):
        raise ConfigError("Configuration must be a YAML mapping")
    try:
        return Configuration.model_validate(document)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {_format_validation_error(exc)}") from exc


def load_configuration(path: str | Path) -> Configuration:
    config_path = Path(path)
    try:
        content = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Error with config file `{config_path}`: {exc}") from exc
    configuration = parse_configuration(content)
    _LOG.debug("Loaded %s table(s) from %s", len(configuration.tables), config_path)
    return configuration
