"""Logging setup for applications that embed stylebook.

Library modules only ever call logging.getLogger(__name__). Applications
that want stylebook's own output formatted call setup_logging(), which
applies one of the dictConfig YAML files bundled in stylebook/config/.
The configuration is scoped to the ``stylebook`` logger tree; the root
logger is left to the host application unless a bundled file sets it.
"""

from __future__ import annotations

import logging
import logging.config
import os
import sys
from pathlib import Path
from typing import Any, cast

import yaml

from stylebook.errors import LoggingError

CONFIG_DIR = Path(__file__).parent / "config"
PACKAGE_LOGGER = "stylebook"
DEFAULT_CONFIG = "logging"

ENVIRONMENT_VARIABLE = "STYLEBOOK_ENV"

_ENVIRONMENT_ALIASES = {
    "dev": "dev",
    "development": "dev",
    "test": "test",
    "prod": "prod",
    "production": "prod",
}

_FALLBACK_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def resolve_config_path(
    config_name: str | None = None, environment: str | None = None
) -> Path:
    """Find the bundled logging config to apply.

    An explicit ``config_name`` must exist. Otherwise the environment
    (argument, then ``STYLEBOOK_ENV``) picks ``logging-<env>.yaml`` when
    one is bundled, and the default ``logging.yaml`` when not.

    Raises:
        LoggingError: If the named config is not bundled

    """
    if config_name is not None:
        path = CONFIG_DIR / f"{config_name}.yaml"
        if not path.is_file():
            raise LoggingError(f"No bundled logging config named '{config_name}'")
        return path

    env = (environment or os.getenv(ENVIRONMENT_VARIABLE, "")).strip().lower()
    env = _ENVIRONMENT_ALIASES.get(env, "")
    if env:
        path = CONFIG_DIR / f"{DEFAULT_CONFIG}-{env}.yaml"
        if path.is_file():
            return path
    return CONFIG_DIR / f"{DEFAULT_CONFIG}.yaml"


def read_config(path: Path) -> dict[str, Any]:
    """Read a dictConfig mapping from YAML.

    Raises:
        LoggingError: If the file is unreadable or not a mapping

    """
    try:
        config = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise LoggingError(f"Logging config {path} is not valid YAML: {e}") from e
    except OSError as e:
        raise LoggingError(f"Cannot read logging config {path}: {e}") from e

    if not isinstance(config, dict):
        raise LoggingError(f"Logging config {path} must be a mapping")
    return cast(dict[str, Any], config)


def parse_level(level: str) -> int:
    """Convert a level name such as ``"debug"`` to its number.

    Raises:
        LoggingError: If the name is not a standard level

    """
    number = logging.getLevelNamesMapping().get(level.strip().upper())
    if number is None:
        raise LoggingError(f"Unknown log level: {level}")
    return number


def with_package_level(config: dict[str, Any], level: int) -> dict[str, Any]:
    """Return a copy of ``config`` with the stylebook logger at ``level``.

    Handlers attached to the stylebook logger are lowered to ``level`` when
    they would otherwise drop its records; other loggers are untouched.
    """
    loggers = {name: dict(entry) for name, entry in config.get("loggers", {}).items()}
    package = loggers.setdefault(PACKAGE_LOGGER, {})
    package["level"] = logging.getLevelName(level)

    handlers = {name: dict(entry) for name, entry in config.get("handlers", {}).items()}
    for handler_name in package.get("handlers", ()):
        handler = handlers.get(handler_name)
        if handler is None or "level" not in handler:
            continue
        if level < parse_level(str(handler["level"])):
            handler["level"] = logging.getLevelName(level)

    return {**config, "loggers": loggers, "handlers": handlers}


def setup_logging(
    config_path: Path | str | None = None,
    level: str | None = None,
    environment: str | None = None,
    force_basic: bool = False,
) -> None:
    """Configure stylebook's log output.

    Args:
        config_path: dictConfig YAML file; defaults to the bundled config
            chosen by ``environment``
        level: Level for the stylebook logger (e.g. ``"DEBUG"``)
        environment: Environment (dev, test, prod) for config selection
        force_basic: Skip the YAML config and use a plain stderr handler

    Raises:
        LoggingError: If ``level`` is not a standard level name

    """
    numeric_level = parse_level(level) if level else None

    if not force_basic:
        try:
            path = (
                Path(config_path)
                if config_path is not None
                else resolve_config_path(environment=environment)
            )
            config = read_config(path)
            if numeric_level is not None:
                config = with_package_level(config, numeric_level)
            logging.config.dictConfig(config)
        except (LoggingError, ValueError, TypeError) as e:
            _configure_package_fallback(numeric_level or logging.INFO)
            logging.getLogger(__name__).warning(
                "Logging config not applied (%s); writing stylebook logs to stderr", e
            )
            return
        logging.getLogger(__name__).debug("Logging configured from %s", path)
        return

    _configure_package_fallback(numeric_level or logging.INFO)


def _configure_package_fallback(level: int) -> None:
    """Give the stylebook logger its own stderr handler, replacing any others."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FALLBACK_FORMAT))

    package = logging.getLogger(PACKAGE_LOGGER)
    for existing in list(package.handlers):
        package.removeHandler(existing)
    package.addHandler(handler)
    package.setLevel(level)
    package.propagate = False
