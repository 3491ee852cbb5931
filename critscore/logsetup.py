"""Construction of loggers for the supported logging environments."""

from __future__ import annotations

import enum
import json
import logging
from datetime import datetime, timezone
from typing import Mapping, Union

CONFIG_LOG_ENV_KEY = "log-env"
CONFIG_LOG_LEVEL_KEY = "log-level"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "dpanic": logging.CRITICAL,
    "panic": logging.CRITICAL,
    "fatal": logging.CRITICAL,
}

_GCP_SEVERITY = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARNING",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "CRITICAL",
}


class UnknownEnvError(ValueError):
    """Raised when text names no known logging environment."""

    def __init__(self, text: str = "") -> None:
        super().__init__(f"unknown logging environment: {text!r}")


class Env(enum.Enum):
    """The environment a logger is configured for."""

    UNKNOWN = 0
    DEV = 1
    GCP = 2

    def __str__(self) -> str:
        return _ENV_NAMES.get(self, "unknown")


_ENV_NAMES = {Env.DEV: "dev", Env.GCP: "gcp"}
_ENVS_BY_NAME = {name: env for env, name in _ENV_NAMES.items()}

DEFAULT_ENV = Env.DEV


def lookup_env(text: str) -> Env:
    """Return the Env named by text, or Env.UNKNOWN."""
    return _ENVS_BY_NAME.get(text, Env.UNKNOWN)


def parse_env(text: str) -> Env:
    """Return the Env named by text, raising UnknownEnvError if there is none."""
    env = lookup_env(text)
    if env is Env.UNKNOWN:
        raise UnknownEnvError(text)
    return env


def _parse_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    try:
        return _LEVELS[level.strip().lower()]
    except KeyError:
        raise ValueError(f"unrecognized level: {level!r}") from None


class _GCPFormatter(logging.Formatter):
    """Formats records as JSON lines for structured cloud logging."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "severity": _GCP_SEVERITY.get(record.levelno, record.levelname),
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def _dev_formatter() -> logging.Formatter:
    return logging.Formatter(
        "%(asctime)s.%(msecs)03d\t%(levelname)s\t%(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def new_logger(env: Env, level: Union[int, str]) -> logging.Logger:
    """Return a new logger for env that outputs records at level and above."""
    numeric_level = _parse_level(level)
    formatter = _GCPFormatter() if env is Env.GCP else _dev_formatter()
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    logger = logging.Logger("critscore", numeric_level)
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def new_logger_from_config(
    default_env: Env, default_level: Union[int, str], config: Mapping[str, str]
) -> logging.Logger:
    """Return a new logger using the "log-env" and "log-level" keys of config.

    Missing or empty keys fall back to the given defaults.
    """
    env = default_env
    env_text = config.get(CONFIG_LOG_ENV_KEY, "")
    if env_text:
        env = parse_env(env_text)

    level = default_level
    level_text = config.get(CONFIG_LOG_LEVEL_KEY, "")
    if level_text:
        level = _parse_level(level_text)

    return new_logger(env, level)