"""Logging setup for the storefront.

Protean's ``configure_logging`` owns the structlog processor chain and the
stdlib handlers. This module only maps the storefront environment onto a
level and a renderer: colored console output while developing, JSON lines
in production and staging.
"""

import os
from pathlib import Path

from protean.utils.logging import configure_logging as configure_protean_logging

_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}
_JSON_ENVIRONMENTS = frozenset({"production", "staging"})

# Chatty client libraries stay at WARNING regardless of the storefront level
_QUIET_LOGGERS = {"httpx": "WARNING", "httpcore": "WARNING"}


def _env() -> str:
    return (os.getenv("ENVIRONMENT") or os.getenv("STOREFRONT_ENV") or "development").lower()


def get_log_level(env: str | None = None) -> str:
    """Level for ``env``; ``LOG_LEVEL`` overrides it."""
    return os.getenv("LOG_LEVEL", _LEVELS.get(env or _env(), "INFO"))


def get_log_format(env: str | None = None) -> str:
    return "json" if (env or _env()) in _JSON_ENVIRONMENTS else "console"


def configure_logging(log_dir: str | Path | None = None, env: str | None = None) -> None:
    """Configure logging for the API server and the admin CLI.

    Without ``log_dir`` everything goes to stdout.
    """
    env = env or _env()
    configure_protean_logging(
        level=get_log_level(env),
        format=get_log_format(env),
        log_dir=log_dir,
        log_file_prefix="storefront" if log_dir else None,
        per_logger=_QUIET_LOGGERS,
    )
