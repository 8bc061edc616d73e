"""Logging helpers producing single-line key=value records for the rentals backend."""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
_ROOT_NAMESPACE = "rentals"


def configure_logging(namespace: str = _ROOT_NAMESPACE) -> logging.Logger:
    """Return the namespaced logger, attaching a stream handler on first use.

    Records are written as ``<time> <level> <logger> <event> key=value ...`` so
    they stay greppable in a terminal and parseable by log shippers.
    """

    logger = logging.getLogger(namespace)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    logger.addHandler(handler)
    logger.setLevel(_LOG_LEVEL)
    logger.propagate = False
    return logger


def get_logger(child: Optional[str] = None) -> logging.Logger:
    base = configure_logging()
    if child:
        return base.getChild(child)
    return base


def kv(event: str, **fields: Any) -> str:
    """Format an event name and fields as ``event key=value key=value``."""

    parts = [event]
    parts.extend(f"{key}={value}" for key, value in fields.items() if value is not None)
    return " ".join(parts)


__all__ = ["configure_logging", "get_logger", "kv"]
