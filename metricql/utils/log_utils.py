"""
Logging for metricql.

Everything logs under the "metricql" namespace to stderr, so query output
printed on stdout can be piped. The level comes from METRICQL_LOG_LEVEL
(default WARNING) and can be raised later with set_level (--verbose).
"""

import logging
import os
import sys

ROOT_LOGGER = "metricql"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-28s | %(message)s"

# Libraries whose request-level chatter drowns out pipeline steps
_QUIET_LIBRARIES = ("httpx", "httpcore", "openai")

_configured = False


def _configure() -> logging.Logger:
    global _configured

    package_logger = logging.getLogger(ROOT_LOGGER)
    if _configured:
        return package_logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)
    package_logger.setLevel(os.getenv("METRICQL_LOG_LEVEL", "WARNING").upper())

    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True
    return package_logger


def set_level(level: int) -> None:
    _configure().setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Module logger under the metricql namespace; configures output on first use."""
    _configure()
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
