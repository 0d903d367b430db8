"""
Package logging.

Usage:
    import calicapture.logger
    logger = calicapture.logger.get(__name__)
"""

import logging
import os

ROOT_NAME = "calicapture"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def _configure_root() -> logging.Logger:
    root = logging.getLogger(ROOT_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.setLevel(os.environ.get("CALICAPTURE_LOG_LEVEL", "INFO").upper())
    return root


def get(name: str) -> logging.Logger:
    """Return a logger under the package root, configuring the root once."""
    _configure_root()
    if name != ROOT_NAME and not name.startswith(ROOT_NAME + "."):
        name = f"{ROOT_NAME}.{name}"
    return logging.getLogger(name)
