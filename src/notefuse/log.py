"""Logging setup for applications embedding notefuse.

Library modules only call ``logging.getLogger(__name__)``; nothing here runs on
import. Call configure_logging() once from the host application if it does not
configure logging itself.
"""

from __future__ import annotations

import logging
import sys

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Third-party loggers that are chatty at INFO.
_NOISY = ("litellm", "LiteLLM", "httpx", "httpcore", "openai")


def configure_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Attach a single stream handler to the ``notefuse`` logger.

    Calling this more than once replaces the previous handler instead of
    stacking duplicates.

    Args:
        level: Level name or number for the ``notefuse`` logger.

    Returns:
        The configured ``notefuse`` logger.
    """
    logger = logging.getLogger("notefuse")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    logger.propagate = False

    for name in _NOISY:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger
