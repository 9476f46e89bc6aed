"""Logging helper for Inkwell.

Every logger lives under the ``inkwell`` namespace so applications can tune
the whole library with one ``logging.getLogger("inkwell")`` call.

Example:
    >>> from inkwell.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("Applied %d operation(s)", 3)
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name, prefixed with ``inkwell.``.

    Args:
        name: Logger name (typically __name__)

    Example:
        >>> get_logger("mentions").name
        'inkwell.mentions'
        >>> get_logger("inkwell.editor").name
        'inkwell.editor'
    """
    if not (name == "inkwell" or name.startswith("inkwell.")):
        name = f"inkwell.{name}"
    return logging.getLogger(name)
