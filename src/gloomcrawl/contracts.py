"""Precondition checks that are loud in development and forgiving in production.

Strict mode follows the interpreter's ``__debug__`` flag (disabled by ``python -O``)
unless the ``GLOOMCRAWL_STRICT`` environment variable says otherwise.
"""
from __future__ import annotations

import logging
import os

from .exceptions import ContractViolation

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def strict_mode() -> bool:
    raw = os.environ.get("GLOOMCRAWL_STRICT")
    if raw is not None:
        value = raw.strip().lower()
        if value in _TRUTHY:
            return True
        if value in _FALSY:
            return False
        logger.warning("Ignoring unrecognized GLOOMCRAWL_STRICT value %r", raw)
    return __debug__


def expect(condition: bool, message: str) -> bool:
    """Check a precondition.

    Returns True when the condition holds. Otherwise raises ContractViolation in
    strict mode, or logs the breach and returns False so the caller can no-op.
    """
    if condition:
        return True
    if strict_mode():
        raise ContractViolation(message)
    logger.error("Contract violation absorbed: %s", message)
    return False


__all__ = ["expect", "strict_mode"]
