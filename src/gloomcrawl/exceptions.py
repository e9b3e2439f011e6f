from __future__ import annotations

from typing import Optional, Sequence


class GloomcrawlError(Exception):
    """Base exception for the gloomcrawl project."""


class ConfigError(GloomcrawlError):
    """Raised when a configuration document is missing, malformed or invalid."""

    def __init__(self, message: str, errors: Optional[Sequence[object]] = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])

    def to_human(self) -> str:
        parts = [str(self)]
        for e in self.errors:
            path = "/".join(str(p) for p in getattr(e, "path", ())) or "<root>"
            parts.append(f" - at {path}: {getattr(e, 'message', e)}")
        return "\n".join(parts)


class ContractViolation(GloomcrawlError):
    """Raised in strict mode when a caller breaks a documented precondition."""


class ScriptExhausted(GloomcrawlError):
    """Raised when a scripted random stream has no values left."""
