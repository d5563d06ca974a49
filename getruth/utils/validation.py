"""Structured error records shared across getruth.

Every error carries a short machine-readable ``code`` plus free-form context
so callers can branch on the failure without parsing messages.
"""

from __future__ import annotations

from typing import Any


class ValidationError(Exception):
    """Base error with a code, a human message and keyword context."""

    def __init__(self, code: str, message: str, **context: Any) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.context: dict[str, Any] = dict(context)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class GrammarError(ValidationError):
    """Raised while building a grammar (undefined symbol, empty rule, ...)."""


class ConfigurationError(ValidationError):
    """Raised when a run configuration cannot be honoured."""


class EvaluationFault(ValidationError):
    """Raised when a phenotype cannot be evaluated against a sample."""


GrammarConstructionError = GrammarError


__all__ = [
    "ValidationError",
    "GrammarError",
    "GrammarConstructionError",
    "ConfigurationError",
    "EvaluationFault",
]
