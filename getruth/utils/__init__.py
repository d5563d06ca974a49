"""Shared utilities: errors, randomness, reporting."""

from .observability import determinism_signature, run_report
from .rng_manager import RNGManager
from .validation import (
    ConfigurationError,
    EvaluationFault,
    GrammarConstructionError,
    GrammarError,
    ValidationError,
)

__all__ = [
    "determinism_signature",
    "run_report",
    "RNGManager",
    "ConfigurationError",
    "EvaluationFault",
    "GrammarConstructionError",
    "GrammarError",
    "ValidationError",
]
