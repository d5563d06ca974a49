"""Loss functions and the regression error with an optional complexity term."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Sequence

import numpy as np

from getruth.utils.validation import ConfigurationError

LossFunction = Callable[[Sequence[float], Sequence[float]], float]


def _arrays(calculated: Sequence[float], expected: Sequence[float]) -> tuple[np.ndarray, np.ndarray]:
    c = np.asarray(calculated, dtype=np.float64)
    e = np.asarray(expected, dtype=np.float64)
    if c.shape != e.shape:
        raise ValueError(f"Shape mismatch: calculated {c.shape} vs expected {e.shape}")
    return c, e


def mse(calculated: Sequence[float], expected: Sequence[float]) -> float:
    """Mean squared error."""
    c, e = _arrays(calculated, expected)
    if c.size == 0:
        return 0.0
    return float(np.mean((c - e) ** 2))


def rmse(calculated: Sequence[float], expected: Sequence[float]) -> float:
    return math.sqrt(mse(calculated, expected))


def mae(calculated: Sequence[float], expected: Sequence[float]) -> float:
    """Mean absolute error."""
    c, e = _arrays(calculated, expected)
    if c.size == 0:
        return 0.0
    return float(np.mean(np.abs(c - e)))


def sse(calculated: Sequence[float], expected: Sequence[float]) -> float:
    c, e = _arrays(calculated, expected)
    return float(np.sum((c - e) ** 2))


LOSS_FUNCTIONS: dict[str, LossFunction] = {
    "mse": mse,
    "rmse": rmse,
    "mae": mae,
    "sse": sse,
}


def length_complexity(max_length: int) -> Callable[[str], float]:
    """Complexity in ``[0, 1]`` growing with phenotype length up to ``max_length``."""
    if max_length <= 0:
        raise ValueError("max_length must be positive")

    def complexity(phenotype: str) -> float:
        cc = min(len(phenotype), max_length)
        return 1.0 - math.sqrt(1.0 - (cc * cc) / float(max_length * max_length))

    return complexity


@dataclass(frozen=True)
class Error:
    """Error of a phenotype: ``loss + loss * complexity(phenotype)``."""

    loss: LossFunction = mse
    complexity: Callable[[str], float] | None = None

    @classmethod
    def named(cls, loss: str, complexity: Callable[[str], float] | None = None) -> Error:
        """Error using the loss registered under ``loss`` in ``LOSS_FUNCTIONS``."""
        try:
            return cls(LOSS_FUNCTIONS[str(loss).lower()], complexity)
        except KeyError:
            raise ConfigurationError(
                "unknown_loss",
                f"Unknown loss function: {loss}; expected one of {sorted(LOSS_FUNCTIONS)}",
                loss=loss,
            ) from None

    def __call__(self, phenotype: str, calculated: Sequence[float], expected: Sequence[float]) -> float:
        value = self.loss(calculated, expected)
        if self.complexity is None:
            return value
        return value + value * self.complexity(phenotype)


__all__ = [
    "LossFunction",
    "LOSS_FUNCTIONS",
    "mse",
    "rmse",
    "mae",
    "sse",
    "length_complexity",
    "Error",
]
