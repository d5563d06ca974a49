"""Samples, loss functions and fitness evaluation."""

from .fitness import ROBUST, STRICT, FitnessEvaluator
from .loss import Error, length_complexity, mae, mse, rmse, sse
from .sampling import Sample, Sampling, SamplingResult

__all__ = [
    "ROBUST",
    "STRICT",
    "FitnessEvaluator",
    "Error",
    "length_complexity",
    "mae",
    "mse",
    "rmse",
    "sse",
    "Sample",
    "Sampling",
    "SamplingResult",
]
