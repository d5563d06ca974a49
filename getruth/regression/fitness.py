"""Fitness evaluation of rendered phenotypes against a fixed sampling."""

from __future__ import annotations

import logging
import math
import numbers
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any, Mapping, Sequence

import numpy as np

from getruth.execution.script import JsExpressionEngine, ScriptFunction
from getruth.regression.loss import Error
from getruth.regression.sampling import Sample, Sampling
from getruth.utils.validation import ConfigurationError, EvaluationFault

ROBUST = "ROBUST"
STRICT = "STRICT"
FAULT_POLICIES = (ROBUST, STRICT)


def encode(value: Any) -> float:
    """Numeric encoding used by the loss: booleans become 1.0 / 0.0."""
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    return float(value)


def coerce(value: Any, expected: Any) -> Any:
    """Coerce an executor result to the type of ``expected``.

    Raises:
        TypeError: if no coercion is defined.
    """
    if isinstance(expected, bool):
        if isinstance(value, (bool, np.bool_)):
            return bool(value)
        raise TypeError(f"Cannot coerce {type(value).__name__} to bool")
    if isinstance(expected, numbers.Real):
        if isinstance(value, numbers.Real):
            return float(value)
        raise TypeError(f"Cannot coerce {type(value).__name__} to a number")
    if isinstance(value, type(expected)):
        return value
    raise TypeError(f"Cannot coerce {type(value).__name__} to {type(expected).__name__}")


def worst_case(expected: Any) -> Any:
    """Calculated value that maximises the error for ``expected``."""
    if isinstance(expected, bool):
        return not expected
    return math.inf


def _call_with_timeout(pool: ThreadPoolExecutor, fn: Any, bindings: Mapping[str, Any], timeout: float) -> Any:
    future = pool.submit(fn, bindings)
    try:
        return future.result(timeout=timeout)
    except FutureTimeout:
        # Queued calls never start; running ones keep their worker until done.
        future.cancel()
        raise TimeoutError(f"Evaluation exceeded {timeout}s") from None


class FitnessEvaluator:
    """Scores a phenotype string; lower is better.

    Args:
        sampling: Fixed samples, evaluated in order.
        engine: Expression engine compiling phenotype text (default:
            ``JsExpressionEngine``).
        parameter_names: Names bound positionally to each sample's inputs.
        error: Reduction of (calculated, expected) to a scalar; defaults to
            mean-squared error over the 0/1 encoding.
        default: Value used when the phenotype yields ``None``.
        fault_policy: ``ROBUST`` scores a faulting sample with its worst-case
            value, ``STRICT`` raises ``EvaluationFault``.
        timeout: Optional per-call limit in seconds; exceeding it is a fault.
        timeout_workers: Size of the thread pool that runs timed calls. A call
            that never returns holds one worker, so at most this many threads
            are left behind by hanging phenotypes.
    """

    def __init__(self, sampling: Sampling | Sequence[Sample], engine: Any | None = None,
                 parameter_names: Sequence[str] = ("x", "y"), error: Error | None = None,
                 default: Any = False, fault_policy: str = ROBUST,
                 timeout: float | None = None, timeout_workers: int = 4) -> None:
        self.sampling = sampling if isinstance(sampling, Sampling) else Sampling(tuple(sampling))
        self.engine = engine if engine is not None else JsExpressionEngine()
        self.parameter_names = tuple(parameter_names)
        self.error = error if error is not None else Error()
        self.default = default
        self.fault_policy = str(fault_policy).upper()
        self.timeout = timeout

        if len(self.parameter_names) < self.sampling.arity:
            raise ConfigurationError(
                "missing_parameter_names",
                "Fewer parameter names than sample inputs",
                names=self.parameter_names,
                arity=self.sampling.arity,
            )
        if self.fault_policy not in FAULT_POLICIES:
            raise ConfigurationError(
                "unknown_fault_policy",
                f"Unknown fault policy: {fault_policy}",
                policy=fault_policy,
            )
        if timeout is not None and not timeout > 0:
            raise ConfigurationError("invalid_timeout", "Timeout must be positive", timeout=timeout)
        if timeout_workers <= 0:
            raise ConfigurationError(
                "invalid_timeout_workers",
                "timeout_workers must be positive",
                timeout_workers=timeout_workers,
            )
        self._pool = (
            ThreadPoolExecutor(max_workers=timeout_workers, thread_name_prefix="phenotype-eval")
            if timeout is not None else None
        )

    def bind(self, sample: Sample) -> dict[str, Any]:
        return dict(zip(self.parameter_names, sample.arguments))

    def _fault(self, phenotype: str, sample: Sample, exc: Exception) -> Any:
        if self.fault_policy == STRICT:
            raise EvaluationFault(
                "evaluation_fault",
                f"Evaluation of {phenotype!r} failed: {exc}",
                phenotype=phenotype,
                arguments=sample.arguments,
            ) from exc
        logging.debug(f"Evaluation fault for {phenotype!r} on {sample.arguments}: {exc}")
        return worst_case(sample.result)

    def _invoke(self, program: ScriptFunction, bindings: dict[str, Any]) -> Any:
        if self.timeout is None:
            return program(bindings)
        return _call_with_timeout(self._pool, program, bindings, self.timeout)

    def close(self) -> None:
        """Release the timeout pool; queued calls are dropped."""
        if self._pool is not None:
            self._pool.shutdown(wait=False, cancel_futures=True)

    def calculate(self, phenotype: str) -> tuple[list[Any], list[Any]]:
        """Calculated and expected outputs for every sample."""
        expected = [s.result for s in self.sampling]
        try:
            program = ScriptFunction(phenotype, self.engine)
        except Exception as exc:
            return [self._fault(phenotype, s, exc) for s in self.sampling], expected

        calculated: list[Any] = []
        for sample in self.sampling:
            try:
                value = self._invoke(program, self.bind(sample))
                if value is None:
                    value = self.default
                calculated.append(coerce(value, sample.result))
            except Exception as exc:
                calculated.append(self._fault(phenotype, sample, exc))
        return calculated, expected

    def __call__(self, phenotype: str) -> float:
        calculated, expected = self.calculate(phenotype)
        return float(self.error(
            phenotype,
            [encode(v) for v in calculated],
            [encode(v) for v in expected],
        ))


__all__ = [
    "ROBUST",
    "STRICT",
    "FAULT_POLICIES",
    "FitnessEvaluator",
    "coerce",
    "encode",
    "worst_case",
]
