"""Sample sets: fixed (inputs, expected output) pairs."""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, Sequence


@dataclass(frozen=True)
class Sample:
    arguments: tuple[Any, ...]
    result: Any

    @classmethod
    def of(cls, row: Sequence[Any]) -> Sample:
        """Sample from a row whose last element is the expected output."""
        if len(row) < 1:
            raise ValueError("A sample row needs at least the expected output")
        return cls(arguments=tuple(row[:-1]), result=row[-1])

    @property
    def arity(self) -> int:
        return len(self.arguments)


@dataclass(frozen=True)
class SamplingResult:
    calculated: tuple[Any, ...]
    expected: tuple[Any, ...]


@dataclass(frozen=True)
class Sampling:
    """Ordered, read-only collection of samples."""

    samples: tuple[Sample, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "samples", tuple(self.samples))
        if not self.samples:
            raise ValueError("Sampling needs at least one sample")
        arities = {s.arity for s in self.samples}
        if len(arities) != 1:
            raise ValueError(f"Samples have mixed arities: {sorted(arities)}")

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[Any]]) -> Sampling:
        return cls(samples=tuple(Sample.of(row) for row in rows))

    @classmethod
    def truth_table(cls, fn: Callable[..., bool], arity: int) -> Sampling:
        """All ``2**arity`` boolean input rows with ``fn`` as the expected output."""
        rows = []
        for inputs in itertools.product((True, False), repeat=arity):
            rows.append(Sample(arguments=inputs, result=bool(fn(*inputs))))
        return cls(samples=tuple(rows))

    @property
    def arity(self) -> int:
        return self.samples[0].arity

    def __len__(self) -> int:
        return len(self.samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(self.samples)

    def eval(self, function: Callable[[tuple[Any, ...]], Any]) -> SamplingResult:
        calculated = tuple(function(s.arguments) for s in self.samples)
        expected = tuple(s.result for s in self.samples)
        return SamplingResult(calculated=calculated, expected=expected)


__all__ = ["Sample", "Sampling", "SamplingResult"]
