"""Genotype record and grammar-derived chromosome layout."""

from __future__ import annotations

import random
import uuid
from dataclasses import dataclass, field
from typing import Any, Sequence

from getruth.grammar.cfg import Grammar
from getruth.utils.validation import ConfigurationError


@dataclass
class Genotype:
    """Fixed-layout integer genotype, one chromosome per grammar rule.

    Attributes:
        chromosomes: Codon tuples in grammar rule order
        genotype_id: Unique identifier for this genotype
        fitness: Optional fitness value assigned by evaluation
        history: Additional bookkeeping data (parents, operator)
    """

    chromosomes: tuple[tuple[int, ...], ...] = ()
    genotype_id: uuid.UUID = field(default_factory=uuid.uuid4)
    fitness: float | None = None
    history: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.chromosomes = tuple(tuple(int(c) for c in ch) for ch in self.chromosomes)

    def __len__(self) -> int:
        return sum(len(ch) for ch in self.chromosomes)

    @property
    def shape(self) -> tuple[int, ...]:
        return tuple(len(ch) for ch in self.chromosomes)

    def codons(self) -> list[int]:
        """All codons flattened in layout order."""
        return [c for ch in self.chromosomes for c in ch]


@dataclass(frozen=True)
class GenotypeLayout:
    """Chromosome lengths and exclusive codon bounds for one grammar."""

    lengths: tuple[int, ...]
    bounds: tuple[int, ...]

    def __post_init__(self) -> None:
        if len(self.lengths) != len(self.bounds):
            raise ConfigurationError(
                "layout_mismatch",
                "Chromosome lengths and codon bounds differ in size",
                lengths=len(self.lengths),
                bounds=len(self.bounds),
            )
        if any(n <= 0 for n in self.lengths) or any(b <= 0 for b in self.bounds):
            raise ConfigurationError(
                "invalid_layout",
                "Chromosome lengths and codon bounds must be positive",
                lengths=self.lengths,
                bounds=self.bounds,
            )

    @classmethod
    def for_grammar(cls, grammar: Grammar, multiplier: int = 25,
                    codon_bound: int | None = None) -> GenotypeLayout:
        """Layout with ``alternatives * multiplier`` codons per rule.

        With ``codon_bound=None`` each chromosome draws codons from
        ``[0, alternatives)``; otherwise from ``[0, codon_bound)``.
        """
        lengths = tuple(len(rule.alternatives) * int(multiplier) for rule in grammar.rules)
        if codon_bound is None:
            bounds = tuple(len(rule.alternatives) for rule in grammar.rules)
        else:
            bounds = tuple(int(codon_bound) for _ in grammar.rules)
        return cls(lengths=lengths, bounds=bounds)

    def random_genotype(self, rng: random.Random, genotype_id: Any | None = None) -> Genotype:
        chromosomes = tuple(
            tuple(rng.randrange(bound) for _ in range(length))
            for length, bound in zip(self.lengths, self.bounds)
        )
        if genotype_id is None:
            return Genotype(chromosomes=chromosomes)
        return Genotype(chromosomes=chromosomes, genotype_id=genotype_id)

    def check(self, chromosomes: Sequence[Sequence[int]]) -> None:
        shape = tuple(len(ch) for ch in chromosomes)
        if shape != self.lengths:
            raise ConfigurationError(
                "genotype_shape",
                "Genotype does not match the grammar layout",
                expected=self.lengths,
                actual=shape,
            )


__all__ = ["Genotype", "GenotypeLayout"]
