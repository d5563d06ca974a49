"""Run configuration and presets.

``EvolutionConfig`` is immutable and validated on construction; every invalid
combination raises ``ConfigurationError`` before a generation runs. Presets are
plain dicts so they can be tweaked and passed to ``EvolutionConfig.from_dict``.
"""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass
from typing import Any, Mapping

from getruth.generation.mapper import EXPANSION_ORDERS, LEFTMOST
from getruth.utils.validation import ConfigurationError

SELECTION_STRATEGIES = ("TOURNAMENT", "ROULETTE", "RANK")
CROSSOVER_OPERATORS = ("SINGLE_POINT", "CHROMOSOME_SINGLE_POINT", "UNIFORM")
MUTATION_OPERATORS = ("SWAP", "INT_FLIP")
OPTIMIZE_DIRECTIONS = ("MINIMIZE", "MAXIMIZE")


@dataclass(frozen=True)
class EvolutionConfig:
    population_size: int = 50
    chromosome_length_multiplier: int = 25
    codon_bound: int | None = None
    max_expansions: int = 50
    expansion: str = LEFTMOST
    selection: str = "TOURNAMENT"
    tournament_size: int = 3
    crossover: str = "SINGLE_POINT"
    crossover_rate: float = 0.5
    mutation: str = "SWAP"
    mutation_rate: float = 0.05
    elite_count: int = 0
    fitness_threshold: float | None = 0.05
    max_generations: int = 10000
    optimize: str = "MINIMIZE"
    parallel_workers: int = 0
    cache_fitness: bool = True
    fitness_cache_size: int = 10000
    seed: int | None = None
    log_every: int = 10

    def __post_init__(self) -> None:
        for name in ("expansion", "selection", "crossover", "mutation", "optimize"):
            object.__setattr__(self, name, str(getattr(self, name)).upper())
        self._validate()

    def _validate(self) -> None:
        positive = (
            "population_size",
            "chromosome_length_multiplier",
            "max_expansions",
            "max_generations",
            "tournament_size",
            "fitness_cache_size",
            "log_every",
        )
        for name in positive:
            value = getattr(self, name)
            if not isinstance(value, int) or value <= 0:
                raise ConfigurationError(
                    f"invalid_{name}",
                    f"{name} must be a positive integer",
                    **{name: value},
                )
        if self.codon_bound is not None and (not isinstance(self.codon_bound, int) or self.codon_bound <= 0):
            raise ConfigurationError(
                "invalid_codon_bound",
                "codon_bound must be a positive integer or None",
                codon_bound=self.codon_bound,
            )
        for name in ("crossover_rate", "mutation_rate"):
            value = getattr(self, name)
            if not 0.0 <= float(value) <= 1.0:
                raise ConfigurationError(
                    f"invalid_{name}",
                    f"{name} must lie in [0, 1]",
                    **{name: value},
                )
        if not 0 <= self.elite_count < self.population_size:
            raise ConfigurationError(
                "invalid_elite_count",
                "elite_count must lie in [0, population_size)",
                elite_count=self.elite_count,
                population_size=self.population_size,
            )
        if self.parallel_workers < 0:
            raise ConfigurationError(
                "invalid_parallel_workers",
                "parallel_workers must be >= 0",
                parallel_workers=self.parallel_workers,
            )

        choices = (
            ("expansion", EXPANSION_ORDERS),
            ("selection", SELECTION_STRATEGIES),
            ("crossover", CROSSOVER_OPERATORS),
            ("mutation", MUTATION_OPERATORS),
            ("optimize", OPTIMIZE_DIRECTIONS),
        )
        for name, allowed in choices:
            value = getattr(self, name)
            if value not in allowed:
                raise ConfigurationError(
                    f"unknown_{name}",
                    f"Unknown {name}: {value}; expected one of {allowed}",
                    **{name: value},
                )

        if self.fitness_threshold is not None:
            threshold = float(self.fitness_threshold)
            if not math.isfinite(threshold):
                raise ConfigurationError(
                    "invalid_fitness_threshold",
                    "fitness_threshold must be finite",
                    fitness_threshold=self.fitness_threshold,
                )
            if self.minimizing and threshold < 0:
                raise ConfigurationError(
                    "threshold_direction_mismatch",
                    "A negative threshold can never be reached when minimizing an error",
                    fitness_threshold=threshold,
                    optimize=self.optimize,
                )

    @property
    def minimizing(self) -> bool:
        return self.optimize == "MINIMIZE"

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> EvolutionConfig:
        known = {f.name for f in dataclasses.fields(cls)}
        extras = sorted(k for k in config if k not in known)
        if extras:
            raise ConfigurationError(
                "unknown_config_keys",
                f"Unknown configuration keys: {extras}",
                extras=tuple(extras),
            )
        return cls(**dict(config))

    def replace(self, **changes: Any) -> EvolutionConfig:
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)


PRESET_REFERENCE: dict[str, Any] = {
    "population_size": 50,
    "chromosome_length_multiplier": 25,
    "max_expansions": 50,
    "fitness_threshold": 0.05,
    "max_generations": 10000,
    "optimize": "MINIMIZE",
}

PRESET_QUICK: dict[str, Any] = {
    "population_size": 30,
    "chromosome_length_multiplier": 10,
    "max_expansions": 30,
    "fitness_threshold": 0.05,
    "max_generations": 200,
    "log_every": 50,
}


__all__ = [
    "EvolutionConfig",
    "PRESET_REFERENCE",
    "PRESET_QUICK",
    "SELECTION_STRATEGIES",
    "CROSSOVER_OPERATORS",
    "MUTATION_OPERATORS",
    "OPTIMIZE_DIRECTIONS",
]
