"""Parent selection strategies over evaluated genotypes."""

from __future__ import annotations

import math
import random
from typing import Any, Mapping, Sequence

from getruth.evolution.genotype import Genotype


def quality(fitness: float | None, minimizing: bool = True) -> float:
    """Map a fitness to a 'higher is better' score; missing or NaN is worst."""
    if fitness is None or math.isnan(fitness):
        return -math.inf
    return -fitness if minimizing else fitness


def best_of(population: Sequence[Genotype], minimizing: bool = True) -> Genotype:
    """Best genotype; ties resolve to the earliest one."""
    return max(population, key=lambda g: quality(g.fitness, minimizing))


def _tournament(population: Sequence[Genotype], count: int, rng: random.Random,
                size: int, minimizing: bool) -> list[Genotype]:
    size = min(size, len(population))
    return [best_of(rng.sample(list(population), size), minimizing) for _ in range(count)]


def _roulette(population: Sequence[Genotype], count: int, rng: random.Random,
              minimizing: bool) -> list[Genotype]:
    scores = [quality(g.fitness, minimizing) for g in population]
    finite = [s for s in scores if math.isfinite(s)]
    if not finite:
        return [rng.choice(list(population)) for _ in range(count)]
    floor = min(finite)
    span = max(finite) - floor
    # Shift so the worst finite score still gets a small share.
    epsilon = span * 1e-3 if span > 0 else 1.0
    weights = [(s - floor) + epsilon if math.isfinite(s) else 0.0 for s in scores]
    return rng.choices(list(population), weights=weights, k=count)


def _rank(population: Sequence[Genotype], count: int, rng: random.Random,
          minimizing: bool) -> list[Genotype]:
    ordered = sorted(population, key=lambda g: quality(g.fitness, minimizing))
    weights = [float(i + 1) for i in range(len(ordered))]
    return rng.choices(ordered, weights=weights, k=count)


def select_parents(population: Sequence[Genotype], count: int, strategy: str,
                   rng: random.Random, config: Mapping[str, Any]) -> list[Genotype]:
    """Select ``count`` parents (with replacement) from an evaluated population.

    Args:
        population: Genotypes with fitness assigned.
        count: Number of parents to draw.
        strategy: ``TOURNAMENT``, ``ROULETTE`` or ``RANK``.
        rng: Random source for this selection.
        config: Reads ``tournament_size`` and ``minimizing``.
    """
    if not population:
        raise ValueError("Cannot select from an empty population")
    minimizing = bool(config.get("minimizing", True))
    strategy = str(strategy).upper()
    if strategy == "TOURNAMENT":
        return _tournament(population, count, rng, int(config.get("tournament_size", 3)), minimizing)
    if strategy == "ROULETTE":
        return _roulette(population, count, rng, minimizing)
    if strategy == "RANK":
        return _rank(population, count, rng, minimizing)
    raise ValueError(f"Unknown selection strategy: {strategy}")


__all__ = ["quality", "best_of", "select_parents"]
