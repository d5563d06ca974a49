import math
import random
from collections import Counter

import pytest

from getruth.evolution.genotype import Genotype
from getruth.evolution.selection import best_of, quality, select_parents


def _population(fitnesses):
    return [Genotype(chromosomes=[[i]], fitness=f) for i, f in enumerate(fitnesses)]


def test_quality_orders_by_direction():
    assert quality(0.1) > quality(0.5)
    assert quality(0.1, minimizing=False) < quality(0.5, minimizing=False)
    assert quality(None) == -math.inf
    assert quality(float("nan"), minimizing=False) == -math.inf


def test_best_of_prefers_earliest_on_ties():
    population = _population([0.5, 0.1, 0.1])
    assert best_of(population) is population[1]
    assert best_of(population, minimizing=False) is population[0]


def test_full_tournament_returns_best():
    population = _population([0.9, 0.2, 0.5, 0.7])
    rng = random.Random(0)
    chosen = select_parents(population, 5, "tournament", rng, {"tournament_size": 4})
    assert all(g is population[1] for g in chosen)
    chosen = select_parents(population, 5, "TOURNAMENT", rng, {"tournament_size": 10, "minimizing": False})
    assert all(g is population[0] for g in chosen)


def test_roulette_favours_better_individuals():
    population = _population([1.0, 0.0])
    rng = random.Random(1)
    counts = Counter(id(g) for g in select_parents(population, 500, "ROULETTE", rng, {}))
    assert counts[id(population[1])] > counts[id(population[0])]


def test_roulette_never_picks_invalid_when_valid_exist():
    population = _population([math.inf, 0.3, float("nan"), 0.6])
    rng = random.Random(2)
    chosen = select_parents(population, 200, "ROULETTE", rng, {})
    assert all(math.isfinite(g.fitness) for g in chosen)


def test_roulette_falls_back_to_uniform_when_all_invalid():
    population = _population([math.inf, math.inf])
    chosen = select_parents(population, 10, "ROULETTE", random.Random(3), {})
    assert len(chosen) == 10


def test_rank_selection_favours_better_individuals():
    population = _population([0.8, 0.1, 0.4])
    rng = random.Random(4)
    counts = Counter(id(g) for g in select_parents(population, 600, "RANK", rng, {}))
    assert counts[id(population[1])] > counts[id(population[0])]


def test_selection_errors():
    with pytest.raises(ValueError):
        select_parents([], 2, "TOURNAMENT", random.Random(0), {})
    with pytest.raises(ValueError):
        select_parents(_population([0.1]), 2, "LOTTERY", random.Random(0), {})
