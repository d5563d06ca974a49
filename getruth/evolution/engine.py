"""Generational evolution engine.

The engine composes three plain callables: a genotype layout for random
initialisation, ``decode`` (genotype -> phenotype text) and ``fitness``
(phenotype text -> scalar). One run is a sequential loop:

    initialise -> evaluate -> record best -> check termination -> vary -> ...

Termination is checked once per completed generation: the running best
fitness reaching the threshold, or the generation count reaching the maximum,
whichever happens first.
"""

from __future__ import annotations

import logging
import math
import threading
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

import numpy as np

from getruth.config import EvolutionConfig
from getruth.evolution.genotype import Genotype, GenotypeLayout
from getruth.evolution.operators import CROSSOVERS, MUTATIONS
from getruth.evolution.selection import quality, select_parents
from getruth.generation.mapper import GrammarMapper
from getruth.grammar.cfg import Grammar
from getruth.utils.rng_manager import RNGManager
from getruth.utils.validation import ConfigurationError, EvaluationFault

THRESHOLD_REACHED = "fitness_threshold"
GENERATION_LIMIT = "max_generations"


@dataclass(frozen=True)
class GenerationRecord:
    generation: int
    best_fitness: float
    mean_fitness: float
    best_phenotype: str
    invalid_count: int
    population_size: int


@dataclass
class EvolutionResult:
    best_genotype: Genotype
    best_fitness: float
    best_phenotype: str
    total_generations: int
    termination_reason: str
    history: list[GenerationRecord] = field(default_factory=list)
    cache_metrics: dict[str, int] = field(default_factory=dict)


class FitnessCache:
    """Bounded LRU map from phenotype text to fitness."""

    def __init__(self, max_entries: int = 10000) -> None:
        self.max_entries = max(1, int(max_entries))
        self._entries: OrderedDict[str, float] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, phenotype: str) -> float | None:
        with self._lock:
            if phenotype in self._entries:
                self._entries.move_to_end(phenotype)
                self.hits += 1
                return self._entries[phenotype]
            self.misses += 1
            return None

    def put(self, phenotype: str, fitness: float) -> None:
        with self._lock:
            self._entries[phenotype] = fitness
            self._entries.move_to_end(phenotype)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def metrics(self) -> dict[str, int]:
        return {"entries": len(self._entries), "hits": self.hits, "misses": self.misses}


class EvolutionEngine:
    """Owns the population and drives generations.

    Args:
        layout: Chromosome layout used for random initialisation.
        decode: Genotype -> phenotype text.
        fitness: Phenotype text -> scalar fitness.
        config: Run configuration (defaults to ``EvolutionConfig()``).
        rng_manager: Source of randomness; seeded from ``config.seed`` if absent.
        observer: Optional callback invoked with each ``GenerationRecord``.
    """

    def __init__(self, layout: GenotypeLayout, decode: Callable[[Genotype], str],
                 fitness: Callable[[str], float], config: EvolutionConfig | None = None,
                 rng_manager: RNGManager | None = None,
                 observer: Callable[[GenerationRecord], None] | None = None) -> None:
        self.layout = layout
        self.decode = decode
        self.fitness = fitness
        self.config = config if config is not None else EvolutionConfig()
        self.rng_manager = rng_manager if rng_manager is not None else RNGManager(self.config.seed)
        self.observer = observer
        self.cache = FitnessCache(self.config.fitness_cache_size) if self.config.cache_fitness else None

        self._crossover = CROSSOVERS[self.config.crossover]
        self._mutate = MUTATIONS[self.config.mutation]
        self._operator_config: dict[str, Any] = {
            "mutation_rate": self.config.mutation_rate,
            "codon_bounds": self.layout.bounds,
            "tournament_size": self.config.tournament_size,
            "minimizing": self.config.minimizing,
        }

    @classmethod
    def for_grammar(cls, grammar: Grammar, fitness: Callable[[str], float],
                    config: EvolutionConfig | None = None, rng_manager: RNGManager | None = None,
                    observer: Callable[[GenerationRecord], None] | None = None) -> EvolutionEngine:
        """Engine whose genotypes decode against ``grammar``."""
        config = config if config is not None else EvolutionConfig()
        layout = GenotypeLayout.for_grammar(grammar, config.chromosome_length_multiplier, config.codon_bound)
        mapper = GrammarMapper(grammar, max_expansions=config.max_expansions, expansion=config.expansion)
        return cls(layout, mapper, fitness, config, rng_manager, observer)

    # ------------------------------------------------------------------ steps

    def initialize(self) -> list[Genotype]:
        rng = self.rng_manager.get_context_rng("initialization")
        return [
            self.layout.random_genotype(rng, genotype_id=self.rng_manager.new_id("initialization"))
            for _ in range(self.config.population_size)
        ]

    def _score(self, genotype: Genotype) -> float:
        phenotype = self.decode(genotype)
        genotype.history["phenotype"] = phenotype
        if self.cache is not None:
            cached = self.cache.get(phenotype)
            if cached is not None:
                return cached
        value = float(self.fitness(phenotype))
        if self.cache is not None:
            self.cache.put(phenotype, value)
        return value

    def evaluate(self, population: Sequence[Genotype]) -> list[Genotype]:
        """Assign fitness to every genotype that has none yet."""
        pending = [g for g in population if g.fitness is None]
        try:
            if self.config.parallel_workers > 0 and len(pending) > 1:
                with ThreadPoolExecutor(max_workers=self.config.parallel_workers) as pool:
                    scores = list(pool.map(self._score, pending))
            else:
                scores = [self._score(g) for g in pending]
        except EvaluationFault as exc:
            logging.error(f"Generation aborted by evaluation fault: {exc}")
            raise
        for genotype, score in zip(pending, scores):
            genotype.fitness = score
        return list(population)

    def _clone(self, parent: Genotype) -> Genotype:
        return Genotype(
            chromosomes=parent.chromosomes,
            genotype_id=self.rng_manager.new_id("offspring"),
            history={"parent": parent.genotype_id, "operator": "clone"},
        )

    def next_generation(self, population: Sequence[Genotype]) -> list[Genotype]:
        """Selection, crossover, mutation and replacement of an evaluated population."""
        size = self.config.population_size
        ranked = sorted(population, key=lambda g: quality(g.fitness, self.config.minimizing), reverse=True)
        offspring: list[Genotype] = list(ranked[: self.config.elite_count])

        selection_rng = self.rng_manager.get_context_rng("selection")
        variation_rng = self.rng_manager.get_context_rng("variation")
        while len(offspring) < size:
            parent1, parent2 = select_parents(
                population, 2, self.config.selection, selection_rng, self._operator_config
            )
            if variation_rng.random() < self.config.crossover_rate:
                child1, child2 = self._crossover(parent1, parent2, self._operator_config, self.rng_manager)
            else:
                child1, child2 = self._clone(parent1), self._clone(parent2)
            for child in (child1, child2):
                if len(offspring) < size:
                    offspring.append(self._mutate(child, self._operator_config, self.rng_manager))
        return offspring

    def _is_better(self, candidate: float, incumbent: float | None) -> bool:
        if incumbent is None:
            return True
        return quality(candidate, self.config.minimizing) > quality(incumbent, self.config.minimizing)

    def termination_reason(self, best_fitness: float | None, generation: int) -> str | None:
        threshold = self.config.fitness_threshold
        if threshold is not None and best_fitness is not None and not math.isnan(best_fitness):
            reached = best_fitness <= threshold if self.config.minimizing else best_fitness >= threshold
            if reached:
                return THRESHOLD_REACHED
        if generation >= self.config.max_generations:
            return GENERATION_LIMIT
        return None

    def _record(self, generation: int, population: Sequence[Genotype]) -> GenerationRecord:
        fitnesses = np.array([g.fitness for g in population], dtype=np.float64)
        finite = fitnesses[np.isfinite(fitnesses)]
        best = max(population, key=lambda g: quality(g.fitness, self.config.minimizing))
        return GenerationRecord(
            generation=generation,
            best_fitness=float(best.fitness),
            mean_fitness=float(finite.mean()) if finite.size else math.inf,
            best_phenotype=best.history.get("phenotype", ""),
            invalid_count=int(fitnesses.size - finite.size),
            population_size=len(population),
        )

    # -------------------------------------------------------------------- run

    def run(self, population: Sequence[Genotype] | None = None) -> EvolutionResult:
        """Evolve until a termination condition holds.

        Args:
            population: Optional initial population; must match the layout
                and the configured population size.

        Returns:
            The best genotype seen over all generations with its phenotype,
            fitness and the number of generations evaluated.
        """
        if population is None:
            population = self.initialize()
        else:
            if len(population) != self.config.population_size:
                raise ConfigurationError(
                    "population_size_mismatch",
                    "Initial population does not match population_size",
                    expected=self.config.population_size,
                    actual=len(population),
                )
            for genotype in population:
                self.layout.check(genotype.chromosomes)
            population = list(population)

        history: list[GenerationRecord] = []
        best: Genotype | None = None
        generation = 0
        reason: str | None = None
        while reason is None:
            population = self.evaluate(population)
            generation += 1

            record = self._record(generation, population)
            history.append(record)
            for genotype in population:
                if self._is_better(genotype.fitness, None if best is None else best.fitness):
                    best = genotype

            if generation == 1 or generation % self.config.log_every == 0:
                logging.info(
                    f"Gen {generation:05d}: best={record.best_fitness:.6f} "
                    f"mean={record.mean_fitness:.6f} phenotype={record.best_phenotype!r}"
                )
            if self.observer is not None:
                self.observer(record)

            reason = self.termination_reason(best.fitness, generation)
            if reason is None:
                population = self.next_generation(population)

        logging.info(f"Terminated after {generation} generations ({reason}); best={best.fitness:.6f}")
        return EvolutionResult(
            best_genotype=best,
            best_fitness=float(best.fitness),
            best_phenotype=self.decode(best),
            total_generations=generation,
            termination_reason=reason,
            history=history,
            cache_metrics=self.cache.metrics() if self.cache is not None else {},
        )


__all__ = [
    "THRESHOLD_REACHED",
    "GENERATION_LIMIT",
    "GenerationRecord",
    "EvolutionResult",
    "FitnessCache",
    "EvolutionEngine",
]
