"""Evolutionary engine for getruth."""

from .engine import EvolutionEngine, EvolutionResult, FitnessCache, GenerationRecord
from .genotype import Genotype, GenotypeLayout
from .operators import (
    chromosome_single_point_crossover,
    int_flip_mutation,
    single_point_crossover,
    swap_mutation,
    uniform_crossover,
)
from .selection import select_parents

__all__ = [
    "EvolutionEngine",
    "EvolutionResult",
    "FitnessCache",
    "GenerationRecord",
    "Genotype",
    "GenotypeLayout",
    "chromosome_single_point_crossover",
    "int_flip_mutation",
    "single_point_crossover",
    "swap_mutation",
    "uniform_crossover",
    "select_parents",
]
