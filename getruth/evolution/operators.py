"""Crossover and mutation operators.

Every operator keeps the genotype layout intact: the number of chromosomes and
the length of each chromosome never change. Operators never modify their
inputs; they return new ``Genotype`` records with fresh ids and no fitness.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from getruth.evolution.genotype import Genotype
from getruth.utils.rng_manager import RNGManager


def _check_compatible(parent1: Genotype, parent2: Genotype) -> None:
    if parent1.shape != parent2.shape:
        raise ValueError(f"Parents have different layouts: {parent1.shape} vs {parent2.shape}")


def _offspring(chromosomes: Any, rng_manager: RNGManager, **history: Any) -> Genotype:
    return Genotype(chromosomes=chromosomes, genotype_id=rng_manager.new_id("offspring"), history=history)


def single_point_crossover(parent1: Genotype, parent2: Genotype, config: Mapping[str, Any],
                           rng_manager: RNGManager) -> tuple[Genotype, Genotype]:
    """Exchange the genotype tails beyond one cut point.

    The cut falls between chromosomes when there are several of them, and
    inside the codon sequence when the genotype has a single chromosome.
    """
    _check_compatible(parent1, parent2)
    rng = rng_manager.get_rng_for_crossover(parent1.genotype_id, parent2.genotype_id)
    parents = (parent1.genotype_id, parent2.genotype_id)

    count = len(parent1.chromosomes)
    if count > 1:
        cut = rng.randrange(1, count)
        first = parent1.chromosomes[:cut] + parent2.chromosomes[cut:]
        second = parent2.chromosomes[:cut] + parent1.chromosomes[cut:]
    else:
        a, b = parent1.chromosomes[0], parent2.chromosomes[0]
        if len(a) < 2:
            return (
                _offspring(parent1.chromosomes, rng_manager, parents=parents, operator="copy"),
                _offspring(parent2.chromosomes, rng_manager, parents=parents, operator="copy"),
            )
        cut = rng.randrange(1, len(a))
        first = (a[:cut] + b[cut:],)
        second = (b[:cut] + a[cut:],)

    return (
        _offspring(first, rng_manager, parents=parents, operator="single_point", cut=cut),
        _offspring(second, rng_manager, parents=parents, operator="single_point", cut=cut),
    )


def chromosome_single_point_crossover(parent1: Genotype, parent2: Genotype, config: Mapping[str, Any],
                                      rng_manager: RNGManager) -> tuple[Genotype, Genotype]:
    """Pick one chromosome and exchange the codon tails inside it."""
    _check_compatible(parent1, parent2)
    rng = rng_manager.get_rng_for_crossover(parent1.genotype_id, parent2.genotype_id)
    parents = (parent1.genotype_id, parent2.genotype_id)

    index = rng.randrange(len(parent1.chromosomes))
    a, b = parent1.chromosomes[index], parent2.chromosomes[index]
    cut = rng.randrange(1, len(a)) if len(a) > 1 else 0
    first = list(parent1.chromosomes)
    second = list(parent2.chromosomes)
    first[index] = a[:cut] + b[cut:]
    second[index] = b[:cut] + a[cut:]

    return (
        _offspring(first, rng_manager, parents=parents, operator="chromosome_single_point", chromosome=index, cut=cut),
        _offspring(second, rng_manager, parents=parents, operator="chromosome_single_point", chromosome=index, cut=cut),
    )


def uniform_crossover(parent1: Genotype, parent2: Genotype, config: Mapping[str, Any],
                      rng_manager: RNGManager) -> tuple[Genotype, Genotype]:
    """Swap each whole chromosome between the parents with probability ``uniform_swap_probability``."""
    _check_compatible(parent1, parent2)
    rng = rng_manager.get_rng_for_crossover(parent1.genotype_id, parent2.genotype_id)
    parents = (parent1.genotype_id, parent2.genotype_id)
    p = float(config.get("uniform_swap_probability", 0.5))

    first: list[tuple[int, ...]] = []
    second: list[tuple[int, ...]] = []
    for a, b in zip(parent1.chromosomes, parent2.chromosomes):
        if rng.random() < p:
            a, b = b, a
        first.append(a)
        second.append(b)

    return (
        _offspring(first, rng_manager, parents=parents, operator="uniform"),
        _offspring(second, rng_manager, parents=parents, operator="uniform"),
    )


def swap_mutation(genotype: Genotype, config: Mapping[str, Any], rng_manager: RNGManager) -> Genotype:
    """Swap codon positions within a chromosome.

    Each codon is picked with probability ``mutation_rate`` and exchanged
    with a random position of the same chromosome. Returns the original
    genotype when nothing was picked.
    """
    rng = rng_manager.get_rng_for_mutation(genotype.genotype_id)
    rate = float(config.get("mutation_rate", 0.05))

    mutated = False
    chromosomes = []
    for chromosome in genotype.chromosomes:
        codons = list(chromosome)
        if len(codons) > 1:
            for i in range(len(codons)):
                if rng.random() < rate:
                    j = rng.randrange(len(codons))
                    codons[i], codons[j] = codons[j], codons[i]
                    mutated = True
        chromosomes.append(tuple(codons))

    if not mutated:
        return genotype
    return _offspring(chromosomes, rng_manager, parent=genotype.genotype_id, operator="swap")


def int_flip_mutation(genotype: Genotype, config: Mapping[str, Any], rng_manager: RNGManager) -> Genotype:
    """Resample codons within their chromosome's bound.

    Reads ``mutation_rate`` and ``codon_bounds`` (one exclusive bound per
    chromosome) from ``config``.
    """
    rng = rng_manager.get_rng_for_mutation(genotype.genotype_id)
    rate = float(config.get("mutation_rate", 0.05))
    bounds = config.get("codon_bounds")
    if bounds is None or len(bounds) != len(genotype.chromosomes):
        raise ValueError("int_flip_mutation needs one codon bound per chromosome")

    mutated = False
    chromosomes = []
    for chromosome, bound in zip(genotype.chromosomes, bounds):
        codons = list(chromosome)
        for i in range(len(codons)):
            if rng.random() < rate:
                codons[i] = rng.randrange(int(bound))
                mutated = True
        chromosomes.append(tuple(codons))

    if not mutated:
        return genotype
    return _offspring(chromosomes, rng_manager, parent=genotype.genotype_id, operator="int_flip")


CROSSOVERS: dict[str, Callable[..., tuple[Genotype, Genotype]]] = {
    "SINGLE_POINT": single_point_crossover,
    "CHROMOSOME_SINGLE_POINT": chromosome_single_point_crossover,
    "UNIFORM": uniform_crossover,
}

MUTATIONS: dict[str, Callable[..., Genotype]] = {
    "SWAP": swap_mutation,
    "INT_FLIP": int_flip_mutation,
}


__all__ = [
    "single_point_crossover",
    "chromosome_single_point_crossover",
    "uniform_crossover",
    "swap_mutation",
    "int_flip_mutation",
    "CROSSOVERS",
    "MUTATIONS",
]
