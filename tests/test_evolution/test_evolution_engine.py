import pytest

from getruth.config import EvolutionConfig
from getruth.evolution.engine import (
    GENERATION_LIMIT,
    THRESHOLD_REACHED,
    EvolutionEngine,
    FitnessCache,
)
from getruth.evolution.genotype import Genotype, GenotypeLayout
from getruth.grammar.bnf import parse_bnf
from getruth.regression.fitness import STRICT, FitnessEvaluator
from getruth.regression.sampling import Sampling
from getruth.utils.observability import determinism_signature, run_report
from getruth.utils.validation import ConfigurationError, EvaluationFault

AND_GRAMMAR = parse_bnf("<expr> ::= x | y | (<expr>)&&(<expr>) | !(<expr>)")
AND = Sampling.truth_table(lambda x, y: x and y, 2)
XOR = Sampling.truth_table(lambda x, y: x != y, 2)


def _run(grammar=AND_GRAMMAR, sampling=AND, observer=None, **overrides):
    params = dict(population_size=30, fitness_threshold=0.01, max_generations=200, seed=1234)
    params.update(overrides)
    config = EvolutionConfig(**params)
    engine = EvolutionEngine.for_grammar(grammar, FitnessEvaluator(sampling), config, observer=observer)
    return engine.run()


def test_finds_and_function():
    result = _run(population_size=50, max_generations=500)
    assert result.best_fitness <= 0.01
    assert result.termination_reason == THRESHOLD_REACHED
    assert result.total_generations < 500
    assert FitnessEvaluator(AND)(result.best_phenotype) <= 0.01


def test_unreachable_target_stops_at_generation_limit():
    grammar = parse_bnf("<expr> ::= x | y")
    result = _run(grammar=grammar, sampling=XOR, max_generations=7)
    assert result.termination_reason == GENERATION_LIMIT
    assert result.total_generations == 7
    assert len(result.history) == 7
    assert result.best_fitness == 0.5


def test_best_is_running_minimum_over_history():
    records = []
    result = _run(max_generations=40, fitness_threshold=0.0, observer=records.append)
    assert len(records) == result.total_generations
    assert [r.generation for r in records] == list(range(1, result.total_generations + 1))
    assert result.best_fitness == min(r.best_fitness for r in result.history)
    if result.termination_reason == THRESHOLD_REACHED:
        assert result.best_fitness <= 0.0


def test_same_seed_reproduces_run():
    first = run_report(_run(max_generations=15, fitness_threshold=0.0))
    second = run_report(_run(max_generations=15, fitness_threshold=0.0))
    assert determinism_signature(first) == determinism_signature(second)
    assert first["best_genotype"] == second["best_genotype"]


def test_different_seeds_diverge():
    first = run_report(_run(max_generations=5, fitness_threshold=0.0, seed=1))
    second = run_report(_run(max_generations=5, fitness_threshold=0.0, seed=2))
    assert determinism_signature(first) != determinism_signature(second)


def test_parallel_evaluation_matches_serial():
    serial = run_report(_run(max_generations=10, fitness_threshold=0.0))
    parallel = run_report(_run(max_generations=10, fitness_threshold=0.0, parallel_workers=4))
    assert determinism_signature(serial) == determinism_signature(parallel)


def test_elitism_never_loses_the_best():
    result = _run(max_generations=20, fitness_threshold=0.0, elite_count=2)
    bests = [r.best_fitness for r in result.history]
    assert all(later <= earlier for earlier, later in zip(bests, bests[1:]))


def test_fitness_cache_records_hits():
    result = _run(max_generations=10, fitness_threshold=0.0)
    assert result.cache_metrics["hits"] > 0
    assert result.cache_metrics["entries"] <= 10000
    assert _run(max_generations=2, fitness_threshold=0.0, cache_fitness=False).cache_metrics == {}


def test_fitness_cache_is_bounded():
    cache = FitnessCache(max_entries=2)
    cache.put("a", 1.0)
    cache.put("b", 2.0)
    assert cache.get("a") == 1.0
    cache.put("c", 3.0)
    assert cache.get("b") is None
    assert cache.get("a") == 1.0
    assert cache.metrics() == {"entries": 2, "hits": 2, "misses": 1}


def test_strict_fault_aborts_run():
    grammar = parse_bnf("<expr> ::= '(('")
    config = EvolutionConfig(population_size=4, max_generations=3, seed=0)
    engine = EvolutionEngine.for_grammar(grammar, FitnessEvaluator(AND, fault_policy=STRICT), config)
    with pytest.raises(EvaluationFault):
        engine.run()


def test_initial_population_is_validated():
    config = EvolutionConfig(population_size=4, max_generations=3, seed=0)
    engine = EvolutionEngine.for_grammar(AND_GRAMMAR, FitnessEvaluator(AND), config)
    population = engine.initialize()
    assert len(population) == 4
    assert all(g.shape == (100,) for g in population)

    with pytest.raises(ConfigurationError) as info:
        engine.run(population[:3])
    assert info.value.code == "population_size_mismatch"

    bad = population[:3] + [Genotype(chromosomes=[[0, 1]])]
    with pytest.raises(ConfigurationError) as info:
        engine.run(bad)
    assert info.value.code == "genotype_shape"


def test_seeded_initial_population_is_used():
    config = EvolutionConfig(population_size=2, max_generations=1, seed=0)
    engine = EvolutionEngine.for_grammar(AND_GRAMMAR, FitnessEvaluator(AND), config)
    exact = [0, 0, 0, 0] * 25
    exact[:3] = [2, 0, 1]
    population = [Genotype(chromosomes=[exact]), Genotype(chromosomes=[[0] * 100])]
    result = engine.run(population)
    assert result.best_phenotype == "(x)&&(y)"
    assert result.best_fitness == 0.0
    assert result.termination_reason == THRESHOLD_REACHED


def test_maximizing_run():
    config = EvolutionConfig(population_size=20, optimize="maximize", fitness_threshold=10.0,
                             max_generations=100, seed=3)
    layout = GenotypeLayout.for_grammar(AND_GRAMMAR)
    engine = EvolutionEngine.for_grammar(AND_GRAMMAR, lambda p: float(len(p)), config)
    result = engine.run()
    assert engine.layout == layout
    assert result.best_fitness >= 10.0
    assert len(result.best_phenotype) == result.best_fitness
