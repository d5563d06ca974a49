"""
Evolution Basics Tutorial

Goals:
- Score phenotypes against the AND truth table
- Apply single-point crossover and swap mutation deterministically
- Run the engine with a per-generation observer
"""

from getruth.config import EvolutionConfig
from getruth.evolution.engine import EvolutionEngine
from getruth.evolution.genotype import Genotype
from getruth.evolution.operators import single_point_crossover, swap_mutation
from getruth.grammar.bnf import parse_bnf
from getruth.regression.fitness import FitnessEvaluator
from getruth.regression.sampling import Sampling
from getruth.utils.rng_manager import RNGManager


def main():
    grammar = parse_bnf("<expr> ::= x | y | (<expr>)&&(<expr>) | !(<expr>)")
    samples = Sampling.truth_table(lambda x, y: x and y, arity=2)
    fitness = FitnessEvaluator(samples, parameter_names=('x', 'y'))

    print('error of x:', fitness('x'))
    print('error of (x)&&(y):', fitness('(x)&&(y)'))

    rng = RNGManager(seed=7)
    parent1 = Genotype(chromosomes=[(2, 0, 1, 3)], genotype_id=rng.new_id())
    parent2 = Genotype(chromosomes=[(3, 1, 0, 2)], genotype_id=rng.new_id())
    o1, o2 = single_point_crossover(parent1, parent2, {}, rng)
    print('offspring:', o1.chromosomes, o2.chromosomes)
    print('mutated:', swap_mutation(o1, {'mutation_rate': 0.5}, rng).chromosomes)

    config = EvolutionConfig(population_size=50, fitness_threshold=0.01, max_generations=500, seed=3)
    engine = EvolutionEngine.for_grammar(
        grammar,
        fitness,
        config,
        observer=lambda r: print(f"gen={r.generation} best={r.best_fitness:.3f} {r.best_phenotype}"),
    )
    result = engine.run()
    print('best:', result.best_phenotype, 'error:', result.best_fitness,
          'generations:', result.total_generations)


if __name__ == '__main__':
    main()
