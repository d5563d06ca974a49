"""
XOR Evolution Demo (getruth)

Summary:
- Evolves a JavaScript boolean expression over ``x`` and ``y`` that
  reproduces the XOR truth table
- Genotypes are decoded through a BNF grammar with one chromosome per rule
- Prints generations used, the best program and its error; optionally logs
  per-generation statistics to CSV

Use --quick for a short sanity run.
"""

from __future__ import annotations

import argparse
import csv
import logging
from typing import List

from getruth.config import PRESET_QUICK, PRESET_REFERENCE, EvolutionConfig
from getruth.evolution.engine import EvolutionEngine, GenerationRecord
from getruth.grammar.bnf import parse_bnf
from getruth.regression.fitness import FitnessEvaluator
from getruth.regression.loss import LOSS_FUNCTIONS, Error
from getruth.regression.sampling import Sampling

GRAMMAR = parse_bnf("""
    <expr>         ::= <var> | <boolean-expr> | <ternary-expr>
    <ternary-expr> ::= '(' <expr> ') ? (' <expr> ') : (' <expr> ')'
    <boolean-expr> ::= (<expr>) <relation> (<expr>)
    <unary>        ::= '!' <expr>
    <relation>     ::= ' && ' | ' || ' | ' != ' | ' == '
    <var>          ::= x | y
""")

XOR_SAMPLES = Sampling.from_rows([
    (True, True, False),
    (True, False, True),
    (False, True, True),
    (False, False, False),
])


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument('--seed', type=int, default=None)
    ap.add_argument('--pop', type=int, default=None, help='population size')
    ap.add_argument('--gens', type=int, default=None, help='maximum generations')
    ap.add_argument('--threshold', type=float, default=None, help='fitness threshold')
    ap.add_argument('--workers', type=int, default=0, help='threads for parallel evaluation')
    ap.add_argument('--loss', choices=sorted(LOSS_FUNCTIONS), default='mse', help='loss over the 0/1 encoding')
    ap.add_argument('--csv', type=str, default=None, help='write per-generation stats to this path')
    ap.add_argument('--quick', action='store_true', help='use a tiny config for sanity-run')
    ap.add_argument('-v', '--verbose', action='store_true')
    args = ap.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING,
                        format='%(levelname)s %(message)s')

    settings = dict(PRESET_QUICK if args.quick else PRESET_REFERENCE)
    overrides = {
        'seed': args.seed,
        'population_size': args.pop,
        'max_generations': args.gens,
        'fitness_threshold': args.threshold,
    }
    settings.update({k: v for k, v in overrides.items() if v is not None})
    settings['parallel_workers'] = args.workers
    config = EvolutionConfig.from_dict(settings)

    rows: List[dict] = []

    def observe(record: GenerationRecord) -> None:
        rows.append({
            'generation': record.generation,
            'best': round(record.best_fitness, 6),
            'mean': round(record.mean_fitness, 6),
            'invalid': record.invalid_count,
            'phenotype': record.best_phenotype,
        })

    fitness = FitnessEvaluator(XOR_SAMPLES, parameter_names=('x', 'y'), error=Error.named(args.loss))
    engine = EvolutionEngine.for_grammar(GRAMMAR, fitness, config, observer=observe)
    result = engine.run()

    print('Generations:', result.total_generations)
    print('Function:   ', result.best_phenotype)
    print('Error:      ', fitness(result.best_phenotype))

    if args.csv:
        with open(args.csv, 'w', newline='') as f:
            w = csv.DictWriter(f, fieldnames=['generation', 'best', 'mean', 'invalid', 'phenotype'])
            w.writeheader()
            w.writerows(rows)
        print('csv_log:', args.csv)


if __name__ == '__main__':
    main()
