"""
Grammar and Mapping Tutorial

Goals:
- Parse a BNF grammar
- Build a genotype layout (one chromosome per rule)
- Decode a genotype step by step and inspect the derivation metrics
"""

from getruth.evolution.genotype import GenotypeLayout
from getruth.generation.mapper import derive
from getruth.grammar.bnf import parse_bnf
from getruth.utils.rng_manager import RNGManager


def main():
    grammar = parse_bnf("""
        <expr> ::= x | y | (<expr>)&&(<expr>) | !(<expr>)
    """)
    print('rules:', len(grammar.rules), 'start:', grammar.start)

    # Codon 2 selects '(<expr>)&&(<expr>)', then 0 -> 'x', 1 -> 'y'.
    handmade = derive([[2, 0, 1]], grammar, max_expansions=50)
    print('handmade:', handmade.render(), 'expansions:', handmade.expansions)

    # Every codon picks the recursive alternative: the expansion cap truncates.
    degenerate = derive([[2]], grammar, max_expansions=10)
    print('degenerate:', repr(degenerate.render()), 'truncated:', degenerate.truncated)

    layout = GenotypeLayout.for_grammar(grammar, multiplier=25)
    rng = RNGManager(seed=42).get_context_rng('initialization')
    genotype = layout.random_genotype(rng)
    print('layout:', layout.lengths, 'random phenotype:', derive(genotype, grammar).render())


if __name__ == '__main__':
    main()
