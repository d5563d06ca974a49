import random

import pytest

from getruth.evolution.genotype import GenotypeLayout
from getruth.generation.mapper import (
    LEFT_TO_RIGHT,
    GrammarMapper,
    decode,
    derive,
    render,
    select_alternative,
)
from getruth.grammar.bnf import parse_bnf
from getruth.grammar.cfg import NonTerminal, Terminal
from getruth.regression.fitness import FitnessEvaluator
from getruth.regression.sampling import Sampling
from getruth.utils.validation import ConfigurationError

AND_GRAMMAR = parse_bnf("<expr> ::= x | y | (<expr>)&&(<expr>) | !(<expr>)")

REFERENCE = parse_bnf("""
<expr>         ::= <var> | <boolean-expr> | <ternary-expr>
<ternary-expr> ::= '(' <expr> ') ? (' <expr> ') : (' <expr> ')'
<boolean-expr> ::= (<expr>) <relation> (<expr>)
<unary>        ::= '!' <expr>
<relation>     ::= ' && ' | ' || ' | ' != ' | ' == '
<var>          ::= x | y
""")


def _random_genotypes(grammar, count, seed=0, codon_bound=None):
    layout = GenotypeLayout.for_grammar(grammar, multiplier=25, codon_bound=codon_bound)
    rng = random.Random(seed)
    return [layout.random_genotype(rng) for _ in range(count)]


def test_handmade_genotype_decodes_leftmost():
    derivation = derive([[2, 0, 1]], AND_GRAMMAR)
    assert derivation.render() == "(x)&&(y)"
    assert derivation.expansions == 3
    assert derivation.codon_reads == (3,)
    assert not derivation.truncated


def test_decode_returns_terminals_and_render_concatenates():
    terminals = decode([[3, 0]], AND_GRAMMAR)
    assert terminals == [Terminal("!("), Terminal("x"), Terminal(")")]
    assert render(terminals) == "!(x)"


def test_decoding_is_deterministic():
    for genotype in _random_genotypes(REFERENCE, 30, seed=11, codon_bound=1000):
        first = derive(genotype, REFERENCE)
        second = derive(genotype, REFERENCE)
        assert first == second


def test_decoding_respects_expansion_cap():
    for cap in (0, 1, 5, 50):
        for genotype in _random_genotypes(REFERENCE, 30, seed=cap):
            derivation = derive(genotype, REFERENCE, max_expansions=cap)
            assert derivation.expansions <= cap
            assert all(isinstance(t, Terminal) for t in derivation.terminals)


def test_chromosome_cursor_wraps_around():
    grammar = parse_bnf("""
        <s> ::= <d><d><d><d>
        <d> ::= 0 | 1 | 2 | 3
    """)
    derivation = derive([[0], [1, 2, 3]], grammar)
    assert derivation.render() == "1231"
    assert derivation.codon_reads == (1, 4)


@pytest.mark.parametrize("alternatives", [1, 2, 3, 4, 7])
def test_alternative_index_is_codon_mod_alternatives(alternatives):
    text = "<s> ::= " + " | ".join(f"a{i}" for i in range(alternatives))
    grammar = parse_bnf(text)
    for codon in range(10 * alternatives):
        assert derive([[codon]], grammar).render() == f"a{codon % alternatives}"
        chosen = select_alternative(grammar, NonTerminal("s"), codon)
        assert chosen == grammar.alternatives("s")[codon % alternatives]


def test_degenerate_recursive_genotype_truncates_without_error():
    derivation = derive([[2]], AND_GRAMMAR, max_expansions=50)
    assert derivation.truncated
    assert derivation.expansions == 50
    phenotype = derivation.render()
    assert phenotype == "(" * 50 + ")&&()" * 50

    fitness = FitnessEvaluator(Sampling.truth_table(lambda x, y: x and y, 2))
    assert fitness(phenotype) == 1.0


def test_left_to_right_expansion_order():
    chromosome = [[2, 2, 0, 0, 1, 1]]
    assert derive(chromosome, AND_GRAMMAR).render() == "((x)&&(x))&&(y)"
    assert derive(chromosome, AND_GRAMMAR, expansion=LEFT_TO_RIGHT).render() == "((x)&&(y))&&(x)"


def test_left_to_right_respects_cap():
    derivation = derive([[2]], AND_GRAMMAR, max_expansions=10, expansion=LEFT_TO_RIGHT)
    assert derivation.expansions == 10
    assert derivation.truncated


def test_explicit_start_symbol():
    assert derive([[0], [0], [0], [0], [2], [1]], REFERENCE, start="relation").render() == " != "


def test_undefined_start_symbol_is_rejected():
    grammar = parse_bnf("<expr> ::= x | y")
    with pytest.raises(ConfigurationError) as info:
        derive([[0]], grammar, start="nope")
    assert info.value.code == "undefined_start"
    assert info.value.context["start"] == "nope"
    with pytest.raises(ConfigurationError):
        GrammarMapper(grammar, start=NonTerminal("missing"))([[0]])


def test_genotype_shape_must_match_grammar():
    with pytest.raises(ConfigurationError) as info:
        derive([[0], [1]], AND_GRAMMAR)
    assert info.value.code == "genotype_shape"
    with pytest.raises(ConfigurationError):
        derive([[]], AND_GRAMMAR)


def test_unknown_expansion_order():
    with pytest.raises(ConfigurationError) as info:
        derive([[0]], AND_GRAMMAR, expansion="RIGHTMOST")
    assert info.value.code == "unknown_expansion"


def test_grammar_mapper_is_a_genotype_to_text_callable():
    mapper = GrammarMapper(AND_GRAMMAR, max_expansions=50)
    genotype = _random_genotypes(AND_GRAMMAR, 1, seed=5)[0]
    assert mapper(genotype) == render(mapper.decode(genotype))
    assert mapper.derive(genotype).render() == mapper(genotype)


def test_reference_grammar_phenotypes_contain_no_nonterminals():
    mapper = GrammarMapper(REFERENCE)
    for genotype in _random_genotypes(REFERENCE, 50, seed=3):
        assert "<" not in mapper(genotype)
