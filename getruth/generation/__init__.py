"""Genotype to phenotype mapping."""

from .mapper import (  # noqa: F401
    EXPANSION_ORDERS,
    LEFT_TO_RIGHT,
    LEFTMOST,
    Derivation,
    GrammarMapper,
    decode,
    derive,
    render,
)

__all__ = [
    'EXPANSION_ORDERS',
    'LEFT_TO_RIGHT',
    'LEFTMOST',
    'Derivation',
    'GrammarMapper',
    'decode',
    'derive',
    'render',
]
