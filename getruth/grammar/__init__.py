"""Grammar model and BNF parsing."""

from .bnf import parse_bnf, tokenize
from .cfg import Grammar, NonTerminal, Rule, Symbol, Terminal

__all__ = [
    "Grammar",
    "NonTerminal",
    "Rule",
    "Symbol",
    "Terminal",
    "parse_bnf",
    "tokenize",
]
