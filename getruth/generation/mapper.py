"""Genotype -> phenotype mapping.

Implements codon-driven derivation over a ``Grammar``:

- one chromosome per rule, read through its own cursor which wraps modulo the
  chromosome length
- the alternative chosen for a nonterminal is ``codon % len(alternatives)``
- at most ``max_expansions`` nonterminal expansions; past the cap the
  derivation is truncated: pending terminals are kept, pending nonterminals
  are dropped, and no error is raised
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from getruth.grammar.cfg import Grammar, NonTerminal, Terminal
from getruth.utils.validation import ConfigurationError

LEFTMOST = "LEFTMOST"
LEFT_TO_RIGHT = "LEFT_TO_RIGHT"
EXPANSION_ORDERS = (LEFTMOST, LEFT_TO_RIGHT)


@dataclass(frozen=True)
class Derivation:
    """Result of one derivation and its bookkeeping."""

    terminals: tuple[Terminal, ...]
    expansions: int
    codon_reads: tuple[int, ...]
    truncated: bool

    def render(self) -> str:
        return render(self.terminals)


class _CodonCursors:
    """Per-chromosome read positions with modulo wraparound."""

    def __init__(self, chromosomes: Sequence[Sequence[int]]) -> None:
        self.chromosomes = chromosomes
        self.reads = [0] * len(chromosomes)

    def next(self, index: int) -> int:
        chromosome = self.chromosomes[index]
        codon = chromosome[self.reads[index] % len(chromosome)]
        self.reads[index] += 1
        return codon


def _chromosomes_of(genotype: Any) -> Sequence[Sequence[int]]:
    return getattr(genotype, "chromosomes", genotype)


def select_alternative(grammar: Grammar, nonterminal: NonTerminal, codon: int) -> tuple:
    alternatives = grammar.alternatives(nonterminal)
    return alternatives[codon % len(alternatives)]


def derive(genotype: Any, grammar: Grammar, start: NonTerminal | str | None = None,
           max_expansions: int = 50, expansion: str = LEFTMOST) -> Derivation:
    """Derive a terminal sentence from ``genotype``.

    Args:
        genotype: A ``Genotype`` or a sequence of codon sequences, one per
            grammar rule in rule order.
        grammar: Grammar to derive from; never modified.
        start: Start nonterminal; defaults to the grammar's start symbol.
        max_expansions: Expansion cap.
        expansion: ``LEFTMOST`` (one nonterminal per step) or
            ``LEFT_TO_RIGHT`` (every nonterminal of the sentence per pass).

    Returns:
        Derivation record. Identical inputs always give identical records.
    """
    chromosomes = _chromosomes_of(genotype)
    if len(chromosomes) != len(grammar.rules) or any(len(ch) == 0 for ch in chromosomes):
        raise ConfigurationError(
            "genotype_shape",
            "Genotype needs one non-empty chromosome per grammar rule",
            rules=len(grammar.rules),
            shape=tuple(len(ch) for ch in chromosomes),
        )
    if expansion not in EXPANSION_ORDERS:
        raise ConfigurationError(
            "unknown_expansion",
            f"Unknown expansion order: {expansion}",
            expansion=expansion,
        )

    if start is None:
        start = grammar.start
    elif isinstance(start, str):
        start = NonTerminal(start)
    if start not in grammar.nonterminals:
        raise ConfigurationError(
            "undefined_start",
            f"Start symbol {start} has no rule",
            start=start.name,
        )

    cursors = _CodonCursors(chromosomes)
    if expansion == LEFTMOST:
        output, expansions, pending = _derive_leftmost(grammar, start, cursors, max_expansions)
    else:
        output, expansions, pending = _derive_left_to_right(grammar, start, cursors, max_expansions)

    truncated = any(isinstance(s, NonTerminal) for s in pending)
    if truncated:
        logging.debug(
            f"Derivation truncated after {expansions} expansions; "
            f"{sum(isinstance(s, NonTerminal) for s in pending)} nonterminals dropped"
        )
    output.extend(s for s in pending if isinstance(s, Terminal))

    return Derivation(
        terminals=tuple(output),
        expansions=expansions,
        codon_reads=tuple(cursors.reads),
        truncated=truncated,
    )


def _derive_leftmost(grammar: Grammar, start: NonTerminal, cursors: _CodonCursors,
                     max_expansions: int) -> tuple[list[Terminal], int, list]:
    pending: deque = deque([start])
    output: list[Terminal] = []
    expansions = 0
    while pending and expansions < max_expansions:
        symbol = pending.popleft()
        if isinstance(symbol, Terminal):
            output.append(symbol)
            continue
        codon = cursors.next(grammar.rule_index(symbol))
        pending.extendleft(reversed(select_alternative(grammar, symbol, codon)))
        expansions += 1
    return output, expansions, list(pending)


def _derive_left_to_right(grammar: Grammar, start: NonTerminal, cursors: _CodonCursors,
                          max_expansions: int) -> tuple[list[Terminal], int, list]:
    sentence: list = [start]
    expansions = 0
    while expansions < max_expansions and any(isinstance(s, NonTerminal) for s in sentence):
        expanded: list = []
        for symbol in sentence:
            if isinstance(symbol, NonTerminal) and expansions < max_expansions:
                codon = cursors.next(grammar.rule_index(symbol))
                expanded.extend(select_alternative(grammar, symbol, codon))
                expansions += 1
            else:
                expanded.append(symbol)
        sentence = expanded
    return [], expansions, sentence


def decode(genotype: Any, grammar: Grammar, start: NonTerminal | str | None = None,
           max_expansions: int = 50, expansion: str = LEFTMOST) -> list[Terminal]:
    """Terminal sentence for ``genotype``; see ``derive``."""
    return list(derive(genotype, grammar, start, max_expansions, expansion).terminals)


def render(terminals: Iterable[Terminal]) -> str:
    """Concatenate terminal values with no separators."""
    return "".join(t.value for t in terminals)


@dataclass(frozen=True)
class GrammarMapper:
    """Binds a grammar and mapping options into a ``genotype -> str`` callable."""

    grammar: Grammar
    max_expansions: int = 50
    expansion: str = LEFTMOST
    start: NonTerminal | None = None

    def derive(self, genotype: Any) -> Derivation:
        return derive(genotype, self.grammar, self.start, self.max_expansions, self.expansion)

    def decode(self, genotype: Any) -> list[Terminal]:
        return list(self.derive(genotype).terminals)

    def __call__(self, genotype: Any) -> str:
        return self.derive(genotype).render()


__all__ = [
    "LEFTMOST",
    "LEFT_TO_RIGHT",
    "EXPANSION_ORDERS",
    "Derivation",
    "GrammarMapper",
    "derive",
    "decode",
    "render",
    "select_alternative",
]
