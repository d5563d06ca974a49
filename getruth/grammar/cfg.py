"""Context-free grammar model.

A ``Grammar`` is an ordered, immutable set of rules. Each rule maps one
``NonTerminal`` to an ordered tuple of alternatives, and every alternative is a
non-empty tuple of symbols. The rule order fixes the chromosome order of the
genotypes that are decoded against the grammar.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Mapping, Union

from getruth.utils.validation import GrammarError


@dataclass(frozen=True)
class Terminal:
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class NonTerminal:
    name: str

    def __str__(self) -> str:
        return f"<{self.name}>"


Symbol = Union[Terminal, NonTerminal]
Alternative = tuple  # tuple[Symbol, ...]


@dataclass(frozen=True)
class ReadOnlyMapping(Mapping[str, Any]):
    data: dict[str, Any]

    def __getitem__(self, key: str) -> Any:  # type: ignore[override]
        return self.data[key]

    def __iter__(self) -> Iterator[str]:  # type: ignore[override]
        return iter(self.data)

    def __len__(self) -> int:  # type: ignore[override]
        return len(self.data)


@dataclass(frozen=True)
class Rule:
    start: NonTerminal
    alternatives: tuple[Alternative, ...]

    def __str__(self) -> str:
        alts = " | ".join(" ".join(_format_symbol(s) for s in alt) for alt in self.alternatives)
        return f"{self.start} ::= {alts}"


def _format_symbol(symbol: Symbol) -> str:
    if isinstance(symbol, NonTerminal):
        return str(symbol)
    return repr(symbol.value)


@dataclass(frozen=True)
class Grammar:
    """Immutable grammar; build with ``Grammar.of`` or ``parse_bnf``."""

    rules: tuple[Rule, ...]
    start: NonTerminal
    _index: ReadOnlyMapping = field(repr=False, compare=False, default=None)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if not self.rules:
            raise GrammarError("empty_grammar", "Grammar defines no rules")

        index: dict[str, int] = {}
        for position, rule in enumerate(self.rules):
            if rule.start.name in index:
                raise GrammarError(
                    "duplicate_rule",
                    f"Rule {rule.start} defined more than once",
                    nonterminal=rule.start.name,
                )
            if not rule.alternatives:
                raise GrammarError(
                    "empty_rule",
                    f"Rule {rule.start} has no alternatives",
                    nonterminal=rule.start.name,
                )
            index[rule.start.name] = position

        for rule in self.rules:
            for alt_index, alternative in enumerate(rule.alternatives):
                if not alternative:
                    raise GrammarError(
                        "empty_alternative",
                        f"Rule {rule.start} has an empty alternative",
                        nonterminal=rule.start.name,
                        alternative=alt_index,
                    )
                for symbol in alternative:
                    if isinstance(symbol, NonTerminal) and symbol.name not in index:
                        raise GrammarError(
                            "undefined_nonterminal",
                            f"Rule {rule.start} references undefined {symbol}",
                            nonterminal=rule.start.name,
                            missing=symbol.name,
                        )
                    if not isinstance(symbol, (Terminal, NonTerminal)):
                        raise GrammarError(
                            "invalid_symbol",
                            f"Unsupported symbol {symbol!r} in rule {rule.start}",
                            nonterminal=rule.start.name,
                        )

        if self.start.name not in index:
            raise GrammarError(
                "undefined_start",
                f"Start symbol {self.start} has no rule",
                start=self.start.name,
            )
        object.__setattr__(self, "_index", ReadOnlyMapping(index))

    @classmethod
    def of(cls, rules: Mapping[str, Iterable[Iterable[Symbol]]] | Iterable[Rule],
           start: str | NonTerminal | None = None) -> Grammar:
        """Build a grammar from ``Rule`` objects or a ``name -> alternatives`` mapping."""
        if isinstance(rules, Mapping):
            built = tuple(
                Rule(NonTerminal(name), tuple(tuple(alt) for alt in alternatives))
                for name, alternatives in rules.items()
            )
        else:
            built = tuple(rules)
        if not built:
            raise GrammarError("empty_grammar", "Grammar defines no rules")
        if start is None:
            start_nt = built[0].start
        elif isinstance(start, NonTerminal):
            start_nt = start
        else:
            start_nt = NonTerminal(start)
        return cls(rules=built, start=start_nt)

    def rule(self, nonterminal: str | NonTerminal) -> Rule:
        name = nonterminal.name if isinstance(nonterminal, NonTerminal) else nonterminal
        try:
            return self.rules[self._index[name]]
        except KeyError:
            raise KeyError(f"No rule for <{name}>") from None

    def alternatives(self, nonterminal: str | NonTerminal) -> tuple[Alternative, ...]:
        return self.rule(nonterminal).alternatives

    def rule_index(self, nonterminal: str | NonTerminal) -> int:
        name = nonterminal.name if isinstance(nonterminal, NonTerminal) else nonterminal
        return self._index[name]

    @staticmethod
    def is_nonterminal(symbol: Symbol) -> bool:
        return isinstance(symbol, NonTerminal)

    @property
    def nonterminals(self) -> tuple[NonTerminal, ...]:
        return tuple(rule.start for rule in self.rules)

    @property
    def terminals(self) -> tuple[Terminal, ...]:
        seen: dict[Terminal, None] = {}
        for rule in self.rules:
            for alternative in rule.alternatives:
                for symbol in alternative:
                    if isinstance(symbol, Terminal):
                        seen.setdefault(symbol, None)
        return tuple(seen)

    def __str__(self) -> str:
        return "\n".join(str(rule) for rule in self.rules)


__all__ = [
    "Terminal",
    "NonTerminal",
    "Symbol",
    "Rule",
    "Grammar",
]
