"""BNF grammar text -> ``Grammar``.

Accepted notation::

    <expr>     ::= <var> | (<expr>) <relation> (<expr>)
    <relation> ::= ' && ' | ' || '
                 | ' == '
    <var>      ::= x | y

* ``<name>`` is a nonterminal; a nonterminal followed by ``::=`` opens a rule.
* Quoted text (single or double quotes, backslash escapes) is one terminal and
  keeps its whitespace verbatim.
* Any other run of non-blank characters is a bare terminal; whitespace between
  symbols is not part of the sentence.
* Lines whose first non-blank character is ``#`` are comments.
* The first rule is the start rule unless ``start`` is given.
"""

from __future__ import annotations

import re

from getruth.grammar.cfg import Grammar, NonTerminal, Rule, Terminal
from getruth.utils.validation import GrammarError

_TOKEN_RE = re.compile(
    r"""
    (?P<assign>::=)
    |(?P<bar>\|)
    |(?P<nonterminal><[A-Za-z_][\w\-]*>)
    |(?P<quoted>'(?:[^'\\\n]|\\.)*'|"(?:[^"\\\n]|\\.)*")
    |(?P<space>\s+)
    |(?P<text>[^\s|'"<]+|<)
    """,
    re.VERBOSE,
)
_ESCAPE_RE = re.compile(r"\\(.)")


def _strip_comments(text: str) -> str:
    return "\n".join("" if line.lstrip().startswith("#") else line for line in text.splitlines())


def tokenize(text: str) -> list[tuple[str, str, int]]:
    """Split grammar text into ``(kind, text, offset)`` tokens, blanks dropped."""
    text = _strip_comments(text)
    tokens: list[tuple[str, str, int]] = []
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            line = text.count("\n", 0, pos) + 1
            raise GrammarError(
                "bnf_syntax",
                f"Unexpected character {text[pos]!r} on line {line}",
                offset=pos,
                line=line,
            )
        kind = match.lastgroup or "text"
        if kind != "space":
            tokens.append((kind, match.group(), pos))
        pos = match.end()
    return tokens


def _opens_rule(tokens: list[tuple[str, str, int]], pos: int) -> bool:
    return (
        pos + 1 < len(tokens)
        and tokens[pos][0] == "nonterminal"
        and tokens[pos + 1][0] == "assign"
    )


def parse_bnf(text: str, start: str | None = None) -> Grammar:
    """Parse BNF ``text`` into an immutable ``Grammar``.

    Raises:
        GrammarError: on malformed text or on an invalid grammar (undefined
            nonterminal, empty alternative, no rules).
    """
    tokens = tokenize(text)
    if not tokens:
        raise GrammarError("empty_grammar", "Grammar text defines no rules")

    rules: list[Rule] = []
    pos = 0
    while pos < len(tokens):
        if not _opens_rule(tokens, pos):
            kind, value, offset = tokens[pos]
            raise GrammarError(
                "bnf_syntax",
                f"Expected '<name> ::=' but found {value!r}",
                offset=offset,
                token=value,
            )
        name = tokens[pos][1][1:-1]
        pos += 2

        alternatives: list[list] = [[]]
        while pos < len(tokens) and not _opens_rule(tokens, pos):
            kind, value, offset = tokens[pos]
            if kind == "bar":
                alternatives.append([])
            elif kind == "nonterminal":
                alternatives[-1].append(NonTerminal(value[1:-1]))
            elif kind == "quoted":
                alternatives[-1].append(Terminal(_ESCAPE_RE.sub(r"\1", value[1:-1])))
            elif kind == "text":
                alternatives[-1].append(Terminal(value))
            else:
                raise GrammarError(
                    "bnf_syntax",
                    f"Unexpected {value!r} in rule <{name}>",
                    offset=offset,
                    nonterminal=name,
                )
            pos += 1

        rules.append(Rule(NonTerminal(name), tuple(tuple(alt) for alt in alternatives)))

    return Grammar.of(rules, start=start)


__all__ = ["parse_bnf", "tokenize"]
