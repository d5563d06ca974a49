"""Expression engines that turn phenotype text into callables.

Both engines compile to a Python ``ast.Expression`` that is checked against a
whitelist of node types and then evaluated with an empty ``__builtins__``. A
phenotype can therefore only read its bound parameters and combine them with
boolean, comparison, arithmetic and conditional operators.

``JsExpressionEngine`` accepts the JavaScript subset produced by typical
boolean grammars (``&&``, ``||``, ``!``, ``==``, ``!=``, relational operators,
``+ - * /``, ``c ? a : b``, ``true``/``false``/``null``/``undefined``
and numbers). ``PythonExpressionEngine`` accepts Python expression syntax.
"""

from __future__ import annotations

import ast
import re
from typing import Any, Callable, Mapping

SAFE_AST_NODES = {
    ast.Expression,
    ast.BoolOp,
    ast.And,
    ast.Or,
    ast.UnaryOp,
    ast.Not,
    ast.USub,
    ast.UAdd,
    ast.BinOp,
    ast.Add,
    ast.Sub,
    ast.Mult,
    ast.Div,
    ast.Mod,
    ast.Compare,
    ast.Eq,
    ast.NotEq,
    ast.Lt,
    ast.LtE,
    ast.Gt,
    ast.GtE,
    ast.IfExp,
    ast.Name,
    ast.Load,
    ast.Constant,
}


def check_safe(tree: ast.AST) -> None:
    for sub in ast.walk(tree):
        if type(sub) not in SAFE_AST_NODES:  # nosec - whitelist
            raise ValueError(f"Unsafe expression element: {type(sub).__name__}")
        if isinstance(sub, ast.Name) and sub.id.startswith("_"):
            raise ValueError(f"Name not permitted: {sub.id}")


def _evaluator(tree: ast.Expression, source: str) -> Callable[[Mapping[str, Any]], Any]:
    check_safe(tree)
    code = compile(ast.fix_missing_locations(tree), filename="<phenotype>", mode="eval")

    def run(bindings: Mapping[str, Any]) -> Any:
        return eval(code, {"__builtins__": {}}, dict(bindings))  # nosec - whitelisted AST

    run.__qualname__ = f"phenotype<{source}>"
    return run


class PythonExpressionEngine:
    """Compiles Python expression syntax."""

    name = "python"

    def compile(self, source: str) -> Callable[[Mapping[str, Any]], Any]:
        try:
            tree = ast.parse(source.strip(), mode="eval")
        except SyntaxError as exc:
            raise ValueError(f"Invalid expression: {source}") from exc
        return _evaluator(tree, source)


_JS_TOKEN_RE = re.compile(
    r"""
    (?P<space>\s+)
    |(?P<number>\d+(?:\.\d+)?)
    |(?P<name>[A-Za-z_$][\w$]*)
    |(?P<op>==|!=|<=|>=|&&|\|\||[!<>?:()+\-*/])
    """,
    re.VERBOSE,
)

_JS_LITERALS = {"true": True, "false": False, "null": None, "undefined": None}
_JS_EQUALITY = {"==": ast.Eq, "!=": ast.NotEq}
_JS_RELATIONAL = {"<": ast.Lt, "<=": ast.LtE, ">": ast.Gt, ">=": ast.GtE}
_JS_ADDITIVE = {"+": ast.Add, "-": ast.Sub}
_JS_MULTIPLICATIVE = {"*": ast.Mult, "/": ast.Div}


class _JsParser:
    """Recursive-descent parser from the JavaScript subset to Python AST."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.tokens: list[tuple[str, str]] = []
        pos = 0
        while pos < len(source):
            match = _JS_TOKEN_RE.match(source, pos)
            if match is None:
                raise ValueError(f"Unexpected character {source[pos]!r} at {pos}")
            if match.lastgroup != "space":
                self.tokens.append((match.lastgroup or "op", match.group()))
            pos = match.end()
        self.pos = 0

    def _peek(self) -> str | None:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos][1]
        return None

    def _take(self, expected: str | None = None) -> tuple[str, str]:
        if self.pos >= len(self.tokens):
            raise ValueError(f"Unexpected end of expression: {self.source}")
        token = self.tokens[self.pos]
        if expected is not None and token[1] != expected:
            raise ValueError(f"Expected {expected!r} but found {token[1]!r}")
        self.pos += 1
        return token

    def parse(self) -> ast.Expression:
        body = self._conditional()
        if self.pos != len(self.tokens):
            raise ValueError(f"Unexpected token {self.tokens[self.pos][1]!r}")
        return ast.Expression(body=body)

    def _conditional(self) -> ast.expr:
        test = self._logical_or()
        if self._peek() == "?":
            self._take("?")
            body = self._conditional()
            self._take(":")
            orelse = self._conditional()
            return ast.IfExp(test=test, body=body, orelse=orelse)
        return test

    def _logical_or(self) -> ast.expr:
        node = self._logical_and()
        while self._peek() == "||":
            self._take()
            node = ast.BoolOp(op=ast.Or(), values=[node, self._logical_and()])
        return node

    def _logical_and(self) -> ast.expr:
        node = self._binary_level(_JS_EQUALITY, self._relational)
        while self._peek() == "&&":
            self._take()
            node = ast.BoolOp(op=ast.And(), values=[node, self._binary_level(_JS_EQUALITY, self._relational)])
        return node

    def _relational(self) -> ast.expr:
        return self._binary_level(_JS_RELATIONAL, self._additive)

    def _additive(self) -> ast.expr:
        return self._binary_level(_JS_ADDITIVE, self._multiplicative)

    def _multiplicative(self) -> ast.expr:
        return self._binary_level(_JS_MULTIPLICATIVE, self._unary)

    def _binary_level(self, operators: dict, operand: Callable[[], ast.expr]) -> ast.expr:
        # Left-associative; comparisons nest instead of chaining.
        node = operand()
        while self._peek() in operators:
            op = operators[self._take()[1]]()
            right = operand()
            if isinstance(op, ast.cmpop):
                node = ast.Compare(left=node, ops=[op], comparators=[right])
            else:
                node = ast.BinOp(left=node, op=op, right=right)
        return node

    def _unary(self) -> ast.expr:
        token = self._peek()
        if token == "!":
            self._take()
            return ast.UnaryOp(op=ast.Not(), operand=self._unary())
        if token == "-":
            self._take()
            return ast.UnaryOp(op=ast.USub(), operand=self._unary())
        return self._primary()

    def _primary(self) -> ast.expr:
        kind, value = self._take()
        if value == "(":
            node = self._conditional()
            self._take(")")
            return node
        if kind == "number":
            return ast.Constant(value=float(value) if "." in value else int(value))
        if kind == "name":
            if value in _JS_LITERALS:
                return ast.Constant(value=_JS_LITERALS[value])
            return ast.Name(id=value, ctx=ast.Load())
        raise ValueError(f"Unexpected token {value!r}")


class JsExpressionEngine:
    """Compiles the JavaScript expression subset described in the module docs."""

    name = "javascript"

    def compile(self, source: str) -> Callable[[Mapping[str, Any]], Any]:
        return _evaluator(_JsParser(source).parse(), source)


class ScriptFunction:
    """A compiled phenotype, callable with a parameter-name -> value mapping.

    Compilation happens in the constructor, so malformed text raises
    ``ValueError`` before any sample is evaluated.
    """

    def __init__(self, source: str, engine: Any | None = None) -> None:
        self.source = source
        self.engine = engine if engine is not None else JsExpressionEngine()
        self._fn = self.engine.compile(source)

    def __call__(self, bindings: Mapping[str, Any]) -> Any:
        return self._fn(bindings)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ScriptFunction) and other.source == self.source

    def __hash__(self) -> int:
        return hash(self.source)

    def __str__(self) -> str:
        return self.source

    def __repr__(self) -> str:
        return f"ScriptFunction({self.source!r}, engine={self.engine.name!r})"


__all__ = [
    "SAFE_AST_NODES",
    "check_safe",
    "JsExpressionEngine",
    "PythonExpressionEngine",
    "ScriptFunction",
]
