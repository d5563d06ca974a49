"""Execution of phenotype text."""

from .script import JsExpressionEngine, PythonExpressionEngine, ScriptFunction

__all__ = [
    'JsExpressionEngine',
    'PythonExpressionEngine',
    'ScriptFunction',
]
