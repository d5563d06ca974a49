import pytest

from getruth.execution.script import JsExpressionEngine, PythonExpressionEngine, ScriptFunction


def _js(source, **bindings):
    return ScriptFunction(source, JsExpressionEngine())(bindings)


def test_js_boolean_operators():
    assert _js("(x)&&(y)", x=True, y=False) is False
    assert _js("(x) || (y)", x=False, y=True) is True
    assert _js("!(x)", x=True) is False
    assert _js("(x) != (y)", x=True, y=False) is True
    assert _js("(x) == (y)", x=True, y=True) is True


def test_js_ternary():
    assert _js("(x) ? (y) : (x)", x=True, y=False) is False
    assert _js("(x) ? (y) : (!(y))", x=False, y=False) is True


def test_js_precedence_and_left_associative_equality():
    assert _js("x || y && false", x=False, y=True) is False
    assert _js("!x && y", x=False, y=True) is True
    # (x == y) == false, not a chained comparison
    assert _js("x == y == false", x=True, y=False) is True


def test_js_literals_and_arithmetic():
    assert _js("null") is None
    assert _js("undefined") is None
    assert _js("1 + 2 * 3 < 8") is True
    assert _js("-x > 1.5", x=-2) is True


@pytest.mark.parametrize("source", ["1 === true", "x !== false", "-1 % 3"])
def test_js_strict_equality_and_modulo_are_unsupported(source):
    with pytest.raises(ValueError):
        ScriptFunction(source, JsExpressionEngine())


@pytest.mark.parametrize("source", ["(x)&&(", "x @ y", "()", "x y", ") ? (", ""])
def test_js_syntax_errors(source):
    with pytest.raises(ValueError):
        ScriptFunction(source, JsExpressionEngine())


def test_unbound_name_faults_at_call_time():
    fn = ScriptFunction("z", JsExpressionEngine())
    with pytest.raises(NameError):
        fn({"x": True})


def test_python_engine():
    engine = PythonExpressionEngine()
    assert ScriptFunction("x and not y", engine)({"x": True, "y": False}) is True
    assert ScriptFunction("y if x else not y", engine)({"x": False, "y": False}) is True


@pytest.mark.parametrize("source", ["__import__('os')", "x.real", "[x]", "_secret", "lambda: 1"])
def test_python_engine_rejects_unsafe_expressions(source):
    with pytest.raises(ValueError):
        ScriptFunction(source, PythonExpressionEngine())


def test_script_function_value_semantics():
    a = ScriptFunction("(x)&&(y)")
    b = ScriptFunction("(x)&&(y)")
    assert a == b
    assert hash(a) == hash(b)
    assert str(a) == "(x)&&(y)"
    assert "javascript" in repr(a)
