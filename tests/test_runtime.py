import logging
import math

import pytest

from linecalc.environment import Environment
from linecalc.parser import BinaryOperation, BinaryOperator, Constant, ParserError, parse
from linecalc.runtime import CalcRuntimeError, evaluate, run


@pytest.mark.parametrize("name", ["x", "abc", "A1", "zz9top"])
def test_unset_variables_read_as_zero(name: str) -> None:
    env = Environment()
    assert env.get(name) == 0.0
    assert evaluate(parse(name), env) == 0.0
    assert name not in env


def test_environment_seeding() -> None:
    env = Environment({"x": 42, "pi": 3.14159265359})
    assert env.get("x") == 42.0
    assert isinstance(env.get("x"), float)
    assert "pi" in env
    assert len(env) == 2
    assert sorted(env) == ["pi", "x"]


@pytest.mark.parametrize("name", ["", "1x", "a b", "_a", "x-y"])
def test_environment_rejects_invalid_names(name: str) -> None:
    with pytest.raises(ValueError):
        Environment().set(name, 1.0)


def test_evaluation_is_repeatable() -> None:
    env = Environment({"x": 3.0})
    ast = parse("x * 2 - 1 / x")
    first = evaluate(ast, env)
    second = evaluate(parse("x * 2 - 1 / x"), env)
    assert first == second
    assert env.as_dict() == {"x": 3.0}


@pytest.mark.parametrize(
    "lines, expected_result, expected_variables",
    [
        pytest.param(["x = 5", "x"], 5.0, {"x": 5.0}),
        pytest.param(["x = 5", "x += 3"], 8.0, {"x": 8.0}),
        pytest.param(["y += 2"], 2.0, {"y": 2.0}),
        pytest.param(["y -= 2"], -2.0, {"y": -2.0}),
        pytest.param(["y *= 2"], 0.0, {"y": 0.0}),
        pytest.param(["ans = 2 * 3", "ans + 1"], 7.0, {"ans": 6.0}),
        pytest.param(["a = 2", "b = a ^ 3", "b /= a"], 4.0, {"a": 2.0, "b": 4.0}),
        pytest.param(["a = 1", "a = a + 1", "a = a + 1"], 3.0, {"a": 3.0}),
    ],
)
def test_assignments(lines: list[str], expected_result: float, expected_variables: dict[str, float]) -> None:
    env = Environment()
    results = [run(line, env) for line in lines]
    assert results[-1] == expected_result
    assert env.as_dict() == expected_variables


def test_divide_assign_by_zero() -> None:
    env = Environment({"x": 1.0})
    assert run("x /= 0", env) == math.inf
    assert env.get("x") == math.inf


@pytest.mark.parametrize(
    "code, expected",
    [
        pytest.param("(0 / 0) && 1", 1.0),
        pytest.param("0 && (1 / 0)", 0.0),
        pytest.param("0.001 || 0", 1.0),
        pytest.param("-1 && -1", 1.0),
    ],
)
def test_logical_coercion(code: str, expected: float) -> None:
    assert run(code, Environment()) == expected


def test_parse_error_keeps_previous_state() -> None:
    env = Environment()
    run("x = 5", env)
    with pytest.raises(ParserError):
        run("x = 2 +", env)
    assert run("x", env) == 5.0


def test_evaluate_handwritten_tree() -> None:
    ast = BinaryOperation(BinaryOperator.POW, Constant(2.0), Constant(0.5))
    assert evaluate(ast, Environment()) == pytest.approx(math.sqrt(2))


def test_evaluate_rejects_unknown_nodes() -> None:
    with pytest.raises(CalcRuntimeError):
        evaluate("1 + 1", Environment())  # type: ignore


def test_assignments_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="linecalc")
    run("x = 4", Environment())
    assert "x = 4.0 -> 4.0" in caplog.text


def test_stack_exhaustion_while_evaluating(monkeypatch: pytest.MonkeyPatch) -> None:
    tree = Constant(1.0)
    for _ in range(5000):
        tree = BinaryOperation(BinaryOperator.ADD, Constant(1.0), tree)
    monkeypatch.setattr("linecalc.runtime.parse", lambda code, max_depth: tree)
    env = Environment()
    with pytest.raises(CalcRuntimeError) as exc_info:
        run("1 + ...", env)
    assert exc_info.value.errmsg == "Expression is nested too deeply"
    assert len(env) == 0
