from dataclasses import dataclass
from typing import Callable

import numpy as np

from linecalc.environment import Environment
from linecalc.parser import (
    MAX_DEPTH,
    AssignOperator,
    Assignment,
    BinaryOperation,
    BinaryOperator,
    Constant,
    Node,
    Variable,
    parse,
)
from linecalc.utils import logger


@dataclass
class CalcRuntimeError(Exception):
    errmsg: str


def run(code: str, env: Environment, max_depth: int = MAX_DEPTH) -> float:
    node = parse(code, max_depth=max_depth)
    try:
        return evaluate(node, env)
    except RecursionError:
        raise CalcRuntimeError("Expression is nested too deeply") from None


def evaluate(node: Node, env: Environment) -> float:
    if isinstance(node, Constant):
        return node.value
    elif isinstance(node, Variable):
        return env.get(node.name)
    elif isinstance(node, BinaryOperation):
        left_res = evaluate(node.left, env)
        right_res = evaluate(node.right, env)
        return binary_operation_impls[node.operator](left_res, right_res)
    elif isinstance(node, Assignment):
        value = evaluate(node.value, env)
        if node.operator is AssignOperator.SET:
            result = value
        else:
            combine = binary_operation_impls[compound_assignment_operators[node.operator]]
            result = combine(env.get(node.name), value)
        env.set(node.name, result)
        logger.debug("%s %s %r -> %r", node.name, node.operator.symbol, value, result)
        return result
    else:
        raise CalcRuntimeError(f"Unexpected expression type: {node!r}")


BinaryOperationImpl = Callable[[float, float], float]


def _divide(a: float, b: float) -> float:
    # 1/0 -> inf, 0/0 -> nan, as in C
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.divide(np.float64(a), np.float64(b)))


def _power(a: float, b: float) -> float:
    # (-8)^0.5 -> nan, 0^-1 -> inf, overflow -> inf
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        return float(np.power(np.float64(a), np.float64(b)))


def _logical_and(a: float, b: float) -> float:
    return 1.0 if bool(a) and bool(b) else 0.0


def _logical_or(a: float, b: float) -> float:
    return 1.0 if bool(a) or bool(b) else 0.0


binary_operation_impls: dict[BinaryOperator, BinaryOperationImpl] = {
    BinaryOperator.ADD: lambda a, b: a + b,
    BinaryOperator.SUB: lambda a, b: a - b,
    BinaryOperator.MUL: lambda a, b: a * b,
    BinaryOperator.DIV: _divide,
    BinaryOperator.POW: _power,
    BinaryOperator.AND: _logical_and,
    BinaryOperator.OR: _logical_or,
}

compound_assignment_operators: dict[AssignOperator, BinaryOperator] = {
    AssignOperator.ADD_SET: BinaryOperator.ADD,
    AssignOperator.SUB_SET: BinaryOperator.SUB,
    AssignOperator.MUL_SET: BinaryOperator.MUL,
    AssignOperator.DIV_SET: BinaryOperator.DIV,
}
