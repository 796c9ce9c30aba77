import re
from dataclasses import dataclass
from typing import Optional

from linecalc.utils import IDENTIFIER_PATTERN, PrintableEnum, logger

# Grammar, loosest binding first:
#   start   = varname, ("=" | "+=" | "-=" | "*=" | "/="), term | term ;
#   term    = product, ("+" | "-"), term | product ;
#   product = factor, ("*" | "/" | "^" | "&&" | "||"), product | factor ;
#   factor  = "(", term, ")" | varname | number ;
#   varname = letter, { letter | digit } ;
# term and product recurse on the right, so a - b - c is a - (b - c).

MAX_DEPTH = 250

NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)

# ASCII only; U+00A0 and other Unicode spaces are not separators
WHITESPACE = frozenset(" \t\n\v\f\r")


@dataclass
class ParserError(Exception):
    errmsg: str
    code: str
    error_char_idx: int

    @property
    def remainder(self) -> str:
        """Part of the line that was not consumed by the grammar"""
        return self.code[self.error_char_idx :]

    def __str__(self) -> str:
        # underline everything the grammar did not consume
        marker = " " * self.error_char_idx + "^" * max(1, len(self.remainder.rstrip()))
        return "\n".join([f"[Parser error] {self.errmsg}", self.code, marker])


class BinaryOperator(PrintableEnum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    POW = "^"
    AND = "&&"
    OR = "||"

    @property
    def symbol(self) -> str:
        return self.value


class AssignOperator(PrintableEnum):
    SET = "="
    ADD_SET = "+="
    SUB_SET = "-="
    MUL_SET = "*="
    DIV_SET = "/="

    @property
    def symbol(self) -> str:
        return self.value


@dataclass(frozen=True)
class Constant:
    value: float

    def __str__(self) -> str:
        return f"{self.value:g}"


@dataclass(frozen=True)
class Variable:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class BinaryOperation:
    operator: BinaryOperator
    left: "Node"
    right: "Node"

    def __str__(self) -> str:
        return f"({self.left} {self.operator.symbol} {self.right})"


@dataclass(frozen=True)
class Assignment:
    operator: AssignOperator
    name: str
    value: "Node"

    def __str__(self) -> str:
        return f"{self.name} {self.operator.symbol} {self.value}"


Node = Constant | Variable | BinaryOperation | Assignment

# alternatives are tried in this order
ASSIGN_OPERATORS = [
    ("=", AssignOperator.SET),
    ("+=", AssignOperator.ADD_SET),
    ("-=", AssignOperator.SUB_SET),
    ("*=", AssignOperator.MUL_SET),
    ("/=", AssignOperator.DIV_SET),
]
TERM_OPERATORS = [
    ("+", BinaryOperator.ADD),
    ("-", BinaryOperator.SUB),
]
PRODUCT_OPERATORS = [
    ("*", BinaryOperator.MUL),
    ("/", BinaryOperator.DIV),
    ("^", BinaryOperator.POW),
    ("&&", BinaryOperator.AND),
    ("||", BinaryOperator.OR),
]


def parse(code: str, max_depth: int = MAX_DEPTH) -> Node:
    """Parse a whole line into a single AST.

    Raises ParserError when no expression is recognized, when text is left
    over after the longest recognized expression, or when the expression is
    nested deeper than ``max_depth`` rule invocations.
    """
    try:
        node, i = consume_start(code, 0, max_depth)
    except RecursionError:
        logger.debug("Interpreter stack exhausted parsing %r", code)
        raise ParserError(
            "Expression is nested too deeply", code=code, error_char_idx=_skip_whitespace(code, 0)
        ) from None
    i = _skip_whitespace(code, i)
    if node is None:
        logger.debug("No expression recognized in %r", code)
        raise ParserError("Expression expected", code=code, error_char_idx=i)
    if i < len(code):
        logger.debug("Unparsed remainder %r in %r", code[i:], code)
        raise ParserError("Unexpected input after expression", code=code, error_char_idx=i)
    logger.debug("Parsed %r as %s", code, node)
    return node


def consume_start(code: str, i: int, limit: int = MAX_DEPTH) -> tuple[Optional[Node], int]:
    _check_depth(code, i, limit)
    name, j = consume_varname(code, i)
    if name is not None:
        for symbol, operator in ASSIGN_OPERATORS:
            after_operator = _consume_symbol(code, j, symbol)
            if after_operator is None:
                continue
            value, k = consume_term(code, after_operator, limit - 1)
            if value is not None:
                return Assignment(operator=operator, name=name, value=value), k
    return consume_term(code, i, limit - 1)


def consume_term(code: str, i: int, limit: int = MAX_DEPTH) -> tuple[Optional[Node], int]:
    _check_depth(code, i, limit)
    left, j = consume_product(code, i, limit - 1)
    if left is None:
        return None, i
    for symbol, operator in TERM_OPERATORS:
        after_operator = _consume_symbol(code, j, symbol)
        if after_operator is None:
            continue
        right, k = consume_term(code, after_operator, limit - 1)
        if right is not None:
            return BinaryOperation(operator=operator, left=left, right=right), k
    return left, j


def consume_product(code: str, i: int, limit: int = MAX_DEPTH) -> tuple[Optional[Node], int]:
    _check_depth(code, i, limit)
    left, j = consume_factor(code, i, limit - 1)
    if left is None:
        return None, i
    for symbol, operator in PRODUCT_OPERATORS:
        after_operator = _consume_symbol(code, j, symbol)
        if after_operator is None:
            continue
        right, k = consume_product(code, after_operator, limit - 1)
        if right is not None:
            return BinaryOperation(operator=operator, left=left, right=right), k
    return left, j


def consume_factor(code: str, i: int, limit: int = MAX_DEPTH) -> tuple[Optional[Node], int]:
    _check_depth(code, i, limit)
    after_bracket = _consume_symbol(code, i, "(")
    if after_bracket is not None:
        inner, j = consume_term(code, after_bracket, limit - 1)
        if inner is not None:
            after_group = _consume_symbol(code, j, ")")
            if after_group is not None:
                return inner, after_group

    name, j = consume_varname(code, i)
    if name is not None:
        return Variable(name), j

    number, j = consume_number(code, i)
    if number is not None:
        return Constant(number), j

    return None, i


def consume_varname(code: str, i: int) -> tuple[Optional[str], int]:
    match = IDENTIFIER_PATTERN.match(code, _skip_whitespace(code, i))
    if match is None:
        return None, i
    return match.group(), match.end()


def consume_number(code: str, i: int) -> tuple[Optional[float], int]:
    match = NUMBER_PATTERN.match(code, _skip_whitespace(code, i))
    if match is None:
        return None, i
    return float(match.group()), match.end()


def _consume_symbol(code: str, i: int, symbol: str) -> Optional[int]:
    i = _skip_whitespace(code, i)
    if code.startswith(symbol, i):
        return i + len(symbol)
    return None


def _skip_whitespace(code: str, i: int) -> int:
    while i < len(code) and code[i] in WHITESPACE:
        i += 1
    return i


def _check_depth(code: str, i: int, limit: int) -> None:
    if limit <= 0:
        raise ParserError("Expression is nested too deeply", code=code, error_char_idx=_skip_whitespace(code, i))
