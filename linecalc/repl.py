import logging
import sys
from argparse import ArgumentParser, ArgumentTypeError, FileType
from typing import Optional, TextIO

from linecalc.environment import Environment
from linecalc.parser import MAX_DEPTH, ParserError
from linecalc.runtime import CalcRuntimeError, run
from linecalc.utils import is_valid_identifier, logger

DEFAULT_VARIABLES = {
    "x": 42.0,
    "pi": 3.14159265359,
}


def _variable_seed(arg: str) -> tuple[str, float]:
    name, sep, value = arg.partition("=")
    name = name.strip()
    if not sep or not is_valid_identifier(name):
        raise ArgumentTypeError(f"expected NAME=VALUE, got {arg!r}")
    try:
        return name, float(value)
    except ValueError:
        raise ArgumentTypeError(f"not a number: {value!r}")


def _max_depth(arg: str) -> int:
    try:
        depth = int(arg)
    except ValueError:
        raise ArgumentTypeError(f"not an integer: {arg!r}")
    # each level is one interpreter frame while parsing
    ceiling = sys.getrecursionlimit() // 2
    if not 1 <= depth <= ceiling:
        raise ArgumentTypeError(f"must be between 1 and {ceiling}, got {depth}")
    return depth


argparser = ArgumentParser(description="Evaluate one arithmetic expression or assignment per input line")
argparser.add_argument(
    "input",
    nargs="?",
    type=FileType("r", encoding="utf-8", errors="surrogateescape"),
    help="input file (default=stdin)",
)
argparser.add_argument("-o", "--out", type=FileType("w", encoding="utf-8"), help="the output file (default=stdout)")
argparser.add_argument(
    "-s",
    "--set",
    dest="variables",
    metavar="NAME=VALUE",
    type=_variable_seed,
    action="append",
    default=[],
    help="seed a variable before reading input (repeatable)",
)
argparser.add_argument("--no-defaults", action="store_true", help="do not seed x and pi")
argparser.add_argument("--max-depth", type=_max_depth, default=MAX_DEPTH, help="maximum expression nesting")
argparser.add_argument("-d", "--debug", action="store_true")


def _quoted(s: str) -> str:
    s = '"' + s.replace("\\", "\\\\").replace('"', '\\"') + '"'
    # undecodable input bytes come back as \xNN
    return s.encode("utf-8", "surrogateescape").decode("utf-8", "backslashreplace")


def process_lines(lines: TextIO, out: TextIO, env: Environment, max_depth: int = MAX_DEPTH) -> None:
    for line in lines:
        code = line.rstrip("\r\n")
        if not code.strip():
            continue

        try:
            result = run(code, env, max_depth=max_depth)
        except ParserError as e:
            logger.info("%s", e)
            print(f"Unparseable: {_quoted(e.remainder)}", file=out)
            print("EXCEPTION was THROWN: Parse error", file=out)
            continue
        except CalcRuntimeError as e:
            print(f"EXCEPTION was THROWN: {e.errmsg}", file=out)
            continue

        print(f"evaluate() = {result:g}", file=out)


def main(argv: Optional[list[str]] = None) -> int:
    ns = argparser.parse_args(argv)
    if ns.debug:
        logger.setLevel(logging.DEBUG)

    env = Environment() if ns.no_defaults else Environment(DEFAULT_VARIABLES)
    for name, value in ns.variables:
        env.set(name, value)

    if ns.input is None and hasattr(sys.stdin, "reconfigure"):
        sys.stdin.reconfigure(errors="surrogateescape")
    out = ns.out or sys.stdout
    try:
        print("Reading stdin", file=out)
        process_lines(ns.input or sys.stdin, out, env, max_depth=ns.max_depth)
        out.flush()
    finally:
        for f in (ns.input, ns.out):
            if f not in (None, sys.stdin, sys.stdout):
                f.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
