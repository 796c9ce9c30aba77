from linecalc.environment import Environment
from linecalc.parser import ParserError, parse
from linecalc.runtime import evaluate

env = Environment({"pi": 3.14159265359})

for code in [
    "5",
    "-1",
    "1 + 1",
    "4 + 6 * 3",
    "(4 + 6)",
    "(4+6) * 3",
    "10 - 3 - 2",
    "100 / 10 / 2",
    "2 ^ 3 * 2",
    "1 && 0 || 1",
    "r = 2",
    "area = pi * r ^ 2",
    "area /= 2",
    "1 / 0",
    "(-8) ^ 0.5",
    "2 +",
    "2 2",
    "-r",
]:
    print("=" * 10)
    print(f"code: {code!r}")
    try:
        ast = parse(code)
    except ParserError as e:
        print(e)
        continue

    print(f"ast: {ast}")
    print(f"result: {evaluate(ast, env)}")

print(f"variables: {env.as_dict()}")
