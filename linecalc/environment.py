from typing import Iterator, Mapping, Optional

from linecalc.utils import is_valid_identifier

DEFAULT_VALUE = 0.0


class Environment:
    """Variable store shared by every line evaluated in one session.

    Names that were never assigned read as 0.0. There is no removal: a name
    keeps its last value for the lifetime of the environment.
    """

    def __init__(self, initial: Optional[Mapping[str, float]] = None) -> None:
        self._variables: dict[str, float] = dict()
        for name, value in (initial or {}).items():
            self.set(name, value)

    def get(self, name: str) -> float:
        return self._variables.get(name, DEFAULT_VALUE)

    def set(self, name: str, value: float) -> None:
        if not is_valid_identifier(name):
            raise ValueError(f"Invalid variable name: {name!r}")
        self._variables[name] = float(value)

    def as_dict(self) -> dict[str, float]:
        return dict(self._variables)

    def __contains__(self, name: object) -> bool:
        return name in self._variables

    def __iter__(self) -> Iterator[str]:
        return iter(self._variables)

    def __len__(self) -> int:
        return len(self._variables)

    def __repr__(self) -> str:
        return f"Environment({self._variables!r})"
