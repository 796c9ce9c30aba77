import enum
import logging
import re

logger: logging.Logger = logging.getLogger("linecalc")
logger.addHandler(logging.StreamHandler())
# silent unless the caller asks for output
logger.setLevel(logging.CRITICAL)

IDENTIFIER_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9]*")


def is_valid_identifier(name: str) -> bool:
    return IDENTIFIER_PATTERN.fullmatch(name) is not None


class PrintableEnum(enum.Enum):
    def __str__(self) -> str:
        return self.name

    __repr__ = __str__
