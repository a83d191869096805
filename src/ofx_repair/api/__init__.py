"""Public parsing API for OFX statements."""

from .parser import (
    Cleaner,
    InputType,
    StatementParser,
    parse,
    parse_file,
    read_source,
    repair,
)

__all__ = [
    "Cleaner",
    "InputType",
    "StatementParser",
    "parse",
    "parse_file",
    "read_source",
    "repair",
]
