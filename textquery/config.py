"""Run configuration for textquery.

One immutable ``Options`` value is built from the command line and handed to
the readers and the store, instead of module level flags.
"""

import codecs
import re
from dataclasses import dataclass
from enum import Enum

DEFAULT_QUERY = "select * from stdin"
STDIN_TABLE = "stdin"
DEFAULT_ENCODING = "utf-8"


class ConfigError(ValueError):
    pass


class InputFormat(Enum):
    ALIGNED = "aligned"  # whitespace-aligned columns, e.g. `ps` or `df` output
    CSV = "csv"
    TSV = "tsv"
    LTSV = "ltsv"
    PATTERN = "pattern"


@dataclass(frozen=True)
class Options:
    no_header: bool = False                 # first line is data, columns are named f1..fN
    out_header: bool = False                # prepend column names to query results
    input_format: InputFormat = InputFormat.ALIGNED
    input_pattern: str | None = None        # delimiter regexp for InputFormat.PATTERN
    encoding: str | None = None             # None means DEFAULT_ENCODING
    strip_ansi: bool = False                # drop color escapes before parsing

    @property
    def text_encoding(self) -> str:
        return self.encoding or DEFAULT_ENCODING

    def validate(self) -> None:
        """Raise ConfigError if the encoding or delimiter pattern is unusable."""
        try:
            codecs.lookup(self.text_encoding)
        except LookupError:
            raise ConfigError(f"invalid encoding name: {self.encoding}") from None

        if self.input_format is InputFormat.PATTERN:
            if not self.input_pattern:
                raise ConfigError("a delimiter pattern is required for pattern input")
            try:
                re.compile(self.input_pattern)
            except re.error as e:
                raise ConfigError(f"invalid input pattern: {e}") from None
