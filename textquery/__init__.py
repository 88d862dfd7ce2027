"""Run SQL over text: `ps`/`df`-style aligned columns, CSV, TSV or LTSV, loaded into in-memory SQLite."""

from textquery.aligner import align
from textquery.config import InputFormat, Options
from textquery.store import TableStore

__version__ = "0.1.0"

__all__ = ["align", "InputFormat", "Options", "TableStore"]
