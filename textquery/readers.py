"""
Turns an input stream into a Table (column names + rows), whatever the input format.

Aligned text goes through aligner.align(); CSV, TSV, LTSV and regexp-delimited input are split directly.
"""

import csv
import io
import logging
import re
from typing import IO, NamedTuple

from textquery.aligner import align
from textquery.config import InputFormat, Options

logger = logging.getLogger(__name__)

# Strip ANSI escape codes
ANSI_ESCAPE = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')


class InputError(ValueError):
    pass


class Table(NamedTuple):
    columns: list[str]
    rows: list[list[str | None]]


# ——— Utilities ——————————————————————————————————————
def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE.sub('', text)


def open_text(stream: IO[bytes], encoding: str) -> io.TextIOWrapper:
    # newline='' leaves line endings to csv.reader and read_lines()
    return io.TextIOWrapper(stream, encoding=encoding, errors='replace', newline='')


def read_lines(stream: IO[str]) -> list[str]:
    """Lines without their line ending; blank lines are dropped."""
    return [line for line in (raw.rstrip('\r\n') for raw in stream) if line.strip()]


def generic_names(count: int) -> list[str]:
    return [f"f{i}" for i in range(1, count + 1)]


# ——— Parsers ——————————————————————————————————————————
def parse_delimited(stream: IO[str], delimiter: str) -> list[list[str]]:
    try:
        return [row for row in csv.reader(stream, delimiter=delimiter, strict=True) if row]
    except csv.Error as e:
        kind = 'TSV' if delimiter == '\t' else 'CSV'
        raise InputError(f"malformed {kind} input: {e}") from e


def parse_csv(stream: IO[str]) -> list[list[str]]:
    return parse_delimited(stream, ',')


def parse_tsv(stream: IO[str]) -> list[list[str]]:
    return parse_delimited(stream, '\t')


def parse_pattern(lines: list[str], pattern: str) -> list[list[str]]:
    try:
        delimiter = re.compile(pattern)
    except re.error as e:
        raise InputError(f"invalid input pattern: {e}") from e
    return [delimiter.split(line) for line in lines]


def parse_ltsv(lines: list[str]) -> Table:
    """
    Labeled tab-separated values: every field is `label:value`.
    Columns are the labels in order of first appearance; records missing a label get an empty value.
    """
    records = []
    columns: dict[str, None] = {}  # ordered set
    for line in lines:
        record = {}
        for field in line.split('\t'):
            label, _, value = field.partition(':')
            record[label] = value
            columns.setdefault(label)
        records.append(record)

    return Table(list(columns), [[record.get(label, '') for label in columns] for record in records])


def parse_aligned(lines: list[str], no_header: bool) -> list[list[str]]:
    return align(lines, header_is_data=no_header)


# ——— Dispatch —————————————————————————————————————————
def to_table(rows: list[list[str]], no_header: bool) -> Table:
    """First row becomes the column names (unless no_header); every row is cut or padded to fit them."""
    columns = generic_names(len(rows[0])) if no_header else rows[0]
    data = rows if no_header else rows[1:]
    width = len(columns)
    return Table(columns, [row[:width] + [None] * (width - len(row)) for row in data])


def read_table(stream: IO[str], options: Options) -> Table | None:
    """Parse one source. Returns None if there's nothing but blank lines in it."""
    input_format = options.input_format

    if input_format in (InputFormat.CSV, InputFormat.TSV):
        rows = parse_csv(stream) if input_format is InputFormat.CSV else parse_tsv(stream)
        if options.strip_ansi:
            rows = [[strip_ansi(cell) for cell in row] for row in rows]
    else:
        lines = read_lines(stream)
        if options.strip_ansi:
            lines = [line for line in map(strip_ansi, lines) if line.strip()]
        if not lines:
            return None

        if input_format is InputFormat.LTSV:
            table = parse_ltsv(lines)
            logger.debug("Read %d LTSV records with %d labels", len(table.rows), len(table.columns))
            return table
        if input_format is InputFormat.PATTERN:
            rows = parse_pattern(lines, options.input_pattern or '')
        else:
            rows = parse_aligned(lines, options.no_header)

    if not rows:
        return None

    table = to_table(rows, options.no_header)
    logger.debug("Read %d rows, columns: %s", len(table.rows), table.columns)
    return table
