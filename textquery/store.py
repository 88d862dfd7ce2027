"""
In-memory SQLite store: every imported source becomes one table, then a single query runs over them.
"""

import logging
import re
import sqlite3
from typing import IO

from textquery.config import Options
from textquery.readers import Table, read_table

logger = logging.getLogger(__name__)

INTEGER_PATTERN = re.compile(r'^[+-]?(?:0|[1-9][0-9]*)$')
NUMBER_PATTERN = re.compile(r'^[+-]?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?$')  # no leading zeros: '007' stays text
SQLITE_INTEGER_RANGE = range(-2**63, 2**63)


class QueryError(ValueError):
    pass


def quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def infer_column_types(rows: list[list[str | None]], num_cols: int) -> list[str]:
    """INTEGER / REAL if every non-empty value of the column is such a literal, TEXT otherwise."""
    is_integer = [True] * num_cols
    is_number = [True] * num_cols
    has_value = [False] * num_cols

    for row in rows:
        for i, cell in enumerate(row[:num_cols]):
            if not cell:  # empty or missing values don't vote
                continue
            has_value[i] = True
            if INTEGER_PATTERN.match(cell):
                # integers SQLite can't hold (long IDs) stay text
                fits = len(cell) <= 20 and int(cell) in SQLITE_INTEGER_RANGE
                is_integer[i] &= fits
                is_number[i] &= fits
            else:
                is_integer[i] = False
                is_number[i] &= bool(NUMBER_PATTERN.match(cell))

    return [
        'TEXT' if not has_value[i] else 'INTEGER' if is_integer[i] else 'REAL' if is_number[i] else 'TEXT'
        for i in range(num_cols)
    ]


def convert(cell: str | None, column_type: str) -> str | int | float | None:
    if column_type == 'TEXT' or cell is None:
        return cell
    if not cell:
        return None
    return int(cell) if column_type == 'INTEGER' else float(cell)


def to_text(value) -> str:
    if value is None:
        return ''
    if isinstance(value, bytes):
        return value.decode('utf-8', errors='replace')
    text = str(value)
    if isinstance(value, float) and text.endswith('.0'):
        return text[:-2]  # 12.0 -> 12, like the source text
    return text


class TableStore:
    def __init__(self, options: Options | None = None):
        self.options = options or Options()
        self.db = sqlite3.connect(':memory:')

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self) -> None:
        self.db.close()

    def import_stream(self, stream: IO[str], name: str) -> bool:
        """Load one source as table `name`. Returns False (and creates nothing) if the source is empty."""
        table = read_table(stream, self.options)
        if table is None:
            logger.debug("Nothing to import into %r", name)
            return False
        self.import_table(name, table)
        return True

    def import_table(self, name: str, table: Table) -> None:
        types = infer_column_types(table.rows, len(table.columns))
        definition = ', '.join(f"{quote_identifier(column)} {column_type}" for column, column_type in zip(table.columns, types))
        placeholders = ', '.join('?' * len(table.columns))
        values = [[convert(cell, column_type) for cell, column_type in zip(row, types)] for row in table.rows]

        try:
            with self.db:
                self.db.execute(f"CREATE TABLE {quote_identifier(name)} ({definition})")
                self.db.executemany(f"INSERT INTO {quote_identifier(name)} VALUES ({placeholders})", values)
        except (sqlite3.Error, OverflowError) as e:
            raise QueryError(f"cannot import {name}: {e}") from e

        logger.debug("Imported %d rows into %r (%s)", len(values), name, definition)

    def query(self, sql: str) -> list[list[str]]:
        """Run `sql` and return the result set as text, with the column names first if out_header is set."""
        logger.debug("Running query: %s", sql)
        try:
            cursor = self.db.execute(sql)
            records = cursor.fetchall()
        except (sqlite3.Error, sqlite3.Warning) as e:
            raise QueryError(str(e)) from e

        rows = []
        if self.options.out_header:
            rows.append([description[0] for description in cursor.description or ()])
        rows.extend([to_text(value) for value in record] for record in records)
        return rows
