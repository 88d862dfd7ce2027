"""
Output formats for query results: CSV (default), JSON and raw tab-separated text.
"""

import csv
import json
from typing import IO


def write_csv(rows: list[list[str]], out: IO[str]) -> None:
    csv.writer(out, lineterminator='\n').writerows(rows)


def write_json(rows: list[list[str]], out: IO[str]) -> None:
    json.dump(rows, out, ensure_ascii=False)
    out.write('\n')


def write_raw(rows: list[list[str]], out: IO[str]) -> None:
    for row in rows:
        out.write('\t'.join(row) + '\n')


WRITERS = {
    'csv': write_csv,
    'json': write_json,
    'raw': write_raw,
}


def write_rows(rows: list[list[str]], out: IO[str], output_format: str = 'csv') -> None:
    WRITERS[output_format](rows, out)
