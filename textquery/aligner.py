"""
Splits whitespace-aligned text (the output of `ps`, `df`, `ls -l` ...) into columns.

The first line drives the scan: every run of whitespace in it is a candidate column boundary,
but a boundary is only accepted if every other line is also blank (or already finished) at that
display offset. Offsets are counted in terminal cells, so East-Asian wide characters take 2 and
combining marks take 0.
"""

import logging
from collections.abc import Iterator, Sequence

from wcwidth import wcwidth

logger = logging.getLogger(__name__)

SYNTHETIC_HEADER = "______f{}"

Span = tuple[int, int | None]  # [start, end) in display cells, end=None runs to the end of the line


# ——— Display width ——————————————————————————————————————
def char_width(char: str) -> int:
    return max(wcwidth(char), 0)  # control characters (tabs included) have no cell of their own


def display_width(text: str) -> int:
    return sum(char_width(char) for char in text)


def truncate(text: str, width: int) -> str:
    """Longest prefix of text that fits in `width` cells."""
    used = 0
    for index, char in enumerate(text):
        used += char_width(char)
        if used > width:
            return text[:index]
    return text


def cell_offsets(line: str) -> Iterator[tuple[int, str]]:
    """Yield (first cell, char) pairs; zero-width chars stick to the cell of the char before them."""
    cell = 0
    previous = 0
    for char in line:
        width = char_width(char)
        if width:
            previous = cell
            cell += width
        yield previous, char


# ——— Boundary detection ——————————————————————————————————
def is_gap(line: str, width: int) -> bool:
    """
    True if the part of `line` that fits in `width` cells ends with whitespace.
    A line that ends on content before `width` keeps its last field open (e.g. "Mounted on" in `df`).
    """
    if not line:
        return True
    head = truncate(line, width)
    if not head or (len(head) < len(line) and display_width(head) < width):
        return False  # a wide char straddles the offset
    return head[-1].isspace()


def is_common_gap(lines: Sequence[str], width: int) -> bool:
    return all(is_gap(line, width) for line in lines)


def skip_leading_whitespace(lines: Sequence[str]) -> tuple[int, int]:
    """
    Index and width of the first column of the reference line.
    Lines are compared by char index here, not by cell (leading padding is assumed to be uniform).
    Never consumes the reference line's last char, so there's always at least one column.
    """
    reference = lines[0]
    index = 0
    width = 0
    while index < len(reference) - 1 and all(index >= len(line) or line[index].isspace() for line in lines):
        width += char_width(reference[index])
        index += 1
    return index, width


def find_columns(lines: Sequence[str]) -> list[Span]:
    reference = lines[0]
    last = len(reference) - 1
    index, width = skip_leading_whitespace(lines)
    start = width
    spans: list[Span] = []

    while index <= last:
        char = reference[index]
        width += char_width(char)

        if index == last:
            spans.append((start, None))  # nothing left to confirm against, take the rest as-is
        elif index > 0 and char.isspace() and is_common_gap(lines, width):
            spans.append((start, width))
            # swallow the rest of the shared gap, or a wide separator would leave empty columns
            while index < last:
                extended = width + char_width(reference[index + 1])
                if not is_common_gap(lines, extended):
                    break
                width = extended
                index += 1
            start = width
        index += 1

    return spans


# ——— Field extraction —————————————————————————————————————
def cut_fields(line: str, spans: Sequence[Span]) -> list[str]:
    offsets = list(cell_offsets(line))
    return [
        ''.join(char for cell, char in offsets if start <= cell and (end is None or cell < end)).strip()
        for start, end in spans
    ]


def align(lines: Sequence[str], header_is_data: bool = False) -> list[list[str]]:
    """
    Split aligned lines into rows that all have the same number of fields.

    When the first line is a header (`header_is_data` is False), its empty fields are renamed
    to ______f<column number> so every column has a label.
    """
    if not lines:
        return []

    spans = find_columns(lines)
    rows = [cut_fields(line, spans) for line in lines]
    logger.debug("Found %d columns in %d lines: %s", len(spans), len(lines), spans)

    if not header_is_data:
        rows[0] = [field or SYNTHETIC_HEADER.format(column) for column, field in enumerate(rows[0], start=1)]
    return rows
