"""Thin helpers over openpyxl worksheets used by the locator and writer."""

# Module responsibilities:
# - Count and enumerate the rows that actually exist in a worksheet.
# - Resolve cell text and column letters, copy cell styles, truncate rows.

from __future__ import annotations

from copy import copy
from typing import Any, List, Tuple

from openpyxl.cell.cell import Cell
from openpyxl.utils import column_index_from_string, get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from .errors import ColumnResolutionError

Row = Tuple[Any, ...]


def row_count(ws: Worksheet) -> int:
    """Return the number of rows in use; an untouched sheet has none.

    openpyxl reports ``max_row == 1`` for an empty sheet, so a lone empty,
    unstyled A1 is treated as no rows at all.
    """

    if ws.max_row == 1 and ws.max_column == 1:
        first = ws.cell(row=1, column=1)
        if first.value is None and not first.has_style:
            return 0
    return ws.max_row


def sheet_rows(ws: Worksheet) -> List[Row]:
    """Return every row from the first up to the last one in use."""

    count = row_count(ws)
    if not count:
        return []
    return list(ws.iter_rows(min_row=1, max_row=count))


def next_row_number(ws: Worksheet) -> int:
    """1-based number of the row an append would land on."""

    return row_count(ws) + 1


def cell_text(cell: Any) -> str:
    value = getattr(cell, "value", None)
    return "" if value is None else str(value)


def column_of(cell: Any) -> str:
    """Return the column letter of ``cell``."""

    try:
        return get_column_letter(cell.column)
    except (AttributeError, TypeError, ValueError) as exc:
        raise ColumnResolutionError(f"Cannot resolve column of {cell!r}: {exc}") from exc


def row_cell(row: Row, column: str) -> Any:
    """Return the cell of ``row`` in ``column``; rows start at column A."""

    index = column_index_from_string(column)
    return row[index - 1] if index <= len(row) else None


def copy_style(source: Cell, target: Cell) -> bool:
    """Copy the style of ``source`` onto ``target``; False when source has none."""

    if not source.has_style:
        return False
    target._style = copy(source._style)
    return True


def truncate_rows(ws: Worksheet, keep: int) -> int:
    """Delete every row after the first ``keep`` rows, returning how many were removed."""

    total = row_count(ws)
    if total <= keep:
        return 0
    ws.delete_rows(keep + 1, total - keep)
    return total - keep
