"""Locate title rows and example rows inside a template worksheet."""

# Module responsibilities:
# - Find the first row whose cells contain any of the resolved titles.
# - Record which sheet column feeds which field.
# - Collect the "template" marker rows beneath the title row as style exemplars.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from openpyxl.worksheet.worksheet import Worksheet

from .errors import ColumnResolutionError
from .schema import FieldSpec
from .sheet import Row, cell_text, column_of, row_cell, sheet_rows
from .utils.log import get_logger

logger = get_logger("template")

TEMPLATE_MARKER = "template"


@dataclass(frozen=True)
class TemplateCell:
    """A matched title: the sheet column and the field written into it."""

    column: str
    field: FieldSpec


@dataclass
class TemplateLocation:
    """Where the titles of a record type sit inside a template sheet.

    ``template_rows`` holds 1-based sheet row numbers of the style exemplars.
    """

    titled_row_index: int = -1
    rows_end_index: int = 0
    template_cells: List[TemplateCell] = field(default_factory=list)
    template_rows: List[int] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.template_cells) > 0


def find_titled_row(
    rows: Sequence[Row], fields: Sequence[FieldSpec], titles: Sequence[str]
) -> Tuple[int, List[TemplateCell]]:
    """Return the zero-based index of the first row matching any title and its matches.

    A cell matches when its text contains a title, so annotated headers such as
    ``Total (count)`` still match ``Total``. Scanning stops at the first row
    with at least one match.
    """

    for row_index, row in enumerate(rows):
        matched: List[TemplateCell] = []
        taken: set[int] = set()
        for cell in row:
            text = cell_text(cell)
            if not text:
                continue
            for i, title in enumerate(titles):
                if i in taken or title not in text:
                    continue
                try:
                    col = column_of(cell)
                except ColumnResolutionError as exc:
                    logger.warning("Failed to resolve title cell column", extra={"error": str(exc)})
                    continue
                matched.append(TemplateCell(column=col, field=fields[i]))
                taken.add(i)
                break
        if matched:
            return row_index, matched
    return -1, []


def find_template_rows(
    rows: Sequence[Row], titled_row_index: int, template_cells: Sequence[TemplateCell]
) -> List[int]:
    """Return row numbers of the marker rows directly below the title row.

    When the first row below the titles carries no marker it becomes the lone
    exemplar so there is always a style source.
    """

    if titled_row_index < 0 or not template_cells:
        return []

    col = template_cells[0].column
    template_rows: List[int] = []
    for i in range(titled_row_index + 1, len(rows)):
        if TEMPLATE_MARKER in cell_text(row_cell(rows[i], col)):
            template_rows.append(i + 1)
        elif not template_rows:
            return [i + 1]
        else:
            break
    return template_rows


def locate_titles(ws: Worksheet, fields: Sequence[FieldSpec], titles: Sequence[str]) -> TemplateLocation:
    """Scan ``ws`` for the title row of a record type."""

    rows = sheet_rows(ws)
    titled_row_index, template_cells = find_titled_row(rows, fields, titles)
    template_rows = find_template_rows(rows, titled_row_index, template_cells)

    location = TemplateLocation(
        titled_row_index=titled_row_index,
        rows_end_index=len(rows),
        template_cells=template_cells,
        template_rows=template_rows,
    )
    logger.info(
        "Template titles located" if location.is_valid else "No template titles found",
        extra={
            "sheet": ws.title,
            "titled_row_index": titled_row_index,
            "columns": [tc.column for tc in template_cells],
            "template_rows": template_rows,
        },
    )
    return location
