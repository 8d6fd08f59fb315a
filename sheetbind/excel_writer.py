"""Row materialization for record writes, with and without templates."""

# Module responsibilities:
# - Convert field values into typed cell values.
# - Append title and data rows when no template location is available.
# - Write rows into template positions, cycling exemplar row styles.
# - Trim unused template example rows and fill placeholder cells.

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Sequence

from openpyxl.cell.cell import Cell
from openpyxl.worksheet.worksheet import Worksheet

from .layout import format_time
from .schema import FieldKind, FieldSpec
from .sheet import cell_text, copy_style, next_row_number, sheet_rows, truncate_rows
from .template import TemplateLocation
from .utils.log import get_logger

logger = get_logger("excel_writer")


@dataclass
class WriteSession:
    """Per write call accumulator of rows placed into template positions."""

    rows_written: int = 0


def cell_value(spec: FieldSpec, value: Any) -> Any:
    """Return what a field value should be stored as, or None to leave the cell unset."""

    if value is None:
        return None
    if spec.kind is FieldKind.TIME:
        if not isinstance(value, (datetime, date)):
            return None
        if spec.format:
            return format_time(value, spec.format)
        if isinstance(value, datetime) and value.tzinfo is not None:
            # Excel cells carry no zone; aware values are stored as naive UTC.
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if spec.kind in (FieldKind.INTEGER, FieldKind.FLOAT):
        try:
            return float(value)
        except (TypeError, ValueError):
            return None
    if spec.kind is FieldKind.STRING:
        return str(value)
    return None


def set_cell_value(cell: Cell, spec: FieldSpec, record: Any) -> None:
    value = cell_value(spec, spec.value_of(record))
    if value is not None:
        cell.value = value


def write_titles(ws: Worksheet, titles: Sequence[str]) -> int:
    """Append the title row, returning its row number."""

    row_number = next_row_number(ws)
    for idx, title in enumerate(titles, start=1):
        ws.cell(row=row_number, column=idx, value=title)
    return row_number


def write_row(ws: Worksheet, fields: Sequence[FieldSpec], record: Any) -> int:
    """Append one record as a new row, one cell per field from column A."""

    row_number = next_row_number(ws)
    for idx, spec in enumerate(fields, start=1):
        set_cell_value(ws.cell(row=row_number, column=idx), spec, record)
    return row_number


def write_template_row(
    ws: Worksheet, location: TemplateLocation, record: Any, session: WriteSession
) -> int:
    """Write a record into the next slot below the template title row.

    Only the columns matched by the locator are filled.
    """

    # titled_row_index is zero-based, sheet rows are 1-based: +1 for the title row, +1 for the next.
    row_number = location.titled_row_index + 2 + session.rows_written
    session.rows_written += 1

    for tc in location.template_cells:
        set_cell_value(ws[f"{tc.column}{row_number}"], tc.field, record)

    copy_row_style(ws, location, row_number, session)
    return row_number


def copy_row_style(ws: Worksheet, location: TemplateLocation, row_number: int, session: WriteSession) -> None:
    """Copy exemplar styles onto a written row once every exemplar has been used."""

    template_rows = location.template_rows
    if not template_rows or session.rows_written < len(template_rows):
        return

    source_row = template_rows[(session.rows_written - 1) % len(template_rows)]
    for tc in location.template_cells:
        copy_style(ws[f"{tc.column}{source_row}"], ws[f"{tc.column}{row_number}"])


def remove_template_rows(ws: Worksheet, location: TemplateLocation, session: WriteSession) -> int:
    """Drop example rows left over after the write, returning the number removed."""

    if not location.template_rows:
        return 0

    end_index = location.titled_row_index + 1 + session.rows_written
    removed = truncate_rows(ws, end_index)
    if removed:
        logger.info(
            "Removed unused template rows",
            extra={"sheet": ws.title, "removed": removed, "rows": end_index},
        )
    return removed


def _placeholder_tokens(spec: FieldSpec) -> tuple[str, ...]:
    tokens = [f"{{{{{spec.name}}}}}"]
    if spec.title and spec.title != spec.name:
        tokens.append(f"{{{{{spec.title}}}}}")
    return tuple(tokens)


def has_placeholder_target(ws: Worksheet, spec: FieldSpec) -> bool:
    """True when ``spec`` has somewhere fixed to go in ``ws``.

    A ``placeholder_cell`` always does; an ``as_placeholder`` field only when
    some cell carries its ``{{name}}`` or ``{{title}}`` token.
    """

    if spec.placeholder_cell:
        return True
    if not spec.as_placeholder:
        return False
    tokens = _placeholder_tokens(spec)
    return any(
        token in cell_text(cell)
        for row in sheet_rows(ws)
        for cell in row
        for token in tokens
    )


def fill_placeholders(ws: Worksheet, fields: Sequence[FieldSpec], record: Any) -> int:
    """Write placeholder fields of a single record into their fixed cells.

    ``placeholder_cell`` names the target address directly. ``as_placeholder``
    fields replace ``{{name}}`` (or ``{{title}}``) tokens wherever they appear;
    a cell holding nothing but the token receives the typed value.
    """

    filled = 0
    for spec in fields:
        value = cell_value(spec, spec.value_of(record))
        if spec.placeholder_cell:
            if value is not None:
                ws[spec.placeholder_cell].value = value
                filled += 1
            continue
        if not spec.as_placeholder:
            continue
        tokens = _placeholder_tokens(spec)
        for row in sheet_rows(ws):
            for cell in row:
                text = cell_text(cell)
                if not any(token in text for token in tokens):
                    continue
                if text.strip() in tokens:
                    cell.value = value
                else:
                    rendered = "" if value is None else str(value)
                    for token in tokens:
                        text = text.replace(token, rendered)
                    cell.value = text
                filled += 1
    logger.info("Placeholders filled", extra={"sheet": ws.title, "cells": filled})
    return filled
