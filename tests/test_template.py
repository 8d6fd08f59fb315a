"""Unit tests for the template title/example row locator."""

from __future__ import annotations

import logging
from types import SimpleNamespace

import pytest
from openpyxl import Workbook

from sheetbind.schema import FieldKind, FieldSpec
from sheetbind.template import find_template_rows, find_titled_row, locate_titles

FIELDS = [
    FieldSpec(name="Total", kind=FieldKind.INTEGER),
    FieldSpec(name="New", kind=FieldKind.INTEGER),
    FieldSpec(name="Effective", kind=FieldKind.INTEGER),
]
TITLES = [f.resolved_title for f in FIELDS]


def _sheet(*rows: list[object]):
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    return ws


def test_exact_title_on_third_row() -> None:
    ws = _sheet(["Report"], [None], [None, "New", "Effective"], ["template"])

    location = locate_titles(ws, FIELDS, TITLES)

    assert location.titled_row_index == 2
    assert location.is_valid
    assert [(tc.column, tc.field.name) for tc in location.template_cells] == [
        ("B", "New"),
        ("C", "Effective"),
    ]
    assert location.rows_end_index == 4


def test_annotated_header_matches_title() -> None:
    ws = _sheet(["Total (count)", "New users"])

    location = locate_titles(ws, FIELDS, TITLES)

    assert location.titled_row_index == 0
    assert [(tc.column, tc.field.name) for tc in location.template_cells] == [
        ("A", "Total"),
        ("B", "New"),
    ]


def test_cell_maps_to_first_matching_title_only() -> None:
    ws = _sheet(["New Total"])

    location = locate_titles(ws, FIELDS, TITLES)

    assert [tc.field.name for tc in location.template_cells] == ["Total"]


def test_scan_stops_at_first_row_with_any_match() -> None:
    ws = _sheet(["Total"], ["Total", "New", "Effective"])

    location = locate_titles(ws, FIELDS, TITLES)

    assert location.titled_row_index == 0
    assert len(location.template_cells) == 1


def test_no_match_yields_degenerate_location() -> None:
    ws = _sheet(["nothing"], ["here"])

    location = locate_titles(ws, FIELDS, TITLES)

    assert not location.is_valid
    assert location.titled_row_index == -1
    assert location.template_rows == []


def test_empty_sheet() -> None:
    location = locate_titles(Workbook().active, FIELDS, TITLES)

    assert not location.is_valid
    assert location.rows_end_index == 0


def test_marker_rows_form_a_contiguous_run() -> None:
    ws = _sheet(
        ["Total", "New"],
        ["template 1", None],
        ["template 2", None],
        ["data", None],
        ["template 3", None],
    )

    location = locate_titles(ws, FIELDS, TITLES)

    assert location.template_rows == [2, 3]


def test_unmarked_first_row_is_the_only_exemplar() -> None:
    ws = _sheet(["Total", "New"], [1, 2], ["template", None])

    location = locate_titles(ws, FIELDS, TITLES)

    assert location.template_rows == [2]


def test_marker_is_read_from_first_matched_column() -> None:
    ws = _sheet([None, "Total"], ["template", "template"], ["template", None])

    location = locate_titles(ws, FIELDS, TITLES)

    assert location.template_rows == [2]


def test_title_row_as_last_row_has_no_exemplars() -> None:
    ws = _sheet(["x"], ["Total"])

    location = locate_titles(ws, FIELDS, TITLES)

    assert location.titled_row_index == 1
    assert location.template_rows == []


def test_unresolvable_column_is_skipped(caplog: pytest.LogCaptureFixture) -> None:
    rows = [
        (SimpleNamespace(value="Total"), SimpleNamespace(value="New", column=2)),
    ]

    with caplog.at_level(logging.WARNING, logger="sheetbind"):
        index, cells = find_titled_row(rows, FIELDS, TITLES)

    assert index == 0
    assert [(tc.column, tc.field.name) for tc in cells] == [("B", "New")]
    assert "Failed to resolve title cell column" in caplog.text


def test_find_template_rows_ignores_degenerate_index() -> None:
    assert find_template_rows([], -1, []) == []
