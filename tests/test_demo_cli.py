"""Smoke test for the demo CLI."""

from __future__ import annotations

from pathlib import Path

from openpyxl import load_workbook

from tools.demo_xlsx import main


def test_demo_generates_examples_and_writes(tmp_path: Path) -> None:
    source = tmp_path / "examples" / "members.csv"
    schema = tmp_path / "examples" / "members_schema.yaml"
    out = tmp_path / "out" / "members.xlsx"

    code = main(["--source", str(source), "--schema", str(schema), "--out", str(out)])

    assert code == 0
    rows = list(load_workbook(out)["会员"].iter_rows(values_only=True))
    assert rows == [("总数", "新增", "有效"), (100, 50, 50), (200, 60, 140)]


def test_demo_reports_failure(tmp_path: Path) -> None:
    schema = tmp_path / "bad.yaml"
    schema.write_text("fields: nope\n", encoding="utf-8")

    code = main(["--source", str(tmp_path / "s.csv"), "--schema", str(schema), "--out", str(tmp_path / "o.xlsx")])

    assert code == 1
