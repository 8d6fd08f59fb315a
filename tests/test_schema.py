"""Unit tests for record schema collection."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import List, Optional

import pytest

from sheetbind.errors import SchemaError
from sheetbind.schema import FieldKind, FieldSpec, RecordSchema, SheetMeta, column, sheet_meta


@dataclass
class Everything:
    name: str = column(title="名称", sheet="明细", default="")
    count: int = 0
    ratio: float = 0.0
    amount: Decimal = Decimal("0")
    at: datetime = column(title="时间", format="yyyy-MM-dd", default=datetime(2020, 1, 1))
    day: Optional[date] = None
    flag: bool = False
    tags: List[str] = field(default_factory=list)
    _secret: str = "hidden"


@sheet_meta(sheet="会员", title="会员统计")
@dataclass
class Member:
    Total: int = column(title="总数", sheet="ignored")
    New: int = 0


@dataclass
class Marked:
    meta: SheetMeta = SheetMeta(sheet="标记")
    value: int = 0


def test_collects_fields_in_declaration_order() -> None:
    schema = RecordSchema.of(Everything)

    assert [f.name for f in schema.fields] == [
        "name",
        "count",
        "ratio",
        "amount",
        "at",
        "day",
        "flag",
        "tags",
    ]
    kinds = {f.name: f.kind for f in schema.fields}
    assert kinds == {
        "name": FieldKind.STRING,
        "count": FieldKind.INTEGER,
        "ratio": FieldKind.FLOAT,
        "amount": FieldKind.FLOAT,
        "at": FieldKind.TIME,
        "day": FieldKind.TIME,
        "flag": FieldKind.OTHER,
        "tags": FieldKind.OTHER,
    }
    assert schema.fields[4].format == "yyyy-MM-dd"
    assert schema.sheet_name == "明细"


def test_type_level_meta_wins_over_field_sheet() -> None:
    schema = RecordSchema.of(Member)

    assert schema.meta == SheetMeta(sheet="会员", title="会员统计")
    assert schema.sheet_name == "会员"


def test_explicit_meta_overrides_decorator() -> None:
    schema = RecordSchema.of(Member, SheetMeta(sheet="其他"))

    assert schema.sheet_name == "其他"


def test_meta_typed_field_is_not_a_column() -> None:
    schema = RecordSchema.of(Marked)

    assert [f.name for f in schema.fields] == ["value"]
    assert schema.sheet_name == "标记"


def test_row_fields_leave_out_placed_fields() -> None:
    @dataclass
    class Form:
        contact: str = column(as_placeholder=True)
        device: str = column(placeholder_cell="C8")
        mobile: str = ""

    schema = RecordSchema.of(Form)
    contact, device, _ = schema.fields

    assert [f.name for f in schema.placeholder_fields] == ["contact", "device"]
    assert [f.name for f in schema.row_fields([device])] == ["contact", "mobile"]
    assert [f.name for f in schema.row_fields([contact, device])] == ["mobile"]
    assert len(schema.row_fields()) == 3


def test_non_dataclass_target_is_rejected() -> None:
    with pytest.raises(SchemaError):
        RecordSchema.of(dict)


def test_from_yaml(tmp_path: Path) -> None:
    path = tmp_path / "schema.yaml"
    path.write_text(
        "sheet: 排期\n"
        "title: 排期表\n"
        "fields:\n"
        "  - {name: Day, kind: datetime, title: 日期, format: yyyy-MM-dd}\n"
        "  - {name: Num, kind: int, title: 排期数}\n"
        "  - Note\n",
        encoding="utf-8",
    )

    schema = RecordSchema.from_yaml(path)

    assert schema.meta == SheetMeta(sheet="排期", title="排期表")
    assert schema.fields[0] == FieldSpec(
        name="Day", kind=FieldKind.TIME, title="日期", format="yyyy-MM-dd"
    )
    assert schema.fields[1].kind is FieldKind.INTEGER
    assert schema.fields[2] == FieldSpec(name="Note", kind=FieldKind.STRING)


@pytest.mark.parametrize(
    "payload",
    [
        ["not", "a", "mapping"],
        {"sheet": "x"},
        {"fields": [{"title": "no name"}]},
        {"fields": [{"name": "a", "kind": "blob"}]},
        {"fields": [{"name": "a", "colour": "red"}]},
    ],
)
def test_from_mapping_rejects_malformed_payloads(payload: object) -> None:
    with pytest.raises(SchemaError):
        RecordSchema.from_mapping(payload)  # type: ignore[arg-type]


def test_value_of_reads_objects_and_mappings() -> None:
    spec = FieldSpec(name="count", kind=FieldKind.INTEGER)

    assert spec.value_of(Everything(count=3)) == 3
    assert spec.value_of({"count": 4}) == 4
    assert spec.value_of({}) is None


def test_validation_values() -> None:
    lists = {"areas": ["A23", "B23"]}

    assert FieldSpec(name="a", data_validation="areas").validation_values(lists) == ["A23", "B23"]
    assert FieldSpec(name="a", data_validation="A22, B22,C22").validation_values() == [
        "A22",
        "B22",
        "C22",
    ]
    assert FieldSpec(name="a", data_validation="Validation!A1:A3").validation_values(lists) is None
    assert FieldSpec(name="a").validation_values(lists) is None
