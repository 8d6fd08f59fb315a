"""Record schemas describing how a record type binds to sheet columns."""

# Module responsibilities:
# - Collect exportable fields of a record type together with their tag attributes.
# - Carry type-level sheet metadata without pseudo-fields on the record.
# - Load hand-registered schemas for mapping records from YAML.

from __future__ import annotations

import dataclasses
import types
import typing
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import yaml

from .errors import SchemaError

META_ATTR = "__sheet_meta__"
TAG_KEYS = ("title", "format", "sheet", "data_validation", "as_placeholder", "placeholder_cell")


class FieldKind(str, Enum):
    """Declared value kind of a field; decides how its cell is written."""

    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    TIME = "time"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str) -> "FieldKind":
        key = str(value).strip().lower()
        alias = _KIND_ALIASES.get(key, key)
        try:
            return cls(alias)
        except ValueError as exc:
            raise SchemaError(f"Unknown field kind: {value}") from exc


_KIND_ALIASES = {
    "str": "string",
    "text": "string",
    "int": "integer",
    "number": "float",
    "decimal": "float",
    "datetime": "time",
    "date": "time",
}

_TYPE_KINDS: Dict[Any, FieldKind] = {
    str: FieldKind.STRING,
    int: FieldKind.INTEGER,
    float: FieldKind.FLOAT,
    Decimal: FieldKind.FLOAT,
    datetime: FieldKind.TIME,
    date: FieldKind.TIME,
}

_NAME_KINDS: Dict[str, FieldKind] = {
    "str": FieldKind.STRING,
    "int": FieldKind.INTEGER,
    "float": FieldKind.FLOAT,
    "Decimal": FieldKind.FLOAT,
    "datetime": FieldKind.TIME,
    "date": FieldKind.TIME,
}


def kind_of(annotation: Any) -> FieldKind:
    """Map a type annotation (or its source string) to a FieldKind."""

    if isinstance(annotation, str):
        text = annotation.replace(" ", "")
        for prefix in ("Optional[", "typing.Optional["):
            if text.startswith(prefix) and text.endswith("]"):
                text = text[len(prefix) : -1]
        if "|" in text:
            parts = [part for part in text.split("|") if part != "None"]
            text = parts[0] if len(parts) == 1 else ""
        return _NAME_KINDS.get(text.rsplit(".", 1)[-1], FieldKind.OTHER)

    if typing.get_origin(annotation) in (Union, types.UnionType):
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        return kind_of(args[0]) if len(args) == 1 else FieldKind.OTHER

    if annotation is bool:
        return FieldKind.OTHER
    return _TYPE_KINDS.get(annotation, FieldKind.OTHER)


@dataclass(frozen=True)
class SheetMeta:
    """Type-level tags: target sheet name and a title-row switch."""

    sheet: str = ""
    title: str = ""


@dataclass(frozen=True)
class FieldSpec:
    """One exported field of a record type plus its tag attributes."""

    name: str
    kind: FieldKind = FieldKind.OTHER
    title: str = ""
    format: str = ""
    sheet: str = ""
    data_validation: str = ""
    as_placeholder: bool = False
    placeholder_cell: str = ""

    @property
    def resolved_title(self) -> str:
        return self.title or self.name

    @property
    def is_placeholder(self) -> bool:
        return self.as_placeholder or bool(self.placeholder_cell)

    def value_of(self, record: Any) -> Any:
        if isinstance(record, Mapping):
            return record.get(self.name)
        return getattr(record, self.name, None)

    def validation_values(self, lists: Optional[Mapping[str, Sequence[str]]] = None) -> Optional[List[str]]:
        """Resolve the allowed values declared by ``data_validation``.

        A name found in ``lists`` wins; otherwise the tag is read as a literal
        comma-separated list. Sheet range references (``Validation!A1:A3``)
        are not lists and resolve to None.
        """

        ref = self.data_validation.strip()
        if not ref:
            return None
        if lists and ref in lists:
            return [str(v) for v in lists[ref]]
        if "!" in ref or ":" in ref:
            return None
        return [part.strip() for part in ref.split(",") if part.strip()]


def column(
    *,
    title: str = "",
    format: str = "",
    sheet: str = "",
    data_validation: str = "",
    as_placeholder: bool = False,
    placeholder_cell: str = "",
    **kwargs: Any,
) -> Any:
    """Declare a dataclass field carrying sheet tags.

    Extra keyword arguments (``default``, ``default_factory`` ...) are passed
    through to :func:`dataclasses.field`.
    """

    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata.update(
        {
            "title": title,
            "format": format,
            "sheet": sheet,
            "data_validation": data_validation,
            "as_placeholder": as_placeholder,
            "placeholder_cell": placeholder_cell,
        }
    )
    return field(metadata=metadata, **kwargs)


def sheet_meta(sheet: str = "", title: str = "") -> Callable[[type], type]:
    """Class decorator attaching a SheetMeta to a record type."""

    def decorate(cls: type) -> type:
        setattr(cls, META_ATTR, SheetMeta(sheet=sheet, title=title))
        return cls

    return decorate


def _resolve_hints(cls: type) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError):
        # Locally declared types cannot always be resolved; fall back to raw annotations.
        hints: Dict[str, Any] = {}
        for klass in reversed(cls.__mro__):
            hints.update(getattr(klass, "__annotations__", {}))
        return hints


def _is_meta_annotation(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.rsplit(".", 1)[-1] == "SheetMeta"
    return annotation is SheetMeta


@dataclass(frozen=True)
class RecordSchema:
    """Ordered field specs of a record type plus its type-level metadata."""

    fields: Tuple[FieldSpec, ...] = ()
    meta: SheetMeta = SheetMeta()

    @classmethod
    def of(cls, target: Any, meta: Optional[SheetMeta] = None) -> "RecordSchema":
        """Build a schema for ``target`` (a RecordSchema or a dataclass type)."""

        if isinstance(target, RecordSchema):
            return target if meta is None else dataclasses.replace(target, meta=meta)
        if isinstance(target, type) and dataclasses.is_dataclass(target):
            return cls.from_dataclass(target, meta)
        raise SchemaError(f"Cannot derive a record schema from {target!r}")

    @classmethod
    def from_dataclass(cls, record_type: type, meta: Optional[SheetMeta] = None) -> "RecordSchema":
        hints = _resolve_hints(record_type)
        specs: List[FieldSpec] = []
        field_meta: Optional[SheetMeta] = None
        for f in dataclasses.fields(record_type):
            annotation = hints.get(f.name, f.type)
            if _is_meta_annotation(annotation):
                if isinstance(f.default, SheetMeta):
                    field_meta = f.default
                continue
            if f.name.startswith("_"):
                continue
            tags = f.metadata
            specs.append(
                FieldSpec(
                    name=f.name,
                    kind=kind_of(annotation),
                    title=str(tags.get("title", "") or ""),
                    format=str(tags.get("format", "") or ""),
                    sheet=str(tags.get("sheet", "") or ""),
                    data_validation=str(tags.get("data_validation", "") or ""),
                    as_placeholder=bool(tags.get("as_placeholder", False)),
                    placeholder_cell=str(tags.get("placeholder_cell", "") or ""),
                )
            )
        resolved_meta = meta or getattr(record_type, META_ATTR, None) or field_meta or SheetMeta()
        return cls(fields=tuple(specs), meta=resolved_meta)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "RecordSchema":
        """Build a schema from a plain mapping (usually parsed YAML)."""

        if not isinstance(payload, Mapping):
            raise SchemaError("Invalid schema structure (expected mapping)")
        raw_fields = payload.get("fields")
        if not isinstance(raw_fields, list):
            raise SchemaError("Schema requires a 'fields' list")

        specs: List[FieldSpec] = []
        for idx, item in enumerate(raw_fields):
            if isinstance(item, str):
                item = {"name": item}
            if not isinstance(item, Mapping) or not item.get("name"):
                raise SchemaError(f"fields[{idx}] must be a mapping with a name")
            unknown = set(item) - set(TAG_KEYS) - {"name", "kind"}
            if unknown:
                raise SchemaError(f"fields[{idx}] has unknown keys: {', '.join(sorted(unknown))}")
            specs.append(
                FieldSpec(
                    name=str(item["name"]),
                    kind=FieldKind.parse(item.get("kind", "string")),
                    title=str(item.get("title") or ""),
                    format=str(item.get("format") or ""),
                    sheet=str(item.get("sheet") or ""),
                    data_validation=str(item.get("data_validation") or ""),
                    as_placeholder=bool(item.get("as_placeholder", False)),
                    placeholder_cell=str(item.get("placeholder_cell") or ""),
                )
            )
        meta = SheetMeta(sheet=str(payload.get("sheet") or ""), title=str(payload.get("title") or ""))
        return cls(fields=tuple(specs), meta=meta)

    @classmethod
    def from_yaml(cls, path: Path) -> "RecordSchema":
        """Load a schema declaration from a YAML file."""

        with path.open("r", encoding="utf-8") as fh:
            payload = yaml.safe_load(fh)
        return cls.from_mapping(payload)

    @property
    def sheet_name(self) -> str:
        if self.meta.sheet:
            return self.meta.sheet
        for spec in self.fields:
            if spec.sheet:
                return spec.sheet
        return ""

    @property
    def placeholder_fields(self) -> Tuple[FieldSpec, ...]:
        return tuple(spec for spec in self.fields if spec.is_placeholder)

    def row_fields(self, placed: Iterable[FieldSpec] = ()) -> Tuple[FieldSpec, ...]:
        """Fields written as row cells, leaving out those ``placed`` into fixed cells."""

        names = {spec.name for spec in placed}
        return tuple(spec for spec in self.fields if spec.name not in names)
