"""Workbook facade binding records to sheet rows."""

# Module responsibilities:
# - Open a template or existing workbook (path, bytes or stream), else start blank.
# - Pick the target sheet per record type and drive the row writer.
# - Persist the workbook and release it when done.

from __future__ import annotations

import dataclasses
import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import pandas as pd
import yaml
from openpyxl import Workbook, load_workbook
from openpyxl.worksheet.worksheet import Worksheet

from .errors import SaveError, SchemaError, SheetBindError, TemplateOpenError
from .excel_reader import records_from_frame
from .excel_writer import (
    WriteSession,
    fill_placeholders,
    has_placeholder_target,
    remove_template_rows,
    write_row,
    write_template_row,
    write_titles,
)
from .schema import FieldSpec, RecordSchema, SheetMeta
from .template import TemplateLocation, locate_titles
from .titles import collect_titles, should_write_titles
from .utils.log import get_logger

logger = get_logger("xlsx")

Source = Union[str, Path, bytes, IO[bytes]]


@dataclass
class XlsxOptions:
    """Construction-time options of an :class:`Xlsx` document."""

    template: Optional[Source] = None
    excel: Optional[Source] = None
    validations: Dict[str, List[str]] = field(default_factory=dict)

    @classmethod
    def from_yaml(cls, path: Path) -> "XlsxOptions":
        """Load options from YAML; relative paths resolve against the file's directory."""

        with path.open("r", encoding="utf-8") as fh:
            payload = yaml.safe_load(fh) or {}
        if not isinstance(payload, dict):
            raise SchemaError("Invalid options YAML structure (expected mapping)")

        def _resolve(key: str) -> Optional[Path]:
            raw = payload.get(key)
            if not raw:
                return None
            candidate = Path(str(raw)).expanduser()
            return candidate if candidate.is_absolute() else path.parent / candidate

        raw_lists = payload.get("validations") or {}
        if not isinstance(raw_lists, dict):
            raise SchemaError("validations must map list names to values")
        validations = {str(name): [str(v) for v in values or []] for name, values in raw_lists.items()}
        return cls(template=_resolve("template"), excel=_resolve("excel"), validations=validations)


def open_workbook(source: Source) -> Workbook:
    """Load a workbook from a path, raw bytes or a binary stream."""

    try:
        if isinstance(source, (bytes, bytearray)):
            return load_workbook(io.BytesIO(source))
        if isinstance(source, (str, Path)):
            with Path(source).open("rb") as fh:
                return load_workbook(fh)
        return load_workbook(source)
    except Exception as exc:  # openpyxl surfaces zip, xml and key errors alike
        raise TemplateOpenError(f"Failed to open workbook {_describe(source)}: {exc}") from exc


def _describe(source: Source) -> str:
    if isinstance(source, (bytes, bytearray)):
        return f"<{len(source)} bytes>"
    return str(getattr(source, "name", source))


def _is_record(value: Any) -> bool:
    return isinstance(value, Mapping) or (
        dataclasses.is_dataclass(value) and not isinstance(value, type)
    )


class Xlsx:
    """Spreadsheet document that record types are written into.

    Not thread-safe; one instance must only be used from one thread at a time.
    """

    def __init__(
        self,
        template: Optional[Source] = None,
        *,
        excel: Optional[Source] = None,
        validations: Optional[Mapping[str, Sequence[str]]] = None,
    ) -> None:
        self.options = XlsxOptions(
            template=template,
            excel=excel,
            validations={k: list(v) for k, v in (validations or {}).items()},
        )
        self.workbook: Optional[Workbook] = None
        self.current_sheet: Optional[Worksheet] = None
        self._has_template = False
        self._has_document = False
        self._blank_sheet: Optional[Worksheet] = None

        if template is not None:
            try:
                self.workbook = open_workbook(template)
                self._has_template = True
            except TemplateOpenError as exc:
                logger.warning("Template unavailable, starting blank", extra={"error": str(exc)})

        if self.workbook is None and excel is not None:
            self.workbook = open_workbook(excel)
            self._has_document = True

        if self.workbook is None:
            self.workbook = Workbook()
            self._blank_sheet = self.workbook.active

    @classmethod
    def from_options(cls, options: XlsxOptions) -> "Xlsx":
        return cls(options.template, excel=options.excel, validations=options.validations)

    @property
    def has_template(self) -> bool:
        return self._has_template

    def __enter__(self) -> "Xlsx":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------ writes

    def write(self, value: Any, schema: Any = None, meta: Optional[SheetMeta] = None) -> None:
        """Write a single record, a DataFrame, or an iterable of records."""

        if _is_record(value):
            self.write_one(value, schema=schema, meta=meta)
        elif isinstance(value, pd.DataFrame):
            if schema is None:
                raise SchemaError("write_frame requires an explicit schema")
            self.write_frame(value, schema, meta=meta)
        elif isinstance(value, Iterable) and not isinstance(value, (str, bytes)):
            self.write_many(value, schema=schema, meta=meta)
        else:
            raise TypeError(f"Cannot write value of type {type(value).__name__}")

    def write_one(self, record: Any, schema: Any = None, meta: Optional[SheetMeta] = None) -> None:
        """Write one record; placeholder-tagged fields go to their fixed cells.

        An ``as_placeholder`` field whose token appears nowhere in the sheet
        stays in the row like any other field.
        """

        resolved = self._schema(schema if schema is not None else type(record), meta)
        ws = self._select_sheet(resolved)

        placed = tuple(spec for spec in resolved.placeholder_fields if has_placeholder_target(ws, spec))
        fields = resolved.row_fields(placed)
        if fields:
            self._write_rows(ws, resolved.meta, fields, [record])
        # Filled after the row write so template trimming cannot drop them.
        if placed:
            fill_placeholders(ws, placed, record)

    def write_many(self, records: Iterable[Any], schema: Any = None, meta: Optional[SheetMeta] = None) -> None:
        """Write a sequence of records of one type."""

        items = list(records)
        if schema is None:
            if not items:
                logger.info("Nothing to write: empty sequence without a schema")
                return
            schema = type(items[0])
        resolved = self._schema(schema, meta)
        ws = self._select_sheet(resolved)
        self._write_rows(ws, resolved.meta, resolved.fields, items)

    def write_frame(self, frame: pd.DataFrame, schema: Any, meta: Optional[SheetMeta] = None) -> None:
        resolved = self._schema(schema, meta)
        self.write_many(records_from_frame(frame, resolved), schema=resolved)

    def validation_for(self, spec: FieldSpec) -> Optional[List[str]]:
        """Allowed values of ``spec`` resolved against the configured named lists."""

        return spec.validation_values(self.options.validations)

    def _schema(self, target: Any, meta: Optional[SheetMeta]) -> RecordSchema:
        if isinstance(target, Mapping):
            target = RecordSchema.from_mapping(target)
        return RecordSchema.of(target, meta)

    def _write_rows(
        self,
        ws: Worksheet,
        meta: SheetMeta,
        fields: Sequence[FieldSpec],
        records: Sequence[Any],
    ) -> None:
        title_set = collect_titles(fields)
        location = TemplateLocation()
        if self._has_template:
            location = locate_titles(ws, fields, title_set.titles)

        if location.is_valid:
            session = WriteSession()
            for record in records:
                write_template_row(ws, location, record, session)
            remove_template_rows(ws, location, session)
            logger.info(
                "Records written into template",
                extra={"sheet": ws.title, "rows": session.rows_written},
            )
            return

        if should_write_titles(title_set, meta):
            write_titles(ws, title_set.titles)
        for record in records:
            write_row(ws, fields, record)
        logger.info("Records appended", extra={"sheet": ws.title, "rows": len(records)})

    def _select_sheet(self, schema: RecordSchema) -> Worksheet:
        """Pick the worksheet a record type writes into and make it current."""

        workbook = self._require_workbook()
        sheet_name = schema.sheet_name
        ws: Optional[Worksheet] = None

        if self._has_template or self._has_document:
            for candidate in workbook.worksheets:
                if candidate.title == sheet_name:
                    self.current_sheet = candidate
                    return candidate
            if self._has_template and workbook.worksheets:
                ws = workbook.worksheets[0]

        if ws is None:
            if self._blank_sheet is not None:
                ws, self._blank_sheet = self._blank_sheet, None
            else:
                ws = workbook.create_sheet()

        if sheet_name and sheet_name not in ws.title:
            ws.title = sheet_name

        self.current_sheet = ws
        return ws

    # ------------------------------------------------------------- persistence

    def save(self, path: Union[str, Path]) -> Path:
        """Persist the workbook to ``path``.

        The workbook is serialized in memory first, so a workbook openpyxl
        refuses to write never leaves a partial file behind.
        """

        target = Path(path)
        payload = self.save_to_bytes()
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(payload)
        except OSError as exc:
            logger.error("Failed to save workbook", extra={"path": str(target), "error": str(exc)})
            raise SaveError(f"Failed to save workbook to {target}: {exc}") from exc
        logger.info("Workbook saved", extra={"path": str(target)})
        return target

    def save_to_bytes(self) -> bytes:
        workbook = self._require_workbook()
        buffer = io.BytesIO()
        try:
            workbook.save(buffer)
        except Exception as exc:  # openpyxl rejects unsupported cell content with TypeError, ValueError and others
            logger.error("Failed to serialize workbook", extra={"error": str(exc)})
            raise SaveError(f"Failed to serialize workbook: {exc}") from exc
        return buffer.getvalue()

    def _require_workbook(self) -> Workbook:
        if self.workbook is None:
            raise SheetBindError("Workbook is closed")
        return self.workbook

    def close(self) -> None:
        """Release the workbook; further writes are not allowed."""

        if self.workbook is None:
            return
        self.workbook.close()
        self.workbook = None
        self.current_sheet = None
