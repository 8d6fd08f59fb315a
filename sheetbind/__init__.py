"""`sheetbind` binds record types to spreadsheet rows, reusing template layouts."""

# Module responsibilities:
# - Re-export the document facade, schema declarations and layout helpers so consumers have a stable API surface.

from __future__ import annotations

from .errors import (
    ColumnResolutionError,
    SaveError,
    SchemaError,
    SheetBindError,
    TemplateOpenError,
)
from .excel_reader import read_table, records_from_frame
from .layout import convert_layout, format_time
from .schema import FieldKind, FieldSpec, RecordSchema, SheetMeta, column, sheet_meta
from .template import TemplateLocation, locate_titles
from .titles import TitleSet, collect_titles
from .xlsx import Xlsx, XlsxOptions

__all__ = [
    "Xlsx",
    "XlsxOptions",
    "FieldKind",
    "FieldSpec",
    "RecordSchema",
    "SheetMeta",
    "column",
    "sheet_meta",
    "TitleSet",
    "collect_titles",
    "TemplateLocation",
    "locate_titles",
    "convert_layout",
    "format_time",
    "read_table",
    "records_from_frame",
    "SheetBindError",
    "SchemaError",
    "TemplateOpenError",
    "ColumnResolutionError",
    "SaveError",
]

__version__ = "0.1.0"
