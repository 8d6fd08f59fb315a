"""Source tables (CSV or workbook) turned into records the writer accepts."""

# Module responsibilities:
# - Load one sheet of a CSV or Excel source into a DataFrame.
# - Turn DataFrame rows into mapping records keyed by schema field names.

from __future__ import annotations

from functools import partial
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

import pandas as pd

from .schema import RecordSchema
from .utils.log import get_logger

logger = get_logger("excel_reader")

SheetType = Union[str, int, None]

Reader = Callable[..., pd.DataFrame]

_READERS: Dict[str, Reader] = {
    ".csv": pd.read_csv,
    ".xlsx": partial(pd.read_excel, engine="openpyxl"),
    ".xlsm": partial(pd.read_excel, engine="openpyxl"),
}


def read_table(
    path: Path,
    sheet: SheetType = None,
    usecols: Optional[Iterable[str]] = None,
) -> pd.DataFrame:
    """Read the records of ``path``; ``sheet`` picks a workbook sheet (first by default).

    Raises ``FileNotFoundError`` for a missing source and ``ValueError`` for an
    unsupported suffix or columns pandas cannot select.
    """

    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Source table not found: {path}")

    suffix = path.suffix.lower()
    reader = _READERS.get(suffix)
    if reader is None:
        raise ValueError(f"Unsupported source table type {suffix or '<none>'}: {path}")

    options: Dict[str, Any] = {"usecols": list(usecols) if usecols else None}
    if suffix != ".csv":
        # A list of sheets would make pandas return a dict of frames.
        if isinstance(sheet, (list, tuple)):
            raise ValueError("read_table reads a single sheet")
        options["sheet_name"] = 0 if sheet is None else sheet

    try:
        frame = reader(path, **options)
    except ValueError as exc:
        logger.error("Source table unreadable", extra={"path": str(path), "error": str(exc)})
        raise

    logger.info(
        "Source table read",
        extra={"path": str(path), "rows": len(frame.index), "columns": frame.columns.tolist()},
    )
    return frame


def _plain(value: Any) -> Any:
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if hasattr(value, "item"):
        # numpy scalars
        return value.item()
    return value


def records_from_frame(frame: pd.DataFrame, schema: RecordSchema) -> List[Dict[str, Any]]:
    """Convert DataFrame rows to dict records holding the schema's fields.

    Columns are looked up by field name first, then by field title.
    """

    lookup: Dict[str, str] = {}
    for spec in schema.fields:
        if spec.name in frame.columns:
            lookup[spec.name] = spec.name
        elif spec.title and spec.title in frame.columns:
            lookup[spec.name] = spec.title

    missing = [spec.name for spec in schema.fields if spec.name not in lookup]
    if missing:
        logger.warning("Source columns missing for fields", extra={"fields": missing})

    records: List[Dict[str, Any]] = []
    for _, row in frame.iterrows():
        records.append({name: _plain(row[col]) for name, col in lookup.items()})
    return records
