"""CLI demo writing a source table through a record schema."""

# Module responsibilities:
# - Provide a CLI that loads a CSV/Excel source, binds it to a YAML schema, and writes a workbook.
# - Generate placeholder sample files when requested paths do not exist.

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import pandas as pd

from sheetbind.errors import SheetBindError
from sheetbind.excel_reader import read_table
from sheetbind.schema import RecordSchema
from sheetbind.utils.log import get_logger
from sheetbind.xlsx import Xlsx, XlsxOptions

logger = get_logger("tools.demo_xlsx")

_EXAMPLE_SCHEMA = (
    "sheet: 会员\n"
    "fields:\n"
    "  - {name: Total, kind: int, title: 总数}\n"
    "  - {name: New, kind: int, title: 新增}\n"
    "  - {name: Effective, kind: int, title: 有效}\n"
)


def _generate_source_example(path: Path) -> None:
    data = pd.DataFrame(
        [
            {"Total": 100, "New": 50, "Effective": 50},
            {"Total": 200, "New": 60, "Effective": 140},
        ]
    )
    path.parent.mkdir(parents=True, exist_ok=True)
    data.to_csv(path, index=False)
    logger.info("Generated example source table", extra={"path": str(path)})


def _generate_schema_example(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(_EXAMPLE_SCHEMA, encoding="utf-8")
    logger.info("Generated example schema", extra={"path": str(path)})


def ensure_examples(source: Path, schema: Path) -> None:
    if not source.exists():
        _generate_source_example(source)
    if not schema.exists():
        _generate_schema_example(schema)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Record to sheet binding demo")
    parser.add_argument("--source", type=Path, default=Path("examples/members.csv"))
    parser.add_argument("--schema", type=Path, default=Path("examples/members_schema.yaml"))
    parser.add_argument("--options", type=Path, default=None, help="YAML with template/excel/validations")
    parser.add_argument("--template", type=Path, default=None, help="Template workbook to fill")
    parser.add_argument("--out", type=Path, default=Path("out/members.xlsx"))
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])

    try:
        ensure_examples(args.source, args.schema)
        schema = RecordSchema.from_yaml(args.schema)
        df = read_table(args.source)

        options = XlsxOptions.from_yaml(args.options) if args.options else XlsxOptions()
        if args.template:
            options.template = args.template

        with Xlsx.from_options(options) as xlsx:
            xlsx.write_frame(df, schema)
            out_path = xlsx.save(args.out)

        logger.info(
            "Sheet binding complete",
            extra={"output": str(out_path), "row_count": len(df)},
        )
        print(f"Rows processed: {len(df)}")
        print(f"Output: {out_path}")
        return 0
    except (SheetBindError, OSError, ValueError) as exc:
        logger.error("Sheet binding demo failed", extra={"error": str(exc)})
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
