"""Unit tests for date/time layout translation."""

from __future__ import annotations

from datetime import date, datetime

from sheetbind.layout import convert_layout, format_time


def test_convert_layout_translates_tokens() -> None:
    assert convert_layout("yyyy-MM-dd HH:mm:ss") == "%Y-%m-%d %H:%M:%S"
    assert convert_layout("yy/MM/dd") == "%y/%m/%d"
    assert convert_layout("HH:mm:ss.SSS") == "%H:%M:%S.%f"


def test_convert_layout_escapes_percent() -> None:
    assert convert_layout("dd%") == "%d%%"


def test_format_time_renders_milliseconds() -> None:
    value = datetime(2020, 4, 8, 9, 5, 7, 123456)
    assert format_time(value, "yyyy-MM-dd HH:mm:ss.SSS") == "2020-04-08 09:05:07.123"
    assert format_time(value, "yyyy年MM月dd日") == "2020年04月08日"


def test_format_time_accepts_dates() -> None:
    assert format_time(date(2021, 12, 1), "dd/MM/yy") == "01/12/21"
