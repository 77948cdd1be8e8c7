"""
Spreadsheet parsing.

CSV and Excel uploads are read with pandas (Excel through openpyxl) into a
uniform ``ParseResult``: one dict per data row, keyed by the header row,
every cell a trimmed string. The format is chosen by the file extension.
"""

from __future__ import annotations

import io
import math
from typing import Any, List, Optional

import pandas as pd

from ..core.errors import ValidationError
from ..core.logging_config import get_logger
from ..core.models.io import ParseResult, RawRow

logger = get_logger(__name__)

# Spreadsheet placeholders that mean "no value".
_BLANK_MARKERS = frozenset({"#N/A", "undefined"})


def is_csv(file_name: str) -> bool:
    return file_name.lower().endswith(".csv")


def _cell_to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            value = int(value)
    text = str(value).strip()
    return "" if text in _BLANK_MARKERS else text


def normalize_row(row: dict) -> RawRow:
    """Turn every cell into a trimmed string, blank placeholders into ``""``."""
    return {str(key).strip(): _cell_to_str(value) for key, value in row.items()}


def _frame_to_result(frame: pd.DataFrame, sheet_name: str) -> ParseResult:
    headers = [str(column).strip() for column in frame.columns]
    rows: List[RawRow] = []
    for record in frame.to_dict(orient="records"):
        row = normalize_row(record)
        if any(row.values()):
            rows.append(row)
    return ParseResult(sheet_name=sheet_name, headers=headers, rows=rows, total_rows=len(rows))


def _open_workbook(data: bytes, file_name: str) -> pd.ExcelFile:
    try:
        return pd.ExcelFile(io.BytesIO(data), engine="openpyxl")
    except Exception as exc:
        logger.warning(f"Could not open workbook {file_name}: {exc}")
        raise ValidationError(f"Could not read {file_name} as an Excel workbook") from exc


def get_sheet_names(data: bytes, file_name: str) -> List[str]:
    """
    List the sheets of an upload.

    A CSV file has a single sheet named after the file.
    """
    if is_csv(file_name):
        return [file_name]
    with _open_workbook(data, file_name) as workbook:
        return [str(name) for name in workbook.sheet_names]


def _parse_csv(data: bytes, file_name: str) -> ParseResult:
    try:
        frame = pd.read_csv(
            io.BytesIO(data),
            dtype=str,
            keep_default_na=False,
            encoding="utf-8-sig",
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError:
        return ParseResult(sheet_name=file_name)
    except (UnicodeDecodeError, pd.errors.ParserError) as exc:
        logger.warning(f"Could not parse CSV {file_name}: {exc}")
        raise ValidationError(f"Could not read {file_name} as UTF-8 CSV") from exc
    return _frame_to_result(frame, file_name)


def _parse_excel(data: bytes, file_name: str, sheet_name: Optional[str]) -> ParseResult:
    with _open_workbook(data, file_name) as workbook:
        names = [str(name) for name in workbook.sheet_names]
        if not names:
            raise ValidationError(f"{file_name} contains no sheets")
        target = sheet_name or names[0]
        if target not in names:
            raise ValidationError(f'Sheet "{target}" not found in {file_name}')
        frame = workbook.parse(target, dtype=str, keep_default_na=False)
    return _frame_to_result(frame, target)


def parse_file(data: bytes, file_name: str, sheet_name: Optional[str] = None) -> ParseResult:
    """
    Parse an uploaded CSV or Excel file.

    Args:
        data: Raw file content.
        file_name: Original file name; ``.csv`` (any case) selects the CSV reader,
            anything else is read as an Excel workbook.
        sheet_name: Workbook sheet to read; the first sheet when omitted. Ignored
            for CSV files.

    Returns:
        The parsed sheet. Fully blank rows are dropped.

    Raises:
        ValidationError: The file cannot be read or the sheet does not exist.
    """
    if is_csv(file_name):
        result = _parse_csv(data, file_name)
    else:
        result = _parse_excel(data, file_name, sheet_name)
    logger.debug(f"Parsed {file_name} [{result.sheet_name}]: {result.total_rows} rows, headers={result.headers}")
    return result
