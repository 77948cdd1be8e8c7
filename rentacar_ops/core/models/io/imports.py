"""
Spreadsheet import I/O models.

Parsed sheets, previews and import outcomes exchanged between the parser,
``ImportService`` and its callers.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import Field

from ..base import BaseSchema
from ..domain.enums import ImportTarget

RawRow = Dict[str, str]


class ParseResult(BaseSchema):
    """One sheet read into string cells keyed by column header."""

    sheet_name: str
    headers: List[str] = Field(default_factory=list)
    rows: List[RawRow] = Field(default_factory=list)
    total_rows: int = 0


class ImportPreview(BaseSchema):
    file_name: str
    sheets: List[str]
    current_sheet: str
    headers: List[str]
    preview_rows: List[RawRow]
    total_rows: int


class ImportRowError(BaseSchema):
    """An error tied to a spreadsheet row number (header row is 1)."""

    row: int
    message: str


class ImportResult(BaseSchema):
    target: ImportTarget
    file_name: str
    sheet_name: Optional[str] = None
    total_rows: int
    imported_rows: int
    skipped_rows: int
    errors: List[ImportRowError] = Field(default_factory=list)
