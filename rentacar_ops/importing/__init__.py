"""Spreadsheet import pipeline: parsing, row mapping and the import service."""

from .mappers import (
    get_mapper,
    map_company,
    map_customer,
    map_daily_report_dealer,
    map_reservation,
    pad_code,
    to_date_or_now,
    to_int_or_zero,
)
from .parser import get_sheet_names, parse_file
from .service import IMPORTABLE_TARGETS, ImportService, ImportServiceDeps

__all__ = [
    "IMPORTABLE_TARGETS",
    "ImportService",
    "ImportServiceDeps",
    "get_mapper",
    "get_sheet_names",
    "map_company",
    "map_customer",
    "map_daily_report_dealer",
    "map_reservation",
    "pad_code",
    "parse_file",
    "to_date_or_now",
    "to_int_or_zero",
]
