"""
Row mappers: parsed spreadsheet rows to master data column values.

Each mapper reads the Japanese column headers used by the exported
spreadsheets and falls back to the camelCase field names, so hand-made
sheets can use either. Columns a mapper does not know are ignored.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from ..core.models.domain import ImportTarget
from ..core.models.io import RawRow

Mapper = Callable[[RawRow], Dict[str, Any]]

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_COMPACT_STAMP = re.compile(r"^\d{14}$")
_DATE_FORMATS = ("%Y/%m/%d %H:%M:%S", "%Y/%m/%d %H:%M", "%Y/%m/%d")


# --- helpers ---


def to_int_or_zero(value: str) -> int:
    """Parse the leading integer of ``value`` (``"12.5"`` -> 12); 0 when there is none."""
    match = _LEADING_INT.match(value or "")
    return int(match.group(1)) if match else 0


def to_date_or_now(value: str) -> datetime:
    """
    Parse a spreadsheet date.

    Accepts compact ``YYYYMMDDhhmmss`` stamps, ISO 8601 strings and
    ``YYYY/MM/DD[ hh:mm[:ss]]``. Offsets are dropped, keeping the wall-clock
    time. Anything else, including an empty string, yields the current time.
    """
    value = (value or "").strip()
    if not value:
        return datetime.now()
    if _COMPACT_STAMP.match(value):
        try:
            return datetime.strptime(value, "%Y%m%d%H%M%S")
        except ValueError:
            return datetime.now()
    try:
        return datetime.fromisoformat(value).replace(tzinfo=None)
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return datetime.now()


def pad_code(value: str, length: int) -> str:
    """Left-pad a numeric code with zeros, e.g. ``pad_code("42", 5) == "00042"``."""
    return value.rjust(length, "0")


def _pick(row: RawRow, *keys: str, default: Optional[str] = "") -> Optional[str]:
    # First non-empty value wins.
    for key in keys:
        value = row.get(key)
        if value:
            return value
    return default


# --- mappers ---


def map_company(row: RawRow) -> Dict[str, Any]:
    return {
        "customer_company_code": _pick(row, "顧客会社コード", "customerCompanyCode"),
        "company_name_kana": _pick(row, "顧客会社名（カナ）", "companyNameKana"),
        "official_name": _pick(row, "正式名称", "officialName"),
        "short_name": _pick(row, "略式名称", "shortName"),
        "channel_code": _pick(row, "チャネルコード", "channelCode"),
    }


def map_customer(row: RawRow) -> Dict[str, Any]:
    return {
        "area": _pick(row, "エリア", "area", default=None),
        "dealer": _pick(row, "ディーラー", "dealer", default=None),
        "channel_code": _pick(row, "チャネルｺｰﾄﾞ", "チャネルコード", "channelCode"),
        "department_code": _pick(row, "部署コード", "departmentCode"),
        "company_code": _pick(row, "会社コード", "companyCode"),
        "customer_company_code": _pick(row, "顧客会社コード", "customerCompanyCode"),
        "department_customer_code": _pick(row, "部署・顧客コード", "departmentCustomerCode"),
        "department_customer_name_kana": _pick(row, "部署・顧客名（カナ）", "departmentCustomerNameKana"),
        "department_customer_name": _pick(row, "部署・顧客名称", "departmentCustomerName"),
        "short_name": _pick(row, "略式名称", "shortName"),
    }


def map_daily_report_dealer(row: RawRow) -> Dict[str, Any]:
    return {
        "company_code": _pick(row, "会社コード", "companyCode"),
        "company_name": _pick(row, "会社名", "companyName"),
    }


def map_reservation(row: RawRow) -> Dict[str, Any]:
    """
    Map a reservation export row.

    Reservations are created through ``ReservationService`` rather than bulk
    import; this mapper serves previews and migrations. Zero entity types and
    amounts become None.
    """
    return {
        "customer_name": _pick(row, "顧客名", "customerName"),
        "customer_name_kana": _pick(row, "顧客名（カナ）", "customerNameKana"),
        "customer_phone": _pick(row, "電話番号", "customerPhone"),
        "customer_email": _pick(row, "メール", "customerEmail", default=None),
        "customer_code": _pick(row, "顧客コード", "customerCode", default=None),
        "entity_type": to_int_or_zero(_pick(row, "個人法人区分", "entityType", default="1")) or None,
        "company_code": _pick(row, "会社コード", "companyCode", default=None),
        "channel": _pick(row, "チャネル", "channel", default=None),
        "pickup_date": to_date_or_now(_pick(row, "出発日時", "pickupDate")),
        "return_date": to_date_or_now(_pick(row, "帰着日時", "returnDate")),
        "estimated_amount": to_int_or_zero(_pick(row, "見積金額", "estimatedAmount", default="0")) or None,
        "note": _pick(row, "備考", "note", default=None),
    }


def _not_mapped(row: RawRow) -> Dict[str, Any]:
    return {}


_MAPPERS: Dict[ImportTarget, Mapper] = {
    ImportTarget.company: map_company,
    ImportTarget.customer: map_customer,
    ImportTarget.daily_report_dealer: map_daily_report_dealer,
    ImportTarget.reservation: _not_mapped,
    # Monthly targets need per-row normalization and have no row mapper.
    ImportTarget.sales_rep_assignment: _not_mapped,
    ImportTarget.reservation_target: _not_mapped,
    ImportTarget.sales_target: _not_mapped,
}


def get_mapper(target: ImportTarget) -> Mapper:
    """Return the row mapper for ``target``."""
    return _MAPPERS[ImportTarget(target)]
