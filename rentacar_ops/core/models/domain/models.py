"""Domain models for rental operations entities."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import Field

from ..base import BaseSchema
from .enums import (
    ApprovalStatus,
    ImportStatus,
    ImportTarget,
    PaymentCategory,
    PaymentStatus,
    RateType,
    ReservationStatus,
    UserRole,
    VehicleStatus,
)


def _utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid4())


class CurrentUser(BaseSchema):
    """The user on whose behalf a service call runs."""

    id: str
    email: str
    name: str
    role: UserRole


class Reservation(BaseSchema):
    """
    A rental booking progressing through the pickup/return lifecycle.

    Scheduled and actual pickup/return times are naive wall-clock datetimes of
    the renting office. ``approval_status`` is tracked independently from
    ``status``: a reservation can be driven and settled while still awaiting
    manager sign-off for accounting purposes.
    """

    id: str = Field(default_factory=_new_id)
    reservation_code: str

    vehicle_class_id: str
    vehicle_id: Optional[str] = None

    customer_name: str
    customer_name_kana: str
    customer_phone: str
    customer_email: Optional[str] = None
    customer_code: Optional[str] = None
    entity_type: Optional[int] = None
    company_code: Optional[str] = None
    channel: Optional[str] = None
    account_id: Optional[str] = None

    pickup_date: datetime
    return_date: datetime
    pickup_office_id: str
    return_office_id: str

    estimated_amount: Optional[int] = None
    actual_amount: Optional[int] = None
    note: Optional[str] = None

    status: ReservationStatus = ReservationStatus.RESERVED

    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    approved_by_id: Optional[str] = None
    approved_at: Optional[datetime] = None
    approval_comment: Optional[str] = None

    actual_pickup_date: Optional[datetime] = None
    departure_odometer: Optional[int] = None
    actual_return_date: Optional[datetime] = None
    return_odometer: Optional[int] = None
    fuel_level_at_return: Optional[str] = None

    settled_at: Optional[datetime] = None
    revenue_date: Optional[datetime] = None

    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


class Vehicle(BaseSchema):
    """A fleet vehicle belonging to one vehicle class."""

    id: str = Field(default_factory=_new_id)
    vehicle_class_id: str
    plate_number: str
    office_id: Optional[str] = None
    status: VehicleStatus = VehicleStatus.IN_STOCK
    mileage: int = 0


class Payment(BaseSchema):
    """
    Money received from a customer.

    Payments created at settlement start ``UNALLOCATED``; allocation to
    invoices happens elsewhere.
    """

    id: str = Field(default_factory=_new_id)
    payment_number: str
    payment_date: datetime = Field(default_factory=_utc_now)
    amount: int
    payment_category: PaymentCategory = PaymentCategory.CASH
    payer_name: str
    status: PaymentStatus = PaymentStatus.UNALLOCATED
    reservation_id: Optional[str] = None


class RatePlan(BaseSchema):
    """A pricing rule for a vehicle class, valid over a date window."""

    id: str = Field(default_factory=_new_id)
    vehicle_class_id: str
    plan_name: str
    rate_type: RateType
    base_price: int
    additional_hour_price: int = 0
    insurance_price: int = 0
    valid_from: date
    valid_to: Optional[date] = None
    is_active: bool = True


class RateOption(BaseSchema):
    """A priced add-on such as a child seat or navigation unit."""

    id: str = Field(default_factory=_new_id)
    option_name: str
    price: int
    is_active: bool = True


class ImportHistory(BaseSchema):
    """Audit record of one spreadsheet import run."""

    id: str = Field(default_factory=_new_id)
    target: ImportTarget
    file_name: str
    sheet_name: Optional[str] = None
    record_count: int = 0
    status: ImportStatus
    error_log: Optional[List[Dict[str, Any]]] = None
    imported_at: datetime = Field(default_factory=_utc_now)
