"""
Reservation I/O models.

Validated inputs accepted by ``ReservationService``. Raw dictionaries coming
from forms or spreadsheets are validated against these before any state
change happens.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, NaiveDatetime, ValidationInfo, field_validator

from ..base import BaseSchema
from ..domain.enums import PaymentCategory


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ReservationInput(BaseSchema):
    """Fields accepted when creating or updating a reservation."""

    vehicle_class_id: str = Field(min_length=1, description="Vehicle class being booked")
    vehicle_id: Optional[str] = None
    customer_name: str = Field(min_length=1)
    customer_name_kana: str = Field(min_length=1, description="Phonetic (kana) reading of the customer name")
    customer_phone: str = Field(min_length=1)
    customer_email: Optional[EmailStr] = None
    # Wall-clock times of the renting office; values with a UTC offset are rejected.
    pickup_date: NaiveDatetime
    return_date: NaiveDatetime
    pickup_office_id: str = Field(min_length=1)
    return_office_id: str = Field(min_length=1)
    estimated_amount: Optional[int] = Field(default=None, ge=0)
    note: Optional[str] = None
    customer_code: Optional[str] = None
    entity_type: Optional[int] = Field(default=None, ge=1, le=2, description="1 = individual, 2 = corporate")
    company_code: Optional[str] = None
    channel: Optional[str] = None
    account_id: Optional[str] = None

    @field_validator("customer_email", "vehicle_id", mode="before")
    @classmethod
    def _empty_string_is_none(cls, value):
        return _blank_to_none(value)

    @field_validator("return_date")
    @classmethod
    def _return_after_pickup(cls, value: datetime, info: ValidationInfo) -> datetime:
        pickup = info.data.get("pickup_date")
        if pickup is not None and not pickup < value:
            raise ValueError("return date must be later than the pickup date")
        return value


class DepartInput(BaseSchema):
    """Hand-over data recorded when the customer drives off."""

    actual_pickup_date: NaiveDatetime
    departure_odometer: int = Field(ge=0)


class ReturnInput(BaseSchema):
    """Data recorded when the vehicle comes back."""

    actual_return_date: NaiveDatetime
    return_odometer: int = Field(ge=0)
    fuel_level_at_return: Optional[str] = None


class SettleInput(BaseSchema):
    """Final amount and payment method for a returned reservation."""

    actual_amount: int = Field(ge=0)
    payment_category: PaymentCategory = PaymentCategory.CASH
    note: Optional[str] = None
