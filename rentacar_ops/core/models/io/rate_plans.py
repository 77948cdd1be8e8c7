"""Rate plan and rate option I/O models."""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import Field, ValidationInfo, field_validator

from ..base import BaseSchema
from ..domain.enums import RateType


class RatePlanInput(BaseSchema):
    vehicle_class_id: str = Field(min_length=1)
    plan_name: str = Field(min_length=1)
    rate_type: RateType
    base_price: int = Field(ge=0)
    additional_hour_price: int = Field(default=0, ge=0)
    insurance_price: int = Field(default=0, ge=0)
    valid_from: date
    valid_to: Optional[date] = None
    is_active: bool = True

    @field_validator("valid_to")
    @classmethod
    def _valid_to_after_valid_from(cls, value: Optional[date], info: ValidationInfo) -> Optional[date]:
        valid_from = info.data.get("valid_from")
        if value is not None and valid_from is not None and not valid_from < value:
            raise ValueError("valid_to must be later than valid_from")
        return value


class RateOptionInput(BaseSchema):
    option_name: str = Field(min_length=1)
    price: int = Field(ge=0)
    is_active: bool = True
