"""Rental fee calculation.

``calculate_rate`` is a pure function over a rate plan's prices and a rental
span; it has no persistence or clock dependency.

- HOURLY: ``base_price`` covers the first 6 hours, every further started hour
  costs ``additional_hour_price``.
- DAILY: ``base_price`` per started 24 hours, plus ``additional_hour_price``
  for hours beyond the charged days.
- OVERNIGHT: ``base_price`` per night, where nights are started 24 hour
  periods.

Insurance is charged per charged day, at least once. Options are
``price * quantity`` summed.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Any, Iterable, List, Optional, Sequence

from pydantic import Field

from ..core.errors import NotFoundError, validate_input
from ..core.models.base import BaseSchema
from ..core.models.domain import RateOption, RatePlan, RateType
from ..core.models.io import RateOptionInput, RatePlanInput

HOURLY_BLOCK_HOURS = 6
HOURS_PER_DAY = 24
SECONDS_PER_HOUR = 3600


class OptionLine(BaseSchema):
    """A priced add-on and how many of it were rented."""

    price: int = Field(ge=0)
    quantity: int = Field(default=1, ge=0)

    @classmethod
    def from_option(cls, option: RateOption, quantity: int = 1) -> "OptionLine":
        return cls(price=option.price, quantity=quantity)


class RateCalcInput(BaseSchema):
    rate_type: RateType
    base_price: int
    additional_hour_price: int = 0
    insurance_price: int = 0
    pickup_date: datetime
    return_date: datetime
    options: List[OptionLine] = Field(default_factory=list)

    @classmethod
    def from_plan(
        cls,
        plan: RatePlan,
        pickup_date: datetime,
        return_date: datetime,
        options: Optional[Iterable[OptionLine]] = None,
    ) -> "RateCalcInput":
        """Build the calculator input from a rate plan and a rental span."""
        return cls(
            rate_type=plan.rate_type,
            base_price=plan.base_price,
            additional_hour_price=plan.additional_hour_price,
            insurance_price=plan.insurance_price,
            pickup_date=pickup_date,
            return_date=return_date,
            options=list(options or []),
        )


class RateCalcResult(BaseSchema):
    base_fee: int = 0
    additional_fee: int = 0
    insurance_fee: int = 0
    options_fee: int = 0
    total_amount: int = 0
    days: int = 0
    hours: int = 0


def calculate_rate(data: RateCalcInput) -> RateCalcResult:
    """
    Calculate the fee breakdown for a rental.

    A span that is empty or negative yields an all-zero result.

    Args:
        data: Prices, rate type, rental span and options.

    Returns:
        The fee breakdown with the charged ``days`` and the started ``hours``.
    """
    span_seconds = (data.return_date - data.pickup_date).total_seconds()
    if span_seconds <= 0:
        return RateCalcResult()

    total_hours = span_seconds / SECONDS_PER_HOUR
    days = math.ceil(total_hours / HOURS_PER_DAY)
    hours = math.ceil(total_hours)

    base_fee = 0
    additional_fee = 0

    if data.rate_type == RateType.HOURLY:
        base_fee = data.base_price
        over_hours = max(0, hours - HOURLY_BLOCK_HOURS)
        additional_fee = over_hours * data.additional_hour_price
    elif data.rate_type == RateType.DAILY:
        base_fee = data.base_price * days
        over_hours = max(0, hours - days * HOURS_PER_DAY)
        additional_fee = over_hours * data.additional_hour_price
    elif data.rate_type == RateType.OVERNIGHT:
        base_fee = data.base_price * days

    insurance_fee = data.insurance_price * max(days, 1)
    options_fee = sum(option.price * option.quantity for option in data.options)

    return RateCalcResult(
        base_fee=base_fee,
        additional_fee=additional_fee,
        insurance_fee=insurance_fee,
        options_fee=options_fee,
        total_amount=base_fee + additional_fee + insurance_fee + options_fee,
        days=days,
        hours=hours,
    )


def select_rate_plan(plans: Sequence[RatePlan], vehicle_class_id: str, at: date | datetime) -> RatePlan:
    """
    Pick the plan that prices ``vehicle_class_id`` on the given day.

    Only active plans whose window ``[valid_from, valid_to)`` contains the day
    qualify; ``valid_to`` of None means open-ended. When several qualify the
    one with the latest ``valid_from`` wins.

    Raises:
        NotFoundError: No plan applies.
    """
    day = at.date() if isinstance(at, datetime) else at
    candidates = [
        plan
        for plan in plans
        if plan.is_active
        and plan.vehicle_class_id == vehicle_class_id
        and plan.valid_from <= day
        and (plan.valid_to is None or day < plan.valid_to)
    ]
    if not candidates:
        raise NotFoundError(f"No active rate plan for vehicle class {vehicle_class_id} on {day.isoformat()}")
    return max(candidates, key=lambda plan: plan.valid_from)


def new_rate_plan(data: Any) -> RatePlan:
    """Validate a ``RatePlanInput`` (or mapping) and build the rate plan from it."""
    payload = validate_input(RatePlanInput, data)
    return RatePlan(**payload.model_dump())


def new_rate_option(data: Any) -> RateOption:
    """Validate a ``RateOptionInput`` (or mapping) and build the option from it."""
    payload = validate_input(RateOptionInput, data)
    return RateOption(**payload.model_dump())
