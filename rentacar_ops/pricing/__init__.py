"""Rate plans and fee calculation."""

from .rate_calculator import (
    HOURLY_BLOCK_HOURS,
    OptionLine,
    RateCalcInput,
    RateCalcResult,
    calculate_rate,
    new_rate_option,
    new_rate_plan,
    select_rate_plan,
)

__all__ = [
    "HOURLY_BLOCK_HOURS",
    "OptionLine",
    "RateCalcInput",
    "RateCalcResult",
    "calculate_rate",
    "new_rate_option",
    "new_rate_plan",
    "select_rate_plan",
]
