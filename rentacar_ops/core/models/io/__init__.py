"""
I/O models for service inputs and outputs.

These models are separate from the domain models so that input contracts
can evolve independently of what is stored.

Modules:
- reservations: reservation create/update and lifecycle inputs
- approvals: single and bulk approval decisions
- rate_plans: rate plan and rate option inputs
- imports: parsed sheets, previews and import results
"""

from .approvals import ApprovalInput, BulkApprovalInput
from .imports import ImportPreview, ImportResult, ImportRowError, ParseResult, RawRow
from .rate_plans import RateOptionInput, RatePlanInput
from .reservations import DepartInput, ReservationInput, ReturnInput, SettleInput

__all__ = [
    "ApprovalInput",
    "BulkApprovalInput",
    "DepartInput",
    "ImportPreview",
    "ImportResult",
    "ImportRowError",
    "ParseResult",
    "RateOptionInput",
    "RatePlanInput",
    "RawRow",
    "ReservationInput",
    "ReturnInput",
    "SettleInput",
]
