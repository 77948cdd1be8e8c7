"""Approval workflow I/O models."""

from __future__ import annotations

from typing import Annotated, List, Literal, Optional

from pydantic import Field, StringConstraints

from ..base import BaseSchema

Decision = Literal["APPROVED", "REJECTED"]


class ApprovalInput(BaseSchema):
    """A single approve/reject decision."""

    status: Decision
    comment: Optional[str] = None


class BulkApprovalInput(BaseSchema):
    """The same decision applied to several reservations at once."""

    ids: List[Annotated[str, StringConstraints(min_length=1)]] = Field(
        min_length=1, description="Reservation ids; at least one is required"
    )
    status: Decision
    comment: Optional[str] = None
