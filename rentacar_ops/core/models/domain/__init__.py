"""Domain enums and models."""

from __future__ import annotations

from .enums import (
    ApprovalStatus,
    DomainEventType,
    EntityType,
    ImportStatus,
    ImportTarget,
    PaymentCategory,
    PaymentStatus,
    RateType,
    ReservationStatus,
    UserRole,
    VehicleStatus,
)
from .models import (
    CurrentUser,
    ImportHistory,
    Payment,
    RateOption,
    RatePlan,
    Reservation,
    Vehicle,
)

__all__ = [
    "ApprovalStatus",
    "CurrentUser",
    "DomainEventType",
    "EntityType",
    "ImportHistory",
    "ImportStatus",
    "ImportTarget",
    "Payment",
    "PaymentCategory",
    "PaymentStatus",
    "RateOption",
    "RatePlan",
    "RateType",
    "Reservation",
    "ReservationStatus",
    "UserRole",
    "Vehicle",
    "VehicleStatus",
]
