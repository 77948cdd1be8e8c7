"""Core models and schemas for rental operations."""

from __future__ import annotations

from .base import BaseSchema
from .domain import (
    ApprovalStatus,
    CurrentUser,
    DomainEventType,
    EntityType,
    ImportHistory,
    ImportStatus,
    ImportTarget,
    Payment,
    PaymentCategory,
    PaymentStatus,
    RateOption,
    RatePlan,
    RateType,
    Reservation,
    ReservationStatus,
    UserRole,
    Vehicle,
    VehicleStatus,
)

__all__ = [
    "ApprovalStatus",
    "BaseSchema",
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
