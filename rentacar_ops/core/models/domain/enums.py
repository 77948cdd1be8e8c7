"""Domain enums for the rental operations models."""

from __future__ import annotations

from enum import Enum, IntEnum


class UserRole(str, Enum):
    """
    Back-office roles, highest first.

    Ranks are compared through ``rentacar_ops.auth.ROLE_HIERARCHY``.
    """

    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    MEMBER = "MEMBER"


class RateType(str, Enum):
    """Pricing rule applied by a rate plan."""

    HOURLY = "HOURLY"  # Base price covers a 6 hour block, extra hours charged.
    DAILY = "DAILY"  # Base price per started 24 hours.
    OVERNIGHT = "OVERNIGHT"  # Base price per night, no hourly surcharge.


class ReservationStatus(str, Enum):
    """Lifecycle status of a reservation."""

    RESERVED = "RESERVED"
    CONFIRMED = "CONFIRMED"  # Vehicle assigned.
    DEPARTED = "DEPARTED"  # Vehicle handed over to the customer.
    RETURNED = "RETURNED"
    SETTLED = "SETTLED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


class ApprovalStatus(str, Enum):
    """Manager sign-off state of a reservation."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class VehicleStatus(str, Enum):
    IN_STOCK = "IN_STOCK"
    RENTED = "RENTED"
    MAINTENANCE = "MAINTENANCE"
    RETIRED = "RETIRED"


class PaymentCategory(str, Enum):
    CASH = "CASH"
    CREDIT_CARD = "CREDIT_CARD"
    BANK_TRANSFER = "BANK_TRANSFER"
    E_MONEY = "E_MONEY"
    OTHER = "OTHER"


class PaymentStatus(str, Enum):
    UNALLOCATED = "UNALLOCATED"
    PARTIALLY_ALLOCATED = "PARTIALLY_ALLOCATED"
    ALLOCATED = "ALLOCATED"


class EntityType(IntEnum):
    """Customer kind; drives when revenue is recognized."""

    INDIVIDUAL = 1  # Revenue recognized at settlement.
    CORPORATE = 2  # Revenue recognized when the invoice is issued.


class ImportTarget(str, Enum):
    """Tables a spreadsheet can be mapped into."""

    company = "company"
    customer = "customer"
    daily_report_dealer = "dailyReportDealer"
    sales_rep_assignment = "salesRepAssignment"
    reservation = "reservation"
    reservation_target = "reservationTarget"
    sales_target = "salesTarget"


class ImportStatus(str, Enum):
    SUCCESS = "SUCCESS"
    PARTIAL = "PARTIAL"
    FAILED = "FAILED"


class DomainEventType(str, Enum):
    """
    Types of events emitted by the service layer.

    Handlers subscribe to these through ``rentacar_ops.events.EventBus``.
    """

    reservation_created = "reservation.created"
    reservation_updated = "reservation.updated"
    reservation_cancelled = "reservation.cancelled"
    reservation_vehicle_assigned = "reservation.vehicleAssigned"
    reservation_vehicle_unassigned = "reservation.vehicleUnassigned"
    reservation_departed = "reservation.departed"
    reservation_returned = "reservation.returned"
    reservation_settled = "reservation.settled"
    reservation_no_show = "reservation.noShow"
    reservation_approved = "reservation.approved"
    reservation_rejected = "reservation.rejected"
    payment_created = "payment.created"
    import_completed = "import.completed"
