from __future__ import annotations

"""Repository interface contracts.

The services depend on these Protocols instead of concrete persistence
implementations.

Contract guidelines
-------------------

- All methods are async.
- Repository implementations must not leak SQLAlchemy sessions or
  transactions to callers.
- Writes that span several records (a departure updating the vehicle, a
  settlement creating a payment) are exposed as single methods so that the
  implementation can commit them atomically.
- Unique key violations surface as ``DuplicateKeyError`` so that services do
  not need to know the driver's exception types.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from ..core.models.domain import (
    ApprovalStatus,
    ImportHistory,
    ImportTarget,
    Payment,
    PaymentCategory,
    Reservation,
    ReservationStatus,
    Vehicle,
    VehicleStatus,
)


class DuplicateKeyError(Exception):
    """A write collided with a unique key."""


class ReservationRepository(Protocol):
    """Persist and query reservations."""

    async def create(self, reservation: Reservation) -> None:
        """
        Insert a new reservation.

        Raises:
            DuplicateKeyError: The reservation code is already taken.
        """
        ...

    async def get(self, reservation_id: str) -> Optional[Reservation]: ...

    async def list(
        self,
        *,
        status: Optional[ReservationStatus] = None,
        approval_status: Optional[ApprovalStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Reservation], int]:
        """
        List reservations, newest first.

        Returns:
            The requested page and the total number of matching rows.
        """
        ...

    async def save(self, reservation: Reservation) -> None:
        """Overwrite an existing reservation with the given state."""
        ...

    async def save_with_vehicle(
        self, reservation: Reservation, *, vehicle_id: str, vehicle_status: VehicleStatus, mileage: int
    ) -> None:
        """Save the reservation and update its vehicle in one transaction."""
        ...

    async def save_with_payment(
        self,
        reservation: Reservation,
        *,
        amount: int,
        payment_category: PaymentCategory,
        payer_name: str,
        payment_date: datetime,
    ) -> Payment:
        """
        Save the reservation and create a payment for it in one transaction.

        The payment number is allocated inside the same transaction.

        Returns:
            The created payment.
        """
        ...

    async def latest_code(self) -> Optional[str]:
        """Return the highest reservation code in use, if any."""
        ...

    async def find_overlapping(
        self,
        *,
        vehicle_id: str,
        pickup_date: datetime,
        return_date: datetime,
        statuses: Sequence[ReservationStatus],
        exclude_id: Optional[str] = None,
    ) -> Optional[Reservation]:
        """
        Find a reservation of the vehicle whose period overlaps the given one.

        Two periods overlap when ``pickup < other.return and return > other.pickup``.
        """
        ...

    async def count_by_approval(self, approval_status: ApprovalStatus) -> int: ...

    async def bulk_update_approval(
        self,
        ids: Sequence[str],
        *,
        approval_status: ApprovalStatus,
        approved_by_id: str,
        approved_at: datetime,
        comment: Optional[str],
    ) -> List[Reservation]:
        """
        Decide every listed reservation that is still PENDING.

        Returns:
            The reservations that were actually updated.
        """
        ...


class VehicleRepository(Protocol):
    """Persist and query fleet vehicles."""

    async def create(self, vehicle: Vehicle) -> None: ...

    async def get(self, vehicle_id: str) -> Optional[Vehicle]: ...

    async def list(self, vehicle_class_id: Optional[str] = None) -> List[Vehicle]: ...


class PaymentRepository(Protocol):
    """Query payments created by settlements."""

    async def get_by_number(self, payment_number: str) -> Optional[Payment]: ...

    async def list(self, reservation_id: Optional[str] = None) -> List[Payment]: ...


class MasterDataRepository(Protocol):
    """Bulk insert imported master data."""

    async def insert_many(self, target: ImportTarget, rows: Sequence[Dict[str, Any]]) -> int:
        """
        Insert mapped rows into the table backing ``target``.

        Rows whose unique business code already exists, in the table or earlier
        in the same batch, are skipped.

        Returns:
            The number of rows actually inserted.
        """
        ...

    async def count(self, target: ImportTarget) -> int: ...


class ImportHistoryRepository(Protocol):
    """Audit trail of import runs."""

    async def create(self, history: ImportHistory) -> None: ...

    async def list(self, limit: int = 50) -> List[ImportHistory]:
        """List import histories, newest first."""
        ...
