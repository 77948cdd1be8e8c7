from __future__ import annotations

"""Reservation lifecycle service.

``ReservationService`` owns every state change of a reservation, from booking
to settlement:

- ``create`` / ``update`` / ``cancel`` manage the booking itself.
- ``assign_vehicle`` / ``unassign_vehicle`` bind a concrete vehicle and guard
  against double booking.
- ``depart`` / ``return_vehicle`` / ``settle`` record the rental and move the
  vehicle and money along with it.
- ``approve`` / ``reject`` record the manager sign-off, which is tracked
  independently from the lifecycle status.

Status guards come from ``rentacar_ops.reservations.transitions``. Every
mutating call resolves the acting user first, checks its role, persists, and
only then emits a domain event.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional, Tuple

from ..auth import UserProvider, get_current_user, require_role
from ..core.codes import RESERVATION_CODE_PREFIX, next_sequence_code
from ..core.errors import NotFoundError, ValidationError, validate_input
from ..core.logging_config import get_logger
from ..core.models.domain import (
    ApprovalStatus,
    CurrentUser,
    DomainEventType,
    EntityType,
    Payment,
    RatePlan,
    Reservation,
    ReservationStatus,
    UserRole,
    VehicleStatus,
)
from ..core.models.io import DepartInput, ReservationInput, ReturnInput, SettleInput
from ..events import EventBus, event_bus
from ..pricing import OptionLine, RateCalcInput, RateCalcResult, calculate_rate
from ..repos import DuplicateKeyError, ReservationRepository, VehicleRepository
from .transitions import ACTIVE_STATUSES, ReservationAction, ensure_editable, ensure_transition

logger = get_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ReservationServiceDeps:
    """Dependency bundle for ``ReservationService``.

    Applications and tests inject the repositories, the event bus that
    receives lifecycle events, and the source of the acting user.
    """

    reservations: ReservationRepository
    vehicles: VehicleRepository
    events: EventBus = field(default=event_bus)
    user_provider: UserProvider = field(default=get_current_user)


class ReservationService:
    """Business operations on reservations."""

    def __init__(self, *, deps: ReservationServiceDeps) -> None:
        self._deps = deps

    @property
    def _reservations(self) -> ReservationRepository:
        return self._deps.reservations

    async def _acting_user(
        self, required_role: UserRole = UserRole.MEMBER, message: Optional[str] = None
    ) -> CurrentUser:
        user = await self._deps.user_provider()
        require_role(user, required_role, message)
        return user

    async def _require(self, reservation_id: str) -> Reservation:
        reservation = await self._reservations.get(reservation_id)
        if reservation is None:
            raise NotFoundError(f"Reservation {reservation_id} not found")
        return reservation

    async def _emit(self, event_type: DomainEventType, user: CurrentUser, **payload: Any) -> None:
        await self._deps.events.emit(event_type, {**payload, "user_id": user.id})

    async def _check_vehicle_available(self, reservation: Reservation, vehicle_id: str) -> None:
        """Ensure the vehicle exists, fits the booked class and is free for the span."""
        vehicle = await self._deps.vehicles.get(vehicle_id)
        if vehicle is None:
            raise NotFoundError(f"Vehicle {vehicle_id} not found")
        if vehicle.vehicle_class_id != reservation.vehicle_class_id:
            raise ValidationError("The vehicle does not belong to the reservation's vehicle class")

        conflict = await self._reservations.find_overlapping(
            vehicle_id=vehicle_id,
            pickup_date=reservation.pickup_date,
            return_date=reservation.return_date,
            statuses=sorted(ACTIVE_STATUSES, key=lambda status: status.value),
            exclude_id=reservation.id,
        )
        if conflict is not None:
            logger.info(
                f"Double booking rejected: vehicle={vehicle_id} reservation={reservation.reservation_code} "
                f"conflicts with {conflict.reservation_code}"
            )
            raise ValidationError(f"The vehicle is already booked by {conflict.reservation_code}")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def list(
        self,
        *,
        status: Optional[ReservationStatus] = None,
        approval_status: Optional[ApprovalStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Reservation], int]:
        """Return a page of reservations, newest first, and the total count."""
        return await self._reservations.list(status=status, approval_status=approval_status, limit=limit, offset=offset)

    async def get(self, reservation_id: str) -> Optional[Reservation]:
        return await self._reservations.get(reservation_id)

    # ------------------------------------------------------------------
    # Booking
    # ------------------------------------------------------------------

    async def create(self, data: Any) -> Reservation:
        """
        Book a new reservation.

        The reservation gets the next ``RS-NNNNN`` code and starts ``RESERVED``
        and ``PENDING`` approval.

        Args:
            data: A ``ReservationInput`` or a mapping validated against it.

        Raises:
            PermissionDeniedError: The user is below MEMBER.
            ValidationError: Invalid input, an unavailable vehicle, or a code collision.
        """
        user = await self._acting_user()
        payload = validate_input(ReservationInput, data)

        code = next_sequence_code(RESERVATION_CODE_PREFIX, await self._reservations.latest_code())
        reservation = Reservation(reservation_code=code, **payload.model_dump())
        if reservation.vehicle_id:
            await self._check_vehicle_available(reservation, reservation.vehicle_id)

        try:
            await self._reservations.create(reservation)
        except DuplicateKeyError as exc:
            raise ValidationError("The reservation code is already in use") from exc

        logger.info(f"Reservation {code} created by {user.id}")
        await self._emit(DomainEventType.reservation_created, user, reservation=reservation)
        return reservation

    async def update(self, reservation_id: str, data: Any) -> Reservation:
        """
        Replace the booking details of a reservation that has not departed yet.

        When the vehicle, its class or the period changes, an assigned vehicle
        goes through the same availability checks as ``assign_vehicle``.
        """
        user = await self._acting_user()
        payload = validate_input(ReservationInput, data)

        existing = await self._require(reservation_id)
        ensure_editable(existing.status)

        reservation = existing.model_copy(update={**payload.model_dump(), "updated_at": _utc_now()})
        rebooked = (
            reservation.vehicle_id,
            reservation.vehicle_class_id,
            reservation.pickup_date,
            reservation.return_date,
        ) != (
            existing.vehicle_id,
            existing.vehicle_class_id,
            existing.pickup_date,
            existing.return_date,
        )
        if reservation.vehicle_id and rebooked:
            await self._check_vehicle_available(reservation, reservation.vehicle_id)

        await self._reservations.save(reservation)
        logger.debug(f"Reservation {reservation.reservation_code} updated by {user.id}")
        await self._emit(DomainEventType.reservation_updated, user, reservation=reservation)
        return reservation

    async def cancel(self, reservation_id: str) -> Reservation:
        """
        Cancel a reservation before departure.

        The assigned vehicle is released from the reservation; its own status
        is left alone since it never left the lot.
        """
        user = await self._acting_user()
        existing = await self._require(reservation_id)
        target = ensure_transition(ReservationAction.cancel, existing.status)

        reservation = existing.model_copy(update={"status": target, "vehicle_id": None, "updated_at": _utc_now()})
        await self._reservations.save(reservation)
        logger.info(f"Reservation {reservation.reservation_code} cancelled by {user.id}")
        await self._emit(DomainEventType.reservation_cancelled, user, reservation=reservation)
        return reservation

    async def mark_no_show(self, reservation_id: str) -> Reservation:
        """Close a reservation whose customer never came to pick the vehicle up."""
        user = await self._acting_user()
        existing = await self._require(reservation_id)
        target = ensure_transition(ReservationAction.mark_no_show, existing.status)

        reservation = existing.model_copy(update={"status": target, "vehicle_id": None, "updated_at": _utc_now()})
        await self._reservations.save(reservation)
        logger.info(f"Reservation {reservation.reservation_code} marked as no-show by {user.id}")
        await self._emit(DomainEventType.reservation_no_show, user, reservation=reservation)
        return reservation

    # ------------------------------------------------------------------
    # Vehicle assignment
    # ------------------------------------------------------------------

    async def assign_vehicle(self, reservation_id: str, vehicle_id: str) -> Reservation:
        """
        Bind a vehicle to a ``RESERVED`` reservation and confirm it.

        Raises:
            NotFoundError: Unknown reservation or vehicle.
            ValidationError: Wrong status, wrong vehicle class, or the vehicle
                is held by an overlapping active reservation.
        """
        user = await self._acting_user()
        existing = await self._require(reservation_id)
        target = ensure_transition(ReservationAction.assign_vehicle, existing.status)
        await self._check_vehicle_available(existing, vehicle_id)

        reservation = existing.model_copy(update={"vehicle_id": vehicle_id, "status": target, "updated_at": _utc_now()})
        await self._reservations.save(reservation)
        logger.info(f"Vehicle {vehicle_id} assigned to {reservation.reservation_code}")
        await self._emit(DomainEventType.reservation_vehicle_assigned, user, reservation=reservation)
        return reservation

    async def unassign_vehicle(self, reservation_id: str) -> Reservation:
        user = await self._acting_user()
        existing = await self._require(reservation_id)
        target = ensure_transition(ReservationAction.unassign_vehicle, existing.status)

        reservation = existing.model_copy(update={"vehicle_id": None, "status": target, "updated_at": _utc_now()})
        await self._reservations.save(reservation)
        logger.info(f"Vehicle {existing.vehicle_id} unassigned from {reservation.reservation_code}")
        await self._emit(DomainEventType.reservation_vehicle_unassigned, user, reservation=reservation)
        return reservation

    # ------------------------------------------------------------------
    # Rental
    # ------------------------------------------------------------------

    async def depart(self, reservation_id: str, data: Any) -> Reservation:
        """
        Hand the vehicle over to the customer.

        The reservation and the vehicle (now ``RENTED``, mileage set to the
        departure odometer) are written in one transaction.
        """
        user = await self._acting_user()
        payload = validate_input(DepartInput, data)
        existing = await self._require(reservation_id)
        target = ensure_transition(ReservationAction.depart, existing.status)
        if not existing.vehicle_id:
            raise ValidationError("A vehicle must be assigned before departure")

        reservation = existing.model_copy(
            update={
                "status": target,
                "actual_pickup_date": payload.actual_pickup_date,
                "departure_odometer": payload.departure_odometer,
                "updated_at": _utc_now(),
            }
        )
        await self._reservations.save_with_vehicle(
            reservation,
            vehicle_id=existing.vehicle_id,
            vehicle_status=VehicleStatus.RENTED,
            mileage=payload.departure_odometer,
        )
        logger.info(f"Reservation {reservation.reservation_code} departed with vehicle {existing.vehicle_id}")
        await self._emit(DomainEventType.reservation_departed, user, reservation=reservation)
        return reservation

    async def return_vehicle(self, reservation_id: str, data: Any) -> Reservation:
        """
        Take the vehicle back.

        The return odometer may not be below the departure odometer. The vehicle
        goes back ``IN_STOCK`` with its mileage set to the return odometer, in the
        same transaction as the reservation.
        """
        user = await self._acting_user()
        payload = validate_input(ReturnInput, data)
        existing = await self._require(reservation_id)
        target = ensure_transition(ReservationAction.return_vehicle, existing.status)
        if not existing.vehicle_id:
            raise ValidationError("The reservation has no vehicle to return")
        if existing.departure_odometer is not None and payload.return_odometer < existing.departure_odometer:
            raise ValidationError(
                "The return odometer cannot be lower than the departure odometer",
                {"return_odometer": [f"must be at least {existing.departure_odometer}"]},
            )

        reservation = existing.model_copy(
            update={
                "status": target,
                "actual_return_date": payload.actual_return_date,
                "return_odometer": payload.return_odometer,
                "fuel_level_at_return": payload.fuel_level_at_return,
                "updated_at": _utc_now(),
            }
        )
        await self._reservations.save_with_vehicle(
            reservation,
            vehicle_id=existing.vehicle_id,
            vehicle_status=VehicleStatus.IN_STOCK,
            mileage=payload.return_odometer,
        )
        logger.info(f"Reservation {reservation.reservation_code} returned")
        await self._emit(DomainEventType.reservation_returned, user, reservation=reservation)
        return reservation

    async def settle(self, reservation_id: str, data: Any) -> Tuple[Reservation, Payment]:
        """
        Close the rental financially.

        Individual customers have their revenue recognized at settlement; for
        other customers ``revenue_date`` is left as it is until invoicing. The
        payment (``PM-NNNNN``, unallocated, paid by the customer) is created in
        the same transaction as the reservation update.

        Returns:
            The settled reservation and the payment created for it.
        """
        user = await self._acting_user()
        payload = validate_input(SettleInput, data)
        existing = await self._require(reservation_id)
        target = ensure_transition(ReservationAction.settle, existing.status)

        now = _utc_now()
        updates = {
            "status": target,
            "actual_amount": payload.actual_amount,
            "settled_at": now,
            "updated_at": now,
        }
        if existing.entity_type == EntityType.INDIVIDUAL:
            updates["revenue_date"] = now
        if payload.note is not None:
            updates["note"] = payload.note
        reservation = existing.model_copy(update=updates)

        payment = await self._reservations.save_with_payment(
            reservation,
            amount=payload.actual_amount,
            payment_category=payload.payment_category,
            payer_name=existing.customer_name,
            payment_date=now,
        )
        logger.info(
            f"Reservation {reservation.reservation_code} settled for {payload.actual_amount} "
            f"(payment {payment.payment_number})"
        )
        await self._emit(DomainEventType.reservation_settled, user, reservation=reservation, payment=payment)
        await self._emit(DomainEventType.payment_created, user, payment=payment, reservation=reservation)
        return reservation, payment

    # ------------------------------------------------------------------
    # Approval
    # ------------------------------------------------------------------

    async def _decide(
        self, reservation_id: str, decision: ApprovalStatus, comment: Optional[str], event_type: DomainEventType
    ) -> Reservation:
        verb = "approve" if decision == ApprovalStatus.APPROVED else "reject"
        user = await self._acting_user(UserRole.MANAGER, f"Only managers can {verb} reservations")
        existing = await self._require(reservation_id)
        if existing.approval_status != ApprovalStatus.PENDING:
            raise ValidationError(f"The reservation is already {existing.approval_status.value.lower()}")

        now = _utc_now()
        reservation = existing.model_copy(
            update={
                "approval_status": decision,
                "approved_by_id": user.id,
                "approved_at": now,
                "approval_comment": comment,
                "updated_at": now,
            }
        )
        await self._reservations.save(reservation)
        logger.info(f"Reservation {reservation.reservation_code} {decision.value.lower()} by {user.id}")
        await self._emit(event_type, user, reservation=reservation)
        return reservation

    async def approve(self, reservation_id: str, comment: Optional[str] = None) -> Reservation:
        """Approve a pending reservation. MANAGER or above."""
        return await self._decide(
            reservation_id, ApprovalStatus.APPROVED, comment, DomainEventType.reservation_approved
        )

    async def reject(self, reservation_id: str, comment: Optional[str] = None) -> Reservation:
        """Reject a pending reservation. MANAGER or above."""
        return await self._decide(
            reservation_id, ApprovalStatus.REJECTED, comment, DomainEventType.reservation_rejected
        )

    # ------------------------------------------------------------------
    # Pricing
    # ------------------------------------------------------------------

    async def estimate(
        self, reservation_id: str, plan: RatePlan, options: Optional[Iterable[OptionLine]] = None
    ) -> RateCalcResult:
        """
        Price a reservation with ``plan``.

        The scheduled span is used until the vehicle is back; afterwards the
        actual pickup and return times are charged.
        """
        reservation = await self._require(reservation_id)
        pickup, return_ = reservation.pickup_date, reservation.return_date
        if reservation.actual_pickup_date and reservation.actual_return_date:
            pickup, return_ = reservation.actual_pickup_date, reservation.actual_return_date
        return calculate_rate(RateCalcInput.from_plan(plan, pickup, return_, options))
