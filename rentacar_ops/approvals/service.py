from __future__ import annotations

"""Manager approval workflow for reservations.

Single decisions are delegated to ``ReservationService.approve`` /
``ReservationService.reject`` so that both paths share the same checks. Bulk
decisions touch only reservations that are still ``PENDING``; rows decided in
the meantime are skipped silently and do not emit events.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

from ..auth import UserProvider, get_current_user, require_role
from ..core.errors import validate_input
from ..core.logging_config import get_logger
from ..core.models.domain import ApprovalStatus, DomainEventType, Reservation, UserRole
from ..core.models.io import ApprovalInput, BulkApprovalInput
from ..events import EventBus, event_bus
from ..repos import ReservationRepository
from ..reservations import ReservationService

logger = get_logger(__name__)

_DECISION_EVENTS: Dict[ApprovalStatus, DomainEventType] = {
    ApprovalStatus.APPROVED: DomainEventType.reservation_approved,
    ApprovalStatus.REJECTED: DomainEventType.reservation_rejected,
}


@dataclass(frozen=True)
class ApprovalServiceDeps:
    """Dependency bundle for ``ApprovalService``."""

    reservations: ReservationRepository
    reservation_service: ReservationService
    events: EventBus = field(default=event_bus)
    user_provider: UserProvider = field(default=get_current_user)


class ApprovalService:
    """Pending approval queries and approve/reject decisions."""

    def __init__(self, *, deps: ApprovalServiceDeps) -> None:
        self._deps = deps

    async def pending_counts(self) -> Dict[str, int]:
        """Count records awaiting approval, keyed by record kind."""
        return {"reservations": await self._deps.reservations.count_by_approval(ApprovalStatus.PENDING)}

    async def list_pending(self, *, limit: int = 50, offset: int = 0) -> Tuple[List[Reservation], int]:
        return await self._deps.reservations.list(approval_status=ApprovalStatus.PENDING, limit=limit, offset=offset)

    async def decide(self, reservation_id: str, data: Any) -> Reservation:
        """
        Approve or reject one reservation.

        Args:
            reservation_id: The reservation to decide.
            data: An ``ApprovalInput`` or a mapping validated against it.
        """
        decision = validate_input(ApprovalInput, data)
        if decision.status == ApprovalStatus.APPROVED.value:
            return await self._deps.reservation_service.approve(reservation_id, decision.comment)
        return await self._deps.reservation_service.reject(reservation_id, decision.comment)

    async def bulk_decide(self, data: Any) -> Dict[str, int]:
        """
        Apply one decision to many reservations at once.

        Args:
            data: A ``BulkApprovalInput`` or a mapping validated against it.

        Returns:
            ``{"count": n}`` where ``n`` is the number of reservations that were
            still pending and got decided.

        Raises:
            PermissionDeniedError: The user is below MANAGER.
            ValidationError: Invalid input, e.g. an empty ``ids`` list.
        """
        user = await self._deps.user_provider()
        require_role(user, UserRole.MANAGER, "Only managers can approve reservations")
        payload = validate_input(BulkApprovalInput, data)

        decision = ApprovalStatus(payload.status)
        updated = await self._deps.reservations.bulk_update_approval(
            payload.ids,
            approval_status=decision,
            approved_by_id=user.id,
            approved_at=datetime.now(timezone.utc),
            comment=payload.comment,
        )
        logger.info(
            f"Bulk {decision.value.lower()}: {len(updated)} of {len(payload.ids)} reservations updated by {user.id}"
        )

        for reservation in updated:
            await self._deps.events.emit(_DECISION_EVENTS[decision], {"reservation": reservation, "user_id": user.id})
        return {"count": len(updated)}
