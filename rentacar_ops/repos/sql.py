from __future__ import annotations

"""SQLAlchemy async repository implementations.

This module provides the SQL persistence implementation for the repository
interfaces defined in ``rentacar_ops.repos.interfaces``. It runs on Postgres
(asyncpg) in production and on SQLite (aiosqlite) for local use and tests.

Usage
-----

Typical wiring (tests or application setup):

- Create an async engine with ``create_engine``.
- Create tables with ``create_all``.
- Create a session factory with ``create_sessionmaker``.
- Build repository instances with ``build_sql_repos``.

Transaction model
-----------------

Each repository method opens an ``AsyncSession``, performs its operation, and
commits. Methods that touch several records (reservation plus vehicle,
reservation plus payment, a bulk approval) do so within that single session,
so either every change is durable when the method returns or none is.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ..core.codes import PAYMENT_NUMBER_PREFIX, next_sequence_code
from ..core.logging_config import get_logger
from ..core.models.base import BaseSchema
from ..core.models.domain import (
    ApprovalStatus,
    ImportHistory,
    ImportTarget,
    Payment,
    PaymentCategory,
    PaymentStatus,
    Reservation,
    ReservationStatus,
    Vehicle,
    VehicleStatus,
)
from .interfaces import (
    DuplicateKeyError,
    ImportHistoryRepository,
    MasterDataRepository,
    PaymentRepository,
    ReservationRepository,
    VehicleRepository,
)
from .models import (
    Base,
    CompanyRow,
    CustomerRow,
    DailyReportDealerRow,
    ImportHistoryRow,
    PaymentRow,
    ReservationRow,
    VehicleRow,
)

logger = get_logger(__name__)


def create_engine(db_url: str) -> AsyncEngine:
    """Create an async SQLAlchemy engine.

    The helper normalizes Postgres URLs to ensure the async driver is used.
    For example, it rewrites ``postgresql://`` and other variants to
    ``postgresql+asyncpg://``. Other URLs (``sqlite+aiosqlite://...``) are
    passed through unchanged.
    """
    url = re.sub(r"^postgres(?:ql)?(?:\+[a-z0-9_]+)?://", "postgresql+asyncpg://", db_url, count=1)
    return create_async_engine(url, pool_pre_ping=True)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an ``async_sessionmaker`` with safe defaults for this project."""
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_all(engine: AsyncEngine) -> None:
    """Create all tables for the current ORM metadata.

    This is mainly intended for tests and local development.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def _column_values(model: BaseSchema) -> Dict[str, Any]:
    # Enum members are stored by value.
    return {
        key: value.value if isinstance(value, Enum) else value for key, value in model.model_dump().items()
    }


def _apply(row: Any, model: BaseSchema) -> None:
    for key, value in _column_values(model).items():
        if key != "id":
            setattr(row, key, value)


def _to_reservation(row: ReservationRow) -> Reservation:
    return Reservation.model_validate(row, from_attributes=True)


@dataclass(frozen=True)
class SqlReservationRepository(ReservationRepository):
    """SQL implementation of ``ReservationRepository``."""

    session_factory: async_sessionmaker[AsyncSession]

    async def create(self, reservation: Reservation) -> None:
        """
        Persist a new reservation record.

        Args:
            reservation: The reservation domain object to insert.

        Raises:
            DuplicateKeyError: The reservation code is already in use.
        """
        async with self.session_factory() as s:
            s.add(ReservationRow(**_column_values(reservation)))
            try:
                await s.commit()
            except IntegrityError as exc:
                await s.rollback()
                raise DuplicateKeyError(f"reservation_code {reservation.reservation_code} already exists") from exc

    async def get(self, reservation_id: str) -> Optional[Reservation]:
        """
        Retrieve a reservation by its ID.

        Returns:
            The Reservation if found, otherwise None.
        """
        async with self.session_factory() as s:
            row = await s.get(ReservationRow, reservation_id)
            if row is None:
                return None
            return _to_reservation(row)

    async def list(
        self,
        *,
        status: Optional[ReservationStatus] = None,
        approval_status: Optional[ApprovalStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Reservation], int]:
        """
        List reservations, newest first, with the total matching count.

        Args:
            status: Optional lifecycle status filter.
            approval_status: Optional approval status filter.
            limit: Max number of records to return.
            offset: Pagination offset.
        """
        async with self.session_factory() as s:
            stmt = select(ReservationRow)
            if status is not None:
                stmt = stmt.where(ReservationRow.status == ReservationStatus(status).value)
            if approval_status is not None:
                stmt = stmt.where(ReservationRow.approval_status == ApprovalStatus(approval_status).value)

            total = (await s.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one()

            page = stmt.order_by(ReservationRow.created_at.desc(), ReservationRow.reservation_code.desc())
            result = await s.execute(page.offset(offset).limit(limit))
            return [_to_reservation(row) for row in result.scalars().all()], total

    async def save(self, reservation: Reservation) -> None:
        async with self.session_factory() as s:
            row = await s.get(ReservationRow, reservation.id)
            if row is None:
                return
            _apply(row, reservation)
            await s.commit()

    async def save_with_vehicle(
        self, reservation: Reservation, *, vehicle_id: str, vehicle_status: VehicleStatus, mileage: int
    ) -> None:
        """
        Save the reservation and update its vehicle's status and mileage.

        Both writes are committed together.
        """
        async with self.session_factory() as s:
            row = await s.get(ReservationRow, reservation.id)
            if row is None:
                return
            _apply(row, reservation)
            vehicle = await s.get(VehicleRow, vehicle_id)
            if vehicle is not None:
                vehicle.status = VehicleStatus(vehicle_status).value
                vehicle.mileage = mileage
            await s.commit()

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
        Save the settled reservation and record its payment.

        The payment number follows the highest existing one (``PM-00001`` first)
        and is allocated in the same transaction as the inserts.

        Returns:
            The created Payment.
        """
        async with self.session_factory() as s:
            row = await s.get(ReservationRow, reservation.id)
            if row is None:
                raise LookupError(f"reservation {reservation.id} does not exist")
            _apply(row, reservation)

            latest = (await s.execute(select(func.max(PaymentRow.payment_number)))).scalar_one_or_none()
            payment = Payment(
                payment_number=next_sequence_code(PAYMENT_NUMBER_PREFIX, latest),
                payment_date=payment_date,
                amount=amount,
                payment_category=payment_category,
                payer_name=payer_name,
                status=PaymentStatus.UNALLOCATED,
                reservation_id=reservation.id,
            )
            s.add(PaymentRow(**_column_values(payment)))
            try:
                await s.commit()
            except IntegrityError as exc:
                await s.rollback()
                raise DuplicateKeyError(f"payment_number {payment.payment_number} already exists") from exc
            return payment

    async def latest_code(self) -> Optional[str]:
        async with self.session_factory() as s:
            return (await s.execute(select(func.max(ReservationRow.reservation_code)))).scalar_one_or_none()

    async def find_overlapping(
        self,
        *,
        vehicle_id: str,
        pickup_date: datetime,
        return_date: datetime,
        statuses: Sequence[ReservationStatus],
        exclude_id: Optional[str] = None,
    ) -> Optional[Reservation]:
        async with self.session_factory() as s:
            stmt = select(ReservationRow).where(
                ReservationRow.vehicle_id == vehicle_id,
                ReservationRow.status.in_([ReservationStatus(st).value for st in statuses]),
                ReservationRow.pickup_date < return_date,
                ReservationRow.return_date > pickup_date,
            )
            if exclude_id is not None:
                stmt = stmt.where(ReservationRow.id != exclude_id)
            stmt = stmt.order_by(ReservationRow.pickup_date.asc()).limit(1)
            row = (await s.execute(stmt)).scalars().first()
            return _to_reservation(row) if row is not None else None

    async def count_by_approval(self, approval_status: ApprovalStatus) -> int:
        async with self.session_factory() as s:
            stmt = select(func.count(ReservationRow.id)).where(
                ReservationRow.approval_status == ApprovalStatus(approval_status).value
            )
            return (await s.execute(stmt)).scalar_one()

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
        Decide every listed reservation still awaiting approval.

        Rows already approved or rejected are left untouched.

        Returns:
            The reservations that were updated, in their new state.
        """
        if not ids:
            return []
        async with self.session_factory() as s:
            stmt = select(ReservationRow).where(
                ReservationRow.id.in_(list(ids)),
                ReservationRow.approval_status == ApprovalStatus.PENDING.value,
            )
            rows = (await s.execute(stmt)).scalars().all()
            for row in rows:
                row.approval_status = ApprovalStatus(approval_status).value
                row.approved_by_id = approved_by_id
                row.approved_at = approved_at
                row.approval_comment = comment
                row.updated_at = approved_at
            await s.commit()
            return [_to_reservation(row) for row in rows]


@dataclass(frozen=True)
class SqlVehicleRepository(VehicleRepository):
    """SQL implementation of ``VehicleRepository``."""

    session_factory: async_sessionmaker[AsyncSession]

    async def create(self, vehicle: Vehicle) -> None:
        async with self.session_factory() as s:
            s.add(VehicleRow(**_column_values(vehicle)))
            try:
                await s.commit()
            except IntegrityError as exc:
                await s.rollback()
                raise DuplicateKeyError(f"plate_number {vehicle.plate_number} already exists") from exc

    async def get(self, vehicle_id: str) -> Optional[Vehicle]:
        async with self.session_factory() as s:
            row = await s.get(VehicleRow, vehicle_id)
            if row is None:
                return None
            return Vehicle.model_validate(row, from_attributes=True)

    async def list(self, vehicle_class_id: Optional[str] = None) -> List[Vehicle]:
        async with self.session_factory() as s:
            stmt = select(VehicleRow)
            if vehicle_class_id:
                stmt = stmt.where(VehicleRow.vehicle_class_id == vehicle_class_id)
            result = await s.execute(stmt.order_by(VehicleRow.plate_number.asc()))
            return [Vehicle.model_validate(row, from_attributes=True) for row in result.scalars().all()]


@dataclass(frozen=True)
class SqlPaymentRepository(PaymentRepository):
    """SQL implementation of ``PaymentRepository``."""

    session_factory: async_sessionmaker[AsyncSession]

    async def get_by_number(self, payment_number: str) -> Optional[Payment]:
        async with self.session_factory() as s:
            stmt = select(PaymentRow).where(PaymentRow.payment_number == payment_number)
            row = (await s.execute(stmt)).scalars().first()
            if row is None:
                return None
            return Payment.model_validate(row, from_attributes=True)

    async def list(self, reservation_id: Optional[str] = None) -> List[Payment]:
        async with self.session_factory() as s:
            stmt = select(PaymentRow)
            if reservation_id:
                stmt = stmt.where(PaymentRow.reservation_id == reservation_id)
            result = await s.execute(stmt.order_by(PaymentRow.payment_number.asc()))
            return [Payment.model_validate(row, from_attributes=True) for row in result.scalars().all()]


# Importable master tables and the business code that identifies a row.
_MASTER_TABLES: Dict[ImportTarget, Tuple[Type[Base], str]] = {
    ImportTarget.company: (CompanyRow, "customer_company_code"),
    ImportTarget.customer: (CustomerRow, "department_customer_code"),
    ImportTarget.daily_report_dealer: (DailyReportDealerRow, "company_code"),
}


@dataclass(frozen=True)
class SqlMasterDataRepository(MasterDataRepository):
    """SQL implementation of ``MasterDataRepository``."""

    session_factory: async_sessionmaker[AsyncSession]

    @staticmethod
    def _table(target: ImportTarget) -> Tuple[Type[Base], str]:
        try:
            return _MASTER_TABLES[ImportTarget(target)]
        except KeyError:
            raise ValueError(f"{target} is not an importable master table") from None

    async def insert_many(self, target: ImportTarget, rows: Sequence[Dict[str, Any]]) -> int:
        """
        Insert mapped rows, skipping those whose business code already exists.

        Args:
            target: The master table to insert into.
            rows: Column/value mappings produced by the import mappers.

        Returns:
            The number of inserted rows.
        """
        row_cls, key = self._table(target)
        if not rows:
            return 0
        async with self.session_factory() as s:
            keys = {row[key] for row in rows}
            column = getattr(row_cls, key)
            existing = set((await s.execute(select(column).where(column.in_(sorted(keys))))).scalars().all())

            fresh: List[Base] = []
            for row in rows:
                if row[key] in existing:
                    continue
                existing.add(row[key])
                fresh.append(row_cls(**row))
            s.add_all(fresh)
            await s.commit()

        skipped = len(rows) - len(fresh)
        if skipped:
            logger.debug(f"Skipped {skipped} duplicate {ImportTarget(target).value} rows")
        return len(fresh)

    async def count(self, target: ImportTarget) -> int:
        row_cls, _ = self._table(target)
        async with self.session_factory() as s:
            return (await s.execute(select(func.count()).select_from(row_cls))).scalar_one()


@dataclass(frozen=True)
class SqlImportHistoryRepository(ImportHistoryRepository):
    """SQL implementation of ``ImportHistoryRepository``."""

    session_factory: async_sessionmaker[AsyncSession]

    async def create(self, history: ImportHistory) -> None:
        async with self.session_factory() as s:
            s.add(ImportHistoryRow(**_column_values(history)))
            await s.commit()

    async def list(self, limit: int = 50) -> List[ImportHistory]:
        async with self.session_factory() as s:
            stmt = select(ImportHistoryRow).order_by(ImportHistoryRow.imported_at.desc()).limit(limit)
            result = await s.execute(stmt)
            return [ImportHistory.model_validate(row, from_attributes=True) for row in result.scalars().all()]


@dataclass(frozen=True)
class SqlRepoBundle:
    """Convenience container holding all SQL repositories."""

    reservations: SqlReservationRepository
    vehicles: SqlVehicleRepository
    payments: SqlPaymentRepository
    master_data: SqlMasterDataRepository
    import_histories: SqlImportHistoryRepository


def build_sql_repos(*, session_factory: async_sessionmaker[AsyncSession]) -> SqlRepoBundle:
    """
    Factory to build a bundle of all SQL repositories.

    Args:
        session_factory: The SQLAlchemy async session factory.

    Returns:
        A SqlRepoBundle containing initialized repositories.
    """
    return SqlRepoBundle(
        reservations=SqlReservationRepository(session_factory),
        vehicles=SqlVehicleRepository(session_factory),
        payments=SqlPaymentRepository(session_factory),
        master_data=SqlMasterDataRepository(session_factory),
        import_histories=SqlImportHistoryRepository(session_factory),
    )
