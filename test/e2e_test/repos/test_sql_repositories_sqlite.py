"""End-to-end tests for the SQL repository implementations on SQLite.

Each test runs against a fresh in-memory database created through the same
``create_engine`` / ``create_all`` / ``build_sql_repos`` path the application
uses.
"""

from datetime import datetime, timezone

import pytest

from rentacar_ops.core.models.domain import (
    ApprovalStatus,
    ImportHistory,
    ImportStatus,
    ImportTarget,
    PaymentCategory,
    PaymentStatus,
    Reservation,
    ReservationStatus,
    Vehicle,
    VehicleStatus,
)
from rentacar_ops.repos import DuplicateKeyError, SqlRepoBundle, create_engine


def _reservation(code: str, **overrides) -> Reservation:
    data = {
        "reservation_code": code,
        "vehicle_class_id": "class-compact",
        "customer_name": "山田 太郎",
        "customer_name_kana": "ヤマダ タロウ",
        "customer_phone": "090-1234-5678",
        "pickup_date": datetime(2025, 4, 1, 10, 0),
        "return_date": datetime(2025, 4, 3, 10, 0),
        "pickup_office_id": "office-1",
        "return_office_id": "office-1",
    }
    data.update(overrides)
    return Reservation(**data)


class TestCreateEngine:
    def test_postgres_urls_use_asyncpg(self):
        engine = create_engine("postgres://user:pw@localhost:5432/rentacar")

        assert engine.url.drivername == "postgresql+asyncpg"

    def test_sqlite_url_is_untouched(self):
        engine = create_engine("sqlite+aiosqlite:///:memory:")

        assert engine.url.drivername == "sqlite+aiosqlite"


class TestReservationRepository:
    """Test suite for SqlReservationRepository."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, repos: SqlRepoBundle) -> None:
        reservation = _reservation("RS-00001", customer_email="taro@example.com", entity_type=1)

        await repos.reservations.create(reservation)
        loaded = await repos.reservations.get(reservation.id)

        assert loaded is not None
        assert loaded.reservation_code == "RS-00001"
        assert loaded.status == ReservationStatus.RESERVED
        assert loaded.approval_status == ApprovalStatus.PENDING
        assert loaded.pickup_date == datetime(2025, 4, 1, 10, 0)
        assert loaded.customer_email == "taro@example.com"
        assert await repos.reservations.get("missing") is None

    @pytest.mark.asyncio
    async def test_duplicate_code(self, repos: SqlRepoBundle) -> None:
        await repos.reservations.create(_reservation("RS-00001"))

        with pytest.raises(DuplicateKeyError):
            await repos.reservations.create(_reservation("RS-00001"))

    @pytest.mark.asyncio
    async def test_latest_code(self, repos: SqlRepoBundle) -> None:
        assert await repos.reservations.latest_code() is None

        for code in ("RS-00002", "RS-00010", "RS-00009"):
            await repos.reservations.create(_reservation(code))

        assert await repos.reservations.latest_code() == "RS-00010"

    @pytest.mark.asyncio
    async def test_list_filters_and_counts(self, repos: SqlRepoBundle) -> None:
        await repos.reservations.create(_reservation("RS-00001"))
        await repos.reservations.create(_reservation("RS-00002", status=ReservationStatus.CANCELLED))
        await repos.reservations.create(_reservation("RS-00003", approval_status=ApprovalStatus.APPROVED))

        rows, total = await repos.reservations.list(status=ReservationStatus.RESERVED)
        assert total == 2
        assert {r.reservation_code for r in rows} == {"RS-00001", "RS-00003"}

        rows, total = await repos.reservations.list(approval_status=ApprovalStatus.PENDING, limit=1)
        assert total == 2
        assert len(rows) == 1

        rows, total = await repos.reservations.list(limit=10, offset=2)
        assert total == 3
        assert len(rows) == 1

    @pytest.mark.asyncio
    async def test_find_overlapping(self, repos: SqlRepoBundle) -> None:
        booked = _reservation(
            "RS-00001",
            vehicle_id="veh-1",
            status=ReservationStatus.CONFIRMED,
            pickup_date=datetime(2025, 4, 1, 10, 0),
            return_date=datetime(2025, 4, 3, 10, 0),
        )
        await repos.reservations.create(booked)
        active = [ReservationStatus.RESERVED, ReservationStatus.CONFIRMED, ReservationStatus.DEPARTED]

        overlapping = await repos.reservations.find_overlapping(
            vehicle_id="veh-1",
            pickup_date=datetime(2025, 4, 3, 9, 0),
            return_date=datetime(2025, 4, 4, 9, 0),
            statuses=active,
        )
        touching = await repos.reservations.find_overlapping(
            vehicle_id="veh-1",
            pickup_date=datetime(2025, 4, 3, 10, 0),
            return_date=datetime(2025, 4, 4, 10, 0),
            statuses=active,
        )
        itself = await repos.reservations.find_overlapping(
            vehicle_id="veh-1",
            pickup_date=booked.pickup_date,
            return_date=booked.return_date,
            statuses=active,
            exclude_id=booked.id,
        )

        assert overlapping is not None and overlapping.reservation_code == "RS-00001"
        assert touching is None
        assert itself is None

    @pytest.mark.asyncio
    async def test_save_with_vehicle_updates_both(self, repos: SqlRepoBundle) -> None:
        await repos.vehicles.create(Vehicle(id="veh-1", vehicle_class_id="class-compact", plate_number="P-1"))
        reservation = _reservation("RS-00001", vehicle_id="veh-1", status=ReservationStatus.CONFIRMED)
        await repos.reservations.create(reservation)

        departed = reservation.model_copy(update={"status": ReservationStatus.DEPARTED, "departure_odometer": 1234})
        await repos.reservations.save_with_vehicle(
            departed, vehicle_id="veh-1", vehicle_status=VehicleStatus.RENTED, mileage=1234
        )

        assert (await repos.reservations.get(reservation.id)).status == ReservationStatus.DEPARTED
        vehicle = await repos.vehicles.get("veh-1")
        assert vehicle.status == VehicleStatus.RENTED
        assert vehicle.mileage == 1234

    @pytest.mark.asyncio
    async def test_save_with_payment_numbers_payments(self, repos: SqlRepoBundle) -> None:
        first = _reservation("RS-00001", status=ReservationStatus.SETTLED)
        second = _reservation("RS-00002", status=ReservationStatus.SETTLED)
        await repos.reservations.create(first)
        await repos.reservations.create(second)
        now = datetime.now(timezone.utc)

        payment_1 = await repos.reservations.save_with_payment(
            first, amount=1000, payment_category=PaymentCategory.CASH, payer_name="A", payment_date=now
        )
        payment_2 = await repos.reservations.save_with_payment(
            second, amount=2000, payment_category=PaymentCategory.CREDIT_CARD, payer_name="B", payment_date=now
        )

        assert (payment_1.payment_number, payment_2.payment_number) == ("PM-00001", "PM-00002")
        stored = await repos.payments.get_by_number("PM-00002")
        assert stored.amount == 2000
        assert stored.payment_category == PaymentCategory.CREDIT_CARD
        assert stored.status == PaymentStatus.UNALLOCATED
        assert stored.reservation_id == second.id
        assert [p.payment_number for p in await repos.payments.list(reservation_id=first.id)] == ["PM-00001"]

    @pytest.mark.asyncio
    async def test_bulk_update_only_touches_pending(self, repos: SqlRepoBundle) -> None:
        pending = _reservation("RS-00001")
        decided = _reservation("RS-00002", approval_status=ApprovalStatus.REJECTED)
        await repos.reservations.create(pending)
        await repos.reservations.create(decided)

        updated = await repos.reservations.bulk_update_approval(
            [pending.id, decided.id, "missing"],
            approval_status=ApprovalStatus.APPROVED,
            approved_by_id="manager-1",
            approved_at=datetime.now(timezone.utc),
            comment="ok",
        )

        assert [r.id for r in updated] == [pending.id]
        assert (await repos.reservations.get(pending.id)).approved_by_id == "manager-1"
        assert (await repos.reservations.get(decided.id)).approval_status == ApprovalStatus.REJECTED
        assert await repos.reservations.count_by_approval(ApprovalStatus.PENDING) == 0


class TestVehicleRepository:
    @pytest.mark.asyncio
    async def test_list_by_class(self, repos: SqlRepoBundle) -> None:
        await repos.vehicles.create(Vehicle(id="v1", vehicle_class_id="class-compact", plate_number="P-2"))
        await repos.vehicles.create(Vehicle(id="v2", vehicle_class_id="class-van", plate_number="P-1"))

        assert [v.id for v in await repos.vehicles.list()] == ["v2", "v1"]
        assert [v.id for v in await repos.vehicles.list("class-compact")] == ["v1"]

    @pytest.mark.asyncio
    async def test_duplicate_plate(self, repos: SqlRepoBundle) -> None:
        await repos.vehicles.create(Vehicle(vehicle_class_id="class-compact", plate_number="P-1"))

        with pytest.raises(DuplicateKeyError):
            await repos.vehicles.create(Vehicle(vehicle_class_id="class-compact", plate_number="P-1"))


class TestMasterDataRepository:
    @pytest.mark.asyncio
    async def test_insert_skips_existing_and_in_batch_duplicates(self, repos: SqlRepoBundle) -> None:
        first = await repos.master_data.insert_many(
            ImportTarget.daily_report_dealer,
            [{"company_code": "D1", "company_name": "One"}, {"company_code": "D1", "company_name": "Again"}],
        )
        second = await repos.master_data.insert_many(
            ImportTarget.daily_report_dealer,
            [{"company_code": "D1", "company_name": "One"}, {"company_code": "D2", "company_name": "Two"}],
        )

        assert (first, second) == (1, 1)
        assert await repos.master_data.count(ImportTarget.daily_report_dealer) == 2

    @pytest.mark.asyncio
    async def test_empty_batch(self, repos: SqlRepoBundle) -> None:
        assert await repos.master_data.insert_many(ImportTarget.company, []) == 0

    @pytest.mark.asyncio
    async def test_non_master_target_is_rejected(self, repos: SqlRepoBundle) -> None:
        with pytest.raises(ValueError):
            await repos.master_data.insert_many(ImportTarget.sales_target, [{"x": "1"}])


class TestImportHistoryRepository:
    @pytest.mark.asyncio
    async def test_newest_first_with_error_log(self, repos: SqlRepoBundle) -> None:
        older = ImportHistory(
            target=ImportTarget.company,
            file_name="old.csv",
            status=ImportStatus.SUCCESS,
            imported_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
        )
        newer = ImportHistory(
            target=ImportTarget.customer,
            file_name="new.xlsx",
            sheet_name="顧客",
            record_count=3,
            status=ImportStatus.PARTIAL,
            error_log=[{"row": 4, "message": "bad row"}],
            imported_at=datetime(2025, 2, 1, tzinfo=timezone.utc),
        )
        await repos.import_histories.create(older)
        await repos.import_histories.create(newer)

        histories = await repos.import_histories.list()

        assert [h.file_name for h in histories] == ["new.xlsx", "old.csv"]
        assert histories[0].target == ImportTarget.customer
        assert histories[0].error_log == [{"row": 4, "message": "bad row"}]
        assert histories[1].error_log is None
        assert len(await repos.import_histories.list(limit=1)) == 1
