from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, List, Tuple

import pytest

from rentacar_ops.approvals import ApprovalService, ApprovalServiceDeps
from rentacar_ops.core.config import ImportConfig
from rentacar_ops.core.models.domain import CurrentUser, DomainEventType, UserRole, Vehicle
from rentacar_ops.events import EventBus, EventPayload
from rentacar_ops.importing import ImportService, ImportServiceDeps
from rentacar_ops.repos import SqlRepoBundle, build_sql_repos, create_all, create_engine, create_sessionmaker
from rentacar_ops.reservations import ReservationService, ReservationServiceDeps

COMPACT_CLASS = "class-compact"
VAN_CLASS = "class-van"


class RecordingEventBus(EventBus):
    """Event bus that remembers every emitted event."""

    def __init__(self) -> None:
        super().__init__()
        self.emitted: List[Tuple[DomainEventType, EventPayload]] = []

    async def emit(self, event_type: DomainEventType, payload: EventPayload) -> None:
        self.emitted.append((DomainEventType(event_type), payload))
        await super().emit(event_type, payload)

    def types(self) -> List[DomainEventType]:
        return [event_type for event_type, _ in self.emitted]


class SwitchableUser:
    """User provider whose acting user can be swapped inside a test."""

    def __init__(self) -> None:
        self.user = self.as_role(UserRole.ADMIN)

    @staticmethod
    def as_role(role: UserRole) -> CurrentUser:
        return CurrentUser(
            id=f"user-{role.value.lower()}",
            email=f"{role.value.lower()}@example.com",
            name=f"{role.value.title()} User",
            role=role,
        )

    def switch(self, role: UserRole) -> None:
        self.user = self.as_role(role)

    async def __call__(self) -> CurrentUser:
        return self.user


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine("sqlite+aiosqlite:///:memory:")
    await create_all(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def repos(db_engine) -> SqlRepoBundle:
    """Create repository bundle with in-memory database."""
    session_factory = create_sessionmaker(db_engine)
    return build_sql_repos(session_factory=session_factory)


@pytest.fixture
def events() -> RecordingEventBus:
    return RecordingEventBus()


@pytest.fixture
def acting_user() -> SwitchableUser:
    return SwitchableUser()


@pytest.fixture
def reservation_service(repos: SqlRepoBundle, events: RecordingEventBus, acting_user: SwitchableUser):
    return ReservationService(
        deps=ReservationServiceDeps(
            reservations=repos.reservations,
            vehicles=repos.vehicles,
            events=events,
            user_provider=acting_user,
        )
    )


@pytest.fixture
def approval_service(
    repos: SqlRepoBundle,
    reservation_service: ReservationService,
    events: RecordingEventBus,
    acting_user: SwitchableUser,
):
    return ApprovalService(
        deps=ApprovalServiceDeps(
            reservations=repos.reservations,
            reservation_service=reservation_service,
            events=events,
            user_provider=acting_user,
        )
    )


@pytest.fixture
def import_config() -> ImportConfig:
    return ImportConfig()


@pytest.fixture
def import_service(
    repos: SqlRepoBundle, events: RecordingEventBus, acting_user: SwitchableUser, import_config: ImportConfig
):
    return ImportService(
        deps=ImportServiceDeps(
            master_data=repos.master_data,
            import_histories=repos.import_histories,
            config=import_config,
            events=events,
            user_provider=acting_user,
        )
    )


@pytest.fixture
async def vehicles(repos: SqlRepoBundle) -> Dict[str, Vehicle]:
    """Two compact cars and one van, all in stock."""
    fleet = {
        "compact-1": Vehicle(id="veh-c1", vehicle_class_id=COMPACT_CLASS, plate_number="品川 500 あ 11-11", mileage=12000),
        "compact-2": Vehicle(id="veh-c2", vehicle_class_id=COMPACT_CLASS, plate_number="品川 500 あ 22-22", mileage=8000),
        "van-1": Vehicle(id="veh-v1", vehicle_class_id=VAN_CLASS, plate_number="品川 300 さ 33-33", mileage=30000),
    }
    for vehicle in fleet.values():
        await repos.vehicles.create(vehicle)
    return fleet


@pytest.fixture
def reservation_input() -> Callable[..., Dict[str, Any]]:
    """Factory for valid reservation input mappings; keyword overrides win."""

    def _build(**overrides: Any) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "vehicle_class_id": COMPACT_CLASS,
            "customer_name": "山田 太郎",
            "customer_name_kana": "ヤマダ タロウ",
            "customer_phone": "090-1234-5678",
            "customer_email": "taro@example.com",
            "pickup_date": datetime(2025, 4, 1, 10, 0),
            "return_date": datetime(2025, 4, 3, 10, 0),
            "pickup_office_id": "office-shinagawa",
            "return_office_id": "office-shinagawa",
            "estimated_amount": 15000,
            "entity_type": 1,
        }
        data.update(overrides)
        return data

    return _build
