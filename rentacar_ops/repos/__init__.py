"""Persistence layer: repository protocols and their SQL implementations."""

from .interfaces import (
    DuplicateKeyError,
    ImportHistoryRepository,
    MasterDataRepository,
    PaymentRepository,
    ReservationRepository,
    VehicleRepository,
)
from .sql import (
    SqlRepoBundle,
    build_sql_repos,
    create_all,
    create_engine,
    create_sessionmaker,
)

__all__ = [
    "DuplicateKeyError",
    "ImportHistoryRepository",
    "MasterDataRepository",
    "PaymentRepository",
    "ReservationRepository",
    "SqlRepoBundle",
    "VehicleRepository",
    "build_sql_repos",
    "create_all",
    "create_engine",
    "create_sessionmaker",
]
