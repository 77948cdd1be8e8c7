"""
Application wiring.

``create_app`` is the composition root: it configures logging, opens the
database, creates the tables, registers the default event handlers and builds
the services over the SQL repositories. ``lifespan`` wraps it for callers that
want the engine disposed on exit.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from .approvals import ApprovalService, ApprovalServiceDeps
from .auth import UserProvider, get_current_user
from .core.config import settings
from .core.logging_config import get_logger, setup_logging
from .events import EventBus, event_bus, register_default_handlers
from .importing import ImportService, ImportServiceDeps
from .repos import SqlRepoBundle, build_sql_repos, create_all, create_engine, create_sessionmaker
from .reservations import ReservationService, ReservationServiceDeps

logger = get_logger(__name__)


@dataclass(frozen=True)
class RentacarApp:
    """The wired services and the resources they share."""

    engine: AsyncEngine
    repos: SqlRepoBundle
    events: EventBus
    reservations: ReservationService
    approvals: ApprovalService
    imports: ImportService

    async def close(self) -> None:
        await self.engine.dispose()


async def create_app(
    database_url: Optional[str] = None,
    *,
    user_provider: UserProvider = get_current_user,
    events: Optional[EventBus] = None,
    create_tables: bool = True,
    configure_logging: bool = True,
) -> RentacarApp:
    """
    Build the application.

    Args:
        database_url: Async SQLAlchemy URL; ``DATABASE_URL`` from settings when omitted.
        user_provider: Source of the acting user for every service call.
        events: Event bus to publish on; the module-level bus when omitted.
        create_tables: Create missing tables on startup.
        configure_logging: Install the root logging handlers.
    """
    if configure_logging:
        setup_logging()

    url = database_url or settings.database_url
    engine = create_engine(url)
    if create_tables:
        await create_all(engine)
    repos = build_sql_repos(session_factory=create_sessionmaker(engine))

    bus = events if events is not None else event_bus
    register_default_handlers(bus)

    reservations = ReservationService(
        deps=ReservationServiceDeps(
            reservations=repos.reservations,
            vehicles=repos.vehicles,
            events=bus,
            user_provider=user_provider,
        )
    )
    approvals = ApprovalService(
        deps=ApprovalServiceDeps(
            reservations=repos.reservations,
            reservation_service=reservations,
            events=bus,
            user_provider=user_provider,
        )
    )
    imports = ImportService(
        deps=ImportServiceDeps(
            master_data=repos.master_data,
            import_histories=repos.import_histories,
            config=settings.import_,
            events=bus,
            user_provider=user_provider,
        )
    )
    logger.info(f"Rental operations services ready (database={engine.url.render_as_string(hide_password=True)})")
    return RentacarApp(
        engine=engine,
        repos=repos,
        events=bus,
        reservations=reservations,
        approvals=approvals,
        imports=imports,
    )


@asynccontextmanager
async def lifespan(database_url: Optional[str] = None, **kwargs) -> AsyncIterator[RentacarApp]:
    """Yield a built application and dispose its engine afterwards."""
    app = await create_app(database_url, **kwargs)
    try:
        yield app
    finally:
        logger.info("Shutting down rental operations services")
        await app.close()
