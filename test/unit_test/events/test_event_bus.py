"""Unit tests for the in-process domain event bus."""

import logging
from types import SimpleNamespace

import pytest

from rentacar_ops.core.models.domain import DomainEventType
from rentacar_ops.events import EventBus, audit_log_handler, register_default_handlers


class TestEventBus:
    @pytest.mark.asyncio
    async def test_emit_calls_registered_handlers(self):
        bus = EventBus()
        received = []

        async def handler(event_type, payload):
            received.append((event_type, payload["user_id"]))

        bus.on(DomainEventType.reservation_created, handler)
        await bus.emit(DomainEventType.reservation_created, {"user_id": "u-1"})
        await bus.emit(DomainEventType.reservation_cancelled, {"user_id": "u-2"})

        assert received == [(DomainEventType.reservation_created, "u-1")]

    @pytest.mark.asyncio
    async def test_event_type_accepts_string_value(self):
        bus = EventBus()
        received = []

        async def handler(event_type, payload):
            received.append(event_type)

        bus.on("reservation.noShow", handler)
        await bus.emit(DomainEventType.reservation_no_show, {})

        assert received == [DomainEventType.reservation_no_show]

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_stop_others(self, caplog):
        bus = EventBus()
        received = []

        async def broken(event_type, payload):
            raise RuntimeError("mailer down")

        async def working(event_type, payload):
            received.append(event_type)

        bus.on(DomainEventType.payment_created, broken)
        bus.on(DomainEventType.payment_created, working)

        with caplog.at_level(logging.ERROR, logger="rentacar_ops.events.event_bus"):
            await bus.emit(DomainEventType.payment_created, {})

        assert received == [DomainEventType.payment_created]
        assert "mailer down" in caplog.text

    @pytest.mark.asyncio
    async def test_emit_without_handlers_is_a_no_op(self):
        await EventBus().emit(DomainEventType.import_completed, {})

    def test_off_removes_handler(self):
        bus = EventBus()

        async def handler(event_type, payload):
            return None

        bus.on(DomainEventType.reservation_updated, handler)
        bus.off(DomainEventType.reservation_updated, handler)

        assert bus.handlers(DomainEventType.reservation_updated) == []


class TestDefaultHandlers:
    def test_registration_is_idempotent(self):
        bus = EventBus()

        register_default_handlers(bus)
        register_default_handlers(bus)

        for event_type in DomainEventType:
            assert bus.handlers(event_type) == [audit_log_handler]

    @pytest.mark.asyncio
    async def test_audit_line_names_subject_and_user(self, caplog):
        reservation = SimpleNamespace(reservation_code="RS-00007")

        with caplog.at_level(logging.INFO, logger="rentacar_ops.events.handlers"):
            await audit_log_handler(DomainEventType.reservation_settled, {"reservation": reservation, "user_id": "u-9"})

        assert "[audit] reservation.settled subject=RS-00007 user=u-9" in caplog.text

    @pytest.mark.asyncio
    async def test_audit_line_without_subject(self, caplog):
        with caplog.at_level(logging.INFO, logger="rentacar_ops.events.handlers"):
            await audit_log_handler(DomainEventType.import_completed, {})

        assert "subject=- user=-" in caplog.text
