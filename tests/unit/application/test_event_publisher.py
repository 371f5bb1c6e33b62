"""Unit tests for DomainEventPublisher."""

from uuid import uuid4

import pytest

from bridge.application.events import DomainEventPublisher
from bridge.domain.shared.events import (
    DomainEvent,
    IdentityLinked,
    LocalSessionEnded,
)


class TestDomainEventPublisher:
    def setup_method(self):
        self.publisher = DomainEventPublisher()
        self.received = []

    @pytest.mark.asyncio
    async def test_dispatches_by_event_type(self):
        self.publisher.subscribe(LocalSessionEnded, self.received.append)

        await self.publisher.publish(LocalSessionEnded(local_user_id=uuid4()))
        await self.publisher.publish(
            IdentityLinked(local_user_id=uuid4(), provider_user_id="p1", source="manual"),
        )

        assert [e.name for e in self.received] == ["LocalSessionEnded"]

    @pytest.mark.asyncio
    async def test_base_type_receives_everything(self):
        self.publisher.subscribe(DomainEvent, self.received.append)

        await self.publisher.publish(LocalSessionEnded(local_user_id=uuid4()))

        assert len(self.received) == 1

    @pytest.mark.asyncio
    async def test_async_handlers_are_awaited(self):
        async def handler(event):
            self.received.append(event)

        self.publisher.subscribe(LocalSessionEnded, handler)

        await self.publisher.publish(LocalSessionEnded(local_user_id=uuid4()))

        assert len(self.received) == 1

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_stop_others(self):
        def broken(_event):
            raise RuntimeError("boom")

        self.publisher.subscribe(LocalSessionEnded, broken)
        self.publisher.subscribe(LocalSessionEnded, self.received.append)

        await self.publisher.publish(LocalSessionEnded(local_user_id=uuid4()))

        assert len(self.received) == 1

    def test_event_to_dict(self):
        user_id = uuid4()

        data = LocalSessionEnded(local_user_id=user_id).to_dict()

        assert data["event"] == "LocalSessionEnded"
        assert data["local_user_id"] == str(user_id)
        assert "occurred_at" in data
