"""
Unit of Work - Django implementation.

Manages atomic transactions across repositories, keeping data
consistent.

Responsibilities:
- Begin/end transactions
- Coordinated commit/rollback
- Persist events in the Event Store inside the transaction
- Publish events only after a successful commit

ACID guarantees:
- Atomicity: all or nothing
- Consistency: stored events reflect the persisted state
- Isolation: every request has its own transaction
- Durability: provided by the database
"""

from typing import List, Optional
import logging

from django.db import transaction

from src.core.shared.events import DomainEvent
from src.core.shared.interfaces import EventPublisher, EventStore, UnitOfWork

logger = logging.getLogger(__name__)


class DjangoUnitOfWork(UnitOfWork):
    """
    Django implementation of the Unit of Work.

    Wraps django.db.transaction.atomic, so it nests correctly inside an
    outer atomic block (savepoint) such as the one pytest-django opens
    around each test. Events are published only after the block exits
    cleanly.

    Example:
        with DjangoUnitOfWork(publisher, store) as uow:
            repo.save(ticket)
            uow.publish_event(TicketCreatedEvent(...))
        # committed + events published

    Example with rollback:
        with DjangoUnitOfWork() as uow:
            repo.save(ticket)
            uow.publish_event(TicketCreatedEvent(...))
            raise ValidationError("boom")
        # rolled back, events discarded
    """

    def __init__(
        self,
        event_publisher: Optional[EventPublisher] = None,
        event_store: Optional[EventStore] = None,
    ):
        """
        Args:
            event_publisher: Where committed events go (Celery, logging, ...)
            event_store: Append-only persistence of events
        """
        super().__init__()
        self._event_publisher = event_publisher
        self._event_store = event_store
        self._atomic = None
        self._committed = False
        self._rolled_back = False

    def _begin_transaction(self) -> None:
        self._committed = False
        self._rolled_back = False
        self._atomic = transaction.atomic()
        self._atomic.__enter__()
        logger.debug("Transaction started")

    def commit(self) -> None:
        """
        Persist every change, then publish events.

        Order:
        1. Append events to the Event Store (same transaction)
        2. Commit the transaction
        3. Publish events to the publisher

        Raises:
            Exception: If the commit fails (after rolling back)
        """
        if self._committed or self._rolled_back:
            logger.warning("Transaction already finalized")
            return

        try:
            if self._event_store and self._events:
                self._persist_events()
        except Exception as e:
            logger.error(f"Commit failed: {e}")
            self.rollback()
            raise

        atomic, self._atomic = self._atomic, None
        if atomic is not None:
            atomic.__exit__(None, None, None)
            logger.debug("Transaction committed")
        self._committed = True

        if self._events:
            self._publish_events()

    def rollback(self) -> None:
        """Undo every change and discard events."""
        if self._committed or self._rolled_back:
            return

        atomic, self._atomic = self._atomic, None
        try:
            if atomic is not None:
                transaction.set_rollback(True)
                atomic.__exit__(None, None, None)
                logger.debug("Transaction rolled back")
        finally:
            self._rolled_back = True
            self.clear_events()

    def _persist_events(self) -> None:
        sequences = {}
        for event in self._events:
            aggregate_id = event.aggregate_id
            if aggregate_id not in sequences:
                sequences[aggregate_id] = self._event_store.last_sequence(aggregate_id)
            sequences[aggregate_id] += 1
            self._event_store.append(event=event, sequence=sequences[aggregate_id])

    def _publish_events(self) -> None:
        """
        Hand committed events to the publisher.

        A failing publisher is logged and does not undo the commit;
        the events are still in the Event Store.
        """
        for event in self._events:
            logger.info(
                f"Publishing event: {event.event_type} "
                f"for aggregate {event.aggregate_id}"
            )
            if self._event_publisher:
                try:
                    self._event_publisher.publish(event)
                except Exception as e:
                    logger.error(f"Failed to publish event {event.event_id}: {e}")

        self.clear_events()

    @property
    def is_committed(self) -> bool:
        return self._committed

    @property
    def is_rolled_back(self) -> bool:
        return self._rolled_back


class InMemoryUnitOfWork(UnitOfWork):
    """
    In-memory Unit of Work for tests.

    Persists nothing; only records what would have been published.

    Example:
        uow = InMemoryUnitOfWork()
        with uow:
            uow.publish_event(event)

        assert uow.committed
        assert len(uow.published_events) == 1
    """

    def __init__(self):
        super().__init__()
        self._committed = False
        self._rolled_back = False
        self._published_events: List[DomainEvent] = []

    def _begin_transaction(self) -> None:
        pass

    def commit(self) -> None:
        self._committed = True
        self._published_events.extend(self._events)
        self.clear_events()

    def rollback(self) -> None:
        self._rolled_back = True
        self.clear_events()

    @property
    def committed(self) -> bool:
        return self._committed

    @property
    def rolled_back(self) -> bool:
        return self._rolled_back

    @property
    def published_events(self) -> List[DomainEvent]:
        return self._published_events

    def reset(self) -> None:
        self._committed = False
        self._rolled_back = False
        self._published_events.clear()
        self.clear_events()
