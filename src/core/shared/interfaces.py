"""
Interfaces (Ports) - contracts between the core and the adapters.

Driven ports implemented by infrastructure adapters:
- UnitOfWork: transactional boundary that also buffers domain events
- EventPublisher: pushes committed events to consumers
- EventStore: append-only persistence of domain events

The core defines the interfaces; adapters implement them.
Dependencies always point towards the core.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from .events import DomainEvent


class UnitOfWork(ABC):
    """
    Unit of Work - coordinates atomic transactions.

    Several persistence operations run as one unit: either all of
    them are stored or none is.

    Pattern: Context Manager
        with uow:
            repo.save(ticket)
            uow.publish_event(event)
        # commit on clean exit, rollback on exception

    Responsibilities:
    - Begin/end the transaction
    - Coordinated commit/rollback
    - Queue events and publish them only after a successful commit
    """

    def __init__(self):
        self._events: List[DomainEvent] = []

    def __enter__(self) -> "UnitOfWork":
        self._begin_transaction()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is not None:
            self.rollback()
        else:
            self.commit()
        return False

    @abstractmethod
    def _begin_transaction(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def commit(self) -> None:
        """
        Persist every change, then publish queued events.

        Note:
            Events are published only after the commit succeeds.
            If the commit fails they are discarded.
        """
        raise NotImplementedError

    @abstractmethod
    def rollback(self) -> None:
        """Undo every change and discard queued events."""
        raise NotImplementedError

    def publish_event(self, event: DomainEvent) -> None:
        """
        Queue an event for publication after commit.

        Args:
            event: Domain event to publish

        Example:
            with uow:
                repo.save(ticket)
                uow.publish_event(TicketCreatedEvent(aggregate_id=ticket.id))
            # published here, after commit
        """
        self._events.append(event)

    def collect_events(self) -> List[DomainEvent]:
        """Pending events (testing/debugging)."""
        return list(self._events)

    def clear_events(self) -> None:
        self._events.clear()


class EventPublisher(ABC):
    """
    Publishes committed events to consumers.

    Adapters integrate it with a message bus (Celery) or with logs.
    """

    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        raise NotImplementedError

    @abstractmethod
    def publish_batch(self, events: List[DomainEvent]) -> None:
        raise NotImplementedError


class EventStore(ABC):
    """
    Append-only persistence of domain events.

    Keeps the full history for auditing and replay.
    """

    @abstractmethod
    def append(self, event: DomainEvent, sequence: int = 0) -> None:
        """
        Store an event.

        Args:
            event: Event to persist
            sequence: Position of the event within its aggregate
        """
        raise NotImplementedError

    @abstractmethod
    def get_events_for_aggregate(
        self,
        aggregate_id: str,
        since_sequence: int = 0,
    ) -> List[Dict[str, Any]]:
        """
        Events of one aggregate ordered by sequence.

        Args:
            aggregate_id: Aggregate id
            since_sequence: First sequence to return
        """
        raise NotImplementedError

    @abstractmethod
    def last_sequence(self, aggregate_id: str) -> int:
        """Highest stored sequence for the aggregate (0 when none)."""
        raise NotImplementedError
