"""
Domain Events - decoupled communication between domains.

Base infrastructure for domain events: immutable facts about something
that happened to an aggregate, queued by the Unit of Work and published
only after a successful commit.

Characteristics:
- Auto-generated id and timestamp
- Serializable for persistence and transport
- Traceable through aggregate_id
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict
import uuid

from .clock import utcnow


@dataclass(frozen=False)
class DomainEvent(ABC):
    """
    Abstract base class for domain events.

    Events are named in the past tense (TicketCreated, not CreateTicket)
    and carry the data needed to understand what happened.

    Attributes:
        event_id: Unique event identifier
        aggregate_id: Id of the aggregate that produced the event
        occurred_at: When the event happened
        version: Event schema version

    Example:
        @dataclass
        class TicketCreatedEvent(DomainEvent):
            requester_id: str = ""

            @property
            def aggregate_type(self) -> str:
                return "Ticket"
    """

    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    aggregate_id: str = ""
    occurred_at: datetime = field(default_factory=utcnow)
    version: int = 1

    def __post_init__(self):
        if not self.aggregate_id:
            raise ValueError("aggregate_id is required")

    @property
    @abstractmethod
    def aggregate_type(self) -> str:
        """Name of the aggregate type (e.g. "Ticket", "User")."""
        ...

    @property
    def event_type(self) -> str:
        """Event type name (the class name)."""
        return self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the event.

        Used by the event store, the Celery publisher and structured logs.

        Returns:
            Dictionary with the envelope and the event-specific data
        """
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "aggregate_id": self.aggregate_id,
            "aggregate_type": self.aggregate_type,
            "occurred_at": self.occurred_at.isoformat(),
            "version": self.version,
            "data": self._get_event_data(),
        }

    def _get_event_data(self) -> Dict[str, Any]:
        """Event-specific fields (subclasses may override)."""
        base_fields = {"event_id", "aggregate_id", "occurred_at", "version"}
        return {
            key: value
            for key, value in self.__dict__.items()
            if key not in base_fields and not key.startswith("_")
        }

    def __repr__(self) -> str:
        return (
            f"{self.event_type}("
            f"event_id={self.event_id[:8]}..., "
            f"aggregate_id={self.aggregate_id}, "
            f"occurred_at={self.occurred_at.isoformat()}"
            f")"
        )
