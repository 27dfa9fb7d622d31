"""
Ports (Interfaces) of the Tickets domain.

Contracts the infrastructure adapters implement:
- TicketRepository: persistence and filtered lookup of tickets
- TicketClassifier: derives category and mood from a ticket's text

Principle:
    The core defines interfaces, adapters implement them.
    Dependencies always point towards the core.

Example:
    class DjangoTicketRepository:
        def save(self, ticket: TicketEntity) -> None:
            TicketMapper.save_aggregate(ticket)
"""

import copy
from dataclasses import dataclass
from typing import List, Optional, Protocol, runtime_checkable

from src.core.shared.pagination import Page, PageRequest

from .dtos import ClassificationDTO
from .entities import (
    TicketCategory,
    TicketEntity,
    TicketMood,
    TicketPriority,
    TicketStatus,
)


@dataclass(frozen=True)
class TicketCriteria:
    """
    Already parsed filters plus the role scope of the actor.

    Attributes:
        status / category / priority / mood: Exact matches
        search: Case-insensitive substring of title or description
        requester_id: Scope of an employee (own tickets only)
        queue: Scope of a department role (HR/IT)
    """

    status: Optional[TicketStatus] = None
    category: Optional[TicketCategory] = None
    priority: Optional[TicketPriority] = None
    mood: Optional[TicketMood] = None
    search: Optional[str] = None
    requester_id: Optional[str] = None
    queue: Optional[TicketCategory] = None

    def matches(self, ticket: TicketEntity) -> bool:
        if self.status and ticket.status != self.status:
            return False
        if self.category and ticket.category != self.category:
            return False
        if self.queue and ticket.category != self.queue:
            return False
        if self.priority and ticket.priority != self.priority:
            return False
        if self.mood and ticket.mood != self.mood:
            return False
        if self.requester_id and not ticket.is_requested_by(self.requester_id):
            return False
        if self.search:
            needle = self.search.lower()
            if needle not in ticket.title.lower() and needle not in ticket.description.lower():
                return False
        return True


@runtime_checkable
class TicketRepository(Protocol):
    """
    Persistence of Tickets.

    The ticket is saved and loaded as a whole aggregate (comments,
    histories and attachments included).

    Implementations:
    - DjangoTicketRepository (ORM)
    - InMemoryTicketRepository (tests)
    """

    def save(self, ticket: TicketEntity) -> None:
        """
        Persist the ticket (create or update).

        Child collections are append-only: only entries not yet stored
        are inserted.
        """
        ...

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        ...

    def delete(self, ticket_id: str) -> None:
        ...

    def list_all(self) -> List[TicketEntity]:
        """
        Every ticket.

        Prefer find()/list_matching() outside of small datasets.
        """
        ...

    def find(self, criteria: TicketCriteria, page_request: PageRequest) -> Page[TicketEntity]:
        """
        Tickets matching the criteria, newest first, one page.
        """
        ...

    def list_matching(self, criteria: TicketCriteria) -> List[TicketEntity]:
        """Every ticket matching the criteria, newest first."""
        ...

    def count(self) -> int:
        ...


class TicketClassifier(Protocol):
    """
    Derives category and mood from a ticket's text.

    Implementations never raise for provider problems: they fall
    back to keyword rules.
    """

    def classify(self, title: str, description: str) -> ClassificationDTO:
        ...


class InMemoryTicketRepository:
    """
    In-memory TicketRepository.

    Stores and hands out copies, so an aggregate changed but never
    saved leaves the repository untouched (like a database would).

    Useful for unit tests and prototyping. Not for production!

    Example:
        repo = InMemoryTicketRepository()
        repo.save(ticket)
        found = repo.get_by_id(ticket.id)
    """

    def __init__(self):
        self._tickets: dict[str, TicketEntity] = {}

    def save(self, ticket: TicketEntity) -> None:
        self._tickets[ticket.id] = copy.deepcopy(ticket)

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        ticket = self._tickets.get(ticket_id)
        return copy.deepcopy(ticket) if ticket else None

    def delete(self, ticket_id: str) -> None:
        if ticket_id in self._tickets:
            del self._tickets[ticket_id]

    def list_all(self) -> List[TicketEntity]:
        return [copy.deepcopy(t) for t in self._tickets.values()]

    def list_matching(self, criteria: TicketCriteria) -> List[TicketEntity]:
        tickets = [copy.deepcopy(t) for t in self._tickets.values() if criteria.matches(t)]
        tickets.sort(key=lambda t: t.created_at, reverse=True)
        return tickets

    def find(self, criteria: TicketCriteria, page_request: PageRequest) -> Page[TicketEntity]:
        return Page.slice(self.list_matching(criteria), page_request)

    def count(self) -> int:
        return len(self._tickets)

    def clear(self) -> None:
        """Drop everything (handy in tests)."""
        self._tickets.clear()
