"""
Domain Events of the Tickets domain.

Events:
- TicketCreatedEvent: a ticket was filed
- TicketStatusChangedEvent: the status moved
- TicketCategoryChangedEvent: the ticket changed queue
- TicketPriorityChangedEvent: the priority changed
- TicketAssignedEvent: the assignee changed (or was cleared)
- CommentAddedEvent: someone commented

Usage:
    Events are queued in the UnitOfWork and published only after a
    successful commit.

    with uow:
        ticket = TicketEntity.create(...)
        repo.save(ticket)
        uow.publish_event(TicketCreatedEvent(aggregate_id=ticket.id, ...))
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from src.core.shared.events import DomainEvent


@dataclass
class TicketCreatedEvent(DomainEvent):
    """
    Event: a ticket was created.

    Typical handlers:
    - Confirmation to the requester
    - Notify the department queue

    Attributes:
        ticket_number: Human friendly reference
        requester_id: Employee who filed it
        title: Title of the ticket
        priority: Priority value
        category: Category value
        mood: Classified mood
    """

    ticket_number: str = ""
    requester_id: str = ""
    title: str = ""
    priority: str = ""
    category: str = ""
    mood: str = ""

    def __post_init__(self):
        pass

    @property
    def aggregate_type(self) -> str:
        return "Ticket"

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "ticket_number": self.ticket_number,
            "requester_id": self.requester_id,
            "title": self.title,
            "priority": self.priority,
            "category": self.category,
            "mood": self.mood,
        }


@dataclass
class TicketStatusChangedEvent(DomainEvent):
    """
    Event: the ticket moved to another status.

    Typical handlers:
    - Notify the requester
    - Satisfaction survey once Resolved/Closed

    Attributes:
        old_status / new_status: Status values
        changed_by_id: Actor
        comment: Note left with the change
    """

    old_status: str = ""
    new_status: str = ""
    changed_by_id: str = ""
    comment: str = ""

    def __post_init__(self):
        pass

    @property
    def aggregate_type(self) -> str:
        return "Ticket"

    def _get_event_data(self) -> Dict[str, Any]:
        data = {
            "old_status": self.old_status,
            "new_status": self.new_status,
            "changed_by_id": self.changed_by_id,
        }
        if self.comment:
            data["comment"] = self.comment
        return data


@dataclass
class TicketCategoryChangedEvent(DomainEvent):
    old_category: str = ""
    new_category: str = ""
    changed_by_id: str = ""

    def __post_init__(self):
        pass

    @property
    def aggregate_type(self) -> str:
        return "Ticket"

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "old_category": self.old_category,
            "new_category": self.new_category,
            "changed_by_id": self.changed_by_id,
        }


@dataclass
class TicketPriorityChangedEvent(DomainEvent):
    """
    Event: the priority changed.

    Typical handlers:
    - Escalation alert when raised to Critical
    """

    old_priority: str = ""
    new_priority: str = ""
    changed_by_id: str = ""

    def __post_init__(self):
        pass

    @property
    def aggregate_type(self) -> str:
        return "Ticket"

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "old_priority": self.old_priority,
            "new_priority": self.new_priority,
            "changed_by_id": self.changed_by_id,
        }


@dataclass
class TicketAssignedEvent(DomainEvent):
    """
    Event: the assignee changed.

    Attributes:
        assignee_id: New assignee (None = unassigned)
        assigned_by_id: Staff member who made the change
    """

    assignee_id: Optional[str] = None
    assigned_by_id: str = ""

    def __post_init__(self):
        pass

    @property
    def aggregate_type(self) -> str:
        return "Ticket"

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "assignee_id": self.assignee_id,
            "assigned_by_id": self.assigned_by_id,
        }


@dataclass
class CommentAddedEvent(DomainEvent):
    """
    Event: a comment was posted.

    Internal comments must not be forwarded to the requester.
    """

    comment_id: str = ""
    author_id: str = ""
    is_internal: bool = False

    def __post_init__(self):
        pass

    @property
    def aggregate_type(self) -> str:
        return "Ticket"

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "comment_id": self.comment_id,
            "author_id": self.author_id,
            "is_internal": self.is_internal,
        }
