"""
Data Transfer Objects (DTOs) of the Tickets domain.

Kinds of DTOs:
- Input DTOs: validated request data (from the JSON API)
- Commands: the closed set of typed updates accepted by UpdateTicket
- Query DTOs: list filters
- Output DTOs: role-filtered views of tickets for the API

Output DTOs are built for a viewer: mood and internal comments are
left out for anyone who is not staff.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union

from src.core.accounts.entities import ActorRef, ActorRole, UserEntity

from . import policy
from .entities import (
    Attachment,
    Comment,
    FieldChange,
    StatusChange,
    TicketEntity,
)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _actor(ref: Optional[ActorRef]) -> Optional[dict]:
    return ref.to_dict() if ref else None


# =============================================================================
# INPUT DTOs
# =============================================================================

@dataclass(frozen=True)
class AttachmentInputDTO:
    url: str
    original_name: str = ""


@dataclass(frozen=True)
class CreateTicketInputDTO:
    """
    Input for creating a ticket.

    Category and mood are not part of the input: the classifier
    derives them from the text.

    Attributes:
        title: Short description
        description: Full description
        priority: Priority value or name (e.g. "High")
        attachments: Up to 5 attachments (tuple so the DTO stays hashable)
    """

    title: str
    description: str
    priority: str = "Medium"
    attachments: Tuple[AttachmentInputDTO, ...] = field(default_factory=tuple)


# =============================================================================
# UPDATE COMMANDS
# =============================================================================

@dataclass(frozen=True)
class ChangeStatusCommand:
    status: str
    comment: str = ""


@dataclass(frozen=True)
class ChangeCategoryCommand:
    category: str
    comment: str = ""


@dataclass(frozen=True)
class ChangePriorityCommand:
    priority: str
    comment: str = ""


@dataclass(frozen=True)
class ChangeAssignmentCommand:
    """assignee_id=None unassigns the ticket."""

    assignee_id: Optional[str] = None


UpdateCommand = Union[
    ChangeStatusCommand,
    ChangeCategoryCommand,
    ChangePriorityCommand,
    ChangeAssignmentCommand,
]


@dataclass(frozen=True)
class UpdateTicketInputDTO:
    """
    A batch of commands applied to one ticket in a single transaction.

    Example:
        UpdateTicketInputDTO(
            ticket_id=ticket.id,
            commands=(
                ChangeStatusCommand("In Progress", comment="Looking into it"),
                ChangeAssignmentCommand(agent.id),
            ),
        )
    """

    ticket_id: str
    commands: Tuple[UpdateCommand, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class AddCommentInputDTO:
    ticket_id: str
    content: str
    is_internal: bool = False


# =============================================================================
# QUERY DTOs
# =============================================================================

@dataclass(frozen=True)
class TicketQueryDTO:
    """
    List filters. Every filter is optional; values are matched exactly
    except search, a case-insensitive substring of title or description.

    mood is honoured for staff only.
    """

    status: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[str] = None
    mood: Optional[str] = None
    search: Optional[str] = None
    page: Any = 1
    limit: Any = None


# =============================================================================
# OUTPUT DTOs
# =============================================================================

@dataclass
class ClassificationDTO:
    """Result of classifying a ticket's text."""

    category: str
    mood: str
    confidence: float = 0.0
    reason: str = ""

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "mood": self.mood,
            "confidence": round(self.confidence, 2),
            "reason": self.reason,
        }


@dataclass
class CommentOutputDTO:
    id: str
    content: str
    author: dict
    is_internal: bool
    created_at: datetime

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentOutputDTO":
        return cls(
            id=comment.id,
            content=comment.content,
            author=comment.author.to_dict(),
            is_internal=comment.is_internal,
            created_at=comment.created_at,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "content": self.content,
            "author": self.author,
            "is_internal": self.is_internal,
            "created_at": self.created_at.isoformat(),
        }


def _status_change_dict(entry: StatusChange) -> dict:
    return {
        "status": entry.status.value,
        "changed_by": _actor(entry.changed_by),
        "changed_at": entry.changed_at.isoformat(),
        "comment": entry.comment,
    }


def _field_change_dict(entry: FieldChange) -> dict:
    return {
        "field": entry.field_name,
        "old_value": entry.old_value,
        "new_value": entry.new_value,
        "comment": entry.comment,
        "changed_by": _actor(entry.changed_by),
        "changed_at": entry.changed_at.isoformat(),
    }


def _attachment_dict(attachment: Attachment) -> dict:
    return {"url": attachment.url, "original_name": attachment.original_name}


@dataclass
class TicketOutputDTO:
    """
    Full ticket as seen by one viewer.

    Attributes:
        status_options: [(value, label)] the viewer may move the ticket to
        mood: None when the viewer may not see it
        comments: Internal comments already removed for non-staff
    """

    id: str
    ticket_number: str
    title: str
    description: str
    category: str
    status: str
    priority: str
    mood: Optional[str]
    requester: Optional[dict]
    assignee: Optional[dict]
    created_at: datetime
    updated_at: datetime
    resolved_at: Optional[datetime]
    comments: List[CommentOutputDTO]
    status_history: List[dict]
    field_history: List[dict]
    attachments: List[dict]
    status_options: List[Tuple[str, str]]

    @classmethod
    def from_entity(cls, entity: TicketEntity, viewer: UserEntity) -> "TicketOutputDTO":
        """
        Args:
            entity: Ticket to expose
            viewer: Acting user (decides mood/internal visibility and options)
        """
        staff_view = policy.can_view_internal_comments(viewer.role)
        comments = [
            CommentOutputDTO.from_comment(comment)
            for comment in entity.comments
            if staff_view or not comment.is_internal
        ]
        return cls(
            id=entity.id,
            ticket_number=entity.ticket_number,
            title=entity.title,
            description=entity.description,
            category=entity.category.value,
            status=entity.status.value,
            priority=entity.priority.value,
            mood=entity.mood.value if policy.can_view_mood(viewer.role) else None,
            requester=_actor(entity.requester),
            assignee=_actor(entity.assignee),
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            resolved_at=entity.resolved_at,
            comments=comments,
            status_history=[_status_change_dict(e) for e in entity.status_history],
            field_history=[_field_change_dict(e) for e in entity.field_history],
            attachments=[_attachment_dict(a) for a in entity.attachments],
            status_options=[
                (status.value, label)
                for status, label in policy.status_options_for(viewer, entity)
            ],
        )

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "ticket_number": self.ticket_number,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "status": self.status,
            "priority": self.priority,
            "requester": self.requester,
            "assignee": self.assignee,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "resolved_at": _iso(self.resolved_at),
            "comments": [c.to_dict() for c in self.comments],
            "status_history": self.status_history,
            "field_history": self.field_history,
            "attachments": self.attachments,
            "status_options": [
                {"value": value, "label": label} for value, label in self.status_options
            ],
        }
        if self.mood is not None:
            data["mood"] = self.mood
        return data


@dataclass
class TicketSummaryDTO:
    """Lightweight ticket for listings and dashboards."""

    id: str
    ticket_number: str
    title: str
    category: str
    status: str
    priority: str
    mood: Optional[str]
    requester_name: str
    assignee_name: Optional[str]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(
        cls,
        entity: TicketEntity,
        viewer_role: Optional[ActorRole] = None,
    ) -> "TicketSummaryDTO":
        return cls(
            id=entity.id,
            ticket_number=entity.ticket_number,
            title=entity.title,
            category=entity.category.value,
            status=entity.status.value,
            priority=entity.priority.value,
            mood=entity.mood.value if policy.can_view_mood(viewer_role) else None,
            requester_name=entity.requester.name if entity.requester else "",
            assignee_name=entity.assignee.name if entity.assignee else None,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "ticket_number": self.ticket_number,
            "title": self.title,
            "category": self.category,
            "status": self.status,
            "priority": self.priority,
            "requester_name": self.requester_name,
            "assignee_name": self.assignee_name,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
        if self.mood is not None:
            data["mood"] = self.mood
        return data


@dataclass
class CreatedTicketOutputDTO:
    """A freshly created ticket together with how it was classified."""

    ticket: TicketOutputDTO
    classification: ClassificationDTO

    def to_dict(self) -> Dict[str, Any]:
        data = self.ticket.to_dict()
        classification = self.classification.to_dict()
        if self.ticket.mood is None:
            classification.pop("mood")
        data["classification"] = classification
        return data
