"""
Entities of the Tickets domain.

Entities and value objects:
- TicketEntity: Aggregate root
- TicketStatus, TicketPriority, TicketCategory, TicketMood: closed vocabularies
- Comment, StatusChange, FieldChange, Attachment: owned by the ticket

Encapsulated business rules:
- Input validation on creation
- Append-only status history (resulting status, actor, timestamp)
- Append-only field-change history for status/priority/category/assignee
- "Changes" that keep the current value record nothing
- resolved_at set on first Resolved/Closed, cleared on reopen
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional
import uuid

from src.core.accounts.entities import ActorRef
from src.core.shared.clock import utcnow
from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    ValidationError,
)


class _VocabularyMixin:
    """from_string accepting either the enum name or its value."""

    @classmethod
    def from_string(cls, value: str):
        """
        Convert a string to the enum.

        Args:
            value: Name ("IN_PROGRESS") or value ("In Progress"), any case

        Raises:
            ValueError: If the value is unknown or not a string
        """
        if isinstance(value, cls):
            return value
        if value is not None and not isinstance(value, str):
            raise ValueError(f"Invalid {cls.__name__}: {value!r}")
        normalized = (value or "").strip()
        try:
            return cls[normalized.upper().replace(" ", "_").replace("-", "_")]
        except KeyError:
            pass
        for member in cls:
            if member.value.lower() == normalized.lower():
                return member
        raise ValueError(f"Invalid {cls.__name__}: {value}")


class TicketStatus(_VocabularyMixin, Enum):
    """
    Lifecycle of a ticket.

    Staff may move a ticket to any status; requesters may only close
    their own ticket or reopen it once closed (see policy.py).
    """

    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"
    CLOSED = "Closed"

    @property
    def is_finished(self) -> bool:
        return self in (TicketStatus.RESOLVED, TicketStatus.CLOSED)


class TicketPriority(_VocabularyMixin, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class TicketCategory(_VocabularyMixin, Enum):
    """Department queue a ticket belongs to."""

    IT = "IT"
    HR = "HR"
    ADMIN = "Admin"


class TicketMood(_VocabularyMixin, Enum):
    """AI-derived sentiment of the requester, visible to staff only."""

    ANGRY = "angry"
    FRUSTRATED = "frustrated"
    NEUTRAL = "neutral"
    SATISFIED = "satisfied"
    URGENT = "urgent"


# =============================================================================
# Value objects owned by the aggregate
# =============================================================================

@dataclass(frozen=True)
class Comment:
    """A note on a ticket. Internal comments are hidden from employees."""

    content: str
    author: ActorRef
    is_internal: bool = False
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class StatusChange:
    """One entry of the status history: the status the ticket moved to."""

    status: TicketStatus
    changed_by: ActorRef
    changed_at: datetime = field(default_factory=utcnow)
    comment: str = ""


@dataclass(frozen=True)
class FieldChange:
    """One entry of the field-change history."""

    field_name: str
    old_value: Optional[str]
    new_value: Optional[str]
    changed_by: ActorRef
    changed_at: datetime = field(default_factory=utcnow)
    comment: str = ""


@dataclass(frozen=True)
class Attachment:
    url: str
    original_name: str = ""


# =============================================================================
# Aggregate root
# =============================================================================

@dataclass
class TicketEntity:
    """
    Domain Entity: Ticket.

    Aggregate root of the helpdesk. Comments, status history, field
    history and attachments live inside it and have no lifecycle of
    their own.

    Invariants:
    - Title has 3..200 characters, description 10..5000
    - At most 5 attachments, each with a URL
    - Status history is append-only and starts with the Open entry
    - Comments are never edited or deleted

    Attributes:
        id: Unique identifier (UUID)
        ticket_number: Human friendly reference (TKT-YYYYMMDD-XXXXXX)
        title: Short description
        description: Full description
        category: Queue (IT/HR/Admin)
        status: Current lifecycle status
        priority: Priority
        mood: Requester sentiment
        requester: Employee who filed the ticket
        assignee: Staff member working on it
        created_at / updated_at: Timestamps
        resolved_at: First time the ticket was resolved or closed
        comments: Ordered comments
        status_history: Ordered status entries
        field_history: Ordered field changes
        attachments: Attached files (URL metadata)

    Example:
        ticket = TicketEntity.create(
            title="VPN keeps dropping",
            description="The VPN disconnects every ten minutes since Monday",
            requester=employee.to_ref(),
            priority=TicketPriority.HIGH,
            category=TicketCategory.IT,
        )
        ticket.change_status(TicketStatus.IN_PROGRESS, actor=agent.to_ref())
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    ticket_number: str = ""

    title: str = ""
    description: str = ""
    category: TicketCategory = TicketCategory.IT

    status: TicketStatus = TicketStatus.OPEN
    priority: TicketPriority = TicketPriority.MEDIUM
    mood: TicketMood = TicketMood.NEUTRAL

    requester: Optional[ActorRef] = None
    assignee: Optional[ActorRef] = None

    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    resolved_at: Optional[datetime] = None

    comments: List[Comment] = field(default_factory=list)
    status_history: List[StatusChange] = field(default_factory=list)
    field_history: List[FieldChange] = field(default_factory=list)
    attachments: List[Attachment] = field(default_factory=list)

    TITLE_MIN_LENGTH = 3
    TITLE_MAX_LENGTH = 200
    DESCRIPTION_MIN_LENGTH = 10
    DESCRIPTION_MAX_LENGTH = 5000
    COMMENT_MAX_LENGTH = 5000
    MAX_ATTACHMENTS = 5

    @classmethod
    def create(
        cls,
        title: str,
        description: str,
        requester: ActorRef,
        priority: TicketPriority = TicketPriority.MEDIUM,
        category: TicketCategory = TicketCategory.IT,
        mood: TicketMood = TicketMood.NEUTRAL,
        attachments: Optional[List[Attachment]] = None,
    ) -> "TicketEntity":
        """
        Factory with business validation.

        Args:
            title: Title (3..200 characters)
            description: Description (10..5000 characters)
            requester: Employee filing the ticket
            priority: Priority (default: Medium)
            category: Queue (default: IT)
            mood: Classified sentiment (default: neutral)
            attachments: Optional attachments (max 5)

        Returns:
            New TicketEntity with its initial Open history entry

        Raises:
            ValidationError: If input is invalid
        """
        cls.validate_content(title, description)
        if requester is None or not requester.id:
            raise ValidationError("Requester is required", field="requester")
        attachments = list(attachments or [])
        cls._validate_attachments(attachments)

        ticket = cls(
            title=title.strip(),
            description=description.strip(),
            requester=requester,
            priority=priority,
            category=category,
            mood=mood,
            status=TicketStatus.OPEN,
            attachments=attachments,
        )
        ticket.ticket_number = ticket._build_number()
        ticket.updated_at = ticket.created_at
        ticket.status_history.append(
            StatusChange(
                status=TicketStatus.OPEN,
                changed_by=requester,
                changed_at=ticket.created_at,
                comment="Ticket created",
            )
        )
        return ticket

    @classmethod
    def validate_content(cls, title: str, description: str) -> None:
        """Validate title and description (raises ValidationError)."""
        cls._validate_title(title)
        cls._validate_description(description)

    def _build_number(self) -> str:
        return f"TKT-{self.created_at:%Y%m%d}-{self.id.replace('-', '')[:6].upper()}"

    @classmethod
    def _validate_title(cls, title: str) -> None:
        cleaned = (title or "").strip()
        if not cleaned:
            raise ValidationError("Title is required", field="title")
        if len(cleaned) < cls.TITLE_MIN_LENGTH:
            raise ValidationError(
                f"Title must have at least {cls.TITLE_MIN_LENGTH} characters",
                field="title",
            )
        if len(cleaned) > cls.TITLE_MAX_LENGTH:
            raise ValidationError(
                f"Title must have at most {cls.TITLE_MAX_LENGTH} characters",
                field="title",
            )

    @classmethod
    def _validate_description(cls, description: str) -> None:
        cleaned = (description or "").strip()
        if not cleaned:
            raise ValidationError("Description is required", field="description")
        if len(cleaned) < cls.DESCRIPTION_MIN_LENGTH:
            raise ValidationError(
                f"Description must have at least {cls.DESCRIPTION_MIN_LENGTH} characters",
                field="description",
            )
        if len(cleaned) > cls.DESCRIPTION_MAX_LENGTH:
            raise ValidationError(
                f"Description must have at most {cls.DESCRIPTION_MAX_LENGTH} characters",
                field="description",
            )

    @classmethod
    def _validate_attachments(cls, attachments: List[Attachment]) -> None:
        if len(attachments) > cls.MAX_ATTACHMENTS:
            raise ValidationError(
                f"You can only attach up to {cls.MAX_ATTACHMENTS} files",
                field="attachments",
            )
        for attachment in attachments:
            if not attachment.url:
                raise ValidationError("Attachment URL is required", field="attachments")

    # =========================================================================
    # Mutations
    # =========================================================================

    def change_status(
        self,
        new_status: TicketStatus,
        actor: ActorRef,
        comment: str = "",
    ) -> bool:
        """
        Move the ticket to a new status.

        Who may request which status is decided by the policy module;
        the entity only records the change.

        Args:
            new_status: Resulting status
            actor: Who made the change
            comment: Optional note stored with the history entry

        Returns:
            True if the status changed, False if it already had that value
        """
        if new_status == self.status:
            return False

        old_status = self.status
        now = utcnow()
        self.status = new_status

        if new_status.is_finished:
            if self.resolved_at is None:
                self.resolved_at = now
        else:
            self.resolved_at = None

        self.status_history.append(
            StatusChange(
                status=new_status,
                changed_by=actor,
                changed_at=now,
                comment=(comment or "").strip(),
            )
        )
        self._record_field_change("status", old_status.value, new_status.value, actor, comment, now)
        return True

    def change_category(
        self,
        category: TicketCategory,
        actor: ActorRef,
        comment: str = "",
    ) -> bool:
        if category == self.category:
            return False
        old = self.category
        self.category = category
        self._record_field_change("category", old.value, category.value, actor, comment)
        return True

    def change_priority(
        self,
        priority: TicketPriority,
        actor: ActorRef,
        comment: str = "",
    ) -> bool:
        if priority == self.priority:
            return False
        old = self.priority
        self.priority = priority
        self._record_field_change("priority", old.value, priority.value, actor, comment)
        return True

    def assign_to(self, assignee: Optional[ActorRef], actor: ActorRef) -> bool:
        """
        Assign (or unassign with None) the ticket.

        Raises:
            BusinessRuleViolationError: If assigning a closed ticket
        """
        old_id = self.assignee.id if self.assignee else None
        new_id = assignee.id if assignee else None
        if old_id == new_id:
            return False

        if assignee is not None and self.status == TicketStatus.CLOSED:
            raise BusinessRuleViolationError(
                "Cannot assign a closed ticket",
                rule="closed_ticket_cannot_be_assigned",
            )

        old_label = self._label(self.assignee)
        self.assignee = assignee
        self._record_field_change("assignee", old_label, self._label(assignee), actor)
        return True

    def add_comment(self, content: str, author: ActorRef, is_internal: bool = False) -> Comment:
        """
        Append a comment.

        Raises:
            ValidationError: If content is blank or too long
        """
        cleaned = (content or "").strip()
        if not cleaned:
            raise ValidationError("Comment Required", field="content")
        if len(cleaned) > self.COMMENT_MAX_LENGTH:
            raise ValidationError(
                f"Comment must have at most {self.COMMENT_MAX_LENGTH} characters",
                field="content",
            )

        comment = Comment(content=cleaned, author=author, is_internal=bool(is_internal))
        self.comments.append(comment)
        self.updated_at = comment.created_at
        return comment

    def _record_field_change(
        self,
        field_name: str,
        old_value: Optional[str],
        new_value: Optional[str],
        actor: ActorRef,
        comment: str = "",
        when: Optional[datetime] = None,
    ) -> None:
        when = when or utcnow()
        self.field_history.append(
            FieldChange(
                field_name=field_name,
                old_value=old_value,
                new_value=new_value,
                changed_by=actor,
                changed_at=when,
                comment=(comment or "").strip(),
            )
        )
        self.updated_at = when

    @staticmethod
    def _label(actor: Optional[ActorRef]) -> Optional[str]:
        if actor is None:
            return None
        return actor.name or actor.id

    # =========================================================================
    # Queries
    # =========================================================================

    def is_requested_by(self, user_id: Optional[str]) -> bool:
        return bool(user_id) and self.requester is not None and self.requester.id == user_id

    @property
    def resolution_hours(self) -> Optional[float]:
        if self.resolved_at is None:
            return None
        return (self.resolved_at - self.created_at).total_seconds() / 3600

    @property
    def requester_department(self) -> str:
        return self.requester.department if self.requester else ""

    def __repr__(self) -> str:
        return (
            f"TicketEntity("
            f"id={self.id[:8]}..., "
            f"title='{self.title[:20]}', "
            f"status={self.status.value}, "
            f"priority={self.priority.value}"
            f")"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TicketEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
