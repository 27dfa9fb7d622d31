"""
Tickets Domain - support requests.

Contains all the business logic of helpdesk tickets:
- Entities (TicketEntity, TicketStatus, TicketPriority, TicketCategory, TicketMood)
- Ticket Status Policy (who may move a ticket where, who sees what)
- Use Cases (create, get, list, update, comment, statistics)
- Domain Events (TicketCreated, TicketStatusChanged, CommentAdded, ...)
- DTOs (input, typed update commands, role-filtered output)
- Ports (TicketRepository, TicketClassifier)

Domain characteristics:
- Append-only status and field history
- Same policy on client and server
- Events fired for asynchronous side effects
"""

from .entities import (
    TicketEntity,
    TicketStatus,
    TicketPriority,
    TicketCategory,
    TicketMood,
    Comment,
    StatusChange,
    FieldChange,
    Attachment,
)
from .events import (
    TicketCreatedEvent,
    TicketStatusChangedEvent,
    TicketCategoryChangedEvent,
    TicketPriorityChangedEvent,
    TicketAssignedEvent,
    CommentAddedEvent,
)
from .dtos import (
    CreateTicketInputDTO,
    AttachmentInputDTO,
    ChangeStatusCommand,
    ChangeCategoryCommand,
    ChangePriorityCommand,
    ChangeAssignmentCommand,
    UpdateTicketInputDTO,
    AddCommentInputDTO,
    TicketQueryDTO,
    ClassificationDTO,
    TicketOutputDTO,
    TicketSummaryDTO,
)
from .ports import (
    TicketRepository,
    TicketClassifier,
    TicketCriteria,
    InMemoryTicketRepository,
)

__all__ = [
    # Entities
    "TicketEntity",
    "TicketStatus",
    "TicketPriority",
    "TicketCategory",
    "TicketMood",
    "Comment",
    "StatusChange",
    "FieldChange",
    "Attachment",
    # Events
    "TicketCreatedEvent",
    "TicketStatusChangedEvent",
    "TicketCategoryChangedEvent",
    "TicketPriorityChangedEvent",
    "TicketAssignedEvent",
    "CommentAddedEvent",
    # DTOs
    "CreateTicketInputDTO",
    "AttachmentInputDTO",
    "ChangeStatusCommand",
    "ChangeCategoryCommand",
    "ChangePriorityCommand",
    "ChangeAssignmentCommand",
    "UpdateTicketInputDTO",
    "AddCommentInputDTO",
    "TicketQueryDTO",
    "ClassificationDTO",
    "TicketOutputDTO",
    "TicketSummaryDTO",
    # Ports
    "TicketRepository",
    "TicketClassifier",
    "TicketCriteria",
    "InMemoryTicketRepository",
]
