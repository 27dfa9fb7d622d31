"""
Mappers between Entities (Core) and Models (Django).

Responsibilities:
- TicketEntity → rows (ticket + append-only children)
- rows → TicketEntity (aggregate rebuilt with its children)
- DomainEvent → DomainEventModel (Event Store)

Principles:
- Mappers are stateless
- No business logic, only data conversion
"""

from typing import List, Optional

from src.core.accounts.entities import ActorRef, ActorRole
from src.core.shared.events import DomainEvent
from src.core.tickets.entities import (
    Attachment,
    Comment,
    FieldChange,
    StatusChange,
    TicketCategory,
    TicketEntity,
    TicketMood,
    TicketPriority,
    TicketStatus,
)

from .models import (
    DomainEventModel,
    TicketAttachmentModel,
    TicketCommentModel,
    TicketFieldHistoryModel,
    TicketModel,
    TicketStatusHistoryModel,
)


class ActorRefMapper:
    """ActorRef ↔ JSON snapshot."""

    @staticmethod
    def to_json(ref: Optional[ActorRef]) -> Optional[dict]:
        return ref.to_dict() if ref else None

    @staticmethod
    def to_ref(data: Optional[dict]) -> Optional[ActorRef]:
        if not data or not data.get("id"):
            return None
        return ActorRef(
            id=data["id"],
            name=data.get("name", ""),
            email=data.get("email", ""),
            role=ActorRole.from_string(data.get("role") or ActorRole.EMPLOYEE.value),
            department=data.get("department", ""),
        )


class TicketMapper:
    """
    Mapper between TicketEntity and its rows.

    - to_entity(): rows → Entity (children must be prefetched)
    - root_fields(): Entity → TicketModel column values
    - new_children(): child rows not stored yet
    """

    CHILD_RELATIONS = ("comments", "status_history", "field_history", "attachments")

    @staticmethod
    def root_fields(entity: TicketEntity) -> dict:
        return {
            "ticket_number": entity.ticket_number,
            "title": entity.title,
            "description": entity.description,
            "category": entity.category.value,
            "status": entity.status.value,
            "priority": entity.priority.value,
            "mood": entity.mood.value,
            "requester_id": entity.requester.id if entity.requester else "",
            "requester": ActorRefMapper.to_json(entity.requester) or {},
            "requester_department": entity.requester_department,
            "assignee_id": entity.assignee.id if entity.assignee else None,
            "assignee": ActorRefMapper.to_json(entity.assignee),
            "created_at": entity.created_at,
            "updated_at": entity.updated_at,
            "resolved_at": entity.resolved_at,
        }

    @staticmethod
    def to_entity(model: TicketModel) -> TicketEntity:
        to_ref = ActorRefMapper.to_ref
        return TicketEntity(
            id=model.id,
            ticket_number=model.ticket_number,
            title=model.title,
            description=model.description,
            category=TicketCategory.from_string(model.category),
            status=TicketStatus.from_string(model.status),
            priority=TicketPriority.from_string(model.priority),
            mood=TicketMood.from_string(model.mood),
            requester=to_ref(model.requester),
            assignee=to_ref(model.assignee),
            created_at=model.created_at,
            updated_at=model.updated_at,
            resolved_at=model.resolved_at,
            comments=[
                Comment(
                    id=c.id,
                    content=c.content,
                    author=to_ref(c.author),
                    is_internal=c.is_internal,
                    created_at=c.created_at,
                )
                for c in model.comments.all()
            ],
            status_history=[
                StatusChange(
                    status=TicketStatus.from_string(h.status),
                    changed_by=to_ref(h.changed_by),
                    changed_at=h.changed_at,
                    comment=h.comment,
                )
                for h in model.status_history.all()
            ],
            field_history=[
                FieldChange(
                    field_name=h.field,
                    old_value=h.old_value,
                    new_value=h.new_value,
                    changed_by=to_ref(h.changed_by),
                    changed_at=h.changed_at,
                    comment=h.comment,
                )
                for h in model.field_history.all()
            ],
            attachments=[
                Attachment(url=a.url, original_name=a.original_name)
                for a in model.attachments.all()
            ],
        )

    @staticmethod
    def to_entity_list(models: List[TicketModel]) -> List[TicketEntity]:
        return [TicketMapper.to_entity(m) for m in models]

    @staticmethod
    def new_comments(entity: TicketEntity, stored_ids: set) -> List[TicketCommentModel]:
        return [
            TicketCommentModel(
                id=c.id,
                ticket_id=entity.id,
                content=c.content,
                author_id=c.author.id,
                author=ActorRefMapper.to_json(c.author),
                is_internal=c.is_internal,
                created_at=c.created_at,
            )
            for c in entity.comments
            if c.id not in stored_ids
        ]

    @staticmethod
    def new_status_history(entity: TicketEntity, stored: int) -> List[TicketStatusHistoryModel]:
        return [
            TicketStatusHistoryModel(
                ticket_id=entity.id,
                position=position,
                status=h.status.value,
                changed_by=ActorRefMapper.to_json(h.changed_by),
                changed_at=h.changed_at,
                comment=h.comment,
            )
            for position, h in enumerate(entity.status_history)
            if position >= stored
        ]

    @staticmethod
    def new_field_history(entity: TicketEntity, stored: int) -> List[TicketFieldHistoryModel]:
        return [
            TicketFieldHistoryModel(
                ticket_id=entity.id,
                position=position,
                field=h.field_name,
                old_value=h.old_value,
                new_value=h.new_value,
                changed_by=ActorRefMapper.to_json(h.changed_by),
                changed_at=h.changed_at,
                comment=h.comment,
            )
            for position, h in enumerate(entity.field_history)
            if position >= stored
        ]

    @staticmethod
    def new_attachments(entity: TicketEntity, stored: int) -> List[TicketAttachmentModel]:
        return [
            TicketAttachmentModel(
                ticket_id=entity.id,
                position=position,
                url=a.url,
                original_name=a.original_name,
            )
            for position, a in enumerate(entity.attachments)
            if position >= stored
        ]


class DomainEventMapper:
    """DomainEvent → DomainEventModel for the Event Store."""

    @staticmethod
    def to_model(event: DomainEvent, sequence: int = 0) -> DomainEventModel:
        return DomainEventModel(
            event_id=event.event_id,
            event_type=event.event_type,
            aggregate_type=event.aggregate_type,
            aggregate_id=event.aggregate_id,
            event_data=event._get_event_data(),
            version=event.version,
            sequence=sequence,
            occurred_at=event.occurred_at,
        )
