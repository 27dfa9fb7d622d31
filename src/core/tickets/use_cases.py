"""
Use Cases (Application Services) of the Tickets domain.

Use cases:
- CreateTicketService: File a ticket (classified on the way in)
- GetTicketService: One ticket, filtered for the viewer
- StatusOptionsService: Statuses the viewer may move a ticket to
- ListTicketsService: Filtered, role-scoped, paginated listing
- UpdateTicketService: Apply typed update commands atomically
- AddCommentService: Comment on a ticket
- TicketStatsService: Dashboard figures (staff)
- DepartmentStatsService: Resolution forecast for a department

Responsibilities of the use cases:
- Parse input (via DTOs)
- Check the ticket policy
- Coordinate entities
- Manage transactions (via UoW)
- Fire domain events
- Return output DTOs

Principles:
- One use case = one business operation
- Dependencies injected (DI)
- No infrastructure logic
"""

import logging
from collections import Counter
from statistics import mean
from typing import Dict, List, Optional, Type, TypeVar

from src.core.accounts.entities import UserEntity
from src.core.accounts.ports import UserRepository
from src.core.shared.exceptions import (
    EntityNotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from src.core.shared.interfaces import UnitOfWork
from src.core.shared.pagination import DEFAULT_LIMIT, Page, PageRequest

from . import policy
from .dtos import (
    AddCommentInputDTO,
    ChangeAssignmentCommand,
    ChangeCategoryCommand,
    ChangePriorityCommand,
    ChangeStatusCommand,
    CommentOutputDTO,
    CreateTicketInputDTO,
    CreatedTicketOutputDTO,
    TicketOutputDTO,
    TicketQueryDTO,
    TicketSummaryDTO,
    UpdateTicketInputDTO,
)
from .entities import (
    Attachment,
    TicketCategory,
    TicketEntity,
    TicketMood,
    TicketPriority,
    TicketStatus,
)
from .events import (
    CommentAddedEvent,
    TicketAssignedEvent,
    TicketCategoryChangedEvent,
    TicketCreatedEvent,
    TicketPriorityChangedEvent,
    TicketStatusChangedEvent,
)
from .ports import TicketClassifier, TicketCriteria, TicketRepository

logger = logging.getLogger(__name__)

E = TypeVar("E")

RECENT_TICKETS = 5
TOP_DEPARTMENTS = 3


def parse_choice(enum_cls: Type[E], value: Optional[str], field: str) -> Optional[E]:
    """
    Parse an optional vocabulary value.

    Returns None for None/blank; raises ValidationError for unknown values.
    """
    if value is None or str(value).strip() == "":
        return None
    try:
        return enum_cls.from_string(value)
    except ValueError:
        raise ValidationError(f"Invalid {field}: {value}", field=field)


def get_ticket_or_raise(ticket_repo: TicketRepository, ticket_id: str) -> TicketEntity:
    ticket = ticket_repo.get_by_id(ticket_id)
    if not ticket:
        raise EntityNotFoundError(
            f"Ticket {ticket_id} not found",
            entity_type="Ticket",
            entity_id=ticket_id,
        )
    return ticket


def ensure_can_view(actor: UserEntity, ticket: TicketEntity) -> None:
    if not policy.can_view_ticket(actor, ticket):
        raise PermissionDeniedError(
            "You do not have access to this ticket",
            action="view_ticket",
        )


def scope_for(actor: UserEntity) -> Dict[str, object]:
    """
    Role scope applied to listings and statistics.

    employee → own tickets, hr/it → their queue, admin/super-admin → all.
    """
    if not actor.is_staff:
        return {"requester_id": actor.id}
    queue = policy.queue_for(actor.role)
    if queue is not None:
        return {"queue": queue}
    return {}


def _round(value: Optional[float]) -> float:
    return round(value, 1) if value is not None else 0.0


class CreateTicketService:
    """
    Use Case: File a new ticket.

    Flow:
    1. Parse priority and attachments
    2. Classify the text (category, mood)
    3. Create the entity (initial Open history entry included)
    4. Persist via the repository
    5. Fire TicketCreatedEvent
    6. Return the ticket and its classification

    Example:
        service = CreateTicketService(ticket_repo, classifier, uow)
        output = service.execute(
            employee,
            CreateTicketInputDTO(
                title="Laptop will not boot",
                description="Black screen after the latest update",
                priority="High",
            ),
        )
        print(output.ticket.ticket_number)
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        classifier: TicketClassifier,
        uow: UnitOfWork,
    ):
        self.ticket_repo = ticket_repo
        self.classifier = classifier
        self.uow = uow

    def execute(self, actor: UserEntity, input_dto: CreateTicketInputDTO) -> CreatedTicketOutputDTO:
        """
        Raises:
            ValidationError: If the input is invalid
        """
        priority = parse_choice(TicketPriority, input_dto.priority, "priority") or TicketPriority.MEDIUM
        attachments = [
            Attachment(url=(a.url or "").strip(), original_name=(a.original_name or "").strip())
            for a in input_dto.attachments
        ]

        # Validate before classifying
        TicketEntity.validate_content(input_dto.title, input_dto.description)

        classification = self.classifier.classify(input_dto.title, input_dto.description)

        with self.uow:
            ticket = TicketEntity.create(
                title=input_dto.title,
                description=input_dto.description,
                requester=actor.to_ref(),
                priority=priority,
                category=TicketCategory.from_string(classification.category),
                mood=TicketMood.from_string(classification.mood),
                attachments=attachments,
            )
            self.ticket_repo.save(ticket)

            self.uow.publish_event(
                TicketCreatedEvent(
                    aggregate_id=ticket.id,
                    ticket_number=ticket.ticket_number,
                    requester_id=actor.id,
                    title=ticket.title,
                    priority=ticket.priority.value,
                    category=ticket.category.value,
                    mood=ticket.mood.value,
                )
            )

        logger.info(f"Ticket created: {ticket.ticket_number} ({ticket.category.value})")
        return CreatedTicketOutputDTO(
            ticket=TicketOutputDTO.from_entity(ticket, actor),
            classification=classification,
        )


class GetTicketService:
    """Use Case: Fetch one ticket as seen by the actor."""

    def __init__(self, ticket_repo: TicketRepository):
        self.ticket_repo = ticket_repo

    def execute(self, actor: UserEntity, ticket_id: str) -> TicketOutputDTO:
        """
        Raises:
            EntityNotFoundError: If the ticket does not exist
            PermissionDeniedError: If the actor may not see it
        """
        ticket = get_ticket_or_raise(self.ticket_repo, ticket_id)
        ensure_can_view(actor, ticket)
        return TicketOutputDTO.from_entity(ticket, actor)


class StatusOptionsService:
    """Use Case: Status selector content for the actor and a ticket."""

    def __init__(self, ticket_repo: TicketRepository):
        self.ticket_repo = ticket_repo

    def execute(self, actor: UserEntity, ticket_id: str) -> List[dict]:
        ticket = get_ticket_or_raise(self.ticket_repo, ticket_id)
        ensure_can_view(actor, ticket)
        return [
            {"value": status.value, "label": label}
            for status, label in policy.status_options_for(actor, ticket)
        ]


class ListTicketsService:
    """
    Use Case: List tickets.

    Filters are combined with AND, then the role scope is applied.
    The mood filter is silently ignored for employees.
    """

    def __init__(self, ticket_repo: TicketRepository, default_limit: int = DEFAULT_LIMIT):
        self.ticket_repo = ticket_repo
        self.default_limit = default_limit

    def execute(self, actor: UserEntity, query: TicketQueryDTO) -> Page[TicketSummaryDTO]:
        """
        Raises:
            ValidationError: Unknown filter value or bad pagination
        """
        mood = parse_choice(TicketMood, query.mood, "mood")
        if not policy.can_view_mood(actor.role):
            mood = None

        criteria = TicketCriteria(
            status=parse_choice(TicketStatus, query.status, "status"),
            category=parse_choice(TicketCategory, query.category, "category"),
            priority=parse_choice(TicketPriority, query.priority, "priority"),
            mood=mood,
            search=(query.search or "").strip() or None,
            **scope_for(actor),
        )
        page_request = PageRequest.from_params(
            query.page,
            query.limit,
            default_limit=self.default_limit,
        )

        page = self.ticket_repo.find(criteria, page_request)
        return page.map(lambda t: TicketSummaryDTO.from_entity(t, actor.role))


class UpdateTicketService:
    """
    Use Case: Update a ticket with a batch of typed commands.

    Flow:
    1. Load the ticket and check the actor can see it
    2. Apply each command in order, checking the policy against the
       ticket state at that point
    3. Persist once, queue one event per effective change

    Any failing command aborts the whole batch: nothing is saved and
    no event is published.

    Example:
        service.execute(agent, UpdateTicketInputDTO(
            ticket_id=ticket.id,
            commands=(ChangeStatusCommand("Resolved", "Replaced the cable"),),
        ))
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        user_repo: UserRepository,
        uow: UnitOfWork,
    ):
        self.ticket_repo = ticket_repo
        self.user_repo = user_repo
        self.uow = uow

    def execute(self, actor: UserEntity, input_dto: UpdateTicketInputDTO) -> TicketOutputDTO:
        """
        Raises:
            EntityNotFoundError: Unknown ticket
            PermissionDeniedError: Ticket not visible, status not allowed,
                or field change by a non-staff actor
            ValidationError: Unknown value or invalid assignee
            BusinessRuleViolationError: Assigning a closed ticket
        """
        if not input_dto.commands:
            raise ValidationError("Nothing to update", field="commands")

        with self.uow:
            ticket = get_ticket_or_raise(self.ticket_repo, input_dto.ticket_id)
            ensure_can_view(actor, ticket)

            events = []
            for command in input_dto.commands:
                event = self._apply(actor, ticket, command)
                if event is not None:
                    events.append(event)

            if events:
                self.ticket_repo.save(ticket)
                for event in events:
                    self.uow.publish_event(event)

        logger.info(
            f"Ticket {ticket.ticket_number} updated by {actor.id}: "
            f"{len(events)} change(s)"
        )
        return TicketOutputDTO.from_entity(ticket, actor)

    def _apply(self, actor: UserEntity, ticket: TicketEntity, command):
        if isinstance(command, ChangeStatusCommand):
            return self._change_status(actor, ticket, command)
        if isinstance(command, ChangeCategoryCommand):
            return self._change_category(actor, ticket, command)
        if isinstance(command, ChangePriorityCommand):
            return self._change_priority(actor, ticket, command)
        if isinstance(command, ChangeAssignmentCommand):
            return self._change_assignment(actor, ticket, command)
        raise ValidationError(f"Unsupported command: {type(command).__name__}", field="commands")

    def _change_status(self, actor, ticket, command: ChangeStatusCommand):
        target = parse_choice(TicketStatus, command.status, "status")
        if target is None:
            raise ValidationError("Status is required", field="status")

        if not policy.can_change_status(actor, ticket, target):
            raise PermissionDeniedError(
                f"You cannot move this ticket to {target.value}",
                action="change_status",
            )

        old_status = ticket.status
        if not ticket.change_status(target, actor.to_ref(), command.comment):
            return None
        return TicketStatusChangedEvent(
            aggregate_id=ticket.id,
            old_status=old_status.value,
            new_status=target.value,
            changed_by_id=actor.id,
            comment=(command.comment or "").strip(),
        )

    def _require_field_manager(self, actor: UserEntity, action: str) -> None:
        if not policy.can_manage_ticket_fields(actor.role):
            raise PermissionDeniedError("Staff role required", action=action)

    def _change_category(self, actor, ticket, command: ChangeCategoryCommand):
        self._require_field_manager(actor, "change_category")
        category = parse_choice(TicketCategory, command.category, "category")
        if category is None:
            raise ValidationError("Category is required", field="category")

        old = ticket.category
        if not ticket.change_category(category, actor.to_ref(), command.comment):
            return None
        return TicketCategoryChangedEvent(
            aggregate_id=ticket.id,
            old_category=old.value,
            new_category=category.value,
            changed_by_id=actor.id,
        )

    def _change_priority(self, actor, ticket, command: ChangePriorityCommand):
        self._require_field_manager(actor, "change_priority")
        priority = parse_choice(TicketPriority, command.priority, "priority")
        if priority is None:
            raise ValidationError("Priority is required", field="priority")

        old = ticket.priority
        if not ticket.change_priority(priority, actor.to_ref(), command.comment):
            return None
        return TicketPriorityChangedEvent(
            aggregate_id=ticket.id,
            old_priority=old.value,
            new_priority=priority.value,
            changed_by_id=actor.id,
        )

    def _change_assignment(self, actor, ticket, command: ChangeAssignmentCommand):
        self._require_field_manager(actor, "assign_ticket")

        assignee_ref = None
        if command.assignee_id:
            assignee = self.user_repo.get_by_id(command.assignee_id)
            if not assignee or not assignee.is_active or not assignee.is_staff:
                raise ValidationError(
                    "Assignee must be an active staff member",
                    field="assignee_id",
                )
            assignee_ref = assignee.to_ref()

        if not ticket.assign_to(assignee_ref, actor.to_ref()):
            return None
        return TicketAssignedEvent(
            aggregate_id=ticket.id,
            assignee_id=assignee_ref.id if assignee_ref else None,
            assigned_by_id=actor.id,
        )


class AddCommentService:
    """
    Use Case: Comment on a ticket.

    Anyone who can see the ticket may comment; internal notes are
    reserved to staff.
    """

    def __init__(self, ticket_repo: TicketRepository, uow: UnitOfWork):
        self.ticket_repo = ticket_repo
        self.uow = uow

    def execute(self, actor: UserEntity, input_dto: AddCommentInputDTO) -> CommentOutputDTO:
        """
        Raises:
            ValidationError: Blank content ("Comment Required")
            EntityNotFoundError: Unknown ticket
            PermissionDeniedError: Ticket not visible or internal note by non-staff
        """
        if input_dto.is_internal and not policy.can_post_internal_comment(actor.role):
            raise PermissionDeniedError(
                "Only staff can post internal comments",
                action="post_internal_comment",
            )

        with self.uow:
            ticket = get_ticket_or_raise(self.ticket_repo, input_dto.ticket_id)
            ensure_can_view(actor, ticket)

            comment = ticket.add_comment(
                input_dto.content,
                author=actor.to_ref(),
                is_internal=input_dto.is_internal,
            )
            self.ticket_repo.save(ticket)

            self.uow.publish_event(
                CommentAddedEvent(
                    aggregate_id=ticket.id,
                    comment_id=comment.id,
                    author_id=actor.id,
                    is_internal=comment.is_internal,
                )
            )

        logger.info(f"Comment added to {ticket.ticket_number} by {actor.id}")
        return CommentOutputDTO.from_comment(comment)


class TicketStatsService:
    """
    Use Case: Dashboard statistics (staff only).

    Computed over the actor's scope: hr and it only count their queue.
    """

    def __init__(self, ticket_repo: TicketRepository):
        self.ticket_repo = ticket_repo

    def execute(self, actor: UserEntity) -> dict:
        if not actor.is_staff:
            raise PermissionDeniedError("Staff role required", action="ticket_stats")

        tickets = self.ticket_repo.list_matching(TicketCriteria(**scope_for(actor)))

        def count(enum_cls, attr: str) -> Dict[str, int]:
            counter = Counter(getattr(t, attr) for t in tickets)
            return {member.value: counter.get(member, 0) for member in enum_cls}

        resolution_hours = [t.resolution_hours for t in tickets if t.resolved_at is not None]
        months = Counter((t.created_at.year, t.created_at.month) for t in tickets)

        return {
            "total": len(tickets),
            "by_status": count(TicketStatus, "status"),
            "by_category": count(TicketCategory, "category"),
            "by_priority": count(TicketPriority, "priority"),
            "by_mood": count(TicketMood, "mood"),
            "avg_resolution_hours": _round(mean(resolution_hours) if resolution_hours else None),
            "monthly_trends": [
                {"year": year, "month": month, "count": months[(year, month)]}
                for year, month in sorted(months)
            ],
            "recent_tickets": [
                TicketSummaryDTO.from_entity(t, actor.role).to_dict()
                for t in tickets[:RECENT_TICKETS]
            ],
        }


class DepartmentStatsService:
    """
    Use Case: "Time traveler" forecast for a ticket category.

    Shown to a requester while their ticket is Open or In Progress:
    which requester departments file most tickets of this category,
    and how many steps and hours resolved ones usually take.
    """

    def __init__(self, ticket_repo: TicketRepository):
        self.ticket_repo = ticket_repo

    def execute(self, actor: UserEntity, category: str) -> dict:
        """
        Raises:
            ValidationError: Missing or unknown category
        """
        parsed = parse_choice(TicketCategory, category, "category")
        if parsed is None:
            raise ValidationError("Category is required", field="category")

        tickets = self.ticket_repo.list_matching(TicketCriteria(category=parsed))

        per_department = Counter(
            t.requester_department for t in tickets if t.requester_department
        )
        resolved = [t for t in tickets if t.resolved_at is not None]

        avg_steps = mean(len(t.status_history) for t in resolved) if resolved else None
        avg_hours = mean(t.resolution_hours for t in resolved) if resolved else None

        return {
            "department": parsed.value,
            "top_departments": [
                {"department": name, "count": total}
                for name, total in per_department.most_common(TOP_DEPARTMENTS)
            ],
            "avg_steps": _round(avg_steps),
            "avg_resolution_hours": _round(avg_hours),
        }
