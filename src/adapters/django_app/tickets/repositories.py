"""
Repository Implementations - Django ORM.

Implement the ports defined in src/core/tickets/ports.py and
src/core/shared/interfaces.py:
- DjangoTicketRepository: TicketRepository
- DjangoEventStore: EventStore
"""

from typing import Any, Dict, List, Optional
import logging

from django.db import transaction
from django.db.models import Max, Q, QuerySet

from src.core.shared.events import DomainEvent
from src.core.shared.interfaces import EventStore
from src.core.shared.pagination import Page, PageRequest
from src.core.tickets.entities import TicketEntity
from src.core.tickets.ports import TicketCriteria

from .mappers import DomainEventMapper, TicketMapper
from .models import (
    DomainEventModel,
    TicketAttachmentModel,
    TicketCommentModel,
    TicketFieldHistoryModel,
    TicketModel,
    TicketStatusHistoryModel,
)

logger = logging.getLogger(__name__)


class DjangoTicketRepository:
    """
    Django implementation of TicketRepository.

    The aggregate is written as one root row plus append-only child
    rows; only children not stored yet are inserted.

    Example:
        repo = DjangoTicketRepository()
        repo.save(ticket)
        ticket = repo.get_by_id(ticket.id)
        page = repo.find(TicketCriteria(status=TicketStatus.OPEN), PageRequest())
    """

    def __init__(self):
        self._mapper = TicketMapper()

    def _queryset(self) -> QuerySet:
        return TicketModel.objects.prefetch_related(*TicketMapper.CHILD_RELATIONS)

    def save(self, ticket: TicketEntity) -> None:
        """
        Persist the ticket (create or update).

        Runs in its own atomic block so it is safe with or without an
        enclosing Unit of Work.
        """
        logger.debug(f"Saving ticket: {ticket.id}")

        with transaction.atomic():
            model, _ = TicketModel.objects.update_or_create(
                id=ticket.id,
                defaults=self._mapper.root_fields(ticket),
            )

            stored_comment_ids = set(model.comments.values_list("id", flat=True))
            TicketCommentModel.objects.bulk_create(
                self._mapper.new_comments(ticket, stored_comment_ids)
            )
            TicketStatusHistoryModel.objects.bulk_create(
                self._mapper.new_status_history(ticket, model.status_history.count())
            )
            TicketFieldHistoryModel.objects.bulk_create(
                self._mapper.new_field_history(ticket, model.field_history.count())
            )
            TicketAttachmentModel.objects.bulk_create(
                self._mapper.new_attachments(ticket, model.attachments.count())
            )

        logger.debug(f"Ticket saved: {ticket.ticket_number}")

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        try:
            model = self._queryset().get(id=ticket_id)
        except TicketModel.DoesNotExist:
            logger.debug(f"Ticket not found: {ticket_id}")
            return None
        return self._mapper.to_entity(model)

    def delete(self, ticket_id: str) -> None:
        deleted, _ = TicketModel.objects.filter(id=ticket_id).delete()
        if deleted:
            logger.info(f"Ticket deleted: {ticket_id}")

    def list_all(self) -> List[TicketEntity]:
        return self._mapper.to_entity_list(self._queryset().order_by("-created_at"))

    def _filtered(self, criteria: TicketCriteria) -> QuerySet:
        queryset = self._queryset()

        if criteria.status:
            queryset = queryset.filter(status=criteria.status.value)
        if criteria.category:
            queryset = queryset.filter(category=criteria.category.value)
        if criteria.queue:
            queryset = queryset.filter(category=criteria.queue.value)
        if criteria.priority:
            queryset = queryset.filter(priority=criteria.priority.value)
        if criteria.mood:
            queryset = queryset.filter(mood=criteria.mood.value)
        if criteria.requester_id:
            queryset = queryset.filter(requester_id=criteria.requester_id)
        if criteria.search:
            queryset = queryset.filter(
                Q(title__icontains=criteria.search)
                | Q(description__icontains=criteria.search)
            )

        return queryset.order_by("-created_at")

    def find(self, criteria: TicketCriteria, page_request: PageRequest) -> Page[TicketEntity]:
        queryset = self._filtered(criteria)
        total = queryset.count()
        window = queryset[page_request.offset:page_request.offset + page_request.limit]

        return Page(
            items=self._mapper.to_entity_list(window),
            total=total,
            page=page_request.page,
            limit=page_request.limit,
        )

    def list_matching(self, criteria: TicketCriteria) -> List[TicketEntity]:
        return self._mapper.to_entity_list(self._filtered(criteria))

    def count(self) -> int:
        return TicketModel.objects.count()


class DjangoEventStore(EventStore):
    """
    Event Store on the Django ORM.

    Keeps Domain Events of every aggregate for audit and replay.
    """

    def append(self, event: DomainEvent, sequence: int = 0) -> None:
        DomainEventMapper.to_model(event=event, sequence=sequence).save()
        logger.debug(f"Event stored: {event.event_type} for {event.aggregate_id}")

    def get_events_for_aggregate(
        self,
        aggregate_id: str,
        since_sequence: int = 0,
    ) -> List[Dict[str, Any]]:
        events = (
            DomainEventModel.objects
            .filter(aggregate_id=aggregate_id, sequence__gte=since_sequence)
            .order_by("sequence")
        )
        return [
            {
                "event_id": e.event_id,
                "event_type": e.event_type,
                "aggregate_id": e.aggregate_id,
                "aggregate_type": e.aggregate_type,
                "event_data": e.event_data,
                "sequence": e.sequence,
                "occurred_at": e.occurred_at,
            }
            for e in events
        ]

    def last_sequence(self, aggregate_id: str) -> int:
        result = DomainEventModel.objects.filter(aggregate_id=aggregate_id).aggregate(
            last=Max("sequence")
        )
        return result["last"] or 0
