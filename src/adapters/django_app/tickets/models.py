"""
Django Models for the Tickets domain.

These models are ADAPTERS: they persist the entities defined in
src/core/tickets/entities.py.

IMPORTANT:
- Models contain NO business logic
- Business logic lives in the Core entities
- Models are mapped to/from entities by the Mappers

Tables:
- tickets: the aggregate root row
- ticket_comments / ticket_status_history / ticket_field_history /
  ticket_attachments: children of the aggregate, append-only
- domain_events: Event Store

People are stored as snapshots (JSON ActorRef) plus an indexed id
column, so deleting a user never rewrites ticket history.
"""

from django.db import models
from django.utils import timezone


class TicketStatusChoices(models.TextChoices):
    """Mirrors TicketStatus of the Core."""
    OPEN = 'Open', 'Open'
    IN_PROGRESS = 'In Progress', 'In Progress'
    RESOLVED = 'Resolved', 'Resolved'
    CLOSED = 'Closed', 'Closed'


class TicketPriorityChoices(models.TextChoices):
    """Mirrors TicketPriority of the Core."""
    LOW = 'Low', 'Low'
    MEDIUM = 'Medium', 'Medium'
    HIGH = 'High', 'High'
    CRITICAL = 'Critical', 'Critical'


class TicketCategoryChoices(models.TextChoices):
    IT = 'IT', 'IT'
    HR = 'HR', 'HR'
    ADMIN = 'Admin', 'Admin'


class TicketMoodChoices(models.TextChoices):
    ANGRY = 'angry', 'Angry'
    FRUSTRATED = 'frustrated', 'Frustrated'
    NEUTRAL = 'neutral', 'Neutral'
    SATISFIED = 'satisfied', 'Satisfied'
    URGENT = 'urgent', 'Urgent'


class TicketModel(models.Model):
    """
    Persistence of the TicketEntity root.

    Fields:
        id: UUID primary key (generated by the entity)
        ticket_number: TKT-YYYYMMDD-XXXXXX
        requester_id / assignee_id: Indexed user ids (filters)
        requester / assignee: ActorRef snapshots
        requester_department: Indexed copy for department statistics
    """

    id = models.CharField(
        max_length=36,
        primary_key=True,
        editable=False,
        help_text="Ticket UUID"
    )

    ticket_number = models.CharField(
        max_length=32,
        unique=True,
        help_text="Human friendly reference"
    )

    title = models.CharField(max_length=200, db_index=True)

    description = models.TextField()

    category = models.CharField(
        max_length=20,
        choices=TicketCategoryChoices.choices,
        default=TicketCategoryChoices.IT,
        db_index=True,
    )

    status = models.CharField(
        max_length=20,
        choices=TicketStatusChoices.choices,
        default=TicketStatusChoices.OPEN,
        db_index=True,
    )

    priority = models.CharField(
        max_length=20,
        choices=TicketPriorityChoices.choices,
        default=TicketPriorityChoices.MEDIUM,
        db_index=True,
    )

    mood = models.CharField(
        max_length=20,
        choices=TicketMoodChoices.choices,
        default=TicketMoodChoices.NEUTRAL,
        db_index=True,
        help_text="AI-derived sentiment (staff only)"
    )

    requester_id = models.CharField(max_length=36, db_index=True)

    requester = models.JSONField(default=dict, help_text="Requester snapshot")

    requester_department = models.CharField(
        max_length=100,
        blank=True,
        default='',
        db_index=True,
    )

    assignee_id = models.CharField(max_length=36, null=True, blank=True, db_index=True)

    assignee = models.JSONField(null=True, blank=True, help_text="Assignee snapshot")

    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    updated_at = models.DateTimeField(default=timezone.now)

    resolved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'tickets'
        verbose_name = 'Ticket'
        verbose_name_plural = 'Tickets'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'created_at'], name='idx_ticket_status_created'),
            models.Index(fields=['category', 'created_at'], name='idx_ticket_category_created'),
            models.Index(fields=['requester_id', 'created_at'], name='idx_ticket_requester_created'),
        ]

    def __str__(self):
        return f"[{self.ticket_number}] {self.title}"

    def __repr__(self):
        return f"<TicketModel id={self.id[:8]} status={self.status}>"


class TicketCommentModel(models.Model):
    id = models.CharField(max_length=36, primary_key=True, editable=False)

    ticket = models.ForeignKey(
        TicketModel,
        on_delete=models.CASCADE,
        related_name='comments',
    )

    content = models.TextField()

    author_id = models.CharField(max_length=36, db_index=True)

    author = models.JSONField(default=dict)

    is_internal = models.BooleanField(default=False)

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'ticket_comments'
        ordering = ['created_at']

    def __str__(self):
        return f"Comment {self.id[:8]} on {self.ticket_id[:8]}"


class TicketStatusHistoryModel(models.Model):
    """One StatusChange; position keeps the append order."""

    id = models.BigAutoField(primary_key=True)

    ticket = models.ForeignKey(
        TicketModel,
        on_delete=models.CASCADE,
        related_name='status_history',
    )

    position = models.PositiveIntegerField()

    status = models.CharField(max_length=20, choices=TicketStatusChoices.choices)

    changed_by = models.JSONField(default=dict)

    changed_at = models.DateTimeField()

    comment = models.TextField(blank=True, default='')

    class Meta:
        db_table = 'ticket_status_history'
        ordering = ['position']
        constraints = [
            models.UniqueConstraint(
                fields=['ticket', 'position'],
                name='unique_status_history_position',
            ),
        ]

    def __str__(self):
        return f"{self.ticket_id[:8]} -> {self.status} @ {self.changed_at}"


class TicketFieldHistoryModel(models.Model):
    id = models.BigAutoField(primary_key=True)

    ticket = models.ForeignKey(
        TicketModel,
        on_delete=models.CASCADE,
        related_name='field_history',
    )

    position = models.PositiveIntegerField()

    field = models.CharField(max_length=20)

    old_value = models.CharField(max_length=200, null=True, blank=True)

    new_value = models.CharField(max_length=200, null=True, blank=True)

    changed_by = models.JSONField(default=dict)

    changed_at = models.DateTimeField()

    comment = models.TextField(blank=True, default='')

    class Meta:
        db_table = 'ticket_field_history'
        ordering = ['position']
        constraints = [
            models.UniqueConstraint(
                fields=['ticket', 'position'],
                name='unique_field_history_position',
            ),
        ]

    def __str__(self):
        return f"{self.ticket_id[:8]} {self.field}: {self.old_value} -> {self.new_value}"


class TicketAttachmentModel(models.Model):
    """Attachment metadata; files themselves live elsewhere."""

    id = models.BigAutoField(primary_key=True)

    ticket = models.ForeignKey(
        TicketModel,
        on_delete=models.CASCADE,
        related_name='attachments',
    )

    position = models.PositiveIntegerField()

    url = models.URLField(max_length=500)

    original_name = models.CharField(max_length=255, blank=True, default='')

    class Meta:
        db_table = 'ticket_attachments'
        ordering = ['position']

    def __str__(self):
        return self.original_name or self.url


class DomainEventModel(models.Model):
    """
    Generic Event Store for Domain Events.

    Keeps every event for:
    - Full audit trail
    - Replay
    - Integration with other systems
    """

    event_id = models.CharField(
        max_length=36,
        primary_key=True,
        help_text="Event UUID"
    )

    event_type = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Event type (e.g. TicketCreatedEvent)"
    )

    aggregate_type = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Aggregate type (e.g. Ticket)"
    )

    aggregate_id = models.CharField(
        max_length=36,
        db_index=True,
    )

    event_data = models.JSONField(default=dict)

    version = models.IntegerField(default=1, help_text="Event schema version")

    sequence = models.BigIntegerField(default=0, help_text="Position within the aggregate")

    occurred_at = models.DateTimeField()

    recorded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'domain_events'
        verbose_name = 'Domain Event'
        verbose_name_plural = 'Domain Events'
        ordering = ['recorded_at']
        indexes = [
            models.Index(fields=['aggregate_id', 'sequence'], name='idx_event_aggregate_seq'),
            models.Index(fields=['aggregate_type', 'recorded_at'], name='idx_event_type_recorded'),
            models.Index(fields=['event_type', 'recorded_at'], name='idx_event_etype_recorded'),
        ]

    def __str__(self):
        return f"{self.event_type} - {self.aggregate_id[:8]} @ {self.occurred_at}"
