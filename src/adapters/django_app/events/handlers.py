"""
Event Handlers - asynchronous processing of domain events.

Run by Celery workers when domain events are published with
EVENT_PUBLISHER_MODE=celery. This gives:

- Decoupling: producers do not know their consumers
- Scalability: work spread across workers
- Resilience: automatic retries

Kinds of handlers:
- Notification: tell requesters, assignees and queues what happened
- Aggregation: metrics
- Housekeeping: scheduled by Celery Beat

Pattern:
    @shared_task(bind=True, ...)
    def handle_<event>(self, event_data: dict) -> None:
        ...

event_data is DomainEvent.to_dict(): envelope keys plus a "data" dict.
"""

import logging
from collections import Counter
from datetime import timedelta
from typing import Any, Dict

from celery import shared_task

from src.core.shared.clock import utcnow

logger = logging.getLogger(__name__)

ESCALATION_PRIORITIES = ("High", "Critical")


def _payload(event_data: Dict[str, Any]) -> Dict[str, Any]:
    return event_data.get("data") or {}


# =============================================================================
# Event Handlers - Tickets
# =============================================================================

@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_ticket_created(self, event_data: Dict[str, Any]) -> None:
    """
    Handler for TicketCreatedEvent.

    Actions:
    - Alert the department queue for High/Critical tickets
    - Record a metric
    """
    ticket_id = event_data.get("aggregate_id")
    data = _payload(event_data)
    priority = data.get("priority", "Medium")
    category = data.get("category", "IT")

    logger.info(
        f"[HANDLER] TicketCreated: {data.get('ticket_number')} | "
        f"requester={data.get('requester_id')} | {category}/{priority}"
    )

    if priority in ESCALATION_PRIORITIES:
        notify_department_queue.delay(
            ticket_id=ticket_id,
            category=category,
            message=f"New {priority} ticket: {data.get('title', '')}",
        )

    record_metric.delay(
        metric_name="tickets_created",
        value=1,
        tags={"category": category, "priority": priority},
    )


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_ticket_status_changed(self, event_data: Dict[str, Any]) -> None:
    """
    Handler for TicketStatusChangedEvent.

    Actions:
    - Record a metric per transition
    """
    ticket_id = event_data.get("aggregate_id")
    data = _payload(event_data)
    old_status = data.get("old_status")
    new_status = data.get("new_status")

    logger.info(
        f"[HANDLER] TicketStatusChanged: {ticket_id} | "
        f"{old_status} -> {new_status} by {data.get('changed_by_id')}"
    )

    record_metric.delay(
        metric_name="ticket_status_changes",
        value=1,
        tags={"from": old_status, "to": new_status},
    )


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_ticket_assigned(self, event_data: Dict[str, Any]) -> None:
    """Handler for TicketAssignedEvent: tell the new assignee."""
    ticket_id = event_data.get("aggregate_id")
    assignee_id = _payload(event_data).get("assignee_id")

    logger.info(f"[HANDLER] TicketAssigned: {ticket_id} | assignee={assignee_id}")

    if assignee_id:
        notify_user.delay(
            user_id=assignee_id,
            message=f"You were assigned ticket {ticket_id}",
        )


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_ticket_priority_changed(self, event_data: Dict[str, Any]) -> None:
    """
    Handler for TicketPriorityChangedEvent.

    Escalations to High/Critical alert the queue.
    """
    ticket_id = event_data.get("aggregate_id")
    data = _payload(event_data)
    new_priority = data.get("new_priority")

    logger.info(
        f"[HANDLER] TicketPriorityChanged: {ticket_id} | "
        f"{data.get('old_priority')} -> {new_priority}"
    )

    if new_priority in ESCALATION_PRIORITIES:
        notify_department_queue.delay(
            ticket_id=ticket_id,
            category=None,
            message=f"Ticket escalated to {new_priority}",
        )


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_ticket_category_changed(self, event_data: Dict[str, Any]) -> None:
    ticket_id = event_data.get("aggregate_id")
    data = _payload(event_data)
    new_category = data.get("new_category")

    logger.info(
        f"[HANDLER] TicketCategoryChanged: {ticket_id} | "
        f"{data.get('old_category')} -> {new_category}"
    )

    notify_department_queue.delay(
        ticket_id=ticket_id,
        category=new_category,
        message="Ticket moved to your queue",
    )


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_comment_added(self, event_data: Dict[str, Any]) -> None:
    """Handler for CommentAddedEvent. Internal notes are not forwarded."""
    ticket_id = event_data.get("aggregate_id")
    data = _payload(event_data)

    logger.info(
        f"[HANDLER] CommentAdded: {ticket_id} | "
        f"author={data.get('author_id')} internal={data.get('is_internal')}"
    )

    record_metric.delay(
        metric_name="ticket_comments",
        value=1,
        tags={"internal": str(bool(data.get("is_internal"))).lower()},
    )


# =============================================================================
# Event Handlers - Accounts
# =============================================================================

@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_user_registered(self, event_data: Dict[str, Any]) -> None:
    """Handler for UserRegisteredEvent: welcome message."""
    user_id = event_data.get("aggregate_id")
    data = _payload(event_data)

    logger.info(f"[HANDLER] UserRegistered: {user_id} | role={data.get('role')}")

    notify_user.delay(
        user_id=user_id,
        message="Welcome to the help desk",
    )


# =============================================================================
# Event Dispatcher (Router)
# =============================================================================

EVENT_HANDLERS = {
    "TicketCreatedEvent": handle_ticket_created,
    "TicketStatusChangedEvent": handle_ticket_status_changed,
    "TicketAssignedEvent": handle_ticket_assigned,
    "TicketPriorityChangedEvent": handle_ticket_priority_changed,
    "TicketCategoryChangedEvent": handle_ticket_category_changed,
    "CommentAddedEvent": handle_comment_added,
    "UserRegisteredEvent": handle_user_registered,
}


@shared_task(bind=True, max_retries=5, default_retry_delay=30)
def dispatch_domain_event(self, event_type: str, event_data: Dict[str, Any]) -> None:
    """
    Entry point for every domain event.

    Routes the event to its handler task.

    Args:
        event_type: Event class name (e.g. "TicketCreatedEvent")
        event_data: Serialized event
    """
    handler = EVENT_HANDLERS.get(event_type)

    if handler:
        logger.info(f"[DISPATCHER] Routing {event_type}")
        handler.delay(event_data)
    else:
        logger.warning(f"[DISPATCHER] No handler for {event_type}")


# =============================================================================
# Notification Tasks
# =============================================================================

@shared_task(bind=True, max_retries=3, default_retry_delay=120)
def notify_user(self, user_id: str, message: str) -> bool:
    """
    Email a user through the configured Django email backend.

    Unknown or inactive users, and users without an email, are skipped.
    SMTP failures are retried.

    Returns:
        True if the message was handed to the email backend
    """
    from django.conf import settings
    from django.core.mail import send_mail

    from src.config.container import get_container

    user = get_container().user_repository().get_by_id(user_id)
    if user is None or not user.is_active or not user.email:
        logger.warning(f"[NOTIFICATION] Skipped {user_id}: no active user with an email")
        return False

    try:
        send_mail(
            subject=f"{settings.EMAIL_SUBJECT_PREFIX}{message}",
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[user.email],
        )
    except OSError as e:
        logger.error(f"[NOTIFICATION] Email to {user_id} failed: {e}")
        raise self.retry(exc=e)

    logger.info(f"[NOTIFICATION] EMAIL to {user_id}: {message}")
    return True


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def notify_department_queue(self, ticket_id: str, category: str, message: str) -> None:
    """
    Alert the staff working a queue.

    Args:
        ticket_id: Ticket concerned
        category: Queue (IT/HR/Admin); None = every queue
        message: Text of the alert
    """
    logger.info(f"[NOTIFICATION] Queue {category or 'ALL'}: ticket {ticket_id} - {message}")


# =============================================================================
# Metric Tasks
# =============================================================================

@shared_task(bind=True, ignore_result=True)
def record_metric(self, metric_name: str, value: float, tags: Dict[str, str] = None) -> None:
    logger.info(f"[METRIC] {metric_name}={value} | tags={tags or {}}")


# =============================================================================
# Scheduled Tasks (Beat)
# =============================================================================

@shared_task(bind=True)
def generate_daily_report(self) -> Dict[str, Any]:
    """
    Daily ticket counts by status and category.

    Run by Celery Beat.
    """
    logger.info("[SCHEDULED] Building daily report...")

    from src.config.container import get_container

    tickets = get_container().ticket_repository().list_all()
    report = {
        "date": utcnow().date().isoformat(),
        "total_tickets": len(tickets),
        "by_status": dict(Counter(t.status.value for t in tickets)),
        "by_category": dict(Counter(t.category.value for t in tickets)),
    }

    logger.info(f"[SCHEDULED] Daily report: {report}")
    return report


@shared_task(bind=True)
def cleanup_old_events(self, days: int = 90) -> int:
    """
    Delete stored events older than `days`.

    Run weekly by Celery Beat.

    Returns:
        Number of deleted events
    """
    logger.info(f"[SCHEDULED] Removing events older than {days} days...")

    from src.adapters.django_app.tickets.models import DomainEventModel

    cutoff = utcnow() - timedelta(days=days)
    deleted, _ = DomainEventModel.objects.filter(occurred_at__lt=cutoff).delete()

    logger.info(f"[SCHEDULED] {deleted} events removed")
    return deleted
