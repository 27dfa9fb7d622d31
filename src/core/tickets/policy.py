"""
Ticket Status Policy and related visibility rules.

Pure functions of (actor role, actor identity, ticket state). The
same rules populate the status selector on the client and are
enforced by the update use case on the server.

Rule table for status options:
    staff (admin, hr, super-admin, it) → all four statuses, any time
    requester employee, ticket Closed   → [Open "Reopen Ticket"]
    requester employee, otherwise       → [Closed "Close Ticket"]
    anyone else                         → []
"""

from typing import List, Optional, Tuple

from src.core.accounts.entities import ActorRole, UserEntity

from .entities import TicketCategory, TicketEntity, TicketStatus


StatusOption = Tuple[TicketStatus, str]

STATUS_ORDER = (
    TicketStatus.OPEN,
    TicketStatus.IN_PROGRESS,
    TicketStatus.RESOLVED,
    TicketStatus.CLOSED,
)

REOPEN_LABEL = "Reopen Ticket"
CLOSE_LABEL = "Close Ticket"

# Queue each department role works on; roles absent here see every queue.
ROLE_QUEUES = {
    ActorRole.HR: TicketCategory.HR,
    ActorRole.IT: TicketCategory.IT,
}


def is_staff(role: Optional[ActorRole]) -> bool:
    return role is not None and role.is_staff


def status_options(
    role: ActorRole,
    is_requester: bool,
    current_status: TicketStatus,
) -> List[StatusOption]:
    """
    Statuses the actor may move the ticket to.

    Args:
        role: Role of the actor
        is_requester: True iff the actor is an employee and filed the ticket
        current_status: Current ticket status

    Returns:
        Ordered list of (target_status, display_label)
    """
    if is_staff(role):
        return [(status, status.value) for status in STATUS_ORDER]

    if is_requester:
        if current_status == TicketStatus.CLOSED:
            return [(TicketStatus.OPEN, REOPEN_LABEL)]
        return [(TicketStatus.CLOSED, CLOSE_LABEL)]

    return []


def is_requester(actor: UserEntity, ticket: TicketEntity) -> bool:
    return actor.role == ActorRole.EMPLOYEE and ticket.is_requested_by(actor.id)


def status_options_for(
    actor: Optional[UserEntity],
    ticket: Optional[TicketEntity],
) -> List[StatusOption]:
    """
    status_options for a loaded actor and ticket.

    Either being absent (still loading) yields [] rather than an error.
    """
    if actor is None or ticket is None:
        return []
    return status_options(actor.role, is_requester(actor, ticket), ticket.status)


def can_change_status(actor: UserEntity, ticket: TicketEntity, target: TicketStatus) -> bool:
    """True if target is one of the actor's status options."""
    allowed = [status for status, _ in status_options_for(actor, ticket)]
    return target in allowed


def can_view_mood(role: Optional[ActorRole]) -> bool:
    return is_staff(role)


def can_view_internal_comments(role: Optional[ActorRole]) -> bool:
    return is_staff(role)


def can_post_internal_comment(role: Optional[ActorRole]) -> bool:
    return is_staff(role)


def can_manage_ticket_fields(role: Optional[ActorRole]) -> bool:
    """Category, priority and assignment changes."""
    return is_staff(role)


def can_view_ticket(actor: UserEntity, ticket: TicketEntity) -> bool:
    if actor.is_staff:
        return True
    return ticket.is_requested_by(actor.id)


def queue_for(role: ActorRole) -> Optional[TicketCategory]:
    """Category a staff role is scoped to in listings (None = all)."""
    return ROLE_QUEUES.get(role)
