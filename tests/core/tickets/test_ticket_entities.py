"""
Unit tests for the Ticket aggregate.

Covers creation rules, history recording and vocabulary parsing.
"""

import pytest

from src.core.shared.exceptions import BusinessRuleViolationError, ValidationError
from src.core.tickets.entities import (
    Attachment,
    TicketCategory,
    TicketEntity,
    TicketMood,
    TicketPriority,
    TicketStatus,
)


@pytest.fixture
def ticket(employee):
    return TicketEntity.create(
        title="Printer jams on every page",
        description="The 3rd floor printer jams as soon as I print anything",
        requester=employee.to_ref(),
        priority=TicketPriority.HIGH,
    )


class TestTicketCreation:

    def test_create_sets_defaults(self, ticket, employee):
        assert ticket.status == TicketStatus.OPEN
        assert ticket.category == TicketCategory.IT
        assert ticket.mood == TicketMood.NEUTRAL
        assert ticket.priority == TicketPriority.HIGH
        assert ticket.requester.id == employee.id
        assert ticket.assignee is None
        assert ticket.resolved_at is None

    def test_ticket_number_format(self, ticket):
        assert ticket.ticket_number.startswith(f"TKT-{ticket.created_at:%Y%m%d}-")
        assert len(ticket.ticket_number.split("-")[-1]) == 6

    def test_initial_history_entry(self, ticket, employee):
        assert len(ticket.status_history) == 1
        entry = ticket.status_history[0]
        assert entry.status == TicketStatus.OPEN
        assert entry.changed_by.id == employee.id

    def test_text_is_trimmed(self, employee):
        ticket = TicketEntity.create(
            title="  VPN down  ",
            description="  Cannot reach the VPN from home  ",
            requester=employee.to_ref(),
        )
        assert ticket.title == "VPN down"
        assert ticket.description == "Cannot reach the VPN from home"

    @pytest.mark.parametrize("title", ["", "   ", "ab", "x" * 201])
    def test_invalid_title(self, employee, title):
        with pytest.raises(ValidationError) as exc_info:
            TicketEntity.create(
                title=title,
                description="A perfectly valid description",
                requester=employee.to_ref(),
            )
        assert exc_info.value.field == "title"

    @pytest.mark.parametrize("description", ["", "too short", "x" * 5001])
    def test_invalid_description(self, employee, description):
        with pytest.raises(ValidationError) as exc_info:
            TicketEntity.create(
                title="Valid title",
                description=description,
                requester=employee.to_ref(),
            )
        assert exc_info.value.field == "description"

    def test_requester_required(self):
        with pytest.raises(ValidationError):
            TicketEntity.create(
                title="Valid title",
                description="A perfectly valid description",
                requester=None,
            )

    def test_at_most_five_attachments(self, employee):
        attachments = [Attachment(url=f"https://files.example.com/{i}") for i in range(6)]
        with pytest.raises(ValidationError) as exc_info:
            TicketEntity.create(
                title="Valid title",
                description="A perfectly valid description",
                requester=employee.to_ref(),
                attachments=attachments,
            )
        assert exc_info.value.field == "attachments"


class TestStatusChanges:

    def test_change_appends_history(self, ticket, it_agent):
        changed = ticket.change_status(
            TicketStatus.IN_PROGRESS,
            it_agent.to_ref(),
            comment="Looking into it",
        )

        assert changed is True
        assert ticket.status == TicketStatus.IN_PROGRESS
        assert len(ticket.status_history) == 2
        entry = ticket.status_history[-1]
        assert entry.status == TicketStatus.IN_PROGRESS
        assert entry.changed_by.id == it_agent.id
        assert entry.comment == "Looking into it"
        assert entry.changed_at is not None

    def test_history_is_append_only(self, ticket, it_agent):
        first = ticket.status_history[0]
        ticket.change_status(TicketStatus.IN_PROGRESS, it_agent.to_ref())
        ticket.change_status(TicketStatus.RESOLVED, it_agent.to_ref())

        assert ticket.status_history[0] is first
        assert [e.status for e in ticket.status_history] == [
            TicketStatus.OPEN,
            TicketStatus.IN_PROGRESS,
            TicketStatus.RESOLVED,
        ]

    def test_same_status_records_nothing(self, ticket, it_agent):
        assert ticket.change_status(TicketStatus.OPEN, it_agent.to_ref()) is False
        assert len(ticket.status_history) == 1
        assert ticket.field_history == []

    def test_resolved_at_kept_on_close_and_cleared_on_reopen(self, ticket, it_agent):
        ticket.change_status(TicketStatus.RESOLVED, it_agent.to_ref())
        resolved_at = ticket.resolved_at
        assert resolved_at is not None

        ticket.change_status(TicketStatus.CLOSED, it_agent.to_ref())
        assert ticket.resolved_at == resolved_at

        ticket.change_status(TicketStatus.OPEN, it_agent.to_ref())
        assert ticket.resolved_at is None
        assert ticket.resolution_hours is None

    def test_status_change_recorded_in_field_history(self, ticket, it_agent):
        ticket.change_status(TicketStatus.CLOSED, it_agent.to_ref())

        change = ticket.field_history[-1]
        assert change.field_name == "status"
        assert change.old_value == "Open"
        assert change.new_value == "Closed"


class TestFieldChanges:

    def test_priority_and_category(self, ticket, it_agent):
        assert ticket.change_priority(TicketPriority.CRITICAL, it_agent.to_ref())
        assert ticket.change_category(TicketCategory.ADMIN, it_agent.to_ref(), "Facilities")

        assert [c.field_name for c in ticket.field_history] == ["priority", "category"]
        assert ticket.field_history[-1].comment == "Facilities"

    def test_unchanged_values_record_nothing(self, ticket, it_agent):
        assert not ticket.change_priority(TicketPriority.HIGH, it_agent.to_ref())
        assert not ticket.change_category(TicketCategory.IT, it_agent.to_ref())
        assert ticket.field_history == []

    def test_assign_and_unassign(self, ticket, it_agent, admin):
        assert ticket.assign_to(it_agent.to_ref(), admin.to_ref())
        assert ticket.assignee.id == it_agent.id
        assert ticket.field_history[-1].new_value == it_agent.name

        assert ticket.assign_to(None, admin.to_ref())
        assert ticket.assignee is None
        assert ticket.field_history[-1].old_value == it_agent.name

    def test_cannot_assign_closed_ticket(self, ticket, it_agent):
        ticket.change_status(TicketStatus.CLOSED, it_agent.to_ref())

        with pytest.raises(BusinessRuleViolationError) as exc_info:
            ticket.assign_to(it_agent.to_ref(), it_agent.to_ref())
        assert exc_info.value.rule == "closed_ticket_cannot_be_assigned"


class TestComments:

    def test_add_comment(self, ticket, employee):
        comment = ticket.add_comment("  Still broken  ", employee.to_ref())

        assert comment.content == "Still broken"
        assert comment.is_internal is False
        assert ticket.comments == [comment]

    def test_blank_comment_rejected(self, ticket, employee):
        with pytest.raises(ValidationError) as exc_info:
            ticket.add_comment("   ", employee.to_ref())
        assert exc_info.value.message == "Comment Required"


class TestVocabularies:

    @pytest.mark.parametrize("raw", ["In Progress", "IN_PROGRESS", "in progress", "in-progress"])
    def test_status_from_string(self, raw):
        assert TicketStatus.from_string(raw) == TicketStatus.IN_PROGRESS

    def test_unknown_value(self):
        with pytest.raises(ValueError):
            TicketPriority.from_string("Whenever")

    def test_finished_statuses(self):
        assert TicketStatus.RESOLVED.is_finished
        assert TicketStatus.CLOSED.is_finished
        assert not TicketStatus.OPEN.is_finished
