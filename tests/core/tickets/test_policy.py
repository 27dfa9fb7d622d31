"""
Unit tests for the ticket status policy and visibility rules.
"""

import pytest

from src.core.accounts.entities import ActorRole
from src.core.tickets import policy
from src.core.tickets.entities import TicketCategory, TicketStatus


STAFF_ROLES = [ActorRole.ADMIN, ActorRole.HR, ActorRole.SUPER_ADMIN, ActorRole.IT]
ALL_STATUSES = [
    (TicketStatus.OPEN, "Open"),
    (TicketStatus.IN_PROGRESS, "In Progress"),
    (TicketStatus.RESOLVED, "Resolved"),
    (TicketStatus.CLOSED, "Closed"),
]


class TestStatusOptions:

    @pytest.mark.parametrize("role", STAFF_ROLES)
    @pytest.mark.parametrize("current", list(TicketStatus))
    def test_staff_get_every_status_in_order(self, role, current):
        assert policy.status_options(role, False, current) == ALL_STATUSES

    def test_staff_options_ignore_requester_flag(self):
        assert policy.status_options(ActorRole.IT, True, TicketStatus.OPEN) == ALL_STATUSES

    def test_it_on_resolved_ticket(self):
        options = policy.status_options(ActorRole.IT, False, TicketStatus.RESOLVED)
        assert [status.value for status, _ in options] == [
            "Open", "In Progress", "Resolved", "Closed",
        ]

    def test_requester_can_reopen_closed_ticket(self):
        options = policy.status_options(ActorRole.EMPLOYEE, True, TicketStatus.CLOSED)
        assert options == [(TicketStatus.OPEN, "Reopen Ticket")]

    @pytest.mark.parametrize(
        "current",
        [TicketStatus.OPEN, TicketStatus.IN_PROGRESS, TicketStatus.RESOLVED],
    )
    def test_requester_can_close_unclosed_ticket(self, current):
        options = policy.status_options(ActorRole.EMPLOYEE, True, current)
        assert options == [(TicketStatus.CLOSED, "Close Ticket")]

    @pytest.mark.parametrize("current", list(TicketStatus))
    def test_employee_not_requester_gets_nothing(self, current):
        assert policy.status_options(ActorRole.EMPLOYEE, False, current) == []

    def test_same_input_same_output(self):
        first = policy.status_options(ActorRole.EMPLOYEE, True, TicketStatus.OPEN)
        second = policy.status_options(ActorRole.EMPLOYEE, True, TicketStatus.OPEN)
        assert first == second


class TestStatusOptionsFor:

    def test_missing_actor_or_ticket_is_empty(self, employee, make_ticket):
        ticket = make_ticket(employee)
        assert policy.status_options_for(None, ticket) == []
        assert policy.status_options_for(employee, None) == []

    def test_requester_detection(self, employee, other_employee, make_ticket):
        ticket = make_ticket(employee)

        assert policy.is_requester(employee, ticket) is True
        assert policy.is_requester(other_employee, ticket) is False
        assert policy.status_options_for(employee, ticket) == [
            (TicketStatus.CLOSED, "Close Ticket"),
        ]
        assert policy.status_options_for(other_employee, ticket) == []

    def test_staff_who_filed_a_ticket_is_not_requester(self, it_agent, make_ticket):
        ticket = make_ticket(it_agent)
        assert policy.is_requester(it_agent, ticket) is False
        assert policy.status_options_for(it_agent, ticket) == ALL_STATUSES

    def test_can_change_status(self, employee, it_agent, make_ticket):
        ticket = make_ticket(employee)

        assert policy.can_change_status(employee, ticket, TicketStatus.CLOSED)
        assert not policy.can_change_status(employee, ticket, TicketStatus.RESOLVED)
        assert not policy.can_change_status(employee, ticket, TicketStatus.OPEN)
        assert policy.can_change_status(it_agent, ticket, TicketStatus.OPEN)


class TestVisibility:

    @pytest.mark.parametrize("role", STAFF_ROLES)
    def test_staff_see_mood_and_internal_comments(self, role):
        assert policy.can_view_mood(role)
        assert policy.can_view_internal_comments(role)
        assert policy.can_post_internal_comment(role)
        assert policy.can_manage_ticket_fields(role)

    def test_employee_sees_neither(self):
        assert not policy.can_view_mood(ActorRole.EMPLOYEE)
        assert not policy.can_view_internal_comments(ActorRole.EMPLOYEE)
        assert not policy.can_post_internal_comment(ActorRole.EMPLOYEE)
        assert not policy.can_manage_ticket_fields(ActorRole.EMPLOYEE)

    def test_unknown_role_sees_nothing(self):
        assert not policy.can_view_mood(None)

    def test_can_view_ticket(self, employee, other_employee, hr_agent, make_ticket):
        ticket = make_ticket(employee)

        assert policy.can_view_ticket(employee, ticket)
        assert not policy.can_view_ticket(other_employee, ticket)
        assert policy.can_view_ticket(hr_agent, ticket)

    def test_department_queues(self):
        assert policy.queue_for(ActorRole.HR) == TicketCategory.HR
        assert policy.queue_for(ActorRole.IT) == TicketCategory.IT
        assert policy.queue_for(ActorRole.ADMIN) is None
        assert policy.queue_for(ActorRole.SUPER_ADMIN) is None
