"""
End-to-end ticket lifecycle through the HTTP API.

Covers queue routing, re-categorisation between departments,
resolution, closing and reopening by the requester, and the events
left in the Event Store.

Run with: pytest --run-integration
"""

import pytest
from django.test import Client

from src.adapters.django_app.accounts.repositories import DjangoUserRepository
from src.adapters.django_app.accounts.security import DjangoPasswordHasher
from src.adapters.django_app.tickets.repositories import DjangoEventStore
from src.core.accounts.entities import ActorRole, UserEntity

PASSWORD = "secret123"

pytestmark = [pytest.mark.django_db, pytest.mark.integration]


class Actor:
    """A signed-in user talking JSON to the API."""

    def __init__(self, client, name, email, role, department):
        user = UserEntity.create(
            name=name,
            email=email,
            password_hash=DjangoPasswordHasher().hash(PASSWORD),
            role=role,
            department=department,
        )
        DjangoUserRepository().save(user)
        self.id = user.id
        self.client = client

        response = client.post(
            "/api/auth/login/",
            data={"email": email, "password": PASSWORD},
            content_type="application/json",
        )
        self.token = response.json()["data"]["token"]

    def call(self, method, path, body=None):
        kwargs = {"HTTP_AUTHORIZATION": f"Bearer {self.token}"}
        if body is not None:
            kwargs.update(data=body, content_type="application/json")
        return getattr(self.client, method)(path, **kwargs)

    def data(self, method, path, body=None):
        response = self.call(method, path, body)
        assert response.json()["success"], response.content
        return response.json()["data"]

    def visible_ids(self):
        return [t["id"] for t in self.data("get", "/api/tickets/")]


@pytest.fixture
def actors():
    client = Client()
    return {
        "employee": Actor(client, "Ana Employee", "ana@example.com", ActorRole.EMPLOYEE, "Finance"),
        "hr": Actor(client, "Helga Agent", "helga@example.com", ActorRole.HR, "HR"),
        "it": Actor(client, "Ivan Agent", "ivan@example.com", ActorRole.IT, "IT"),
    }


def test_ticket_lifecycle(actors):
    employee, hr, it = actors["employee"], actors["hr"], actors["it"]

    # Filed and routed to HR by the keyword classifier
    ticket = employee.data("post", "/api/tickets/", {
        "title": "Salary missing",
        "description": "My salary was not paid this month",
    })
    ticket_id = ticket["id"]
    assert ticket["category"] == "HR"
    assert hr.visible_ids() == [ticket_id]
    assert it.visible_ids() == []

    # HR hands it over to IT; it leaves the HR queue
    hr.data("patch", f"/api/tickets/{ticket_id}/", {
        "category": "IT",
        "categoryComment": "Payroll portal login issue",
    })
    assert it.visible_ids() == [ticket_id]
    assert hr.visible_ids() == []

    # IT works and resolves it
    it.data("patch", f"/api/tickets/{ticket_id}/", {"status": "In Progress", "assignedTo": it.id})
    resolved = it.data("patch", f"/api/tickets/{ticket_id}/", {
        "status": "Resolved",
        "statusComment": "Portal password reset",
    })
    assert resolved["resolved_at"] is not None
    assert resolved["assignee"]["id"] == it.id

    # The requester may only close, then reopen
    options = employee.data("get", f"/api/tickets/{ticket_id}/status-options/")
    assert options == [{"value": "Closed", "label": "Close Ticket"}]

    closed = employee.data("patch", f"/api/tickets/{ticket_id}/", {"status": "Closed"})
    assert closed["status"] == "Closed"

    reopened = employee.data("patch", f"/api/tickets/{ticket_id}/", {"status": "Open"})
    assert reopened["status"] == "Open"
    assert reopened["resolved_at"] is None
    assert [h["status"] for h in reopened["status_history"]] == [
        "Open", "In Progress", "Resolved", "Closed", "Open",
    ]

    events = DjangoEventStore().get_events_for_aggregate(ticket_id)
    assert [e["event_type"] for e in events] == [
        "TicketCreatedEvent",
        "TicketCategoryChangedEvent",
        "TicketStatusChangedEvent",
        "TicketAssignedEvent",
        "TicketStatusChangedEvent",
        "TicketStatusChangedEvent",
        "TicketStatusChangedEvent",
    ]
    assert [e["sequence"] for e in events] == list(range(1, 8))

    forecast = it.data("get", "/api/tickets/department-stats/IT/")
    assert forecast["top_departments"] == [{"department": "Finance", "count": 1}]
