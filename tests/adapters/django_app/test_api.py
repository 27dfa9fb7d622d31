"""
Tests for the JSON API.

Requests go through django.test.Client against the full URL
configuration, an in-memory SQLite database and the real container
(Django repositories, Django Unit of Work, JWT tokens). The language
model has no key, so assistant features answer with their fallbacks.
"""

import pytest
from django.test import Client

from src.adapters.django_app.accounts.repositories import DjangoUserRepository
from src.adapters.django_app.accounts.security import DjangoPasswordHasher
from src.adapters.django_app.tickets.models import DomainEventModel, TicketModel
from src.core.accounts.entities import ActorRole, UserEntity

PASSWORD = "secret123"

pytestmark = pytest.mark.django_db


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def client():
    return Client()


@pytest.fixture
def create_account():
    """Store a user with PASSWORD and return it."""
    repo = DjangoUserRepository()
    hasher = DjangoPasswordHasher()

    def _create(name, email, role=ActorRole.EMPLOYEE, department="Finance"):
        user = UserEntity.create(
            name=name,
            email=email,
            password_hash=hasher.hash(PASSWORD),
            role=role,
            department=department,
        )
        repo.save(user)
        return user

    return _create


@pytest.fixture
def login(client):
    def _login(email):
        response = client.post(
            "/api/auth/login/",
            data={"email": email, "password": PASSWORD},
            content_type="application/json",
        )
        assert response.status_code == 200, response.content
        return response.json()["data"]["token"]

    return _login


@pytest.fixture
def api(client):
    """Authenticated JSON calls: api(method, path, token, body=None)."""

    def _call(method, path, token=None, body=None):
        headers = {"HTTP_AUTHORIZATION": f"Bearer {token}"} if token else {}
        caller = getattr(client, method.lower())
        if body is None:
            return caller(path, **headers)
        return caller(path, data=body, content_type="application/json", **headers)

    return _call


@pytest.fixture
def employee_token(create_account, login):
    create_account("Ana Employee", "ana@example.com")
    return login("ana@example.com")


@pytest.fixture
def other_token(create_account, login):
    create_account("Bruno Employee", "bruno@example.com", department="Sales")
    return login("bruno@example.com")


@pytest.fixture
def it_token(create_account, login):
    create_account("Ivan Agent", "ivan@example.com", role=ActorRole.IT, department="IT")
    return login("ivan@example.com")


@pytest.fixture
def admin_token(create_account, login):
    create_account("Alba Admin", "alba@example.com", role=ActorRole.ADMIN, department="Operations")
    return login("alba@example.com")


@pytest.fixture
def ticket(api, employee_token):
    response = api("POST", "/api/tickets/", employee_token, {
        "title": "VPN keeps dropping",
        "description": "The VPN disconnects every ten minutes since Monday",
        "priority": "High",
    })
    assert response.status_code == 201, response.content
    return response.json()["data"]


# =============================================================================
# Health & envelope
# =============================================================================

class TestHealth:

    def test_health(self, client):
        response = client.get("/health/")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestAuthentication:

    def test_register_login_me(self, client, api):
        response = api("POST", "/api/auth/register/", body={
            "name": "Dora New",
            "email": "dora@example.com",
            "password": PASSWORD,
            "department": "Legal",
        })
        assert response.status_code == 201
        assert response.json()["data"]["role"] == "employee"

        response = api("POST", "/api/auth/login/", body={"email": "dora@example.com", "password": PASSWORD})
        body = response.json()
        assert body["success"] is True
        token = body["data"]["token"]
        assert body["data"]["user"]["email"] == "dora@example.com"
        assert "password_hash" not in body["data"]["user"]

        me = api("GET", "/api/auth/me/", token).json()["data"]
        assert me["name"] == "Dora New"

    def test_wrong_password(self, api, create_account):
        create_account("Ana Employee", "ana@example.com")

        response = api("POST", "/api/auth/login/", body={"email": "ana@example.com", "password": "nope"})

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Invalid email or password"}

    def test_missing_token(self, api):
        response = api("GET", "/api/tickets/")
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_garbage_token(self, api):
        assert api("GET", "/api/tickets/", "not-a-jwt").status_code == 401

    def test_self_registration_cannot_create_staff(self, api):
        response = api("POST", "/api/auth/register/", body={
            "name": "Eve Sneaky",
            "email": "eve@example.com",
            "password": PASSWORD,
            "role": "super-admin",
        })
        assert response.status_code == 403
        assert response.json()["meta"] == {"action": "create_user"}

    def test_change_password(self, api, employee_token, login):
        response = api("POST", "/api/users/change-password/", employee_token, {
            "currentPassword": PASSWORD,
            "newPassword": "a-better-secret",
        })
        assert response.status_code == 200

        response = api("POST", "/api/auth/login/", body={"email": "ana@example.com", "password": PASSWORD})
        assert response.status_code == 401


class TestErrors:

    def test_malformed_json(self, client, employee_token):
        response = client.post(
            "/api/tickets/",
            data="{not json",
            content_type="application/json",
            HTTP_AUTHORIZATION=f"Bearer {employee_token}",
        )
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_validation_error_names_field(self, api, employee_token):
        response = api("POST", "/api/tickets/", employee_token, {"title": "ab", "description": "too short"})

        assert response.status_code == 400
        assert response.json()["meta"] == {"field": "title"}

    def test_unknown_ticket(self, api, employee_token):
        assert api("GET", "/api/tickets/does-not-exist/", employee_token).status_code == 404

    @pytest.mark.parametrize("body,field", [
        ({"title": 123, "description": "The VPN disconnects every ten minutes"}, "title"),
        ({"title": "VPN keeps dropping", "description": ["not", "text"]}, "description"),
        ({"title": "VPN keeps dropping", "description": "The VPN disconnects", "priority": 3}, "priority"),
    ])
    def test_create_rejects_non_string_values(self, api, employee_token, body, field):
        response = api("POST", "/api/tickets/", employee_token, body)

        assert response.status_code == 400
        assert response.json()["meta"] == {"field": field}
        assert not TicketModel.objects.exists()

    @pytest.mark.parametrize("body,field", [
        ({"status": 5}, "status"),
        ({"status": "Closed", "statusComment": {"text": "done"}}, "statusComment"),
        ({"category": ["IT"]}, "category"),
        ({"assignedTo": 42}, "assignedTo"),
    ])
    def test_update_rejects_non_string_values(self, api, it_token, ticket, body, field):
        response = api("PATCH", f"/api/tickets/{ticket['id']}/", it_token, body)

        assert response.status_code == 400
        assert response.json()["meta"] == {"field": field}
        assert TicketModel.objects.get(id=ticket["id"]).status == "Open"

    @pytest.mark.parametrize("body,field", [
        ({"content": 7}, "content"),
        ({"content": "hello there", "isInternal": "false"}, "isInternal"),
        ({"content": "hello there", "isInternal": 1}, "isInternal"),
    ])
    def test_comment_rejects_mistyped_values(self, api, employee_token, ticket, body, field):
        response = api("POST", f"/api/tickets/{ticket['id']}/comments/", employee_token, body)

        assert response.status_code == 400
        assert response.json()["meta"] == {"field": field}

    def test_non_string_role_on_register(self, api):
        response = api("POST", "/api/auth/register/", body={
            "name": "Nina New",
            "email": "nina@example.com",
            "password": "long-enough-password",
            "role": ["admin"],
        })
        assert response.status_code == 400
        assert response.json()["meta"] == {"field": "role"}


# =============================================================================
# Tickets
# =============================================================================

class TestTicketLifecycle:

    def test_create_ticket(self, ticket):
        assert ticket["status"] == "Open"
        assert ticket["priority"] == "High"
        assert ticket["category"] == "IT"
        assert ticket["ticket_number"].startswith("TKT-")
        assert "mood" not in ticket
        assert ticket["status_options"] == [{"value": "Closed", "label": "Close Ticket"}]
        assert ticket["classification"]["category"] == "IT"

    def test_created_event_is_stored(self, ticket):
        events = DomainEventModel.objects.filter(aggregate_id=ticket["id"])
        assert [e.event_type for e in events] == ["TicketCreatedEvent"]
        assert events[0].sequence == 1

    def test_requester_closes_and_reopens(self, api, employee_token, ticket):
        response = api("PATCH", f"/api/tickets/{ticket['id']}/", employee_token, {
            "status": "Closed",
            "statusComment": "Works again",
        })
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "Closed"
        assert data["status_options"] == [{"value": "Open", "label": "Reopen Ticket"}]
        assert data["status_history"][-1]["comment"] == "Works again"

        response = api("PUT", f"/api/tickets/{ticket['id']}/", employee_token, {"status": "Open"})
        assert response.json()["data"]["status"] == "Open"

    def test_disallowed_transition_is_rejected(self, api, employee_token, ticket):
        response = api("PATCH", f"/api/tickets/{ticket['id']}/", employee_token, {"status": "Resolved"})

        assert response.status_code == 403
        assert response.json()["meta"] == {"action": "change_status"}

        stored = api("GET", f"/api/tickets/{ticket['id']}/", employee_token).json()["data"]
        assert stored["status"] == "Open"
        assert len(stored["status_history"]) == 1
        assert not DomainEventModel.objects.filter(event_type="TicketStatusChangedEvent").exists()

    def test_staff_batch_update(self, api, it_token, ticket):
        response = api("PATCH", f"/api/tickets/{ticket['id']}/", it_token, {
            "status": "In Progress",
            "priority": "Critical",
            "priorityComment": "Whole team affected",
        })

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "In Progress"
        assert data["priority"] == "Critical"
        assert "mood" in data
        assert [c["field"] for c in data["field_history"]] == ["status", "priority"]

        model = TicketModel.objects.get(id=ticket["id"])
        assert model.status == "In Progress"

    def test_employee_cannot_change_priority(self, api, employee_token, ticket):
        response = api("PATCH", f"/api/tickets/{ticket['id']}/", employee_token, {"priority": "Low"})
        assert response.status_code == 403

    def test_status_options_endpoint(self, api, it_token, ticket):
        response = api("GET", f"/api/tickets/{ticket['id']}/status-options/", it_token)
        assert [o["value"] for o in response.json()["data"]] == [
            "Open", "In Progress", "Resolved", "Closed",
        ]

    def test_other_employee_cannot_see_ticket(self, api, other_token, ticket):
        assert api("GET", f"/api/tickets/{ticket['id']}/", other_token).status_code == 403


class TestComments:

    def test_internal_comments_hidden_from_employee(self, api, employee_token, it_token, ticket):
        response = api("POST", f"/api/tickets/{ticket['id']}/comments/", it_token, {
            "content": "Check the firewall rules",
            "isInternal": True,
        })
        assert response.status_code == 201

        api("POST", f"/api/tickets/{ticket['id']}/comments/", it_token, {"content": "We are on it"})

        employee_view = api("GET", f"/api/tickets/{ticket['id']}/", employee_token).json()["data"]
        staff_view = api("GET", f"/api/tickets/{ticket['id']}/", it_token).json()["data"]

        assert [c["content"] for c in employee_view["comments"]] == ["We are on it"]
        assert len(staff_view["comments"]) == 2
        assert "mood" in staff_view

    def test_employee_comment_with_explicit_public_flag(self, api, employee_token, ticket):
        response = api("POST", f"/api/tickets/{ticket['id']}/comments/", employee_token, {
            "content": "hello there",
            "isInternal": False,
        })

        assert response.status_code == 201
        assert response.json()["data"]["content"] == "hello there"

    def test_blank_comment(self, api, employee_token, ticket):
        response = api("POST", f"/api/tickets/{ticket['id']}/comments/", employee_token, {"content": " "})

        assert response.status_code == 400
        assert response.json()["error"] == "Comment Required"


class TestListing:

    def test_pagination_meta(self, api, employee_token):
        for i in range(3):
            api("POST", "/api/tickets/", employee_token, {
                "title": f"Printer problem {i}",
                "description": "The printer on the second floor is jammed",
            })

        body = api("GET", "/api/tickets/?limit=2", employee_token).json()

        assert len(body["data"]) == 2
        assert body["meta"]["pagination"] == {
            "total": 3,
            "page": 1,
            "limit": 2,
            "total_pages": 2,
            "has_next_page": True,
            "has_prev_page": False,
        }

    def test_listing_is_scoped(self, api, employee_token, other_token, admin_token, ticket):
        assert api("GET", "/api/tickets/", other_token).json()["meta"]["pagination"]["total"] == 0
        assert api("GET", "/api/tickets/", employee_token).json()["meta"]["pagination"]["total"] == 1
        assert api("GET", "/api/tickets/", admin_token).json()["meta"]["pagination"]["total"] == 1

    def test_filters(self, api, admin_token, ticket):
        assert len(api("GET", "/api/tickets/?status=Open&search=vpn", admin_token).json()["data"]) == 1
        assert len(api("GET", "/api/tickets/?category=HR", admin_token).json()["data"]) == 0

    def test_invalid_filter(self, api, admin_token):
        response = api("GET", "/api/tickets/?status=Pending", admin_token)
        assert response.status_code == 400

    def test_stats_for_staff_only(self, api, employee_token, admin_token, ticket):
        assert api("GET", "/api/tickets/stats/", employee_token).status_code == 403

        stats = api("GET", "/api/tickets/stats/", admin_token).json()["data"]
        assert stats["total"] == 1
        assert stats["by_priority"]["High"] == 1

    def test_department_stats_by_ticket_category(self, api, employee_token, ticket):
        response = api("GET", "/api/tickets/department-stats/IT/", employee_token)

        assert response.status_code == 200
        assert response.json()["data"] == {
            "department": "IT",
            "top_departments": [{"department": "Finance", "count": 1}],
            "avg_steps": 0.0,
            "avg_resolution_hours": 0.0,
        }

        unknown = api("GET", "/api/tickets/department-stats/Finance/", employee_token)
        assert unknown.status_code == 400
        assert unknown.json()["meta"] == {"field": "category"}


# =============================================================================
# Users & assistant
# =============================================================================

class TestUsers:

    def test_directory_is_staff_only(self, api, employee_token, admin_token):
        assert api("GET", "/api/users/", employee_token).status_code == 403

        body = api("GET", "/api/users/", admin_token).json()
        assert body["meta"]["pagination"]["total"] == 2

    def test_super_admin_manages_users(self, api, create_account, login, employee_token):
        create_account("Sam Root", "sam@example.com", role=ActorRole.SUPER_ADMIN, department="IT")
        token = login("sam@example.com")

        response = api("POST", "/api/users/", token, {
            "name": "Nina IT",
            "email": "nina@example.com",
            "password": PASSWORD,
            "role": "it",
        })
        assert response.status_code == 201
        nina_id = response.json()["data"]["id"]

        response = api("PATCH", f"/api/users/{nina_id}/", token, {"department": "Infrastructure"})
        assert response.json()["data"]["department"] == "Infrastructure"

        response = api("DELETE", f"/api/users/{nina_id}/", token)
        assert response.json()["data"] == {"id": nina_id}


class TestAssistant:

    def test_chat_fallback(self, api, employee_token):
        response = api("POST", "/api/assistant/chat/", employee_token, {"message": "Hello?"})

        assert response.status_code == 200
        assert "offline" in response.json()["data"]["reply"]

    def test_classify(self, api, employee_token):
        response = api("POST", "/api/assistant/classify/", employee_token, {
            "title": "Leave request",
            "description": "How many vacation days do I have left?",
        })
        assert response.json()["data"]["category"] == "HR"

    def test_translation(self, api, employee_token):
        languages = api("GET", "/api/translation/languages/", employee_token).json()["data"]
        assert "fr" in languages

        response = api("POST", "/api/translation/translate/", employee_token, {
            "text": "Hello",
            "targetLanguage": "fr",
        })
        assert response.json()["data"]["translated_text"] == "Hello"

    def test_suggestions_for_requester_and_staff(self, api, employee_token, other_token, it_token, ticket):
        path = f"/api/tickets/{ticket['id']}/suggestions/"

        mine = api("GET", f"{path}?role=employee", employee_token)
        assert mine.status_code == 200
        assert mine.json()["data"]["suggestions"]

        assert api("GET", path, other_token).status_code == 403

        response = api("GET", f"{path}?role=it", it_token)
        assert response.json()["data"]["suggestions"]
        assert response.json()["data"]["suggestions"] != mine.json()["data"]["suggestions"]

    def test_summarize_ticket(self, api, employee_token, ticket):
        response = api("POST", "/api/assistant/summarize-ticket/", employee_token, {"ticketId": ticket["id"]})

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert ticket["ticket_number"] in response.json()["data"]["summary"]

    def test_summarize_ticket_requires_id(self, api, employee_token):
        response = api("POST", "/api/assistant/summarize-ticket/", employee_token, {})

        assert response.status_code == 400
        assert response.json()["meta"] == {"field": "ticketId"}

    def test_voice_ticket_draft(self, api, employee_token):
        response = api("POST", "/api/assistant/voice-ticket/", employee_token, {
            "speech": "My laptop screen is broken. It happened this morning and I cannot work.",
        })

        assert response.status_code == 200
        draft = response.json()["data"]
        assert draft["title"] == "My laptop screen is broken."
        assert draft["category"] == "IT"
        assert not TicketModel.objects.exists()

    def test_voice_ticket_needs_text(self, api, employee_token):
        response = api("POST", "/api/assistant/voice-ticket/", employee_token, {"speech": 12})

        assert response.status_code == 400
        assert response.json()["meta"] == {"field": "speech"}
