"""
Tests for TicketFilters, FilterBarConfig and SessionContext.
"""

import pytest

from src.client.errors import LocalValidationError
from src.client.filters import FilterBarConfig, TicketFilters
from src.client.session import SessionContext
from src.core.accounts.entities import ActorRole


class TestTicketFilters:

    def test_only_set_filters_are_sent(self):
        params = TicketFilters(category="HR", search="   ").to_params()
        assert params == {"page": "1", "category": "HR"}

    def test_limit_and_mood(self):
        params = TicketFilters(mood="angry", priority="Critical").to_params(page=3, limit=20)
        assert params == {"page": "3", "limit": "20", "priority": "Critical", "mood": "angry"}

    def test_mood_left_out_when_not_included(self):
        params = TicketFilters(mood="angry", status="Open").to_params(include_mood=False)
        assert params == {"page": "1", "status": "Open"}

    @pytest.mark.parametrize("filters,field", [
        (TicketFilters(status="Pending"), "status"),
        (TicketFilters(category="Kitchen"), "category"),
        (TicketFilters(priority="Urgent"), "priority"),
        (TicketFilters(mood="sleepy"), "mood"),
    ])
    def test_unknown_values(self, filters, field):
        with pytest.raises(LocalValidationError) as exc_info:
            filters.validate()
        assert exc_info.value.field == field


class TestFilterBarConfig:

    @pytest.mark.parametrize("role", [ActorRole.HR, ActorRole.IT, ActorRole.ADMIN, ActorRole.SUPER_ADMIN])
    def test_staff_gets_mood_but_no_shortcut(self, role):
        bar = FilterBarConfig.for_role(role, show_create_shortcut=True)
        assert bar.show_mood
        assert not bar.show_create_shortcut

    def test_employee(self):
        assert FilterBarConfig.for_role(ActorRole.EMPLOYEE) == FilterBarConfig()
        assert FilterBarConfig.for_role(ActorRole.EMPLOYEE, show_create_shortcut=True).show_create_shortcut

    def test_signed_out(self):
        assert not FilterBarConfig.for_role(None).show_mood


class TestSessionContext:

    def test_signed_out(self):
        session = SessionContext()
        assert not session.is_authenticated
        assert session.user_id is None
        assert session.role is None
        assert session.auth_headers() == {}

    def test_role_parsing(self):
        assert SessionContext("jwt", {"id": "u-1", "role": "super-admin"}).role == ActorRole.SUPER_ADMIN
        assert SessionContext("jwt", {"id": "u-1", "role": "wizard"}).role is None
