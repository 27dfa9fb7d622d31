"""
Unit tests for the Assistant use cases.

Every feature must answer with its deterministic fallback when the
language model is unavailable or answers with garbage.
"""

import pytest

from src.core.assistant.keywords import KeywordTicketClassifier, guess_priority
from src.core.assistant.ports import parse_json_answer
from src.core.assistant.services import (
    CHAT_FALLBACK_REPLY,
    REQUESTER_SUGGESTIONS,
    STAFF_SUGGESTIONS,
    ChatService,
    ClassifyTicketService,
    SummarizeTicketService,
    SuggestResponsesService,
    SupportedLanguagesService,
    TranslateService,
    VoiceTicketDraftService,
)
from src.core.shared.exceptions import (
    AssistantUnavailableError,
    PermissionDeniedError,
    ValidationError,
)
from src.core.tickets.entities import TicketPriority, TicketStatus


class UnavailableModel:
    def __init__(self):
        self.calls = 0

    def complete(self, system_prompt, user_prompt):
        self.calls += 1
        raise AssistantUnavailableError("No API key configured")


class ScriptedModel:
    def __init__(self, answer):
        self.answer = answer
        self.prompts = []

    def complete(self, system_prompt, user_prompt):
        self.prompts.append((system_prompt, user_prompt))
        return self.answer


class TestClassifyTicketService:

    def test_model_answer(self):
        model = ScriptedModel('```json\n{"category": "Admin", "mood": "urgent", "confidence": 0.9}\n```')

        result = ClassifyTicketService(model).execute("Broken chair", "My chair collapsed")

        assert result.category == "Admin"
        assert result.mood == "urgent"
        assert result.confidence == 0.9

    def test_fallback_when_unavailable(self):
        model = UnavailableModel()

        result = ClassifyTicketService(model).execute(
            "Payroll question",
            "My salary was not paid this month",
        )

        assert model.calls == 1
        assert result.category == "HR"
        assert result.reason.startswith("Keyword match")

    def test_fallback_on_labels_outside_vocabulary(self):
        model = ScriptedModel('{"category": "Kitchen", "mood": "neutral"}')

        result = ClassifyTicketService(model).execute("Wifi down", "The wifi on my laptop is down")

        assert result.category == "IT"

    def test_fallback_on_invalid_json(self):
        result = ClassifyTicketService(ScriptedModel("I think it is IT")).execute(
            "Printer", "Printer is out of toner",
        )
        assert result.category == "IT"

    def test_blank_input(self):
        with pytest.raises(ValidationError):
            ClassifyTicketService(UnavailableModel()).execute(" ", "")


class TestSummarizeTicketService:

    def test_model_summary(self, ticket_repo, employee, make_ticket):
        ticket = make_ticket(employee)
        model = ScriptedModel("  The laptop does not boot.  ")

        result = SummarizeTicketService(ticket_repo, model).execute(employee, ticket.id)

        assert result == {"summary": "The laptop does not boot."}

    def test_fallback_hides_internal_comments(self, ticket_repo, employee, it_agent, make_ticket):
        ticket = make_ticket(employee)
        ticket.add_comment("We ordered a new disk", it_agent.to_ref())
        ticket.add_comment("Vendor invoice pending", it_agent.to_ref(), is_internal=True)
        ticket_repo.save(ticket)

        summary = SummarizeTicketService(ticket_repo, UnavailableModel()).execute(employee, ticket.id)["summary"]

        assert ticket.ticket_number in summary
        assert "We ordered a new disk" in summary
        assert "Vendor invoice" not in summary

    def test_other_employee_denied(self, ticket_repo, employee, other_employee, make_ticket):
        ticket = make_ticket(employee)

        with pytest.raises(PermissionDeniedError):
            SummarizeTicketService(ticket_repo, UnavailableModel()).execute(other_employee, ticket.id)


class TestTranslateService:

    def test_languages(self):
        languages = SupportedLanguagesService().execute()
        assert languages["es"] == "Spanish"

    def test_fallback_returns_original_text(self):
        result = TranslateService(UnavailableModel()).execute("Hello", "ES")
        assert result == {"translated_text": "Hello", "target_language": "es"}

    def test_model_translation(self):
        result = TranslateService(ScriptedModel("Hola")).execute("Hello", "es")
        assert result["translated_text"] == "Hola"

    def test_unsupported_language(self):
        with pytest.raises(ValidationError) as exc_info:
            TranslateService(UnavailableModel()).execute("Hello", "xx")
        assert exc_info.value.field == "target_language"


class TestSuggestResponsesService:

    def test_requester_gets_follow_ups(self, ticket_repo, employee, make_ticket):
        ticket = make_ticket(employee)

        result = SuggestResponsesService(ticket_repo, UnavailableModel()).execute(
            employee, ticket.id, role="employee",
        )

        assert [dict(s) for s in REQUESTER_SUGGESTIONS[TicketStatus.OPEN]] == result["suggestions"]

    def test_requester_cannot_ask_as_staff(self, ticket_repo, employee, make_ticket):
        ticket = make_ticket(employee)
        model = ScriptedModel('[{"response": "Any update?", "rationale": "r"}]')

        SuggestResponsesService(ticket_repo, model).execute(employee, ticket.id, role="it")

        assert model.prompts[0][1].startswith("Writer role: employee (requester)")

    def test_other_employee_denied(self, ticket_repo, employee, other_employee, make_ticket):
        ticket = make_ticket(employee)

        with pytest.raises(PermissionDeniedError):
            SuggestResponsesService(ticket_repo, UnavailableModel()).execute(other_employee, ticket.id)

    def test_staff_fallback_by_status(self, ticket_repo, employee, it_agent, make_ticket):
        ticket = make_ticket(employee)

        result = SuggestResponsesService(ticket_repo, UnavailableModel()).execute(it_agent, ticket.id)

        assert [dict(s) for s in STAFF_SUGGESTIONS[TicketStatus.OPEN]] == result["suggestions"]

    def test_model_suggestions_are_capped(self, ticket_repo, employee, it_agent, make_ticket):
        ticket = make_ticket(employee)
        answer = '[' + ','.join('{"response": "Reply %d", "rationale": "r"}' % i for i in range(5)) + ']'
        model = ScriptedModel(answer)

        result = SuggestResponsesService(ticket_repo, model).execute(it_agent, ticket.id, role="hr")

        assert [s["response"] for s in result["suggestions"]] == ["Reply 0", "Reply 1", "Reply 2"]
        assert model.prompts[0][1].startswith("Writer role: hr (support staff)")


class TestChatService:

    def test_fallback_reply(self, employee):
        assert ChatService(UnavailableModel()).execute(employee, "How do I reset my password?") == {
            "reply": CHAT_FALLBACK_REPLY,
        }

    def test_model_reply_mentions_actor(self, employee):
        model = ScriptedModel("Use the self-service portal.")

        result = ChatService(model).execute(employee, "How do I reset my password?")

        assert result["reply"] == "Use the self-service portal."
        assert "Ana Employee" in model.prompts[0][1]

    def test_blank_message(self, employee):
        with pytest.raises(ValidationError):
            ChatService(UnavailableModel()).execute(employee, "  ")


class TestVoiceTicketDraftService:

    def test_fallback_draft(self):
        draft = VoiceTicketDraftService(UnavailableModel()).execute(
            "My laptop screen is broken. It happened this morning and I cannot work."
        )

        assert draft["title"] == "My laptop screen is broken."
        assert draft["category"] == "IT"
        assert draft["priority"] == "High"

    def test_model_fields_are_merged(self):
        model = ScriptedModel('{"title": "Broken screen", "priority": "Whenever", "category": "IT"}')

        draft = VoiceTicketDraftService(model).execute("my screen is broken please help")

        assert draft["title"] == "Broken screen"
        assert draft["priority"] == "Medium"
        assert draft["description"] == "my screen is broken please help"

    def test_blank_speech(self):
        with pytest.raises(ValidationError):
            VoiceTicketDraftService(UnavailableModel()).execute("")


class TestKeywordRules:

    def test_priority_guess(self):
        assert guess_priority("Total outage in the building") == TicketPriority.CRITICAL
        assert guess_priority("no rush, whenever you can") == TicketPriority.LOW
        assert guess_priority("The mouse is a bit slow") == TicketPriority.MEDIUM

    def test_unmatched_text_defaults_to_it(self):
        result = KeywordTicketClassifier().classify("Question", "Something odd happened")
        assert result.category == "IT"
        assert result.mood == "neutral"
        assert result.confidence == 0.3

    def test_parse_json_answer_strips_fences(self):
        assert parse_json_answer('```\n{"a": 1}\n```') == {"a": 1}
        with pytest.raises(ValueError):
            parse_json_answer("not json")
