"""
Use Cases of the Assistant domain.

Every service talks to the LanguageModel port and degrades to a
deterministic answer when the model is unavailable or answers with
something unusable. No assistant feature is ever fatal.

Use cases:
- ClassifyTicketService: category + mood of a ticket text
- SummarizeTicketService: short summary of a ticket
- TranslateService: translate text to a supported language
- SupportedLanguagesService: languages TranslateService accepts
- SuggestResponsesService: comment suggestions for staff and requesters
- ChatService: help-desk chat assistant
- VoiceTicketDraftService: turn a transcribed speech into a ticket draft
"""

import logging
import re
from typing import List, Optional

from src.core.accounts.entities import ActorRole, UserEntity
from src.core.shared.exceptions import (
    AssistantUnavailableError,
    ValidationError,
)
from src.core.tickets import policy
from src.core.tickets.dtos import ClassificationDTO
from src.core.tickets.entities import (
    TicketCategory,
    TicketEntity,
    TicketMood,
    TicketPriority,
    TicketStatus,
)
from src.core.tickets.ports import TicketRepository
from src.core.tickets.use_cases import ensure_can_view, get_ticket_or_raise

from .keywords import KeywordTicketClassifier, guess_category, guess_priority
from .languages import SUPPORTED_LANGUAGES
from .ports import LanguageModel, parse_json_answer

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 3
DRAFT_TITLE_MAX_LENGTH = 80
SUMMARY_COMMENTS = 3


def _visible_comments(ticket: TicketEntity, actor: UserEntity) -> list:
    staff_view = policy.can_view_internal_comments(actor.role)
    return [c for c in ticket.comments if staff_view or not c.is_internal]


def _describe_ticket(ticket: TicketEntity, actor: UserEntity) -> str:
    lines = [
        f"Ticket: {ticket.ticket_number}",
        f"Title: {ticket.title}",
        f"Category: {ticket.category.value}",
        f"Status: {ticket.status.value}",
        f"Priority: {ticket.priority.value}",
        f"Description: {ticket.description}",
    ]
    comments = _visible_comments(ticket, actor)
    if comments:
        lines.append("Comments:")
        lines.extend(f"- {c.author.name or c.author.id}: {c.content}" for c in comments)
    return "\n".join(lines)


# =============================================================================
# Classification
# =============================================================================

CLASSIFY_SYSTEM_PROMPT = """You triage tickets for a company help desk.
Answer only with JSON:
{"category": "IT" | "HR" | "Admin",
 "mood": "angry" | "frustrated" | "neutral" | "satisfied" | "urgent",
 "confidence": number between 0 and 1,
 "reason": "one short sentence"}"""


class ClassifyTicketService:
    """
    Use Case: Classify a ticket text.

    Also serves as the TicketClassifier used by CreateTicketService.
    Labels outside the vocabularies fall back to keyword rules.
    """

    def __init__(self, llm: LanguageModel, fallback: Optional[KeywordTicketClassifier] = None):
        self.llm = llm
        self.fallback = fallback or KeywordTicketClassifier()

    def execute(self, title: str, description: str) -> ClassificationDTO:
        if not (title or "").strip() and not (description or "").strip():
            raise ValidationError("Title or description is required", field="description")
        return self.classify(title, description)

    def classify(self, title: str, description: str) -> ClassificationDTO:
        try:
            answer = parse_json_answer(
                self.llm.complete(
                    CLASSIFY_SYSTEM_PROMPT,
                    f"Title: {title}\nDescription: {description}",
                )
            )
            return ClassificationDTO(
                category=TicketCategory.from_string(answer["category"]).value,
                mood=TicketMood.from_string(answer["mood"]).value,
                confidence=max(0.0, min(float(answer.get("confidence", 0.5)), 1.0)),
                reason=str(answer.get("reason", "")),
            )
        except AssistantUnavailableError as e:
            logger.info(f"Classifier fallback: {e.message}")
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Unusable classification answer: {e}")
        return self.fallback.classify(title, description)


# =============================================================================
# Summaries and translation
# =============================================================================

SUMMARY_SYSTEM_PROMPT = (
    "You summarize help-desk tickets for busy support staff. "
    "Write at most three sentences covering the problem, what was done and "
    "what is pending. Plain text only."
)


class SummarizeTicketService:
    """Use Case: Summarize a ticket the actor can see."""

    def __init__(self, ticket_repo: TicketRepository, llm: LanguageModel):
        self.ticket_repo = ticket_repo
        self.llm = llm

    def execute(self, actor: UserEntity, ticket_id: str) -> dict:
        ticket = get_ticket_or_raise(self.ticket_repo, ticket_id)
        ensure_can_view(actor, ticket)

        try:
            summary = self.llm.complete(SUMMARY_SYSTEM_PROMPT, _describe_ticket(ticket, actor)).strip()
            if summary:
                return {"summary": summary}
        except AssistantUnavailableError as e:
            logger.info(f"Summary fallback for {ticket.ticket_number}: {e.message}")

        return {"summary": self._fallback(ticket, actor)}

    @staticmethod
    def _fallback(ticket: TicketEntity, actor: UserEntity) -> str:
        summary = (
            f'{ticket.ticket_number} "{ticket.title}" is {ticket.status.value} '
            f"with {ticket.priority.value} priority in the {ticket.category.value} queue."
        )
        comments = _visible_comments(ticket, actor)[-SUMMARY_COMMENTS:]
        if comments:
            latest = " | ".join(c.content for c in comments)
            summary += f" Latest comments: {latest}"
        return summary


class SupportedLanguagesService:
    def execute(self) -> dict:
        return dict(SUPPORTED_LANGUAGES)


class TranslateService:
    """
    Use Case: Translate text.

    The fallback returns the original text untouched.
    """

    def __init__(self, llm: LanguageModel):
        self.llm = llm

    def execute(self, text: str, target_language: str) -> dict:
        """
        Raises:
            ValidationError: Blank text or unsupported language
        """
        if not (text or "").strip():
            raise ValidationError("Text is required", field="text")
        code = (target_language or "").strip().lower()
        if code not in SUPPORTED_LANGUAGES:
            raise ValidationError(
                f"Unsupported language: {target_language}",
                field="target_language",
            )

        language = SUPPORTED_LANGUAGES[code]
        try:
            translated = self.llm.complete(
                f"Translate the user's text to {language}. "
                "Answer with the translation only, keep formatting.",
                text,
            ).strip()
            if translated:
                return {"translated_text": translated, "target_language": code}
        except AssistantUnavailableError as e:
            logger.info(f"Translation fallback: {e.message}")

        return {"translated_text": text, "target_language": code}


# =============================================================================
# Suggestions and chat
# =============================================================================

SUGGESTIONS_SYSTEM_PROMPT = """You help people write comments on help-desk tickets.
The writer is either support staff answering the requester, or the
requester following up on their own ticket; the writer role tells which.
Propose up to three comments the writer could post. Answer only with JSON:
[{"response": "comment text", "rationale": "why this comment fits"}]"""

STAFF_SUGGESTIONS = {
    TicketStatus.OPEN: [
        {
            "response": "Thanks for reporting this. We have received your ticket and will look into it shortly.",
            "rationale": "Acknowledges a new ticket",
        },
        {
            "response": "Could you share any error messages or screenshots that would help us investigate?",
            "rationale": "Gathers details before work starts",
        },
    ],
    TicketStatus.IN_PROGRESS: [
        {
            "response": "We are actively working on your issue and will update you as soon as we know more.",
            "rationale": "Keeps the requester informed",
        },
        {
            "response": "Could you confirm whether the problem still happens after restarting?",
            "rationale": "Narrows down the cause",
        },
    ],
    TicketStatus.RESOLVED: [
        {
            "response": "This issue should now be resolved. Please confirm everything works on your side.",
            "rationale": "Asks for confirmation before closing",
        },
    ],
    TicketStatus.CLOSED: [
        {
            "response": "This ticket is closed. If the problem comes back you can reopen it from the ticket page.",
            "rationale": "Explains how to reopen",
        },
    ],
}

REQUESTER_SUGGESTIONS = {
    TicketStatus.OPEN: [
        {
            "response": "Here are more details: the problem started on ... and happens when ...",
            "rationale": "Gives the support team something to start from",
        },
        {
            "response": "Is there anything else you need from me to look into this?",
            "rationale": "Offers help to move the ticket forward",
        },
    ],
    TicketStatus.IN_PROGRESS: [
        {
            "response": "Thanks for working on this. Is there an estimate for when it will be fixed?",
            "rationale": "Asks for a timeline",
        },
        {
            "response": "The problem still happens after restarting.",
            "rationale": "Reports the current state",
        },
    ],
    TicketStatus.RESOLVED: [
        {
            "response": "Confirmed, everything works now. Thank you!",
            "rationale": "Confirms the fix so the ticket can be closed",
        },
        {
            "response": "Unfortunately the problem is still there.",
            "rationale": "Reports that the fix did not work",
        },
    ],
    TicketStatus.CLOSED: [
        {
            "response": "The problem came back, so I am reopening this ticket.",
            "rationale": "Explains a reopen",
        },
    ],
}


class SuggestResponsesService:
    """
    Use Case: Comment suggestions for anyone who can see the ticket.

    Staff get replies to the requester; the requester gets follow-ups
    on their own ticket. At most three suggestions.
    """

    def __init__(self, ticket_repo: TicketRepository, llm: LanguageModel):
        self.ticket_repo = ticket_repo
        self.llm = llm

    def execute(self, actor: UserEntity, ticket_id: str, role: Optional[str] = None) -> dict:
        ticket = get_ticket_or_raise(self.ticket_repo, ticket_id)
        ensure_can_view(actor, ticket)

        responder = self._responder_role(actor, role)
        side = "support staff" if policy.is_staff(responder) else "requester"

        try:
            answer = parse_json_answer(
                self.llm.complete(
                    SUGGESTIONS_SYSTEM_PROMPT,
                    f"Writer role: {responder.value} ({side})\n{_describe_ticket(ticket, actor)}",
                )
            )
            suggestions = self._clean(answer)
            if suggestions:
                return {"suggestions": suggestions}
        except AssistantUnavailableError as e:
            logger.info(f"Suggestions fallback for {ticket.ticket_number}: {e.message}")
        except ValueError as e:
            logger.warning(f"Unusable suggestions answer: {e}")

        templates = STAFF_SUGGESTIONS if policy.is_staff(responder) else REQUESTER_SUGGESTIONS
        return {"suggestions": [dict(s) for s in templates[ticket.status]][:MAX_SUGGESTIONS]}

    @staticmethod
    def _responder_role(actor: UserEntity, role: Optional[str]) -> ActorRole:
        """Requested role; only staff may write from another staff role."""
        if not actor.is_staff or not role:
            return actor.role
        try:
            requested = ActorRole.from_string(role)
        except ValueError:
            return actor.role
        return requested if policy.is_staff(requested) else actor.role

    @staticmethod
    def _clean(answer) -> List[dict]:
        if isinstance(answer, dict):
            answer = answer.get("suggestions", [])
        if not isinstance(answer, list):
            return []
        suggestions = []
        for item in answer:
            if isinstance(item, dict) and str(item.get("response", "")).strip():
                suggestions.append({
                    "response": str(item["response"]).strip(),
                    "rationale": str(item.get("rationale", "")).strip(),
                })
        return suggestions[:MAX_SUGGESTIONS]


CHAT_SYSTEM_PROMPT = (
    "You are the assistant of a company help desk. Help employees describe "
    "problems, explain how tickets work (statuses Open, In Progress, "
    "Resolved, Closed) and point them to the right queue: IT, HR or Admin. "
    "Be brief and friendly."
)

CHAT_FALLBACK_REPLY = (
    "The assistant is offline right now. You can still create a ticket, "
    "follow its status, comment on it, and close or reopen your own tickets. "
    "IT handles hardware, software and access; HR handles payroll, leave and "
    "benefits; Admin handles offices, badges and supplies."
)


class ChatService:
    """Use Case: Help-desk chat."""

    def __init__(self, llm: LanguageModel):
        self.llm = llm

    def execute(self, actor: UserEntity, message: str) -> dict:
        if not (message or "").strip():
            raise ValidationError("Message is required", field="message")

        try:
            reply = self.llm.complete(
                CHAT_SYSTEM_PROMPT,
                f"{actor.name} ({actor.role.value}) asks: {message.strip()}",
            ).strip()
            if reply:
                return {"reply": reply}
        except AssistantUnavailableError as e:
            logger.info(f"Chat fallback: {e.message}")

        return {"reply": CHAT_FALLBACK_REPLY}


# =============================================================================
# Voice tickets
# =============================================================================

VOICE_SYSTEM_PROMPT = """Turn a transcribed spoken request into a help-desk ticket.
Answer only with JSON:
{"title": "short title (max 80 characters)",
 "description": "clear description",
 "priority": "Low" | "Medium" | "High" | "Critical",
 "category": "IT" | "HR" | "Admin"}"""


class VoiceTicketDraftService:
    """
    Use Case: Draft a ticket from transcribed speech.

    The draft is not persisted; the client submits it through
    CreateTicketService once the user confirms it.
    """

    def __init__(self, llm: LanguageModel):
        self.llm = llm

    def execute(self, speech: str) -> dict:
        speech = (speech or "").strip()
        if not speech:
            raise ValidationError("Speech text is required", field="speech")

        draft = self._fallback(speech)
        try:
            answer = parse_json_answer(self.llm.complete(VOICE_SYSTEM_PROMPT, speech))
            if not isinstance(answer, dict):
                raise ValueError("Draft is not an object")
            draft = self._merge(draft, answer)
        except AssistantUnavailableError as e:
            logger.info(f"Voice draft fallback: {e.message}")
        except ValueError as e:
            logger.warning(f"Unusable voice draft answer: {e}")

        return draft

    @staticmethod
    def _fallback(speech: str) -> dict:
        first_sentence = re.split(r"(?<=[.!?])\s+", speech, maxsplit=1)[0]
        category, _ = guess_category(speech)
        return {
            "title": first_sentence[:DRAFT_TITLE_MAX_LENGTH].strip(),
            "description": speech,
            "priority": guess_priority(speech).value,
            "category": category.value,
        }

    @staticmethod
    def _merge(draft: dict, answer: dict) -> dict:
        """Take every valid field of the answer, keep the fallback for the rest."""
        merged = dict(draft)
        title = str(answer.get("title") or "").strip()
        if title:
            merged["title"] = title[:DRAFT_TITLE_MAX_LENGTH]
        description = str(answer.get("description") or "").strip()
        if description:
            merged["description"] = description
        for key, enum_cls in (("priority", TicketPriority), ("category", TicketCategory)):
            try:
                merged[key] = enum_cls.from_string(str(answer.get(key) or "")).value
            except ValueError:
                pass
        return merged
