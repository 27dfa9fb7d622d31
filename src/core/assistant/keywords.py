"""
Deterministic keyword rules.

Used whenever the language model is unavailable or answers with
labels outside the vocabularies:
- KeywordTicketClassifier: category + mood (a TicketClassifier)
- guess_priority: priority from urgency wording
"""

import re
from typing import Dict, List, Tuple

from src.core.tickets.dtos import ClassificationDTO
from src.core.tickets.entities import TicketCategory, TicketMood, TicketPriority


CATEGORY_KEYWORDS: Dict[TicketCategory, Tuple[str, ...]] = {
    TicketCategory.IT: (
        "computer", "laptop", "password", "email", "network", "wifi", "vpn",
        "printer", "software", "install", "server", "login", "internet",
        "monitor", "keyboard", "screen", "outlook", "crash", "error",
    ),
    TicketCategory.HR: (
        "salary", "payroll", "payslip", "leave", "vacation", "benefits",
        "hr", "harassment", "onboarding", "contract", "holiday", "insurance",
        "promotion", "maternity", "paternity", "training",
    ),
    TicketCategory.ADMIN: (
        "office", "desk", "chair", "parking", "badge", "access card",
        "supplies", "cleaning", "facility", "building", "meeting room",
        "furniture", "air conditioning", "stationery",
    ),
}

# Checked in order: the first mood with a hit wins.
MOOD_KEYWORDS: List[Tuple[TicketMood, Tuple[str, ...]]] = [
    (TicketMood.ANGRY, (
        "angry", "unacceptable", "ridiculous", "furious", "terrible", "worst",
        "outraged",
    )),
    (TicketMood.URGENT, (
        "urgent", "asap", "immediately", "emergency", "right now", "critical",
    )),
    (TicketMood.FRUSTRATED, (
        "frustrated", "frustrating", "annoying", "again", "still not", "keeps",
        "tired of", "fed up",
    )),
    (TicketMood.SATISFIED, (
        "thank", "thanks", "great", "appreciate", "happy",
    )),
]

PRIORITY_KEYWORDS: List[Tuple[TicketPriority, Tuple[str, ...]]] = [
    (TicketPriority.CRITICAL, (
        "outage", "down for everyone", "emergency", "critical", "security breach",
        "data loss",
    )),
    (TicketPriority.HIGH, (
        "urgent", "asap", "cannot work", "can't work", "blocked", "immediately",
    )),
    (TicketPriority.LOW, (
        "no rush", "when you can", "minor", "whenever", "low priority",
    )),
]


def _hits(text: str, keywords: Tuple[str, ...]) -> List[str]:
    return [
        keyword for keyword in keywords
        if re.search(rf"\b{re.escape(keyword)}\b", text)
    ]


def guess_priority(text: str) -> TicketPriority:
    lowered = (text or "").lower()
    for priority, keywords in PRIORITY_KEYWORDS:
        if _hits(lowered, keywords):
            return priority
    return TicketPriority.MEDIUM


def guess_mood(text: str) -> TicketMood:
    lowered = (text or "").lower()
    for mood, keywords in MOOD_KEYWORDS:
        if _hits(lowered, keywords):
            return mood
    return TicketMood.NEUTRAL


def guess_category(text: str) -> Tuple[TicketCategory, List[str]]:
    """Category with the most keyword hits (IT when nothing matches)."""
    lowered = (text or "").lower()
    best, best_hits = TicketCategory.IT, []
    for category, keywords in CATEGORY_KEYWORDS.items():
        hits = _hits(lowered, keywords)
        if len(hits) > len(best_hits):
            best, best_hits = category, hits
    return best, best_hits


class KeywordTicketClassifier:
    """
    TicketClassifier based on keyword hits.

    Example:
        KeywordTicketClassifier().classify(
            "Payroll error", "My salary was not paid this month"
        )  # category HR
    """

    def classify(self, title: str, description: str) -> ClassificationDTO:
        text = f"{title or ''}\n{description or ''}"
        category, hits = guess_category(text)

        if hits:
            confidence = min(0.4 + 0.1 * len(hits), 0.8)
            reason = f"Keyword match: {', '.join(hits)}"
        else:
            confidence = 0.3
            reason = "No keyword matched, defaulted to IT"

        return ClassificationDTO(
            category=category.value,
            mood=guess_mood(text).value,
            confidence=confidence,
            reason=reason,
        )
