"""
Assistant Domain - AI helpers around tickets.

Contains:
- Port (LanguageModel)
- Use Cases (classify, summarize, translate, suggest, chat, voice draft)
- Deterministic keyword fallbacks
"""

from .keywords import KeywordTicketClassifier
from .languages import SUPPORTED_LANGUAGES
from .ports import LanguageModel, parse_json_answer

__all__ = [
    "KeywordTicketClassifier",
    "SUPPORTED_LANGUAGES",
    "LanguageModel",
    "parse_json_answer",
]
