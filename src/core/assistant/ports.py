"""
Ports (Interfaces) of the Assistant domain.

- LanguageModel: one-shot text completion by an external model

The production adapter lives in src/adapters/ai/openai_gateway.py.
"""

import json
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class LanguageModel(Protocol):
    """
    Text completion port.

    Implementations raise AssistantUnavailableError when the provider
    is not configured or the call fails. They never return None.
    """

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        ...


def parse_json_answer(content: str) -> Any:
    """
    Decode a JSON answer, tolerating markdown code fences.

    Raises:
        ValueError: If the content is not valid JSON
    """
    content = content or ""
    if "```json" in content:
        content = content.split("```json")[1].split("```")[0]
    elif "```" in content:
        content = content.split("```")[1].split("```")[0]
    return json.loads(content.strip())
