"""
OpenAI-compatible LanguageModel adapter.

Works with any provider exposing the chat completions API
(OPENAI_BASE_URL). Every failure surfaces as AssistantUnavailableError
so the assistant services can fall back.
"""

import logging
from typing import Optional

from openai import OpenAI

from src.core.shared.exceptions import AssistantUnavailableError

logger = logging.getLogger(__name__)


class OpenAIChatGateway:
    """
    LanguageModel on openai.chat.completions.

    Example:
        llm = OpenAIChatGateway(api_key="sk-...", model="gpt-4o-mini")
        answer = llm.complete("You are a helpdesk agent.", "Summarize: ...")
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-4o-mini",
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url or None
        self.timeout = timeout
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client: Optional[OpenAI] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
            )
        return self._client

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        """
        Raises:
            AssistantUnavailableError: No API key, provider error or empty answer
        """
        if not self.is_configured:
            raise AssistantUnavailableError("OPENAI_API_KEY is not configured")

        try:
            response = self._get_client().chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except Exception as e:
            logger.warning(f"LLM call failed: {e}")
            raise AssistantUnavailableError(f"LLM call failed: {e}")

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise AssistantUnavailableError("LLM returned an empty answer")
        return content
