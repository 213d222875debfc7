# app/integrations/ai_chat.py
import logging
from typing import Generator

import httpx

from app.core.config import settings
from app.core.exceptions import UpstreamProviderError

logger = logging.getLogger(__name__)


class ChatCompletionClient:
    """Minimal client for an OpenAI-compatible chat-completions endpoint."""

    def __init__(self, client: httpx.Client):
        self.client = client

    @property
    def enabled(self) -> bool:
        return settings.AI_ENABLED and bool(settings.AI_API_KEY)

    def complete(self, system_prompt: str, message: str) -> str:
        """Return the assistant reply, or raise UpstreamProviderError."""
        if not self.enabled:
            raise UpstreamProviderError("AI chat is not configured", provider="ai")

        payload = {
            "model": settings.AI_MODEL,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": message},
            ],
            "max_tokens": settings.AI_MAX_TOKENS,
            "temperature": settings.AI_TEMPERATURE,
        }
        headers = {
            "Authorization": f"Bearer {settings.AI_API_KEY}",
            "Content-Type": "application/json",
        }

        try:
            resp = self.client.post(settings.AI_API_URL, headers=headers, json=payload)
        except httpx.HTTPError as exc:
            raise UpstreamProviderError(f"AI request failed: {exc}", provider="ai") from exc

        if resp.status_code != 200:
            raise UpstreamProviderError(
                f"AI API error {resp.status_code}: {resp.text[:200]}", provider="ai"
            )

        try:
            data = resp.json()
            choice = data.get("choices", [{}])[0]
            content = choice.get("message", {}).get("content")
        except (ValueError, AttributeError, IndexError, TypeError) as exc:
            raise UpstreamProviderError("Malformed AI response", provider="ai") from exc

        if content is None:
            content = ""
        if not isinstance(content, str):
            raise UpstreamProviderError("Malformed AI response", provider="ai")
        return content.strip()


def get_ai_http_client() -> Generator[httpx.Client, None, None]:
    with httpx.Client(timeout=settings.AI_TIMEOUT_SECONDS) as client:
        yield client
