"""
OpenAI Chat Completions adapter (secondary provider)
"""

from typing import Any, Optional

from openai import AsyncOpenAI, APIStatusError, APIConnectionError, APITimeoutError

from ..core.error_classifier import ProviderError
from .anthropic_provider import SYSTEM_PROMPT
from .base import InferenceProvider


class OpenAIProvider(InferenceProvider):
    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        max_tokens: int = 4000,
        timeout: float = 120.0,
        client: Optional[Any] = None
    ):
        if not api_key:
            raise ValueError("OpenAI API key is required")
        super().__init__(model=model, max_tokens=max_tokens, timeout=timeout)
        self.client = client or AsyncOpenAI(api_key=api_key, max_retries=0)

    async def infer(self, prompt: str) -> Any:
        return await self.client.chat.completions.create(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=0.1,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt}
            ]
        )

    def extract_text(self, envelope: Any) -> str:
        content = envelope.choices[0].message.content
        if not content:
            finish_reason = getattr(envelope.choices[0], "finish_reason", None)
            if finish_reason == "content_filter":
                raise ProviderError("OpenAI response blocked by content policy", provider=self.name)
            raise ProviderError("OpenAI response contained no message content", provider=self.name)
        return content

    def translate_error(self, error: Exception) -> ProviderError:
        if isinstance(error, APITimeoutError):
            return ProviderError(
                f"OpenAI request timed out: {error}", code="ETIMEDOUT", provider=self.name
            )
        if isinstance(error, APIConnectionError):
            return ProviderError(
                f"Connection error to OpenAI: {error}", code="ECONNREFUSED", provider=self.name
            )
        if isinstance(error, APIStatusError):
            body = error.body if isinstance(error.body, dict) else {}
            code = body.get("code") if isinstance(body.get("code"), str) else None
            # insufficient_quota arrives as a 429 but is a quota condition
            if code == "insufficient_quota":
                return ProviderError(
                    f"OpenAI quota exceeded: {error.message}",
                    status_code=403,
                    code=code,
                    provider=self.name
                )
            return ProviderError(
                f"OpenAI API error {error.status_code}: {error.message}",
                status_code=error.status_code,
                code=code,
                provider=self.name
            )
        return super().translate_error(error)
