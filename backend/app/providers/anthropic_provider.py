"""
Anthropic Messages API adapter (primary provider)
"""

from typing import Any, Optional

from anthropic import AsyncAnthropic, APIStatusError, APIConnectionError, APITimeoutError

from ..core.error_classifier import ProviderError
from .base import InferenceProvider

SYSTEM_PROMPT = (
    "You are a legal analyst. Analyze the contract and respond with a single JSON "
    "object matching the requested schema. Do not add commentary outside the JSON."
)


class AnthropicProvider(InferenceProvider):
    name = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-sonnet-20241022",
        max_tokens: int = 4000,
        timeout: float = 120.0,
        client: Optional[Any] = None
    ):
        if not api_key or not api_key.startswith("sk-ant-"):
            raise ValueError("Invalid Anthropic API key format. Must start with 'sk-ant-'")
        super().__init__(model=model, max_tokens=max_tokens, timeout=timeout)
        # Retries are driven by the orchestrator
        self.client = client or AsyncAnthropic(api_key=api_key, max_retries=0)

    async def infer(self, prompt: str) -> Any:
        return await self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=0.1,
            system=SYSTEM_PROMPT,
            messages=[{"role": "user", "content": prompt}]
        )

    def extract_text(self, envelope: Any) -> str:
        """Join the text blocks of a Messages API response"""
        parts = [
            block.text for block in envelope.content
            if getattr(block, "type", "text") == "text" and getattr(block, "text", None)
        ]
        if not parts:
            raise ProviderError("Anthropic response contained no text content", provider=self.name)
        return "".join(parts)

    def translate_error(self, error: Exception) -> ProviderError:
        if isinstance(error, APITimeoutError):
            return ProviderError(
                f"Anthropic request timed out: {error}", code="ETIMEDOUT", provider=self.name
            )
        if isinstance(error, APIConnectionError):
            return ProviderError(
                f"Connection error to Anthropic: {error}", code="ECONNREFUSED", provider=self.name
            )
        if isinstance(error, APIStatusError):
            # 529 is Anthropic's overloaded status
            status = 503 if error.status_code == 529 else error.status_code
            return ProviderError(
                f"Anthropic API error {error.status_code}: {error.message}",
                status_code=status,
                provider=self.name
            )
        return super().translate_error(error)
