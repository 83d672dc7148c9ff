"""
Inference provider interface

Each provider returns its own response envelope; subclasses reduce it to raw
text with extract_text() so every provider feeds the same normalizer.
"""

import asyncio
from typing import Any, Optional

import structlog

from ..core.error_classifier import ProviderError

logger = structlog.get_logger(__name__)


class InferenceProvider:
    """
    Base class for LLM inference adapters

    Subclasses implement infer() (the SDK call), extract_text() (envelope to
    raw text) and translate_error() (SDK exception to ProviderError).
    """

    name: str = "provider"

    def __init__(self, model: str, max_tokens: int = 4000, timeout: float = 120.0):
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout

    async def infer(self, prompt: str) -> Any:
        raise NotImplementedError

    def extract_text(self, envelope: Any) -> str:
        raise NotImplementedError

    def translate_error(self, error: Exception) -> ProviderError:
        return ProviderError(str(error) or type(error).__name__, provider=self.name)

    async def complete(self, prompt: str, timeout: Optional[float] = None) -> str:
        """
        Run one bounded inference call and return the raw response text

        Raises:
            ProviderError: On any provider, transport or envelope failure
        """
        limit = timeout if timeout is not None else self.timeout
        try:
            envelope = await asyncio.wait_for(self.infer(prompt), timeout=limit)
        except asyncio.CancelledError:
            raise
        except asyncio.TimeoutError:
            raise ProviderError(
                f"Request to {self.name} timed out after {limit:.0f} seconds",
                code="ETIMEDOUT",
                provider=self.name
            )
        except ProviderError:
            raise
        except Exception as e:
            raise self.translate_error(e) from e

        try:
            text = self.extract_text(envelope)
        except (AttributeError, IndexError, KeyError, TypeError) as e:
            raise ProviderError(
                f"Invalid {self.name} response envelope: {e}",
                provider=self.name
            ) from e

        logger.debug("Provider response received", provider=self.name, response_length=len(text))
        return text

    async def close(self) -> None:
        """Release the underlying HTTP client"""
        client = getattr(self, "client", None)
        if client is not None and hasattr(client, "close"):
            await client.close()
