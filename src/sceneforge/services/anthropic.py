"""Anthropic Claude API client wrapper."""

import asyncio
import base64
import logging
import mimetypes
from pathlib import Path
from typing import Optional

from anthropic import (
    APIConnectionError,
    APIStatusError,
    AsyncAnthropic,
    RateLimitError,
)

from ..config import config
from ..errors import GenerationError, PermanentError, QuotaExceededError, TransientError
from ..quota import QuotaTracker

logger = logging.getLogger(__name__)


class AnthropicClient:
    """Client wrapper for the Anthropic Claude API.

    Retries are left to the pipeline's retry policy; SDK errors are
    translated into classified ``GenerationError``s.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        quota: Optional[QuotaTracker] = None,
    ) -> None:
        """Initialize the Anthropic client.

        Args:
            api_key: Anthropic API key. Defaults to ANTHROPIC_API_KEY env var.
            model: Model to use. Defaults to config.default_model.
            quota: Optional tracker counting each request.
        """
        self._api_key = api_key or config.anthropic_api_key
        if not self._api_key:
            raise ValueError(
                "Anthropic API key not provided. Set ANTHROPIC_API_KEY env var."
            )

        self._client = AsyncAnthropic(api_key=self._api_key, max_retries=0)
        self._model = model or config.default_model
        self._quota = quota

    @property
    def model(self) -> str:
        """Return the model being used."""
        return self._model

    async def create_message(
        self,
        prompt: str,
        max_tokens: int = 2048,
        system: Optional[str] = None,
        temperature: float = 0.7,
        image_path: Optional[Path] = None,
    ) -> str:
        """Create a message using Claude.

        Args:
            prompt: The user prompt to send.
            max_tokens: Maximum tokens in the response.
            system: Optional system prompt.
            temperature: Sampling temperature (0.0-1.0).
            image_path: Optional image sent ahead of the prompt.

        Returns:
            The text content of Claude's response.

        Raises:
            GenerationError: If the API request fails.
        """
        content: list[dict] = []
        if image_path is not None:
            content.append(await asyncio.to_thread(_image_block, image_path))
        content.append({"type": "text", "text": prompt})

        kwargs = {
            "model": self._model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": content}],
            "temperature": temperature,
        }
        if system:
            kwargs["system"] = system

        if self._quota is not None:
            await self._quota.increment(self._model)

        logger.debug(f"Sending request to Claude ({len(prompt)} chars)")
        try:
            response = await self._client.messages.create(**kwargs)
        except Exception as e:
            raise translate_error(e) from e

        # Extract text content from response
        for block in response.content:
            if getattr(block, "type", None) == "text":
                return block.text
        return ""


def translate_error(error: Exception) -> GenerationError:
    """Map an Anthropic SDK exception onto the pipeline's error kinds."""
    message = f"Claude error: {error}"
    if isinstance(error, RateLimitError):
        return TransientError(message, 429)
    if isinstance(error, APIConnectionError):
        return TransientError(message)
    if isinstance(error, APIStatusError):
        status = error.status_code
        if status in (500, 502, 503, 529):
            return TransientError(message, status)
        if "credit balance" in str(error).lower():
            return QuotaExceededError(message, status)
        return PermanentError(message, status)
    if isinstance(error, GenerationError):
        return error
    return PermanentError(message)


def _image_block(path: Path) -> dict:
    media_type = mimetypes.guess_type(path.name)[0] or "image/png"
    return {
        "type": "image",
        "source": {
            "type": "base64",
            "media_type": media_type,
            "data": base64.b64encode(Path(path).read_bytes()).decode("ascii"),
        },
    }
