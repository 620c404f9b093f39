"""OpenAI-compatible chat completion implementation of the JSON oracle."""

import json
import logging
import re
from typing import Any, Optional

from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel, Field

from ...domain.exceptions import OracleMalformedResponseError, OracleUnavailableError

logger = logging.getLogger(__name__)

_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class ChatCompletionConfig(BaseModel):
    """Configuration for the chat completion adapter."""

    api_key: str = Field(default="", description="API key of the completion service")
    base_url: str = Field(default="https://api.asi1.ai/v1", description="OpenAI-compatible base URL")
    model: str = Field(default="asi1-mini", description="Model to use")
    temperature: float = Field(default=0.3, description="Default sampling temperature")
    timeout: float = Field(default=30.0, description="API timeout in seconds")
    max_retries: int = Field(default=1, description="Retries performed by the client")


def parse_json_content(content: str) -> Any:
    """Decode a model answer, tolerating a surrounding markdown code fence.

    Raises:
        OracleMalformedResponseError: If the content is not valid JSON
    """
    text = content.strip()
    match = _FENCE_PATTERN.match(text)
    if match:
        text = match.group(1)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise OracleMalformedResponseError(f"Response is not valid JSON: {e}") from e


class ChatCompletionAdapter:
    """Structured JSON oracle backed by an OpenAI-compatible API."""

    def __init__(
        self,
        config: Optional[ChatCompletionConfig] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        """Initialize the adapter."""
        self._config = config or ChatCompletionConfig()
        self._client = client

    async def initialize(self) -> None:
        """Create the API client."""
        if not self._config.api_key:
            logger.warning("⚠️ No API key configured for the completion service")
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._config.api_key,
                base_url=self._config.base_url,
                timeout=self._config.timeout,
                max_retries=self._config.max_retries,
            )

    async def generate_structured_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> Any:
        """Send a prompt and decode the JSON answer.

        Raises:
            OracleUnavailableError: If the provider is not initialized or the call fails
            OracleMalformedResponseError: If the answer is empty or not JSON
        """
        if not self._client:
            raise OracleUnavailableError("Provider not initialized")

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            response = await self._client.chat.completions.create(
                model=self._config.model,
                messages=messages,
                temperature=self._config.temperature if temperature is None else temperature,
            )
        except OpenAIError as e:
            raise OracleUnavailableError(f"{type(e).__name__}: {e}") from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise OracleMalformedResponseError(f"Unexpected completion shape: {e}") from e
        if not content:
            raise OracleMalformedResponseError("Empty completion")

        return parse_json_content(content)

    async def shutdown(self) -> None:
        """Clean up resources and shut down the provider."""
        if self._client:
            await self._client.close()
            self._client = None

    @property
    def provider_name(self) -> str:
        """Get the name of the AI provider."""
        return "ASI:One"

