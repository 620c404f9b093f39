"""Protocol for the text-completion oracle."""

from typing import Any, Optional, Protocol


class StructuredJSONProvider(Protocol):
    """Capability to turn a prompt into a parsed JSON value.

    Implementations raise ``OracleUnavailableError`` when the call fails and
    ``OracleMalformedResponseError`` when the answer is not valid JSON.
    """

    async def generate_structured_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> Any:
        """Send a prompt and return the decoded JSON answer."""
        ...

    async def shutdown(self) -> None:
        """Clean up resources."""
        ...

    @property
    def provider_name(self) -> str:
        """Get the provider name."""
        ...
