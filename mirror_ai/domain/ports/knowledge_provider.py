"""Knowledge graph provider interface and connection value."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol


class KnowledgeProvider(Protocol):
    """Protocol for a knowledge graph that can be queried and written to."""

    async def initialize(self) -> None:
        """Initialize the provider and verify the node is reachable."""
        ...

    async def query(self, sparql: str) -> List[Dict[str, Any]]:
        """Run a SPARQL SELECT and return its bindings."""
        ...

    async def create_asset(self, content: Dict[str, Any], epochs_num: int) -> Dict[str, Any]:
        """Publish a knowledge asset and return the node's response."""
        ...

    async def shutdown(self) -> None:
        """Shutdown the provider and clean up resources."""
        ...

    @property
    def provider_name(self) -> str:
        """Get the provider name."""
        ...

    @property
    def publisher_key(self) -> Optional[str]:
        """Public key of the wallet used for publishing, if any."""
        ...


@dataclass(frozen=True)
class KnowledgeConnection:
    """Outcome of connecting to the knowledge graph.

    Either holds a ready provider or the reason it could not be created.
    """

    provider: Optional[KnowledgeProvider] = None
    error: Optional[str] = None

    @classmethod
    def absent(cls, error: str) -> "KnowledgeConnection":
        """Connection that failed to initialize."""
        return cls(provider=None, error=error)

    @property
    def is_connected(self) -> bool:
        """Whether a provider is available."""
        return self.provider is not None
