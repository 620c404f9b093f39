"""Factory for creating knowledge graph connections."""

import logging
from typing import Dict, Optional, Type

from ...domain.ports.knowledge_provider import KnowledgeConnection, KnowledgeProvider
from .dkg_adapter import DKGConfig, DKGNodeAdapter

logger = logging.getLogger(__name__)


class KnowledgeProviderFactory:
    """Factory for creating and managing knowledge graph providers.

    This factory maintains a registry of available providers and handles
    their lifecycle (initialization, shutdown).
    """

    def __init__(self):
        """Initialize the factory."""
        self._provider_registry: Dict[str, Type[KnowledgeProvider]] = {}
        self._active_providers: Dict[str, KnowledgeProvider] = {}

        # Register default providers
        self.register_provider("dkg", DKGNodeAdapter)

    def register_provider(self, name: str, provider_class: Type[KnowledgeProvider]) -> None:
        """Register a new provider class.

        Args:
            name: Unique identifier for the provider
            provider_class: The provider class to register
        """
        if name in self._provider_registry:
            raise ValueError(f"Provider {name} already registered")
        self._provider_registry[name] = provider_class

    async def create_provider(self, name: str, config: Optional[DKGConfig] = None) -> KnowledgeProvider:
        """Create and initialize a new provider instance.

        Args:
            name: Name of the provider to create
            config: Provider configuration

        Returns:
            Initialized provider instance

        Raises:
            ValueError: If provider not found
            RuntimeError: If initialization fails
        """
        if name not in self._provider_registry:
            raise ValueError(f"Provider {name} not registered")

        provider = self._provider_registry[name](config=config)
        try:
            await provider.initialize()
        except Exception as e:
            raise RuntimeError(f"Failed to initialize provider {name}: {e}") from e

        self._active_providers[name] = provider
        return provider

    async def connect(self, name: str, config: Optional[DKGConfig] = None) -> KnowledgeConnection:
        """Create a provider and report the outcome as a connection value.

        Args:
            name: Name of the provider to create
            config: Provider configuration

        Returns:
            Connection holding the provider, or the reason it is absent
        """
        try:
            provider = await self.create_provider(name, config)
        except (ValueError, RuntimeError) as e:
            logger.warning(f"⚠️ DKG initialization error: {e}")
            return KnowledgeConnection.absent(str(e))
        return KnowledgeConnection(provider=provider)

    async def shutdown_provider(self, name: str) -> None:
        """Shutdown a specific provider.

        Args:
            name: Name of the provider to shutdown
        """
        provider = self._active_providers.pop(name, None)
        if provider:
            await provider.shutdown()

    async def shutdown_all(self) -> None:
        """Shutdown all active providers."""
        for name in list(self._active_providers.keys()):
            await self.shutdown_provider(name)

