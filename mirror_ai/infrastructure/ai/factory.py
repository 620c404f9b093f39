"""Factory for creating and managing AI providers."""

from typing import Dict, Optional, Type

from .chat_completion_adapter import ChatCompletionAdapter, ChatCompletionConfig


class AIProviderFactory:
    """Creates oracle providers by name and owns their lifecycle."""

    def __init__(self):
        """Initialize the factory."""
        self._providers: Dict[str, Type[ChatCompletionAdapter]] = {}
        self._instances: Dict[str, ChatCompletionAdapter] = {}

        # Register default providers
        self.register_provider("asi", ChatCompletionAdapter)

    def register_provider(self, name: str, provider_class: Type[ChatCompletionAdapter]) -> None:
        """Register an oracle provider class under a name."""
        self._providers[name] = provider_class

    async def create_provider(
        self,
        name: str,
        config: Optional[ChatCompletionConfig] = None,
    ) -> ChatCompletionAdapter:
        """Create and initialize a provider, reusing an existing instance.

        Args:
            name: Registered provider name
            config: Client configuration, used on first creation only

        Returns:
            Initialized provider instance

        Raises:
            ValueError: If no provider is registered under ``name``
        """
        if name not in self._providers:
            raise ValueError(f"Provider '{name}' not found")

        if name not in self._instances:
            provider = self._providers[name](config=config)
            await provider.initialize()
            self._instances[name] = provider

        return self._instances[name]

    async def shutdown(self) -> None:
        """Shutdown all provider instances."""
        for provider in self._instances.values():
            await provider.shutdown()
        self._instances.clear()
