"""Dependency injection configuration for hexagonal architecture."""

import asyncio
import logging
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

from ..domain.ports.knowledge_provider import KnowledgeConnection
from ..domain.services.claim_extractor import ClaimExtractor
from ..domain.services.fact_retriever import FactRetriever
from ..domain.services.hash_generator import HashGenerator
from ..domain.services.truth_scorer import TruthScorer
from ..domain.services.verification_pipeline import VerificationPipeline
from .ai.factory import AIProviderFactory
from .dkg.factory import KnowledgeProviderFactory
from .settings import Settings

logger = logging.getLogger(__name__)

# Load environment variables from .env file if it exists
load_dotenv()


class ServiceContainer:
    """Service container for dependency injection.

    Providers are created lazily on first use so that importing the API
    never touches the network.
    """

    def __init__(self, settings: Optional[Settings] = None):
        """Initialize service container."""
        self._settings = settings or Settings.from_env()
        self._ai_factory = AIProviderFactory()
        self._knowledge_factory = KnowledgeProviderFactory()
        self._pipeline: Optional[VerificationPipeline] = None
        self._lock = asyncio.Lock()

    @property
    def settings(self) -> Settings:
        """Service settings."""
        return self._settings

    async def _connect_knowledge_source(self) -> KnowledgeConnection:
        dkg = self._settings.dkg
        if dkg.endpoint == "" or dkg.port <= 0:
            return KnowledgeConnection.absent("DKG endpoint not configured")
        logger.info(f"🌐 Connecting to DKG at {dkg.base_url}...")
        connection = await self._knowledge_factory.connect("dkg", dkg)
        if not connection.is_connected:
            logger.warning("⚠️ DKG unavailable, retrieval will use demo data and publishing is disabled")
        return connection

    async def _build_pipeline(self) -> VerificationPipeline:
        logger.info("🔧 Creating VerificationPipeline with providers...")
        oracle = await self._ai_factory.create_provider("asi", self._settings.oracle)
        connection = await self._connect_knowledge_source()
        timeout = self._settings.pipeline.stage_timeout
        max_concurrency = self._settings.pipeline.max_concurrency

        pipeline = VerificationPipeline(
            claim_extractor=ClaimExtractor(oracle, timeout=timeout),
            fact_retriever=FactRetriever(connection, timeout=timeout),
            truth_scorer=TruthScorer(oracle, timeout=timeout, max_concurrency=max_concurrency),
            hash_generator=HashGenerator(),
            max_concurrency=max_concurrency,
        )
        logger.info("✅ VerificationPipeline ready")
        return pipeline

    async def get_verification_pipeline(self) -> VerificationPipeline:
        """Get the verification pipeline, creating it on first use."""
        async with self._lock:
            if self._pipeline is None:
                self._pipeline = await self._build_pipeline()
        return self._pipeline

    async def shutdown(self) -> None:
        """Shutdown all providers."""
        await self._ai_factory.shutdown()
        await self._knowledge_factory.shutdown_all()
        self._pipeline = None
        logger.info("👋 Service container shut down")


# Global service container instance
@lru_cache()
def get_service_container() -> ServiceContainer:
    """Get global service container instance.

    Returns:
        Service container instance
    """
    return ServiceContainer()
