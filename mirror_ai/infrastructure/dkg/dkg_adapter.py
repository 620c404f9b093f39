"""HTTP adapter for an OriginTrail DKG node."""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx
from cachetools import TTLCache
from pydantic import BaseModel, Field

from ...domain.exceptions import (
    KnowledgeSourceError,
    KnowledgeSourceUnavailableError,
    MissingCredentialsError,
    PublicationError,
)

logger = logging.getLogger(__name__)

TESTNET_GATEWAY = "https://dkg-testnet.origintrail.io"
LOCAL_NODE = "http://localhost"
DEFAULT_PORT = 8900

COMPLETED = "COMPLETED"
FAILED = "FAILED"


class DKGConfig(BaseModel):
    """Configuration for the DKG adapter."""

    endpoint: str = Field(default=TESTNET_GATEWAY, description="Node or gateway URL without port")
    port: int = Field(default=DEFAULT_PORT, description="Node HTTP port")
    blockchain: str = Field(default="otp:20430", description="Blockchain identifier")
    public_key: Optional[str] = Field(default=None, description="Publishing wallet address")
    private_key: Optional[str] = Field(default=None, description="Publishing wallet key, never sent to the node")
    repository: str = Field(default="privateCurrent", description="Triple store repository to query")
    timeout: float = Field(default=10.0, description="Request timeout in seconds")
    poll_interval: float = Field(default=0.5, description="Delay between operation status polls")
    max_poll_attempts: int = Field(default=20, description="Polls before an operation is abandoned")
    cache_ttl: int = Field(default=300, description="Query cache TTL in seconds")
    cache_maxsize: int = Field(default=256, description="Maximum query cache size")

    @property
    def base_url(self) -> str:
        """Endpoint and port combined."""
        return f"{self.endpoint.rstrip('/')}:{self.port}"

    @property
    def has_credentials(self) -> bool:
        """Whether a publishing wallet is configured."""
        return bool(self.public_key and self.private_key)


class DKGNodeAdapter:
    """Knowledge provider talking to a DKG node's HTTP API.

    Query and publish are asynchronous operations on the node: the first
    request returns an ``operationId`` that is polled until it completes.
    """

    def __init__(
        self,
        config: Optional[DKGConfig] = None,
        provider_name: str = "OriginTrail DKG",
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the adapter.

        Args:
            config: Adapter configuration
            provider_name: Name of the provider
            client: Preconfigured HTTP client, created on initialize when omitted
        """
        self._config = config or DKGConfig()
        self._name = provider_name
        self._client = client
        self._node_version: Optional[str] = None
        self._cache = TTLCache(
            maxsize=self._config.cache_maxsize,
            ttl=self._config.cache_ttl,
        )

    async def initialize(self) -> None:
        """Create the HTTP client and verify the node answers."""
        try:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self._config.base_url,
                    timeout=self._config.timeout,
                    headers={"Content-Type": "application/json"},
                )

            response = await self._client.get("/info")
            response.raise_for_status()
            self._node_version = response.json().get("version")
            logger.info(f"✅ DKG client initialized ({self._config.base_url}, node {self._node_version})")
        except Exception as e:
            if self._client:
                await self._client.aclose()
                self._client = None
            raise ConnectionError(f"Failed to initialize DKG provider: {e}")

    async def query(self, sparql: str) -> List[Dict[str, Any]]:
        """Run a SPARQL SELECT on the node.

        Raises:
            KnowledgeSourceUnavailableError: If the node cannot be reached
            KnowledgeSourceError: If the node reports the query as failed
        """
        cache_key = f"query:{sparql}"
        if cache_key in self._cache:
            return self._cache[cache_key]

        operation_id = await self._start_operation(
            "/query",
            {"query": sparql, "type": "SELECT", "repository": self._config.repository},
        )
        data = await self._await_operation("/query", operation_id)
        rows = data if isinstance(data, list) else []

        self._cache[cache_key] = rows
        return rows

    async def create_asset(self, content: Dict[str, Any], epochs_num: int) -> Dict[str, Any]:
        """Publish a knowledge asset.

        Raises:
            MissingCredentialsError: If no publishing wallet is configured
            PublicationError: If the node rejects the asset
            KnowledgeSourceUnavailableError: If the node cannot be reached
        """
        if not self._config.has_credentials:
            raise MissingCredentialsError("Publishing wallet keys are not configured")

        operation_id = await self._start_operation(
            "/publish",
            {
                "assertion": content,
                "blockchain": {"name": self._config.blockchain, "publicKey": self._config.public_key},
                "epochsNum": epochs_num,
            },
            publish=True,
        )
        data = await self._await_operation("/publish", operation_id, publish=True)
        return data if isinstance(data, dict) else {}

    async def _start_operation(self, path: str, payload: Dict[str, Any], publish: bool = False) -> str:
        client = self._require_client()
        try:
            response = await client.post(path, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise self._status_error(e, publish) from e
        except httpx.HTTPError as e:
            raise KnowledgeSourceUnavailableError(f"{type(e).__name__}: {e}") from e

        operation_id = self._decode(response).get("operationId")
        if not operation_id:
            raise KnowledgeSourceError(f"Node did not return an operation id for {path}")
        return operation_id

    async def _await_operation(self, path: str, operation_id: str, publish: bool = False) -> Any:
        client = self._require_client()
        for _ in range(self._config.max_poll_attempts):
            try:
                response = await client.get(f"{path}/{operation_id}")
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise self._status_error(e, publish) from e
            except httpx.HTTPError as e:
                raise KnowledgeSourceUnavailableError(f"{type(e).__name__}: {e}") from e

            body = self._decode(response)
            status = body.get("status")
            if status == COMPLETED:
                return body.get("data")
            if status == FAILED:
                data = body.get("data") or {}
                message = data.get("errorMessage") if isinstance(data, dict) else None
                error_class = PublicationError if publish else KnowledgeSourceError
                raise error_class(f"Operation {operation_id} failed: {message or 'unknown error'}")

            await asyncio.sleep(self._config.poll_interval)

        raise KnowledgeSourceUnavailableError(
            f"Operation {operation_id} not completed after {self._config.max_poll_attempts} polls"
        )

    def _status_error(self, error: httpx.HTTPStatusError, publish: bool) -> KnowledgeSourceError:
        status_code = error.response.status_code
        body = error.response.text
        if publish:
            return PublicationError(f"DKG rejected the request: HTTP {status_code} {body}", status_code, body)
        return KnowledgeSourceError(f"DKG query failed: HTTP {status_code}")

    @staticmethod
    def _decode(response: httpx.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError as e:
            raise KnowledgeSourceError(f"Node returned invalid JSON: {e}") from e
        if not isinstance(body, dict):
            raise KnowledgeSourceError(f"Node returned unexpected payload: {body!r}")
        return body

    def _require_client(self) -> httpx.AsyncClient:
        if not self._client:
            raise KnowledgeSourceUnavailableError("Provider not initialized")
        return self._client

    async def shutdown(self) -> None:
        """Shutdown the provider and clean up resources."""
        if self._client:
            await self._client.aclose()
            self._client = None
        self._cache.clear()

    @property
    def provider_name(self) -> str:
        """Get the provider name."""
        return self._name

    @property
    def publisher_key(self) -> Optional[str]:
        """Public key of the publishing wallet."""
        return self._config.public_key

