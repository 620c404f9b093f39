"""Test configuration and common fixtures."""

import asyncio
from typing import Any, Callable, Dict, List, Optional, Union

import pytest

from mirror_ai.domain.exceptions import OracleUnavailableError
from mirror_ai.domain.models.claim import Claim, ClaimCategory
from mirror_ai.domain.models.fact import Fact
from mirror_ai.domain.ports.knowledge_provider import KnowledgeConnection
from mirror_ai.domain.services.claim_extractor import EXTRACTION_SYSTEM_PROMPT

Answer = Union[Any, Exception, Callable[[str], Any]]


class FakeOracle:
    """Scripted structured JSON oracle.

    Extraction and scoring prompts are told apart by their system prompt so
    answers stay deterministic when claims are scored concurrently.
    """

    def __init__(self, extraction: Answer = None, scoring: Answer = None, delay: Optional[Callable[[str], float]] = None):
        self.extraction = extraction
        self.scoring = scoring
        self.delay = delay
        self.calls: List[Dict[str, Any]] = []

    @property
    def scoring_calls(self) -> List[Dict[str, Any]]:
        return [call for call in self.calls if call["system_prompt"] != EXTRACTION_SYSTEM_PROMPT]

    async def generate_structured_json(self, prompt, system_prompt=None, temperature=None):
        self.calls.append({"prompt": prompt, "system_prompt": system_prompt, "temperature": temperature})
        if self.delay:
            await asyncio.sleep(self.delay(prompt))
        answer = self.extraction if system_prompt == EXTRACTION_SYSTEM_PROMPT else self.scoring
        if isinstance(answer, Exception):
            raise answer
        if callable(answer):
            return answer(prompt)
        return answer

    async def shutdown(self) -> None:
        pass

    @property
    def provider_name(self) -> str:
        return "Fake"


class FakeKnowledgeProvider:
    """In-memory knowledge provider."""

    def __init__(
        self,
        rows: Optional[List[Dict[str, Any]]] = None,
        asset: Optional[Dict[str, Any]] = None,
        query_error: Optional[Exception] = None,
        publish_error: Optional[Exception] = None,
    ):
        self.rows = rows or []
        self.asset = asset if asset is not None else {"UAL": "did:dkg:otp:20430/0xabc/1"}
        self.query_error = query_error
        self.publish_error = publish_error
        self.queries: List[str] = []
        self.published: List[Dict[str, Any]] = []

    async def initialize(self) -> None:
        pass

    async def query(self, sparql):
        self.queries.append(sparql)
        if self.query_error:
            raise self.query_error
        return self.rows

    async def create_asset(self, content, epochs_num):
        self.published.append({"content": content, "epochs_num": epochs_num})
        if self.publish_error:
            raise self.publish_error
        return self.asset

    async def shutdown(self) -> None:
        pass

    @property
    def provider_name(self) -> str:
        return "FakeDKG"

    @property
    def publisher_key(self) -> Optional[str]:
        return "0xpublisher"


@pytest.fixture
def offline_connection() -> KnowledgeConnection:
    """Knowledge connection for an unreachable DKG."""
    return KnowledgeConnection.absent("Failed to initialize provider dkg: connection refused")


@pytest.fixture
def unavailable_oracle() -> FakeOracle:
    """Oracle whose every call fails."""
    error = OracleUnavailableError("connection refused")
    return FakeOracle(extraction=error, scoring=error)


@pytest.fixture
def make_claim() -> Callable[..., Claim]:
    """Factory for claims."""
    def _make(text: str = "The moon landing happened in 1969.", category: ClaimCategory = ClaimCategory.EVENT) -> Claim:
        return Claim(text=text, category=category)
    return _make


@pytest.fixture
def make_fact() -> Callable[..., Fact]:
    """Factory for facts."""
    def _make(subject: str = "dkg:asset:apollo11", predicate: str = "schema:startDate", obj: str = "1969-07-16") -> Fact:
        return Fact(subject=subject, predicate=predicate, object=obj, source="OriginTrail DKG")
    return _make
