"""Service for retrieving evidence from, and publishing results to, the DKG."""

import asyncio
import hashlib
import logging
import re
from enum import Enum
from typing import Any, Dict, List, Optional

from ..exceptions import (
    KnowledgeSourceError,
    KnowledgeSourceUnavailableError,
    MissingCredentialsError,
    PublicationError,
)
from ..models.fact import Fact
from ..models.verification import utc_timestamp
from ..ports.knowledge_provider import KnowledgeConnection

logger = logging.getLogger(__name__)

STOP_WORDS = frozenset(["the", "is", "at", "which", "on", "a", "an", "to", "in", "and"])
MAX_KEYWORDS = 3
MIN_KEYWORD_LENGTH = 4
MAX_LIVE_FACTS = 5

PUBLISH_EPOCHS = 2
DESCRIPTION_LIMIT = 200
ASSET_NAME = "MirrorAI Verification"

LIVE_SOURCE = "OriginTrail DKG"
FALLBACK_ABOUT_SOURCE = "OriginTrail DKG (Demo Data)"
FALLBACK_RELATED_SOURCE = "DKG Knowledge Graph"


class PublicationFailureCause(str, Enum):
    """Why a publish attempt did not produce a UAL."""

    NETWORK = "network"
    QUOTA = "quota"
    CREDENTIALS = "credentials"
    API = "api"
    MALFORMED_RESPONSE = "malformed_response"
    UNKNOWN = "unknown"


PUBLICATION_HINTS = {
    PublicationFailureCause.NETWORK: "Network issue: check connectivity to the DKG endpoint",
    PublicationFailureCause.QUOTA: "Insufficient tokens: check TRAC/NEURO balance",
    PublicationFailureCause.CREDENTIALS: "Publishing wallet keys are not configured",
    PublicationFailureCause.API: "DKG API error",
    PublicationFailureCause.MALFORMED_RESPONSE: "DKG response did not contain a UAL",
    PublicationFailureCause.UNKNOWN: "Publishing skipped - system works without DKG publication",
}


def extract_keywords(text: str) -> List[str]:
    """Pick up to three retrieval keywords from a claim."""
    words = re.sub(r"[^\w\s]", "", text.lower()).split()
    keywords = [word for word in words if len(word) >= MIN_KEYWORD_LENGTH and word not in STOP_WORDS]
    return keywords[:MAX_KEYWORDS]


def build_keyword_query(terms: List[str], limit: int = MAX_LIVE_FACTS) -> str:
    """Build a SPARQL SELECT matching literals that mention any of the terms."""
    conditions = " || ".join(
        f'CONTAINS(LCASE(STR(?o)), "{_escape_literal(term)}")' for term in terms
    )
    return (
        "SELECT ?s ?p ?o WHERE {\n"
        "  ?s ?p ?o .\n"
        "  FILTER(isLiteral(?o))\n"
        f"  FILTER({conditions})\n"
        "}\n"
        f"LIMIT {limit}"
    )


def _escape_literal(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _binding_value(row: Dict[str, Any], short: str, long: str, default: str) -> str:
    value = row.get(short)
    if isinstance(value, dict):
        value = value.get("value")
    if not value:
        value = row.get(long)
    if not value:
        return default
    return str(value).strip('"')


def parse_query_results(rows: List[Dict[str, Any]]) -> List[Fact]:
    """Convert SPARQL bindings into facts, keeping at most five."""
    if not isinstance(rows, list):
        return []
    timestamp = utc_timestamp()
    return [
        Fact(
            subject=_binding_value(row, "s", "subject", "DKG_Asset"),
            predicate=_binding_value(row, "p", "predicate", "relatesTo"),
            object=_binding_value(row, "o", "object", "Knowledge"),
            source=LIVE_SOURCE,
            timestamp=timestamp,
        )
        for row in rows[:MAX_LIVE_FACTS]
        if isinstance(row, dict)
    ]


def synthetic_facts(claim_text: str) -> List[Fact]:
    """Deterministic stand-in evidence used when the DKG cannot be queried.

    Subjects and objects depend only on the claim text.
    """
    keywords = extract_keywords(claim_text)
    digest = hashlib.sha256(claim_text.encode("utf-8")).hexdigest()[:16]
    timestamp = utc_timestamp()
    return [
        Fact(
            subject=f"dkg:asset:{keywords[0] if keywords else 'verification'}",
            predicate="schema:about",
            object=claim_text[:60],
            source=FALLBACK_ABOUT_SOURCE,
            timestamp=timestamp,
        ),
        Fact(
            subject=f"dkg:knowledge:{digest}",
            predicate="schema:relatedTo",
            object=", ".join(keywords),
            source=FALLBACK_RELATED_SOURCE,
            timestamp=timestamp,
        ),
    ]


def classify_publication_failure(error: BaseException) -> PublicationFailureCause:
    """Map a publish error onto an operator-facing cause."""
    message = str(error).lower()
    if "insufficient" in message or "balance" in message:
        return PublicationFailureCause.QUOTA
    if isinstance(error, MissingCredentialsError):
        return PublicationFailureCause.CREDENTIALS
    if isinstance(error, (KnowledgeSourceUnavailableError, ConnectionError, asyncio.TimeoutError)) or "enotfound" in message:
        return PublicationFailureCause.NETWORK
    if isinstance(error, PublicationError) and error.status_code is not None:
        return PublicationFailureCause.API
    return PublicationFailureCause.UNKNOWN


class FactRetriever:
    """Queries the DKG for evidence and publishes verification records."""

    def __init__(self, connection: KnowledgeConnection, timeout: float = 30.0):
        """Initialize the retriever.

        Args:
            connection: Result of connecting to the knowledge graph
            timeout: Upper bound for each DKG call in seconds
        """
        self._connection = connection
        self._timeout = timeout

    @property
    def is_connected(self) -> bool:
        """Whether live DKG access is available."""
        return self._connection.is_connected

    async def query_related_facts(self, claim_text: str) -> List[Fact]:
        """Retrieve evidence for a claim.

        Never raises: an absent connection or a failing query falls back to
        synthetic facts.

        Args:
            claim_text: Text of the claim

        Returns:
            Up to five facts
        """
        keywords = extract_keywords(claim_text)
        logger.info(f"🔍 Querying DKG for: {', '.join(keywords)}")

        if not self._connection.is_connected:
            logger.info(f"⚠️ DKG not connected ({self._connection.error}), using demo data")
            return synthetic_facts(claim_text)

        terms = keywords or [claim_text[:60].lower()]
        try:
            rows = await asyncio.wait_for(
                self._connection.provider.query(build_keyword_query(terms)),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"❌ DKG query timed out after {self._timeout}s, using demo data as fallback")
            return synthetic_facts(claim_text)
        except KnowledgeSourceError as e:
            logger.error(f"❌ DKG query error: {e}, using demo data as fallback")
            return synthetic_facts(claim_text)
        except Exception as e:
            logger.error(f"❌ Unexpected DKG query error: {type(e).__name__}: {e}, using demo data as fallback", exc_info=True)
            return synthetic_facts(claim_text)

        facts = parse_query_results(rows)
        logger.info(f"📊 DKG returned {len(facts)} facts")
        return facts

    def build_publication_record(self, pipeline_hash: str, truth_score: int, post_text: str) -> Dict[str, Any]:
        """Assemble the public knowledge asset for a verification."""
        return {
            "@context": "https://schema.org",
            "@type": "FactCheck",
            "name": ASSET_NAME,
            "description": post_text[:DESCRIPTION_LIMIT],
            "hash": pipeline_hash,
            "score": truth_score,
            "timestamp": utc_timestamp(),
        }

    async def publish_verification(self, pipeline_hash: str, truth_score: int, post_text: str) -> Optional[str]:
        """Publish a verification to the DKG.

        Args:
            pipeline_hash: Run fingerprint
            truth_score: Overall score of the run
            post_text: Original post, truncated in the record

        Returns:
            UAL assigned by the DKG, or ``None`` when nothing was published
        """
        if not self._connection.is_connected:
            logger.info("⚠️ Cannot publish - DKG not connected")
            return None

        provider = self._connection.provider
        content = {"public": self.build_publication_record(pipeline_hash, truth_score, post_text)}

        logger.info("📤 Publishing verification to DKG...")
        try:
            response = await asyncio.wait_for(
                provider.create_asset(content, epochs_num=PUBLISH_EPOCHS),
                timeout=self._timeout,
            )
        except (KnowledgeSourceError, asyncio.TimeoutError) as e:
            self._log_publication_failure(classify_publication_failure(e), e, provider.publisher_key)
            return None
        except Exception as e:
            logger.error(f"❌ Unexpected DKG publish error: {type(e).__name__}: {e}", exc_info=True)
            self._log_publication_failure(classify_publication_failure(e), e, provider.publisher_key)
            return None

        ual = response.get("UAL") if isinstance(response, dict) else None
        if not ual or not isinstance(ual, str):
            self._log_publication_failure(PublicationFailureCause.MALFORMED_RESPONSE, response, None)
            return None

        logger.info(f"✅ Published to DKG! UAL: {ual}")
        return ual

    def _log_publication_failure(
        self,
        cause: PublicationFailureCause,
        detail: object,
        publisher_key: Optional[str],
    ) -> None:
        logger.error(f"❌ DKG publish failed ({cause.value}): {detail}")
        logger.info(f"💡 {PUBLICATION_HINTS[cause]}")
        if cause == PublicationFailureCause.QUOTA and publisher_key:
            logger.info(f"💡 Wallet: {publisher_key}")
        elif cause == PublicationFailureCause.API and isinstance(detail, PublicationError):
            logger.info(f"💡 API Error: {detail.status_code} {detail.body}")
