"""Orchestration of a full verification run."""

import asyncio
import logging
from itertools import chain
from typing import Dict, List, Optional, Sequence

from ..models.claim import Claim
from ..models.fact import Fact
from ..models.verification import NOT_PUBLISHED, VerificationResult, utc_timestamp
from .claim_extractor import ClaimExtractor
from .fact_retriever import FactRetriever
from .hash_generator import HashGenerator
from .truth_scorer import TruthScorer

logger = logging.getLogger(__name__)


class VerificationPipeline:
    """Runs extraction, retrieval, scoring, hashing and publication in order.

    Every stage absorbs its own failures, so a run always ends with a
    well-formed result: no claims, neutral scores and an unpublished hash are
    all valid outcomes.
    """

    def __init__(
        self,
        claim_extractor: ClaimExtractor,
        fact_retriever: FactRetriever,
        truth_scorer: TruthScorer,
        hash_generator: Optional[HashGenerator] = None,
        max_concurrency: int = 5,
    ):
        """Initialize the pipeline.

        Args:
            claim_extractor: Stage turning text into claims
            fact_retriever: Stage retrieving evidence and publishing results
            truth_scorer: Stage scoring claims
            hash_generator: Stage fingerprinting the run
            max_concurrency: Maximum number of claims queried at once
        """
        self._claim_extractor = claim_extractor
        self._fact_retriever = fact_retriever
        self._truth_scorer = truth_scorer
        self._hash_generator = hash_generator or HashGenerator()
        self._max_concurrency = max(1, max_concurrency)

    @property
    def hash_generator(self) -> HashGenerator:
        """Hash generator used for run fingerprints."""
        return self._hash_generator

    async def verify_post(self, post_text: str) -> VerificationResult:
        """Verify a post end to end.

        Args:
            post_text: Raw text to verify

        Returns:
            Verification result for the run
        """
        logger.info("🔍 Step 1: Extracting claims...")
        claims = await self._claim_extractor.extract_claims(post_text)
        logger.info(f"✅ Found {len(claims)} claims")

        logger.info("🔍 Step 2: Querying DKG for facts...")
        facts_by_claim = await self._retrieve_facts(claims)
        all_facts = list(chain.from_iterable(facts_by_claim[claim.id] for claim in claims))
        logger.info(f"✅ Retrieved {len(all_facts)} DKG facts")

        logger.info("🔍 Step 3: Calculating truth score...")
        truth_score = await self._truth_scorer.calculate_truth_score(claims, facts_by_claim)
        logger.info(f"✅ Truth Score: {truth_score.overall_score}/100")

        logger.info("🔍 Step 4: Generating pipeline hash...")
        pipeline_hash = self._hash_generator.generate_pipeline_hash(post_text, claims, all_facts, truth_score)
        logger.info(f"✅ Hash: {pipeline_hash[:16]}...")

        logger.info("🔍 Step 5: Publishing to DKG...")
        ual = await self._fact_retriever.publish_verification(pipeline_hash, truth_score.overall_score, post_text)

        return VerificationResult(
            post_text=post_text,
            claims=claims,
            truth_score=truth_score,
            pipeline_hash=pipeline_hash,
            dkg_asset_ual=ual or NOT_PUBLISHED,
            timestamp=utc_timestamp(),
        )

    async def _retrieve_facts(self, claims: Sequence[Claim]) -> Dict[str, List[Fact]]:
        semaphore = asyncio.Semaphore(self._max_concurrency)
        facts_by_claim: Dict[str, List[Fact]] = {}

        async def retrieve(claim: Claim) -> None:
            async with semaphore:
                facts_by_claim[claim.id] = await self._fact_retriever.query_related_facts(claim.text)

        await asyncio.gather(*(retrieve(claim) for claim in claims))
        return facts_by_claim
