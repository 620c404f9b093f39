"""Service for scoring claims against retrieved evidence."""

import asyncio
import logging
import math
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from ..exceptions import OracleError, OracleMalformedResponseError
from ..models.claim import Claim
from ..models.fact import Fact
from ..models.verification import ClaimScore, TruthScore, utc_timestamp
from ..ports.ai_provider import StructuredJSONProvider

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 50
MIN_SCORE = 0
MAX_SCORE = 100

NO_EVIDENCE_REASONING = "No evidence found for verification"
ERROR_REASONING = "Error during verification"

SCORING_SYSTEM_PROMPT = "You are a fact-checking expert. Return only valid JSON."

SCORING_PROMPT = """Given the claim: "{claim}"
And the following facts from DKG:
{facts}

Score this claim from 0-100 based on factual accuracy.
Return ONLY a JSON object: {{"score": number, "reasoning": "brief explanation"}}"""


def neutral_score(claim: Claim, facts: Sequence[Fact], reasoning: str) -> ClaimScore:
    """The single policy for claims that could not be scored on evidence."""
    return ClaimScore(
        claim=claim,
        score=NEUTRAL_SCORE,
        matched_facts=list(facts),
        reasoning=reasoning,
    )


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def coerce_score(value: Any) -> int:
    """Validate an oracle-provided score and clamp it into 0-100.

    Raises:
        OracleMalformedResponseError: If the value is not a finite number
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise OracleMalformedResponseError(f"Score is not a number: {value!r}")
    if isinstance(value, int):
        # JSON integers are unbounded and may not fit in a float.
        return max(MIN_SCORE, min(MAX_SCORE, value))
    if not math.isfinite(value):
        raise OracleMalformedResponseError(f"Score is not finite: {value!r}")
    return max(MIN_SCORE, min(MAX_SCORE, round_half_up(value)))


def calculate_overall_score(claim_scores: Sequence[ClaimScore]) -> int:
    """Mean of the claim scores, or the neutral score when there are none."""
    if not claim_scores:
        return NEUTRAL_SCORE
    total = sum(claim_score.score for claim_score in claim_scores)
    return round_half_up(total / len(claim_scores))


def count_facts(facts_by_claim: Mapping[str, Sequence[Fact]]) -> int:
    """Total number of facts across all claims."""
    return sum(len(facts) for facts in facts_by_claim.values())


def render_facts(facts: Sequence[Fact]) -> str:
    """Render facts as prompt lines."""
    return "\n".join(f"- {fact.render()}" for fact in facts)


class TruthScorer:
    """Scores claims with the oracle and aggregates an overall score."""

    def __init__(
        self,
        oracle: Optional[StructuredJSONProvider],
        timeout: float = 30.0,
        temperature: float = 0.2,
        max_concurrency: int = 5,
    ):
        """Initialize the scorer.

        Args:
            oracle: Provider used for scoring; ``None`` scores everything neutral
            timeout: Upper bound for each oracle call in seconds
            temperature: Sampling temperature passed to the oracle
            max_concurrency: Maximum number of claims scored at once
        """
        self._oracle = oracle
        self._timeout = timeout
        self._temperature = temperature
        self._max_concurrency = max(1, max_concurrency)

    async def calculate_truth_score(
        self,
        claims: Sequence[Claim],
        facts_by_claim: Mapping[str, List[Fact]],
    ) -> TruthScore:
        """Score every claim and aggregate the results.

        Args:
            claims: Claims in extraction order
            facts_by_claim: Evidence keyed by claim id

        Returns:
            Truth score with claim scores in the same order as ``claims``
        """
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def score_bounded(claim: Claim) -> ClaimScore:
            async with semaphore:
                return await self.score_claim(claim, facts_by_claim.get(claim.id, []))

        claim_scores = list(await asyncio.gather(*(score_bounded(claim) for claim in claims)))

        return TruthScore(
            overall_score=calculate_overall_score(claim_scores),
            claim_scores=claim_scores,
            dkg_facts_used=count_facts(facts_by_claim),
            timestamp=utc_timestamp(),
        )

    async def score_claim(self, claim: Claim, facts: Sequence[Fact]) -> ClaimScore:
        """Score a single claim against its evidence.

        Args:
            claim: Claim to score
            facts: Evidence retrieved for the claim

        Returns:
            Claim score; neutral when there is no evidence or scoring fails
        """
        if not facts:
            return neutral_score(claim, [], NO_EVIDENCE_REASONING)

        if self._oracle is None:
            logger.warning("⚠️ No oracle configured, scoring claim as neutral")
            return neutral_score(claim, facts, ERROR_REASONING)

        prompt = SCORING_PROMPT.format(claim=claim.text, facts=render_facts(facts))
        try:
            payload = await asyncio.wait_for(
                self._oracle.generate_structured_json(
                    prompt,
                    system_prompt=SCORING_SYSTEM_PROMPT,
                    temperature=self._temperature,
                ),
                timeout=self._timeout,
            )
            score, reasoning = self._parse_verdict(payload)
        except asyncio.TimeoutError:
            logger.error(f"❌ Scoring timed out after {self._timeout}s for claim '{claim.text}'")
            return neutral_score(claim, facts, ERROR_REASONING)
        except OracleError as e:
            logger.error(f"❌ Scoring error for claim '{claim.text}': {e}")
            return neutral_score(claim, facts, ERROR_REASONING)

        return ClaimScore(
            claim=claim,
            score=score,
            matched_facts=list(facts),
            reasoning=reasoning,
        )

    @staticmethod
    def _parse_verdict(payload: Any) -> Tuple[int, str]:
        if not isinstance(payload, dict) or "score" not in payload:
            raise OracleMalformedResponseError(f"Expected a JSON object with a score, got {payload!r}")
        score = coerce_score(payload["score"])
        if score != payload["score"]:
            logger.warning(f"⚠️ Oracle score {payload['score']!r} adjusted to {score}")
        reasoning = payload.get("reasoning")
        return score, reasoning if isinstance(reasoning, str) else ""
