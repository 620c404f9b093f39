"""Tests for claim scoring and aggregation."""

import pytest

from conftest import FakeOracle
from mirror_ai.domain.exceptions import OracleMalformedResponseError
from mirror_ai.domain.models.verification import ClaimScore
from mirror_ai.domain.services.truth_scorer import (
    ERROR_REASONING,
    NEUTRAL_SCORE,
    NO_EVIDENCE_REASONING,
    TruthScorer,
    calculate_overall_score,
    coerce_score,
    neutral_score,
    round_half_up,
)


def _scores(claim, values):
    return [ClaimScore(claim=claim, score=value, reasoning="") for value in values]


@pytest.mark.parametrize("values, expected", [
    ([], 50),
    ([85], 85),
    ([85, 20], 53),
    ([0, 1], 1),
    ([10, 20, 40], 23),
    ([100, 100, 99], 100),
])
def test_calculate_overall_score(make_claim, values, expected):
    """Test the overall score is the rounded mean, neutral when empty."""
    assert calculate_overall_score(_scores(make_claim(), values)) == expected


def test_round_half_up():
    """Test halves round up rather than to even."""
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2


@pytest.mark.parametrize("value, expected", [
    (85, 85),
    (72.6, 73),
    (-5, 0),
    (150, 100),
    (0, 0),
    (10 ** 400, 100),
    (-(10 ** 400), 0),
])
def test_coerce_score(value, expected):
    """Test oracle scores are rounded and clamped."""
    assert coerce_score(value) == expected


@pytest.mark.parametrize("value", ["85", None, True, float("nan"), float("inf"), [85]])
def test_coerce_score_rejects_non_numbers(value):
    """Test non-numeric scores are malformed."""
    with pytest.raises(OracleMalformedResponseError):
        coerce_score(value)


def test_neutral_score(make_claim, make_fact):
    """Test the neutral policy keeps the given evidence."""
    claim = make_claim()
    result = neutral_score(claim, [make_fact()], ERROR_REASONING)

    assert result.score == NEUTRAL_SCORE
    assert result.claim == claim
    assert len(result.matched_facts) == 1
    assert result.reasoning == ERROR_REASONING


@pytest.mark.asyncio
async def test_score_claim_with_evidence(make_claim, make_fact):
    """Test a claim with two facts takes the oracle's score."""
    oracle = FakeOracle(scoring={"score": 85, "reasoning": "Apollo 11 landed in July 1969."})
    scorer = TruthScorer(oracle)
    facts = [make_fact(), make_fact("dkg:asset:apollo11", "schema:location", "Moon")]

    result = await scorer.score_claim(make_claim(), facts)

    assert result.score == 85
    assert len(result.matched_facts) == 2
    assert result.reasoning == "Apollo 11 landed in July 1969."
    prompt = oracle.calls[0]["prompt"]
    assert "- dkg:asset:apollo11 schema:startDate 1969-07-16" in prompt
    assert "- dkg:asset:apollo11 schema:location Moon" in prompt


@pytest.mark.asyncio
async def test_score_claim_without_evidence_skips_oracle(make_claim):
    """Test claims without evidence are neutral and never sent to the oracle."""
    oracle = FakeOracle(scoring={"score": 0, "reasoning": "unused"})

    result = await TruthScorer(oracle).score_claim(make_claim(), [])

    assert result.score == NEUTRAL_SCORE
    assert result.reasoning == NO_EVIDENCE_REASONING
    assert result.matched_facts == []
    assert oracle.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("answer", [
    OracleMalformedResponseError("not JSON"),
    {"reasoning": "no score"},
    {"score": "high", "reasoning": "words"},
    [85],
])
async def test_score_claim_failure_is_neutral(make_claim, make_fact, answer):
    """Test failed or malformed scoring falls back to neutral."""
    result = await TruthScorer(FakeOracle(scoring=answer)).score_claim(make_claim(), [make_fact()])

    assert result.score == NEUTRAL_SCORE
    assert result.reasoning == ERROR_REASONING
    assert len(result.matched_facts) == 1


@pytest.mark.asyncio
async def test_score_claim_oracle_unavailable(make_claim, make_fact, unavailable_oracle):
    """Test an unreachable oracle falls back to neutral."""
    result = await TruthScorer(unavailable_oracle).score_claim(make_claim(), [make_fact()])

    assert result.score == NEUTRAL_SCORE
    assert result.reasoning == ERROR_REASONING


@pytest.mark.asyncio
async def test_score_claim_timeout(make_claim, make_fact):
    """Test a slow oracle falls back to neutral."""
    oracle = FakeOracle(scoring={"score": 90, "reasoning": "late"}, delay=lambda prompt: 1.0)

    result = await TruthScorer(oracle, timeout=0.01).score_claim(make_claim(), [make_fact()])

    assert result.score == NEUTRAL_SCORE


@pytest.mark.asyncio
async def test_out_of_range_score_is_clamped(make_claim, make_fact):
    """Test oracle scores outside 0-100 are clamped."""
    oracle = FakeOracle(scoring={"score": 140, "reasoning": "very true"})

    result = await TruthScorer(oracle).score_claim(make_claim(), [make_fact()])

    assert result.score == 100


@pytest.mark.asyncio
async def test_calculate_truth_score(make_claim, make_fact):
    """Test aggregation over several claims."""
    claims = [make_claim("The moon landing happened in 1969."), make_claim("The Earth is flat."), make_claim("Unknown.")]
    facts = {
        claims[0].id: [make_fact(), make_fact()],
        claims[1].id: [make_fact("dkg:asset:earth", "schema:shape", "oblate spheroid")],
        claims[2].id: [],
    }

    def verdict(prompt):
        return {"score": 95, "reasoning": "true"} if "moon" in prompt else {"score": 2, "reasoning": "false"}

    oracle = FakeOracle(scoring=verdict)
    truth_score = await TruthScorer(oracle).calculate_truth_score(claims, facts)

    assert [cs.score for cs in truth_score.claim_scores] == [95, 2, 50]
    assert truth_score.overall_score == 49
    assert truth_score.dkg_facts_used == 3
    assert truth_score.timestamp
    assert len(oracle.scoring_calls) == 2


@pytest.mark.asyncio
async def test_calculate_truth_score_preserves_order(make_claim, make_fact):
    """Test claim scores follow claim order even when completion order differs."""
    claims = [make_claim(f"Claim number {i}.") for i in range(5)]
    facts = {claim.id: [make_fact()] for claim in claims}

    def delay(prompt):
        return 0.05 if "number 0" in prompt else 0.0

    def verdict(prompt):
        index = int(prompt.split("Claim number ")[1][0])
        return {"score": index * 10, "reasoning": f"claim {index}"}

    truth_score = await TruthScorer(FakeOracle(scoring=verdict, delay=delay), max_concurrency=5).calculate_truth_score(claims, facts)

    assert [cs.claim.id for cs in truth_score.claim_scores] == [claim.id for claim in claims]
    assert [cs.score for cs in truth_score.claim_scores] == [0, 10, 20, 30, 40]


@pytest.mark.asyncio
async def test_calculate_truth_score_without_claims():
    """Test an empty claim list scores neutral."""
    truth_score = await TruthScorer(FakeOracle()).calculate_truth_score([], {})

    assert truth_score.overall_score == NEUTRAL_SCORE
    assert truth_score.claim_scores == []
    assert truth_score.dkg_facts_used == 0


@pytest.mark.asyncio
async def test_huge_integer_score_is_clamped(make_claim, make_fact):
    """Test integers too large for a float are clamped instead of failing the run."""
    oracle = FakeOracle(scoring={"score": 10 ** 400, "reasoning": "certain"})

    result = await TruthScorer(oracle).score_claim(make_claim(), [make_fact()])

    assert result.score == 100
    assert result.reasoning == "certain"
