"""Domain models for truth scores and verification results."""

from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from .claim import Claim
from .fact import Fact

NOT_PUBLISHED = "not published"


def utc_timestamp() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ClaimScore(BaseModel):
    """Score assigned to a single claim."""

    claim: Claim
    score: int = Field(..., ge=0, le=100, description="Truth score (0-100)")
    matched_facts: List[Fact] = Field(default_factory=list)
    reasoning: str = Field(..., description="Short justification for the score")

    class Config:
        """Pydantic model configuration."""
        frozen = True
        alias_generator = to_camel
        populate_by_name = True


class TruthScore(BaseModel):
    """Aggregated score for all claims of a post."""

    overall_score: int = Field(..., ge=0, le=100)
    claim_scores: List[ClaimScore] = Field(default_factory=list, description="In claim extraction order")
    dkg_facts_used: int = Field(..., ge=0, description="Total facts retrieved across claims")
    timestamp: str = Field(default_factory=utc_timestamp, description="When the score was computed")

    class Config:
        """Pydantic model configuration."""
        frozen = True
        alias_generator = to_camel
        populate_by_name = True


class VerificationResult(BaseModel):
    """Terminal artifact of one verification run."""

    post_text: str
    claims: List[Claim] = Field(default_factory=list)
    truth_score: TruthScore
    pipeline_hash: str = Field(..., min_length=64, max_length=64, description="SHA-256 run fingerprint")
    dkg_asset_ual: str = Field(NOT_PUBLISHED, alias="dkgAssetUAL", description="UAL of the published asset")
    timestamp: str = Field(default_factory=utc_timestamp, description="When the run finished")

    class Config:
        """Pydantic model configuration."""
        frozen = True
        alias_generator = to_camel
        populate_by_name = True

    @property
    def is_published(self) -> bool:
        """Whether the run was written to the knowledge graph."""
        return self.dkg_asset_ual != NOT_PUBLISHED
