"""Integrity hashing of verification runs."""

import hashlib
import json
from typing import Any, Dict, Sequence

from ..models.claim import Claim
from ..models.fact import Fact
from ..models.verification import TruthScore

MODEL_VERSION = "MirrorAI-v1.0"


class HashGenerator:
    """Fingerprints a scored, timestamped verification run.

    The truth score timestamp is part of the hashed record, so two runs over
    the same text produce different hashes.
    """

    def __init__(self, model_version: str = MODEL_VERSION):
        self._model_version = model_version

    def build_pipeline_record(
        self,
        post_text: str,
        claims: Sequence[Claim],
        facts: Sequence[Fact],
        truth_score: TruthScore,
    ) -> Dict[str, Any]:
        """Canonical record committed to by the pipeline hash."""
        return {
            "postText": post_text,
            "claims": [claim.text for claim in claims],
            "dkgFactsCount": len(facts),
            "truthScore": truth_score.overall_score,
            "timestamp": truth_score.timestamp,
            "modelVersion": self._model_version,
        }

    def generate_pipeline_hash(
        self,
        post_text: str,
        claims: Sequence[Claim],
        facts: Sequence[Fact],
        truth_score: TruthScore,
    ) -> str:
        """SHA-256 of the canonical record as lowercase hex."""
        record = self.build_pipeline_record(post_text, claims, facts, truth_score)
        serialized = json.dumps(record, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
        return hashlib.sha256(serialized.encode("utf-8")).hexdigest()

    def generate_asset_metadata(self, pipeline_hash: str, truth_score: TruthScore) -> Dict[str, Any]:
        """schema.org FactCheck metadata describing a verification."""
        return {
            "@context": "https://schema.org",
            "@type": "FactCheck",
            "verificationHash": pipeline_hash,
            "truthScore": truth_score.overall_score,
            "claimsAnalyzed": len(truth_score.claim_scores),
            "dkgFactsUsed": truth_score.dkg_facts_used,
            "timestamp": truth_score.timestamp,
            "verifiedBy": "MirrorAI",
        }
