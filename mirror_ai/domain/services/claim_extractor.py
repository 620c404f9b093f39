"""Service for decomposing a post into verifiable claims."""

import asyncio
import logging
from typing import Any, List, Optional

from ..exceptions import OracleError
from ..models.claim import DEFAULT_CLAIM_CONFIDENCE, Claim, ClaimCategory
from ..ports.ai_provider import StructuredJSONProvider

logger = logging.getLogger(__name__)

EXTRACTION_SYSTEM_PROMPT = "You are a factual claim extraction expert. Return only valid JSON arrays."

EXTRACTION_PROMPT = """Extract all factual claims from the following text.
Return ONLY a JSON array of claims in this exact format:
[{{"text": "claim text", "category": "fact/statistic/event/person"}}]

Text: {text}

Extract claims that can be verified as true or false. Ignore opinions."""


class ClaimExtractor:
    """Extracts atomic claims from free text using the oracle."""

    def __init__(
        self,
        oracle: Optional[StructuredJSONProvider],
        timeout: float = 30.0,
        temperature: float = 0.3,
    ):
        """Initialize the extractor.

        Args:
            oracle: Provider used for extraction; ``None`` disables extraction
            timeout: Upper bound for the oracle call in seconds
            temperature: Sampling temperature passed to the oracle
        """
        self._oracle = oracle
        self._timeout = timeout
        self._temperature = temperature

    async def extract_claims(self, text: str) -> List[Claim]:
        """Extract claims from text.

        Empty input, oracle failures and malformed answers all yield an
        empty list so the pipeline can still produce a result.

        Args:
            text: Raw post text

        Returns:
            Claims in the order the oracle listed them
        """
        if not text or not text.strip():
            logger.info("📭 Empty text, no claims to extract")
            return []

        if self._oracle is None:
            logger.warning("⚠️ No oracle configured, skipping claim extraction")
            return []

        try:
            payload = await asyncio.wait_for(
                self._oracle.generate_structured_json(
                    EXTRACTION_PROMPT.format(text=text),
                    system_prompt=EXTRACTION_SYSTEM_PROMPT,
                    temperature=self._temperature,
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"❌ Claim extraction timed out after {self._timeout}s")
            return []
        except OracleError as e:
            logger.error(f"❌ Claim extraction error: {e}")
            return []

        if not isinstance(payload, list):
            logger.error(f"❌ Claim extraction returned {type(payload).__name__}, expected a JSON array")
            return []

        return self._build_claims(payload)

    def _build_claims(self, items: List[Any]) -> List[Claim]:
        claims = []
        for item in items:
            if not isinstance(item, dict):
                logger.warning(f"⚠️ Skipping malformed claim entry: {item!r}")
                continue
            text = item.get("text")
            if not isinstance(text, str) or not text.strip():
                logger.warning(f"⚠️ Skipping claim entry without text: {item!r}")
                continue
            claims.append(
                Claim(
                    text=text.strip(),
                    category=ClaimCategory.parse(item.get("category")),
                    confidence=DEFAULT_CLAIM_CONFIDENCE,
                )
            )
        return claims
