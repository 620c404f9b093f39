"""Domain model for factual claims."""

from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

DEFAULT_CLAIM_CONFIDENCE = 0.8


class ClaimCategory(str, Enum):
    """Kinds of claims the extractor distinguishes."""

    FACT = "fact"
    STATISTIC = "statistic"
    EVENT = "event"
    PERSON = "person"
    GENERAL = "general"

    @classmethod
    def parse(cls, value: object) -> "ClaimCategory":
        """Map a loosely formatted category label onto a known category."""
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.GENERAL


class Claim(BaseModel):
    """An atomic, independently verifiable statement extracted from a post."""

    id: str = Field(default_factory=lambda: str(uuid4()), description="Unique identifier within a run")
    text: str = Field(..., description="The claim text to be verified")
    category: ClaimCategory = Field(default=ClaimCategory.GENERAL, description="Claim category")
    # Placeholder: the extraction oracle does not return a calibrated confidence.
    confidence: float = Field(default=DEFAULT_CLAIM_CONFIDENCE, ge=0.0, le=1.0)

    class Config:
        """Pydantic model configuration."""
        frozen = True
        alias_generator = to_camel
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "id": "2f1c1b8e-6a53-4b8a-9f0e-0c6d1b7f5a11",
                "text": "The moon landing happened in 1969.",
                "category": "event",
                "confidence": 0.8,
            }
        }
