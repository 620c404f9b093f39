"""Domain model for evidence retrieved from the knowledge graph."""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class Fact(BaseModel):
    """A subject-predicate-object triple retrieved as evidence for a claim."""

    subject: str
    predicate: str
    object: str
    source: str = Field(..., description="Where the triple came from")
    timestamp: Optional[str] = Field(None, description="ISO-8601 retrieval time")

    class Config:
        """Pydantic model configuration."""
        frozen = True
        alias_generator = to_camel
        populate_by_name = True

    def render(self) -> str:
        """Render the triple as a single line for prompts."""
        return f"{self.subject} {self.predicate} {self.object}"
