"""Errors raised by adapters and absorbed by the verification services."""

from typing import Optional


class OracleError(Exception):
    """Base error for the text-completion oracle."""


class OracleUnavailableError(OracleError):
    """The oracle call failed or timed out."""


class OracleMalformedResponseError(OracleError):
    """The oracle answered with something other than the expected JSON shape."""


class KnowledgeSourceError(Exception):
    """Base error for the knowledge graph client."""


class KnowledgeSourceUnavailableError(KnowledgeSourceError):
    """The knowledge graph node could not be reached or did not answer in time."""


class PublicationError(KnowledgeSourceError):
    """The knowledge graph rejected a publish request."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class MissingCredentialsError(PublicationError):
    """No publishing wallet is configured."""
