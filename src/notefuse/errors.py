"""Error taxonomy for indexing and retrieval.

``TransientError`` subclasses are safe to retry with backoff; nothing in this
package retries them internally. Everything else is a caller mistake or a
hard failure.
"""

from __future__ import annotations


class NotefuseError(Exception):
    """Base class for all notefuse errors."""


class InvalidConfiguration(NotefuseError, ValueError):
    """Raised for bad chunking, weighting, or limit parameters. Never retried."""


class DimensionMismatch(NotefuseError, ValueError):
    """Raised when a vector's length differs from the index dimension."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Expected a {expected}-dimensional vector, got {actual}.")
        self.expected = expected
        self.actual = actual


class TransientError(NotefuseError):
    """Provider or network fault; the caller may retry."""


class EmbeddingProviderError(TransientError):
    """The embedding provider failed (rate limit, bad input, network error)."""


class Timeout(TransientError):
    """An embedding call or document fetch exceeded its timeout."""


class RecordNotFound(NotefuseError, LookupError):
    """A referenced resource does not exist in the document store."""

    def __init__(self, resource_id: str, resource_type: str) -> None:
        super().__init__(f"No {resource_type} with id '{resource_id}'.")
        self.resource_id = resource_id
        self.resource_type = resource_type


class EmbeddingGenerationFailed(NotefuseError):
    """Indexing stopped part-way through a document.

    Records written before the failure stay persisted; there is no rollback.

    Attributes:
        resource_id: Document being indexed.
        records_written: Number of records persisted before the failure.
        failed_index: Index of the first chunk that could not be embedded.
    """

    def __init__(self, resource_id: str, records_written: int, failed_index: int) -> None:
        super().__init__(
            f"Embedding failed for chunk {failed_index} of '{resource_id}' "
            f"after {records_written} record(s) were written."
        )
        self.resource_id = resource_id
        self.records_written = records_written
        self.failed_index = failed_index
