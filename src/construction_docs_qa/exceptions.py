"""
Error types for Construction Docs QA.

Structural contract violations fail fast with these errors. An empty index
or an empty context is not an error: those are normal results and surface
as empty sequences or the refusal answer.
"""

from typing import Optional


class ConstructionQAError(Exception):
    """Base class for all library errors."""


class InvalidArgumentError(ConstructionQAError, ValueError):
    """A caller passed an argument outside its contract (e.g. k <= 0)."""


class DimensionMismatchError(ConstructionQAError, ValueError):
    """
    Embeddings compared or indexed together have different lengths.

    Attributes:
        expected: Dimension already established by the index or query
        actual: Dimension of the offending vector
    """

    def __init__(self, expected: int, actual: int, message: Optional[str] = None):
        self.expected = expected
        self.actual = actual
        super().__init__(
            message or f"Embedding dimension mismatch: expected {expected}, got {actual}"
        )


class IndexCapacityError(ConstructionQAError, RuntimeError):
    """Ingestion would push the index past its configured chunk limit."""

    def __init__(self, max_chunks: int):
        self.max_chunks = max_chunks
        super().__init__(f"Index is limited to {max_chunks} chunks")


class ProviderUnavailableError(ConstructionQAError, RuntimeError):
    """
    An external provider (embeddings, LLM) failed or timed out.

    The library never retries; callers may retry since the failure is transient.
    """

    retryable = True

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider} unavailable: {message}")


class UploadLimitError(InvalidArgumentError):
    """
    An upload batch broke one of the ingestion limits.

    Attributes:
        code: FILE_TOO_LARGE, TOO_MANY_FILES or TOTAL_UPLOAD_TOO_LARGE
        limit: The limit that was exceeded (bytes or file count)
    """

    def __init__(self, code: str, limit: int, message: str):
        self.code = code
        self.limit = limit
        super().__init__(message)
