"""Exception hierarchy for the question-answering pipeline."""


class VectorQAError(Exception):
    """Base class for errors raised by this package."""


class EmbeddingError(VectorQAError):
    """Raised when the embedding service returns an unusable response."""


class VectorIndexError(VectorQAError):
    """Raised when a vector index operation fails."""


class IndexCreationError(VectorIndexError):
    """Raised when a missing index could not be created."""


class LLMError(VectorQAError):
    """Raised when the completion service fails to produce an answer."""
