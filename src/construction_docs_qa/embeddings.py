"""
Embedding Providers for Construction Docs QA.

Provides text embeddings for indexing chunks and for queries:
- OpenAIEmbedder: OpenAI embeddings API (text-embedding-3-small by default)
- SentenceTransformerEmbedder: local sentence-transformers model

Any object with embed(text) and embed_batch(texts) can be used instead.
Dimensionality is fixed per model; values are not assumed to be
deterministic across calls.
"""

import os
from typing import List, Optional

from .exceptions import ProviderUnavailableError


# Default configuration
DEFAULT_OPENAI_EMBEDDING_MODEL = "text-embedding-3-small"
DEFAULT_LOCAL_EMBEDDING_MODEL = "all-MiniLM-L6-v2"
DEFAULT_TIMEOUT_SECONDS = 60.0


class BaseEmbedder:
    """Common interface for embedding providers."""

    model_name: str = ""

    def embed_batch(self, texts: List[str]) -> List[List[float]]:
        """Embed several texts, returning one vector per text in order."""
        raise NotImplementedError

    def embed(self, text: str) -> List[float]:
        """Embed a single text."""
        return self.embed_batch([text])[0]


class OpenAIEmbedder(BaseEmbedder):
    """
    Embedding client using the OpenAI embeddings API.

    Example:
        >>> embedder = OpenAIEmbedder()
        >>> vector = embedder.embed("Slab thickness is 4 inches.")
        >>> len(vector)
        1536
    """

    def __init__(
        self,
        model: str = DEFAULT_OPENAI_EMBEDDING_MODEL,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS
    ):
        """
        Initialize the OpenAI embeddings client.

        Args:
            model: Embedding model identifier
            api_key: OpenAI API key. If not provided, reads from OPENAI_API_KEY env var.
            base_url: Optional OpenAI-compatible API base URL
            timeout: Request timeout in seconds. Timeouts raise ProviderUnavailableError.

        Raises:
            ValueError: If API key is not found
            ImportError: If openai package is not installed
        """
        self.model_name = model
        self.timeout = timeout
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY")

        if not self.api_key:
            raise ValueError(
                "OpenAI API key not found. Please set OPENAI_API_KEY environment variable:\n"
                "  PowerShell: $env:OPENAI_API_KEY = 'your-key-here'\n"
                "  Bash: export OPENAI_API_KEY='your-key-here'\n"
                "  Or pass api_key parameter directly."
            )

        try:
            import openai
            self._api_error = openai.APIError
            self.client = openai.OpenAI(
                api_key=self.api_key,
                base_url=base_url,
                timeout=timeout,
                max_retries=0
            )
        except ImportError:
            raise ImportError("Please install openai: pip install openai")

        self.total_calls = 0

    def embed_batch(self, texts: List[str]) -> List[List[float]]:
        """
        Embed several texts with one API call.

        Raises:
            ProviderUnavailableError: If the request fails or times out
        """
        if not texts:
            return []
        try:
            response = self.client.embeddings.create(model=self.model_name, input=texts)
        except self._api_error as e:
            raise ProviderUnavailableError("embeddings", str(e)) from e

        self.total_calls += 1
        data = sorted(response.data, key=lambda item: item.index)
        return [list(item.embedding) for item in data]


class SentenceTransformerEmbedder(BaseEmbedder):
    """
    Local embeddings with sentence-transformers.

    Default 'all-MiniLM-L6-v2' produces 384-dim embeddings and needs no API key.
    """

    def __init__(self, model: str = DEFAULT_LOCAL_EMBEDDING_MODEL):
        self.model_name = model
        try:
            from sentence_transformers import SentenceTransformer
            self.model = SentenceTransformer(model)
            self.embedding_dimension = self.model.get_sentence_embedding_dimension()
        except ImportError:
            raise ImportError("Please install sentence-transformers: pip install sentence-transformers")

    def embed_batch(self, texts: List[str]) -> List[List[float]]:
        if not texts:
            return []
        return self.model.encode(texts).tolist()
