"""
Semantic Retrieval over the Embedding Index.

This module provides:
- Cosine similarity with an epsilon-guarded denominator
- Top-k ranking of indexed chunks against a query embedding
- Context assembly: numbered citation blocks under a character budget

Ranking is a linear scan of one index snapshot; ties keep insertion
order so repeated queries return identical results.
"""

from typing import List, Sequence

import numpy as np

from .exceptions import DimensionMismatchError, InvalidArgumentError
from .index import EmbeddingIndex
from .models import AssembledContext, RankedChunk
from .utils import print_safe, require_positive_int


DEFAULT_TOP_K = 6
DEFAULT_MAX_CONTEXT_CHARS = 16000
SIMILARITY_EPSILON = 1e-8
BLOCK_SEPARATOR = "\n\n"

# Exact wording matters: callers compare answers against this string.
NOT_FOUND_ANSWER = "Not found in the uploaded documents."


def cosine_similarity(
    a: Sequence[float],
    b: Sequence[float],
    eps: float = SIMILARITY_EPSILON,
    strict: bool = True
) -> float:
    """
    Calculate cosine similarity between two vectors.

    Computed as dot(a, b) / (|a| * |b| + eps), so an all-zero vector
    scores 0 instead of dividing by zero.

    Args:
        a: First vector
        b: Second vector
        eps: Added to the denominator. Default 1e-8.
        strict: Raise on differing lengths. When False, only the shared
                prefix min(len(a), len(b)) is compared and a warning is printed.

    Returns:
        Similarity in [-1, 1]

    Raises:
        DimensionMismatchError: If strict and the lengths differ
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)

    if va.shape[0] != vb.shape[0]:
        if strict:
            raise DimensionMismatchError(va.shape[0], vb.shape[0])
        print_safe(
            f"Warning: comparing embeddings of length {va.shape[0]} and {vb.shape[0]} "
            f"over their shared prefix"
        )
        length = min(va.shape[0], vb.shape[0])
        va, vb = va[:length], vb[:length]

    denominator = np.linalg.norm(va) * np.linalg.norm(vb) + eps
    return float(np.dot(va, vb) / denominator)


def format_context_block(ranked: RankedChunk) -> str:
    """
    Format one ranked chunk as a citation block.

    Example:
        [#2] FILE: specs.pdf (p.3)
        Slab thickness is 4 inches.
    """
    chunk = ranked.chunk
    return f"[#{ranked.rank}] FILE: {chunk.source_label}\n{chunk.text}"


def build_context(
    ranked_chunks: List[RankedChunk],
    max_chars: int = DEFAULT_MAX_CONTEXT_CHARS
) -> AssembledContext:
    """
    Assemble a citation-bearing context from ranked chunks.

    Whole blocks are added in rank order while the total length, separators
    included, stays within max_chars. The first block that does not fit ends
    the context; chunks are never cut, so every cited block is complete.

    Args:
        ranked_chunks: Output of Retriever.top_k
        max_chars: Character budget. Default 16000.

    Returns:
        AssembledContext; its text is empty when nothing fits (the caller
        must then answer with NOT_FOUND_ANSWER)

    Raises:
        InvalidArgumentError: If max_chars is not a positive integer
    """
    require_positive_int(max_chars, "max_chars")

    blocks = []
    used = []
    total = 0
    for ranked in ranked_chunks:
        block = format_context_block(ranked)
        added = len(block) + (len(BLOCK_SEPARATOR) if blocks else 0)
        if total + added > max_chars:
            break
        blocks.append(block)
        used.append(ranked.chunk)
        total += added

    return AssembledContext(text=BLOCK_SEPARATOR.join(blocks), used=used)


class Retriever:
    """
    Ranks indexed chunks by cosine similarity to a query embedding.

    The index is injected by the caller; the retriever only reads snapshots.

    Example:
        >>> retriever = Retriever(index)
        >>> for r in retriever.top_k(query_embedding, k=3):
        ...     print(f"{r.score:.3f} {r.chunk.source_id}")
    """

    def __init__(self, index: EmbeddingIndex, strict_dimensions: bool = True):
        """
        Initialize the retriever.

        Args:
            index: Index to search
            strict_dimensions: Reject a query whose dimension differs from the
                               indexed chunks. When False, mismatched vectors are
                               compared over their shared prefix with a warning.
        """
        self.index = index
        self.strict_dimensions = strict_dimensions

    def top_k(
        self,
        query_embedding: Sequence[float],
        k: int = DEFAULT_TOP_K
    ) -> List[RankedChunk]:
        """
        Return the k chunks most similar to the query.

        Args:
            query_embedding: Query vector
            k: Maximum number of results. Default 6.

        Returns:
            List of RankedChunk, highest score first, ties in insertion
            order. Empty when the index is empty.

        Raises:
            InvalidArgumentError: If k <= 0 or the query embedding is empty
            DimensionMismatchError: If strict and the query dimension differs
        """
        require_positive_int(k, "k")
        if len(query_embedding) == 0:
            raise InvalidArgumentError("query embedding must not be empty")

        snapshot = self.index.all()
        if not snapshot:
            return []

        scores = [
            cosine_similarity(query_embedding, chunk.embedding, strict=self.strict_dimensions)
            for chunk in snapshot
        ]
        # sorted() is stable, so equal scores keep insertion order
        order = sorted(range(len(snapshot)), key=lambda i: -scores[i])[:k]

        return [
            RankedChunk(chunk=snapshot[i], score=scores[i], rank=rank)
            for rank, i in enumerate(order, 1)
        ]

    def retrieve_context(
        self,
        query_embedding: Sequence[float],
        k: int = DEFAULT_TOP_K,
        max_chars: int = DEFAULT_MAX_CONTEXT_CHARS
    ) -> AssembledContext:
        """Rank chunks and assemble their context in one call."""
        return build_context(self.top_k(query_embedding, k), max_chars)
