"""
In-memory Embedding Index.

Holds the chunks of the current ingestion batch as a flat, ordered,
immutable tuple. Every write builds a new tuple and publishes it with a
single assignment, so a reader holding a snapshot never sees a partially
rebuilt index.

Memory use is O(total_chunks * embedding_dimension); set max_chunks to
bound it. Nothing is persisted: the index is lost on process restart.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .exceptions import DimensionMismatchError, IndexCapacityError, InvalidArgumentError
from .models import DocumentChunk


class IndexBatch:
    """
    Builder for a replacement index, filled off to the side.

    Obtained from EmbeddingIndex.batch(); its chunks become visible only
    when the batch is committed.
    """

    def __init__(self, max_chunks: Optional[int] = None):
        self.max_chunks = max_chunks
        self.dimension: Optional[int] = None
        self._chunks: List[DocumentChunk] = []

    def add(self, chunk: DocumentChunk) -> None:
        """Append a chunk after validating its embedding."""
        self.dimension = _check_embedding(chunk, self.dimension)
        if self.max_chunks is not None and len(self._chunks) >= self.max_chunks:
            raise IndexCapacityError(self.max_chunks)
        self._chunks.append(chunk)

    def extend(self, chunks: Iterable[DocumentChunk]) -> None:
        for chunk in chunks:
            self.add(chunk)

    def freeze(self) -> Tuple[DocumentChunk, ...]:
        return tuple(self._chunks)

    def __len__(self) -> int:
        return len(self._chunks)


def _check_embedding(chunk: DocumentChunk, dimension: Optional[int]) -> int:
    """Validate a chunk's embedding against the established dimension."""
    if not chunk.embedding:
        raise InvalidArgumentError(f"Chunk from {chunk.source_id!r} has an empty embedding")
    if dimension is not None and chunk.dimension != dimension:
        raise DimensionMismatchError(dimension, chunk.dimension)
    return chunk.dimension


class EmbeddingIndex:
    """
    Flat in-memory index of embedded document chunks.

    Writers are serialized by a lock. Readers take a snapshot with all()
    and never block.

    Example:
        >>> index = EmbeddingIndex()
        >>> with index.batch() as batch:
        ...     batch.add(chunk)
        >>> len(index.all())
        1
    """

    def __init__(self, max_chunks: Optional[int] = None):
        """
        Initialize an empty index.

        Args:
            max_chunks: Optional upper bound on indexed chunks. Ingestion past
                        this bound raises IndexCapacityError.
        """
        if max_chunks is not None and (isinstance(max_chunks, bool) or max_chunks <= 0):
            raise InvalidArgumentError(f"max_chunks must be positive, got {max_chunks!r}")
        self.max_chunks = max_chunks
        self._chunks: Tuple[DocumentChunk, ...] = ()
        self._write_lock = threading.Lock()

    @property
    def dimension(self) -> Optional[int]:
        """Embedding dimension of the indexed chunks, or None when empty."""
        snapshot = self._chunks
        return snapshot[0].dimension if snapshot else None

    def all(self) -> Tuple[DocumentChunk, ...]:
        """Return an immutable snapshot of all chunks in insertion order."""
        return self._chunks

    def reset(self) -> None:
        """Remove all chunks."""
        with self._write_lock:
            self._chunks = ()

    def add(self, chunk: DocumentChunk) -> None:
        """
        Append one chunk.

        Raises:
            InvalidArgumentError: If the chunk has an empty embedding
            DimensionMismatchError: If its dimension differs from the index
            IndexCapacityError: If the index is full
        """
        with self._write_lock:
            current = self._chunks
            _check_embedding(chunk, current[0].dimension if current else None)
            if self.max_chunks is not None and len(current) >= self.max_chunks:
                raise IndexCapacityError(self.max_chunks)
            self._chunks = current + (chunk,)

    def replace(self, chunks: Iterable[DocumentChunk]) -> int:
        """
        Replace the whole index with a new sequence of chunks.

        The new sequence is validated completely before it is swapped in;
        on error the previous contents stay visible.

        Returns:
            Number of chunks now indexed
        """
        batch = IndexBatch(self.max_chunks)
        batch.extend(chunks)
        return self._commit(batch)

    @contextmanager
    def batch(self) -> Iterator[IndexBatch]:
        """
        Build a replacement index and swap it in when the block exits cleanly.

        If the block raises, the current index is left untouched.
        """
        pending = IndexBatch(self.max_chunks)
        yield pending
        self._commit(pending)

    def _commit(self, batch: IndexBatch) -> int:
        frozen = batch.freeze()
        with self._write_lock:
            self._chunks = frozen
        return len(frozen)

    def get_stats(self) -> Dict:
        """
        Get index statistics.

        Returns:
            Dict with total_chunks, chunks_by_source, embedding_dimension
            and approximate stored vector values
        """
        snapshot = self._chunks
        by_source: Dict[str, int] = {}
        for chunk in snapshot:
            by_source[chunk.source_id] = by_source.get(chunk.source_id, 0) + 1

        dimension = snapshot[0].dimension if snapshot else 0
        return {
            "total_chunks": len(snapshot),
            "chunks_by_source": by_source,
            "embedding_dimension": dimension or None,
            "vector_values": len(snapshot) * dimension,
            "max_chunks": self.max_chunks
        }

    def __len__(self) -> int:
        return len(self._chunks)
