"""
Document Text Chunker.

Splits extracted document text into bounded-size, order-preserving
segments for embedding and citation.

Chunks are fixed-width character slices: no overlap, no sentence
awareness, and joining a document's chunks in order gives back the
exact extracted text.
"""

from bisect import bisect_right
from typing import List, Optional

from .models import ExtractedDocument, TextSegment
from .utils import require_positive_int


DEFAULT_MAX_CHUNK_CHARS = 1200


def chunk_text(text: str, max_len: int = DEFAULT_MAX_CHUNK_CHARS) -> List[str]:
    """
    Partition text into contiguous slices of at most max_len characters.

    Every slice has exactly max_len characters except the last, which
    holds the remainder. Empty text gives an empty list.

    Args:
        text: Plain text to split (may be empty)
        max_len: Maximum slice length. Default 1200.

    Returns:
        Ordered list of slices

    Raises:
        InvalidArgumentError: If max_len is not a positive integer
    """
    require_positive_int(max_len, "max_len")
    if not text:
        return []
    return [text[i:i + max_len] for i in range(0, len(text), max_len)]


def page_start_offsets(page_texts: List[str], separator: str = ExtractedDocument.PAGE_SEPARATOR) -> List[int]:
    """
    Compute the offset at which each page begins in the joined document text.

    Args:
        page_texts: Per-page texts in order
        separator: String placed between pages when they were joined

    Returns:
        List of start offsets, one per page
    """
    offsets = []
    position = 0
    for i, page in enumerate(page_texts):
        if i > 0:
            position += len(separator)
        offsets.append(position)
        position += len(page)
    return offsets


class DocumentChunker:
    """
    Turns extracted documents into text segments ready for embedding.

    Example:
        >>> chunker = DocumentChunker(max_chunk_chars=1200)
        >>> segments = chunker.split_document(document)
        >>> print(f"{len(segments)} segments from {document.source_id}")
    """

    def __init__(self, max_chunk_chars: int = DEFAULT_MAX_CHUNK_CHARS):
        """
        Initialize the chunker.

        Args:
            max_chunk_chars: Maximum characters per chunk. Default 1200.
        """
        self.max_chunk_chars = require_positive_int(max_chunk_chars, "max_chunk_chars")

    def split_document(self, document: ExtractedDocument) -> List[TextSegment]:
        """
        Split one document into segments.

        When the document carries per-page text, each segment is tagged with
        the page (1-based) on which its first character falls.

        Args:
            document: Extracted document

        Returns:
            Ordered list of TextSegment (empty for empty text)
        """
        pieces = chunk_text(document.text, self.max_chunk_chars)
        offsets = page_start_offsets(document.page_texts) if document.page_texts else []

        segments = []
        for i, piece in enumerate(pieces):
            page: Optional[int] = None
            if offsets:
                page = bisect_right(offsets, i * self.max_chunk_chars)
            segments.append(TextSegment(
                source_id=document.source_id,
                text=piece,
                position=i,
                page_or_section=page
            ))
        return segments

    def split_documents(self, documents: List[ExtractedDocument]) -> List[TextSegment]:
        """Split several documents, keeping document order."""
        segments = []
        for document in documents:
            segments.extend(self.split_document(document))
        return segments
