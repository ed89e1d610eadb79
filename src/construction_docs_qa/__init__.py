"""
Construction Docs QA - Grounded question answering over construction documents.

This library turns uploaded project documents (specs, RFIs, scanned sheets)
into an in-memory semantic index and answers questions with citations.

Key Components:
- DocumentQAPipeline: Unified high-level interface
- DocumentChunker / chunk_text: Fixed-width, order-preserving chunking
- EmbeddingIndex: In-memory index with atomic batch replacement
- Retriever / build_context: Top-k cosine ranking and citation context
- ChatLLM: LLM integration for answers and project summaries

Example:
    >>> from construction_docs_qa import DocumentQAPipeline
    >>>
    >>> # Initialize pipeline
    >>> pipeline = DocumentQAPipeline()
    >>>
    >>> # Index an upload batch
    >>> result = pipeline.ingest([("specs.pdf", open("specs.pdf", "rb").read())])
    >>> print(f"Indexed {result.chunks} chunks")
    >>>
    >>> # Ask questions with cited answers
    >>> answer = pipeline.ask("What is the slab thickness?")
    >>> print(answer.answer)
    >>> for c in answer.citations:
    ...     print(c.source_label, c.snippet[:50])
"""

__version__ = "0.1.0"

# Core pipeline
from .pipeline import DocumentQAPipeline, build_citations, check_upload_limits

# Individual components
from .chunker import DocumentChunker, chunk_text
from .index import EmbeddingIndex, IndexBatch
from .retriever import Retriever, build_context, cosine_similarity, NOT_FOUND_ANSWER
from .embeddings import BaseEmbedder, OpenAIEmbedder, SentenceTransformerEmbedder
from .llm import ChatLLM
from .extraction import DocumentExtractor

# Data models
from .models import (
    AnswerResult,
    AssembledContext,
    Citation,
    DocumentChunk,
    ExtractedDocument,
    IngestResult,
    ProjectSummary,
    RankedChunk,
    TextSegment
)

# Errors
from .exceptions import (
    ConstructionQAError,
    DimensionMismatchError,
    IndexCapacityError,
    InvalidArgumentError,
    ProviderUnavailableError,
    UploadLimitError
)

__all__ = [
    # Version
    "__version__",

    # Main pipeline
    "DocumentQAPipeline",

    # Components
    "DocumentChunker",
    "EmbeddingIndex",
    "IndexBatch",
    "Retriever",
    "BaseEmbedder",
    "OpenAIEmbedder",
    "SentenceTransformerEmbedder",
    "ChatLLM",
    "DocumentExtractor",

    # Functions
    "chunk_text",
    "build_context",
    "build_citations",
    "check_upload_limits",
    "cosine_similarity",

    # Constants
    "NOT_FOUND_ANSWER",

    # Data models
    "AnswerResult",
    "AssembledContext",
    "Citation",
    "DocumentChunk",
    "ExtractedDocument",
    "IngestResult",
    "ProjectSummary",
    "RankedChunk",
    "TextSegment",

    # Errors
    "ConstructionQAError",
    "DimensionMismatchError",
    "IndexCapacityError",
    "InvalidArgumentError",
    "ProviderUnavailableError",
    "UploadLimitError",
]
