"""
Unified Construction Document QA Pipeline.

This module provides a high-level interface that combines all components:
- Text extraction with IBM Docling
- Fixed-width chunking
- Embedding and in-memory indexing
- Top-k retrieval, context assembly and grounded answers
- Structured project summaries

Example:
    >>> from construction_docs_qa import DocumentQAPipeline
    >>> pipeline = DocumentQAPipeline()
    >>> pipeline.ingest([("specs.pdf", pdf_bytes)])
    >>> result = pipeline.ask("What is the slab thickness?")
"""

import time
from typing import Dict, List, Optional, Sequence, Tuple

from .chunker import DEFAULT_MAX_CHUNK_CHARS, DocumentChunker
from .embeddings import BaseEmbedder, OpenAIEmbedder
from .exceptions import InvalidArgumentError, ProviderUnavailableError, UploadLimitError
from .extraction import DocumentExtractor
from .index import EmbeddingIndex
from .llm import ChatLLM
from .models import AnswerResult, Citation, ExtractedDocument, IngestResult, ProjectSummary, RankedChunk
from .retriever import (
    DEFAULT_MAX_CONTEXT_CHARS,
    DEFAULT_TOP_K,
    NOT_FOUND_ANSWER,
    Retriever,
    build_context,
)
from .utils import DEFAULT_SNIPPET_LENGTH, print_safe, require_positive_int, truncate_snippet


# Upload limits
MAX_FILE_BYTES = 50 * 1024 * 1024
MAX_FILES = 100
MAX_TOTAL_BYTES = 200 * 1024 * 1024

# Per-document cap for summaries
MAX_SUMMARY_CHARS_PER_FILE = 250_000

# Embedding requests are sent in batches of this many chunks
EMBEDDING_BATCH_SIZE = 100


def check_upload_limits(
    files: Sequence[Tuple[str, bytes]],
    max_file_bytes: int = MAX_FILE_BYTES,
    max_files: int = MAX_FILES,
    max_total_bytes: int = MAX_TOTAL_BYTES
) -> None:
    """
    Validate an upload batch against the size and count limits.

    Raises:
        UploadLimitError: With code FILE_TOO_LARGE, TOO_MANY_FILES or
                          TOTAL_UPLOAD_TOO_LARGE
    """
    if len(files) > max_files:
        raise UploadLimitError("TOO_MANY_FILES", max_files, f"At most {max_files} files per upload")

    total = 0
    for name, data in files:
        if len(data) > max_file_bytes:
            raise UploadLimitError(
                "FILE_TOO_LARGE", max_file_bytes,
                f"{name} exceeds {max_file_bytes // (1024 * 1024)} MB"
            )
        total += len(data)

    if total > max_total_bytes:
        raise UploadLimitError(
            "TOTAL_UPLOAD_TOO_LARGE", max_total_bytes,
            f"Upload exceeds {max_total_bytes // (1024 * 1024)} MB in total"
        )


def build_citations(
    ranked: List[RankedChunk],
    snippet_length: int = DEFAULT_SNIPPET_LENGTH
) -> List[Citation]:
    """Derive display citations from ranked chunks."""
    return [
        Citation(
            source_label=r.chunk.source_label,
            snippet=truncate_snippet(r.chunk.text, snippet_length),
            page_or_section=r.chunk.page_or_section,
            score=r.score
        )
        for r in ranked
    ]


class DocumentQAPipeline:
    """
    Unified pipeline for construction document question answering.

    Each ingest call replaces the whole index; queries always see either
    the previous batch or the new one, never a mix.

    Example:
        >>> pipeline = DocumentQAPipeline()
        >>>
        >>> # Index an upload batch
        >>> pipeline.ingest([("specs.pdf", pdf_bytes), ("notes.txt", txt_bytes)])
        >>>
        >>> # Query the indexed content
        >>> ranked = pipeline.query("slab thickness")
        >>> result = pipeline.ask("What is the slab thickness?")
        >>> print(result.answer)
    """

    def __init__(
        self,
        embedder: Optional[BaseEmbedder] = None,
        llm: Optional[ChatLLM] = None,
        index: Optional[EmbeddingIndex] = None,
        extractor: Optional[DocumentExtractor] = None,
        max_chunk_chars: int = DEFAULT_MAX_CHUNK_CHARS,
        max_chunks: Optional[int] = None,
        strict_dimensions: bool = True,
        verbose: bool = True
    ):
        """
        Initialize the pipeline.

        Args:
            embedder: Embedding provider (default OpenAIEmbedder)
            llm: Chat LLM for answers and summaries (default ChatLLM if an API
                 key is configured, otherwise answers are disabled)
            index: Index to populate (default a new EmbeddingIndex)
            extractor: Text extractor (default DocumentExtractor)
            max_chunk_chars: Maximum characters per chunk
            max_chunks: Optional bound on indexed chunks; set it on the index
                        instead when passing index=
            strict_dimensions: Reject query embeddings of a different dimension
            verbose: Whether to print progress
        """
        if index is not None and max_chunks is not None:
            raise InvalidArgumentError("Pass max_chunks to the EmbeddingIndex, not alongside index=")

        self.verbose = verbose
        self.embedder = embedder if embedder is not None else OpenAIEmbedder()
        self.index = index if index is not None else EmbeddingIndex(max_chunks=max_chunks)
        self.extractor = extractor if extractor is not None else DocumentExtractor(verbose=verbose)
        self.chunker = DocumentChunker(max_chunk_chars=max_chunk_chars)
        self.retriever = Retriever(self.index, strict_dimensions=strict_dimensions)

        self.llm = llm
        if self.llm is None:
            try:
                self.llm = ChatLLM()
            except (ValueError, ImportError) as e:
                self._log(f"Warning: LLM not available ({e}). Answers and summaries will be disabled.")

    def _log(self, message: str):
        """Print message if verbose mode is enabled."""
        if self.verbose:
            print_safe(message)

    def _require_llm(self) -> ChatLLM:
        if self.llm is None:
            raise ValueError("LLM not available. Pass llm= or set OPENAI_API_KEY.")
        return self.llm

    def ingest(self, files: Sequence[Tuple[str, bytes]]) -> IngestResult:
        """
        Extract, chunk, embed and index an upload batch.

        The batch replaces everything indexed before. Files that yield no
        text are skipped and listed in the result.

        Args:
            files: (filename, bytes) pairs

        Returns:
            IngestResult with file and chunk counts

        Raises:
            UploadLimitError: If the batch breaks the upload limits
            ProviderUnavailableError: If the embedding provider fails
        """
        check_upload_limits(files)
        start_time = time.time()

        documents = []
        for i, (name, data) in enumerate(files, 1):
            self._log(f"Extracting [{i}/{len(files)}]: {name}")
            documents.append(self.extractor.extract(data, name))

        result = self._index_documents(documents)
        result.files = len(files)
        result.processing_time = time.time() - start_time
        return result

    def ingest_texts(self, documents: Sequence[Tuple[str, str]]) -> IngestResult:
        """
        Index already-extracted text, replacing the current index.

        Args:
            documents: (source_id, text) pairs
        """
        start_time = time.time()
        result = self._index_documents([ExtractedDocument(source_id=s, text=t) for s, t in documents])
        result.processing_time = time.time() - start_time
        return result

    def _index_documents(self, documents: List[ExtractedDocument]) -> IngestResult:
        skipped = [d.source_id for d in documents if d.is_empty]
        segments = self.chunker.split_documents([d for d in documents if not d.is_empty])

        with self.index.batch() as batch:
            for i in range(0, len(segments), EMBEDDING_BATCH_SIZE):
                group = segments[i:i + EMBEDDING_BATCH_SIZE]
                vectors = self.embedder.embed_batch([s.text for s in group])
                if len(vectors) != len(group):
                    raise ProviderUnavailableError(
                        "embeddings", f"returned {len(vectors)} vectors for {len(group)} texts"
                    )
                batch.extend(s.with_embedding(v) for s, v in zip(group, vectors))
                self._log(f"  Embedded {min(i + EMBEDDING_BATCH_SIZE, len(segments))}/{len(segments)} chunks")
            chunk_count = len(batch)

        for name in skipped:
            self._log(f"Warning: no text extracted from {name}")

        return IngestResult(
            files=len(documents),
            chunks=chunk_count,
            skipped_files=skipped
        )

    def query(self, question: str, k: int = DEFAULT_TOP_K) -> List[RankedChunk]:
        """
        Rank indexed chunks against a natural language question.

        Args:
            question: Natural language query
            k: Number of results to return

        Returns:
            List of RankedChunk, best first (empty if nothing is indexed)

        Raises:
            InvalidArgumentError: If the question is blank or k is not positive
        """
        if not question or not question.strip():
            raise InvalidArgumentError("question must not be empty")
        require_positive_int(k, "k")
        if not len(self.index):
            return []
        return self.retriever.top_k(self.embedder.embed(question), k)

    def ask(
        self,
        question: str,
        k: int = DEFAULT_TOP_K,
        max_chars: int = DEFAULT_MAX_CONTEXT_CHARS
    ) -> AnswerResult:
        """
        Ask a question and get an answer grounded in the indexed documents.

        With no indexed chunks, or no chunk fitting the context budget, the
        answer is NOT_FOUND_ANSWER and the LLM is not called.

        Args:
            question: Natural language question
            k: Number of chunks to retrieve
            max_chars: Context character budget

        Returns:
            AnswerResult with answer and citations

        Raises:
            InvalidArgumentError: If the question is blank or k is not positive
            ValueError: If LLM is not available
        """
        ranked = self.query(question, k)
        context = build_context(ranked, max_chars)

        if context.is_empty:
            return AnswerResult(question=question, answer=NOT_FOUND_ANSWER, grounded=False)

        answer = self._require_llm().answer(question, context.text)
        return AnswerResult(
            question=question,
            answer=answer,
            citations=build_citations(ranked),
            context=context.text,
            grounded=True
        )

    def summarize(self, files: Sequence[Tuple[str, bytes]]) -> ProjectSummary:
        """
        Summarize an upload batch into a structured project summary.

        Does not touch the index.

        Args:
            files: (filename, bytes) pairs

        Returns:
            Validated ProjectSummary
        """
        if not files:
            raise InvalidArgumentError("No files uploaded.")
        check_upload_limits(files)
        llm = self._require_llm()

        blocks = []
        for name, data in files:
            document = self.extractor.extract(data, name)
            blocks.append(f"### FILE: {name}\n{document.text[:MAX_SUMMARY_CHARS_PER_FILE]}")

        return ProjectSummary.from_llm_json(llm.summarize_project("\n\n".join(blocks)))

    def get_stats(self) -> Dict:
        """
        Get pipeline statistics.

        Returns:
            Dict with index statistics and model info
        """
        return {
            **self.index.get_stats(),
            "embedding_model": getattr(self.embedder, "model_name", None),
            "llm_enabled": self.llm is not None,
            "llm_model": self.llm.model if self.llm is not None else None,
            "max_chunk_chars": self.chunker.max_chunk_chars
        }

    def clear(self) -> None:
        """Clear all indexed content."""
        self.index.reset()
