"""
Data models for Construction Docs QA.

This module contains the core data classes used throughout the library
for representing document text, indexed chunks and query results.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple


@dataclass
class ExtractedDocument:
    """
    Plain text extracted from one uploaded file.

    Attributes:
        source_id: Original filename of the upload
        text: Full extracted text (pages joined with a blank line)
        page_texts: Per-page text when the extractor knows page boundaries
    """
    source_id: str
    text: str
    page_texts: List[str] = field(default_factory=list)

    PAGE_SEPARATOR = "\n\n"

    @classmethod
    def from_pages(cls, source_id: str, pages: Sequence[str]) -> "ExtractedDocument":
        """Build a document whose text is the pages joined by PAGE_SEPARATOR."""
        pages = list(pages)
        return cls(
            source_id=source_id,
            text=cls.PAGE_SEPARATOR.join(pages),
            page_texts=pages
        )

    @property
    def is_empty(self) -> bool:
        return not self.text


@dataclass
class TextSegment:
    """
    A slice of a document's text before it has been embedded.

    Attributes:
        source_id: Originating file label
        text: The slice itself
        position: Index of the slice within its document
        page_or_section: Page the slice starts on, if known
    """
    source_id: str
    text: str
    position: int
    page_or_section: Optional[int] = None

    def with_embedding(self, embedding: Sequence[float]) -> "DocumentChunk":
        """Attach an embedding vector, producing an indexable chunk."""
        return DocumentChunk(
            source_id=self.source_id,
            text=self.text,
            embedding=embedding,
            page_or_section=self.page_or_section,
            position=self.position
        )


@dataclass(frozen=True)
class DocumentChunk:
    """
    The unit of retrieval: a slice of a source document plus its embedding.

    The embedding is stored as a tuple and the dataclass is frozen, so a
    chunk never changes after ingestion.

    Attributes:
        source_id: Originating file label (opaque; duplicates are allowed)
        text: Contiguous slice of the document's extracted text
        embedding: Fixed-length vector from the embedding model
        page_or_section: Page locator for citation display, if known
        position: Index of the chunk within its document
    """
    source_id: str
    text: str
    embedding: Tuple[float, ...]
    page_or_section: Optional[int] = None
    position: int = 0

    def __post_init__(self):
        object.__setattr__(self, "embedding", tuple(float(v) for v in self.embedding))

    @property
    def dimension(self) -> int:
        """Length of the embedding vector."""
        return len(self.embedding)

    @property
    def source_label(self) -> str:
        """Source name with page locator, as shown in citations."""
        if self.page_or_section is not None:
            return f"{self.source_id} (p.{self.page_or_section})"
        return self.source_id

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "source_id": self.source_id,
            "text": self.text,
            "embedding": list(self.embedding),
            "page_or_section": self.page_or_section,
            "position": self.position
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DocumentChunk":
        """Create DocumentChunk from dictionary."""
        return cls(
            source_id=data["source_id"],
            text=data["text"],
            embedding=data.get("embedding", ()),
            page_or_section=data.get("page_or_section"),
            position=data.get("position", 0)
        )


@dataclass
class RankedChunk:
    """
    A chunk paired with its similarity to a query.

    Attributes:
        chunk: The matched chunk
        score: Cosine similarity (higher is more similar)
        rank: 1-based position in the ranking
    """
    chunk: DocumentChunk
    score: float
    rank: int

    def to_dict(self) -> dict:
        """Convert to dictionary representation (embedding omitted)."""
        return {
            "source_id": self.chunk.source_id,
            "text": self.chunk.text,
            "page_or_section": self.chunk.page_or_section,
            "score": self.score,
            "rank": self.rank
        }


@dataclass
class AssembledContext:
    """
    Citation-bearing context handed to the answer generator.

    Attributes:
        text: Concatenated "[#n] FILE: ..." blocks
        used: Chunks that made it into the text, in rank order
    """
    text: str
    used: List[DocumentChunk] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()


@dataclass
class Citation:
    """
    A citation shown next to an answer.

    Attributes:
        source_label: Originating file name, with " (p.N)" when the page is known
        snippet: Chunk text truncated for display
        page_or_section: Page locator, if known
        score: Similarity score of the cited chunk
    """
    source_label: str
    snippet: str
    page_or_section: Optional[int] = None
    score: Optional[float] = None

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "source_label": self.source_label,
            "snippet": self.snippet,
            "page_or_section": self.page_or_section,
            "score": self.score
        }


@dataclass
class AnswerResult:
    """
    Result of asking a question against the indexed documents.

    Attributes:
        question: The question as asked
        answer: Generated answer, or the refusal answer
        citations: Citations derived from the ranked chunks
        context: Context text sent to the LLM ("" when refused)
        grounded: False when no context was available and the answer is the refusal
    """
    question: str
    answer: str
    citations: List[Citation] = field(default_factory=list)
    context: str = ""
    grounded: bool = True

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "question": self.question,
            "answer": self.answer,
            "citations": [c.to_dict() for c in self.citations],
            "grounded": self.grounded
        }


@dataclass
class IngestResult:
    """
    Result of ingesting one upload batch.

    Attributes:
        files: Number of files in the batch
        chunks: Number of chunks now in the index
        skipped_files: Files that produced no text
        processing_time: Time taken in seconds
    """
    files: int
    chunks: int
    skipped_files: List[str] = field(default_factory=list)
    processing_time: float = 0.0

    @property
    def success(self) -> bool:
        return self.chunks > 0

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "ok": True,
            "files": self.files,
            "chunks": self.chunks,
            "skipped_files": list(self.skipped_files),
            "processing_time": self.processing_time
        }


SUMMARY_LIST_KEYS = ("key_objectives", "open_questions", "sources")
SUMMARY_KEYS = (
    "executive_summary",
    "key_objectives",
    "scope",
    "estimated_timeline",
    "tools_and_materials",
    "stakeholders",
    "risks_and_mitigations",
    "open_questions",
    "sources",
)


@dataclass
class ProjectSummary:
    """
    Structured project summary produced by the LLM.

    The LLM returns loosely shaped JSON; from_llm_json validates it so the
    rest of the library only sees this shape.

    Attributes:
        executive_summary: Short prose overview
        key_objectives: Project objectives
        scope: {"in_scope": [...], "out_of_scope": [...]}
        estimated_timeline: Duration, milestones, assumptions, confidence
        tools_and_materials: {"materials": [...], "tools": [...]}
        stakeholders: People named in the documents, each with a source
        risks_and_mitigations: Risk entries with impact and mitigation
        open_questions: Unresolved questions
        sources: Files and page references used
    """
    executive_summary: Optional[str] = None
    key_objectives: List[str] = field(default_factory=list)
    scope: Optional[Dict[str, Any]] = None
    estimated_timeline: Optional[Dict[str, Any]] = None
    tools_and_materials: Optional[Dict[str, Any]] = None
    stakeholders: Optional[List[Dict[str, Any]]] = None
    risks_and_mitigations: Optional[List[Dict[str, Any]]] = None
    open_questions: List[str] = field(default_factory=list)
    sources: List[str] = field(default_factory=list)

    @classmethod
    def from_llm_json(cls, data: Any) -> "ProjectSummary":
        """
        Build a summary from parsed LLM output.

        Missing keys fall back to defaults, unknown keys are dropped and
        list fields holding anything but a list become empty lists.

        Args:
            data: Parsed JSON (anything that is not a dict yields an empty summary)

        Returns:
            ProjectSummary
        """
        if not isinstance(data, dict):
            data = {}

        values = {}
        for key in SUMMARY_KEYS:
            value = data.get(key)
            if key in SUMMARY_LIST_KEYS:
                value = [str(v) for v in value] if isinstance(value, list) else []
            elif key in ("stakeholders", "risks_and_mitigations"):
                value = [v for v in value if isinstance(v, dict)] if isinstance(value, list) else None
            elif key == "executive_summary":
                value = str(value) if value is not None else None
            elif value is not None and not isinstance(value, dict):
                value = None
            values[key] = value

        return cls(**values)

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {key: getattr(self, key) for key in SUMMARY_KEYS}
