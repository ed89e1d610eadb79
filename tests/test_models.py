"""Tests for data models."""

import dataclasses

import pytest
from construction_docs_qa.models import (
    AnswerResult,
    Citation,
    DocumentChunk,
    ExtractedDocument,
    IngestResult,
    ProjectSummary,
    TextSegment,
)


class TestExtractedDocument:
    """Tests for ExtractedDocument class."""

    def test_from_pages(self):
        doc = ExtractedDocument.from_pages("specs.pdf", ["Page one", "Page two"])
        assert doc.text == "Page one\n\nPage two"
        assert doc.page_texts == ["Page one", "Page two"]
        assert not doc.is_empty

    def test_empty(self):
        assert ExtractedDocument(source_id="scan.png", text="").is_empty


class TestDocumentChunk:
    """Tests for DocumentChunk class."""

    def test_embedding_stored_as_tuple(self):
        chunk = DocumentChunk(source_id="spec.txt", text="Slab", embedding=[1, 0])
        assert chunk.embedding == (1.0, 0.0)
        assert chunk.dimension == 2

    def test_frozen(self):
        chunk = DocumentChunk(source_id="spec.txt", text="Slab", embedding=[1.0])
        with pytest.raises(dataclasses.FrozenInstanceError):
            chunk.text = "changed"

    def test_source_label(self):
        assert DocumentChunk("a.pdf", "x", [1.0], page_or_section=4).source_label == "a.pdf (p.4)"
        assert DocumentChunk("notes.txt", "x", [1.0]).source_label == "notes.txt"

    def test_dict_roundtrip(self):
        chunk = DocumentChunk("a.pdf", "Door D1", [0.5, 0.5], page_or_section=2, position=3)
        assert DocumentChunk.from_dict(chunk.to_dict()) == chunk

    def test_segment_with_embedding(self):
        segment = TextSegment(source_id="a.pdf", text="Roof slope 2%", position=1, page_or_section=5)
        chunk = segment.with_embedding([0.1, 0.2])
        assert chunk.text == "Roof slope 2%"
        assert chunk.page_or_section == 5
        assert chunk.position == 1
        assert chunk.embedding == (0.1, 0.2)


class TestResults:
    """Tests for result classes."""

    def test_answer_to_dict(self):
        result = AnswerResult(
            question="Slab?",
            answer="4 inches",
            citations=[Citation(source_label="spec.txt", snippet="Slab thickness is 4 inches.")]
        )
        d = result.to_dict()
        assert d["answer"] == "4 inches"
        assert d["citations"][0]["source_label"] == "spec.txt"
        assert d["grounded"] is True

    def test_ingest_result(self):
        result = IngestResult(files=2, chunks=0, skipped_files=["scan.png"])
        assert not result.success
        assert result.to_dict()["skipped_files"] == ["scan.png"]


class TestProjectSummary:
    """Tests for validating LLM summary JSON."""

    def test_missing_keys_filled(self):
        summary = ProjectSummary.from_llm_json({"executive_summary": "Two-storey office fit-out."})
        assert summary.executive_summary == "Two-storey office fit-out."
        assert summary.key_objectives == []
        assert summary.sources == []
        assert summary.scope is None
        assert summary.stakeholders is None

    def test_unknown_keys_dropped(self):
        summary = ProjectSummary.from_llm_json({"sources": ["a.pdf"], "mood": "optimistic"})
        d = summary.to_dict()
        assert "mood" not in d
        assert d["sources"] == ["a.pdf"]

    def test_wrong_types_coerced(self):
        summary = ProjectSummary.from_llm_json({
            "key_objectives": "finish by May",
            "scope": ["not", "a", "dict"],
            "stakeholders": [{"name": "J. Smith", "source": "a.pdf p.2"}, "stray"],
        })
        assert summary.key_objectives == []
        assert summary.scope is None
        assert summary.stakeholders == [{"name": "J. Smith", "source": "a.pdf p.2"}]

    def test_not_a_dict(self):
        assert ProjectSummary.from_llm_json(["oops"]) == ProjectSummary()
