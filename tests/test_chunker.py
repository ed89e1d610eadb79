"""Tests for chunker module."""

import pytest
from construction_docs_qa.chunker import DocumentChunker, chunk_text, page_start_offsets
from construction_docs_qa.exceptions import InvalidArgumentError
from construction_docs_qa.models import ExtractedDocument


class TestChunkText:
    """Tests for fixed-width text chunking."""

    def test_empty_input(self):
        """Empty text gives no chunks, not one empty chunk."""
        assert chunk_text("", 10) == []

    @pytest.mark.parametrize("text,max_len", [
        ("a", 1),
        ("abcdefghij", 3),
        ("abcdefghij", 5),
        ("abcdefghij", 100),
        ("General notes:\n1. All work per IBC 2021.\n2. Verify in field.", 7),
    ])
    def test_coverage_and_bounds(self, text, max_len):
        """Chunks reproduce the text and only the last may be short."""
        chunks = chunk_text(text, max_len)
        assert "".join(chunks) == text
        assert all(len(c) == max_len for c in chunks[:-1])
        assert 1 <= len(chunks[-1]) <= max_len

    def test_exact_multiple(self):
        """Text of exactly n * max_len characters gives n full chunks."""
        assert chunk_text("abcdef", 3) == ["abc", "def"]

    def test_default_length(self):
        """Default chunk length is 1200 characters."""
        chunks = chunk_text("x" * 2500)
        assert [len(c) for c in chunks] == [1200, 1200, 100]

    @pytest.mark.parametrize("max_len", [0, -5, 2.5, True])
    def test_invalid_max_len(self, max_len):
        """Non-positive or non-integer lengths fail fast."""
        with pytest.raises(InvalidArgumentError):
            chunk_text("some text", max_len)


class TestPageOffsets:
    """Tests for page start offsets."""

    def test_offsets_include_separator(self):
        assert page_start_offsets(["abc", "de", "f"]) == [0, 5, 9]

    def test_no_pages(self):
        assert page_start_offsets([]) == []


class TestDocumentChunker:
    """Tests for DocumentChunker class."""

    def test_init_defaults(self):
        """Test default initialization."""
        chunker = DocumentChunker()
        assert chunker.max_chunk_chars == 1200

    def test_init_invalid(self):
        with pytest.raises(InvalidArgumentError):
            DocumentChunker(max_chunk_chars=0)

    def test_segments_carry_source_and_position(self):
        """Segments keep their source and order."""
        doc = ExtractedDocument(source_id="notes.txt", text="abcdefgh")
        segments = DocumentChunker(max_chunk_chars=3).split_document(doc)

        assert [s.text for s in segments] == ["abc", "def", "gh"]
        assert [s.position for s in segments] == [0, 1, 2]
        assert all(s.source_id == "notes.txt" for s in segments)
        assert all(s.page_or_section is None for s in segments)

    def test_page_locators(self):
        """Each segment is tagged with the page its first character is on."""
        doc = ExtractedDocument.from_pages("specs.pdf", ["aaaaaa", "bbbbbb"])
        # text: "aaaaaa\n\nbbbbbb", page 2 starts at offset 8
        segments = DocumentChunker(max_chunk_chars=4).split_document(doc)

        assert "".join(s.text for s in segments) == doc.text
        assert [s.page_or_section for s in segments] == [1, 1, 2, 2]

    def test_empty_document(self):
        doc = ExtractedDocument(source_id="blank.pdf", text="")
        assert DocumentChunker().split_document(doc) == []

    def test_split_documents_keeps_order(self):
        docs = [
            ExtractedDocument(source_id="a.txt", text="12345"),
            ExtractedDocument(source_id="b.txt", text="678"),
        ]
        segments = DocumentChunker(max_chunk_chars=4).split_documents(docs)
        assert [(s.source_id, s.text) for s in segments] == [
            ("a.txt", "1234"), ("a.txt", "5"), ("b.txt", "678")
        ]
