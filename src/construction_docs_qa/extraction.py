"""
Text extraction for uploaded construction documents.

Turns file bytes into plain text, best effort:
- TXT: decoded as UTF-8
- PDF, DOCX: IBM Docling conversion, page by page where pages exist
- PNG/JPG/JPEG/WEBP (scans, blueprints): Docling with OCR

Unsupported types and any conversion failure yield an empty document.
"""

from io import BytesIO
from typing import List

from .models import ExtractedDocument
from .utils import file_extension, print_safe


TEXT_EXTENSIONS = {"txt"}
DOCLING_EXTENSIONS = {"pdf", "docx"}
IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "webp"}
SUPPORTED_EXTENSIONS = TEXT_EXTENSIONS | DOCLING_EXTENSIONS | IMAGE_EXTENSIONS


def is_supported(filename: str) -> bool:
    """Check whether a file type can be extracted."""
    return file_extension(filename) in SUPPORTED_EXTENSIONS


class DocumentExtractor:
    """
    Extracts plain text from uploaded files.

    The Docling converter is created on first use and reused afterwards.

    Example:
        >>> extractor = DocumentExtractor()
        >>> doc = extractor.extract(pdf_bytes, "specs.pdf")
        >>> print(len(doc.page_texts), "pages")
    """

    def __init__(self, verbose: bool = True):
        self.verbose = verbose
        self._converter = None
        self._stream_type = None

    def _log(self, message: str):
        """Print message if verbose mode is enabled."""
        if self.verbose:
            print_safe(message)

    def _get_converter(self):
        """Lazy initialization of the Docling converter and its input stream type."""
        if self._converter is None:
            try:
                from docling.datamodel.base_models import DocumentStream
                from docling.document_converter import DocumentConverter
            except ImportError:
                raise ImportError("Please install docling: pip install docling")
            self._converter = DocumentConverter()
            self._stream_type = DocumentStream
        return self._converter, self._stream_type

    def extract(self, data: bytes, filename: str) -> ExtractedDocument:
        """
        Extract text from one file.

        Args:
            data: Raw file bytes
            filename: Original filename; its extension selects the extractor

        Returns:
            ExtractedDocument (empty text if unsupported or on failure)
        """
        extension = file_extension(filename)

        try:
            if extension in TEXT_EXTENSIONS:
                return ExtractedDocument(source_id=filename, text=data.decode("utf-8", errors="replace"))

            if extension in DOCLING_EXTENSIONS or extension in IMAGE_EXTENSIONS:
                pages = self._convert_pages(data, filename)
                return ExtractedDocument.from_pages(filename, pages)

        except ImportError:
            raise
        except Exception as e:
            self._log(f"Warning: text extraction failed for {filename}: {e}")
            return ExtractedDocument(source_id=filename, text="")

        self._log(f"Warning: unsupported file type for {filename}")
        return ExtractedDocument(source_id=filename, text="")

    def _convert_pages(self, data: bytes, filename: str) -> List[str]:
        """Run Docling and return the text of each page."""
        converter, stream_type = self._get_converter()
        result = converter.convert(stream_type(name=filename, stream=BytesIO(data)))
        doc = result.document

        page_numbers = sorted(doc.pages.keys()) if getattr(doc, "pages", None) else []
        if not page_numbers:
            text = doc.export_to_markdown().strip()
            return [text] if text else []

        pages = [doc.export_to_markdown(page_no=p).strip() for p in page_numbers]
        # trailing empty pages add nothing but separators
        while pages and not pages[-1]:
            pages.pop()
        return pages
