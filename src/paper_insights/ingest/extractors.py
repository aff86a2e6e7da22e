"""Extract per-page text from PDF documents."""
from __future__ import annotations

import io
import logging
from typing import List

from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

from .models import PageContent
from .normalization import normalize_page_text

LOGGER = logging.getLogger(__name__)


class ExtractionError(RuntimeError):
    """Raised when a document cannot be opened for text extraction."""


class PDFExtractor:
    """Extract normalised page text from a PDF, preserving 1-based page numbers.

    Pages that yield no text after normalisation are skipped, so page numbers
    in the result may be sparse but stay strictly increasing.
    """

    def extract(self, data: bytes) -> List[PageContent]:
        try:
            reader = PdfReader(io.BytesIO(data))
            reader_pages = list(reader.pages)
        except (PdfReadError, ValueError, OSError) as error:
            raise ExtractionError(f"Unable to read PDF document: {error}") from error

        LOGGER.debug("PDF document loaded with %s pages", len(reader_pages))
        pages: List[PageContent] = []
        for index, page in enumerate(reader_pages, start=1):
            try:
                raw_text = page.extract_text() or ""
            except Exception as error:  # pragma: no cover - depends on the PDF backend
                LOGGER.warning("Failed to extract text from PDF page %s: %s", index, error)
                raw_text = ""
            text = normalize_page_text(raw_text)
            if text:
                pages.append(PageContent(page_number=index, text=text))
        return pages
