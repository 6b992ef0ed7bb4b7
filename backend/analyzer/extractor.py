# analyzer/extractor.py
# ─────────────────────────────────────────────────────────────────────────────
# Resume text extraction.
#
# The declared content type picks the reader:
#   application/pdf                                      → pypdf
#   application/vnd.openxmlformats-...wordprocessingml   → python-docx
# Anything else is rejected before a file is ever written.
# ─────────────────────────────────────────────────────────────────────────────

import logging

import docx
from pypdf import PdfReader

from errors import ExtractionError, UnsupportedFormatError

logger = logging.getLogger(__name__)

PDF_MIME  = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

SUPPORTED_TYPES = {PDF_MIME: ".pdf", DOCX_MIME: ".docx"}


def normalize_content_type(content_type: str) -> str:
    """Drop parameters (e.g. '; charset=...') and case."""
    return (content_type or "").split(";", 1)[0].strip().lower()


def ensure_supported(content_type: str) -> str:
    mime = normalize_content_type(content_type)
    if mime not in SUPPORTED_TYPES:
        raise UnsupportedFormatError(detail=f"content type {content_type!r}")
    return mime


def _pdf_text(path: str) -> str:
    reader = PdfReader(path)
    return "\n".join((page.extract_text() or "") for page in reader.pages)


def _docx_text(path: str) -> str:
    document = docx.Document(path)
    return "\n".join(p.text for p in document.paragraphs)


class TextExtractor:
    """Turn an uploaded resume on disk into plain text."""

    readers = {PDF_MIME: _pdf_text, DOCX_MIME: _docx_text}

    def extract(self, path: str, content_type: str) -> str:
        mime = ensure_supported(content_type)
        try:
            text = self.readers[mime](path)
        except Exception as e:
            # pypdf and python-docx raise anything from zip, xml and their own errors
            logger.warning("Text extraction failed (%s): %s", mime, e, exc_info=True)
            raise ExtractionError(detail=str(e)) from e

        logger.info("Extracted %d characters from %s upload", len(text), mime)
        return text


_extractor = TextExtractor()


def get_text_extractor() -> TextExtractor:
    return _extractor
