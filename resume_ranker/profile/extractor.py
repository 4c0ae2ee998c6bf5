"""Format-aware text extraction from raw resume documents.

PDF goes through pymupdf, DOCX through python-docx. Legacy binary .doc files
have no reliable parser here, so their text is recovered by scanning the raw
bytes for printable runs; that output is flagged ``lossy``.
"""

import io
import logging
import re
from pathlib import Path

from resume_ranker.core.config import ExtractionConfig
from resume_ranker.core.errors import (
    CorruptDocument,
    DocumentTooLarge,
    EmptyContent,
    UnsupportedFormat,
)
from resume_ranker.core.schemas import ExtractedText, MediaType, RawDocument

logger = logging.getLogger(__name__)

_ZIP_MAGIC = b"PK\x03\x04"

# Printable runs in the two encodings Word 97-2003 stores text in.
_UTF16_RUN = re.compile(rb"(?:[\x09\x0a\x0d\x20-\x7e\xa0-\xff]\x00){4,}")
_BYTE_RUN = re.compile(rb"[\x09\x0a\x0d\x20-\x7e]{4,}")
_MIN_RUN_LETTERS = 3
_BLANK_LINES = re.compile(r"\n\s*\n+")


def extract_text(
    document: RawDocument,
    config: ExtractionConfig | None = None,
) -> ExtractedText:
    """Convert a raw document into plain text.

    Args:
        document: Bytes plus declared media type.
        config: Size and length limits. Defaults apply when None.

    Returns:
        ExtractedText whose stripped length exceeds ``config.min_text_length``.

    Raises:
        EmptyContent: No bytes, or too little text after extraction.
        DocumentTooLarge: Content exceeds ``config.max_file_size_mb``.
        CorruptDocument: The document could not be parsed or has no text layer.
        UnsupportedFormat: The media type has no extractor.
    """
    config = config or ExtractionConfig()

    if not document.content:
        msg = f"'{document.filename}' is empty"
        raise EmptyContent(msg)

    if document.size > config.max_file_size_bytes:
        msg = (
            f"'{document.filename}' is {document.size / (1024 * 1024):.1f}MB; "
            f"file size must be less than {config.max_file_size_mb:g}MB"
        )
        raise DocumentTooLarge(msg)

    logger.debug(
        "Extracting text from %s (%s, %d bytes)",
        document.filename, document.media_type.value, document.size,
    )

    page_count: int | None = None
    lossy = False
    if document.media_type is MediaType.TEXT:
        text = _decode_text(document.content)
    elif document.media_type is MediaType.PDF:
        text, page_count = _extract_pdf(document)
    elif document.media_type is MediaType.DOCX:
        text = _extract_docx(document)
    elif document.media_type is MediaType.DOC:
        text, lossy = _extract_legacy_doc(document)
    else:
        msg = f"No extractor for media type '{document.media_type}'"
        raise UnsupportedFormat(msg)

    text = _BLANK_LINES.sub("\n\n", text).strip()
    if len(text) <= config.min_text_length:
        msg = (
            f"'{document.filename}' contains too little text to analyze "
            f"({len(text)} characters, need more than {config.min_text_length})"
        )
        raise EmptyContent(msg)

    return ExtractedText(
        text=text,
        media_type=document.media_type,
        filename=document.filename,
        page_count=page_count,
        lossy=lossy,
    )


def load_document(path: str | Path, media_type: MediaType | str | None = None) -> RawDocument:
    """Read a local file into a RawDocument, inferring the media type from its name."""
    path = Path(path)
    if not path.exists():
        msg = f"Resume file not found: {path}"
        raise FileNotFoundError(msg)
    resolved = MediaType.parse(media_type) if media_type else MediaType.from_filename(path.name)
    return RawDocument(content=path.read_bytes(), media_type=resolved, filename=path.name)


def _decode_text(content: bytes) -> str:
    return content.decode("utf-8-sig", errors="replace")


def _extract_pdf(document: RawDocument) -> tuple[str, int]:
    try:
        import pymupdf
    except ImportError:
        msg = (
            "pymupdf is required for PDF extraction. "
            "Install with: pip install pymupdf"
        )
        raise ImportError(msg) from None

    try:
        doc = pymupdf.open(stream=document.content, filetype="pdf")
    except Exception as e:
        msg = f"Could not open PDF '{document.filename}': {e}"
        raise CorruptDocument(msg) from e

    try:
        if doc.needs_pass:
            msg = f"PDF '{document.filename}' is password-protected"
            raise CorruptDocument(msg)
        try:
            pages = [page.get_text() or "" for page in doc]
        except Exception as e:
            msg = f"Could not read text from PDF '{document.filename}': {e}"
            raise CorruptDocument(msg) from e
    finally:
        doc.close()

    usable = [p for p in pages if p.strip()]
    if not usable:
        msg = (
            f"PDF '{document.filename}' has no extractable text "
            "(it may be a scanned image)"
        )
        raise CorruptDocument(msg)

    logger.debug("PDF %s: %d/%d pages with text", document.filename, len(usable), len(pages))
    return "\n".join(usable), len(pages)


def _extract_docx(document: RawDocument) -> str:
    try:
        from docx import Document
    except ImportError:
        msg = (
            "python-docx is required for DOCX extraction. "
            "Install with: pip install python-docx"
        )
        raise ImportError(msg) from None

    try:
        doc = Document(io.BytesIO(document.content))
        parts: list[str] = []
        for block in doc.iter_inner_content():
            if hasattr(block, "rows"):
                parts.extend(_table_rows(block))
            elif block.text.strip():
                parts.append(block.text)
    except Exception as e:
        msg = f"Could not read Word document '{document.filename}': {e}"
        raise CorruptDocument(msg) from e

    return "\n".join(parts)


def _table_rows(table) -> list[str]:  # type: ignore[no-untyped-def]
    rows: list[str] = []
    for row in table.rows:
        cells: list[str] = []
        for cell in row.cells:
            # Merged cells repeat the same text once per grid column.
            text = cell.text.strip()
            if text and (not cells or cells[-1] != text):
                cells.append(text)
        if cells:
            rows.append(" | ".join(cells))
    return rows


def _extract_legacy_doc(document: RawDocument) -> tuple[str, bool]:
    """Best-effort text recovery for Word 97-2003 files.

    Returns (text, lossy). A .doc that is really a DOCX container is parsed
    properly and is not lossy.
    """
    if document.content.startswith(_ZIP_MAGIC):
        logger.info("%s is a DOCX container; parsing as DOCX", document.filename)
        return _extract_docx(document), False

    wide = [m.decode("utf-16-le") for m in _UTF16_RUN.findall(document.content)]
    narrow = [m.decode("cp1252") for m in _BYTE_RUN.findall(document.content)]
    wide_text = _join_runs(wide)
    narrow_text = _join_runs(narrow)
    text = wide_text if _letters(wide_text) >= _letters(narrow_text) else narrow_text

    logger.warning(
        "Legacy .doc '%s' decoded on a best-effort basis; text may be incomplete",
        document.filename,
    )
    return text, True


def _join_runs(runs: list[str]) -> str:
    kept = [r.strip() for r in runs if _letters(r) >= _MIN_RUN_LETTERS]
    return "\n".join(r for r in kept if r)


def _letters(text: str) -> int:
    return sum(1 for c in text if c.isalpha())
