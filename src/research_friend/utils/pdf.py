"""PDF text extraction."""

import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from pypdf import PdfReader


@dataclass
class PdfText:
    """Text and document-info fields of a parsed PDF."""

    text: str
    page_count: int
    info: dict[str, Any] = field(default_factory=dict)

    @property
    def title(self) -> Optional[str]:
        return self.info.get("Title") or None

    @property
    def author(self) -> Optional[str]:
        return self.info.get("Author") or None

    @property
    def creation_date(self) -> Optional[str]:
        return self.info.get("CreationDate") or None


def _read(reader: PdfReader) -> PdfText:
    pages = [page.extract_text() or "" for page in reader.pages]
    info: dict[str, Any] = {}
    if reader.metadata:
        # pypdf keys look like "/Title"
        info = {key.lstrip("/"): str(value) for key, value in reader.metadata.items()}
    return PdfText(text="\n\n".join(pages), page_count=len(pages), info=info)


def parse_pdf_bytes(data: bytes) -> PdfText:
    """Extract text from an in-memory PDF."""
    return _read(PdfReader(io.BytesIO(data)))


def parse_pdf_file(path: Path | str) -> PdfText:
    """Extract text from a PDF on disk."""
    return _read(PdfReader(str(path)))
