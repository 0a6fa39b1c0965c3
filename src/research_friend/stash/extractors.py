"""File-type detection and text extraction for stashed files."""

from pathlib import Path
from typing import Optional

from research_friend.errors import UnsupportedFileTypeError
from research_friend.utils.html import html_to_text
from research_friend.utils.pdf import parse_pdf_file

# Single source of truth for supported types
FILE_TYPE_CONFIG: dict[str, dict] = {
    "pdf": {"extensions": ["pdf"], "needs_extraction": True},
    "html": {"extensions": ["html", "htm"], "needs_extraction": True},
    "md": {"extensions": ["md", "markdown"], "needs_extraction": False},
    "txt": {"extensions": ["txt"], "needs_extraction": False},
}

PLAINTEXT_TYPES = frozenset(
    name for name, config in FILE_TYPE_CONFIG.items() if not config["needs_extraction"]
)
EXTRACTION_TYPES = frozenset(
    name for name, config in FILE_TYPE_CONFIG.items() if config["needs_extraction"]
)

_EXT_TO_TYPE = {
    ext: name for name, config in FILE_TYPE_CONFIG.items() for ext in config["extensions"]
}


def detect_file_type(filename: str) -> Optional[str]:
    """Map a filename to a stash file type by extension, or None."""
    if "." not in filename:
        return None
    return _EXT_TO_TYPE.get(filename.rsplit(".", 1)[-1].lower())


def extract_text(path: Path | str, file_type: str) -> str:
    """Extract plain text from a stashed file.

    Raises:
        UnsupportedFileTypeError: If ``file_type`` is not a known type
    """
    path = Path(path)
    if file_type == "pdf":
        return parse_pdf_file(path).text
    if file_type == "html":
        return html_to_text(path.read_text(encoding="utf-8", errors="replace"))
    if file_type in PLAINTEXT_TYPES:
        return path.read_text(encoding="utf-8")
    raise UnsupportedFileTypeError(f"Unsupported file type: {file_type}")
