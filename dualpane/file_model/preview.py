"""Extension-based classification used by preview panels."""

from __future__ import annotations

from pathlib import Path

IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "gif", "bmp", "ico", "webp"})
DOCUMENT_EXTENSIONS = frozenset({"pdf"})
TEXT_EXTENSIONS = frozenset(
    {"txt", "log", "md", "json", "xml", "csv", "toml", "yaml", "yml", "ini", "cfg", "py", "rs", "sh", "html", "css", "js"}
)


def is_previewable(path: Path) -> bool:
    """Return whether a preview panel can show ``path`` (image, PDF, or text)."""
    extension = path.suffix.lower().lstrip(".")
    return extension in IMAGE_EXTENSIONS or extension in DOCUMENT_EXTENSIONS or extension in TEXT_EXTENSIONS


__all__ = [
    "DOCUMENT_EXTENSIONS",
    "IMAGE_EXTENSIONS",
    "TEXT_EXTENSIONS",
    "is_previewable",
]
