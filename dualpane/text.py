"""Text/binary classification and strict text loading.

Search and diff both treat a file as text only when its first block has no
NUL bytes and the whole file decodes as UTF-8.
"""

from __future__ import annotations

from pathlib import Path

BINARY_SNIFF_BYTES = 8192


def looks_binary(sample: bytes) -> bool:
    return b"\0" in sample


def is_binary_file(path: Path) -> bool:
    """Return whether the first block of ``path`` contains NUL bytes."""
    with open(path, "rb") as handle:
        return looks_binary(handle.read(BINARY_SNIFF_BYTES))


def read_text_lines(path: Path) -> list[str] | None:
    """Return the lines of ``path`` without line endings, or ``None`` for binary.

    A UTF-8 byte-order mark is dropped. Files that do not decode as UTF-8
    count as binary.
    """
    data = path.read_bytes()
    if looks_binary(data[:BINARY_SNIFF_BYTES]):
        return None
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return None
    return text.splitlines()


__all__ = [
    "BINARY_SNIFF_BYTES",
    "is_binary_file",
    "looks_binary",
    "read_text_lines",
]
