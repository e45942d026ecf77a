"""Streaming substring scan over text files."""

from __future__ import annotations

import codecs
from pathlib import Path

from ..text import BINARY_SNIFF_BYTES, looks_binary

CHUNK_SIZE = 64 * 1024


def file_contains(path: Path, needle: str, case_sensitive: bool = False) -> bool | None:
    """Return whether ``path`` contains ``needle``.

    Returns ``None`` when the file is binary or not valid UTF-8, so callers
    can skip it without treating it as an error. ``OSError`` propagates.
    """
    if not needle:
        return True
    if not case_sensitive:
        needle = needle.lower()

    decoder = codecs.getincrementaldecoder("utf-8")()
    tail = ""
    first = True
    with open(path, "rb") as handle:
        while True:
            chunk = handle.read(CHUNK_SIZE if not first else BINARY_SNIFF_BYTES)
            final = not chunk
            if first and looks_binary(chunk):
                return None
            first = False
            try:
                text = decoder.decode(chunk, final=final)
            except UnicodeDecodeError:
                return None
            if not case_sensitive:
                text = text.lower()
            window = tail + text
            if needle in window:
                return True
            if final:
                return False
            tail = window[-(len(needle) - 1):] if len(needle) > 1 else ""


__all__ = ["file_contains"]
