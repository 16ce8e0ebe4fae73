"""
Fixed-window text chunking.
"""

from __future__ import annotations

from typing import List


def split_text(text: str, chunk_size: int = 1000, overlap: int = 100) -> List[str]:
    """
    Split `text` into windows of `chunk_size` characters, each sharing
    `overlap` characters with its predecessor.

    The last window may be shorter. Splitting stops as soon as a window
    reaches the end of the text, so no window is wholly contained in the
    previous one; for ``len(text) > overlap`` this yields
    ``ceil((len(text) - overlap) / (chunk_size - overlap))`` chunks.

    Raises
    ------
    ValueError
        If `chunk_size` is not positive or `overlap` is not in
        ``[0, chunk_size)``.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be a positive integer")
    if overlap < 0 or overlap >= chunk_size:
        raise ValueError("overlap must be non-negative and smaller than chunk_size")

    step = chunk_size - overlap
    chunks: List[str] = []
    start = 0

    while start < len(text):
        end = start + chunk_size
        chunks.append(text[start:end])
        if end >= len(text):
            break
        start += step

    return chunks
