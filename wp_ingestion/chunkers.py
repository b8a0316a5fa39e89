from __future__ import annotations

import math
from typing import List

from wp_ingestion.document_models import ChunkDescriptor


def estimate_tokens(text: str, chars_per_token: int) -> int:
    """Fixed-ratio token estimate; not a real tokenizer."""
    return math.ceil(len(text) / chars_per_token)


def chunk_content(
    content: str, chunk_size: int, overlap: int, chars_per_token: int
) -> List[ChunkDescriptor]:
    """
    Split `content` into windows of `chunk_size` tokens where each window
    repeats the last `overlap` tokens of the previous one. Sizes are converted
    to characters with `chars_per_token`. Always returns at least one chunk.
    """
    chunk_chars = chunk_size * chars_per_token
    overlap_chars = overlap * chars_per_token
    if chunk_chars <= 0 or overlap_chars < 0 or overlap_chars >= chunk_chars:
        raise ValueError(
            f"invalid chunk geometry: chunk_size={chunk_size}, overlap={overlap}, "
            f"chars_per_token={chars_per_token}"
        )

    chunks: List[ChunkDescriptor] = []
    length = len(content)
    start = 0

    while True:
        end = min(start + chunk_chars, length)
        piece = content[start:end]
        chunks.append(
            ChunkDescriptor(
                content=piece,
                index=len(chunks),
                token_size=estimate_tokens(piece, chars_per_token),
            )
        )
        if end >= length:
            break
        start = end - overlap_chars

    return chunks
