"""Fixed-window character chunker with overlap."""

from __future__ import annotations

from notefuse.db.models import Chunk
from notefuse.errors import InvalidConfiguration


def chunk_text(text: str, chunk_size: int = 500, overlap: int = 50) -> list[str]:
    """Split *text* into windows of *chunk_size* characters with stride
    ``chunk_size - overlap``.

    Every window is emitted verbatim (no stripping), including a final window
    shorter than *chunk_size*. Text no longer than *chunk_size* yields exactly
    one chunk; empty text yields none.

    Raises:
        InvalidConfiguration: If ``chunk_size < 1``, ``overlap < 0`` or
            ``overlap >= chunk_size``.
    """
    if chunk_size < 1:
        raise InvalidConfiguration(f"chunk_size must be >= 1, got {chunk_size}")
    if not 0 <= overlap < chunk_size:
        raise InvalidConfiguration(
            f"overlap must be in [0, chunk_size), got overlap={overlap}, chunk_size={chunk_size}"
        )
    if not text:
        return []

    step = chunk_size - overlap
    segments: list[str] = []
    pos = 0
    length = len(text)

    while True:
        end = pos + chunk_size
        segments.append(text[pos:end])
        if end >= length:
            break
        pos += step

    return segments


class TextChunker:
    """Turns a document's text into sequentially indexed Chunk objects.

    Args:
        chunk_size: Characters per window.
        overlap: Characters shared by consecutive windows.
    """

    def __init__(self, chunk_size: int = 500, overlap: int = 50) -> None:
        # Validate eagerly so a bad configuration fails at construction time.
        chunk_text("", chunk_size, overlap)
        self.chunk_size = chunk_size
        self.overlap = overlap

    def chunk(self, resource_id: str, resource_type: str, text: str) -> list[Chunk]:
        if not text.strip():
            return []
        return [
            Chunk(
                resource_id=str(resource_id),
                resource_type=resource_type,
                text=segment,
                sequence_index=i,
            )
            for i, segment in enumerate(chunk_text(text, self.chunk_size, self.overlap))
        ]
