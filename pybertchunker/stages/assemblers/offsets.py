from __future__ import annotations

from ...types import Chunk


class OffsetChunkAssembler:
    """Cut the text at sorted split positions.

    Every character lands in exactly one chunk, so joining the chunk texts
    gives back the input.
    """

    def assemble(self, text: str, split_positions: list[int]) -> list[Chunk]:
        chunks: list[Chunk] = []
        start = 0
        for pos in split_positions:
            if not start < pos < len(text):
                raise ValueError(
                    f"Split position {pos} out of order or outside (0, {len(text)})"
                )
            chunks.append(
                Chunk(index=len(chunks), text=text[start:pos], char_start=start, char_end=pos)
            )
            start = pos
        if start < len(text):
            chunks.append(
                Chunk(
                    index=len(chunks),
                    text=text[start:],
                    char_start=start,
                    char_end=len(text),
                )
            )
        return chunks
