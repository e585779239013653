from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

import numpy as np

from .constants import MODEL_INPUT_NAMES, NO_OFFSET


@dataclass(frozen=True)
class SpecialToken:
    """A reserved vocabulary entry plus its pre/post-processing flags.

    The flags are carried for completeness; character-level tokenization
    applies none of them.
    """

    content: str
    lstrip: bool = False
    rstrip: bool = False
    normalized: bool = False
    single_word: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any] | str) -> SpecialToken:
        if isinstance(data, str):
            return cls(content=data)
        return cls(
            content=str(data["content"]),
            lstrip=bool(data.get("lstrip", False)),
            rstrip=bool(data.get("rstrip", False)),
            normalized=bool(data.get("normalized", False)),
            single_word=bool(data.get("single_word", data.get("singleWord", False))),
        )


@dataclass(frozen=True)
class TokenizedWindow:
    """Fixed-length model inputs for one window plus its offset map.

    ``offsets[i]`` is the character offset (relative to the window start)
    of token ``i``, or ``NO_OFFSET`` for cls/sep/padding.
    """

    input_ids: np.ndarray
    attention_mask: np.ndarray
    token_type_ids: np.ndarray
    offsets: np.ndarray
    length: int

    @property
    def max_length(self) -> int:
        return int(self.input_ids.shape[0])

    def char_offset(self, token_index: int) -> int:
        if 0 <= token_index < self.offsets.shape[0]:
            return int(self.offsets[token_index])
        return NO_OFFSET

    def model_inputs(self) -> dict[str, np.ndarray]:
        """Inputs shaped ``(1, max_length)`` as the model expects them."""
        arrays = (self.input_ids, self.attention_mask, self.token_type_ids)
        return {
            name: array.reshape(1, -1) for name, array in zip(MODEL_INPUT_NAMES, arrays)
        }


@dataclass(frozen=True)
class Chunk:
    """A slice of the input text with stable offsets into the original document."""

    index: int
    text: str
    char_start: int
    char_end: int


@dataclass(frozen=True)
class TraceEvent:
    stage: Literal["load", "tokenize", "score", "extract", "assemble"]
    name: str
    ms: float
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class Trace:
    """Structured debugging output."""

    events: list[TraceEvent] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class ChunkResult:
    chunks: list[Chunk] = field(default_factory=list)
    split_positions: list[int] = field(default_factory=list)
    windows: int = 0
    complete: bool = True
    trace: Trace | None = None

    @property
    def texts(self) -> list[str]:
        return [chunk.text for chunk in self.chunks]
