from __future__ import annotations

from typing import Protocol

import numpy as np

from ..types import Chunk, TokenizedWindow


class WindowTokenizer(Protocol):
    max_length: int

    def tokenize(self, text: str) -> TokenizedWindow: ...


class Scorer(Protocol):
    def score(self, window: TokenizedWindow) -> np.ndarray:
        """Return a ``(max_length, 2)`` matrix of non-boundary/boundary scores."""
        ...


class BoundaryExtractor(Protocol):
    def extract(
        self,
        scores: np.ndarray,
        window: TokenizedWindow,
        window_start: int,
        margin: float,
    ) -> list[int]: ...


class ChunkAssembler(Protocol):
    def assemble(self, text: str, split_positions: list[int]) -> list[Chunk]: ...
