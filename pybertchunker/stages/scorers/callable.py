from __future__ import annotations

from collections.abc import Callable
from typing import Any

import numpy as np

from ...exceptions import InferenceError
from ...types import TokenizedWindow
from .base import coerce_score_matrix

ScoreFunction = Callable[[np.ndarray, np.ndarray, np.ndarray], Any]


class CallableScorer:
    """Scorer backed by a plain function.

    The function receives ``input_ids``, ``attention_mask`` and
    ``token_type_ids`` (each ``(max_length,)`` int64) and returns an
    array-like of shape ``(1, max_length, 2)`` or ``(max_length, 2)``.
    """

    def __init__(self, fn: ScoreFunction) -> None:
        self._fn = fn

    def score(self, window: TokenizedWindow) -> np.ndarray:
        try:
            raw = self._fn(window.input_ids, window.attention_mask, window.token_type_ids)
        except InferenceError:
            raise
        except Exception as e:
            raise InferenceError(f"Score function failed: {e}") from e
        return coerce_score_matrix(raw, window.max_length)
