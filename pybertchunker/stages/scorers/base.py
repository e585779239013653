from __future__ import annotations

from typing import Any

import numpy as np

from ...exceptions import InferenceError


def coerce_score_matrix(raw: Any, max_length: int) -> np.ndarray:
    """Validate raw scorer output and return a ``(max_length, 2)`` float32 matrix.

    Accepts ``(1, max_length, 2)`` (the model's batch-of-one layout) or
    ``(max_length, 2)``.

    Raises:
        InferenceError: On any other shape or non-finite-castable data
    """
    try:
        scores = np.asarray(raw, dtype=np.float32)
    except (TypeError, ValueError) as e:
        raise InferenceError(f"Scorer returned non-numeric output: {e}") from e
    if scores.ndim == 3 and scores.shape[0] == 1:
        scores = scores[0]
    if scores.shape != (max_length, 2):
        raise InferenceError(
            f"Scorer returned shape {tuple(np.shape(raw))}, "
            f"expected (1, {max_length}, 2)"
        )
    return scores
