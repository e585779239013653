from __future__ import annotations

import math

import numpy as np

from ...constants import NO_OFFSET
from ...exceptions import InvalidArgument
from ...types import TokenizedWindow


def validate_prob_threshold(prob_threshold: float) -> float:
    try:
        p = float(prob_threshold)
    except (TypeError, ValueError) as e:
        raise InvalidArgument(f"prob_threshold must be a number, got {prob_threshold!r}") from e
    if not 0.0 < p < 1.0:
        raise InvalidArgument(f"prob_threshold must be in (0, 1), got {prob_threshold}")
    return p


def logits_threshold(prob_threshold: float) -> float:
    """Convert a boundary probability into a logit margin, ``ln(1/p - 1)``.

    Smaller probabilities give larger margins and so more boundaries.
    """
    p = validate_prob_threshold(prob_threshold)
    return math.log(1.0 / p - 1.0)


class ThresholdBoundaryExtractor:
    """Turn a window's score matrix into absolute split positions.

    Token ``i`` is a boundary when ``score[i, 1] > score[i, 0] - margin``,
    where ``margin`` comes from ``logits_threshold``.
    The first and last matrix rows are never considered, and tokens that
    map to no character, or to the first character of the window, are
    skipped.
    """

    def extract(
        self,
        scores: np.ndarray,
        window: TokenizedWindow,
        window_start: int,
        margin: float,
    ) -> list[int]:
        inner = scores[1:-1]
        flagged = np.nonzero(inner[:, 1] > inner[:, 0] - margin)[0] + 1

        positions: list[int] = []
        for token_index in flagged:
            offset = window.char_offset(int(token_index))
            if offset == NO_OFFSET or offset == 0:
                continue
            positions.append(window_start + offset)
        return positions
