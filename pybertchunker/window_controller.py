"""Sliding window controller.

Drives repeated tokenize -> score -> extract cycles over a whole document.
All state of a scan (cursor, offset maps, split list) is local to one
``scan`` call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .runtime.cancellation import CancellationToken
from .runtime.tracing import trace_timing
from .stages.boundaries.threshold import logits_threshold
from .stages.protocols import BoundaryExtractor, Scorer, WindowTokenizer
from .types import Trace

logger = logging.getLogger(__name__)


@dataclass
class WindowScan:
    split_positions: list[int] = field(default_factory=list)
    windows: int = 0
    # Characters before this offset have been fully scanned
    processed_chars: int = 0
    complete: bool = True


class SlidingWindowController:
    """Advance a window over the text until every character has been scored.

    After a window with boundaries the next window starts exactly at the
    last boundary. After a window without boundaries the cursor moves by
    half a window, capped at the remaining text.
    """

    def __init__(
        self,
        tokenizer: WindowTokenizer,
        scorer: Scorer,
        extractor: BoundaryExtractor,
    ) -> None:
        self.tokenizer = tokenizer
        self.scorer = scorer
        self.extractor = extractor

    @property
    def max_length(self) -> int:
        return self.tokenizer.max_length

    def scan(
        self,
        text: str,
        prob_threshold: float,
        *,
        cancel: CancellationToken | None = None,
        trace: Trace | None = None,
    ) -> WindowScan:
        total_length = len(text)
        max_length = self.max_length
        result = WindowScan()
        window_start = 0
        margin = logits_threshold(prob_threshold)

        logger.info("Processing about %d characters...", total_length)

        while window_start < total_length:
            if cancel is not None and cancel.cancelled:
                logger.info(
                    "Chunking cancelled after %d windows at offset %d",
                    result.windows,
                    window_start,
                )
                result.complete = False
                break

            window_end = min(total_length, window_start + max_length)
            with trace_timing(trace, "tokenize", "window", start=window_start):
                window = self.tokenizer.tokenize(text[window_start:window_end])
            with trace_timing(trace, "score", "window", start=window_start):
                scores = self.scorer.score(window)
            with trace_timing(trace, "extract", "window", start=window_start) as info:
                boundaries = self.extractor.extract(
                    scores, window, window_start, margin
                )
                info["boundaries"] = len(boundaries)
            result.windows += 1

            if boundaries:
                result.split_positions.extend(boundaries)
                next_start = boundaries[-1]
            else:
                next_start = window_start + min(
                    max_length // 2, total_length - window_start
                )

            logger.debug(
                "Window %d [%d, %d): %d boundaries, next start %d",
                result.windows,
                window_start,
                window_end,
                len(boundaries),
                next_start,
            )
            if next_start <= window_start:
                raise RuntimeError(
                    f"Window cursor did not advance at offset {window_start}"
                )
            window_start = next_start
            result.processed_chars = min(window_start, total_length)

        logger.info(
            "Found %d split positions in %d windows",
            len(result.split_positions),
            result.windows,
        )
        return result
