from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from ..types import Trace, TraceEvent


@contextmanager
def trace_timing(
    trace: Trace | None, stage: Any, name: str, **details: Any
) -> Iterator[dict[str, Any]]:
    """Time the enclosed block and append a TraceEvent to ``trace``.

    Yields a dict the block may fill with extra details. A ``None`` trace
    makes this a no-op.
    """
    extra: dict[str, Any] = dict(details)
    start = time.perf_counter()
    try:
        yield extra
    finally:
        if trace is not None:
            ms = (time.perf_counter() - start) * 1000.0
            trace.events.append(TraceEvent(stage=stage, name=name, ms=ms, details=extra))
