"""Exception hierarchy for pybertchunker."""

from __future__ import annotations


class ChunkerError(Exception):
    """Base class for all pybertchunker errors."""


class ConfigError(ChunkerError):
    """Vocabulary, special-token or model resources are missing or invalid.

    Raised while loading resources; there is no recovery.
    """


class InvalidArgument(ChunkerError, ValueError):
    """A caller-supplied argument is out of range (bad threshold, empty text)."""


class InferenceError(ChunkerError, RuntimeError):
    """The scorer failed, timed out or returned a malformed score matrix."""


class ChunkingCancelled(ChunkerError):
    """The chunking call was cancelled between windows."""

    def __init__(self, message: str, processed_chars: int = 0) -> None:
        super().__init__(message)
        self.processed_chars = processed_chars
