"""pybertchunker - split long text into semantic chunks with a BERT boundary classifier."""

from .exceptions import (
    ChunkerError,
    ChunkingCancelled,
    ConfigError,
    InferenceError,
    InvalidArgument,
)
from .pipeline import ChunkerPipeline, chunk_text
from .pipeline_config import ChunkerConfig
from .runtime.cancellation import CancellationToken
from .types import Chunk, ChunkResult

# Version info
try:
    from ._version import __version__, __version_tuple__
except ImportError:
    __version__ = "0.0.0"
    __version_tuple__ = (0, 0, 0)

__all__ = [
    "__version__",
    "CancellationToken",
    "Chunk",
    "ChunkResult",
    "ChunkerConfig",
    "ChunkerError",
    "ChunkerPipeline",
    "ChunkingCancelled",
    "ConfigError",
    "InferenceError",
    "InvalidArgument",
    "chunk_text",
]
