from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .constants import HF_MODEL_SUBFOLDER, HF_REPO_ID, MAX_LENGTH

ProviderType = Literal["auto", "cpu", "cuda", "openvino", "directml", "coreml"]


@dataclass(frozen=True)
class ChunkerConfig:
    """User-facing configuration for the chunking pipeline.

    Keep this frozen+hashable so it can be used as part of cache keys.
    """

    # Resources. Explicit paths win over model_dir, model_dir wins over
    # downloading from hf_repo_id.
    model_dir: str | None = None
    model_path: str | None = None
    vocab_path: str | None = None
    special_tokens_path: str | None = None
    hf_repo_id: str = HF_REPO_ID
    hf_subfolder: str | None = HF_MODEL_SUBFOLDER

    # Inference
    provider: ProviderType | None = None
    max_length: int = MAX_LENGTH
    timeout_s: float | None = None

    # Chunking; None falls back to the user config file
    prob_threshold: float | None = None

    # Behavior toggles
    return_trace: bool = False
