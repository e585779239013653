from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Any

from .exceptions import ChunkingCancelled, InvalidArgument
from .onnx_backend import ChunkerModel, ModelFiles, resolve_model_files
from .pipeline_config import ChunkerConfig
from .runtime.cancellation import CancellationToken
from .runtime.tracing import trace_timing
from .stages.assemblers.offsets import OffsetChunkAssembler
from .stages.boundaries.threshold import (
    ThresholdBoundaryExtractor,
    validate_prob_threshold,
)
from .stages.protocols import (
    BoundaryExtractor,
    ChunkAssembler,
    Scorer,
    WindowTokenizer,
)
from .stages.scorers.onnx import OnnxScorer
from .stages.tokenizers.char import CharWindowTokenizer
from .types import ChunkResult, Trace
from .utils import load_config
from .vocab import load_resources
from .window_controller import SlidingWindowController

logger = logging.getLogger(__name__)


class ChunkerPipeline:
    def __init__(
        self,
        config: ChunkerConfig | None = None,
        *,
        tokenizer: WindowTokenizer | None = None,
        scorer: Scorer | None = None,
        extractor: BoundaryExtractor | None = None,
        assembler: ChunkAssembler | None = None,
    ) -> None:
        self.config = config or ChunkerConfig()
        self.tokenizer = tokenizer
        self.scorer = scorer
        self.extractor = extractor or ThresholdBoundaryExtractor()
        self.assembler = assembler or OffsetChunkAssembler()
        self._files: ModelFiles | None = None
        self._files_key: tuple[object, ...] | None = None
        self._model: ChunkerModel | None = None
        self._owns_tokenizer = False
        self._owns_scorer = False
        # Guards building, rebuilding and closing the owned stages
        self._lock = threading.Lock()

    def __enter__(self) -> ChunkerPipeline:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        with self._lock:
            self._release_stages()

    def _release_stages(self) -> None:
        if self._owns_scorer:
            self.scorer = None
            self._owns_scorer = False
        if self._owns_tokenizer:
            self.tokenizer = None
            self._owns_tokenizer = False
        if self._model is not None:
            self._model.close()
        self._model = None
        self._files = None
        self._files_key = None

    def _resources_key(self, cfg: ChunkerConfig) -> tuple[object, ...]:
        return (
            cfg.model_dir,
            cfg.model_path,
            cfg.vocab_path,
            cfg.special_tokens_path,
            cfg.hf_repo_id,
            cfg.hf_subfolder,
            cfg.provider,
            cfg.max_length,
            cfg.timeout_s,
        )

    def _ensure_stages(self, cfg: ChunkerConfig) -> tuple[WindowTokenizer, Scorer]:
        with self._lock:
            return self._build_stages(cfg)

    def _build_stages(self, cfg: ChunkerConfig) -> tuple[WindowTokenizer, Scorer]:
        if self.tokenizer is not None and self.scorer is not None:
            if not (self._owns_tokenizer or self._owns_scorer):
                return self.tokenizer, self.scorer
            if self._files_key == self._resources_key(cfg):
                return self.tokenizer, self.scorer
            # Configuration changed: rebuild the stages we own
            if self._owns_tokenizer:
                self.tokenizer = None
                self._owns_tokenizer = False
            if self._owns_scorer:
                self.scorer = None
                self._owns_scorer = False
            if self._model is not None:
                self._model.close()
                self._model = None

        files_key = self._resources_key(cfg)
        if self._files is None or self._files_key != files_key:
            self._files = resolve_model_files(cfg)
            self._files_key = files_key

        if self.tokenizer is None:
            vocab, special_tokens = load_resources(
                self._files.vocab, self._files.special_tokens
            )
            self.tokenizer = CharWindowTokenizer(
                vocab, special_tokens, max_length=cfg.max_length
            )
            self._owns_tokenizer = True
        if self.scorer is None:
            self._model = ChunkerModel(self._files.model, provider=cfg.provider)
            self.scorer = OnnxScorer(self._model, timeout_s=cfg.timeout_s)
            self._owns_scorer = True
        return self.tokenizer, self.scorer

    def run(
        self,
        text: str,
        *,
        cancel: CancellationToken | None = None,
        **overrides: Any,
    ) -> ChunkResult:
        """Chunk ``text`` and return chunks with their offsets.

        Args:
            text: Non-empty input text
            cancel: Optional token checked between windows; when it fires
                the result is partial and ``complete`` is False
            **overrides: ChunkerConfig fields to override for this call

        Raises:
            InvalidArgument: Empty text or threshold outside (0, 1)
            InferenceError: The scorer failed on some window
        """
        cfg = replace(self.config, **overrides) if overrides else self.config
        if not isinstance(text, str) or not text:
            raise InvalidArgument("text must be a non-empty string")
        prob_threshold = cfg.prob_threshold
        if prob_threshold is None:
            prob_threshold = load_config()["prob_threshold"]
        prob_threshold = validate_prob_threshold(prob_threshold)

        tokenizer, scorer = self._ensure_stages(cfg)
        trace = Trace() if cfg.return_trace else None

        controller = SlidingWindowController(tokenizer, scorer, self.extractor)
        scan = controller.scan(text, prob_threshold, cancel=cancel, trace=trace)

        split_positions = sorted(set(scan.split_positions))
        if len(split_positions) != len(scan.split_positions) and trace is not None:
            trace.warnings.append("Duplicate split positions were merged")

        with trace_timing(trace, "assemble", "chunks") as info:
            if scan.complete:
                chunks = self.assembler.assemble(text, split_positions)
            else:
                # Only the part that was fully scanned is chunked
                finished = [p for p in split_positions if p < scan.processed_chars]
                chunks = self.assembler.assemble(text[: scan.processed_chars], finished)
            info["chunks"] = len(chunks)

        logger.debug("Assembled %d chunks from %d characters", len(chunks), len(text))
        return ChunkResult(
            chunks=chunks,
            split_positions=split_positions,
            windows=scan.windows,
            complete=scan.complete,
            trace=trace,
        )

    def chunk_text(
        self,
        text: str,
        prob_threshold: float | None = None,
        *,
        cancel: CancellationToken | None = None,
    ) -> list[str]:
        """Split ``text`` into chunk strings that concatenate back to ``text``.

        Args:
            text: Non-empty input text
            prob_threshold: Boundary probability in (0, 1); lower values
                give more, smaller chunks

        Raises:
            ChunkingCancelled: ``cancel`` fired before the text was finished
        """
        overrides: dict[str, Any] = {}
        if prob_threshold is not None:
            overrides["prob_threshold"] = prob_threshold
        result = self.run(text, cancel=cancel, **overrides)
        if not result.complete:
            processed = result.chunks[-1].char_end if result.chunks else 0
            raise ChunkingCancelled(
                f"Chunking cancelled after {result.windows} windows",
                processed_chars=processed,
            )
        return result.texts

    def __call__(self, text: str, **overrides: Any) -> ChunkResult:
        return self.run(text, **overrides)


def chunk_text(
    text: str,
    prob_threshold: float | None = None,
    **config: Any,
) -> list[str]:
    """One-shot helper: build a pipeline from ``config`` and chunk ``text``."""
    with ChunkerPipeline(ChunkerConfig(**config)) as pipe:
        return pipe.chunk_text(text, prob_threshold)
