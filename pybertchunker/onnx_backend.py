"""ONNX backend for pybertchunker - resource resolution and inference session."""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import onnxruntime as rt
from huggingface_hub import hf_hub_download
from huggingface_hub.errors import HfHubHTTPError

from .constants import MODEL_FILENAME, SPECIAL_TOKENS_FILENAME, VOCAB_FILENAME
from .exceptions import ConfigError, InferenceError
from .pipeline_config import ChunkerConfig, ProviderType
from .utils import get_user_cache_path, load_config

# Logger for debugging
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelFiles:
    model: Path
    vocab: Path
    special_tokens: Path


# =============================================================================
# Resource resolution
# =============================================================================


def get_model_dir(repo_id: str) -> Path:
    """Get the directory for storing files downloaded from ``repo_id``."""
    return get_user_cache_path("models") / repo_id.replace("/", "--")


def _download_from_hf(
    repo_id: str,
    filename: str,
    subfolder: str | None = None,
    local_dir: Path | None = None,
    force: bool = False,
) -> Path:
    """
    Download a file from Hugging Face Hub.

    Args:
        repo_id: Hugging Face repository ID
        filename: File to download
        subfolder: Subfolder in the repository
        local_dir: Local directory to save to
        force: Force re-download even if file exists

    Returns:
        Path to the downloaded file

    Raises:
        ConfigError: If the file cannot be fetched
    """
    try:
        downloaded_path = hf_hub_download(
            repo_id=repo_id,
            filename=filename,
            subfolder=subfolder,
            local_dir=str(local_dir) if local_dir else None,
            force_download=force,
        )
    except (HfHubHTTPError, OSError, ValueError) as e:
        raise ConfigError(f"Could not download {filename} from {repo_id}: {e}") from e
    return Path(downloaded_path)


def resolve_model_files(config: ChunkerConfig) -> ModelFiles:
    """Locate model, vocabulary and special-token files for ``config``.

    Explicit paths win, then ``config.model_dir``, then a download from
    ``config.hf_repo_id``. The tokenizer files are fetched from the
    repository root and the model from ``config.hf_subfolder``.

    Raises:
        ConfigError: If a resolved file does not exist
    """
    model_dir = Path(config.model_dir) if config.model_dir else None

    def resolve(explicit: str | None, filename: str, subfolder: str | None) -> Path:
        if explicit:
            path = Path(explicit)
        elif model_dir is not None:
            path = model_dir / filename
        else:
            return _download_from_hf(
                config.hf_repo_id,
                filename,
                subfolder=subfolder,
                local_dir=get_model_dir(config.hf_repo_id),
            )
        if not path.is_file():
            raise ConfigError(f"Resource not found: {path}")
        return path

    return ModelFiles(
        model=resolve(config.model_path, MODEL_FILENAME, config.hf_subfolder),
        vocab=resolve(config.vocab_path, VOCAB_FILENAME, None),
        special_tokens=resolve(
            config.special_tokens_path, SPECIAL_TOKENS_FILENAME, None
        ),
    )


# =============================================================================
# Execution providers
# =============================================================================

CPU_PROVIDER = "CPUExecutionProvider"

# Short names accepted in ChunkerConfig.provider and ONNX_PROVIDER
PROVIDER_NAMES: dict[str, str] = {
    "cpu": CPU_PROVIDER,
    "cuda": "CUDAExecutionProvider",
    "openvino": "OpenVINOExecutionProvider",
    "directml": "DmlExecutionProvider",
    "coreml": "CoreMLExecutionProvider",
}

# Accelerators tried by "auto", best first
AUTO_PROVIDER_ORDER = ("cuda", "openvino", "coreml", "directml")


def _with_cpu_fallback(provider: str) -> list[str]:
    if provider == CPU_PROVIDER:
        return [CPU_PROVIDER]
    return [provider, CPU_PROVIDER]


def select_providers(
    provider: ProviderType | str | None, available: list[str]
) -> list[str]:
    """Turn a provider preference into an ONNX Runtime provider list.

    ``ONNX_PROVIDER`` replaces ``provider`` when set. Either short names
    ("cuda") or ONNX Runtime names ("CUDAExecutionProvider") are accepted.
    Every accelerated list ends with the CPU provider.

    Raises:
        ConfigError: If the provider is unknown or not in ``available``
    """
    env_provider = os.getenv("ONNX_PROVIDER")
    if env_provider:
        logger.info(f"Using provider from ONNX_PROVIDER env: {env_provider}")
        provider = env_provider

    if provider is None:
        return [CPU_PROVIDER]

    if provider == "auto":
        for name in AUTO_PROVIDER_ORDER:
            if PROVIDER_NAMES[name] in available:
                logger.info(f"Auto-selected provider: {PROVIDER_NAMES[name]}")
                return _with_cpu_fallback(PROVIDER_NAMES[name])
        logger.info("Auto-selection: No accelerators found, using CPU")
        return [CPU_PROVIDER]

    if provider in PROVIDER_NAMES.values():
        selected = provider
    else:
        selected = PROVIDER_NAMES.get(provider.lower(), "")
    if not selected:
        raise ConfigError(
            f"Unknown provider: {provider}. "
            f"Valid options: {['auto', *PROVIDER_NAMES]}"
        )
    if selected not in available:
        raise ConfigError(
            f"Provider {provider!r} requested but not available. "
            f"Available providers: {available}"
        )
    logger.info(f"Using provider: {selected}")
    return _with_cpu_fallback(selected)


# =============================================================================
# Inference session
# =============================================================================


class ChunkerModel:
    """
    ONNX Runtime session for the boundary classifier.

    The session is created lazily on first use. ``InferenceSession.run`` is
    thread-safe, so one instance can serve concurrent chunking calls.
    """

    def __init__(
        self,
        model_path: Path,
        provider: ProviderType | None = None,
    ) -> None:
        """
        Initialize the backend.

        Args:
            model_path: Path to the ONNX model file
            provider: Execution provider for ONNX Runtime. Options:
                "auto" (auto-select best), "cpu", "cuda" (NVIDIA),
                "openvino" (Intel), "directml" (Windows), "coreml" (macOS).
                None uses the provider from the user config.
        """
        self._model_path = Path(model_path)
        if provider is None:
            provider = load_config().get("provider", "cpu")
        self._provider: ProviderType | None = provider
        self._session: rt.InferenceSession | None = None
        self._input_names: tuple[str, ...] = ()
        self._executor: ThreadPoolExecutor | None = None
        self._lock = threading.Lock()

    @property
    def input_names(self) -> tuple[str, ...]:
        self._init_session()
        return self._input_names

    def _init_session(self) -> None:
        """Create the ONNX session, falling back to CPU in auto mode."""
        if self._session is not None:
            return
        with self._lock:
            if self._session is not None:
                return
            if not self._model_path.is_file():
                raise ConfigError(f"Model not found: {self._model_path}")

            providers = select_providers(self._provider, rt.get_available_providers())
            try:
                session = rt.InferenceSession(
                    str(self._model_path), providers=providers
                )
            except Exception as e:
                if self._provider != "auto" or providers == [CPU_PROVIDER]:
                    raise ConfigError(
                        f"Failed to initialize ONNX session with providers "
                        f"{providers}: {e}"
                    ) from e
                logger.warning(
                    f"Failed to load model with {providers[0]}, "
                    f"fell back to CPU. Error: {e}"
                )
                session = rt.InferenceSession(
                    str(self._model_path), providers=[CPU_PROVIDER]
                )

            logger.info(f"Loaded ONNX session with providers: {session.get_providers()}")
            self._input_names = tuple(i.name for i in session.get_inputs())
            self._session = session

    def run(
        self, inputs: dict[str, np.ndarray], timeout_s: float | None = None
    ) -> list[np.ndarray]:
        """
        Run one inference.

        Args:
            inputs: Model inputs keyed by input name
            timeout_s: Optional wall-clock limit for the call

        Returns:
            The session outputs

        Raises:
            InferenceError: If the run fails or exceeds ``timeout_s``
        """
        self._init_session()
        assert self._session is not None
        session = self._session
        run_options = rt.RunOptions()

        if timeout_s is None:
            try:
                return session.run(None, inputs, run_options)
            except Exception as e:
                raise InferenceError(f"ONNX inference failed: {e}") from e

        future = self._get_executor().submit(session.run, None, inputs, run_options)
        try:
            return future.result(timeout=timeout_s)
        except FutureTimeoutError as e:
            run_options.terminate = True
            raise InferenceError(f"ONNX inference timed out after {timeout_s}s") from e
        except Exception as e:
            raise InferenceError(f"ONNX inference failed: {e}") from e

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    thread_name_prefix="pybertchunker-onnx"
                )
            return self._executor

    def close(self) -> None:
        """Clean up resources."""
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None
        self._session = None
