from __future__ import annotations

import numpy as np

from ...exceptions import InferenceError
from ...onnx_backend import ChunkerModel
from ...types import TokenizedWindow
from .base import coerce_score_matrix


class OnnxScorer:
    def __init__(self, model: ChunkerModel, timeout_s: float | None = None) -> None:
        self._model = model
        self._timeout_s = timeout_s

    def score(self, window: TokenizedWindow) -> np.ndarray:
        available = window.model_inputs()
        inputs: dict[str, np.ndarray] = {}
        for name in self._model.input_names:
            if name not in available:
                raise InferenceError(f"Model expects unsupported input {name!r}")
            inputs[name] = available[name]

        outputs = self._model.run(inputs, timeout_s=self._timeout_s)
        if not outputs:
            raise InferenceError("Model returned no outputs")
        return coerce_score_matrix(outputs[0], window.max_length)
