from __future__ import annotations

import json

import numpy as np
import pytest

from pybertchunker.types import SpecialToken, TokenizedWindow
from pybertchunker.vocab import SpecialTokenTable, Vocabulary

VOCAB = {"a": 0, "b": 1, "[UNK]": 2, "[PAD]": 3, "[CLS]": 4, "[SEP]": 5}

SPECIAL_TOKENS = {
    "cls_token": {"content": "[CLS]"},
    "sep_token": {"content": "[SEP]"},
    "unk_token": {"content": "[UNK]"},
    "pad_token": {"content": "[PAD]"},
}


@pytest.fixture(autouse=True)
def isolated_cache_dir(tmp_path, monkeypatch):
    cache_dir = tmp_path / "cache"
    monkeypatch.setenv("PYBERTCHUNKER_CACHE_DIR", str(cache_dir))
    monkeypatch.delenv("ONNX_PROVIDER", raising=False)
    return cache_dir


@pytest.fixture
def vocab() -> Vocabulary:
    return Vocabulary(VOCAB)


@pytest.fixture
def special_tokens(vocab) -> SpecialTokenTable:
    return SpecialTokenTable(
        {role: SpecialToken.from_dict(data) for role, data in SPECIAL_TOKENS.items()},
        vocab,
    )


@pytest.fixture
def resource_dir(tmp_path):
    model_dir = tmp_path / "model"
    model_dir.mkdir()
    ordered = sorted(VOCAB, key=VOCAB.__getitem__)
    (model_dir / "vocab.txt").write_text("\n".join(ordered) + "\n", encoding="utf-8")
    (model_dir / "special_tokens_map.json").write_text(
        json.dumps(SPECIAL_TOKENS), encoding="utf-8"
    )
    (model_dir / "model.onnx").write_bytes(b"not a real model")
    return model_dir


def marker_scores(input_ids: np.ndarray, boundary_ids: set[int]) -> np.ndarray:
    """Scores of shape (1, n, 2) flagging every token whose id is in boundary_ids."""
    n = input_ids.shape[-1]
    scores = np.zeros((1, n, 2), dtype=np.float32)
    flat_ids = input_ids.reshape(-1)
    for i in range(n):
        scores[0, i, 1] = 10.0 if int(flat_ids[i]) in boundary_ids else -10.0
    return scores


class MarkerScorer:
    """Deterministic fake: a token is a boundary when its id is a marker id."""

    def __init__(self, boundary_ids: set[int] | None = None) -> None:
        self.boundary_ids = set(boundary_ids or ())
        self.calls = 0

    def score(self, window: TokenizedWindow) -> np.ndarray:
        self.calls += 1
        return marker_scores(window.input_ids, self.boundary_ids)[0]
