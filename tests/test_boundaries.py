import math

import numpy as np
import pytest
from conftest import marker_scores

from pybertchunker.constants import MAX_LENGTH
from pybertchunker.exceptions import InvalidArgument
from pybertchunker.stages.boundaries.threshold import (
    ThresholdBoundaryExtractor,
    logits_threshold,
    validate_prob_threshold,
)
from pybertchunker.stages.tokenizers.char import CharWindowTokenizer


@pytest.fixture
def tokenizer(vocab, special_tokens):
    return CharWindowTokenizer(vocab, special_tokens)


@pytest.fixture
def extractor():
    return ThresholdBoundaryExtractor()


def test_logits_threshold_values():
    assert logits_threshold(0.5) == 0.0
    assert logits_threshold(0.1) == pytest.approx(math.log(9.0))
    assert logits_threshold(0.9) == pytest.approx(-math.log(9.0))


@pytest.mark.parametrize("p", [0.0, 1.0, -0.2, 1.5, float("nan"), float("inf"), "x", None])
def test_invalid_prob_threshold(p):
    with pytest.raises(InvalidArgument):
        validate_prob_threshold(p)


def test_marked_character_becomes_absolute_position(tokenizer, extractor):
    window = tokenizer.tokenize("aab")
    scores = marker_scores(window.input_ids, {1})[0]

    assert extractor.extract(scores, window, 100, logits_threshold(0.5)) == [102]


def test_cls_and_sep_never_split(tokenizer, extractor):
    window = tokenizer.tokenize("ab")
    scores = np.zeros((MAX_LENGTH, 2), dtype=np.float32)
    scores[0, 1] = 50.0
    scores[3, 1] = 50.0  # sep
    scores[MAX_LENGTH - 1, 1] = 50.0

    assert extractor.extract(scores, window, 0, logits_threshold(0.5)) == []


def test_last_row_is_skipped_even_for_characters(tokenizer, extractor):
    window = tokenizer.tokenize("a" * MAX_LENGTH)
    scores = np.zeros((MAX_LENGTH, 2), dtype=np.float32)
    scores[MAX_LENGTH - 1, 1] = 50.0

    assert window.char_offset(MAX_LENGTH - 1) > 0
    assert extractor.extract(scores, window, 0, logits_threshold(0.5)) == []


def test_first_character_of_window_is_excluded(tokenizer, extractor):
    window = tokenizer.tokenize("bab")
    scores = marker_scores(window.input_ids, {1})[0]

    assert extractor.extract(scores, window, 7, logits_threshold(0.5)) == [9]


def test_padding_is_never_split(tokenizer, extractor):
    window = tokenizer.tokenize("ab")
    # Flag every row, padding included
    scores = np.tile(np.array([0.0, 10.0], dtype=np.float32), (MAX_LENGTH, 1))

    assert extractor.extract(scores, window, 0, logits_threshold(0.5)) == [1]


def test_lower_threshold_finds_at_least_as_many_boundaries(tokenizer, extractor):
    window = tokenizer.tokenize("ab" * 200)
    rng = np.random.default_rng(0)
    scores = rng.normal(size=(MAX_LENGTH, 2)).astype(np.float32)

    counts = [
        len(extractor.extract(scores, window, 0, logits_threshold(p)))
        for p in (0.95, 0.8, 0.5, 0.2, 0.05)
    ]

    assert counts == sorted(counts)
    assert counts[-1] > counts[0]


def test_threshold_direction_on_fixed_margin(tokenizer, extractor):
    window = tokenizer.tokenize("aa")
    scores = np.zeros((MAX_LENGTH, 2), dtype=np.float32)
    # Boundary score one logit below the non-boundary score
    scores[2] = [1.0, 0.0]

    assert extractor.extract(scores, window, 0, logits_threshold(0.5)) == []
    # ln(1/0.2 - 1) = ln 4 > 1, so the margin now admits the token
    assert extractor.extract(scores, window, 0, logits_threshold(0.2)) == [1]


def test_positions_are_in_offset_order(tokenizer, extractor):
    window = tokenizer.tokenize("abababab")
    scores = marker_scores(window.input_ids, {1})[0]

    positions = extractor.extract(scores, window, 0, logits_threshold(0.5))
    assert positions == [1, 3, 5, 7]
