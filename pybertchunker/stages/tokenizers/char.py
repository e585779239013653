from __future__ import annotations

import numpy as np

from ...constants import MAX_LENGTH, NO_OFFSET
from ...types import TokenizedWindow
from ...vocab import SpecialTokenTable, Vocabulary


class CharWindowTokenizer:
    """Tokenize a window of text one character per token.

    The emitted sequence is ``[cls, c0, c1, ..., sep]`` truncated to
    ``max_length`` and padded with the pad id. Characters cut off by the
    truncation are left for the next window.

    Args:
        vocab: Vocabulary used for the character lookups
        special_tokens: Validated special-token table
        max_length: Fixed window size in tokens
    """

    def __init__(
        self,
        vocab: Vocabulary,
        special_tokens: SpecialTokenTable,
        max_length: int = MAX_LENGTH,
    ) -> None:
        if max_length < 3:
            raise ValueError(f"max_length must be >= 3, got {max_length}")
        self.vocab = vocab
        self.special_tokens = special_tokens
        self.max_length = max_length

    def tokenize(self, text: str) -> TokenizedWindow:
        special = self.special_tokens
        input_ids = np.full(self.max_length, special.pad_id, dtype=np.int64)
        attention_mask = np.zeros(self.max_length, dtype=np.int64)
        token_type_ids = np.zeros(self.max_length, dtype=np.int64)
        offsets = np.full(self.max_length, NO_OFFSET, dtype=np.int64)

        # cls + characters + sep, truncated
        n_chars = min(len(text), self.max_length - 1)
        length = min(n_chars + 2, self.max_length)

        input_ids[0] = special.cls_id
        unk_id = special.unk_id
        for pos in range(n_chars):
            input_ids[pos + 1] = self.vocab.get(text[pos], unk_id)
            offsets[pos + 1] = pos
        if n_chars + 1 < self.max_length:
            input_ids[n_chars + 1] = special.sep_id
        attention_mask[:length] = 1

        return TokenizedWindow(
            input_ids=input_ids,
            attention_mask=attention_mask,
            token_type_ids=token_type_ids,
            offsets=offsets,
            length=length,
        )
