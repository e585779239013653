"""Vocabulary and special-token table loading.

Both tables are loaded once, validated, and are read-only afterwards so a
single instance can be shared by any number of concurrent chunking calls.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

from .constants import OPTIONAL_SPECIAL_TOKENS, REQUIRED_SPECIAL_TOKENS
from .exceptions import ConfigError
from .types import SpecialToken

logger = logging.getLogger(__name__)


class Vocabulary(Mapping[str, int]):
    """Immutable token -> id table. The 0-based line number is the id."""

    def __init__(self, token_to_id: Mapping[str, int]) -> None:
        if not token_to_id:
            raise ConfigError("Vocabulary is empty")
        self._token_to_id: Mapping[str, int] = MappingProxyType(dict(token_to_id))

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> Vocabulary:
        token_to_id: dict[str, int] = {}
        for idx, line in enumerate(lines):
            # Later duplicates override earlier ones
            token_to_id[line.strip()] = idx
        return cls(token_to_id)

    @classmethod
    def load(cls, path: Path | str) -> Vocabulary:
        path = Path(path)
        try:
            with path.open(encoding="utf-8") as f:
                vocab = cls.from_lines(line.rstrip("\n") for line in f)
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Could not load vocabulary {path}: {e}") from e
        logger.info(f"Vocab loaded with {len(vocab)} tokens.")
        return vocab

    def __getitem__(self, token: str) -> int:
        return self._token_to_id[token]

    def __iter__(self) -> Iterator[str]:
        return iter(self._token_to_id)

    def __len__(self) -> int:
        return len(self._token_to_id)

    def __repr__(self) -> str:
        return f"Vocabulary(size={len(self)})"


class SpecialTokenTable:
    """Special tokens keyed by role (``cls_token``, ``sep_token``, ...).

    Args:
        tokens: Mapping of role name to SpecialToken
        vocab: Vocabulary every token content must belong to

    Raises:
        ConfigError: If a required role is missing or a content string is
            not in the vocabulary
    """

    def __init__(self, tokens: Mapping[str, SpecialToken], vocab: Vocabulary) -> None:
        missing = [role for role in REQUIRED_SPECIAL_TOKENS if role not in tokens]
        if missing:
            raise ConfigError(f"Special tokens map is missing required tokens: {missing}")
        for role, token in tokens.items():
            if token.content not in vocab:
                raise ConfigError(
                    f"Special token {token.content!r} ({role}) not found in vocabulary"
                )

        self._tokens: Mapping[str, SpecialToken] = MappingProxyType(dict(tokens))
        self.cls_id = vocab[tokens["cls_token"].content]
        self.sep_id = vocab[tokens["sep_token"].content]
        self.unk_id = vocab[tokens["unk_token"].content]
        self.pad_id = vocab[tokens["pad_token"].content]
        mask = tokens.get("mask_token")
        self.mask_id: int | None = vocab[mask.content] if mask is not None else None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], vocab: Vocabulary) -> SpecialTokenTable:
        known = set(REQUIRED_SPECIAL_TOKENS) | set(OPTIONAL_SPECIAL_TOKENS)
        tokens: dict[str, SpecialToken] = {}
        for role, value in data.items():
            # Hugging Face maps may carry list-valued extras
            # (additional_special_tokens) that have no role here.
            if role not in known and not isinstance(value, (str, dict)):
                continue
            try:
                tokens[role] = SpecialToken.from_dict(value)
            except (KeyError, TypeError) as e:
                raise ConfigError(f"Malformed special token entry {role!r}: {e}") from e
        return cls(tokens, vocab)

    @classmethod
    def load(cls, path: Path | str, vocab: Vocabulary) -> SpecialTokenTable:
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not load special tokens {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Special tokens file {path} must contain a JSON object")
        table = cls.from_dict(data, vocab)
        logger.info(f"Special tokens loaded: {sorted(table.roles())}")
        return table

    def roles(self) -> list[str]:
        return list(self._tokens)

    def __getitem__(self, role: str) -> SpecialToken:
        return self._tokens[role]

    def __contains__(self, role: object) -> bool:
        return role in self._tokens


def load_resources(
    vocab_path: Path | str, special_tokens_path: Path | str
) -> tuple[Vocabulary, SpecialTokenTable]:
    """Load and cross-validate the vocabulary and special tokens."""
    vocab = Vocabulary.load(vocab_path)
    return vocab, SpecialTokenTable.load(special_tokens_path, vocab)
