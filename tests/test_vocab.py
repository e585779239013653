"""Tests for vocabulary and special-token loading."""

import json

import pytest

from pybertchunker.exceptions import ConfigError
from pybertchunker.types import SpecialToken
from pybertchunker.vocab import SpecialTokenTable, Vocabulary, load_resources


class TestVocabulary:
    def test_line_number_is_id(self):
        vocab = Vocabulary.from_lines(["[PAD]", "a", "b"])
        assert vocab["[PAD]"] == 0
        assert vocab["b"] == 2
        assert len(vocab) == 3

    def test_lines_are_stripped(self):
        vocab = Vocabulary.from_lines(["[PAD]\r", "  a  "])
        assert "a" in vocab
        assert "[PAD]" in vocab

    def test_later_duplicate_wins(self):
        vocab = Vocabulary.from_lines(["a", "b", "a"])
        assert vocab["a"] == 2

    def test_empty_is_config_error(self):
        with pytest.raises(ConfigError, match="empty"):
            Vocabulary.from_lines([])

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "vocab.txt"
        path.write_text("[PAD]\n[UNK]\n中\n", encoding="utf-8")
        vocab = Vocabulary.load(path)
        assert vocab["中"] == 2

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Could not load vocabulary"):
            Vocabulary.load(tmp_path / "missing.txt")

    def test_load_invalid_utf8(self, tmp_path):
        path = tmp_path / "vocab.txt"
        path.write_bytes(b"a\n\xff\xfe\n")
        with pytest.raises(ConfigError, match="Could not load vocabulary"):
            Vocabulary.load(path)

    def test_is_read_only(self, vocab):
        with pytest.raises(TypeError):
            vocab["c"] = 9  # type: ignore[index]


class TestSpecialToken:
    def test_from_dict_camel_case_single_word(self):
        token = SpecialToken.from_dict(
            {"content": "[CLS]", "lstrip": True, "singleWord": True}
        )
        assert token == SpecialToken("[CLS]", lstrip=True, single_word=True)

    def test_from_short_form(self):
        assert SpecialToken.from_dict("[SEP]") == SpecialToken("[SEP]")


class TestSpecialTokenTable:
    def test_resolves_ids(self, special_tokens):
        assert special_tokens.cls_id == 4
        assert special_tokens.sep_id == 5
        assert special_tokens.unk_id == 2
        assert special_tokens.pad_id == 3
        assert special_tokens.mask_id is None

    @pytest.mark.parametrize("role", ["cls_token", "sep_token", "unk_token", "pad_token"])
    def test_missing_required_role(self, vocab, role):
        data = {
            "cls_token": "[CLS]",
            "sep_token": "[SEP]",
            "unk_token": "[UNK]",
            "pad_token": "[PAD]",
        }
        del data[role]
        with pytest.raises(ConfigError, match=role):
            SpecialTokenTable.from_dict(data, vocab)

    def test_content_must_be_in_vocab(self, vocab):
        data = {
            "cls_token": "[CLS]",
            "sep_token": "[SEP]",
            "unk_token": "[UNK]",
            "pad_token": "[PAD]",
            "mask_token": "[MASK]",
        }
        with pytest.raises(ConfigError, match=r"\[MASK\]"):
            SpecialTokenTable.from_dict(data, vocab)

    def test_list_valued_extras_are_ignored(self, vocab):
        data = {
            "cls_token": "[CLS]",
            "sep_token": "[SEP]",
            "unk_token": "[UNK]",
            "pad_token": "[PAD]",
            "additional_special_tokens": ["[X]"],
        }
        table = SpecialTokenTable.from_dict(data, vocab)
        assert "additional_special_tokens" not in table
        assert sorted(table.roles()) == ["cls_token", "pad_token", "sep_token", "unk_token"]

    def test_malformed_entry(self, vocab):
        data = {
            "cls_token": {"lstrip": False},
            "sep_token": "[SEP]",
            "unk_token": "[UNK]",
            "pad_token": "[PAD]",
        }
        with pytest.raises(ConfigError, match="Malformed"):
            SpecialTokenTable.from_dict(data, vocab)

    def test_load_invalid_json(self, tmp_path, vocab):
        path = tmp_path / "special_tokens_map.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError):
            SpecialTokenTable.load(path, vocab)

    def test_load_invalid_utf8(self, tmp_path, vocab):
        path = tmp_path / "special_tokens_map.json"
        path.write_bytes(b'{"cls_token": "\xff"}')
        with pytest.raises(ConfigError, match="Could not load special tokens"):
            SpecialTokenTable.load(path, vocab)

    def test_load_non_object(self, tmp_path, vocab):
        path = tmp_path / "special_tokens_map.json"
        path.write_text(json.dumps(["[CLS]"]), encoding="utf-8")
        with pytest.raises(ConfigError, match="JSON object"):
            SpecialTokenTable.load(path, vocab)


def test_load_resources(resource_dir):
    vocab, table = load_resources(
        resource_dir / "vocab.txt", resource_dir / "special_tokens_map.json"
    )
    assert len(vocab) == 6
    assert table["cls_token"].content == "[CLS]"
    assert table.cls_id == vocab["[CLS]"]
