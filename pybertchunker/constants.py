"""Constants for pybertchunker - default configuration and program metadata."""

# Program metadata
PROGRAM_NAME = "pybertchunker"

# Default configuration
# Structure: {"provider": "cpu", "prob_threshold": 0.5}
# Keys: provider (onnxruntime execution provider), prob_threshold (float in (0, 1))
DEFAULT_CONFIG = {
    # Options: auto, cpu, cuda, openvino, directml, coreml
    "provider": "cpu",
    # Lower values produce more, smaller chunks
    "prob_threshold": 0.5,
}

# Model constants
MAX_LENGTH = 512

# Offset value for tokens that do not map to a source character (cls/sep/pad)
NO_OFFSET = -1

# Resource file names inside a model directory
VOCAB_FILENAME = "vocab.txt"
SPECIAL_TOKENS_FILENAME = "special_tokens_map.json"
MODEL_FILENAME = "model.onnx"

# Hugging Face defaults
HF_REPO_ID = "tim1900/bert-chunker"
HF_MODEL_SUBFOLDER = "onnx"

# Special token roles
REQUIRED_SPECIAL_TOKENS = ("cls_token", "sep_token", "unk_token", "pad_token")
OPTIONAL_SPECIAL_TOKENS = ("mask_token",)

# Model input names, in the order they are built
MODEL_INPUT_NAMES = ("input_ids", "attention_mask", "token_type_ids")
