#!/usr/bin/env python3
"""
Chunk a text file and print the chunks with their offsets.

The model, vocab.txt and special_tokens_map.json are downloaded from the
Hugging Face Hub on first use unless a local model directory is given.

Usage:
    python examples/chunk_document.py document.txt [prob_threshold] [model_dir]
"""

import logging
import sys
from pathlib import Path

from pybertchunker import ChunkerConfig, ChunkerPipeline


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    text = Path(sys.argv[1]).read_text(encoding="utf-8")
    prob_threshold = float(sys.argv[2]) if len(sys.argv) > 2 else 0.5
    model_dir = sys.argv[3] if len(sys.argv) > 3 else None

    cfg = ChunkerConfig(
        model_dir=model_dir,
        prob_threshold=prob_threshold,
        return_trace=True,
    )
    with ChunkerPipeline(cfg) as pipeline:
        result = pipeline.run(text)

    for chunk in result.chunks:
        print(f"--- chunk {chunk.index} [{chunk.char_start}:{chunk.char_end}]")
        print(chunk.text)

    trace = result.trace
    if trace is not None and trace.events:
        total_ms = sum(event.ms for event in trace.events if event.stage == "score")
        print(f"Scored {result.windows} windows in {total_ms:.2f}ms")
        if trace.warnings:
            print("Warnings:")
            for warning in trace.warnings:
                print(f"- {warning}")


if __name__ == "__main__":
    main()
