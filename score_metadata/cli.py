"""Command-line entry point: print extracted metadata for PDF files.

Usage:
    score-metadata score.pdf other.pdf --no-llm
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

from .config import default_config
from .pipeline import MetadataExtractor, extract_many


def main(argv=None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Extract title, composer, instruments, key and time signature from sheet music PDFs"
    )
    parser.add_argument("pdfs", nargs="+", help="PDF files to analyze")
    parser.add_argument("--no-llm", action="store_true", help="Skip generative refinement")
    parser.add_argument("--model", help="Language model name")
    parser.add_argument("--base-url", help="OpenAI-compatible endpoint (e.g. a local server)")
    parser.add_argument("--timeout", type=float, help="Language model timeout in seconds")
    parser.add_argument("--gpu", action="store_true", help="Run OCR on GPU")
    parser.add_argument("--workers", type=int, default=1, help="Files to process concurrently")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides = {"use_llm": not args.no_llm, "ocr_use_gpu": args.gpu}
    if args.model:
        overrides["llm_model"] = args.model
    if args.base_url:
        overrides["llm_base_url"] = args.base_url
    if args.timeout is not None:
        overrides["llm_timeout_seconds"] = args.timeout
    config = replace(default_config, **overrides)

    paths = [Path(p) for p in args.pdfs]
    missing = [str(p) for p in paths if not p.is_file()]
    if missing:
        parser.error(f"File(s) not found: {', '.join(missing)}")

    blobs = [p.read_bytes() for p in paths]
    results = extract_many(blobs, MetadataExtractor(config=config), max_workers=args.workers)

    for path, metadata in zip(paths, results):
        record = {"file": str(path), **metadata.to_dict()}
        print(json.dumps(record, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
