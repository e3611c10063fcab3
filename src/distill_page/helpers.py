"""Helper functions for distill_page CLI."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from extract_content.models import RawDocument


def parse_distill_page_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for distill_page."""

    parser = argparse.ArgumentParser(
        description="Extract a page's main content and the people, places and organizations it names",
    )

    # Input options
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--url", help="Page URL to fetch")
    source.add_argument("--file", help="Path to an HTML file, or - to read stdin")
    parser.add_argument(
        "--encoding",
        default=None,
        help="Character encoding of --file (default: sniffed from the markup)",
    )

    # Config options
    parser.add_argument(
        "--config",
        default=None,
        help="Config name (prod/test) or path to YAML file (default: $DISTILL_CONFIG or prod)",
    )
    parser.add_argument(
        "--preload",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Load every configured spaCy model before running (default: from config)",
    )

    # Output options
    parser.add_argument("--output", "-o", default=None, help="Write the JSON record to this file")
    parser.add_argument("--indent", type=int, default=None, help="Indent the JSON output")
    parser.add_argument("--load-local", action="store_true", help="Save result to local output/ directory")

    return parser.parse_args(argv)


def read_raw_document(path: str, encoding: str | None = None) -> RawDocument:
    """Read HTML bytes from a file, or stdin for "-"."""
    if path == "-":
        return RawDocument(content=sys.stdin.buffer.read(), encoding=encoding)
    return RawDocument(content=Path(path).read_bytes(), encoding=encoding, url=Path(path).resolve().as_uri())
