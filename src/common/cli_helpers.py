"""Common CLI helper utilities."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any


def setup_logging(level: int = logging.INFO) -> None:
    """Configure standard logging format for CLI tools."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def save_json_local(
    record: dict[str, Any],
    prefix: str,
    timestamp: datetime,
    output_dir: str = "output",
) -> Path:
    """Save one record to a local JSON file.

    Args:
        record: Dictionary to save.
        prefix: Filename prefix (e.g., "distilled_page").
        timestamp: Timestamp to include in filename.
        output_dir: Directory to save to (default: "output").

    Returns:
        Path to the created file.
    """
    output_path = Path(output_dir)
    output_path.mkdir(exist_ok=True)
    filename = f"{prefix}_{timestamp.strftime('%Y_%m_%d_%H_%M_%S')}.json"
    filepath = output_path / filename
    with filepath.open("w", encoding="utf-8") as f:
        f.write(json.dumps(record, ensure_ascii=False) + "\n")
    return filepath
