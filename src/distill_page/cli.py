"""CLI for distilling a web page into title, content and named entities."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from annotate_text.model_registry import ModelRegistry
from common.cli_helpers import save_json_local, setup_logging
from common.errors import DistillError
from distill_page.config import load_config
from distill_page.distill_page import run
from distill_page.helpers import parse_distill_page_args, read_raw_document

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    args = parse_distill_page_args(argv)
    setup_logging()

    config = load_config(args.config)
    registry = ModelRegistry()

    try:
        preload = config.models.preload if args.preload is None else args.preload
        if preload:
            registry.preload(config.model_keys())

        source = args.url if args.url else read_raw_document(args.file, args.encoding)
        record = run(source, registry, config)
    except DistillError as e:
        logger.error("Distill failed (%s): %s", e.kind, e)
        return 1
    except OSError as e:
        logger.error("Could not read %s: %s", args.file, e)
        return 1

    result = record.to_dict()
    output = json.dumps(result, ensure_ascii=False, indent=args.indent)

    if args.output:
        Path(args.output).write_text(output + "\n", encoding="utf-8")
        logger.info("Saved result to %s", args.output)

    if args.load_local:
        filepath = save_json_local(result, "distilled_page", datetime.now(timezone.utc))
        logger.info("Saved result to %s", filepath)

    if not args.output and not args.load_local:
        sys.stdout.write(output + "\n")

    return 0


if __name__ == "__main__":
    sys.exit(main())
