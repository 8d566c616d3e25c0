"""Print the recovered generation parameters of image files as JSON."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from .config import DEBUG, SIZE_FROM_IMAGE
from .features.metadata.service import PromptMetadataService
from .shared import get_logger, log_structured, log_success

logger = get_logger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="promptdb-extract",
        description="Recover prompt, model and sampler settings embedded in AI-generated images.",
    )
    parser.add_argument("paths", nargs="+", help="PNG, JPEG or WebP files to read.")
    parser.add_argument("--raw", action="store_true", help="Include the raw extracted metadata text.")
    parser.add_argument("--indent", type=int, default=2, help="JSON indent (default: 2).")
    parser.add_argument(
        "--size-from-image",
        action="store_true",
        help="Fill an unknown size from the image dimensions.",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose engine logging (also PROMPTDB_DEBUG=1).")
    return parser.parse_args(argv)


def _enable_debug_logging() -> None:
    for name, obj in list(logging.Logger.manager.loggerDict.items()):
        if name.startswith("promptdb.") and isinstance(obj, logging.Logger):
            obj.setLevel(logging.DEBUG)


async def _run(args: argparse.Namespace) -> int:
    if args.debug or DEBUG:
        _enable_debug_logging()
    service = PromptMetadataService(size_from_image=args.size_from_image or SIZE_FROM_IMAGE)
    results = await service.get_metadata_batch(list(args.paths))
    failures = 0
    for path, res in results.items():
        if not res.ok:
            failures += 1
            logger.error("%s: [%s] %s", path, res.code, res.error)
            continue
        record = dict(res.data or {})
        if not args.raw:
            record.pop("metadata_text", None)
        record["path"] = path
        print(json.dumps(record, ensure_ascii=False, indent=args.indent if args.indent > 0 else None))
    if failures:
        log_structured(logger, logging.WARNING, "Extraction finished with failures", failed=failures, total=len(results))
        return 1
    log_success(logger, f"Read {len(results)} file(s)")
    return 0


def main(argv: list[str] | None = None) -> int:
    return asyncio.run(_run(_parse_args(argv)))


if __name__ == "__main__":
    sys.exit(main())
