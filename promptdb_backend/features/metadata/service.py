"""
Metadata service - reads image files and runs the extraction/parsing engine.

This is the seam the folder scanner talks to: one call per file, returning the
normalized record plus the raw extracted text (kept for free-text search).
"""
import asyncio
import os
from typing import Any, Dict, Optional

from PIL import Image

from ...config import EXTRACT_CONCURRENCY, MAX_FILE_BYTES, SIZE_FROM_IMAGE
from ...shared import ErrorCode, Result, classify_file, get_logger, request_id_var, sanitize_error_message
from ..geninfo.dispatcher import parse_metadata
from ..geninfo.record import UNKNOWN
from .extractors import extract_text

logger = get_logger(__name__)


def _read_bytes(file_path: str) -> bytes:
    with open(file_path, "rb") as fh:
        return fh.read()


def read_image_size(file_path: str) -> Optional[str]:
    """`WIDTHxHEIGHT` from the image header via Pillow, or None if unreadable."""
    try:
        with Image.open(file_path) as img:
            return f"{int(img.width)}x{int(img.height)}"
    except Exception as exc:
        logger.debug("Could not read image size: %s", exc)
        return None


def build_record(data: bytes) -> Dict[str, Any]:
    """Engine entry point for callers that already hold the bytes."""
    text = extract_text(data)
    record: Dict[str, Any] = parse_metadata(text).to_dict()
    record["metadata_text"] = text
    return record


class PromptMetadataService:
    """Async facade over the synchronous engine; at most `max_concurrency` files in flight."""

    def __init__(
        self,
        max_concurrency: int = EXTRACT_CONCURRENCY,
        max_file_bytes: int = MAX_FILE_BYTES,
        size_from_image: bool = SIZE_FROM_IMAGE,
    ):
        self._sem = asyncio.Semaphore(max(1, int(max_concurrency)))
        self._max_file_bytes = int(max_file_bytes)
        self._size_from_image = bool(size_from_image)

    async def get_metadata(self, file_path: str) -> Result[Dict[str, Any]]:
        """
        Extract the normalized generation record for one image file.

        Returns:
            Result with a dict holding the eight record fields plus
            `metadata_text`, `filename` and `file_size`.
        """
        if not os.path.isfile(file_path):
            return Result.Err(ErrorCode.NOT_FOUND, f"File not found: {os.path.basename(file_path)}")
        if classify_file(file_path) != "image":
            return Result.Err(ErrorCode.UNSUPPORTED, f"Unsupported file type: {os.path.basename(file_path)}")

        # Tag every log line of this file's work with its name.
        token = request_id_var.set(os.path.basename(file_path))
        try:
            async with self._sem:
                return await self._get_metadata_impl(file_path)
        finally:
            request_id_var.reset(token)

    async def _get_metadata_impl(self, file_path: str) -> Result[Dict[str, Any]]:
        try:
            file_size = os.path.getsize(file_path)
            if file_size > self._max_file_bytes:
                return Result.Err(
                    ErrorCode.INVALID_INPUT,
                    f"File too large ({file_size} bytes, limit {self._max_file_bytes})",
                    file_size=file_size,
                )
            data = await asyncio.to_thread(_read_bytes, file_path)
            record = await asyncio.to_thread(build_record, data)
        except OSError as exc:
            logger.warning("Failed to read %s: %s", os.path.basename(file_path), exc)
            return Result.Err(ErrorCode.METADATA_FAILED, sanitize_error_message(exc, "Failed to read image"))
        except Exception as exc:
            logger.warning("Metadata extraction failed for %s: %s", os.path.basename(file_path), exc)
            return Result.Err(ErrorCode.METADATA_FAILED, sanitize_error_message(exc, "Failed to extract metadata"))

        if self._size_from_image and record.get("size") == UNKNOWN:
            size = await asyncio.to_thread(read_image_size, file_path)
            if size:
                record["size"] = size

        record["filename"] = os.path.basename(file_path)
        record["file_size"] = file_size
        logger.debug(
            "Parsed %s (model=%s, prompt=%d chars)",
            record["filename"],
            record.get("model"),
            len(record.get("positive_prompt") or ""),
        )
        return Result.Ok(record)

    async def get_metadata_batch(self, file_paths: list[str]) -> Dict[str, Result[Dict[str, Any]]]:
        """Extract several files concurrently, bounded by the service semaphore."""
        results = await asyncio.gather(*(self.get_metadata(path) for path in file_paths), return_exceptions=True)
        out: Dict[str, Result[Dict[str, Any]]] = {}
        for path, res in zip(file_paths, results):
            if isinstance(res, Exception):
                res = Result.Err(ErrorCode.METADATA_FAILED, sanitize_error_message(res, "Failed to extract metadata"))
            out[path] = res
        return out
