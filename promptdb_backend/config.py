"""
Configuration for the PromptDB metadata engine.

Every knob is an environment variable read once at import time; invalid values
fall back to the default and out-of-range values are clamped.
"""
import os
import logging

from .utils import env_bool

logger = logging.getLogger(__name__)


def _env_raw(*names: str, default: str | None = None) -> str | None:
    for name in names:
        if not name:
            continue
        val = os.getenv(name)
        if val is not None and str(val).strip() != "":
            return str(val).strip()
    return default


def _env_int(default: int, *names: str, min_value: int | None = None, max_value: int | None = None) -> int:
    raw = _env_raw(*names)
    if raw is None:
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid integer for %s=%r, using default=%s", names[0] if names else "<unknown>", raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning("Value too small for %s=%s, clamped to %s", names[0] if names else "<unknown>", value, min_value)
        value = min_value
    if max_value is not None and value > max_value:
        logger.warning("Value too large for %s=%s, clamped to %s", names[0] if names else "<unknown>", value, max_value)
        value = max_value
    return value


def _env_bool(default: bool, *names: str) -> bool:
    for name in names:
        if name and name in os.environ:
            return env_bool(name, default)
    return default


# Leading bytes of a JPEG/WebP decoded as text when hunting for embedded metadata.
SCAN_WINDOW_BYTES = _env_int(100_000, "PROMPTDB_SCAN_WINDOW_BYTES", min_value=1024, max_value=16 * 1024 * 1024)

# Link hops followed when tracing a ComfyUI prompt/model back to its source node.
MAX_LINK_DEPTH = _env_int(10, "PROMPTDB_MAX_LINK_DEPTH", min_value=1, max_value=100)

# Files above this size are rejected by the file service instead of being read whole.
MAX_FILE_BYTES = _env_int(256 * 1024 * 1024, "PROMPTDB_MAX_FILE_BYTES", min_value=1024, max_value=4 * 1024 * 1024 * 1024)

EXTRACT_CONCURRENCY = _env_int(4, "PROMPTDB_EXTRACT_CONCURRENCY", min_value=1, max_value=64)

# Fill an unresolved size field from the image header (Pillow) in the file service.
SIZE_FROM_IMAGE = _env_bool(False, "PROMPTDB_SIZE_FROM_IMAGE")

DEBUG = _env_bool(False, "PROMPTDB_DEBUG")
