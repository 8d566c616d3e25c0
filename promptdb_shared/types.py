"""
Shared types, enums, and constants.
"""
import os
from enum import Enum
from typing import Final, Literal

FileKind = Literal["image", "unknown"]

# Outer binary envelope of an image file
ContainerFormat = Literal["png", "jpeg", "webp", "unknown"]


class ErrorCode(str, Enum):
    """Standardized error codes (string enum)."""

    INVALID_INPUT = "INVALID_INPUT"
    NOT_FOUND = "NOT_FOUND"
    UNSUPPORTED = "UNSUPPORTED"
    METADATA_FAILED = "METADATA_FAILED"


# Same set the folder scanner picks up; only PNG/JPEG/WebP carry parseable text.
EXTENSIONS: Final[dict[FileKind, set[str]]] = {
    "image": {".png", ".jpg", ".jpeg", ".webp", ".gif", ".bmp"},
    "unknown": set(),
}


def classify_file(filename: str) -> FileKind:
    """
    Classify file by extension.

    Args:
        filename: File name or path

    Returns:
        File kind (image, unknown)
    """
    ext = os.path.splitext(filename)[1].lower()

    for kind, exts in EXTENSIONS.items():
        if ext in exts:
            return kind

    return "unknown"
