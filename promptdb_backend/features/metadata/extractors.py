"""
Embedded-text extraction from raw image bytes.

PNG files are walked chunk by chunk and their tEXt/iTXt payloads collected.
JPEG and WebP files get no structured walk: the leading window of the file is
decoded as UTF-8 (and UTF-16LE, where SwarmUI stores its JPEG parameters) and
the parsers downstream pick the metadata out of the noise. A window with no
metadata hint in either decoding contributes nothing.
"""
import re
import struct

from ...config import SCAN_WINDOW_BYTES
from ...shared import ContainerFormat, get_logger

logger = get_logger(__name__)

PNG_SIGNATURE = b"\x89PNG"
RIFF_SIGNATURE = b"RIFF"
JPEG_SOI = b"\xff\xd8"

PNG_HEADER_LEN = 8
# length(4) + type(4) + crc(4)
PNG_CHUNK_OVERHEAD = 12
PNG_TEXT_CHUNKS = (b"tEXt", b"iTXt")
PNG_END_CHUNK = b"IEND"

SWARMUI_MARKER = "sui_image_params"
_UTF16_HINTS = (SWARMUI_MARKER, "prompt")
_UTF8_HINTS = (SWARMUI_MARKER, "prompt", "Steps:", "Negative prompt:", "class_type", "parameters")

# NUL and C0 controls, keeping \t \n \r
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


def strip_control_chars(text: str) -> str:
    return _CONTROL_CHARS_RE.sub("", text)


def detect_container(data: bytes) -> ContainerFormat:
    """Identify the image container from its magic number."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        return "unknown"
    head = bytes(data[:4])
    if head == PNG_SIGNATURE:
        return "png"
    if head == RIFF_SIGNATURE:
        return "webp"
    if head[:2] == JPEG_SOI:
        return "jpeg"
    return "unknown"


def _decode_png_text(payload: bytes) -> str:
    try:
        return payload.decode("utf-8")
    except UnicodeDecodeError:
        return payload.decode("latin-1")


def _collect_png_text(data: bytes, parts: list[str]) -> None:
    offset = PNG_HEADER_LEN
    total = len(data)
    while offset + 8 <= total:
        length, chunk_type = struct.unpack(">I4s", data[offset:offset + 8])
        start = offset + 8
        if start + length > total:
            logger.debug("Truncated PNG chunk %r at offset %d", chunk_type, offset)
            break
        if chunk_type in PNG_TEXT_CHUNKS:
            parts.append(_decode_png_text(data[start:start + length]) + "\n")
        if chunk_type == PNG_END_CHUNK:
            break
        offset += length + PNG_CHUNK_OVERHEAD


def _collect_window_text(data: bytes, parts: list[str], window: int) -> None:
    head = data[:window]
    utf8 = head.decode("utf-8", errors="replace")
    # Without any hint the window is compressed pixel data, not metadata.
    if any(hint in utf8 for hint in _UTF8_HINTS):
        parts.append(utf8)
    utf16 = head.decode("utf-16-le", errors="replace")
    if any(hint in utf16 for hint in _UTF16_HINTS):
        parts.append("\n" + utf16)


def extract_text(data: bytes, window: int = SCAN_WINDOW_BYTES) -> str:
    """
    Pull any embedded metadata text out of an image file's bytes.

    Never raises: a malformed file yields whatever was collected before the
    fault, with NUL and control characters removed. Unknown containers yield "".
    """
    parts: list[str] = []
    try:
        raw = bytes(data)
        container = detect_container(raw)
        if container == "png":
            _collect_png_text(raw, parts)
        elif container in ("jpeg", "webp"):
            _collect_window_text(raw, parts, window)
    except Exception as exc:
        logger.debug("Metadata text extraction stopped early: %s", exc)
    return strip_control_chars("".join(parts))
