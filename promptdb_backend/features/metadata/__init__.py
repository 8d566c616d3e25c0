"""Metadata extraction feature."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .service import PromptMetadataService

__all__ = ["PromptMetadataService", "extract_text", "detect_container", "scan_next", "iter_json_objects"]


def __getattr__(name: str):
    if name == "PromptMetadataService":
        from .service import PromptMetadataService as _PromptMetadataService

        return _PromptMetadataService
    if name in ("extract_text", "detect_container"):
        from .extractors import detect_container, extract_text

        return {"extract_text": extract_text, "detect_container": detect_container}[name]
    if name in ("scan_next", "iter_json_objects"):
        from .json_scanner import iter_json_objects, scan_next

        return {"scan_next": scan_next, "iter_json_objects": iter_json_objects}[name]
    raise AttributeError(name)
