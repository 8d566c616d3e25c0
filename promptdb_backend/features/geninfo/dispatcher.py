"""
Format arbitration: SwarmUI JSON, then ComfyUI graphs, then A1111 text.

A structured candidate is only accepted when it is meaningful (positive prompt
or resolved model), so an incidental empty JSON blob early in the text cannot
shadow the real one or the A1111 block.
"""

from __future__ import annotations

from ..metadata.json_scanner import iter_json_objects
from ...shared import get_logger
from .a1111_parser import parse_a1111_text
from .comfy_parser import parse_comfy_graph
from .graph_converter import looks_like_comfy_candidate
from .record import ParsedMetadata
from .swarmui_parser import SWARMUI_PARAMS_KEY, has_swarmui_params, parse_swarmui

logger = get_logger(__name__)

COMFY_CLASS_MARKER = '"class_type"'
COMFY_INPUTS_MARKER = '"inputs"'


def _parse_swarmui_candidates(text: str) -> ParsedMetadata | None:
    for found in iter_json_objects(text):
        if not has_swarmui_params(found.value):
            continue
        parsed = parse_swarmui(found.value)
        if parsed.is_meaningful():
            return parsed
    return None


def _parse_comfy_candidates(text: str) -> ParsedMetadata | None:
    for found in iter_json_objects(text):
        if not looks_like_comfy_candidate(found.value):
            continue
        # Only the first graph-shaped object is tried.
        parsed = parse_comfy_graph(found.value)
        return parsed if parsed.is_meaningful() else None
    return None


def parse_metadata(text: str) -> ParsedMetadata:
    """Normalize extracted image text into a ParsedMetadata record; never fails."""
    if not isinstance(text, str):
        text = ""

    if SWARMUI_PARAMS_KEY in text:
        parsed = _parse_swarmui_candidates(text)
        if parsed is not None:
            logger.debug("Matched SwarmUI parameters")
            return parsed
    elif COMFY_CLASS_MARKER in text and COMFY_INPUTS_MARKER in text:
        parsed = _parse_comfy_candidates(text)
        if parsed is not None:
            logger.debug("Matched ComfyUI graph")
            return parsed

    return parse_a1111_text(text)
