"""Generation-info parsers and the format dispatcher."""

from .a1111_parser import parse_a1111_text
from .comfy_parser import parse_comfy_graph
from .dispatcher import parse_metadata
from .record import UNKNOWN, ParsedMetadata
from .swarmui_parser import parse_swarmui

__all__ = [
    "ParsedMetadata",
    "UNKNOWN",
    "parse_metadata",
    "parse_a1111_text",
    "parse_comfy_graph",
    "parse_swarmui",
]
