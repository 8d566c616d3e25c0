"""PromptDB backend: prompt/parameter recovery from AI-generated images."""

from .features.geninfo import ParsedMetadata, parse_metadata
from .features.metadata.extractors import extract_text

__all__ = ["extract_text", "parse_metadata", "ParsedMetadata"]
