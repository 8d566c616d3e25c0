"""Normalized generation-parameter record shared by every parser."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

UNKNOWN = "?"

_MODEL_EXTS = (".safetensors", ".ckpt")


@dataclass
class ParsedMetadata:
    positive_prompt: str = ""
    negative_prompt: str = ""
    model: str = UNKNOWN
    seed: str = UNKNOWN
    steps: str = UNKNOWN
    cfg: str = UNKNOWN
    sampler: str = UNKNOWN
    size: str = UNKNOWN

    def is_meaningful(self) -> bool:
        """A result worth keeping: it has a positive prompt or a resolved model."""
        return bool(self.positive_prompt) or self.model != UNKNOWN

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


def field_text(value: Any) -> str:
    """Render a scalar field value as text, or the sentinel when absent."""
    if value is None or isinstance(value, bool):
        return UNKNOWN
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value.strip() or UNKNOWN
    return UNKNOWN


def strip_model_extension(name: str) -> str:
    lower = name.lower()
    for ext in _MODEL_EXTS:
        if lower.endswith(ext):
            return name[: -len(ext)]
    return name


def clean_model_name(value: Any) -> str:
    """Model name without its .safetensors/.ckpt suffix, or the sentinel."""
    if not isinstance(value, str) or not value.strip():
        return UNKNOWN
    return strip_model_extension(value.strip()) or UNKNOWN
