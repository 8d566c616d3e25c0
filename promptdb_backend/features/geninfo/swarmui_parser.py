"""SwarmUI `sui_image_params` projection."""

from __future__ import annotations

import re
from typing import Any

from .record import UNKNOWN, ParsedMetadata, field_text, strip_model_extension

SWARMUI_PARAMS_KEY = "sui_image_params"

# "diffusion_models/", "Stable-Diffusion/", ... in front of the model file name
_MODEL_FOLDER_RE = re.compile(r"^[A-Za-z0-9_\-]+/")


def _model_name(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        return UNKNOWN
    name = _MODEL_FOLDER_RE.sub("", value.strip(), count=1)
    return strip_model_extension(name) or UNKNOWN


def _prompt(value: Any) -> str:
    return value if isinstance(value, str) else ""


def has_swarmui_params(value: Any) -> bool:
    return isinstance(value, dict) and isinstance(value.get(SWARMUI_PARAMS_KEY), dict)


def parse_swarmui(payload: dict[str, Any]) -> ParsedMetadata:
    params = payload.get(SWARMUI_PARAMS_KEY) if isinstance(payload, dict) else None
    if not isinstance(params, dict):
        params = {}

    result = ParsedMetadata(
        positive_prompt=_prompt(params.get("prompt")),
        negative_prompt=_prompt(params.get("negativeprompt")),
        model=_model_name(params.get("model")),
        seed=field_text(params.get("seed")),
        steps=field_text(params.get("steps")),
        cfg=field_text(params.get("cfgscale")),
    )
    sampler = field_text(params.get("sampler"))
    scheduler = params.get("scheduler")
    if sampler != UNKNOWN and isinstance(scheduler, str) and scheduler.strip():
        sampler = f"{sampler} {scheduler.strip()}"
    result.sampler = sampler

    width, height = field_text(params.get("width")), field_text(params.get("height"))
    if width != UNKNOWN and height != UNKNOWN:
        result.size = f"{width}x{height}"
    return result
