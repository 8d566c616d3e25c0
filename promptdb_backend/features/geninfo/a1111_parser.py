"""
AUTOMATIC1111/Forge "parameters" text parsing.

    <positive prompt>
    Negative prompt: <negative prompt>
    Steps: 20, Sampler: Euler a, CFG scale: 7, Seed: 1, Size: 512x768, Model: foo

Each field is read through an ordered list of pattern alternatives so that both
the colon style above and the space-delimited style some tools write are
understood. The first alternative that matches wins.
"""

from __future__ import annotations

import re

from ..metadata.extractors import strip_control_chars
from .record import UNKNOWN, ParsedMetadata

NEGATIVE_MARKER = "Negative prompt:"
STEPS_MARKER = "Steps:"

_PARAMETERS_LABEL_RE = re.compile(r"^\s*parameters\s*", re.IGNORECASE)

FIELD_PATTERNS: tuple[tuple[str, tuple[re.Pattern[str], ...]], ...] = tuple(
    (name, tuple(re.compile(p, re.IGNORECASE) for p in patterns))
    for name, patterns in (
        ("steps", (r"Steps:\s*([0-9]+)", r"Steps\s+([0-9]+)")),
        ("sampler", (r"Sampler:\s*([^,\n]+)", r"Sampler\s+([^,\n]+)")),
        ("cfg", (r"CFG\s+scale:\s*([0-9.]+)", r"CFG\s*:\s*([0-9.]+)")),
        ("seed", (r"Seed:\s*([0-9]+)", r"Seed\s+([0-9]+)")),
        ("size", (r"Size:\s*([0-9xX]+)", r"Size\s+([0-9xX]+)")),
        ("model", (r"Model:\s*([^,\n]+)", r"Model\s+([^,\n]+)")),
    )
)


def _strip_label(text: str) -> str:
    # PNG text chunks are keyed "parameters"; the key lands in front of the prompt.
    return _PARAMETERS_LABEL_RE.sub("", text, count=1).strip()


def _first_match(block: str, patterns: tuple[re.Pattern[str], ...]) -> str:
    for pattern in patterns:
        match = pattern.search(block)
        if match and match.group(1).strip():
            return match.group(1).strip()
    return UNKNOWN


def _split_prompts(text: str, neg_idx: int, steps_idx: int) -> tuple[str, str]:
    if neg_idx != -1 and steps_idx != -1 and neg_idx < steps_idx:
        return _strip_label(text[:neg_idx]), text[neg_idx + len(NEGATIVE_MARKER):steps_idx].strip()
    if steps_idx != -1:
        return _strip_label(text[:steps_idx]), ""
    if neg_idx != -1:
        return _strip_label(text[:neg_idx]), text[neg_idx + len(NEGATIVE_MARKER):].strip()
    return text.strip(), ""


def parse_a1111_text(text: str) -> ParsedMetadata:
    """Best-effort parse; never fails, unmatched fields stay at the sentinel."""
    text = strip_control_chars(text if isinstance(text, str) else "")
    neg_idx = text.find(NEGATIVE_MARKER)
    steps_idx = text.find(STEPS_MARKER)

    result = ParsedMetadata()
    result.positive_prompt, result.negative_prompt = _split_prompts(text, neg_idx, steps_idx)

    if steps_idx != -1:
        block = text[steps_idx:]
        for name, patterns in FIELD_PATTERNS:
            setattr(result, name, _first_match(block, patterns))
    return result
