"""ComfyUI node-graph interpretation: sampler settings plus upstream prompt/model tracing."""

from __future__ import annotations

from typing import Any

from ...config import MAX_LINK_DEPTH
from ...shared import get_logger
from .graph_converter import NodeRecord, _inputs, _node_type, _widgets, normalize_graph, resolve_link_target
from .record import UNKNOWN, ParsedMetadata, clean_model_name, field_text

logger = get_logger(__name__)

SAMPLER_CLASS_TYPES = ("KSampler", "KSamplerAdvanced", "SamplerCustom")
_MODEL_NAME_INPUTS = ("ckpt_name", "unet_name")


def _is_sampler(node: NodeRecord) -> bool:
    ct = _node_type(node)
    return any(name in ct for name in SAMPLER_CLASS_TYPES)


def _find_sampler(nodes: list[NodeRecord]) -> NodeRecord | None:
    for node in nodes:
        if _is_sampler(node):
            return node
    return None


def _is_link_like(value: Any) -> bool:
    return isinstance(value, dict) or (isinstance(value, (list, tuple)) and len(value) > 0)


def _widget_literal(node: NodeRecord) -> str:
    widgets = _widgets(node)
    if not widgets:
        return ""
    first = widgets[0]
    if isinstance(first, str):
        return first
    if isinstance(first, (int, float)) and not isinstance(first, bool):
        return str(first)
    return ""


def _visit(nodes_by_id: dict[str, NodeRecord], link: Any, depth: int, visited: frozenset[str]) -> tuple[NodeRecord | None, frozenset[str]]:
    """Resolve one hop; (None, visited) on depth overrun, missing node, or a revisit."""
    if depth > MAX_LINK_DEPTH or not _is_link_like(link):
        return None, visited
    node_id, node = resolve_link_target(nodes_by_id, link)
    if node is None:
        return None, visited
    if node_id is not None:
        if node_id in visited:
            logger.debug("Link cycle through node %s, stopping", node_id)
            return None, visited
        visited = visited | {node_id}
    return node, visited


def trace_upstream_text(nodes_by_id: dict[str, NodeRecord], link: Any, depth: int = 0, visited: frozenset[str] = frozenset()) -> str:
    """
    Prompt text feeding `link`: the node's first widget value, then its `text`
    input (literal, or traced one hop further), joined with ", ".
    """
    node, visited = _visit(nodes_by_id, link, depth, visited)
    if node is None:
        return ""
    parts = [_widget_literal(node)]
    text = _inputs(node).get("text")
    if isinstance(text, str):
        parts.append(text)
    elif _is_link_like(text):
        parts.append(trace_upstream_text(nodes_by_id, text, depth + 1, visited))
    return ", ".join(part for part in parts if part)


def trace_upstream_model(nodes_by_id: dict[str, NodeRecord], link: Any, depth: int = 0, visited: frozenset[str] = frozenset()) -> str:
    """Checkpoint/UNet file name feeding a `model` link; "" when unresolved."""
    node, visited = _visit(nodes_by_id, link, depth, visited)
    if node is None:
        return ""
    ins = _inputs(node)
    for key in _MODEL_NAME_INPUTS:
        value = ins.get(key)
        if isinstance(value, str) and value.strip():
            return value
    model = ins.get("model")
    if _is_link_like(model):
        return trace_upstream_model(nodes_by_id, model, depth + 1, visited)
    return ""


def _sampler_name(sampler: NodeRecord, ins: dict[str, Any]) -> str:
    name = field_text(ins.get("sampler_name"))
    if name == UNKNOWN:
        name = field_text(_node_type(sampler))
    scheduler = ins.get("scheduler")
    if name != UNKNOWN and isinstance(scheduler, str) and scheduler.strip():
        name = f"{name} {scheduler.strip()}"
    return name


def parse_comfy_graph(graph: Any) -> ParsedMetadata:
    """
    Interpret a ComfyUI prompt graph or editor workflow.

    The first KSampler-family node supplies seed/steps/cfg/sampler; prompts and
    model are traced backwards from its `positive`, `negative` and `model`
    inputs. A graph without a sampler yields an all-unknown record.
    """
    nodes, nodes_by_id = normalize_graph(graph)
    result = ParsedMetadata()
    sampler = _find_sampler(nodes)
    if sampler is None:
        logger.debug("No sampler node among %d ComfyUI nodes", len(nodes))
        return result

    ins = _inputs(sampler)
    seed = ins.get("seed")
    if seed is None:
        seed = ins.get("noise_seed")
    result.seed = field_text(seed)
    result.steps = field_text(ins.get("steps"))
    result.cfg = field_text(ins.get("cfg"))
    result.sampler = _sampler_name(sampler, ins)

    if ins.get("positive") is not None:
        result.positive_prompt = trace_upstream_text(nodes_by_id, ins["positive"])
    if ins.get("negative") is not None:
        result.negative_prompt = trace_upstream_text(nodes_by_id, ins["negative"])
    if ins.get("model") is not None:
        result.model = clean_model_name(trace_upstream_model(nodes_by_id, ins["model"]))
    return result
