"""Graph normalization and link helpers for ComfyUI node graphs."""

from __future__ import annotations

from typing import Any

NodeRecord = dict[str, Any]

_SEED_INPUTS = frozenset({"seed", "noise_seed"})
# Extra widget stored after a seed widget ("control after generate").
_SEED_CONTROL_VALUES = frozenset({"fixed", "increment", "decrement", "randomize"})


def _to_int(value: Any) -> int | None:
    try:
        if value is None or isinstance(value, bool):
            return None
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def _node_ref(value: Any) -> bool:
    return isinstance(value, (str, int)) and not isinstance(value, bool)


def _is_link(value: Any) -> bool:
    """`[node_id, output_index]` pair as found in API-format inputs."""
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        return False
    return _node_ref(value[0]) and _to_int(value[1]) is not None


def _node_type(node: Any) -> str:
    if not isinstance(node, dict):
        return ""
    return str(node.get("class_type") or node.get("type") or "")


def _inputs(node: Any) -> dict[str, Any]:
    if not isinstance(node, dict):
        return {}
    ins = node.get("inputs")
    return ins if isinstance(ins, dict) else {}


def _widgets(node: Any) -> list[Any]:
    if not isinstance(node, dict):
        return []
    widgets = node.get("widgets_values")
    return widgets if isinstance(widgets, list) else []


def _widget_dict(node: Any) -> dict[str, Any]:
    if not isinstance(node, dict):
        return {}
    widgets = node.get("widgets_values")
    return widgets if isinstance(widgets, dict) else {}


def resolve_link_target(nodes_by_id: dict[str, NodeRecord], link: Any) -> tuple[str | None, NodeRecord | None]:
    """
    Follow one link to the node it points at.

    A link is either an id pair, an embedded node object, or a pair whose first
    element is the embedded node itself. Returns (node_id, node); both are None
    when the target is missing.
    """
    if isinstance(link, dict):
        return None, _as_node_record(link)
    if not isinstance(link, (list, tuple)) or not link:
        return None, None
    head = link[0]
    if isinstance(head, dict):
        return None, _as_node_record(head)
    if not _node_ref(head):
        return None, None
    node_id = str(head).strip()
    return node_id, nodes_by_id.get(node_id)


def _build_link_source_map(links: Any) -> dict[Any, tuple[Any, int]]:
    link_to_source: dict[Any, tuple[Any, int]] = {}
    if not isinstance(links, list):
        return link_to_source
    for link in links:
        if isinstance(link, list) and len(link) >= 3:
            link_id, src_node, src_slot = link[0], link[1], link[2]
        elif isinstance(link, dict):
            link_id, src_node, src_slot = link.get("id"), link.get("origin_id"), link.get("origin_slot")
        else:
            continue
        # ids come from untrusted JSON; only scalars can key the table
        if not _node_ref(link_id) or not _node_ref(src_node):
            continue
        link_to_source[link_id] = (src_node, _to_int(src_slot) or 0)
    return link_to_source


def _convert_slot_inputs(
    slots: list[Any],
    widgets: list[Any],
    link_to_source: dict[Any, tuple[Any, int]],
) -> dict[str, Any]:
    """
    Editor workflows list inputs as slots: linked slots become id pairs and
    widget-backed slots take the next value from `widgets_values`.
    """
    converted: dict[str, Any] = {}
    widget_idx = 0
    for slot in slots:
        if not isinstance(slot, dict):
            continue
        name = slot.get("name")
        if not isinstance(name, str) or not name:
            continue
        link_id = slot.get("link")
        source = link_to_source.get(link_id) if _node_ref(link_id) else None
        if source is not None:
            converted[name] = [str(source[0]), source[1]]
        elif "widget" in slot and widget_idx < len(widgets):
            # Text widgets are already read from widgets_values[0].
            if name != "text":
                converted[name] = widgets[widget_idx]
        if "widget" in slot:
            widget_idx += 1
            if name in _SEED_INPUTS and widget_idx < len(widgets) and _is_seed_control(widgets[widget_idx]):
                widget_idx += 1
    return converted


def _is_seed_control(value: Any) -> bool:
    return isinstance(value, str) and value in _SEED_CONTROL_VALUES


def _as_node_record(raw: dict[str, Any], link_to_source: dict[Any, tuple[Any, int]] | None = None) -> NodeRecord:
    data = raw.get("data") if isinstance(raw.get("data"), dict) else {}
    class_type = raw.get("class_type") or raw.get("type") or data.get("class_type") or ""
    raw_inputs = raw.get("inputs")
    if raw_inputs is None:
        raw_inputs = data.get("inputs")
    widgets = _widgets(raw) or _widgets(data)
    if isinstance(raw_inputs, list):
        inputs = _convert_slot_inputs(raw_inputs, widgets, link_to_source or {})
    elif isinstance(raw_inputs, dict):
        inputs = raw_inputs
    else:
        inputs = {}
    # Newer editor builds store widgets as a name -> value mapping.
    named_widgets = _widget_dict(raw) or _widget_dict(data)
    if named_widgets:
        inputs = {**named_widgets, **inputs}
    return {
        "id": raw.get("id"),
        "class_type": str(class_type),
        "inputs": inputs,
        "widgets_values": widgets,
    }


def _looks_like_api_node(value: Any) -> bool:
    return isinstance(value, dict) and bool(value.get("class_type") or value.get("inputs"))


def normalize_graph(graph: Any) -> tuple[list[NodeRecord], dict[str, NodeRecord]]:
    """
    Flatten either ComfyUI layout into (ordered node list, id lookup).

    Editor workflows carry a `nodes` array (plus a `links` table); API prompts
    map node ids straight to node bodies. A lone node object is treated as a
    one-node graph.
    """
    nodes: list[NodeRecord] = []
    nodes_by_id: dict[str, NodeRecord] = {}
    if not isinstance(graph, dict):
        return nodes, nodes_by_id

    raw_nodes = graph.get("nodes")
    if isinstance(raw_nodes, list):
        link_to_source = _build_link_source_map(graph.get("links"))
        for raw in raw_nodes:
            if not isinstance(raw, dict):
                continue
            node = _as_node_record(raw, link_to_source)
            nodes.append(node)
            if node["id"] is not None:
                nodes_by_id[str(node["id"])] = node
        return nodes, nodes_by_id

    if isinstance(graph.get("class_type"), str) and isinstance(graph.get("inputs"), dict):
        node = _as_node_record(graph)
        nodes.append(node)
        if node["id"] is not None:
            nodes_by_id[str(node["id"])] = node
        return nodes, nodes_by_id

    for key, value in graph.items():
        if not _looks_like_api_node(value):
            continue
        node = _as_node_record(value)
        node["id"] = str(key)
        nodes.append(node)
        nodes_by_id[str(key)] = node
    return nodes, nodes_by_id


def looks_like_comfy_candidate(value: Any) -> bool:
    """A scanned JSON value shaped like a node, a workflow, or a prompt graph."""
    if not isinstance(value, dict):
        return False
    if value.get("class_type") or isinstance(value.get("nodes"), list):
        return True
    return any(isinstance(v, dict) and (v.get("class_type") or v.get("type")) for v in value.values())
