# compiler.py
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from . import settings
from .dsl import parse
from .errors import DslParseError
from .model import (
    CompiledGraph,
    DslKind,
    GraphEdge,
    GraphNode,
    NodeDef,
    NodeType,
    SHELL_NODE_TYPE,
    TaskSpec,
    TriggerSpec,
    TriggerType,
)

logger = logging.getLogger(__name__)

# Longest label shown on a node before it gets ellipsized.
MAX_LABEL_LENGTH = 10
ELLIPSIS = "..."

DEFAULT_WEBHOOK_ID = "webhook"

Nodes = Tuple[GraphNode, ...]
Edges = Tuple[GraphEdge, ...]

# ---------------------------------------------------------------------
# Compilation is a pipeline of pure stages:
#
#   parse -> base nodes/edges -> join nodes -> trigger node -> icons
#
# Every stage takes tuples and returns new tuples. Nothing is mutated
# in place, so the same DSL always yields the same graph.
# ---------------------------------------------------------------------


def truncate_label(label: str) -> str:
    if len(label) > MAX_LABEL_LENGTH:
        return f"{label[:MAX_LABEL_LENGTH]}{ELLIPSIS}"
    return label


def _task_node(spec: TaskSpec, node_type: NodeType) -> GraphNode:
    unique_key: Optional[str] = None
    if node_type == NodeType.ASYNC_TASK:
        unique_key = SHELL_NODE_TYPE if spec.image else spec.task

    return GraphNode(
        id=spec.ref,
        label=truncate_label(spec.display_name),
        description=spec.display_name,
        type=node_type,
        unique_key=unique_key,
    )


def build_workflow(tasks: Sequence[TaskSpec]) -> Tuple[Nodes, Edges]:
    """Workflow kind: one node per task, one edge per `needs` entry (need -> ref)."""
    nodes: List[GraphNode] = []
    edges: List[GraphEdge] = []

    for spec in tasks:
        nodes.append(_task_node(spec, spec.node_type))
        for need in spec.needs:
            edges.append(GraphEdge(source=need, target=spec.ref))

    return tuple(nodes), tuple(edges)


def build_pipeline(tasks: Sequence[TaskSpec]) -> Tuple[Nodes, Edges]:
    """Pipeline kind: tasks chained in declaration order, `needs` is ignored."""
    nodes: List[GraphNode] = []
    edges: List[GraphEdge] = []

    for spec in tasks:
        if nodes:
            edges.append(GraphEdge(source=nodes[-1].id, target=spec.ref))
        nodes.append(_task_node(spec, NodeType.ASYNC_TASK))

    return tuple(nodes), tuple(edges)


def join_key(edges: Iterable[GraphEdge]) -> str:
    """Deterministic join node id: sorted source ids joined by '_'."""
    return "_".join(sorted(e.source for e in edges))


def synthesize_join_nodes(nodes: Nodes, edges: Edges) -> Tuple[Nodes, Edges]:
    """
    Merge converging edges into FLOW_NODEs.

    Targets with more than one incoming edge are grouped by their join key.
    A join key shared by two or more targets gets one FLOW_NODE:
      source -> join (once per source, from the first target's edges)
      join -> target (for every target in the group)
    and the original direct edges are dropped. A join key used by a
    single target is left alone.
    """
    by_target: Dict[str, List[GraphEdge]] = {}
    for edge in edges:
        by_target.setdefault(edge.target, []).append(edge)

    groups: Dict[str, List[Tuple[str, List[GraphEdge]]]] = {}
    for target, incoming in by_target.items():
        if len(incoming) == 1:
            continue
        groups.setdefault(join_key(incoming), []).append((target, incoming))

    removed: set[GraphEdge] = set()
    added_nodes: List[GraphNode] = []
    added_edges: List[GraphEdge] = []

    for flow_id, members in groups.items():
        if len(members) == 1:
            continue

        logger.debug("join node %s -> %s", flow_id, [t for t, _ in members])
        added_nodes.append(GraphNode(id=flow_id, type=NodeType.FLOW_NODE))

        for target, incoming in members:
            removed.update(incoming)
            added_edges.append(GraphEdge(source=flow_id, target=target))

        for edge in members[0][1]:
            added_edges.append(replace(edge, target=flow_id))

    if not added_nodes:
        return nodes, edges

    kept = tuple(e for e in edges if e not in removed)
    return nodes + tuple(added_nodes), kept + tuple(added_edges)


def _entry_node(nodes: Nodes, dsl_kind: DslKind) -> Optional[GraphNode]:
    if dsl_kind == DslKind.WORKFLOW:
        return next((n for n in nodes if n.type == NodeType.START), None)
    return nodes[0] if nodes else None


def _trigger_node(trigger: Optional[TriggerSpec], trigger_type: TriggerType) -> Optional[GraphNode]:
    if trigger_type == TriggerType.CRON:
        schedule = trigger.schedule if trigger else None
        if not schedule:
            # no schedule, no cron node
            return None
        return GraphNode(
            id=NodeType.CRON.value,
            label="cron",
            description=schedule,
            type=NodeType.CRON,
        )

    if trigger_type == TriggerType.WEBHOOK:
        webhook = trigger.webhook if trigger else None
        key = webhook.split("@")[0] if webhook else DEFAULT_WEBHOOK_ID
        return GraphNode(
            id=key,
            label=key,
            description=key,
            type=NodeType.WEBHOOK,
            unique_key=key if webhook else None,
        )

    return None


def inject_trigger(
    nodes: Nodes,
    edges: Edges,
    trigger: Optional[TriggerSpec],
    trigger_type: TriggerType,
    dsl_kind: DslKind,
) -> Tuple[Nodes, Edges]:
    """Put the trigger node first and wire it into the graph's entry node."""
    trigger_node = _trigger_node(trigger, trigger_type)
    if trigger_node is None:
        return nodes, edges

    if any(n.id == trigger_node.id for n in nodes):
        raise DslParseError(
            message=f"task ref {trigger_node.id!r} clashes with the {trigger_type.value} trigger node",
            details={"ref": trigger_node.id, "trigger": trigger_type.value},
        )

    entry = _entry_node(nodes, dsl_kind)
    if entry is None:
        logger.warning("no entry node to attach %s trigger to", trigger_type.value)
        return (trigger_node,) + nodes, edges

    return (trigger_node,) + nodes, edges + (GraphEdge(source=trigger_node.id, target=entry.id),)


def _icon_for(node: GraphNode, catalog: Sequence[NodeDef]) -> Optional[str]:
    if node.unique_key == SHELL_NODE_TYPE:
        return settings.SHELL_ICON

    for node_def in catalog:
        if node.type == NodeType.WEBHOOK and node_def.webhook == node.unique_key:
            return node_def.icon
        if node.type == NodeType.ASYNC_TASK and node_def.type == node.unique_key:
            return node_def.icon
    return None


def resolve_icons(nodes: Nodes, catalog: Sequence[NodeDef]) -> Nodes:
    """Copy catalog icons onto nodes that carry a uniqueKey; misses stay icon-less."""
    out: List[GraphNode] = []
    for node in nodes:
        if not node.unique_key:
            out.append(node)
            continue
        out.append(replace(node, icon_url=_icon_for(node, catalog)))
    return tuple(out)


# ---------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------

def compile_dsl(
    dsl_text: Optional[str],
    trigger_type: Optional[TriggerType],
    catalog: Optional[Sequence[NodeDef]] = None,
) -> CompiledGraph:
    """
    Compile DSL text into a node/edge graph ready for layout.

    Without DSL text or trigger type the result is an empty workflow-kind
    graph ("not configured yet"), not an error.

    Raises:
      DslParseError if the DSL cannot be parsed. No partial graph is returned.
    """
    if not dsl_text or trigger_type is None:
        return CompiledGraph(dsl_kind=DslKind.WORKFLOW)

    parsed = parse(dsl_text)

    if parsed.workflow is not None:
        dsl_kind = DslKind.WORKFLOW
        nodes, edges = build_workflow(parsed.workflow)
        nodes, edges = synthesize_join_nodes(nodes, edges)
    else:
        dsl_kind = DslKind.PIPELINE
        nodes, edges = build_pipeline(parsed.pipeline or ())

    nodes, edges = inject_trigger(nodes, edges, parsed.trigger, trigger_type, dsl_kind)

    if catalog is not None:
        nodes = resolve_icons(nodes, catalog)

    logger.debug("compiled %s graph: %d nodes, %d edges", dsl_kind.value, len(nodes), len(edges))
    return CompiledGraph(dsl_kind=dsl_kind, nodes=nodes, edges=edges)
