# layout.py
from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Sequence, Union

from .model import CompiledGraph, DslKind, GraphDirection

# Below this many nodes even a pipeline is laid out hierarchically.
GRID_MIN_NODES = 8

# (exclusive upper bound on node count, columns)
GRID_COLUMN_STEPS = ((13, 3), (28, 5))
GRID_MAX_COLUMNS = 10

GRID_NODE_SIZE = 60
GRID_OVERLAP_PADDING = 130

RANKSEP = 70
NODESEP_TB = 60
NODESEP_LR = 35


@dataclass(frozen=True)
class HierarchicalLayout:
    """
    Dependency-ordered (dagre) layout.

    nodesep: spacing between nodes of the same rank
    ranksep: spacing between adjacent ranks
    """
    rankdir: str
    nodesep: int
    ranksep: int = RANKSEP
    control_points: bool = True
    type: str = "dagre"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "rankdir": self.rankdir,
            "nodesep": self.nodesep,
            "ranksep": self.ranksep,
            "controlPoints": self.control_points,
        }


@dataclass(frozen=True)
class GridLayout:
    cols: int
    rows: int
    prevent_overlap: bool = True
    node_size: int = GRID_NODE_SIZE
    prevent_overlap_padding: int = GRID_OVERLAP_PADDING
    # node id -> ordering weight (higher first), filled per graph
    weights: Dict[str, int] = field(default_factory=dict, compare=False)
    type: str = "grid"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "preventOverlap": self.prevent_overlap,
            "nodeSize": self.node_size,
            "preventOverlapPadding": self.prevent_overlap_padding,
            "cols": self.cols,
            "rows": self.rows,
            "weights": dict(self.weights),
        }


LayoutConfig = Union[HierarchicalLayout, GridLayout]


def rankdir_for(direction: GraphDirection) -> str:
    return "LR" if direction == GraphDirection.HORIZONTAL else "TB"


def grid_columns(node_count: int) -> int:
    """Column count before the odd-row adjustment: 3 under 13 nodes, 5 under 28, else 10."""
    for bound, cols in GRID_COLUMN_STEPS:
        if node_count < bound:
            return cols
    return GRID_MAX_COLUMNS


def grid_shape(node_count: int) -> tuple[int, int]:
    """
    (cols, rows) for a grid. An even row count is forced odd by dropping
    a row and widening the columns, so there is always a middle row.
    """
    cols = grid_columns(node_count)
    rows = math.ceil(node_count / cols)

    if rows % 2 == 0:
        rows -= 1
        cols = math.ceil(node_count / rows)

    return cols, rows


def select_layout(dsl_kind: DslKind, node_count: int, direction: GraphDirection) -> LayoutConfig:
    if dsl_kind == DslKind.WORKFLOW or node_count < GRID_MIN_NODES:
        rankdir = rankdir_for(direction)
        return HierarchicalLayout(
            rankdir=rankdir,
            nodesep=NODESEP_TB if rankdir == "TB" else NODESEP_LR,
        )

    cols, rows = grid_shape(node_count)
    return GridLayout(cols=cols, rows=rows)


def serpentine_weights(node_ids: Sequence[str], cols: int) -> Dict[str, int]:
    """
    Ordering weights that read as a boustrophedon path: even rows run
    left-to-right, odd rows right-to-left.
    """
    weights: Dict[str, int] = {}
    rows: List[List[str]] = [list(node_ids[i:i + cols]) for i in range(0, len(node_ids), cols)]

    for i, row in enumerate(rows):
        ordered = row if i % 2 == 0 else list(reversed(row))
        for j, node_id in enumerate(ordered):
            weights[node_id] = -1 * (i * cols + j)

    return weights


def layout_for_graph(graph: CompiledGraph, direction: GraphDirection) -> LayoutConfig:
    """select_layout() for a compiled graph, with grid weights attached."""
    config = select_layout(graph.dsl_kind, len(graph.nodes), direction)
    if isinstance(config, GridLayout):
        config = replace(config, weights=serpentine_weights([n.id for n in graph.nodes], config.cols))
    return config
