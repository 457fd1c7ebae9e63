from .compiler import compile_dsl
from .dsl import parse
from .errors import DslParseError, WorkflowVizError
from .layout import layout_for_graph, select_layout
from .model import CompiledGraph, DslKind, GraphDirection, GraphEdge, GraphNode, NodeType, TaskStatus, TriggerType
from .view import GraphView
from .zoom import ZoomTool, ZoomType

__all__ = [
    "compile_dsl", "parse", "DslParseError", "WorkflowVizError", "layout_for_graph", "select_layout",
    "CompiledGraph", "DslKind", "GraphDirection", "GraphEdge", "GraphNode", "NodeType", "TaskStatus",
    "TriggerType", "GraphView", "ZoomTool", "ZoomType",
]
