# model.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class NodeType(str, Enum):
    START = "start"
    END = "end"
    ASYNC_TASK = "async-task"
    # reserved: compiled like any other task for now
    CONDITION = "condition"
    CRON = "cron"
    WEBHOOK = "webhook"
    # synthetic join point, no task semantics
    FLOW_NODE = "flow-node"


class DslKind(str, Enum):
    WORKFLOW = "WORKFLOW"
    PIPELINE = "PIPELINE"


class TriggerType(str, Enum):
    CRON = "CRON"
    WEBHOOK = "WEBHOOK"
    MANUAL = "MANUAL"


class TaskStatus(str, Enum):
    INIT = "INIT"
    WAITING = "WAITING"
    RUNNING = "RUNNING"
    SKIPPED = "SKIPPED"
    FAILED = "FAILED"
    SUCCEEDED = "SUCCEEDED"
    SUSPENDED = "SUSPENDED"
    IGNORED = "IGNORED"


class GraphDirection(str, Enum):
    HORIZONTAL = "HORIZONTAL"
    VERTICAL = "VERTICAL"


# Task tags with their own node type; everything else is an async task.
RESERVED_TASKS = {"START": NodeType.START, "END": NodeType.END}

# uniqueKey marker for tasks that run a plain image (shell step)
SHELL_NODE_TYPE = "shell"

EDGE_TYPE = "flow"


# ---------------------------------------------------------------------
# DSL side
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class TaskSpec:
    """One task entry of a workflow/pipeline section."""
    ref: str
    task: str
    name: Optional[str] = None
    image: Optional[str] = None
    needs: Tuple[str, ...] = ()

    @property
    def node_type(self) -> NodeType:
        return RESERVED_TASKS.get(self.task.upper(), NodeType.ASYNC_TASK)

    @property
    def display_name(self) -> str:
        return self.name or self.ref


@dataclass(frozen=True)
class TriggerSpec:
    """
    Trigger section. Either `schedule` (cron) or `webhook` is set;
    a webhook may be namespace-qualified as `name@namespace`.
    """
    schedule: Optional[str] = None
    webhook: Optional[str] = None


@dataclass(frozen=True)
class ParsedDsl:
    trigger: Optional[TriggerSpec] = None
    workflow: Optional[Tuple[TaskSpec, ...]] = None
    pipeline: Optional[Tuple[TaskSpec, ...]] = None


# ---------------------------------------------------------------------
# Graph side (the interchange format)
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class GraphNode:
    id: str
    type: NodeType
    label: str = ""
    description: str = ""
    unique_key: Optional[str] = None  # icon lookup only, never identity
    icon_url: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "description": self.description,
            "type": self.type.value,
        }
        if self.unique_key is not None:
            data["uniqueKey"] = self.unique_key
        if self.icon_url is not None:
            data["iconUrl"] = self.icon_url
        if self.x is not None:
            data["x"] = self.x
        if self.y is not None:
            data["y"] = self.y
        return data


@dataclass(frozen=True)
class GraphEdge:
    source: str
    target: str
    type: str = EDGE_TYPE
    label: Optional[str] = None

    @property
    def id(self) -> str:
        return f"{self.source}->{self.target}"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"source": self.source, "target": self.target, "type": self.type}
        if self.label is not None:
            data["label"] = self.label
        return data


@dataclass(frozen=True)
class CompiledGraph:
    dsl_kind: DslKind
    nodes: Tuple[GraphNode, ...] = ()
    edges: Tuple[GraphEdge, ...] = ()

    def node(self, node_id: str) -> Optional[GraphNode]:
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dslKind": self.dsl_kind.value,
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }


# ---------------------------------------------------------------------
# Collaborator records
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class NodeDef:
    """Task catalog entry used for icon lookup."""
    type: str
    icon: Optional[str] = None
    webhook: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> NodeDef:
        return cls(type=data["type"], icon=data.get("icon"), webhook=data.get("webhook"))


@dataclass(frozen=True)
class TaskExecutionRecord:
    """A single execution of a task inside a workflow instance."""
    node_name: str
    status: TaskStatus
    start_time: Optional[datetime] = None
