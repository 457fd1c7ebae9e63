# view.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Sequence

from . import settings
from .compiler import compile_dsl
from .layout import HierarchicalLayout, LayoutConfig, layout_for_graph
from .model import (
    CompiledGraph,
    GraphDirection,
    NodeDef,
    NodeType,
    TaskExecutionRecord,
    TaskStatus,
    TriggerType,
)
from .renderer import NODE_MOUSEOVER, NodeHoverEvent, NodeHoverInfo, Renderer, RendererFactory

logger = logging.getLogger(__name__)

# Async-task shape size at 100% zoom.
NODE_WIDTH = 80
NODE_HEIGHT = 80

STATUS_STATE = "status"
HIGHLIGHT_STATE = "highlight"
RUNNING_STATE = "running"

Scheduler = Callable[[Callable[[], None]], None]


@dataclass(frozen=True)
class ZoomBounds:
    """Zoom floor in percent used when fitting overflowing content."""
    min: int = settings.MIN_ZOOM


def default_direction() -> GraphDirection:
    """Direction configured through WORKFLOWVIZ_DIRECTION, read on each call."""
    try:
        return GraphDirection(settings.DEFAULT_DIRECTION)
    except ValueError:
        choices = ", ".join(d.value for d in GraphDirection)
        raise ValueError(
            f"WORKFLOWVIZ_DIRECTION must be one of {choices}, got {settings.DEFAULT_DIRECTION!r}"
        ) from None


def call_soon(callback: Callable[[], None]) -> None:
    """
    Run on the next loop iteration of the running asyncio loop.

    Without a running loop the callback runs immediately, so a GraphView
    built from synchronous code settles inside its constructor. Such callers
    should pass their own scheduler (e.g. a UI toolkit's idle hook).
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        callback()
        return
    loop.call_soon(callback)


def latest_record(records: Iterable[TaskExecutionRecord], node_id: str) -> Optional[TaskExecutionRecord]:
    """Newest execution record of a node; records without start_time sort oldest."""
    matching = [r for r in records if r.node_name == node_id]
    if not matching:
        return None
    return max(
        matching,
        key=lambda r: (r.start_time is not None, r.start_time.timestamp() if r.start_time else 0.0),
    )


def status_state(status: TaskStatus) -> str:
    return f"{STATUS_STATE}:{status.value}"


class GraphView:
    """
    Owns one rendered graph for the lifetime of one compiled graph.

    Construction renders immediately and schedules exactly one settle
    callback (a fit_canvas() once the renderer's own layout pass is done).
    Without a running asyncio loop the default scheduler settles during
    construction; pass a scheduler to defer it. Tests pass one that queues
    the callback and run it themselves.
    """

    def __init__(
        self,
        graph: CompiledGraph,
        renderer_factory: RendererFactory,
        *,
        direction: Optional[GraphDirection] = None,
        container: Optional[Any] = None,
        zoom_bounds: Optional[ZoomBounds] = None,
        scheduler: Scheduler = call_soon,
    ):
        self.graph = graph
        self.zoom_bounds = zoom_bounds or ZoomBounds()
        self.layout: LayoutConfig = layout_for_graph(graph, direction or default_direction())
        self.active_highlight_status: Optional[TaskStatus] = None
        self.settled = False

        self._renderer: Renderer = renderer_factory(graph, self.layout, container)
        self._renderer.render()
        logger.debug(
            "rendered %s graph (%d nodes) with %s layout",
            graph.dsl_kind.value, len(graph.nodes), self.layout.type,
        )

        scheduler(self.settle)

    @classmethod
    def from_dsl(
        cls,
        dsl: Optional[str],
        trigger_type: Optional[TriggerType],
        renderer_factory: RendererFactory,
        *,
        catalog: Optional[Sequence[NodeDef]] = None,
        **kwargs: Any,
    ) -> GraphView:
        return cls(compile_dsl(dsl, trigger_type, catalog), renderer_factory, **kwargs)

    @property
    def renderer(self) -> Renderer:
        return self._renderer

    def settle(self) -> None:
        self.fit_canvas()
        self.settled = True

    # ---- passthroughs ----

    def change_size(self, width: float, height: float) -> None:
        self._renderer.change_size(width, height)

    def destroy(self) -> None:
        self._renderer.destroy()

    def zoom_to(self, percent: float) -> None:
        self._renderer.zoom_to(percent / 100, self._renderer.get_graph_center_point())

    def get_zoom(self) -> float:
        return self._renderer.get_zoom()

    def get_direction(self) -> GraphDirection:
        if isinstance(self.layout, HierarchicalLayout) and self.layout.rankdir == "LR":
            return GraphDirection.HORIZONTAL
        return GraphDirection.VERTICAL

    # ---- fitting ----

    def fit_canvas(self) -> None:
        """Center at natural size when it fits, else fit; never below the zoom floor."""
        if not self._check_content_overflow():
            self._renderer.fit_center()
            return
        self._fit_overflowing()

    def fit_view(self) -> None:
        """Fill the viewport; never below the zoom floor."""
        if not self._check_content_overflow():
            self._renderer.fit_view()
            return
        self._fit_overflowing()

    def _fit_overflowing(self) -> None:
        min_ratio = self.zoom_bounds.min / 100

        if self._check_content_overflow(min_ratio):
            # still too big at the floor: accept the overflow
            self._renderer.fit_center()
            self._renderer.zoom_to(min_ratio, self._renderer.get_graph_center_point())
            return

        self._renderer.fit_view()

    def _check_content_overflow(self, ratio: float = 1.0) -> bool:
        max_x = self._renderer.get_width() / ratio
        max_y = self._renderer.get_height() / ratio

        item_ids = [n.id for n in self.graph.nodes] + [e.id for e in self.graph.edges]
        for item_id in item_ids:
            bbox = self._renderer.get_canvas_bbox(item_id)
            if bbox.max_x > max_x or bbox.max_y > max_y:
                return True
        return False

    # ---- status ----

    def _task_node_ids(self) -> List[str]:
        return [n.id for n in self.graph.nodes if n.type == NodeType.ASYNC_TASK]

    def update_node_states(self, tasks: Sequence[TaskExecutionRecord]) -> None:
        for node_id in self._task_node_ids():
            record = latest_record(tasks, node_id)
            status = record.status if record else TaskStatus.INIT
            self._renderer.set_item_state(node_id, STATUS_STATE, status.value)

        running = status_state(TaskStatus.RUNNING)
        for edge in self.graph.edges:
            active = (
                running in self._renderer.get_item_states(edge.source)
                or running in self._renderer.get_item_states(edge.target)
            )
            self._renderer.set_item_state(edge.id, RUNNING_STATE, active)

    def _apply_highlight(self, status: TaskStatus, active: bool) -> None:
        state = status_state(status)
        for node_id in self._task_node_ids():
            if state in self._renderer.get_item_states(node_id):
                self._renderer.set_item_state(node_id, HIGHLIGHT_STATE, active)

    def highlight_node_state(self, status: TaskStatus, active: bool) -> None:
        """Light (or unlight) every task node stamped with `status`; one status at a time."""
        current = self.active_highlight_status
        if active and current is not None and current != status:
            self._apply_highlight(current, False)

        self._apply_highlight(status, active)

        if active:
            self.active_highlight_status = status
        elif current == status:
            self.active_highlight_status = None

    def refresh_node_state_highlight(self, previous: Optional[TaskStatus] = None) -> None:
        """
        Restore the active highlight after node states changed.

        `previous` is a status that may still be lit from before the change.
        """
        status = self.active_highlight_status
        if status is None:
            return

        if previous is not None and previous != status:
            self._apply_highlight(previous, False)

        self._apply_highlight(status, True)

    # ---- hover ----

    def config_node_action(self, mouseover_node: Callable[[NodeHoverInfo], None]) -> None:
        def on_mouseover(ev: NodeHoverEvent) -> None:
            model = self._renderer.get_node_model(ev.node_id)

            if model.type == NodeType.FLOW_NODE:
                return
            if "animate_" in ev.shape_name:
                return

            zoom = self._renderer.get_zoom()
            point = self._renderer.get_client_by_point(model.x or 0.0, model.y or 0.0)

            mouseover_node(NodeHoverInfo(
                id=ev.node_id,
                description=model.description or "",
                type=model.type,
                x=point.x,
                y=point.y,
                width=NODE_WIDTH * zoom,
                height=NODE_HEIGHT * zoom,
            ))

        self._renderer.on(NODE_MOUSEOVER, on_mouseover)
