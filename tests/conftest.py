"""Shared fixtures: in-memory stand-ins for the renderer and the editor canvas."""

from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from workflowviz.model import CompiledGraph, GraphNode
from workflowviz.renderer import BBox, ContentBBox, Point


class FakeRenderer:
    """Records calls and keeps item states the way the real renderer reports them."""

    def __init__(self, graph: CompiledGraph, layout, container=None, width=800, height=600):
        self.graph = graph
        self.layout = layout
        self.container = container
        self.width = width
        self.height = height
        self.zoom = 1.0
        self.calls: List[Tuple[str, tuple]] = []
        self.bboxes: Dict[str, BBox] = {}
        self.positions: Dict[str, Tuple[float, float]] = {}
        self.states: Dict[str, Dict[str, Any]] = {}
        self.handlers: Dict[str, List[Callable]] = {}

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, args))

    def called(self, name: str) -> List[tuple]:
        return [args for n, args in self.calls if n == name]

    def render(self) -> None:
        self._record("render")

    def destroy(self) -> None:
        self._record("destroy")

    def change_size(self, width, height) -> None:
        self._record("change_size", width, height)
        self.width, self.height = width, height

    def zoom_to(self, ratio, center) -> None:
        self._record("zoom_to", ratio, center)
        self.zoom = ratio

    def get_zoom(self) -> float:
        return self.zoom

    def get_width(self) -> float:
        return self.width

    def get_height(self) -> float:
        return self.height

    def get_graph_center_point(self) -> Point:
        return Point(x=self.width / 2, y=self.height / 2)

    def fit_center(self) -> None:
        self._record("fit_center")

    def fit_view(self) -> None:
        self._record("fit_view")

    def get_canvas_bbox(self, item_id) -> BBox:
        return self.bboxes.get(item_id, BBox(0, 0, 10, 10))

    def get_node_model(self, node_id) -> GraphNode:
        node = self.graph.node(node_id)
        x, y = self.positions.get(node_id, (0.0, 0.0))
        return GraphNode(id=node.id, type=node.type, label=node.label, description=node.description, x=x, y=y)

    def get_client_by_point(self, x, y) -> Point:
        return Point(x=x + 100, y=y + 50)

    def get_item_states(self, item_id) -> List[str]:
        out = []
        for name, value in self.states.get(item_id, {}).items():
            if value is True:
                out.append(name)
            elif value not in (False, None):
                out.append(f"{name}:{value}")
        return out

    def set_item_state(self, item_id, state, value) -> None:
        self.states.setdefault(item_id, {})[state] = value

    def on(self, event, handler) -> None:
        self.handlers.setdefault(event, []).append(handler)

    def emit(self, event, payload) -> None:
        for handler in self.handlers.get(event, []):
            handler(payload)


class FakeCanvas:
    """Editor canvas with a settable zoom-to-fit result."""

    def __init__(self, zoom: float = 1.0, fit_ratio: float = 1.0):
        self.ratio = zoom
        self.fit_ratio = fit_ratio
        self.zoom_calls: List[Tuple[float, Point]] = []
        self.centered = 0
        self.border_widths: List[float] = []
        self.content = ContentBBox(x=10, y=20, width=200, height=100)

    def zoom(self) -> float:
        return self.ratio

    def zoom_to(self, ratio, center) -> None:
        self.zoom_calls.append((ratio, center))
        self.ratio = ratio

    def zoom_to_fit(self) -> None:
        self.ratio = self.fit_ratio

    def center_content(self) -> None:
        self.centered += 1

    def get_content_bbox(self) -> ContentBBox:
        return self.content

    def style_selection_boxes(self, border_width) -> None:
        self.border_widths.append(border_width)


@pytest.fixture
def renderers() -> List[FakeRenderer]:
    """Every renderer built by `renderer_factory` in this test."""
    return []


@pytest.fixture
def renderer_factory(renderers):
    def factory(graph, layout, container: Optional[Any] = None) -> FakeRenderer:
        r = FakeRenderer(graph, layout, container)
        renderers.append(r)
        return r
    return factory


@pytest.fixture
def deferred():
    """A scheduler that queues callbacks instead of running them."""
    queue: List[Callable[[], None]] = []
    return queue


@pytest.fixture
def workflow_dsl() -> str:
    return """
trigger:
  schedule: "0 * * * *"
workflow:
  - ref: s1
    task: start
  - ref: A
    task: git_clone:1.0.0
    needs: [s1]
  - ref: B
    name: Build the docker image
    image: alpine:3.19
    task: shell
    needs: [s1]
  - ref: X
    task: notify:1.0.0
    needs: [A, B]
  - ref: Y
    task: report:1.0.0
    needs: [B, A]
  - ref: e1
    task: end
    needs: [X, Y]
"""


@pytest.fixture
def make_pipeline():
    """Pipeline DSL with `count` tasks t0..t{count-1}."""
    def make(count: int) -> str:
        lines = ["pipeline:"]
        for i in range(count):
            lines.append(f"  - ref: t{i}")
            lines.append(f"    task: step_{i}:1.0.0")
        return "\n".join(lines) + "\n"
    return make


@pytest.fixture
def make_canvas():
    return FakeCanvas
