"""
Capabilities the view layer needs from the graph renderer and the editor canvas.

The rendering/layout engine itself is external; these protocols name the
calls the controllers make on it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol

from .layout import LayoutConfig
from .model import CompiledGraph, GraphNode, NodeType

NODE_MOUSEOVER = "node:mouseover"


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class BBox:
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


@dataclass(frozen=True)
class NodeHoverEvent:
    """Raw hover event from the renderer: which node, which of its shapes."""
    node_id: str
    shape_name: str = ""


@dataclass(frozen=True)
class NodeHoverInfo:
    """What the hover callback receives, in client (screen) space."""
    id: str
    description: str
    type: NodeType
    x: float
    y: float
    width: float
    height: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "type": self.type.value,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }


class Renderer(Protocol):
    """
    A constructed graph renderer instance.

    Item states follow the usual convention: a boolean state shows up in
    get_item_states() as its bare name ("highlight"), any other value as
    "name:value" ("status:RUNNING").
    """

    def render(self) -> None: ...

    def destroy(self) -> None: ...

    def change_size(self, width: float, height: float) -> None: ...

    def zoom_to(self, ratio: float, center: Point) -> None: ...

    def get_zoom(self) -> float: ...

    def get_width(self) -> float: ...

    def get_height(self) -> float: ...

    def get_graph_center_point(self) -> Point: ...

    def fit_center(self) -> None: ...

    def fit_view(self) -> None: ...

    def get_canvas_bbox(self, item_id: str) -> BBox: ...

    def get_node_model(self, node_id: str) -> GraphNode: ...

    def get_client_by_point(self, x: float, y: float) -> Point: ...

    def get_item_states(self, item_id: str) -> List[str]: ...

    def set_item_state(self, item_id: str, state: str, value: Any) -> None: ...

    def on(self, event: str, handler: Callable[[NodeHoverEvent], None]) -> None: ...


# construct(graph data, layout config, container) -> renderer instance
RendererFactory = Callable[[CompiledGraph, LayoutConfig, Optional[Any]], Renderer]


@dataclass(frozen=True)
class ContentBBox:
    x: float
    y: float
    width: float
    height: float


class Canvas(Protocol):
    """Editor canvas as seen by the zoom tool. Zoom values are ratios (1.0 = 100%)."""

    def zoom(self) -> float: ...

    def zoom_to(self, ratio: float, center: Point) -> None: ...

    def zoom_to_fit(self) -> None: ...

    def center_content(self) -> None: ...

    def get_content_bbox(self) -> ContentBBox: ...

    def style_selection_boxes(self, border_width: float) -> None: ...
