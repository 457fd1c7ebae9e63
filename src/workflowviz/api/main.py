from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from workflowviz.compiler import compile_dsl
from workflowviz.errors import DslParseError
from workflowviz.layout import layout_for_graph, select_layout
from workflowviz.model import DslKind, GraphDirection, NodeDef, TriggerType
from workflowviz.view import default_direction

logger = logging.getLogger(__name__)

app = FastAPI(title="workflowviz view service")

# -------------------- Schemas --------------------

class NodeDefIn(BaseModel):
    type: str
    icon: Optional[str] = None
    webhook: Optional[str] = None

class GraphRequest(BaseModel):
    dsl: Optional[str] = None
    triggerType: Optional[TriggerType] = None
    direction: GraphDirection = Field(default_factory=default_direction)
    catalog: Optional[list[NodeDefIn]] = None

class GraphResponse(BaseModel):
    dslKind: DslKind
    nodes: list[dict[str, Any]]
    edges: list[dict[str, Any]]
    layout: dict[str, Any]

class LayoutRequest(BaseModel):
    dslKind: DslKind
    nodeCount: int = Field(ge=0)
    direction: GraphDirection = Field(default_factory=default_direction)

# -------------------- Endpoints --------------------

@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}

@app.post("/view/graph", response_model=GraphResponse)
async def view_graph(req: GraphRequest):
    catalog = None
    if req.catalog is not None:
        catalog = [NodeDef(type=c.type, icon=c.icon, webhook=c.webhook) for c in req.catalog]

    try:
        graph = compile_dsl(req.dsl, req.triggerType, catalog)
    except DslParseError as e:
        logger.info("rejected DSL: %s", e.message)
        raise HTTPException(status_code=422, detail={"kind": e.kind, "message": e.message, "details": {k: str(v) for k, v in e.details.items()}})

    data = graph.to_dict()
    return GraphResponse(
        dslKind=graph.dsl_kind,
        nodes=data["nodes"],
        edges=data["edges"],
        layout=layout_for_graph(graph, req.direction).to_dict(),
    )

@app.post("/view/layout")
async def view_layout(req: LayoutRequest) -> dict[str, Any]:
    return select_layout(req.dslKind, req.nodeCount, req.direction).to_dict()
