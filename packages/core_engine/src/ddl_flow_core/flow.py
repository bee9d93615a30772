"""Node/edge records handed to the rendering surface."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

from ddl_flow_core.model import Column, SchemaGraph


@dataclass(frozen=True)
class Position:
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class ColumnView:
    column: Column
    has_source_handle: bool = False
    has_target_handle: bool = False

    def to_dict(self) -> Dict[str, Any]:
        payload = self.column.to_dict()
        payload["hasSourceHandle"] = self.has_source_handle
        payload["hasTargetHandle"] = self.has_target_handle
        return payload


@dataclass(frozen=True)
class TableNodeData:
    title: str
    columns: Tuple[ColumnView, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "columns": [col.to_dict() for col in self.columns]}


@dataclass(frozen=True)
class FlowNode:
    id: str
    data: TableNodeData
    position: Position = field(default_factory=Position)
    width: Optional[float] = None
    height: Optional[float] = None
    type: str = "table"

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "data": self.data.to_dict(),
            "position": {"x": self.position.x, "y": self.position.y},
        }
        if self.width is not None:
            payload["width"] = self.width
        if self.height is not None:
            payload["height"] = self.height
        return payload


@dataclass(frozen=True)
class FlowEdge:
    id: str
    source: str
    target: str
    source_handle: str
    target_handle: str
    label: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "sourceHandle": self.source_handle,
            "target": self.target,
            "targetHandle": self.target_handle,
            "label": self.label,
        }


def column_connections(graph: SchemaGraph) -> Dict[Tuple[str, str], Set[str]]:
    """Map ``(table, column)`` to the FK roles it plays: ``source`` and/or ``target``."""
    connections: Dict[Tuple[str, str], Set[str]] = {}
    for fk in graph.fks:
        connections.setdefault((fk.from_table, fk.from_column), set()).add("source")
        connections.setdefault((fk.to_table, fk.to_column), set()).add("target")
    return connections


def build_flow(graph: SchemaGraph) -> Tuple[List[FlowNode], List[FlowEdge]]:
    connections = column_connections(graph)

    nodes: List[FlowNode] = []
    for table in graph.tables:
        views = []
        for col in table.columns:
            roles = connections.get((table.name, col.name), set())
            views.append(
                ColumnView(
                    column=col,
                    has_source_handle="source" in roles,
                    has_target_handle="target" in roles,
                )
            )
        nodes.append(FlowNode(id=table.name, data=TableNodeData(title=table.name, columns=tuple(views))))

    edges = [
        FlowEdge(
            id=f"fk-{fk.from_table}-{fk.from_column}-{fk.to_table}-{fk.to_column}-{idx}",
            source=fk.from_table,
            target=fk.to_table,
            source_handle=f"{fk.from_column}-source",
            target_handle=f"{fk.to_column}-target",
            label=fk.name or f"{fk.from_column} → {fk.to_column}",
        )
        for idx, fk in enumerate(graph.fks)
    ]
    return nodes, edges


def flow_to_dict(nodes: List[FlowNode], edges: List[FlowEdge]) -> Dict[str, Any]:
    return {
        "nodes": [node.to_dict() for node in nodes],
        "edges": [edge.to_dict() for edge in edges],
    }
