from ddl_flow_core.config import DIRECTIONS, LayoutConfig, load_layout_config
from ddl_flow_core.examples import EXAMPLE_SQL
from ddl_flow_core.flow import FlowEdge, FlowNode, Position, build_flow, flow_to_dict
from ddl_flow_core.identifiers import Ident, normalize_ident
from ddl_flow_core.layout import layout, layout_graph
from ddl_flow_core.loader import load_yaml_document, read_ddl
from ddl_flow_core.model import Column, ForeignKey, SchemaGraph, Table
from ddl_flow_core.parser import parse_postgres_schema
from ddl_flow_core.schema import graph_issues, load_schema, schema_issues
from ddl_flow_core.search import filter_graph
from ddl_flow_core.sharing import ShareDecodeError, load_from_url, share_url
from ddl_flow_core.stats import format_stats, graph_stats

__all__ = [
    "build_flow",
    "Column",
    "DIRECTIONS",
    "EXAMPLE_SQL",
    "filter_graph",
    "FlowEdge",
    "flow_to_dict",
    "FlowNode",
    "ForeignKey",
    "format_stats",
    "graph_issues",
    "graph_stats",
    "Ident",
    "layout",
    "layout_graph",
    "LayoutConfig",
    "load_from_url",
    "load_layout_config",
    "load_schema",
    "load_yaml_document",
    "normalize_ident",
    "parse_postgres_schema",
    "Position",
    "read_ddl",
    "schema_issues",
    "SchemaGraph",
    "share_url",
    "ShareDecodeError",
    "Table",
]
