from typing import Any, Dict

from ddl_flow_core.model import SchemaGraph


def graph_stats(graph: SchemaGraph) -> Dict[str, Any]:
    schemas = sorted({table.schema for table in graph.tables if table.schema})
    return {
        "table_count": len(graph.tables),
        "foreign_key_count": len(graph.fks),
        "column_count": sum(len(table.columns) for table in graph.tables),
        "primary_key_columns": sum(1 for table in graph.tables for col in table.columns if col.pk),
        "schemas": schemas,
    }


def format_stats(stats: Dict[str, Any]) -> str:
    lines = [
        f"Tables: {stats['table_count']}",
        f"Foreign Keys: {stats['foreign_key_count']}",
        f"Columns: {stats['column_count']}  (PK: {stats['primary_key_columns']})",
    ]
    if stats["schemas"]:
        lines.append(f"Schemas: {', '.join(stats['schemas'])}")
    return "\n".join(lines)
