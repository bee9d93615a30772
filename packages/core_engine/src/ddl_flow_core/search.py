from ddl_flow_core.model import SchemaGraph


def filter_graph(graph: SchemaGraph, query: str) -> SchemaGraph:
    """Tables whose name or a column name contains ``query``, ignoring case.

    Only foreign keys with both ends among the kept tables survive. A blank
    query keeps everything.
    """
    needle = (query or "").strip().lower()
    if not needle:
        return SchemaGraph(tables=list(graph.tables), fks=list(graph.fks))

    tables = [
        table
        for table in graph.tables
        if needle in table.name.lower() or any(needle in col.name.lower() for col in table.columns)
    ]
    kept = {table.name for table in tables}
    fks = [fk for fk in graph.fks if fk.from_table in kept and fk.to_table in kept]
    return SchemaGraph(tables=tables, fks=fks)
