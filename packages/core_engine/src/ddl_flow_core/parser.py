import logging
from typing import List

from ddl_flow_core.clauses import parse_columns
from ddl_flow_core.foreign_keys import alter_foreign_keys, alter_primary_keys, inline_foreign_keys
from ddl_flow_core.identifiers import normalize_ident
from ddl_flow_core.model import SchemaGraph, Table
from ddl_flow_core.segmenter import collect_create_tables, iter_alter_tables

logger = logging.getLogger(__name__)


def parse_postgres_schema(sql: str) -> SchemaGraph:
    """Extract tables and foreign keys from free-form Postgres DDL.

    The parser is total: malformed statements and clauses it does not
    understand are skipped, so any string yields a well-formed graph.

    Tables keep first-seen order and repeated CREATE TABLE statements are not
    merged. Foreign keys declared through ALTER TABLE come first, followed by
    the ones declared inside CREATE TABLE bodies.
    """
    if not isinstance(sql, str):
        raise TypeError(f"DDL text must be a string, got {type(sql).__name__}")

    creates = collect_create_tables(sql)
    alters = list(iter_alter_tables(sql))

    tables: List[Table] = []
    for block in creates:
        ident = normalize_ident(block.header)
        if not ident.table:
            continue
        columns, pk = parse_columns(block.body)
        tables.append(Table(name=ident.canonical, schema=ident.schema, columns=columns, pk=pk))

    for name, pk in alter_primary_keys(alters).items():
        for table in tables:
            if table.name == name:
                table.add_pk(pk)

    for table in tables:
        table.mark_pk_columns()

    fks = alter_foreign_keys(alters, tables)
    fks.extend(inline_foreign_keys(creates, tables))

    logger.debug("Parsed %d tables and %d foreign keys", len(tables), len(fks))
    return SchemaGraph(tables=tables, fks=fks)
