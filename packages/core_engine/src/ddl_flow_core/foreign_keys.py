import logging
import re
from typing import Dict, Iterable, List, Optional, Tuple

from ddl_flow_core.clauses import parse_column, split_clauses, split_column_list
from ddl_flow_core.identifiers import canonical_name, trim_quotes
from ddl_flow_core.lexing import mask_literals
from ddl_flow_core.model import ForeignKey, Table
from ddl_flow_core.segmenter import AlterTableBlock, CreateTableBlock

logger = logging.getLogger(__name__)

ACTIONS = ("CASCADE", "SET NULL", "SET DEFAULT", "RESTRICT", "NO ACTION")

_NAME = r'(?:"(?:[^"]|"")+"|`[^`]+`|[\w$]+)'
_IDENT = rf"{_NAME}(?:\s*\.\s*{_NAME})?"
_ACTION = r"(?:cascade|set\s+null|set\s+default|restrict|no\s+action)"
_ACTIONS_TAIL = rf"(?P<actions>(?:\s+match\s+(?:full|partial|simple))?(?:\s+on\s+(?:delete|update)\s+{_ACTION})*)"

ADD_FOREIGN_KEY_RE = re.compile(
    rf"\badd\s+(?:constraint\s+(?P<name>{_NAME})\s+)?"
    rf"foreign\s+key\s*\((?P<from_cols>[^)]*)\)\s*"
    rf"references\s+(?P<target>{_IDENT})\s*(?:\((?P<to_cols>[^)]*)\))?"
    rf"{_ACTIONS_TAIL}",
    re.IGNORECASE,
)
ADD_PRIMARY_KEY_RE = re.compile(
    rf"\badd\s+(?:constraint\s+{_NAME}\s+)?primary\s+key\s*\((?P<cols>[^)]*)\)",
    re.IGNORECASE,
)
TABLE_FOREIGN_KEY_RE = re.compile(
    rf"^(?:constraint\s+(?P<name>{_NAME})\s+)?"
    rf"foreign\s+key\s*\((?P<from_cols>[^)]*)\)\s*"
    rf"references\s+(?P<target>{_IDENT})\s*(?:\((?P<to_cols>[^)]*)\))?"
    rf"{_ACTIONS_TAIL}",
    re.IGNORECASE,
)
INLINE_REFERENCES_RE = re.compile(
    rf"(?:\bconstraint\s+(?P<name>{_NAME})\s+)?"
    rf"\breferences\s+(?P<target>{_IDENT})\s*(?:\((?P<to_cols>[^)]*)\))?"
    rf"{_ACTIONS_TAIL}",
    re.IGNORECASE,
)
ACTION_RE = re.compile(rf"on\s+(delete|update)\s+({_ACTION})", re.IGNORECASE)


def _constraint_name(raw: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    return trim_quotes(raw.replace("`", '"'))


def parse_actions(text: str) -> Tuple[Optional[str], Optional[str]]:
    on_delete = None
    on_update = None
    for match in ACTION_RE.finditer(text or ""):
        action = " ".join(match.group(2).upper().split())
        if match.group(1).lower() == "delete":
            on_delete = action
        else:
            on_update = action
    return on_delete, on_update


def zip_columns(
    from_table: str,
    from_cols: List[str],
    to_table: str,
    to_cols: List[str],
    name: Optional[str] = None,
    actions: str = "",
) -> List[ForeignKey]:
    """One edge per positional column pair; the longer side is truncated."""
    if not from_table or not to_table:
        return []
    if len(from_cols) != len(to_cols):
        logger.debug(
            "FK %s -> %s has %d/%d columns; truncating",
            from_table,
            to_table,
            len(from_cols),
            len(to_cols),
        )
    on_delete, on_update = parse_actions(actions)
    return [
        ForeignKey(
            from_table=from_table,
            from_column=from_col,
            to_table=to_table,
            to_column=to_col,
            name=name,
            on_delete=on_delete,
            on_update=on_update,
        )
        for from_col, to_col in zip(from_cols, to_cols)
    ]


def index_tables(tables: Iterable[Table]) -> Dict[str, Table]:
    """First table per canonical name; later duplicates never shadow it."""
    by_name: Dict[str, Table] = {}
    for table in tables:
        by_name.setdefault(table.name, table)
    return by_name


def _target_columns(to_cols: Optional[str], target: str, tables: Dict[str, Table]) -> List[str]:
    if to_cols is not None:
        return split_column_list(to_cols)
    table = tables.get(target)
    if table is None:
        return []
    return list(table.pk)


def _key_foreign_keys(from_table: str, match: "re.Match", tables: Dict[str, Table]) -> List[ForeignKey]:
    """Edges for ``FOREIGN KEY (...) REFERENCES t [(...)]`` in ALTER and CREATE bodies alike."""
    target = canonical_name(match.group("target"))
    return zip_columns(
        from_table,
        split_column_list(match.group("from_cols")),
        target,
        _target_columns(match.group("to_cols"), target, tables),
        name=_constraint_name(match.group("name")),
        actions=match.group("actions"),
    )


def alter_foreign_keys(
    blocks: Iterable[AlterTableBlock],
    tables: Iterable[Table] = (),
) -> List[ForeignKey]:
    by_name = index_tables(tables)
    fks: List[ForeignKey] = []
    for block in blocks:
        from_table = canonical_name(block.target)
        for match in ADD_FOREIGN_KEY_RE.finditer(block.body):
            fks.extend(_key_foreign_keys(from_table, match, by_name))
    return fks


def alter_primary_keys(blocks: Iterable[AlterTableBlock]) -> Dict[str, List[str]]:
    keys: Dict[str, List[str]] = {}
    for block in blocks:
        for match in ADD_PRIMARY_KEY_RE.finditer(block.body):
            target = keys.setdefault(canonical_name(block.target), [])
            target.extend(col for col in split_column_list(match.group("cols")) if col not in target)
    return keys


def _clause_foreign_keys(from_table: str, clause: str, tables: Dict[str, Table]) -> List[ForeignKey]:
    table_level = TABLE_FOREIGN_KEY_RE.match(clause)
    if table_level:
        return _key_foreign_keys(from_table, table_level, tables)

    column = parse_column(clause)
    if column is None:
        return []
    reference = INLINE_REFERENCES_RE.search(mask_literals(clause))
    if reference is None:
        return []

    target = canonical_name(reference.group("target"))
    to_cols = _target_columns(reference.group("to_cols"), target, tables)
    if reference.group("to_cols") is not None:
        to_cols = to_cols[:1]
    elif len(to_cols) != 1:
        logger.debug("Cannot resolve implicit reference %s.%s -> %s", from_table, column.name, target)
        return []
    return zip_columns(
        from_table,
        [column.name],
        target,
        to_cols,
        name=_constraint_name(reference.group("name")),
        actions=reference.group("actions"),
    )


def inline_foreign_keys(blocks: Iterable[CreateTableBlock], tables: Iterable[Table]) -> List[ForeignKey]:
    """Edges declared inside CREATE TABLE bodies, in source order."""
    by_name = index_tables(tables)
    fks: List[ForeignKey] = []
    for block in blocks:
        from_table = canonical_name(block.header)
        for clause in split_clauses(block.body):
            fks.extend(_clause_foreign_keys(from_table, clause, by_name))
    return fks
