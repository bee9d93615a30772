import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ddl_flow_core.identifiers import trim_quotes
from ddl_flow_core.lexing import find_matching_paren, mask_literals, skip_quoted
from ddl_flow_core.model import Column

logger = logging.getLogger(__name__)

CONSTRAINT_RE = re.compile(r'^constraint\s+(?:"(?:[^"]|"")+"|[\w$]+)\s*(.*)$', re.IGNORECASE | re.DOTALL)
PRIMARY_KEY_LIST_RE = re.compile(r"^primary\s+key\s*\(([^)]*)\)", re.IGNORECASE)
CHECK_RE = re.compile(r"^check\s*\(", re.IGNORECASE)
UNIQUE_LIST_RE = re.compile(r"^unique\s*\(", re.IGNORECASE)
FOREIGN_KEY_RE = re.compile(r"^foreign\s+key\s*\(", re.IGNORECASE)

COLUMN_RE = re.compile(
    r'^(?:"(?P<quoted>(?:[^"]|"")+)"|`(?P<ticked>[^`]+)`|(?P<bare>[\w$]+))\s+'
    r"(?P<type>"
    r"(?:double\s+precision"
    r"|character\s+varying"
    r"|bit\s+varying"
    r"|(?:timestamp|time)(?:\s*\(\s*\d+\s*\))?\s+with(?:out)?\s+time\s+zone"
    r'|"[^"]+"(?:\."[^"]+")?'
    r"|[^\s(),]+)"
    r"(?:\s*\([^)]*\))?"
    r"(?:\s*\[\s*\d*\s*\])*"
    r")",
    re.IGNORECASE,
)
NOT_NULL_RE = re.compile(r"\bnot\s+null\b", re.IGNORECASE)
UNIQUE_RE = re.compile(r"\bunique\b", re.IGNORECASE)
INLINE_PK_RE = re.compile(r"\bprimary\s+key\b", re.IGNORECASE)
DEFAULT_RE = re.compile(r"\bdefault\s+", re.IGNORECASE)
SET_DEFAULT_ACTION_RE = re.compile(r"\bon\s+(?:delete|update)\s+set\s+default\b", re.IGNORECASE)
CAST_RE = re.compile(r'\s*::\s*(?:"[^"]+"|[\w.]+)(?:\s*\([^)]*\))?(?:\[\])*')

PRIMARY_KEY = "primary_key"
CHECK = "check"
UNIQUE = "unique"
FOREIGN_KEY = "foreign_key"
CONSTRAINT = "constraint"
COLUMN = "column"
UNKNOWN = "unknown"


@dataclass
class ClauseResult:
    kind: str
    text: str
    column: Optional[Column] = None
    pk_columns: List[str] = field(default_factory=list)


def split_clauses(body: str) -> List[str]:
    """Split a table body on commas at parenthesis depth 0."""
    parts: List[str] = []
    current: List[str] = []
    depth = 0
    in_single = False
    in_double = False

    for char in body:
        if char == "'" and not in_double:
            in_single = not in_single
        elif char == '"' and not in_single:
            in_double = not in_double
        elif not in_single and not in_double:
            if char == "(":
                depth += 1
            elif char == ")":
                depth = max(0, depth - 1)
            elif char == "," and depth == 0:
                parts.append("".join(current).strip())
                current = []
                continue
        current.append(char)

    if current:
        parts.append("".join(current).strip())
    return [part for part in parts if part]


def split_column_list(text: str) -> List[str]:
    names = [trim_quotes(part.strip().replace("`", '"')) for part in text.split(",")]
    return [name for name in names if name]


def _read_default(clause: str, pos: int) -> Optional[str]:
    if pos >= len(clause):
        return None
    char = clause[pos]
    if char == "'":
        end = skip_quoted(clause, pos, "'")
    elif char == "(":
        close = find_matching_paren(clause, pos)
        end = len(clause) if close is None else close + 1
    else:
        depth = 0
        end = pos
        while end < len(clause):
            current = clause[end]
            if current in ("'", '"'):
                end = skip_quoted(clause, end, current)
                continue
            if current == "(":
                depth += 1
            elif current == ")":
                if depth == 0:
                    break
                depth -= 1
            elif current.isspace() and depth == 0:
                break
            end += 1
    cast = CAST_RE.match(clause, end)
    if cast:
        end = cast.end()
    value = clause[pos:end].strip()
    return value or None


def parse_column(clause: str) -> Optional[Column]:
    match = COLUMN_RE.match(clause)
    if not match:
        return None

    name = match.group("bare") or match.group("ticked")
    if name is None:
        name = match.group("quoted").replace('""', '"')
    col_type = " ".join(match.group("type").split())

    # Keyword tests must not see the inside of string literals.
    masked = mask_literals(clause)
    rest = masked[match.end():]
    # FK actions may say SET DEFAULT; that is not a column default.
    default_scope = SET_DEFAULT_ACTION_RE.sub(lambda m: " " * len(m.group()), rest)

    default_value = None
    default_match = DEFAULT_RE.search(default_scope)
    if default_match:
        default_value = _read_default(clause, match.end() + default_match.end())

    return Column(
        name=name,
        type=col_type,
        pk=bool(INLINE_PK_RE.search(rest)),
        nullable=not NOT_NULL_RE.search(rest),
        unique=bool(UNIQUE_RE.search(rest)),
        default_value=default_value,
    )


def classify_clause(clause: str) -> ClauseResult:
    constraint = CONSTRAINT_RE.match(clause)
    if constraint:
        pk_match = PRIMARY_KEY_LIST_RE.match(constraint.group(1))
        if pk_match:
            return ClauseResult(PRIMARY_KEY, clause, pk_columns=split_column_list(pk_match.group(1)))
        return ClauseResult(CONSTRAINT, clause)

    pk_match = PRIMARY_KEY_LIST_RE.match(clause)
    if pk_match:
        return ClauseResult(PRIMARY_KEY, clause, pk_columns=split_column_list(pk_match.group(1)))
    if CHECK_RE.match(clause):
        return ClauseResult(CHECK, clause)
    if UNIQUE_LIST_RE.match(clause):
        return ClauseResult(UNIQUE, clause)
    if FOREIGN_KEY_RE.match(clause):
        return ClauseResult(FOREIGN_KEY, clause)

    column = parse_column(clause)
    if column is None:
        return ClauseResult(UNKNOWN, clause)
    return ClauseResult(COLUMN, clause, column=column)


def parse_columns(body: str) -> Tuple[List[Column], List[str]]:
    """Columns in declaration order plus the primary key column names."""
    columns: List[Column] = []
    pk: List[str] = []

    for clause in split_clauses(body):
        result = classify_clause(clause)
        if result.kind == PRIMARY_KEY:
            for name in result.pk_columns:
                if name not in pk:
                    pk.append(name)
        elif result.kind == COLUMN:
            columns.append(result.column)
            if result.column.pk and result.column.name not in pk:
                pk.append(result.column.name)
        elif result.kind == UNKNOWN:
            logger.debug("Dropped unrecognized clause: %.60s", result.text)

    return columns, pk
