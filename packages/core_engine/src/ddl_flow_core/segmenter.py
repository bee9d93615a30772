import logging
import re
from dataclasses import dataclass
from typing import Iterator, List

from ddl_flow_core.identifiers import read_identifier
from ddl_flow_core.lexing import find_matching_paren, find_terminator, mask_comments

logger = logging.getLogger(__name__)

CREATE_TABLE_RE = re.compile(
    r"\bcreate\s+(?:(?:global|local)\s+)?(?:(?:temp|temporary|unlogged)\s+)?"
    r"table\s+(?:if\s+not\s+exists\s+)?",
    flags=re.IGNORECASE,
)
ALTER_TABLE_RE = re.compile(
    r"\balter\s+table\s+(?:if\s+exists\s+)?(?:only\s+)?",
    flags=re.IGNORECASE,
)


@dataclass(frozen=True)
class CreateTableBlock:
    header: str
    body: str


@dataclass(frozen=True)
class AlterTableBlock:
    target: str
    body: str


def iter_create_tables(sql: str) -> Iterator[CreateTableBlock]:
    """Yield every well-formed ``CREATE TABLE <ident> ( ... );`` in source order.

    Statements with unbalanced parentheses, no body, or no terminating ``;``
    right after the closing parenthesis are skipped.
    """
    text = mask_comments(sql)
    for match in CREATE_TABLE_RE.finditer(text):
        ident = read_identifier(text, match.end())
        if ident is None:
            logger.debug("CREATE TABLE at %d has no identifier; skipped", match.start())
            continue
        header, pos = ident
        while pos < len(text) and text[pos].isspace():
            pos += 1
        if pos >= len(text) or text[pos] != "(":
            logger.debug("CREATE TABLE %s has no column list; skipped", header)
            continue
        close = find_matching_paren(text, pos)
        if close is None:
            logger.debug("CREATE TABLE %s is unbalanced; skipped", header)
            continue
        tail = close + 1
        while tail < len(text) and text[tail].isspace():
            tail += 1
        if tail >= len(text) or text[tail] != ";":
            logger.debug("CREATE TABLE %s is not terminated; skipped", header)
            continue
        yield CreateTableBlock(header=header, body=text[pos + 1:close].strip())


def collect_create_tables(sql: str) -> List[CreateTableBlock]:
    return list(iter_create_tables(sql))


def iter_alter_tables(sql: str) -> Iterator[AlterTableBlock]:
    text = mask_comments(sql)
    for match in ALTER_TABLE_RE.finditer(text):
        ident = read_identifier(text, match.end())
        if ident is None:
            continue
        target, pos = ident
        end = find_terminator(text, pos)
        if end is None:
            logger.debug("ALTER TABLE %s is not terminated; skipped", target)
            continue
        yield AlterTableBlock(target=target, body=text[pos:end].strip())
