import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

BARE_PART_RE = re.compile(r"[\w$]+")


@dataclass(frozen=True)
class Ident:
    schema: Optional[str]
    table: str

    @property
    def canonical(self) -> str:
        if self.schema:
            return f"{self.schema}.{self.table}"
        return self.table


def trim_quotes(value: str) -> str:
    return value.strip('"')


def _split_dotted(token: str) -> List[str]:
    """Split on dots that sit outside double quotes, dropping all whitespace."""
    parts: List[str] = []
    current: List[str] = []
    in_quote = False
    for char in token:
        if char.isspace():
            continue
        if char == '"':
            in_quote = not in_quote
        elif not in_quote:
            if char == ".":
                parts.append("".join(current))
                current = []
                continue
        current.append(char)
    parts.append("".join(current))
    return parts


def normalize_ident(raw: str) -> Ident:
    """Turn ``writer_schema.sites`` / ``"a"."b"`` / ```t``` into an :class:`Ident`.

    Whitespace is dropped everywhere, quoted or not. Exactly two dotted parts
    yield ``(schema, table)``; anything else degrades to an unqualified name
    taken from the first part.
    """
    parts = _split_dotted(raw.replace("`", '"'))
    if len(parts) == 2:
        return Ident(schema=trim_quotes(parts[0]), table=trim_quotes(parts[1]))
    return Ident(schema=None, table=trim_quotes(parts[0]))


def canonical_name(raw: str) -> str:
    return normalize_ident(raw).canonical


def _read_part(text: str, pos: int) -> Optional[int]:
    if pos >= len(text):
        return None
    char = text[pos]
    if char in ('"', "`"):
        idx = pos + 1
        while idx < len(text):
            if text[idx] == char:
                if text[idx + 1:idx + 2] == char:
                    idx += 2
                    continue
                return idx + 1
            idx += 1
        return None
    match = BARE_PART_RE.match(text, pos)
    if match:
        return match.end()
    return None


def read_identifier(text: str, pos: int) -> Optional[Tuple[str, int]]:
    """Scan one possibly dotted, possibly quoted identifier starting at ``pos``.

    Leading whitespace is skipped. Returns the raw token and the offset just
    past it, or ``None`` when no identifier starts there.
    """
    while pos < len(text) and text[pos].isspace():
        pos += 1
    start = pos
    end = _read_part(text, pos)
    if end is None:
        return None

    while True:
        probe = end
        while probe < len(text) and text[probe].isspace():
            probe += 1
        if probe >= len(text) or text[probe] != ".":
            break
        probe += 1
        while probe < len(text) and text[probe].isspace():
            probe += 1
        next_end = _read_part(text, probe)
        if next_end is None:
            break
        end = next_end

    return text[start:end], end
