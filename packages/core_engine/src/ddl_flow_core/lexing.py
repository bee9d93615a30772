"""Character-level helpers shared by the segmenter and the clause splitter.

Everything here keeps string offsets stable: masked characters are replaced
by spaces, never removed, so positions found in a masked copy index the
original text as well.
"""

from typing import Optional


def skip_quoted(text: str, pos: int, quote: str) -> int:
    """Return the offset just past the quoted run opening at ``pos``."""
    idx = pos + 1
    while idx < len(text):
        if text[idx] == quote:
            if text[idx + 1:idx + 2] == quote:
                idx += 2
                continue
            return idx + 1
        idx += 1
    return len(text)


def _blank(chars: list, start: int, end: int) -> None:
    for idx in range(start, end):
        if chars[idx] not in "\r\n":
            chars[idx] = " "


def mask_comments(text: str) -> str:
    chars = list(text)
    idx = 0
    while idx < len(text):
        char = text[idx]
        if char in ("'", '"'):
            idx = skip_quoted(text, idx, char)
        elif text.startswith("--", idx):
            end = text.find("\n", idx)
            end = len(text) if end == -1 else end
            _blank(chars, idx, end)
            idx = end
        elif text.startswith("/*", idx):
            end = text.find("*/", idx + 2)
            end = len(text) if end == -1 else end + 2
            _blank(chars, idx, end)
            idx = end
        else:
            idx += 1
    return "".join(chars)


def mask_literals(text: str) -> str:
    """Blank the contents of single-quoted literals, keeping the quotes."""
    chars = list(text)
    idx = 0
    while idx < len(text):
        if text[idx] == '"':
            idx = skip_quoted(text, idx, '"')
        elif text[idx] == "'":
            end = skip_quoted(text, idx, "'")
            stop = end - 1 if end - 1 > idx and text[end - 1] == "'" else end
            _blank(chars, idx + 1, stop)
            idx = end
        else:
            idx += 1
    return "".join(chars)


def find_matching_paren(text: str, open_pos: int) -> Optional[int]:
    """Offset of the ``)`` closing the ``(`` at ``open_pos``; ``None`` if unbalanced."""
    depth = 0
    idx = open_pos
    while idx < len(text):
        char = text[idx]
        if char in ("'", '"'):
            idx = skip_quoted(text, idx, char)
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return idx
        idx += 1
    return None


def find_terminator(text: str, pos: int) -> Optional[int]:
    """Offset of the next ``;`` outside quotes, starting at ``pos``."""
    idx = pos
    while idx < len(text):
        char = text[idx]
        if char in ("'", '"'):
            idx = skip_quoted(text, idx, char)
            continue
        if char == ";":
            return idx
        idx += 1
    return None
