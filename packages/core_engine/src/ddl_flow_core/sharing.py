"""Shareable links carrying the DDL text in a ``schema`` query parameter.

The token is base64 over the URI-component encoding of the text, which is
what browsers produce with ``btoa(encodeURIComponent(sql))``.
"""

import base64
import binascii
import re
from typing import Optional
from urllib.parse import parse_qsl, quote, unquote, urlencode, urlsplit, urlunsplit

SHARE_PARAM = "schema"
URI_COMPONENT_SAFE = "-_.!~*'()"
MALFORMED_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class ShareDecodeError(ValueError):
    """A share token was present but could not be decoded."""


def encode_share_token(sql: str) -> str:
    encoded = quote(sql, safe=URI_COMPONENT_SAFE)
    return base64.b64encode(encoded.encode("ascii")).decode("ascii")


def decode_share_token(token: str) -> str:
    try:
        raw = base64.b64decode(token, validate=True).decode("ascii")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise ShareDecodeError(f"Share token is not valid base64: {exc}") from exc
    if MALFORMED_ESCAPE_RE.search(raw):
        raise ShareDecodeError("Share token contains a malformed percent escape")
    try:
        return unquote(raw, errors="strict")
    except UnicodeDecodeError as exc:
        raise ShareDecodeError(f"Share token is not valid UTF-8: {exc}") from exc


def share_url(sql: str, base_url: str) -> str:
    parts = urlsplit(base_url)
    query = [(key, value) for key, value in parse_qsl(parts.query, keep_blank_values=True) if key != SHARE_PARAM]
    query.append((SHARE_PARAM, encode_share_token(sql)))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


def load_from_url(url: str) -> Optional[str]:
    """DDL text carried by ``url``.

    Returns ``None`` when the URL has no (or an empty) ``schema`` parameter
    and raises :class:`ShareDecodeError` when one is present but corrupt.
    """
    for key, value in parse_qsl(urlsplit(url).query, keep_blank_values=True):
        if key == SHARE_PARAM:
            if not value:
                return None
            return decode_share_token(value)
    return None
