"""Filter query parameters out of a URL and put it back together.

Only the query component is rewritten. The text before the ``?`` (scheme,
authority and path) and the fragment are copied from the input verbatim, so
nothing but the removed parameters changes between input and output.
"""

from __future__ import annotations

import ipaddress
import re
from typing import Iterable
from urllib.parse import quote, unquote_plus, urlsplit

from url_query_cleaner.models import CleanResult, QueryParam
from url_query_cleaner.policy import TrackingPolicy

HOST_REQUIRED_SCHEMES = frozenset({"http", "https", "ws", "wss", "ftp"})

_FORBIDDEN_CHARS_RE = re.compile(r"[\x00-\x20\x7f]")
_BAD_PERCENT_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_BRACKETED_HOST_RE = re.compile(r"^\[(?P<address>[^\[\]]*)\](?::\d*)?$")
# Sub-delims, ":", "@", "/", "?" and "%" (already validated escapes) stay literal.
_QUERY_SAFE = "!$'()*+,;=:@/?%"


class ParseError(ValueError):
    """Raised when a string cannot be read as an absolute URL."""

    def __init__(self, reason: str, url: object = None) -> None:
        message = reason if url is None else f"{reason}: {url!r}"
        super().__init__(message)
        self.reason = reason
        self.url = url


def untrack(url: str, policy: TrackingPolicy | None = None) -> str:
    """Strip the tracking parameters ``policy`` does not allow.

    With no policy every known tracking parameter is removed.
    """
    if policy is None:
        policy = TrackingPolicy()
    return clean(url, policy.resolve())


def clean(url: str, blocklist: Iterable[str]) -> str:
    """Remove every query parameter whose name is in ``blocklist``."""
    return filter_query(url, blocklist).url


def filter_query(url: str, blocklist: Iterable[str]) -> CleanResult:
    _check_url(url)

    query_start = _query_start(url)
    if query_start < 0:
        return CleanResult(original=url, url=url)

    fragment_start = url.find("#", query_start)
    if fragment_start < 0:
        fragment_start = len(url)

    try:
        params = parse_query(url[query_start + 1 : fragment_start])
    except ParseError as exc:
        raise ParseError(exc.reason, url) from None

    if isinstance(blocklist, str):
        blocked = {blocklist}
    else:
        blocked = set(blocklist)

    kept = tuple(param for param in params if param.name not in blocked)
    removed = tuple(param for param in params if param.name in blocked)

    query = build_query(kept)
    cleaned = url[:query_start] + (f"?{query}" if query else "") + url[fragment_start:]
    return CleanResult(original=url, url=cleaned, kept=kept, removed=removed)


def parse_query(query: str) -> list[QueryParam]:
    """Split a raw query string into parameters, keeping empty values and bare names.

    Empty segments (``a=1&&b=2``) are skipped. Raises :class:`ParseError` on a
    stray ``%`` or on escapes that do not decode to UTF-8.
    """
    params: list[QueryParam] = []
    for segment in query.split("&"):
        if not segment:
            continue
        raw_name, separator, raw_value = segment.partition("=")
        if separator:
            params.append(
                QueryParam(
                    name=_decode(raw_name),
                    value=_decode(raw_value),
                    raw_name=raw_name,
                    raw_value=raw_value,
                )
            )
        else:
            params.append(QueryParam(name=_decode(raw_name), raw_name=raw_name))
    return params


def build_query(params: Iterable[QueryParam]) -> str:
    segments: list[str] = []
    for param in params:
        name = _encode(param.raw_name)
        if param.is_bare:
            segments.append(name)
        else:
            segments.append(f"{name}={_encode(param.raw_value)}")
    return "&".join(segments)


def _check_url(url: object) -> None:
    if not isinstance(url, str):
        raise ParseError("expected a string", url)
    if _FORBIDDEN_CHARS_RE.search(url):
        raise ParseError("whitespace or control character in URL", url)
    try:
        url.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise ParseError("URL is not valid UTF-8", url) from exc

    try:
        parts = urlsplit(url)
        parts.port  # raises on a non-numeric or out-of-range port
    except ValueError as exc:
        raise ParseError(str(exc), url) from exc

    if not parts.scheme:
        raise ParseError("missing scheme", url)
    if parts.scheme in HOST_REQUIRED_SCHEMES and not parts.hostname:
        raise ParseError(f"missing host for {parts.scheme} URL", url)

    host_port = parts.netloc.rpartition("@")[2]
    if "[" in host_port or "]" in host_port:
        match = _BRACKETED_HOST_RE.match(host_port)
        if match is None:
            raise ParseError("malformed bracketed host", url)
        try:
            ipaddress.IPv6Address(match.group("address"))
        except ValueError as exc:
            raise ParseError(f"invalid IPv6 host {match.group('address')!r}", url) from exc


def _query_start(url: str) -> int:
    fragment_start = url.find("#")
    if fragment_start >= 0:
        return url.find("?", 0, fragment_start)
    return url.find("?")


def _decode(text: str) -> str:
    if _BAD_PERCENT_RE.search(text):
        raise ParseError(f"malformed percent-encoding in {text!r}")
    try:
        return unquote_plus(text, errors="strict")
    except UnicodeDecodeError as exc:
        raise ParseError(f"percent-encoded bytes in {text!r} are not UTF-8") from exc


def _encode(raw: str) -> str:
    return quote(raw, safe=_QUERY_SAFE)
