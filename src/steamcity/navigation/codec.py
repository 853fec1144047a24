"""
Route codec.

Pure functions converting between address fragments such as
``#/experiments/exp-001?status=active`` and ``Route`` values.

Examples:
    >>> route = decode("/data/exp-005?period=7d")
    >>> route.view, route.id, route.params
    (<ViewName.DATA: 'data'>, 'exp-005', {'period': '7d'})
    >>> encode(route)
    '/data/exp-005?period=7d'
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote, unquote, unquote_plus

from steamcity.exceptions import InvalidRouteError
from steamcity.navigation.models import Route, ViewName

__all__ = [
    "EMPTY_FRAGMENTS",
    "decode",
    "encode",
    "encode_query",
    "parse_parts",
    "parse_query",
    "strip_marker",
]

# Fragments that mean "no route" and resolve to the map
EMPTY_FRAGMENTS = frozenset(["", "#", "#/", "/"])

# Characters left as-is in path segments
_ID_SAFE = "-._~"


def strip_marker(fragment: str) -> str:
    """Remove the leading ``#`` from a fragment, if present."""
    return fragment[1:] if fragment.startswith("#") else fragment


def parse_query(query: str) -> dict[str, str]:
    """Parse a query string into a dict of decoded strings.

    Pairs are split on the first ``=``. Pairs without ``=`` or with an
    empty key are dropped. When a key repeats, the last value wins.

    Args:
        query: Query string without the leading ``?``

    Returns:
        Decoded parameters in the order they appear.
    """
    params: dict[str, str] = {}
    if not query:
        return params

    for pair in query.split("&"):
        if "=" not in pair:
            continue
        raw_key, raw_value = pair.split("=", 1)
        key = unquote_plus(raw_key)
        if not key:
            continue
        params[key] = unquote_plus(raw_value)
    return params


def parse_parts(fragment: str) -> tuple[list[str], dict[str, str]]:
    """Split a fragment into decoded path segments and query parameters.

    Args:
        fragment: Fragment with or without the leading ``#``

    Returns:
        Tuple of (parts, params). Empty segments are dropped.
    """
    body = strip_marker(fragment)
    path, _, query = body.partition("?")
    parts = [unquote(segment) for segment in path.split("/") if segment]
    return parts, parse_query(query)


def decode(fragment: str) -> Route:
    """Decode a fragment into a Route.

    Args:
        fragment: Fragment of the form ``[#]/view[/id][?query]``

    Returns:
        The decoded route. An empty fragment decodes to the map.

    Raises:
        InvalidRouteError: If the first segment is not a known view
    """
    parts, params = parse_parts(fragment)
    if not parts:
        return Route(view=ViewName.MAP, params=params)

    try:
        view = ViewName(parts[0])
    except ValueError:
        raise InvalidRouteError(fragment) from None

    # Trailing segments beyond the id are ignored
    route_id = parts[1] if len(parts) > 1 and view is not ViewName.MAP else None
    return Route(view=view, id=route_id, params=params)


def encode_query(params: Mapping[str, Any] | None) -> str:
    """Encode parameters as a query string.

    None and empty values are skipped; this normalization is lossy on
    purpose, so such values do not survive a decode.

    Args:
        params: Parameters to encode, in the order to emit them

    Returns:
        Query string without the leading ``?``, possibly empty.
    """
    if not params:
        return ""
    pairs = []
    for key, value in params.items():
        if value is None or value == "":
            continue
        pairs.append(f"{quote(str(key), safe='')}={quote(str(value), safe='')}")
    return "&".join(pairs)


def encode(route: Route, *, with_marker: bool = False) -> str:
    """Encode a Route into its canonical fragment.

    Args:
        route: Route to encode
        with_marker: Prepend ``#`` to produce an address-bar fragment

    Returns:
        Canonical fragment such as ``/sensors/sensor-123?period=30d``.
    """
    fragment = "/" + route.view.value
    if route.id:
        fragment += "/" + quote(route.id, safe=_ID_SAFE)

    query = encode_query(route.params)
    if query:
        fragment += "?" + query

    return "#" + fragment if with_marker else fragment
