"""
Query filter compiler.

Turns a filter map and an options map into the query string the Parse REST
API expects: ``where=<urlencoded JSON>`` followed by flat option parameters.

Operator tokens are relayed verbatim. The API's query language is the wire
format, so nothing is renamed and unknown tokens are forwarded:

    Token        Operation
    $lt          Less than
    $lte         Less than or equal to
    $gt          Greater than
    $gte         Greater than or equal to
    $ne          Not equal to
    $in          Contained in
    $nin         Not contained in
    $exists      A value is set for the key
    $select      Matches a key's value in the result of a different query
    $dontSelect  Does not match a key's value in the result of a different query
    $all         Contains all of the given values

Example:
    compile_query({"age": {"$lt": 3}}, {"order": "-createdAt", "limit": 10})
    # 'where=%7B%22age%22%3A%7B%22%24lt%22%3A3%7D%7D&limit=10&order=-createdAt'

"""

import json
import logging
import math
import urllib.parse
from typing import Any

from parse_client.core.errors import EncodingError
from parse_client.core.types import FilterMap, OptionsMap

logger = logging.getLogger(__name__)

KNOWN_OPERATORS = frozenset(
    {
        "$lt",
        "$lte",
        "$gt",
        "$gte",
        "$ne",
        "$in",
        "$nin",
        "$exists",
        "$select",
        "$dontSelect",
        "$all",
    }
)

KNOWN_OPTIONS = frozenset({"order", "limit", "count", "include"})


def encode_json(value: Any) -> str:
    """
    Serialize a value to compact, canonical JSON.

    Args:
        value: Any JSON-representable value

    Returns:
        JSON text with sorted keys and no insignificant whitespace

    Raises:
        EncodingError: If the value (or anything nested in it) has no JSON representation

    """
    try:
        return json.dumps(_string_keys(value), separators=(",", ":"), sort_keys=True, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Value is not JSON-serializable: {e}") from e


def _string_keys(value: Any) -> Any:
    """Convert scalar dict keys to the strings json would emit, so mixed keys still sort."""
    if isinstance(value, dict):
        return {(k if isinstance(k, str) else _key_text(k)): _string_keys(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_string_keys(v) for v in value]
    return value


def _key_text(key: Any) -> str:
    if key is None or isinstance(key, (bool, int, float)):
        return json.dumps(key, allow_nan=False)
    raise TypeError(f"keys must be str, int, float, bool or None, not {type(key).__name__}")


def unknown_operators(filters: FilterMap) -> set[str]:
    """Return the $-prefixed tokens in operator maps that are not in KNOWN_OPERATORS."""
    found = set()
    for value in filters.values():
        if isinstance(value, dict):
            found.update(k for k in value if isinstance(k, str) and k.startswith("$") and k not in KNOWN_OPERATORS)
    return found


def _option_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and not math.isfinite(value):
        raise EncodingError(f"Option value has no JSON representation: {value}")
    if isinstance(value, (str, int, float)):
        return str(value)
    return encode_json(value)


def compile_query(filters: FilterMap | None = None, options: OptionsMap | None = None) -> str:
    """
    Compile filters and options into a URL query string.

    Args:
        filters: Field name -> value (equality) or operator map, e.g. {"age": {"$lt": 3}}
        options: Query options such as order, limit, count and include

    Returns:
        The query string without a leading "?", or "" when both inputs are empty.
        The where segment comes first, then options sorted by name.

    Raises:
        EncodingError: If a filter or option value has no JSON representation

    """
    filters = filters or {}
    options = options or {}
    segments = []

    if filters:
        unknown = unknown_operators(filters)
        if unknown:
            logger.debug("Forwarding unrecognized operator tokens: %s", ", ".join(sorted(unknown)))
        segments.append("where=" + urllib.parse.quote(encode_json(filters), safe=""))

    for name in sorted(options):
        if name not in KNOWN_OPTIONS:
            logger.debug("Forwarding unrecognized query option: %s", name)
        value = urllib.parse.quote(_option_value(options[name]), safe="")
        segments.append(f"{urllib.parse.quote(str(name), safe='')}={value}")

    return "&".join(segments)
