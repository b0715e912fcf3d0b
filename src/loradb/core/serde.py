"""
Canonical JSON encoding of record values.

The store persists every field value as a canonical JSON string so that a
column can hold any JSON-safe value (None, numbers, strings, lists, maps)
regardless of the field's type, and so that equal values always encode to
equal strings. That second property is what index reads, pattern matches and
delete-by-value rely on.

Notes:
    - Canonical JSON: sort_keys=True, separators=(",", ":"), ensure_ascii=False.
    - Values must already be JSON-safe; row models produce them via
      ``model_dump(mode="json")`` (see loradb.core.schema.to_record).
    - Tuples encode as JSON arrays and decode as lists.
"""

from __future__ import annotations

import json
from typing import Any

__all__ = [
    "json_dumps_canonical",
    "json_loads",
]


def json_dumps_canonical(obj: Any) -> str:
    """
    Serialize an object to a canonical JSON string.

    Args:
        obj (Any): JSON-serializable object.

    Returns:
        str: Canonical JSON string with sort_keys=True, compact separators,
        and ensure_ascii=False.

    Examples:
        >>> json_dumps_canonical({"b": 1, "a": [1, 2]})
        '{"a":[1,2],"b":1}'
    """
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def json_loads(s: str) -> Any:
    """Deserialize a JSON string produced by ``json_dumps_canonical``."""
    return json.loads(s)
