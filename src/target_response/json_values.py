"""JSON-like value model and optional accessors.

Response documents arrive as trees of mappings, sequences and scalars. The
helpers in this module navigate those trees defensively: every ``opt_*``
accessor returns ``None`` (or the supplied default) when a key is missing or
the value found there has the wrong shape, so callers never branch on
``KeyError`` or ``TypeError``.
"""

from collections.abc import Mapping, Sequence
import json
from typing import Any, TypeAlias

from .exceptions import ResponseParseError

JsonScalar: TypeAlias = None | bool | int | float | str
JsonValue: TypeAlias = JsonScalar | list["JsonValue"] | dict[str, "JsonValue"]
JsonObject: TypeAlias = dict[str, JsonValue]

_TEXT_TYPES = (str, bytes, bytearray)


def is_mapping(value: Any) -> bool:
    """True for JSON objects"""  # noqa: D415
    return isinstance(value, Mapping)


def is_sequence(value: Any) -> bool:
    """True for JSON arrays; strings and bytes are not arrays"""  # noqa: D415
    return isinstance(value, Sequence) and not isinstance(value, _TEXT_TYPES)


def opt_mapping(container: Any, key: str) -> Mapping[str, Any] | None:
    """Return ``container[key]`` when it is a mapping, else ``None``."""
    if not is_mapping(container):
        return None
    value = container.get(key)
    return value if is_mapping(value) else None


def opt_sequence(container: Any, key: str) -> Sequence[Any] | None:
    """Return ``container[key]`` when it is an array, else ``None``."""
    if not is_mapping(container):
        return None
    value = container.get(key)
    return value if is_sequence(value) else None


def opt_mapping_at(sequence: Any, index: int) -> Mapping[str, Any] | None:
    """Return ``sequence[index]`` when it exists and is a mapping."""
    if not is_sequence(sequence) or not 0 <= index < len(sequence):
        return None
    value = sequence[index]
    return value if is_mapping(value) else None


def scalar_to_string(value: Any) -> str | None:
    """Render a JSON scalar as text.

    Strings pass through unchanged; booleans and numbers become their JSON
    spelling (``true``, ``1``, ``1.5``). ``None`` and containers have no
    scalar text and yield ``None``.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return json.dumps(value)
    return None


def opt_string(container: Any, key: str, default: str | None = None) -> str | None:
    """Return ``container[key]`` as text, or ``default`` when it has none."""
    if not is_mapping(container):
        return default
    text = scalar_to_string(container.get(key))
    return default if text is None else text


def _json_default(value: Any) -> Any:
    # json.dumps only knows dict/list/tuple; other mapping and sequence types
    # are flattened here.
    if is_mapping(value):
        return dict(value)
    if is_sequence(value):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_json_text(value: Any) -> str:
    """Serialize to canonical compact JSON, preserving key order."""
    return json.dumps(
        value, separators=(",", ":"), ensure_ascii=False, default=_json_default
    )


def try_json_text(value: Any) -> str | None:
    """Like :func:`to_json_text`, but ``None`` for values JSON cannot hold."""
    try:
        return to_json_text(value)
    except (TypeError, ValueError, RecursionError):
        return None


def to_string_map(mapping: Mapping[str, Any]) -> dict[str, str]:
    """Flatten a JSON object into a string-to-string mapping.

    Scalars are rendered with :func:`scalar_to_string`, nested containers
    become their canonical JSON text. ``null`` values and values JSON cannot
    represent are dropped.
    """
    result: dict[str, str] = {}
    for key, value in mapping.items():
        if value is None:
            continue
        text = scalar_to_string(value)
        if text is None:
            text = try_json_text(value)
        if text is not None:
            result[str(key)] = text
    return result


def to_json_tree(
    value: Any, path: str = "$", _active: frozenset[int] = frozenset()
) -> JsonValue:
    """Recursively copy ``value`` into plain ``dict``/``list``/scalar values.

    Raises:
        ResponseParseError: If a mapping key is not a string, a leaf is not
            a JSON scalar, or a container contains itself. ``path`` locates
            the offending node.
    """
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if not (is_mapping(value) or is_sequence(value)):
        raise ResponseParseError(
            f"Unsupported value of type {type(value).__name__} at {path}"
        )
    if id(value) in _active:
        raise ResponseParseError(f"Circular reference at {path}")

    active = _active | {id(value)}
    if is_mapping(value):
        tree: JsonObject = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise ResponseParseError(
                    f"Non-string key {key!r} at {path}; JSON object keys must be strings"
                )
            tree[key] = to_json_tree(item, f"{path}.{key}", active)
        return tree
    return [
        to_json_tree(item, f"{path}[{i}]", active) for i, item in enumerate(value)
    ]
