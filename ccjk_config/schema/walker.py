# CCJK Config Schema Walker
# Typed point-reads and point-writes resolved segment by segment against a schema tree

from __future__ import annotations

import copy
import re
from typing import Any, Union

from ccjk_config.errors import SchemaPathError
from ccjk_config.schema.fields import FIELD_TYPES, SchemaField

# Accepts any value, used below free-form maps and untyped arrays
ANY_FIELD = SchemaField(FIELD_TYPES)

Segment = Union[str, int]

_PART_RE = re.compile(r"^([^\[\]]*)((?:\[\d+\])*)$")
_INDEX_RE = re.compile(r"\[(\d+)\]")


def parse_path(path: str) -> list[Segment]:
    """
    Split ``"tools.claudeCode.outputStyles[0]"`` into ``["tools", "claudeCode", "outputStyles", 0]``.

    Raises:
        SchemaPathError: On empty segments or malformed indices.
    """
    if not path:
        raise SchemaPathError(path, "", [])
    segments: list[Segment] = []
    for part in path.split("."):
        match = _PART_RE.match(part)
        if not match or (not match.group(1) and not match.group(2)):
            raise SchemaPathError(path, part)
        if match.group(1):
            segments.append(match.group(1))
        segments.extend(int(i) for i in _INDEX_RE.findall(match.group(2)))
    return segments


def _step(schema: SchemaField, segment: Segment, path: str) -> SchemaField:
    if isinstance(segment, int):
        if not schema.is_array:
            raise SchemaPathError(path, f"[{segment}]")
        return schema.items or ANY_FIELD

    if not schema.is_object:
        raise SchemaPathError(path, segment)
    if schema.properties is None:
        return ANY_FIELD
    child = schema.properties.get(segment)
    if child is not None:
        return child
    if schema.additional_properties is True:
        return ANY_FIELD
    raise SchemaPathError(path, segment, list(schema.properties))


def resolve_field(schema: SchemaField, path: str) -> SchemaField:
    """
    Resolve a dot path to the SchemaField describing it.

    Args:
        schema: Root schema.
        path: Dot path with optional ``[n]`` indices.

    Returns:
        The field at ``path``.

    Raises:
        SchemaPathError: If a segment is not declared by the schema.
    """
    current = schema
    for segment in parse_path(path):
        current = _step(current, segment, path)
    return current


def get_value(doc: dict[str, Any], path: str, schema: SchemaField | None = None, default: Any = None) -> Any:
    """
    Read the value at ``path``.

    When a schema is given the path is checked against it first, and the
    field's declared default is returned for a missing value.

    Raises:
        SchemaPathError: If the path is unknown to the schema or crosses a non-container value.
    """
    field = resolve_field(schema, path) if schema is not None else None
    fallback = field.default if field is not None and field.default is not None else default

    current: Any = doc
    for segment in parse_path(path):
        if isinstance(segment, int):
            if not isinstance(current, list):
                raise SchemaPathError(path, f"[{segment}]")
            if segment >= len(current):
                return fallback
            current = current[segment]
        else:
            if not isinstance(current, dict):
                raise SchemaPathError(path, segment)
            if segment not in current:
                return fallback
            current = current[segment]
    return current


def set_value(doc: dict[str, Any], path: str, value: Any, schema: SchemaField | None = None) -> dict[str, Any]:
    """
    Return a copy of ``doc`` with ``value`` written at ``path``.

    Missing intermediate objects are created. A list index may address an
    existing element or append at ``len(list)``.

    Raises:
        SchemaPathError: If the path is unknown to the schema or crosses a non-container value.
    """
    if schema is not None:
        resolve_field(schema, path)

    segments = parse_path(path)
    result = copy.deepcopy(doc)
    current: Any = result
    for position, segment in enumerate(segments):
        last = position == len(segments) - 1
        next_container: Any = [] if not last and isinstance(segments[position + 1], int) else {}

        if isinstance(segment, int):
            if not isinstance(current, list) or segment > len(current):
                raise SchemaPathError(path, f"[{segment}]")
            if segment == len(current):
                current.append(copy.deepcopy(value) if last else next_container)
            elif last:
                current[segment] = copy.deepcopy(value)
            current = current[segment]
        else:
            if not isinstance(current, dict):
                raise SchemaPathError(path, segment)
            if last:
                current[segment] = copy.deepcopy(value)
            elif not isinstance(current.get(segment), (dict, list)):
                current[segment] = next_container
            current = current[segment]
    return result
