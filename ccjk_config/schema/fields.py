# CCJK Config Schema Fields
# Declarative schema tree used by the validator and the path walker

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

FIELD_TYPES = ("string", "number", "integer", "boolean", "object", "array", "null")
FIELD_FORMATS = ("url", "email", "api-key", "date-time", "numeric")


@dataclass(frozen=True)
class SchemaField:
    """
    One node of a schema tree.

    ``type`` is a single type name or a tuple of names; ``null`` must be
    listed explicitly for ``None`` to be accepted. ``additional_properties``
    controls unknown keys of an object: None warns, False is an error,
    True allows them silently.
    """

    type: str | tuple[str, ...]
    required: bool = False
    description: str = ""
    enum: tuple[Any, ...] | None = None
    pattern: str | None = None
    min_length: int | None = None
    max_length: int | None = None
    minimum: float | None = None
    maximum: float | None = None
    format: str | None = None
    properties: dict[str, SchemaField] | None = None
    items: SchemaField | None = None
    additional_properties: bool | None = None
    default: Any = None

    def __post_init__(self) -> None:
        for name in self.types:
            if name not in FIELD_TYPES:
                raise ValueError(f"Unknown schema type: {name}")
        if self.format is not None and self.format not in FIELD_FORMATS:
            raise ValueError(f"Unknown schema format: {self.format}")

    @property
    def types(self) -> tuple[str, ...]:
        return (self.type,) if isinstance(self.type, str) else tuple(self.type)

    @property
    def nullable(self) -> bool:
        return "null" in self.types

    @property
    def is_object(self) -> bool:
        return "object" in self.types

    @property
    def is_array(self) -> bool:
        return "array" in self.types


def obj(properties: dict[str, SchemaField] | None = None, **kwargs: Any) -> SchemaField:
    """Shorthand for an object field."""
    return SchemaField("object", properties=properties, **kwargs)


def array(items: SchemaField | None = None, **kwargs: Any) -> SchemaField:
    """Shorthand for an array field."""
    return SchemaField("array", items=items, **kwargs)
