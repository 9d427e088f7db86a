# CCJK Config Schema Validator
# Recursive validation of documents against SchemaField trees

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from ccjk_config.errors import SchemaPathError
from ccjk_config.schema.fields import SchemaField

API_KEY_PATTERN = re.compile(r"^(sk-|ant-|key-)?[\w-]{20,}$")
URL_PATTERN = re.compile(r"^https?://[\w-]+(\.[\w-]+)*(:\d+)?(/.*)?$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@][^\s.@]*\.[^\s@]+$")
NUMERIC_PATTERN = re.compile(r"^\s*-?\d+(\.\d+)?\s*$")


class ValidationErrorCode(str, Enum):
    """Machine-readable validation failure codes."""

    REQUIRED_FIELD = "REQUIRED_FIELD"
    INVALID_TYPE = "INVALID_TYPE"
    INVALID_ENUM = "INVALID_ENUM"
    PATTERN_MISMATCH = "PATTERN_MISMATCH"
    MIN_LENGTH = "MIN_LENGTH"
    MAX_LENGTH = "MAX_LENGTH"
    INVALID_URL = "INVALID_URL"
    INVALID_API_KEY = "INVALID_API_KEY"
    INVALID_FORMAT = "INVALID_FORMAT"
    UNKNOWN_FIELD = "UNKNOWN_FIELD"


@dataclass
class ValidationError:
    """A single validation failure."""

    path: str
    message: str
    code: ValidationErrorCode
    value: Any = None
    expected: Any = None


@dataclass
class ValidationWarning:
    """A non-fatal finding, such as an unknown key."""

    path: str
    message: str
    suggestion: str | None = None


@dataclass
class ValidationResult:
    """Outcome of validating a document or a single field."""

    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationWarning] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def errors_at(self, path: str) -> list[ValidationError]:
        return [e for e in self.errors if e.path == path]

    def has_error(self, path: str, code: ValidationErrorCode) -> bool:
        return any(e.code == code for e in self.errors_at(path))


def join_path(parent: str, key: str) -> str:
    return f"{parent}.{key}" if parent else key


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _matches_type(value: Any, type_name: str) -> bool:
    actual = _type_name(value)
    if type_name == "number":
        return actual in ("integer", "number")
    return actual == type_name


class SchemaValidator:
    """
    Validates documents against a root object ``SchemaField``.

    Pure: holds only the schema, never touches the filesystem.

    Example:
        >>> validator = SchemaValidator(PREFERENCES_SCHEMA)
        >>> validator.validate(doc).valid
    """

    def __init__(self, schema: SchemaField):
        self.schema = schema

    def validate(self, value: Any) -> ValidationResult:
        """
        Validate a whole document.

        Args:
            value: Document to check.

        Returns:
            ValidationResult with every error and warning found.
        """
        result = ValidationResult()
        self._check(self.schema, value, "", result)
        return result

    def is_valid(self, value: Any) -> bool:
        return self.validate(value).valid

    def validate_field(self, path: str, value: Any) -> ValidationResult:
        """
        Validate a single value at ``path`` without its parent document.

        Unknown paths yield a warning instead of an error.
        """
        # Imported here to keep walker -> validator the only module edge at import time
        from ccjk_config.schema.walker import resolve_field

        result = ValidationResult()
        try:
            schema = resolve_field(self.schema, path)
        except SchemaPathError as e:
            result.warnings.append(ValidationWarning(path=path, message=str(e)))
            return result
        self._check(schema, value, path, result)
        return result

    def _error(
        self,
        result: ValidationResult,
        path: str,
        message: str,
        code: ValidationErrorCode,
        value: Any = None,
        expected: Any = None,
    ) -> None:
        result.errors.append(ValidationError(path=path, message=message, code=code, value=value, expected=expected))

    def _check(self, schema: SchemaField, value: Any, path: str, result: ValidationResult) -> None:
        if value is None:
            if not schema.nullable:
                self._error(result, path, "Value cannot be null", ValidationErrorCode.INVALID_TYPE, value, schema.types)
            return

        if not any(_matches_type(value, t) for t in schema.types):
            self._error(
                result,
                path,
                f"Expected {' | '.join(schema.types)}, got {_type_name(value)}",
                ValidationErrorCode.INVALID_TYPE,
                value,
                schema.types,
            )
            return

        if schema.enum is not None and value not in schema.enum:
            self._error(
                result,
                path,
                f"Value must be one of: {', '.join(map(str, schema.enum))}",
                ValidationErrorCode.INVALID_ENUM,
                value,
                list(schema.enum),
            )

        if isinstance(value, str):
            self._check_string(schema, value, path, result)
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            self._check_number(schema, value, path, result)
        elif isinstance(value, list):
            self._check_array(schema, value, path, result)
        elif isinstance(value, dict):
            self._check_object(schema, value, path, result)

    def _check_string(self, schema: SchemaField, value: str, path: str, result: ValidationResult) -> None:
        if schema.min_length is not None and len(value) < schema.min_length:
            self._error(
                result,
                path,
                f"String length must be at least {schema.min_length}",
                ValidationErrorCode.MIN_LENGTH,
                value,
                schema.min_length,
            )
        if schema.max_length is not None and len(value) > schema.max_length:
            self._error(
                result,
                path,
                f"String length must be at most {schema.max_length}",
                ValidationErrorCode.MAX_LENGTH,
                value,
                schema.max_length,
            )
        if schema.pattern is not None and not re.search(schema.pattern, value):
            self._error(
                result,
                path,
                f"Value does not match pattern {schema.pattern}",
                ValidationErrorCode.PATTERN_MISMATCH,
                value,
                schema.pattern,
            )
        if schema.format is not None:
            self._check_format(schema, value, path, result)

    def _check_number(self, schema: SchemaField, value: float, path: str, result: ValidationResult) -> None:
        if schema.minimum is not None and value < schema.minimum:
            self._error(
                result, path, f"Value must be at least {schema.minimum}", ValidationErrorCode.MIN_LENGTH, value, schema.minimum
            )
        if schema.maximum is not None and value > schema.maximum:
            self._error(
                result, path, f"Value must be at most {schema.maximum}", ValidationErrorCode.MAX_LENGTH, value, schema.maximum
            )

    def _check_array(self, schema: SchemaField, value: list, path: str, result: ValidationResult) -> None:
        if schema.min_length is not None and len(value) < schema.min_length:
            self._error(
                result, path, f"Array must have at least {schema.min_length} items", ValidationErrorCode.MIN_LENGTH, value
            )
        if schema.max_length is not None and len(value) > schema.max_length:
            self._error(
                result, path, f"Array must have at most {schema.max_length} items", ValidationErrorCode.MAX_LENGTH, value
            )
        if schema.items is not None:
            for index, item in enumerate(value):
                self._check(schema.items, item, f"{path}[{index}]", result)

    def _check_object(self, schema: SchemaField, value: dict, path: str, result: ValidationResult) -> None:
        # No declared properties means a free-form map
        if schema.properties is None:
            return

        for key, child in schema.properties.items():
            child_path = join_path(path, key)
            if key not in value:
                if child.required:
                    self._error(result, child_path, "Required field is missing", ValidationErrorCode.REQUIRED_FIELD)
                continue
            self._check(child, value[key], child_path, result)

        if schema.additional_properties is True:
            return
        for key in value:
            if key in schema.properties:
                continue
            key_path = join_path(path, key)
            if schema.additional_properties is False:
                self._error(result, key_path, f"Unknown property: {key}", ValidationErrorCode.UNKNOWN_FIELD, value[key])
            else:
                result.warnings.append(
                    ValidationWarning(
                        path=key_path,
                        message=f"Unknown property: {key}",
                        suggestion=f"Known properties: {', '.join(schema.properties)}",
                    )
                )

    def _check_format(self, schema: SchemaField, value: str, path: str, result: ValidationResult) -> None:
        fmt = schema.format
        if fmt == "url":
            if not URL_PATTERN.match(value):
                self._error(result, path, "Invalid URL format", ValidationErrorCode.INVALID_URL, value)
        elif fmt == "api-key":
            if not API_KEY_PATTERN.match(value):
                self._error(result, path, "Invalid API key format", ValidationErrorCode.INVALID_API_KEY, value)
        elif fmt == "date-time":
            try:
                datetime.fromisoformat(value)
            except ValueError:
                self._error(result, path, "Invalid date-time format", ValidationErrorCode.INVALID_FORMAT, value)
        elif fmt == "email":
            if not EMAIL_PATTERN.match(value):
                self._error(result, path, "Invalid email format", ValidationErrorCode.INVALID_FORMAT, value)
        elif fmt == "numeric":
            if not NUMERIC_PATTERN.match(value):
                self._error(result, path, "Expected a number, got text", ValidationErrorCode.INVALID_TYPE, value, "number")
            else:
                self._check_number(schema, float(value), path, result)
