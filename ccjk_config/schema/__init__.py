# CCJK Config Schema Module
# Schema trees, validation and typed path access

from ccjk_config.schema.definitions import (
    NATIVE_SETTINGS_SCHEMA,
    PREFERENCES_SCHEMA,
    RUNTIME_STATE_SCHEMA,
    SUPPORTED_LANGS,
    SUPPORTED_TOOLS,
)
from ccjk_config.schema.fields import SchemaField, array, obj
from ccjk_config.schema.validator import (
    SchemaValidator,
    ValidationError,
    ValidationErrorCode,
    ValidationResult,
    ValidationWarning,
)
from ccjk_config.schema.walker import get_value, parse_path, resolve_field, set_value

__all__ = [
    # Schemas
    "NATIVE_SETTINGS_SCHEMA",
    "PREFERENCES_SCHEMA",
    "RUNTIME_STATE_SCHEMA",
    "SUPPORTED_LANGS",
    "SUPPORTED_TOOLS",
    "SchemaField",
    "array",
    "obj",
    # Validation
    "SchemaValidator",
    "ValidationError",
    "ValidationErrorCode",
    "ValidationResult",
    "ValidationWarning",
    # Walker
    "get_value",
    "parse_path",
    "resolve_field",
    "set_value",
]
