# CCJK Config Codecs
# Encode/decode documents as JSON, YAML and (read-only) legacy TOML

import json
import tomllib
from datetime import date, datetime, time
from typing import Any, Protocol

import yaml


class DecodeError(ValueError):
    """Raised when bytes cannot be decoded into a mapping document."""


class Codec(Protocol):
    name: str

    def decode(self, data: bytes) -> dict[str, Any]: ...

    def encode(self, doc: dict[str, Any]) -> bytes: ...


def _normalize(value: Any) -> Any:
    """Convert parser-native date/time objects to ISO strings."""
    if isinstance(value, dict):
        return {str(k): _normalize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_normalize(v) for v in value]
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return value


def _as_mapping(parsed: Any, fmt: str) -> dict[str, Any]:
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise DecodeError(f"{fmt} root is not an object")
    return parsed


def _text(data: bytes) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise DecodeError(f"not valid UTF-8: {e}") from e


class JsonCodec:
    name = "json"

    def decode(self, data: bytes) -> dict[str, Any]:
        text = _text(data)
        if not text.strip():
            return {}
        try:
            return _as_mapping(json.loads(text), "JSON")
        except json.JSONDecodeError as e:
            raise DecodeError(f"malformed JSON: {e}") from e

    def encode(self, doc: dict[str, Any]) -> bytes:
        return (json.dumps(doc, indent=2, ensure_ascii=False) + "\n").encode("utf-8")


class YamlCodec:
    name = "yaml"

    def decode(self, data: bytes) -> dict[str, Any]:
        try:
            parsed = yaml.safe_load(_text(data))
        except yaml.YAMLError as e:
            raise DecodeError(f"malformed YAML: {e}") from e
        return _normalize(_as_mapping(parsed, "YAML"))

    def encode(self, doc: dict[str, Any]) -> bytes:
        text = yaml.safe_dump(doc, default_flow_style=False, sort_keys=False, allow_unicode=True)
        return text.encode("utf-8")


class TomlCodec:
    """Reads legacy TOML configs. Writing TOML is not supported."""

    name = "toml"

    def decode(self, data: bytes) -> dict[str, Any]:
        try:
            parsed = tomllib.loads(_text(data))
        except tomllib.TOMLDecodeError as e:
            raise DecodeError(f"malformed TOML: {e}") from e
        return _normalize(parsed)

    def encode(self, doc: dict[str, Any]) -> bytes:
        raise NotImplementedError("TOML is a legacy read-only format")


JSON = JsonCodec()
YAML = YamlCodec()
TOML = TomlCodec()

_BY_SUFFIX: dict[str, Codec] = {".json": JSON, ".yaml": YAML, ".yml": YAML, ".toml": TOML}


def codec_for_suffix(suffix: str) -> Codec:
    """Pick a codec by file suffix, defaulting to JSON."""
    return _BY_SUFFIX.get(suffix.lower(), JSON)
