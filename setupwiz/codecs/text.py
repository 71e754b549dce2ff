"""
Text codecs for the persisted configuration.

The engine only needs a ``parse``/``serialize`` pair; hosts may inject their
own. JSON and YAML implementations are provided for the CLI and tests.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Protocol

import yaml


class ConfigParseError(ValueError):
    """Raised when configuration text cannot be parsed into a mapping."""


class TextCodec(Protocol):
    """Parse/serialize pair for one concrete configuration syntax."""

    name: str

    def parse(self, text: str) -> Dict[str, Any]:
        ...

    def serialize(self, tree: Dict[str, Any]) -> str:
        ...


def _require_mapping(value: Any) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ConfigParseError("Config root must be a mapping")
    return value


class YamlCodec:
    """YAML codec backed by PyYAML's safe loader and dumper."""

    name = "yaml"

    def parse(self, text: str) -> Dict[str, Any]:
        try:
            parsed = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigParseError(f"Invalid YAML: {exc}") from exc
        if parsed is None:
            return {}
        return _require_mapping(parsed)

    def serialize(self, tree: Dict[str, Any]) -> str:
        return yaml.safe_dump(tree, sort_keys=False, allow_unicode=True)


class JsonCodec:
    """JSON codec with two-space indentation."""

    name = "json"

    def parse(self, text: str) -> Dict[str, Any]:
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigParseError(f"Invalid JSON: {exc}") from exc
        return _require_mapping(parsed)

    def serialize(self, tree: Dict[str, Any]) -> str:
        return json.dumps(tree, indent=2, ensure_ascii=False) + "\n"


_CODECS: Dict[str, type] = {
    "yaml": YamlCodec,
    "yml": YamlCodec,
    "json": JsonCodec,
}


def get_codec(name: str) -> TextCodec:
    """
    Return a codec by format name.

    Raises:
        ValueError: If the format is not supported
    """
    key = str(name or "").strip().lower().lstrip(".")
    codec_cls = _CODECS.get(key)
    if codec_cls is None:
        raise ValueError(
            f"Unsupported config format: {name}. "
            f"Use json, yaml, or yml"
        )
    return codec_cls()


def codec_for_path(path: Path | str) -> TextCodec:
    """Select a codec from a file suffix (.json, .yaml, .yml)."""
    if isinstance(path, str):
        path = Path(path)
    return get_codec(path.suffix)
