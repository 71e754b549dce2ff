"""
Settings loader.

Reads engine settings from an optional JSON/YAML file, with environment
variables (and a ``.env`` file) taking precedence.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from .models import EngineSettings

SETTINGS_SECTION = "setupwiz"


def load_raw_settings(path: Path) -> Dict[str, Any]:
    """
    Load raw settings from a JSON or YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the format is unsupported or the root is not a mapping
    """
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")

    suffix = path.suffix.lower()
    content = path.read_text(encoding="utf-8")

    if suffix in {".yaml", ".yml"}:
        raw = yaml.safe_load(content) or {}
    elif suffix == ".json":
        raw = json.loads(content)
    else:
        raise ValueError(
            f"Unsupported settings format: {suffix}. "
            f"Use .json, .yaml, or .yml"
        )

    if not isinstance(raw, dict):
        raise ValueError(f"Settings root must be a mapping: {path}")
    return raw


def build_settings(raw: Dict[str, Any]) -> EngineSettings:
    """
    Build EngineSettings from raw data.

    A ``setupwiz`` section is used when present, otherwise the root mapping.
    Unknown keys are ignored.
    """
    section = raw.get(SETTINGS_SECTION)
    if not isinstance(section, dict):
        section = raw
    return EngineSettings(
        runtime_os=section.get("runtime_os"),
        text_format=section.get("text_format", "yaml"),
        log_level=section.get("log_level", "WARNING"),
        log_file=section.get("log_file"),
        default_tier=section.get("default_tier", "good"),
        default_load_profile=section.get("default_load_profile", "heavy"),
    )


def load_settings(path: Optional[Path | str] = None) -> EngineSettings:
    """
    Load and validate engine settings.

    Args:
        path: Optional settings file (.json, .yaml, or .yml)

    Returns:
        Validated EngineSettings

    Raises:
        FileNotFoundError: If ``path`` is given and doesn't exist
        ValueError: If settings are invalid
    """
    load_dotenv()

    if path is None:
        settings = EngineSettings()
    else:
        settings_path = Path(path).expanduser().resolve()
        settings = build_settings(load_raw_settings(settings_path))

    settings.validate()
    return settings
