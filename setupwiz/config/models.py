"""
Engine settings model.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from setupwiz.presets.constants import LOAD_PROFILES, PERFORMANCE_TIERS

SUPPORTED_TEXT_FORMATS = ("yaml", "json")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class EngineSettings:
    """
    Settings for running the wizard engine outside the admin console.
    """

    runtime_os: Optional[str] = None
    """Host OS hint for the allocator recommendation. Sniffed locally if None."""

    text_format: str = "yaml"
    """Text format used when the configuration path has no known suffix."""

    log_level: str = "WARNING"
    """Logging level for the setupwiz logger."""

    log_file: Optional[Path] = None
    """Optional log file path."""

    default_tier: str = "good"
    """Tier used by ``preview`` when none is given."""

    default_load_profile: str = "heavy"
    """Load profile used by ``preview`` when none is given."""

    def __post_init__(self) -> None:
        """Normalize values and load environment variable overrides."""
        if isinstance(self.log_file, str):
            self.log_file = Path(self.log_file).expanduser()

        env_os = os.environ.get("SETUPWIZ_RUNTIME_OS")
        if env_os:
            self.runtime_os = env_os

        env_format = os.environ.get("SETUPWIZ_TEXT_FORMAT")
        if env_format:
            self.text_format = env_format

        env_level = os.environ.get("SETUPWIZ_LOG_LEVEL")
        if env_level:
            self.log_level = env_level

        self.text_format = str(self.text_format or "").strip().lower()
        self.log_level = str(self.log_level or "").strip().upper()

    def validate(self) -> None:
        """Validate settings.

        Raises:
            ValueError: If any field has an invalid value.
        """
        if self.text_format not in SUPPORTED_TEXT_FORMATS:
            raise ValueError(
                f"text_format must be one of {SUPPORTED_TEXT_FORMATS}, got '{self.text_format}'"
            )
        if self.log_level not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {VALID_LOG_LEVELS}, got '{self.log_level}'")
        if self.default_tier not in PERFORMANCE_TIERS:
            raise ValueError(
                f"default_tier must be one of {PERFORMANCE_TIERS}, got '{self.default_tier}'"
            )
        if self.default_load_profile not in LOAD_PROFILES:
            raise ValueError(
                f"default_load_profile must be one of {LOAD_PROFILES}, "
                f"got '{self.default_load_profile}'"
            )
