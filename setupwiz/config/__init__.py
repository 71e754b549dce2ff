"""
Engine settings for setupwiz.
"""

from .loader import load_settings
from .models import EngineSettings

__all__ = ["EngineSettings", "load_settings"]
