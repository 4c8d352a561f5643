"""Settings loading and validation."""
from .loader import load_settings
from .models import PathsSettings, ServerSettings, Settings

__all__ = ["Settings", "ServerSettings", "PathsSettings", "load_settings"]
