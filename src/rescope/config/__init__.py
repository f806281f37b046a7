from .base import Settings
from .loaders import load_file, load_settings
from .models import RuntimeSettings
from .setup import setup_logging

__all__ = [
    "Settings",
    "RuntimeSettings",
    "load_file",
    "load_settings",
    "setup_logging",
]
