"""Core configuration and factory components."""

from rulegen.core.config import Settings, get_settings
from rulegen.core.factory import ComponentFactory

__all__ = [
    "Settings",
    "get_settings",
    "ComponentFactory",
]
