"""Concrete profile store implementations."""

from rulegen.strategies.profiles.yaml_store import YamlProfileStore

__all__ = [
    "YamlProfileStore",
]
