"""Template fragment loading and placeholder parsing."""

from rulegen.strategies.templates.filesystem import FilesystemTemplateSet
from rulegen.strategies.templates.parser import parse_fragment, substitute

__all__ = [
    "FilesystemTemplateSet",
    "parse_fragment",
    "substitute",
]
