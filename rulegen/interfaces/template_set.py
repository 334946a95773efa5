"""Alert-rule template interfaces.

A template fragment is one alert rule before environment substitution. Its
text is split at parse time into literal text, profile placeholders that the
generator resolves, and passthrough text that the alerting system resolves
later at evaluation time.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class LiteralText:
    """Plain text copied to the output as-is."""

    text: str


@dataclass(frozen=True)
class ProfilePlaceholder:
    """A `{{ name }}` reference resolved from the active profile.

    Attributes:
        name: Profile variable name.
        raw: The placeholder exactly as written, for error messages.
    """

    name: str
    raw: str


@dataclass(frozen=True)
class PassthroughText:
    """Template text left verbatim for the downstream alerting system.

    Covers evaluation-time expressions such as `{{ $labels.name }}` and the
    contents of `{% raw %}` blocks.
    """

    text: str


Segment = LiteralText | ProfilePlaceholder | PassthroughText


@dataclass(frozen=True)
class TemplateFragment:
    """A parsed alert-rule template.

    Attributes:
        identifier: Fragment name derived from the file name.
        category: Environment-independent category path, e.g.
            "backend/argo-applications".
        segments: Parsed text segments in order.
        source: File the fragment was loaded from.
    """

    identifier: str
    category: str
    segments: tuple[Segment, ...]
    source: str = ""

    @property
    def key(self) -> str:
        """Category-qualified identifier."""
        return f"{self.category}/{self.identifier}"

    @property
    def variables(self) -> frozenset[str]:
        """Names of every profile variable the fragment references."""
        return frozenset(s.name for s in self.segments if isinstance(s, ProfilePlaceholder))

    @property
    def text(self) -> str:
        """Reassembled source text, placeholders unresolved."""
        parts = []
        for segment in self.segments:
            if isinstance(segment, ProfilePlaceholder):
                parts.append(segment.raw)
            else:
                parts.append(segment.text)
        return "".join(parts)


class TemplateError(Exception):
    """Raised when a template fragment is not well-formed."""

    def __init__(self, message: str, source: str = "") -> None:
        super().__init__(f"{source}: {message}" if source else message)
        self.source = source
        self.reason = message


class BaseRuleTemplateSet(ABC):
    """Abstract base class for template fragment loaders."""

    def __init__(self) -> None:
        self._fragments: list[TemplateFragment] = []
        self._errors: list[TemplateError] = []

    @abstractmethod
    def load(
        self,
        source_directory: str | Path,
        category_glob: str = "**/*.yaml",
        strict: bool = True,
    ) -> list[TemplateFragment]:
        """Load and parse fragments below a directory.

        Args:
            source_directory: Templates root; sub-directories are categories.
            category_glob: Glob selecting fragment files, relative to the root.
            strict: Raise on the first bad fragment instead of recording it.

        Returns:
            Fragments ordered by category path, then file name.

        Raises:
            TemplateError: If the directory is missing, or a fragment is
                malformed and `strict` is set.
        """

    @property
    def fragments(self) -> list[TemplateFragment]:
        """Fragments from the last load, in order."""
        return list(self._fragments)

    @property
    def errors(self) -> list[TemplateError]:
        """Errors recorded by the last non-strict load."""
        return list(self._errors)

    def get(self, category: str, identifier: str) -> TemplateFragment:
        """Look up a loaded fragment by category and identifier.

        Raises:
            KeyError: If no such fragment was loaded.
        """
        for fragment in self._fragments:
            if fragment.category == category and fragment.identifier == identifier:
                return fragment
        raise KeyError(f"{category}/{identifier}")
