"""Abstract base class for environment profile stores.

A profile is a named set of environment-specific values (project,
destination namespace, ...) used to parameterize alert-rule templates.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

Scalar = str | bool | int | float


@dataclass(frozen=True)
class Profile:
    """A named environment profile.

    Attributes:
        identifier: Unique profile name (e.g. "prod").
        enabled: Whether rules are generated for this profile.
        folder: Routing folder the generated rules are filed under.
        values: Variable name to scalar value mapping.
        source: File the profile was loaded from.
    """

    identifier: str
    enabled: bool = True
    folder: str = ""
    values: dict[str, Scalar] = field(default_factory=dict)
    source: str = ""

    @property
    def routing_folder(self) -> str:
        """Return the folder, falling back to the identifier."""
        return self.folder or self.identifier


class ConfigError(Exception):
    """Raised when a profile file is malformed or incomplete."""

    def __init__(self, message: str, source: str = "") -> None:
        super().__init__(f"{source}: {message}" if source else message)
        self.source = source
        self.reason = message


class ProfileNotFoundError(KeyError):
    """Raised when a profile identifier is not in the store."""


class BaseProfileStore(ABC):
    """Abstract base class for profile loading strategies.

    Concrete stores implement `load`; lookup and bookkeeping are shared.

    Example:
        ```python
        store = YamlProfileStore()
        profiles = store.load("alerting/profiles")
        prod = store.get("prod")
        ```
    """

    def __init__(self) -> None:
        self._profiles: dict[str, Profile] = {}
        self._errors: list[ConfigError] = []

    @abstractmethod
    def load(self, source_directory: str | Path, strict: bool = True) -> list[Profile]:
        """Load every profile from a directory.

        Args:
            source_directory: Directory holding one profile file per environment.
            strict: Raise on the first bad file instead of recording it in `errors`.

        Returns:
            Profiles in load order.

        Raises:
            ConfigError: If the directory is missing, or a file is invalid and
                `strict` is set.
        """

    @property
    @abstractmethod
    def supported_extensions(self) -> set[str]:
        """Return supported profile file extensions."""

    @property
    def profiles(self) -> list[Profile]:
        """Profiles from the last load, in load order."""
        return list(self._profiles.values())

    @property
    def errors(self) -> list[ConfigError]:
        """Errors recorded by the last non-strict load."""
        return list(self._errors)

    def get(self, identifier: str) -> Profile:
        """Look up a loaded profile.

        Raises:
            ProfileNotFoundError: If no profile has that identifier.
        """
        try:
            return self._profiles[identifier]
        except KeyError:
            raise ProfileNotFoundError(identifier) from None
