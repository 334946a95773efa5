"""YAML profile store.

Reads one YAML document per environment profile:

    name: prod
    enabled: true
    folder: prod
    values:
      project: production
      dest_namespace: prod
"""

import logging
import re
from pathlib import Path

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
)

from rulegen.interfaces.profile_store import BaseProfileStore, ConfigError, Profile

logger = logging.getLogger(__name__)

VARIABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
# Profile names become output file names
PROFILE_NAME = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.-]*$")


class ProfileDocument(BaseModel):
    """Schema of a profile file."""

    model_config = ConfigDict(extra="forbid")

    name: StrictStr = Field(description="Unique profile identifier")
    enabled: StrictBool = Field(default=True, description="Generate rules for this profile")
    folder: StrictStr | None = Field(default=None, description="Routing folder override")
    values: dict[str, StrictBool | StrictInt | StrictFloat | StrictStr] = Field(
        default_factory=dict, description="Template variables"
    )

    @field_validator("name")
    @classmethod
    def name_is_safe(cls, v: str) -> str:
        """Reject empty identifiers and anything unusable as a file name."""
        v = v.strip()
        if not v:
            raise ValueError("profile name must not be empty")
        if not PROFILE_NAME.match(v) or ".." in v:
            raise ValueError(
                f"profile name '{v}' may only contain letters, digits, '_', '-' and single '.'"
            )
        return v

    @field_validator("values", mode="before")
    @classmethod
    def empty_values(cls, v: object) -> object:
        """Treat a bare `values:` key as no variables."""
        return {} if v is None else v

    @field_validator("values")
    @classmethod
    def variable_names_are_identifiers(cls, v: dict) -> dict:
        """Variable names must be usable as `{{ name }}` placeholders."""
        bad = [key for key in v if not VARIABLE_NAME.match(key)]
        if bad:
            raise ValueError(f"invalid variable names: {', '.join(sorted(bad))}")
        return v


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item["loc"]) or "profile"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


class YamlProfileStore(BaseProfileStore):
    """Loads profiles from `*.yaml` / `*.yml` files, one profile per file.

    Load order is file name order, which also fixes the output order of the
    generated rule documents.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        """Initialize the store.

        Args:
            encoding: The character encoding to use when reading files.
        """
        super().__init__()
        self._encoding = encoding

    @property
    def supported_extensions(self) -> set[str]:
        """Return supported file extensions."""
        return {".yaml", ".yml"}

    def load(self, source_directory: str | Path, strict: bool = True) -> list[Profile]:
        directory = Path(source_directory)
        if not directory.is_dir():
            raise ConfigError("profiles directory not found", source=str(directory))

        self._profiles = {}
        self._errors = []

        paths = sorted(
            p for p in directory.iterdir()
            if p.is_file() and p.suffix.lower() in self.supported_extensions
        )
        logger.info(f"Loading {len(paths)} profile files from {directory}")

        for path in paths:
            try:
                profile = self._load_file(path)
                if profile.identifier in self._profiles:
                    other = self._profiles[profile.identifier].source
                    raise ConfigError(
                        f"duplicate profile name '{profile.identifier}' (also in {other})",
                        source=str(path),
                    )
            except ConfigError as e:
                if strict:
                    raise
                logger.warning(f"Skipping profile: {e}")
                self._errors.append(e)
                continue

            self._profiles[profile.identifier] = profile
            logger.debug(
                f"Loaded profile {profile.identifier} "
                f"(enabled={profile.enabled}, variables={len(profile.values)})"
            )

        logger.info(
            f"Loaded {len(self._profiles)} profiles, {len(self._errors)} rejected"
        )
        return self.profiles

    def _load_file(self, path: Path) -> Profile:
        try:
            data = yaml.safe_load(path.read_text(encoding=self._encoding))
        except yaml.YAMLError as e:
            raise ConfigError(f"malformed YAML: {e}", source=str(path)) from e
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"unreadable file: {e}", source=str(path)) from e

        if not isinstance(data, dict):
            raise ConfigError("profile must be a mapping", source=str(path))

        try:
            document = ProfileDocument.model_validate(data)
        except ValidationError as e:
            raise ConfigError(_format_validation_error(e), source=str(path)) from e

        return Profile(
            identifier=document.name,
            enabled=document.enabled,
            folder=document.folder or "",
            values=dict(document.values),
            source=str(path),
        )
