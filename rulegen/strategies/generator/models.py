"""Rule generation domain models.

Pydantic models for the rule schema, the generated rules and the run report.
Kept apart from the engine to avoid circular imports with the interfaces.
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DURATION_PATTERN = r"^\d+[smhd]$"
FOLDER_LABEL = "folder"
RESERVED_LABELS = frozenset({FOLDER_LABEL})


class RuleBody(BaseModel):
    """Schema a fragment must satisfy once profile values are substituted."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    query: str = Field(description="PromQL expression evaluated by the alerting system")
    for_duration: str = Field(default="5m", alias="for", pattern=DURATION_PATTERN)
    threshold: float = Field(default=0, description="Fire when the query result exceeds this")
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    no_data_state: Literal["OK", "NoData", "Alerting"] = "OK"
    exec_err_state: Literal["OK", "Error", "Alerting"] = "Error"

    @field_validator("query")
    @classmethod
    def query_not_blank(cls, v: str) -> str:
        """Strip surrounding whitespace and reject empty queries."""
        v = v.strip()
        if not v:
            raise ValueError("query must not be empty")
        return v

    @field_validator("labels")
    @classmethod
    def no_reserved_labels(cls, v: dict[str, str]) -> dict[str, str]:
        """The routing folder label comes from the profile, never the fragment."""
        reserved = RESERVED_LABELS.intersection(v)
        if reserved:
            raise ValueError(f"reserved label names: {', '.join(sorted(reserved))}")
        return v


class GeneratedRule(BaseModel):
    """One fragment materialized for one profile."""

    model_config = ConfigDict(frozen=True)

    uid: str = Field(description="Globally unique rule UID")
    title: str = Field(description="Human readable rule title")
    folder: str = Field(description="Routing folder the rule is filed under")
    profile: str = Field(description="Profile identifier")
    fragment: str = Field(description="Fragment identifier")
    category: str = Field(description="Fragment category path")
    query: str
    for_duration: str = "5m"
    threshold: float = 0
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    no_data_state: str = "OK"
    exec_err_state: str = "Error"

    @property
    def source(self) -> str:
        """Where the rule came from, as profile/category/fragment."""
        return f"{self.profile}/{self.category}/{self.fragment}"


class PairStatus(str, Enum):
    """Outcome of one (profile, fragment) pair."""

    GENERATED = "generated"
    FAILED = "failed"
    SKIPPED = "skipped"


class PairOutcome(BaseModel):
    """Result of generating one pair, or of skipping a disabled profile."""

    profile: str
    fragment: str | None = Field(default=None, description="Category-qualified fragment key")
    status: PairStatus
    error_kind: str | None = None
    error: str | None = None


class ProfileOverlap(BaseModel):
    """Two or more enabled profiles selecting the same value."""

    key: str = Field(description="Profile variable compared")
    value: str = Field(description="Shared alternative")
    profiles: list[str]


class ConflictRecord(BaseModel):
    """Rules that would overwrite each other in the destination."""

    kind: str = Field(description="Either uid or title")
    key: str = Field(description="Shared UID, or title @ folder")
    sources: list[str] = Field(description="Every profile/category/fragment producing the key")


class GenerationReport(BaseModel):
    """Everything that happened during one generation run."""

    outcomes: list[PairOutcome] = Field(default_factory=list)
    profile_errors: list[str] = Field(default_factory=list)
    template_errors: list[str] = Field(default_factory=list)
    overlaps: list[ProfileOverlap] = Field(default_factory=list)
    conflicts: list[ConflictRecord] = Field(default_factory=list)

    @property
    def generated(self) -> list[PairOutcome]:
        return [o for o in self.outcomes if o.status == PairStatus.GENERATED]

    @property
    def failed(self) -> list[PairOutcome]:
        return [o for o in self.outcomes if o.status == PairStatus.FAILED]

    @property
    def skipped(self) -> list[PairOutcome]:
        return [o for o in self.outcomes if o.status == PairStatus.SKIPPED]

    @property
    def ok(self) -> bool:
        """True when no pair failed, every input loaded and no rules collided."""
        return not (self.failed or self.profile_errors or self.template_errors or self.conflicts)

    def summary(self) -> dict[str, int]:
        """Counts per outcome kind."""
        return {
            "generated": len(self.generated),
            "failed": len(self.failed),
            "skipped": len(self.skipped),
            "profile_errors": len(self.profile_errors),
            "template_errors": len(self.template_errors),
            "overlaps": len(self.overlaps),
            "conflicts": len(self.conflicts),
        }
