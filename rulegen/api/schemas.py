"""API request and response schemas.

Pydantic v2 models for API serialization/deserialization.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

from rulegen.strategies.generator.models import GeneratedRule, GenerationReport


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str = Field(description="Error message")
    error_code: str | None = Field(default=None, description="Application-specific error code")
    extra: dict[str, Any] | None = Field(default=None, description="Additional error context")


# =============================================================================
# Input Schemas
# =============================================================================


class ProfileSummary(BaseModel):
    """A loaded environment profile."""

    identifier: str
    enabled: bool
    folder: str
    variables: list[str] = Field(description="Variable names defined by the profile")
    source: str


class ProfileListResponse(BaseModel):
    """Response for listing profiles."""

    profiles: list[ProfileSummary]
    errors: list[str] = Field(default_factory=list, description="Rejected profile files")


class FragmentSummary(BaseModel):
    """A loaded template fragment."""

    category: str
    identifier: str
    variables: list[str] = Field(description="Profile variables the fragment references")
    source: str


class FragmentListResponse(BaseModel):
    """Response for listing template fragments."""

    fragments: list[FragmentSummary]
    errors: list[str] = Field(default_factory=list, description="Rejected fragment files")


# =============================================================================
# Generation Schemas
# =============================================================================


class GenerateRequest(BaseModel):
    """Request for a generation run."""

    profiles: list[str] | None = Field(
        default=None, description="Restrict the run to these profiles"
    )
    writer: Literal["grafana", "prometheus"] | None = Field(
        default=None, description="Render documents in this format"
    )
    render: bool = Field(default=False, description="Include rendered documents")


class GenerateResponse(BaseModel):
    """Result of a generation run."""

    rules: list[GeneratedRule]
    report: GenerationReport
    documents: dict[str, str] = Field(
        default_factory=dict, description="File name to rendered document"
    )
