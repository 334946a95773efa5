"""Application configuration using Pydantic v2 Settings.

Centralized configuration that loads from environment variables
and provides type-safe access throughout the application.
"""

import logging
import re
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

_DURATION_PATTERN = re.compile(r"^\d+[smhd]$")


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults and can be overridden via
    environment variables (prefixed with RULEGEN_) or a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="RULEGEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Inputs
    profiles_dir: Path = Field(
        default=Path("alerting/profiles"),
        description="Directory with one profile file per environment.",
    )
    templates_dir: Path = Field(
        default=Path("alerting/templates"),
        description="Root of the template tree; sub-directories are categories.",
    )
    template_glob: str = Field(
        default="**/*.yaml",
        description="Glob selecting fragment files below templates_dir.",
    )

    # Output
    output_dir: Path = Field(
        default=Path("build/alerting"),
        description="Directory the generated rule documents are written to.",
    )

    # Strategy Selection
    profile_store_type: str = Field(
        default="yaml",
        description="Profile store strategy to use: 'yaml'.",
    )
    writer_type: str = Field(
        default="grafana",
        description="Output format: 'grafana' or 'prometheus'.",
    )

    # Destination alerting system
    evaluation_interval: str = Field(
        default="1m",
        description="Fixed evaluation interval of every generated rule group.",
    )
    org_id: int = Field(
        default=1,
        description="Grafana organization the rule groups are provisioned into.",
    )
    datasource_uid: str = Field(
        default="prometheus",
        description="UID of the Prometheus datasource the queries run against.",
    )

    # Generation
    max_concurrency: int = Field(
        default=8,
        ge=1,
        description="Maximum number of (profile, fragment) pairs rendered at once.",
    )
    overlap_keys: list[str] = Field(
        default_factory=lambda: ["dest_namespace"],
        description="Profile variables whose values should not overlap between profiles.",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR.",
    )
    log_json: bool = Field(
        default=False,
        description="Render structlog output as JSON instead of console text.",
    )
    log_dir: Path | None = Field(
        default=None,
        description="Optional directory for rulegen.log and error.log.",
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Normalize log level to uppercase."""
        return v.upper()

    @field_validator("writer_type", "profile_store_type")
    @classmethod
    def normalize_strategy(cls, v: str) -> str:
        """Normalize strategy names to lowercase."""
        return v.strip().lower()

    @field_validator("evaluation_interval")
    @classmethod
    def validate_interval(cls, v: str) -> str:
        """Ensure the interval is a duration such as 1m or 30s."""
        if not _DURATION_PATTERN.match(v):
            raise ValueError(f"Invalid evaluation interval '{v}', expected e.g. '1m'")
        return v

    def configure_logging(self) -> None:
        """Configure global logging based on settings."""
        import structlog

        level = getattr(logging, self.log_level, logging.INFO)

        renderer = (
            structlog.processors.JSONRenderer()
            if self.log_json
            else structlog.dev.ConsoleRenderer(colors=False)
        )

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                renderer,
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        logging.basicConfig(
            format="%(message)s",
            level=level,
        )

        logger.setLevel(level)


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global Settings instance.

    Returns:
        The singleton Settings instance.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
        _settings.configure_logging()
    return _settings


def reset_settings() -> None:
    """Drop the cached Settings instance so the next call reloads it."""
    global _settings
    _settings = None
