"""Concrete strategy implementations."""

from rulegen.strategies.generator import (
    RuleGenerator,
)
from rulegen.strategies.profiles import (
    YamlProfileStore,
)
from rulegen.strategies.templates import (
    FilesystemTemplateSet,
)
from rulegen.strategies.writers import (
    GrafanaRuleWriter,
    PrometheusRuleWriter,
)

__all__ = [
    "FilesystemTemplateSet",
    "GrafanaRuleWriter",
    "PrometheusRuleWriter",
    "RuleGenerator",
    "YamlProfileStore",
]
