"""Abstract base classes for rule generation strategies."""

from rulegen.interfaces.generator import (
    BaseRuleGenerator,
    DuplicateRuleError,
    RuleConflict,
    RuleValidationError,
    UnresolvedPlaceholderError,
)
from rulegen.interfaces.profile_store import (
    BaseProfileStore,
    ConfigError,
    Profile,
    ProfileNotFoundError,
)
from rulegen.interfaces.template_set import (
    BaseRuleTemplateSet,
    LiteralText,
    PassthroughText,
    ProfilePlaceholder,
    TemplateError,
    TemplateFragment,
)
from rulegen.interfaces.writer import BaseRuleWriter

__all__ = [
    "BaseProfileStore",
    "BaseRuleGenerator",
    "BaseRuleTemplateSet",
    "BaseRuleWriter",
    "ConfigError",
    "DuplicateRuleError",
    "LiteralText",
    "PassthroughText",
    "Profile",
    "ProfileNotFoundError",
    "ProfilePlaceholder",
    "RuleConflict",
    "RuleValidationError",
    "TemplateError",
    "TemplateFragment",
    "UnresolvedPlaceholderError",
]
