"""Rule generation strategies."""

from rulegen.strategies.generator.engine import RuleGenerator, rule_title, rule_uid
from rulegen.strategies.generator.models import (
    ConflictRecord,
    GeneratedRule,
    GenerationReport,
    PairOutcome,
    PairStatus,
    ProfileOverlap,
    RuleBody,
)

__all__ = [
    "ConflictRecord",
    "GeneratedRule",
    "GenerationReport",
    "PairOutcome",
    "PairStatus",
    "ProfileOverlap",
    "RuleBody",
    "RuleGenerator",
    "rule_title",
    "rule_uid",
]
