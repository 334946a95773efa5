"""Rule generation interfaces.

Defines the generator contract and the error taxonomy for a generation run.
Per-pair errors are recovered into the run report; only duplicate rules
abort the run.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from rulegen.interfaces.profile_store import Profile
from rulegen.interfaces.template_set import TemplateFragment

if TYPE_CHECKING:
    from rulegen.strategies.generator.models import GeneratedRule, GenerationReport


@dataclass(frozen=True)
class RuleConflict:
    """Two or more generated rules that would overwrite each other.

    Attributes:
        kind: "uid" or "title".
        key: The shared UID, or "title @ folder" for title collisions.
        sources: Every "profile/category/fragment" producing the key.
    """

    kind: str
    key: str
    sources: tuple[str, ...]

    def __str__(self) -> str:
        return f"duplicate {self.kind} '{self.key}' from {', '.join(self.sources)}"


class UnresolvedPlaceholderError(Exception):
    """A fragment references variables the active profile does not define."""

    def __init__(self, profile: str, fragment: str, missing: Sequence[str]) -> None:
        self.profile = profile
        self.fragment = fragment
        self.missing = tuple(sorted(missing))
        super().__init__(
            f"profile '{profile}' does not define {', '.join(self.missing)} "
            f"required by '{fragment}'"
        )


class RuleValidationError(Exception):
    """A rendered fragment does not satisfy the rule schema."""

    def __init__(self, profile: str, fragment: str, reason: str) -> None:
        self.profile = profile
        self.fragment = fragment
        self.reason = reason
        super().__init__(f"rule '{fragment}' for profile '{profile}' is invalid: {reason}")


class DuplicateRuleError(Exception):
    """The generated set contains colliding UIDs or titles.

    Fatal to the whole run: an ambiguous destination state is worse than no
    update at all.
    """

    def __init__(
        self,
        conflicts: Sequence[RuleConflict],
        report: "GenerationReport | None" = None,
    ) -> None:
        self.conflicts = list(conflicts)
        self.report = report
        super().__init__("; ".join(str(c) for c in self.conflicts))


class BaseRuleGenerator(ABC):
    """Abstract base class for rule generation strategies."""

    @abstractmethod
    async def generate(
        self,
        profiles: Sequence[Profile],
        fragments: Sequence[TemplateFragment],
    ) -> tuple[list["GeneratedRule"], "GenerationReport"]:
        """Materialize every (enabled profile x fragment) pair.

        Args:
            profiles: Profiles in load order.
            fragments: Fragments in load order.

        Returns:
            Generated rules grouped by profile then fragment, and the run report.

        Raises:
            DuplicateRuleError: If two rules share a UID or a (title, folder) pair.
        """
