"""Abstract base class for rule document writers."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from rulegen.interfaces.profile_store import Profile

if TYPE_CHECKING:
    from rulegen.strategies.generator.models import GeneratedRule

logger = logging.getLogger(__name__)


class BaseRuleWriter(ABC):
    """Serializes generated rules into the destination system's rule format.

    One document is produced per enabled profile that has rules, grouping
    them under the profile's routing folder.
    """

    @abstractmethod
    def render_profile(self, profile: Profile, rules: Sequence["GeneratedRule"]) -> str:
        """Render one profile's rules as a document."""

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Short name of the output format."""

    def render(
        self,
        rules: Sequence["GeneratedRule"],
        profiles: Sequence[Profile],
    ) -> dict[str, str]:
        """Render every profile's document.

        Returns:
            File name to document text, in profile order.
        """
        documents: dict[str, str] = {}
        for profile in profiles:
            profile_rules = [r for r in rules if r.profile == profile.identifier]
            if not profile.enabled or not profile_rules:
                continue
            documents[f"{profile.identifier}.yaml"] = self.render_profile(profile, profile_rules)
        return documents

    def write(
        self,
        rules: Sequence["GeneratedRule"],
        profiles: Sequence[Profile],
        output_directory: str | Path,
    ) -> list[Path]:
        """Render and write every profile's document.

        Returns:
            Paths of the written files.
        """
        output_dir = Path(output_directory)
        output_dir.mkdir(parents=True, exist_ok=True)

        written: list[Path] = []
        for filename, text in self.render(rules, profiles).items():
            path = output_dir / filename
            path.write_text(text, encoding="utf-8")
            written.append(path)
            logger.info(f"Wrote {self.format_name} rules: {path}")
        return written
