"""Rule generation engine.

Materializes every (enabled profile x fragment) pair, validates the result
against the rule schema and checks the whole set for colliding UIDs and
titles before anything is handed to a writer.
"""

import asyncio
import hashlib
import logging
import re
from collections.abc import Iterable, Sequence

import yaml
from pydantic import ValidationError

from rulegen.interfaces.generator import (
    BaseRuleGenerator,
    DuplicateRuleError,
    RuleConflict,
    RuleValidationError,
    UnresolvedPlaceholderError,
)
from rulegen.interfaces.profile_store import Profile
from rulegen.interfaces.template_set import TemplateFragment
from rulegen.strategies.generator.models import (
    ConflictRecord,
    GeneratedRule,
    GenerationReport,
    PairOutcome,
    PairStatus,
    ProfileOverlap,
    RuleBody,
)
from rulegen.strategies.templates.parser import render_value, substitute

logger = logging.getLogger(__name__)

# Grafana rejects rule UIDs longer than 40 characters
UID_MAX_LENGTH = 40
_UID_INVALID = re.compile(r"[^A-Za-z0-9_-]")


def rule_uid(fragment_key: str, profile_id: str) -> str:
    """Deterministic rule UID for a (fragment, profile) pair.

    Args:
        fragment_key: Category-qualified fragment key, e.g. "backend/app-down".
        profile_id: Profile identifier.

    Returns:
        `<profile>-<category>-<fragment>` when that fits Grafana's limit,
        otherwise `<profile>-<fragment>` shortened and suffixed with a
        digest of the full key.
    """
    uid = _UID_INVALID.sub("-", f"{profile_id}-{fragment_key}")
    if len(uid) <= UID_MAX_LENGTH:
        return uid

    identifier = fragment_key.rpartition("/")[2]
    digest = hashlib.sha1(f"{profile_id}/{fragment_key}".encode("utf-8")).hexdigest()[:8]
    prefix = _UID_INVALID.sub("-", f"{profile_id}-{identifier}")[: UID_MAX_LENGTH - 9]
    return f"{prefix}-{digest}"


def rule_title(fragment_key: str, profile_id: str) -> str:
    """Deterministic rule title, e.g. "App down (backend) [prod]"."""
    category, _, identifier = fragment_key.rpartition("/")
    words = re.sub(r"[-_]+", " ", identifier).strip()
    title = f"{words[:1].upper()}{words[1:]}"
    if category:
        title = f"{title} ({category})"
    return f"{title} [{profile_id}]"


def find_conflicts(rules: Iterable[GeneratedRule]) -> list[RuleConflict]:
    """Collect every UID and (title, folder) collision in a generated set."""
    by_uid: dict[str, list[str]] = {}
    by_title: dict[tuple[str, str], list[str]] = {}
    for rule in rules:
        by_uid.setdefault(rule.uid, []).append(rule.source)
        by_title.setdefault((rule.title, rule.folder), []).append(rule.source)

    conflicts = [
        RuleConflict(kind="uid", key=uid, sources=tuple(sources))
        for uid, sources in by_uid.items()
        if len(sources) > 1
    ]
    conflicts.extend(
        RuleConflict(kind="title", key=f"{title} @ {folder}", sources=tuple(sources))
        for (title, folder), sources in by_title.items()
        if len(sources) > 1
    )
    return conflicts


def find_overlaps(profiles: Iterable[Profile], keys: Sequence[str]) -> list[ProfileOverlap]:
    """Find enabled profiles sharing an alternative of a selector value.

    Values are split on "|" so that `prod|exodia` overlaps with `exodia`.
    """
    overlaps: list[ProfileOverlap] = []
    enabled = [p for p in profiles if p.enabled]
    for key in keys:
        owners: dict[str, list[str]] = {}
        for profile in enabled:
            if key not in profile.values:
                continue
            for alternative in render_value(profile.values[key]).split("|"):
                alternative = alternative.strip()
                if alternative and profile.identifier not in owners.setdefault(alternative, []):
                    owners[alternative].append(profile.identifier)
        overlaps.extend(
            ProfileOverlap(key=key, value=value, profiles=names)
            for value, names in owners.items()
            if len(names) > 1
        )
    return overlaps


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item["loc"]) or "rule"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


class RuleGenerator(BaseRuleGenerator):
    """Generates alert rules from profiles and template fragments.

    Pairs are rendered as independent tasks, each writing its own result
    slot. Results are merged by slot index, so output order is always
    profile load order then fragment order, whatever order tasks finish in.
    """

    def __init__(
        self,
        max_concurrency: int = 8,
        overlap_keys: Sequence[str] = ("dest_namespace",),
    ) -> None:
        """Initialize the generator.

        Args:
            max_concurrency: Maximum number of pairs rendered at once.
            overlap_keys: Profile variables checked for overlapping selectors.
        """
        self._max_concurrency = max_concurrency
        self._overlap_keys = tuple(overlap_keys)

        logger.info(
            f"RuleGenerator initialized: max_concurrency={max_concurrency}, "
            f"overlap_keys={list(self._overlap_keys)}"
        )

    async def generate(
        self,
        profiles: Sequence[Profile],
        fragments: Sequence[TemplateFragment],
    ) -> tuple[list[GeneratedRule], GenerationReport]:
        report = GenerationReport()
        enabled = [p for p in profiles if p.enabled]
        pairs = [(profile, fragment) for profile in enabled for fragment in fragments]

        logger.info(
            f"Generating {len(pairs)} rules: {len(enabled)} enabled profiles "
            f"x {len(fragments)} fragments"
        )

        slots: list[tuple[GeneratedRule | None, PairOutcome] | None] = [None] * len(pairs)
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def fill(index: int, profile: Profile, fragment: TemplateFragment) -> None:
            async with semaphore:
                slots[index] = await self._render_pair(profile, fragment)

        await asyncio.gather(*(fill(i, p, f) for i, (p, f) in enumerate(pairs)))

        rules: list[GeneratedRule] = []
        results = iter(slots)
        for profile in profiles:
            if not profile.enabled:
                logger.info(f"Skipping disabled profile {profile.identifier}")
                report.outcomes.append(
                    PairOutcome(profile=profile.identifier, status=PairStatus.SKIPPED)
                )
                continue
            for _ in fragments:
                rule, outcome = next(results)
                report.outcomes.append(outcome)
                if rule is not None:
                    rules.append(rule)

        report.overlaps = find_overlaps(profiles, self._overlap_keys)
        for overlap in report.overlaps:
            logger.warning(
                f"Profiles {', '.join(overlap.profiles)} share "
                f"{overlap.key}={overlap.value}; matching alerts will notify once per profile"
            )

        conflicts = find_conflicts(rules)
        if conflicts:
            for conflict in conflicts:
                logger.error(f"Rule conflict: {conflict}")
            report.conflicts = [
                ConflictRecord(kind=c.kind, key=c.key, sources=list(c.sources))
                for c in conflicts
            ]
            raise DuplicateRuleError(conflicts, report)

        logger.info(f"Generation complete: {report.summary()}")
        return rules, report

    async def _render_pair(
        self, profile: Profile, fragment: TemplateFragment
    ) -> tuple[GeneratedRule | None, PairOutcome]:
        """Render one pair, turning per-pair errors into a failed outcome."""
        try:
            rule = self.render_pair(profile, fragment)
        except (UnresolvedPlaceholderError, RuleValidationError) as e:
            logger.warning(f"Pair {profile.identifier}/{fragment.key} failed: {e}")
            return None, PairOutcome(
                profile=profile.identifier,
                fragment=fragment.key,
                status=PairStatus.FAILED,
                error_kind=type(e).__name__,
                error=str(e),
            )
        return rule, PairOutcome(
            profile=profile.identifier,
            fragment=fragment.key,
            status=PairStatus.GENERATED,
        )

    def render_pair(self, profile: Profile, fragment: TemplateFragment) -> GeneratedRule:
        """Substitute a profile into a fragment and validate the result.

        Raises:
            UnresolvedPlaceholderError: If the profile lacks a referenced variable.
            RuleValidationError: If the rendered rule does not match the schema.
        """
        text, missing = substitute(fragment.segments, profile.values)
        if missing:
            raise UnresolvedPlaceholderError(profile.identifier, fragment.key, missing)

        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise RuleValidationError(
                profile.identifier, fragment.key, f"rendered text is not valid YAML: {e}"
            ) from e
        if not isinstance(data, dict):
            raise RuleValidationError(profile.identifier, fragment.key, "rule must be a mapping")

        try:
            body = RuleBody.model_validate(data)
        except ValidationError as e:
            raise RuleValidationError(
                profile.identifier, fragment.key, _format_validation_error(e)
            ) from e

        return GeneratedRule(
            uid=rule_uid(fragment.key, profile.identifier),
            title=rule_title(fragment.key, profile.identifier),
            folder=profile.routing_folder,
            profile=profile.identifier,
            fragment=fragment.identifier,
            category=fragment.category,
            query=body.query,
            for_duration=body.for_duration,
            threshold=body.threshold,
            labels=body.labels,
            annotations=body.annotations,
            no_data_state=body.no_data_state,
            exec_err_state=body.exec_err_state,
        )
