"""End-to-end generation run.

Loads profiles and fragments, generates the rule set and folds load errors
into the run report. Shared by the CLI and the HTTP API.
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from functools import partial
from pathlib import Path

from rulegen.core.factory import ComponentFactory
from rulegen.interfaces.generator import DuplicateRuleError
from rulegen.interfaces.profile_store import Profile
from rulegen.interfaces.template_set import TemplateFragment
from rulegen.strategies.generator.models import GeneratedRule, GenerationReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationRun:
    """Inputs and outputs of one generation run."""

    profiles: list[Profile]
    fragments: list[TemplateFragment]
    rules: list[GeneratedRule]
    report: GenerationReport


def load_inputs(
    factory: ComponentFactory,
    *,
    profiles_dir: str | Path | None = None,
    templates_dir: str | Path | None = None,
    template_glob: str | None = None,
    strict: bool = False,
    only: Sequence[str] | None = None,
) -> tuple[list[Profile], list[TemplateFragment], list[str], list[str]]:
    """Load profiles and fragments.

    Args:
        factory: Component factory supplying the loaders.
        profiles_dir: Profiles directory. If None, uses settings.
        templates_dir: Templates root. If None, uses settings.
        template_glob: Fragment glob. If None, uses settings.
        strict: Abort on the first bad profile or fragment.
        only: Restrict the run to these profile identifiers, in this order.
            Repeated names are ignored.

    Returns:
        Profiles, fragments, and the profile and fragment load errors.

    Raises:
        ConfigError: If the profiles directory is missing, or strict and a
            profile is invalid.
        TemplateError: If the templates directory is missing, or strict and
            a fragment is invalid.
        ProfileNotFoundError: If `only` names an unknown profile.
    """
    settings = factory.settings

    store = factory.get_profile_store()
    profiles = store.load(profiles_dir or settings.profiles_dir, strict=strict)
    if only:
        # Repeated names would collide with themselves
        profiles = [store.get(identifier) for identifier in dict.fromkeys(only)]

    template_set = factory.get_template_set()
    fragments = template_set.load(
        templates_dir or settings.templates_dir,
        template_glob or settings.template_glob,
        strict=strict,
    )

    return (
        profiles,
        fragments,
        [str(e) for e in store.errors],
        [str(e) for e in template_set.errors],
    )


async def run_generation(
    factory: ComponentFactory,
    *,
    profiles_dir: str | Path | None = None,
    templates_dir: str | Path | None = None,
    template_glob: str | None = None,
    strict: bool = False,
    only: Sequence[str] | None = None,
) -> GenerationRun:
    """Load inputs and generate the rule set.

    Raises:
        DuplicateRuleError: If the generated set has colliding rules. The
            attached report includes the load errors.
    """
    # Loading reads files; keep it off the event loop
    loop = asyncio.get_running_loop()
    profiles, fragments, profile_errors, template_errors = await loop.run_in_executor(
        None,
        partial(
            load_inputs,
            factory,
            profiles_dir=profiles_dir,
            templates_dir=templates_dir,
            template_glob=template_glob,
            strict=strict,
            only=only,
        ),
    )

    generator = factory.get_generator()
    try:
        rules, report = await generator.generate(profiles, fragments)
    except DuplicateRuleError as e:
        if e.report is not None:
            e.report.profile_errors.extend(profile_errors)
            e.report.template_errors.extend(template_errors)
        raise

    report.profile_errors.extend(profile_errors)
    report.template_errors.extend(template_errors)

    logger.info(
        f"Run finished: {len(rules)} rules from {len(profiles)} profiles "
        f"and {len(fragments)} fragments"
    )
    return GenerationRun(profiles=profiles, fragments=fragments, rules=rules, report=report)
