"""Rule generation API routes.

Lists the configured profiles and template fragments and runs generation
on demand, returning the rule set, the run report and optionally the
rendered documents. Nothing is written to disk.
"""

import logging

from fastapi import APIRouter, Body, Depends, HTTPException, status

from rulegen.api.deps import get_component_factory
from rulegen.api.schemas import (
    FragmentListResponse,
    FragmentSummary,
    GenerateRequest,
    GenerateResponse,
    ProfileListResponse,
    ProfileSummary,
)
from rulegen.core.factory import ComponentFactory
from rulegen.interfaces.generator import DuplicateRuleError
from rulegen.interfaces.profile_store import ConfigError, ProfileNotFoundError
from rulegen.interfaces.template_set import TemplateError
from rulegen.pipeline import run_generation
from rulegen.strategies.generator.models import ConflictRecord

logger = logging.getLogger(__name__)

router = APIRouter(tags=["rules"])


@router.get("/profiles", response_model=ProfileListResponse)
def list_profiles(
    factory: ComponentFactory = Depends(get_component_factory),
) -> ProfileListResponse:
    """List every profile in the profiles directory."""
    store = factory.get_profile_store()
    try:
        profiles = store.load(factory.settings.profiles_dir, strict=False)
    except ConfigError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from e

    return ProfileListResponse(
        profiles=[
            ProfileSummary(
                identifier=p.identifier,
                enabled=p.enabled,
                folder=p.routing_folder,
                variables=sorted(p.values),
                source=p.source,
            )
            for p in profiles
        ],
        errors=[str(e) for e in store.errors],
    )


@router.get("/templates", response_model=FragmentListResponse)
def list_templates(
    factory: ComponentFactory = Depends(get_component_factory),
) -> FragmentListResponse:
    """List every template fragment matched by the configured glob."""
    template_set = factory.get_template_set()
    try:
        fragments = template_set.load(
            factory.settings.templates_dir,
            factory.settings.template_glob,
            strict=False,
        )
    except TemplateError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from e

    return FragmentListResponse(
        fragments=[
            FragmentSummary(
                category=f.category,
                identifier=f.identifier,
                variables=sorted(f.variables),
                source=f.source,
            )
            for f in fragments
        ],
        errors=[str(e) for e in template_set.errors],
    )


@router.post("/rules/generate", response_model=GenerateResponse)
async def generate_rules(
    request: GenerateRequest | None = Body(default=None),
    factory: ComponentFactory = Depends(get_component_factory),
) -> GenerateResponse:
    """Generate the rule set without writing it.

    Raises:
        HTTPException: 404 for an unknown profile, 409 when generated rules
            collide, 422 when the inputs cannot be loaded.
    """
    request = request or GenerateRequest()
    try:
        run = await run_generation(factory, only=request.profiles)
    except ProfileNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Profile not found: {e.args[0]}",
        ) from e
    except DuplicateRuleError as e:
        logger.warning(f"Generation aborted: {e}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": "Generated rules would overwrite each other",
                "conflicts": [
                    ConflictRecord(kind=c.kind, key=c.key, sources=list(c.sources)).model_dump()
                    for c in e.conflicts
                ],
            },
        ) from e
    except (ConfigError, TemplateError) as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from e

    documents: dict[str, str] = {}
    if request.render or request.writer:
        writer = factory.get_writer(request.writer)
        documents = writer.render(run.rules, run.profiles)

    return GenerateResponse(rules=run.rules, report=run.report, documents=documents)
