"""FastAPI dependencies for dependency injection."""

from fastapi import Depends

from rulegen.core.config import Settings, get_settings
from rulegen.core.factory import ComponentFactory


def get_component_factory(
    settings: Settings = Depends(get_settings),
) -> ComponentFactory:
    """Dependency providing a component factory bound to the settings.

    Args:
        settings: Application settings.

    Returns:
        A ComponentFactory for this request.
    """
    return ComponentFactory(settings)
