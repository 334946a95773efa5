"""FastAPI routers and dependencies."""

from rulegen.api.deps import get_component_factory
from rulegen.api.rules import router as rules_router

__all__ = [
    "get_component_factory",
    "rules_router",
]
