"""Component Factory for strategy instantiation.

The Factory Pattern allows the application to instantiate
different strategy implementations at runtime based on
configuration or environment variables.
"""

import logging

from rulegen.core.config import Settings, get_settings
from rulegen.interfaces.generator import BaseRuleGenerator
from rulegen.interfaces.profile_store import BaseProfileStore
from rulegen.interfaces.template_set import BaseRuleTemplateSet
from rulegen.interfaces.writer import BaseRuleWriter
from rulegen.strategies.generator import RuleGenerator
from rulegen.strategies.profiles import YamlProfileStore
from rulegen.strategies.templates import FilesystemTemplateSet
from rulegen.strategies.writers import GrafanaRuleWriter, PrometheusRuleWriter

logger = logging.getLogger(__name__)


class ComponentFactory:
    """Factory for creating component instances based on configuration.

    Example:
        ```python
        settings = get_settings()
        factory = ComponentFactory(settings)

        store = factory.get_profile_store()
        templates = factory.get_template_set()
        generator = factory.get_generator()
        writer = factory.get_writer()
        ```
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the factory with optional settings.

        Args:
            settings: Application settings. If None, uses global settings.
        """
        self._settings = settings or get_settings()
        self._generator_cache: BaseRuleGenerator | None = None
        self._writer_cache: BaseRuleWriter | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    def get_profile_store(self, store_type: str | None = None) -> BaseProfileStore:
        """Get a new profile store.

        Stores hold the profiles of one load, so they are never cached.

        Raises:
            ValueError: If the store type is unknown.
        """
        store_type = store_type or self._settings.profile_store_type
        logger.debug(f"Instantiating profile store: {store_type}")

        match store_type:
            case "yaml":
                return YamlProfileStore()
            case _:
                raise ValueError(
                    f"Unknown profile store type: {store_type}. Valid options: 'yaml'"
                )

    def get_template_set(self) -> BaseRuleTemplateSet:
        """Get a new template set."""
        return FilesystemTemplateSet()

    def get_generator(self) -> BaseRuleGenerator:
        """Get the rule generator instance."""
        if self._generator_cache is None:
            logger.info("Instantiating rule generator")
            self._generator_cache = RuleGenerator(
                max_concurrency=self._settings.max_concurrency,
                overlap_keys=self._settings.overlap_keys,
            )
        return self._generator_cache

    def get_writer(self, writer_type: str | None = None) -> BaseRuleWriter:
        """Get a rule writer instance based on the specified type.

        Args:
            writer_type: The output format. If None, uses settings.

        Raises:
            ValueError: If the writer type is unknown.
        """
        if self._writer_cache is None or writer_type is not None:
            writer_type = writer_type or self._settings.writer_type

            logger.info(f"Instantiating rule writer: {writer_type}")

            match writer_type:
                case "grafana":
                    self._writer_cache = GrafanaRuleWriter(
                        datasource_uid=self._settings.datasource_uid,
                        evaluation_interval=self._settings.evaluation_interval,
                        org_id=self._settings.org_id,
                    )
                case "prometheus":
                    self._writer_cache = PrometheusRuleWriter(
                        evaluation_interval=self._settings.evaluation_interval,
                    )
                case _:
                    raise ValueError(
                        f"Unknown writer type: {writer_type}. "
                        f"Valid options: 'grafana', 'prometheus'"
                    )

        return self._writer_cache

    def clear_cache(self) -> None:
        """Clear all cached component instances."""
        self._generator_cache = None
        self._writer_cache = None
        logger.debug("Component factory cache cleared")


# Global factory instance
_factory: ComponentFactory | None = None


def get_factory() -> ComponentFactory:
    """Get or create the global ComponentFactory instance.

    Returns:
        The singleton ComponentFactory instance.
    """
    global _factory
    if _factory is None:
        _factory = ComponentFactory()
    return _factory
