"""
Explicit URL map (SimpleUrlHandlerMapping).
"""

from __future__ import annotations

import logging

from ...routing import ComponentDestination, RouteTable
from .. import constants
from ..registry import Registry
from .base import MappingStrategy

logger = logging.getLogger("warmap.spring.strategies.explicit")


class ExplicitUrlMapStrategy(MappingStrategy):
    """
    Routes listed in the 'mappings' (or 'urlMap') property of every
    SimpleUrlHandlerMapping bean, each to the bean it references.
    """

    name = "explicit-url-map"

    def apply(self, registry: Registry, url_prefix: str, table: RouteTable) -> int:
        count = 0
        for mapper in registry.get_beans_by_class(constants.SIMPLE_URL_HANDLER_MAPPING):
            mappings = mapper.get_property_as_properties("mappings")
            if mappings is None:
                mappings = mapper.get_property_as_properties("urlMap")
            if not mappings:
                logger.warning(f"URL mapping bean '{mapper.key}' has no mappings")
                continue

            for fragment, reference in mappings.items():
                target = registry.get(reference.strip())
                if target is None:
                    logger.warning(
                        f"URL mapping bean '{mapper.key}' maps {fragment} to unknown bean '{reference}'"
                    )
                    continue
                if not fragment.startswith("/"):
                    fragment = "/" + fragment
                table.put(url_prefix + fragment, ComponentDestination.of(target))
                count += 1
        return count
