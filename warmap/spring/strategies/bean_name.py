"""
Bean-name convention (BeanNameUrlHandlerMapping).
"""

from __future__ import annotations

import logging

from ...routing import ComponentDestination, RouteTable
from .. import constants
from ..registry import Registry
from .base import MappingStrategy

logger = logging.getLogger("warmap.spring.strategies.bean_name")


class BeanNameConventionStrategy(MappingStrategy):
    """
    Maps every Controller bean whose id or name starts with '/' to that URL.

    Active only when the context declares a BeanNameUrlHandlerMapping.
    """

    name = "bean-name-convention"

    def apply(self, registry: Registry, url_prefix: str, table: RouteTable) -> int:
        if self.first_bean(registry, constants.BEAN_NAME_URL_HANDLER_MAPPING) is None:
            return 0

        count = 0
        for definition in registry.concrete_beans():
            if not self.is_controller(definition):
                continue
            urls = [name for name in definition.names() if name.startswith("/")]
            if not urls:
                logger.warning(
                    f"Controller bean '{definition.key}' has no name starting with '/'; not mapped"
                )
                continue
            destination = ComponentDestination.of(definition)
            for url in urls:
                table.put(url_prefix + url, destination)
                count += 1
        return count
