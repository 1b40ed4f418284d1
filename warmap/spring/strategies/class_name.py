"""
Class-name convention (ControllerClassNameHandlerMapping).
"""

from __future__ import annotations

import logging

from ...routing import ComponentDestination, RouteTable
from .. import constants
from ..registry import Registry
from .base import MappingStrategy, collapse_slashes

logger = logging.getLogger("warmap.spring.strategies.class_name")

CONTROLLER_SUFFIX = "controller"


def url_segment(class_name: str) -> str:
    """
    URL segment for a controller class.

    "com.example.FooController" -> "foo", "com.example.Bar" -> "bar"
    """
    segment = class_name.rsplit(".", 1)[-1].lower()
    if segment.endswith(CONTROLLER_SUFFIX) and len(segment) > len(CONTROLLER_SUFFIX):
        segment = segment[:-len(CONTROLLER_SUFFIX)]
    return segment


class ClassNameConventionStrategy(MappingStrategy):
    """
    Maps every Controller implementation to a URL derived from its class name.

    Active only when the context declares a ControllerClassNameHandlerMapping.
    """

    name = "class-name-convention"

    def apply(self, registry: Registry, url_prefix: str, table: RouteTable) -> int:
        mapper = self.first_bean(registry, constants.CONTROLLER_CLASS_NAME_HANDLER_MAPPING)
        if mapper is None:
            return 0

        path_prefix = (mapper.get_property_as_string("pathPrefix") or "").strip()
        count = 0
        for definition in registry.concrete_beans():
            if not self.is_controller(definition):
                continue
            url = collapse_slashes(f"{url_prefix}/{path_prefix}/{url_segment(definition.class_name)}")
            table.put(url, ComponentDestination.of(definition))
            logger.debug(f"{definition.class_name} mapped by class name to {url}")
            count += 1
        return count
