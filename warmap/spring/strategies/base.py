"""
Route mapping strategy interface.
"""

from __future__ import annotations

import re
from typing import Optional

from ...classfile import AnnotationDecoder
from ...routing import RouteTable
from .. import constants
from ..definitions import ComponentDefinition
from ..registry import Registry

_DUPLICATE_SLASHES = re.compile(r"/{2,}")


def collapse_slashes(url: str) -> str:
    return _DUPLICATE_SLASHES.sub("/", url)


class MappingStrategy:
    """
    One of the handler-mapping conventions of Spring MVC.

    A strategy reads a registry and adds routes rooted at a URL prefix.

    Args:
        decoder: Decoder for the classes the registry's beans name
    """

    name = "strategy"

    def __init__(self, decoder: AnnotationDecoder):
        self.decoder = decoder

    def apply(self, registry: Registry, url_prefix: str, table: RouteTable) -> int:
        """
        Add this strategy's routes to the table.

        Returns:
            Number of routes registered
        """
        raise NotImplementedError

    def is_controller(self, definition: ComponentDefinition) -> bool:
        """Whether the definition's class implements the MVC Controller interface."""
        class_name = definition.class_name
        if not class_name:
            return False
        return self.decoder.implements(class_name, constants.CONTROLLER_INTERFACE)

    @staticmethod
    def first_bean(registry: Registry, class_name: str) -> Optional[ComponentDefinition]:
        beans = registry.get_beans_by_class(class_name)
        return beans[0] if beans else None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
