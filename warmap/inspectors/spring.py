"""
Spring inspector - replaces DispatcherServlet mappings with the routes the
servlet's Spring context defines.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from ..archive import ServletMapping, WarArchive
from ..classfile import AnnotationDecoder
from ..config import SpringConfig
from ..routing import HttpMethod, RouteTable
from ..spring import ContextLoader, Registry, ResourceResolver, default_strategies
from ..spring import constants

logger = logging.getLogger("warmap.inspectors.spring")


def url_prefix(pattern: str) -> str:
    """
    Directory portion of a servlet URL pattern.

    "/servlet/*" -> "/servlet", "/" -> "", "/*" -> "", "*.do" -> ""
    """
    cut = pattern.rfind("/")
    if cut <= 0:
        return ""
    return pattern[:cut]


class SpringInspector:
    """
    Args:
        decoder: Class decoder shared with the rest of the run
        config: Spring class names and defaults
    """

    def __init__(self, decoder: AnnotationDecoder, config: Optional[SpringConfig] = None):
        self.decoder = decoder
        self.config = config or SpringConfig()

    def front_controllers(self, archive: WarArchive) -> List[ServletMapping]:
        return [
            m for m in archive.descriptor.servlet_mappings()
            if m.servlet_class == self.config.dispatcher_servlet
        ]

    def inspect(self, archive: WarArchive, table: RouteTable) -> None:
        mappings = self.front_controllers(archive)
        if not mappings:
            logger.debug("No DispatcherServlet mappings; nothing to do")
            return

        for mapping in mappings:
            table.remove(mapping.url_pattern, HttpMethod.ALL)

        loader = ContextLoader(ResourceResolver(archive), self.decoder, self.config.scan_annotations)
        root = self._root_context(archive, loader)
        strategies = default_strategies(self.decoder, self.config.controller_annotations)

        contexts: Dict[str, Registry] = {}
        for mapping in mappings:
            locations = mapping.init_params.get(constants.CONTEXT_CONFIG_LOCATION)
            if not locations or not locations.strip():
                locations = constants.SERVLET_CONTEXT_TEMPLATE.format(servlet_name=mapping.servlet_name)
            # a servlet mapped under several patterns has one context
            registry = contexts.get(mapping.servlet_name)
            if registry is None:
                registry = loader.load(locations, parent=root, name=f"{mapping.servlet_name} ({locations.strip()})")
                contexts[mapping.servlet_name] = registry

            prefix = url_prefix(mapping.url_pattern)
            for strategy in strategies:
                count = strategy.apply(registry, prefix, table)
                logger.debug(f"{strategy.name}: {count} routes under '{prefix}' for {mapping.servlet_name}")

    def _root_context(self, archive: WarArchive, loader: ContextLoader) -> Optional[Registry]:
        if self.config.context_listener not in archive.descriptor.listener_classes():
            return None
        locations = archive.descriptor.context_param(constants.CONTEXT_CONFIG_LOCATION)
        if not locations or not locations.strip():
            locations = self.config.root_context
        return loader.load(locations, name=f"root ({locations.strip()})")
