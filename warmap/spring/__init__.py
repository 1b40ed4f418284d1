"""
Spring MVC support - contexts, component registry and handler mappings.
"""

from .definitions import (
    ComponentDefinition,
    DeclaredDefinition,
    DiscoveredDefinition,
    default_bean_name,
    parse_properties,
)
from .registry import Registry, RegistryBuilder
from .resources import ResourceResolver
from .context import ContextLoader
from .strategies import default_strategies

__all__ = [
    "ComponentDefinition",
    "DeclaredDefinition",
    "DiscoveredDefinition",
    "default_bean_name",
    "parse_properties",
    "Registry",
    "RegistryBuilder",
    "ResourceResolver",
    "ContextLoader",
    "default_strategies",
]
