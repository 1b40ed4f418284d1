"""
Component registry.

RegistryBuilder accumulates definitions while a context is loaded;
Registry is the immutable result handed to the route mapping strategies.

Both keep three indexes:
- by preferred key (id, else name, else a generated "<class>#<n>")
- by literal id
- by literal name (the name attribute itself and each of its aliases)
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional

from .definitions import ComponentDefinition, DeclaredDefinition

logger = logging.getLogger("warmap.spring.registry")


class Registry:
    """
    Immutable set of component definitions visible in one context.

    Lookups never consult a parent registry: a child registry already holds
    a copy of its parent's entries.
    """

    def __init__(
        self,
        by_key: Dict[str, ComponentDefinition],
        by_id: Dict[str, ComponentDefinition],
        by_name: Dict[str, ComponentDefinition],
        name: str = "",
    ):
        self._by_key = MappingProxyType(dict(by_key))
        self._by_id = MappingProxyType(dict(by_id))
        self._by_name = MappingProxyType(dict(by_name))
        self.name = name

    def get(self, name: str) -> Optional[ComponentDefinition]:
        """Look a definition up by literal id, then by literal name."""
        definition = self._by_id.get(name)
        if definition is None:
            definition = self._by_name.get(name)
        return definition

    def beans(self) -> Mapping[str, ComponentDefinition]:
        """All definitions by preferred key, in registration order."""
        return self._by_key

    def get_beans_by_class(self, class_name: str) -> List[ComponentDefinition]:
        """Concrete definitions whose resolved class is exactly class_name."""
        return [
            d for d in self._by_key.values()
            if not d.is_abstract and d.class_name == class_name
        ]

    def concrete_beans(self) -> List[ComponentDefinition]:
        """Definitions that would be instantiated; abstract templates are left out."""
        return [d for d in self._by_key.values() if not d.is_abstract]

    def __contains__(self, name: object) -> bool:
        return self.get(name) is not None  # type: ignore[arg-type]

    def __iter__(self) -> Iterator[ComponentDefinition]:
        return iter(self._by_key.values())

    def __len__(self) -> int:
        return len(self._by_key)

    def __repr__(self) -> str:
        return f"Registry(name={self.name!r}, beans={len(self)})"


class RegistryBuilder:
    """
    Mutable accumulator for one context's definitions.

    Args:
        parent: Registry whose entries seed this one
        name: Label used in log messages
    """

    def __init__(self, parent: Optional[Registry] = None, name: str = ""):
        self.name = name
        self._by_key: Dict[str, ComponentDefinition] = {}
        self._by_id: Dict[str, ComponentDefinition] = {}
        self._by_name: Dict[str, ComponentDefinition] = {}
        self._owned: List[ComponentDefinition] = []

        if parent is not None:
            self._by_key.update(parent._by_key)
            self._by_id.update(parent._by_id)
            self._by_name.update(parent._by_name)

    def _generate_key(self, definition: ComponentDefinition) -> str:
        hint = definition.key_hint
        n = 0
        while f"{hint}#{n}" in self._by_key:
            n += 1
        return f"{hint}#{n}"

    def _unindex(self, stale: ComponentDefinition) -> None:
        for index in (self._by_id, self._by_name):
            for name in [k for k, v in index.items() if v is stale]:
                del index[name]

    def add(self, definition: ComponentDefinition) -> str:
        """
        Register a definition and return its preferred key.

        A definition whose preferred key is already registered replaces the
        existing one; the replaced definition's id and name index entries
        are dropped.
        """
        aliases = definition.aliases()
        key = definition.bean_id or (aliases[0] if aliases else None) or self._generate_key(definition)

        existing = self._by_key.get(key)
        if existing is not None:
            logger.warning(
                f"Bean '{key}' from {definition.source} replaces the definition from {existing.source}"
            )
            self._unindex(existing)
            del self._by_key[key]
            if existing in self._owned:
                self._owned.remove(existing)

        definition.key = key
        self._by_key[key] = definition
        if definition.bean_id:
            self._by_id[definition.bean_id] = definition
        if definition.bean_name:
            self._by_name[definition.bean_name] = definition
        for alias in definition.aliases():
            self._by_name[alias] = definition
        self._owned.append(definition)
        return key

    def __len__(self) -> int:
        return len(self._by_key)

    def build(self) -> Registry:
        """
        Produce the immutable registry.

        Declared definitions added to this builder resolve their parents
        through the built registry.
        """
        registry = Registry(self._by_key, self._by_id, self._by_name, name=self.name)
        for definition in self._owned:
            if isinstance(definition, DeclaredDefinition):
                definition.bind(registry.get)
        return registry

    @property
    def owned(self) -> List[ComponentDefinition]:
        """Definitions added to this builder, excluding those seeded from a parent."""
        return list(self._owned)
