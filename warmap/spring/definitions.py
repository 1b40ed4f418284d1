"""
Component definitions.

Two variants share the ComponentDefinition interface:

- DeclaredDefinition: a <bean> element from an XML context. Its class and
  properties may be inherited from a parent definition named by the
  'parent' attribute; the parent is looked up in the owning registry.
- DiscoveredDefinition: a class found by a component scan.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from typing import Callable, Dict, List, Optional

from ..archive.descriptor import children, local_name
from ..classfile import ClassFile
from ..faults import InvalidContextFault
from .constants import P_NAMESPACE

logger = logging.getLogger("warmap.spring.definitions")

_UNRESOLVED = object()
_ALIAS_SEPARATORS = re.compile(r"[,;\s]+")

Lookup = Callable[[str], Optional["ComponentDefinition"]]


class ComponentDefinition:
    """
    Common interface of registry entries.

    Attributes:
        bean_id: Literal id, or None
        bean_name: Literal name attribute (may hold several aliases), or None
        key: Preferred registry key, assigned when the definition is registered
        source: Where the definition came from (context location or class file)
    """

    def __init__(self, bean_id: Optional[str], bean_name: Optional[str], source: str):
        self.bean_id = bean_id or None
        self.bean_name = bean_name or None
        self.source = source
        self.key: Optional[str] = None

    @property
    def class_name(self) -> Optional[str]:
        raise NotImplementedError

    @property
    def is_abstract(self) -> bool:
        return False

    @property
    def key_hint(self) -> str:
        """Base of the generated key used when neither id nor name is present."""
        return self.class_name or "bean"

    def aliases(self) -> List[str]:
        """The literal name split into its individual aliases."""
        if not self.bean_name:
            return []
        return [a for a in _ALIAS_SEPARATORS.split(self.bean_name) if a]

    def names(self) -> List[str]:
        """Id followed by every alias."""
        result = [self.bean_id] if self.bean_id else []
        result.extend(a for a in self.aliases() if a not in result)
        return result

    @property
    def simple_class_name(self) -> Optional[str]:
        if not self.class_name:
            return None
        return self.class_name.rsplit(".", 1)[-1]

    def get_property_as_string(self, name: str) -> Optional[str]:
        return None

    def get_property_as_ref_id(self, name: str) -> Optional[str]:
        return None

    def get_property_as_properties(self, name: str) -> Optional[Dict[str, str]]:
        return None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(key={self.key!r}, class={self.class_name!r})"


# ============================================================================
# Declared definitions
# ============================================================================

class DeclaredDefinition(ComponentDefinition):
    """
    A bean declared in an XML context.

    Args:
        element: The <bean> element
        source: Location of the document that declared it
    """

    def __init__(self, element: ET.Element, source: str):
        super().__init__(
            bean_id=(element.get("id") or "").strip(),
            bean_name=(element.get("name") or "").strip(),
            source=source,
        )
        self.element = element
        self.declared_class = (element.get("class") or "").strip() or None
        self.parent_ref = (element.get("parent") or "").strip() or None
        self._abstract = (element.get("abstract") or "").strip().lower() == "true"
        self._lookup: Optional[Lookup] = None
        self._class = _UNRESOLVED
        self._parent = _UNRESOLVED

    def bind(self, lookup: Lookup) -> None:
        """Attach the lookup of the registry that owns this definition."""
        self._lookup = lookup

    @property
    def is_abstract(self) -> bool:
        return self._abstract

    @property
    def key_hint(self) -> str:
        if self.declared_class:
            return self.declared_class
        if self.parent_ref:
            return f"{self.parent_ref}$child"
        return "bean"

    @property
    def label(self) -> str:
        return self.key or self.bean_id or self.bean_name or f"<anonymous bean in {self.source}>"

    # ------------------------------------------------------------------
    # Inheritance
    # ------------------------------------------------------------------

    @property
    def parent(self) -> Optional[ComponentDefinition]:
        """
        The parent definition, resolved lazily.

        Raises:
            InvalidContextFault: The parent reference names no known definition
        """
        if self._parent is _UNRESOLVED:
            self._parent = self._resolve_parent()
        return self._parent

    def _resolve_parent(self) -> Optional[ComponentDefinition]:
        if not self.parent_ref:
            return None
        parent = self._lookup(self.parent_ref) if self._lookup else None
        if parent is None:
            raise InvalidContextFault(
                f"Bean '{self.label}' names unknown parent '{self.parent_ref}'",
                location=self.source,
                code="UNKNOWN_PARENT",
            )
        return parent

    def _ancestry(self) -> List[ComponentDefinition]:
        """
        This definition followed by its parents, nearest first.

        Raises:
            InvalidContextFault: The parent chain is cyclic
        """
        chain: List[ComponentDefinition] = [self]
        visited = {id(self)}
        current: ComponentDefinition = self
        while isinstance(current, DeclaredDefinition):
            parent = current.parent
            if parent is None:
                break
            if id(parent) in visited:
                trail = " -> ".join(d.label if isinstance(d, DeclaredDefinition) else str(d.key) for d in chain)
                raise InvalidContextFault(
                    f"Cyclic parent chain: {trail} -> {current.parent_ref}",
                    location=self.source,
                    code="PARENT_CYCLE",
                )
            visited.add(id(parent))
            chain.append(parent)
            current = parent
        return chain

    @property
    def class_name(self) -> Optional[str]:
        """
        The declared class, else the nearest ancestor's class.

        Abstract definitions may end up without a class.

        Raises:
            InvalidContextFault: No class can be resolved for a concrete
                definition, a parent is unknown, or the chain is cyclic
        """
        if self._class is _UNRESOLVED:
            self._class = self._resolve_class()
        return self._class

    def _resolve_class(self) -> Optional[str]:
        if self.declared_class:
            return self.declared_class
        for ancestor in self._ancestry()[1:]:
            if isinstance(ancestor, DeclaredDefinition):
                if ancestor.declared_class:
                    return ancestor.declared_class
            elif ancestor.class_name:
                return ancestor.class_name
        if self.is_abstract:
            return None
        raise InvalidContextFault(
            f"Bean '{self.label}' has no class and none can be inherited",
            location=self.source,
            code="NO_BEAN_CLASS",
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    def _local_property(self, name: str) -> Optional[ET.Element]:
        for prop in children(self.element, "property"):
            if (prop.get("name") or "").strip() == name:
                return prop
        return None

    def _p_attribute(self, name: str) -> Optional[str]:
        return self.element.get(f"{{{P_NAMESPACE}}}{name}")

    def _inherited(self, getter: str, name: str):
        for ancestor in self._ancestry()[1:]:
            if isinstance(ancestor, DeclaredDefinition):
                value = getattr(ancestor, getter)(name, inherit=False)
            else:
                value = getattr(ancestor, getter)(name)
            if value is not None:
                return value
        return None

    def get_property_as_string(self, name: str, inherit: bool = True) -> Optional[str]:
        """
        A property's literal value: the 'value' attribute or a <value> child.
        """
        prop = self._local_property(name)
        if prop is not None:
            if prop.get("value") is not None:
                return prop.get("value")
            for value in children(prop, "value"):
                return (value.text or "").strip()
        elif self._p_attribute(name) is not None:
            return self._p_attribute(name)
        return self._inherited("get_property_as_string", name) if inherit else None

    def get_property_as_ref_id(self, name: str, inherit: bool = True) -> Optional[str]:
        """
        A property's bean reference: the 'ref' attribute or a <ref> child.
        """
        prop = self._local_property(name)
        if prop is not None:
            if prop.get("ref") is not None:
                return prop.get("ref").strip()
            for ref in children(prop, "ref"):
                for attr in ("bean", "local", "parent"):
                    if ref.get(attr):
                        return ref.get(attr).strip()
        elif self._p_attribute(f"{name}-ref") is not None:
            return self._p_attribute(f"{name}-ref").strip()
        return self._inherited("get_property_as_ref_id", name) if inherit else None

    def get_property_as_properties(self, name: str, inherit: bool = True) -> Optional[Dict[str, str]]:
        """
        A property holding key/value pairs.

        Accepts a <value> in properties-file syntax, a <props> block, or a
        <map> of entries. Returns None when the property does not exist.
        """
        prop = self._local_property(name)
        if prop is None:
            return self._inherited("get_property_as_properties", name) if inherit else None

        if prop.get("value") is not None:
            return parse_properties(prop.get("value"))

        for child in prop:
            tag = local_name(child.tag)
            if tag == "value":
                return parse_properties(child.text or "")
            if tag == "props":
                return {
                    (p.get("key") or "").strip(): (p.text or "").strip()
                    for p in children(child, "prop")
                }
            if tag == "map":
                return _map_entries(child)

        logger.warning(f"Property '{name}' of bean '{self.label}' has no readable key/value pairs")
        return {}


def _map_entries(element: ET.Element) -> Dict[str, str]:
    entries: Dict[str, str] = {}
    for entry in children(element, "entry"):
        key = entry.get("key")
        if key is None:
            for key_element in children(entry, "key"):
                for value in children(key_element, "value"):
                    key = value.text or ""
        if key is None:
            continue
        value = entry.get("value") or entry.get("value-ref")
        if value is None:
            for child in entry:
                tag = local_name(child.tag)
                if tag == "value":
                    value = child.text or ""
                elif tag in ("ref", "idref"):
                    value = child.get("bean") or child.get("local") or ""
        entries[key.strip()] = (value or "").strip()
    return entries


# ============================================================================
# Discovered definitions
# ============================================================================

class DiscoveredDefinition(ComponentDefinition):
    """
    A component found by a classpath scan.

    Args:
        decoded: The scanned class
        bean_id: Value of the class's stereotype annotation, if any
        bean_name: Default bean name derived from the class name
    """

    def __init__(self, decoded: ClassFile, bean_id: Optional[str], bean_name: Optional[str], source: str):
        super().__init__(bean_id=bean_id, bean_name=bean_name, source=source)
        self.decoded = decoded

    @property
    def class_name(self) -> Optional[str]:
        return self.decoded.name


def default_bean_name(class_name: str) -> str:
    """
    The name Spring gives an annotated component without an explicit value.

    The short class name with its first letter lowercased, unless the first
    two letters are both uppercase ("URLController" stays as is).
    """
    short = class_name.rsplit(".", 1)[-1].replace("$", ".")
    if len(short) > 1 and short[0].isupper() and short[1].isupper():
        return short
    return short[:1].lower() + short[1:]


# ============================================================================
# Properties-file syntax
# ============================================================================

_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


def _logical_lines(text: str) -> List[str]:
    lines: List[str] = []
    pending = ""
    for raw in text.splitlines():
        line = raw.lstrip()
        if not pending and (not line or line[0] in "#!"):
            continue
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            pending += line[:-1]
            continue
        lines.append(pending + line)
        pending = ""
    if pending:
        lines.append(pending)
    return lines


def _unescape(text: str) -> str:
    out = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch != "\\" or i + 1 >= len(text):
            out.append(ch)
            i += 1
            continue
        nxt = text[i + 1]
        if nxt == "u" and re.fullmatch(r"[0-9a-fA-F]{4}", text[i + 2:i + 6] or ""):
            out.append(chr(int(text[i + 2:i + 6], 16)))
            i += 6
            continue
        out.append(_ESCAPES.get(nxt, nxt))
        i += 2
    return "".join(out)


def parse_properties(text: str) -> Dict[str, str]:
    """
    Parse text in Java properties-file syntax into an ordered dict.

    Supports '#'/'!' comments, '=', ':' or whitespace separators, backslash
    line continuations and escapes.
    """
    result: Dict[str, str] = {}
    for line in _logical_lines(text):
        i = 0
        while i < len(line):
            ch = line[i]
            if ch == "\\":
                i += 2
                continue
            if ch in "=: \t\f":
                break
            i += 1
        key = line[:i]
        rest = line[i:].lstrip(" \t\f")
        if rest[:1] in ("=", ":"):
            rest = rest[1:].lstrip(" \t\f")
        result[_unescape(key)] = _unescape(rest)
    return result
