"""
Route destinations.

A destination is what serves a URL. The set of variants is closed:

    Destination = ServletDestination | FileDestination | ComponentDestination

Rendering and filtering dispatch on the variant type; the variants themselves
are plain frozen values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping, Optional, Union

if TYPE_CHECKING:
    from ..spring.definitions import ComponentDefinition


class FileKind(str, Enum):
    """Kinds of client-accessible files served directly by the container."""
    JSP = "jsp"
    HTML = "html"
    STATIC = "static"

    @classmethod
    def for_path(cls, path: str) -> "FileKind":
        lowered = path.lower()
        if lowered.endswith(".jsp"):
            return cls.JSP
        if lowered.endswith((".html", ".htm")):
            return cls.HTML
        return cls.STATIC


@dataclass(frozen=True)
class ServletDestination:
    """A servlet declared in the deployment descriptor."""
    servlet_name: str
    servlet_class: Optional[str]


@dataclass(frozen=True)
class FileDestination:
    """A file inside the archive reachable by its own path."""
    path: str
    kind: FileKind


@dataclass(frozen=True)
class RequestParameter:
    """A request parameter bound to a handler method argument."""
    name: str
    type: str
    default_value: str = ""
    required: bool = True


@dataclass(frozen=True)
class ComponentDestination:
    """
    A registry component, optionally narrowed to one handler method.

    Attributes:
        bean_id: Registry key of the component
        bean_class: Fully qualified class name
        method_name: Handler method, None when the whole component handles the URL
        params: Ordered request parameters (name -> RequestParameter)
    """
    bean_id: str
    bean_class: Optional[str]
    method_name: Optional[str] = None
    params: Mapping[str, RequestParameter] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    @classmethod
    def of(
        cls,
        definition: "ComponentDefinition",
        method_name: Optional[str] = None,
        params: Optional[Mapping[str, RequestParameter]] = None,
    ) -> "ComponentDestination":
        """Build a destination pointing at a registry definition."""
        return cls(
            bean_id=definition.key,
            bean_class=definition.class_name,
            method_name=method_name,
            params=params or {},
        )

    def describes(self, target: Union["ComponentDefinition", str]) -> bool:
        """Whether this destination points at the given definition or registry key."""
        key = target if isinstance(target, str) else target.key
        return self.bean_id == key


Destination = Union[ServletDestination, FileDestination, ComponentDestination]
