"""
Annotation model for decoded classes.

An annotation attribute lookup yields one of three variants:

    AttributeValue = Absent | Scalar | ScalarList

Scalars are Python values: str, int, float, bool, an enum constant's name,
a class literal's external name, or a nested Annotation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, Tuple, Union


@dataclass(frozen=True)
class Absent:
    """The attribute is not present on the annotation."""

    def as_scalar(self) -> Any:
        return None

    def as_list(self) -> List[Any]:
        return []

    def __bool__(self) -> bool:
        return False


@dataclass(frozen=True)
class Scalar:
    """A single attribute value."""
    value: Any

    def as_scalar(self) -> Any:
        return self.value

    def as_list(self) -> List[Any]:
        return [self.value]


@dataclass(frozen=True)
class ScalarList:
    """An array attribute value."""
    values: Tuple[Any, ...]

    def as_scalar(self) -> Any:
        """First element, or None for an empty array."""
        return self.values[0] if self.values else None

    def as_list(self) -> List[Any]:
        return list(self.values)


AttributeValue = Union[Absent, Scalar, ScalarList]

ABSENT = Absent()


@dataclass(frozen=True)
class Annotation:
    """
    A runtime-visible annotation.

    Attributes:
        type_name: Fully qualified annotation type (e.g. "org.example.Marker")
        elements: Raw element values; arrays are tuples
    """
    type_name: str
    elements: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "elements", MappingProxyType(dict(self.elements)))

    def get(self, name: str) -> AttributeValue:
        if name not in self.elements:
            return ABSENT
        value = self.elements[name]
        if isinstance(value, tuple):
            return ScalarList(value)
        return Scalar(value)

    def first_of(self, *names: str) -> AttributeValue:
        """The first of several alias attributes that is present."""
        for name in names:
            value = self.get(name)
            if not isinstance(value, Absent):
                return value
        return ABSENT

    @property
    def simple_name(self) -> str:
        return self.type_name.rsplit(".", 1)[-1]


def find_annotation(annotations: List[Annotation], *type_names: str) -> Optional[Annotation]:
    """The first annotation whose type is one of type_names."""
    for annotation in annotations:
        if annotation.type_name in type_names:
            return annotation
    return None
