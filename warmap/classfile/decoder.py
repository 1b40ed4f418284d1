"""
Annotation decoder - cached class lookups over a classpath.
"""

from __future__ import annotations

import logging
import struct
from typing import Dict, List, Optional, Protocol, Union

from ..faults import ClassDecodeFault
from .annotations import ABSENT, Annotation, AttributeValue, find_annotation
from .reader import ClassFile, ClassFileReader, MethodInfo, slot_width

logger = logging.getLogger("warmap.classfile")


class ClassSource(Protocol):
    """Anything that can read classpath files by name (e.g. WarArchive)."""

    def read_classpath_file(self, name: str) -> Optional[bytes]:
        ...

    def has_classpath_file(self, name: str) -> bool:
        ...


def class_file_name(class_name: str) -> str:
    """'com.example.Foo' -> 'com/example/Foo.class'"""
    return class_name.replace(".", "/") + ".class"


MethodRef = Union[MethodInfo, str]


class AnnotationDecoder:
    """
    Decodes compiled classes on demand and caches the result by class name.

    Classes that are not on the classpath decode to None and are cached as
    such; classes that are present but malformed raise ClassDecodeFault.

    Args:
        source: Classpath the classes are read from
    """

    def __init__(self, source: ClassSource):
        self.source = source
        self._cache: Dict[str, Optional[ClassFile]] = {}

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    def decode_file(self, file_name: str) -> ClassFile:
        """
        Decode a classpath file by its classpath-relative name.

        Raises:
            ClassDecodeFault: The file is missing or malformed
        """
        data = self.source.read_classpath_file(file_name)
        if data is None:
            raise ClassDecodeFault(file_name, "not on the classpath")
        decoded = self._parse(file_name, data)
        self._cache.setdefault(decoded.name, decoded)
        return decoded

    def try_decode(self, class_name: str) -> Optional[ClassFile]:
        """Decode a class by name, or None when it is not on the classpath."""
        if class_name in self._cache:
            return self._cache[class_name]

        file_name = class_file_name(class_name)
        decoded = None
        if self.source.has_classpath_file(file_name):
            data = self.source.read_classpath_file(file_name)
            if data is not None:
                decoded = self._parse(class_name, data)
        else:
            logger.debug(f"Class {class_name} is not on the classpath")

        self._cache[class_name] = decoded
        return decoded

    def decode(self, class_name: str) -> ClassFile:
        """
        Decode a class by name.

        Raises:
            ClassDecodeFault: The class is missing or malformed
        """
        decoded = self.try_decode(class_name)
        if decoded is None:
            raise ClassDecodeFault(class_name, "not on the classpath")
        return decoded

    @staticmethod
    def _parse(label: str, data: bytes) -> ClassFile:
        try:
            return ClassFileReader(data).read()
        except (ValueError, IndexError, struct.error, UnicodeDecodeError) as e:
            raise ClassDecodeFault(label, str(e)) from e

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def class_annotations(self, class_name: str) -> List[Annotation]:
        decoded = self.try_decode(class_name)
        return list(decoded.annotations) if decoded else []

    def class_annotation(self, class_name: str, *type_names: str) -> Optional[Annotation]:
        return find_annotation(self.class_annotations(class_name), *type_names)

    def class_attribute(self, class_name: str, annotation_type: str, attribute: str) -> AttributeValue:
        annotation = self.class_annotation(class_name, annotation_type)
        return annotation.get(attribute) if annotation else ABSENT

    def methods(self, class_name: str) -> List[MethodInfo]:
        decoded = self.try_decode(class_name)
        return list(decoded.methods) if decoded else []

    def _method(self, class_name: str, method: MethodRef) -> Optional[MethodInfo]:
        if isinstance(method, MethodInfo):
            return method
        decoded = self.try_decode(class_name)
        if decoded is None:
            return None
        candidates = decoded.find_methods(method)
        return candidates[0] if candidates else None

    def method_annotations(self, class_name: str, method: MethodRef) -> List[Annotation]:
        info = self._method(class_name, method)
        return list(info.annotations) if info else []

    def parameter_annotation(
        self,
        class_name: str,
        method: MethodRef,
        index: int,
        annotation_type: str,
    ) -> Optional[Annotation]:
        """An annotation of the given type on the index-th method parameter."""
        info = self._method(class_name, method)
        if info is None:
            return None
        return find_annotation(info.annotations_of_parameter(index), annotation_type)

    def parameter_type(self, class_name: str, method: MethodRef, index: int) -> Optional[str]:
        info = self._method(class_name, method)
        if info is None:
            return None
        types = info.parameter_types
        return types[index] if 0 <= index < len(types) else None

    def parameter_debug_name(self, class_name: str, method: MethodRef, index: int) -> Optional[str]:
        """
        Source name of the index-th parameter from the local variable table.

        The variable is looked up by slot (parameters occupy the first slots,
        after the receiver of instance methods); tables that do not record the
        expected slot are read positionally instead.
        """
        info = self._method(class_name, method)
        if info is None or not info.local_variables:
            return None

        descriptors = info.parameter_descriptors
        if not 0 <= index < len(descriptors):
            return None

        receiver = 0 if info.is_static else 1
        slot = receiver + sum(slot_width(d) for d in descriptors[:index])
        for variable in info.local_variables:
            if variable.index == slot and variable.start_pc == 0:
                return variable.name

        position = index + receiver
        if position < len(info.local_variables):
            return info.local_variables[position].name
        return None

    def superclass_name(self, class_name: str) -> Optional[str]:
        decoded = self.try_decode(class_name)
        return decoded.super_name if decoded else None

    def interface_names(self, class_name: str) -> List[str]:
        decoded = self.try_decode(class_name)
        return list(decoded.interfaces) if decoded else []

    def cached_classes(self) -> List[str]:
        return [name for name, decoded in self._cache.items() if decoded is not None]

    def implements(self, class_name: str, interface_name: str, max_depth: int = 64) -> bool:
        """
        Whether a class transitively implements or extends interface_name.

        Walks superclasses and interfaces breadth-first; types that are not on
        the classpath end their branch of the walk.
        """
        seen = set()
        frontier = [class_name]
        depth = 0
        while frontier and depth < max_depth:
            next_frontier: List[str] = []
            for name in frontier:
                if name in seen:
                    continue
                seen.add(name)
                if name == interface_name:
                    return True
                decoded = self.try_decode(name)
                if decoded is None:
                    continue
                next_frontier.extend(decoded.interfaces)
                if decoded.super_name and decoded.super_name != "java.lang.Object":
                    next_frontier.append(decoded.super_name)
            frontier = next_frontier
            depth += 1
        return False
