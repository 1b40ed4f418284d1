"""
Classpath Scanner.

Discovers candidate components among the compiled classes of a web archive:
classes under configured base packages, optionally restricted to classes
carrying one of a set of marker annotations.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set, Tuple

from .classfile import AnnotationDecoder, ClassFile

logger = logging.getLogger("warmap.scanner")


@dataclass(frozen=True)
class CandidateComponent:
    """A scanned class that qualifies as a component."""
    file_name: str
    decoded: ClassFile

    @property
    def class_name(self) -> str:
        return self.decoded.name


class ClasspathScanner:
    """
    Scanner over the classpath index of an archive.

    A class qualifies when its file lies under some base package and, once
    include filters are configured, carries at least one of the included
    annotations. An empty include set matches nothing. An unconfigured
    scanner (no base packages, no filters) accepts every class on the
    classpath.

    Usage:
        ```python
        scanner = ClasspathScanner()
        scanner.add_base_package("com.example.web")
        scanner.set_included_annotations("org.springframework.stereotype.Controller")
        candidates = scanner.scan(war, decoder)
        ```
    """

    def __init__(self):
        self._bases: List[Tuple[str, bool]] = []
        self._markers: Optional[Set[str]] = None
        self._excluded: Set[str] = set()

    def add_base_package(self, package: str, recursive: bool = True) -> "ClasspathScanner":
        """
        Add a base package (dotted or slash-separated).

        Args:
            package: Package name, e.g. "com.example.web"
            recursive: Whether sub-packages are scanned too
        """
        prefix = package.strip().strip(".").replace(".", "/").strip("/")
        self._bases.append((prefix + "/" if prefix else "", recursive))
        return self

    def add_base_packages(self, packages: Iterable[str], recursive: bool = True) -> "ClasspathScanner":
        for package in packages:
            self.add_base_package(package, recursive)
        return self

    def set_included_annotations(self, *annotation_types: str) -> "ClasspathScanner":
        """Replace the include filters; with no arguments the scanner matches nothing."""
        self._markers = set(annotation_types)
        return self

    def add_included_annotation(self, annotation_type: str) -> "ClasspathScanner":
        if self._markers is None:
            self._markers = set()
        self._markers.add(annotation_type)
        return self

    def add_excluded_annotation(self, annotation_type: str) -> "ClasspathScanner":
        self._excluded.add(annotation_type)
        return self

    @property
    def included_annotations(self) -> Set[str]:
        return set(self._markers or ())

    @property
    def filtered(self) -> bool:
        """Whether include filters have been configured."""
        return self._markers is not None

    def matches_package(self, file_name: str) -> bool:
        if not self._bases:
            return True
        for prefix, recursive in self._bases:
            if not file_name.startswith(prefix):
                continue
            if recursive or "/" not in file_name[len(prefix):]:
                return True
        return False

    def scan(self, archive, decoder: AnnotationDecoder) -> List[CandidateComponent]:
        """
        Scan the archive's classpath.

        Args:
            archive: Anything exposing classpath_index() (e.g. WarArchive)
            decoder: Decoder used to read class-level annotations

        Returns:
            Qualifying classes, sorted by file name

        Raises:
            ClassDecodeFault: A matching class file cannot be decoded
        """
        candidates: List[CandidateComponent] = []
        seen = 0
        for file_name in sorted(archive.classpath_index()):
            if not file_name.endswith(".class") or not self.matches_package(file_name):
                continue
            seen += 1

            decoded = decoder.decode_file(file_name)
            present = {a.type_name for a in decoded.annotations}
            if self._markers is not None and not self._markers & present:
                continue
            if self._excluded & present:
                continue

            candidates.append(CandidateComponent(file_name=file_name, decoded=decoded))

        logger.debug(
            f"Scanned {seen} classes under "
            f"{[p or '<default>' for p, _ in self._bases]}: {len(candidates)} candidates"
        )
        return candidates
