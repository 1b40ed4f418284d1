"""
Context loader.

Reads Spring XML contexts into a Registry:

1. split the location string into resource references
2. parse each document, merging <import>ed documents into it
3. register every <bean> as a DeclaredDefinition
4. run every <context:component-scan> and register the results as
   DiscoveredDefinitions
5. validate the class of every concrete declared bean
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Iterable, List, Optional, Sequence, Tuple

from ..archive.descriptor import children, local_name
from ..classfile import AnnotationDecoder
from ..faults import InvalidContextFault
from ..scanner import ClasspathScanner, CandidateComponent
from . import constants
from .definitions import DeclaredDefinition, DiscoveredDefinition, default_bean_name
from .registry import Registry, RegistryBuilder
from .resources import ResourceResolver

logger = logging.getLogger("warmap.spring.context")

# (element, location of the document it came from)
SourcedElement = Tuple[ET.Element, str]


class ContextLoader:
    """
    Builds registries from context locations.

    Args:
        resolver: Opens the documents references point at
        decoder: Decodes scanned classes
        scan_annotations: Marker annotations a component scan includes by default
    """

    def __init__(
        self,
        resolver: ResourceResolver,
        decoder: AnnotationDecoder,
        scan_annotations: Optional[Iterable[str]] = None,
    ):
        self.resolver = resolver
        self.decoder = decoder
        self.scan_annotations = list(
            scan_annotations
            if scan_annotations is not None
            else (constants.CONTROLLER_ANNOTATION, constants.COMPONENT_ANNOTATION)
        )

    def load(self, locations: str, parent: Optional[Registry] = None, name: str = "") -> Registry:
        """
        Load a context.

        Args:
            locations: One or more references separated by commas,
                semicolons or whitespace
            parent: Registry whose entries seed the new one
            name: Label for log messages

        Returns:
            The populated registry

        Raises:
            InvalidContextFault: A reference cannot be resolved or parsed, or
                a declared bean's class cannot be resolved
        """
        builder = RegistryBuilder(parent, name=name or locations)

        for reference in self.resolver.decompose(locations):
            elements = self._collect(reference, ())
            self._register_beans(builder, elements)
            self._register_scans(builder, elements)

        registry = builder.build()
        self._validate(builder)
        logger.info(f"Loaded context {registry.name!r}: {len(registry)} beans")
        return registry

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def _parse(self, reference: str) -> ET.Element:
        data = self.resolver.open(reference)
        if data is None:
            raise InvalidContextFault(
                f"Invalid context location: {reference}",
                location=reference,
                code="CONTEXT_NOT_FOUND",
            )
        try:
            root = ET.fromstring(data)
        except ET.ParseError as e:
            raise InvalidContextFault(
                f"Unparseable context {reference}: {e}",
                location=reference,
                code="CONTEXT_UNPARSEABLE",
            ) from e
        if local_name(root.tag) != "beans":
            raise InvalidContextFault(
                f"Context {reference} has root element <{local_name(root.tag)}>, expected <beans>",
                location=reference,
                code="CONTEXT_UNPARSEABLE",
            )
        return root

    def _collect(self, reference: str, chain: Sequence[str]) -> List[SourcedElement]:
        """
        Top-level elements of a document followed by those of its imports.

        Imports are resolved against the importing document. An import that
        would re-enter a document already being read is skipped.
        """
        logger.debug(f"Reading context {reference}")
        root = self._parse(reference)
        chain = tuple(chain) + (reference,)

        elements: List[SourcedElement] = []
        imported: List[SourcedElement] = []
        for element in self._top_level(root):
            if local_name(element.tag) != "import":
                elements.append((element, reference))
                continue

            resource = element.get("resource")
            if not resource or not resource.strip():
                logger.warning(f"<import> without resource in {reference}; ignored")
                continue
            target = self.resolver.rebase(reference, resource)
            if target in chain:
                logger.warning(f"Import cycle: {' -> '.join(chain)} -> {target}; ignored")
                continue
            imported.extend(self._collect(target, chain))

        return elements + imported

    @staticmethod
    def _top_level(root: ET.Element) -> Iterable[ET.Element]:
        # nested <beans profile="..."> blocks are flattened; profiles are not evaluated
        for element in root:
            if local_name(element.tag) == "beans":
                yield from ContextLoader._top_level(element)
            elif isinstance(element.tag, str):
                yield element

    # ------------------------------------------------------------------
    # Definitions
    # ------------------------------------------------------------------

    def _register_beans(self, builder: RegistryBuilder, elements: List[SourcedElement]) -> None:
        for element, source in elements:
            if local_name(element.tag) == "bean":
                key = builder.add(DeclaredDefinition(element, source))
                logger.debug(f"Declared bean {key} ({element.get('class')})")

    def _register_scans(self, builder: RegistryBuilder, elements: List[SourcedElement]) -> None:
        for element, source in elements:
            if local_name(element.tag) != "component-scan":
                continue
            scanner = self.scanner_for(element, source)
            for candidate in scanner.scan(self.resolver.archive, self.decoder):
                definition = self._discovered(candidate, scanner, source)
                key = builder.add(definition)
                logger.debug(f"Discovered bean {key} ({candidate.class_name})")

    def scanner_for(self, element: ET.Element, source: str) -> ClasspathScanner:
        """Configure a scanner from a <context:component-scan> element."""
        scanner = ClasspathScanner()
        packages = self.resolver.decompose(element.get("base-package"))
        if not packages:
            logger.warning(f"component-scan without base-package in {source}; scanning every package")
            packages = [""]
        scanner.add_base_packages(packages)

        if (element.get("use-default-filters") or "true").strip().lower() != "false":
            scanner.set_included_annotations(*self.scan_annotations)
        else:
            # only explicit annotation include-filters select classes
            scanner.set_included_annotations()
        for include in children(element, "include-filter"):
            if (include.get("type") or "").strip() == "annotation" and include.get("expression"):
                scanner.add_included_annotation(include.get("expression").strip())
            else:
                logger.warning(
                    f"Unsupported include-filter type '{include.get('type')}' in {source}; ignored"
                )
        for exclude in children(element, "exclude-filter"):
            if (exclude.get("type") or "").strip() == "annotation" and exclude.get("expression"):
                scanner.add_excluded_annotation(exclude.get("expression").strip())
            else:
                logger.warning(
                    f"Unsupported exclude-filter type '{exclude.get('type')}' in {source}; ignored"
                )
        return scanner

    def _discovered(self, candidate: CandidateComponent, scanner: ClasspathScanner, source: str) -> DiscoveredDefinition:
        markers = scanner.included_annotations or set(self.scan_annotations)
        marker = next((a for a in candidate.decoded.annotations if a.type_name in markers), None)
        bean_id = None
        if marker is not None:
            value = marker.get("value").as_scalar()
            if isinstance(value, str) and value.strip():
                bean_id = value.strip()
        return DiscoveredDefinition(
            candidate.decoded,
            bean_id=bean_id,
            bean_name=default_bean_name(candidate.class_name),
            source=f"{source} (scan of {candidate.file_name})",
        )

    def _validate(self, builder: RegistryBuilder) -> None:
        for definition in builder.owned:
            if isinstance(definition, DeclaredDefinition) and not definition.is_abstract:
                resolved = definition.class_name
                logger.debug(f"Bean {definition.key} resolves to {resolved}")
