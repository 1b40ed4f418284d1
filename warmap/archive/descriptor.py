"""
Deployment descriptor (WEB-INF/web.xml) reader.

Element lookup matches on local names so that J2EE, Java EE, Jakarta EE and
namespace-less descriptors are read the same way.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from ..faults import ArchiveFault

logger = logging.getLogger("warmap.archive.descriptor")


def local_name(tag: str) -> str:
    """Strip the '{namespace}' part of an ElementTree tag."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def children(element: ET.Element, name: str) -> Iterator[ET.Element]:
    """Direct children of an element with the given local name."""
    for child in element:
        if local_name(child.tag) == name:
            yield child


def child_text(element: ET.Element, name: str) -> Optional[str]:
    """Stripped text of the first direct child with the given local name."""
    for child in children(element, name):
        return (child.text or "").strip()
    return None


@dataclass(frozen=True)
class ServletMapping:
    """One URL pattern bound to a declared servlet."""
    url_pattern: str
    servlet_name: str
    servlet_class: Optional[str]
    init_params: Dict[str, str] = field(default_factory=dict, hash=False)


@dataclass
class _Servlet:
    name: str
    servlet_class: Optional[str]
    init_params: Dict[str, str]


class DeploymentDescriptor:
    """
    Parsed view of a web application's deployment descriptor.

    Args:
        data: Raw bytes of web.xml
        source: Location used in fault messages
    """

    def __init__(self, data: bytes, source: str = "/WEB-INF/web.xml"):
        self.source = source
        try:
            self._root = ET.fromstring(data)
        except ET.ParseError as e:
            raise ArchiveFault(
                "DESCRIPTOR_UNPARSEABLE",
                f"Cannot parse deployment descriptor: {e}",
                path=source,
            ) from e

        self._servlets = self._read_servlets()

    def _read_servlets(self) -> Dict[str, _Servlet]:
        servlets: Dict[str, _Servlet] = {}
        for element in children(self._root, "servlet"):
            name = child_text(element, "servlet-name")
            if not name:
                logger.warning(f"Servlet without servlet-name in {self.source}; ignored")
                continue
            servlets[name] = _Servlet(
                name=name,
                servlet_class=child_text(element, "servlet-class"),
                init_params=_params(element, "init-param"),
            )
        return servlets

    def servlet_mappings(self) -> List[ServletMapping]:
        """
        All servlet mappings, sorted by URL pattern.

        A mapping may carry several url-pattern elements; each becomes its own
        ServletMapping. Mappings naming an undeclared servlet are skipped.
        """
        mappings: List[ServletMapping] = []
        for element in children(self._root, "servlet-mapping"):
            name = child_text(element, "servlet-name")
            servlet = self._servlets.get(name or "")
            if servlet is None:
                logger.warning(f"Servlet mapping references undeclared servlet '{name}'; ignored")
                continue
            for pattern in children(element, "url-pattern"):
                mappings.append(ServletMapping(
                    url_pattern=(pattern.text or "").strip(),
                    servlet_name=servlet.name,
                    servlet_class=servlet.servlet_class,
                    init_params=dict(servlet.init_params),
                ))
        mappings.sort(key=lambda m: m.url_pattern)
        return mappings

    def listener_classes(self) -> List[str]:
        """Classes declared as listeners, in document order."""
        listeners = []
        for element in children(self._root, "listener"):
            cls = child_text(element, "listener-class")
            if cls:
                listeners.append(cls)
        return listeners

    def context_params(self) -> Dict[str, str]:
        return _params(self._root, "context-param")

    def context_param(self, name: str) -> Optional[str]:
        """Value of a context-param, or None when not declared."""
        return self.context_params().get(name)


def _params(element: ET.Element, tag: str) -> Dict[str, str]:
    params: Dict[str, str] = {}
    for param in children(element, tag):
        name = child_text(param, "param-name")
        if name:
            params[name] = child_text(param, "param-value") or ""
    return params
