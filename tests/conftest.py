"""
Shared test fixtures and helpers for the Warmap test suite.
"""

import io
import zipfile
from pathlib import Path
from typing import Dict, Optional, Union

import pytest

from tests.classfiles import ClassWriter


JAVAEE_NAMESPACE = "http://java.sun.com/xml/ns/javaee"
BEANS_NAMESPACE = "http://www.springframework.org/schema/beans"
CONTEXT_NAMESPACE = "http://www.springframework.org/schema/context"
P_NAMESPACE = "http://www.springframework.org/schema/p"

DISPATCHER_SERVLET = "org.springframework.web.servlet.DispatcherServlet"
CONTEXT_LOADER_LISTENER = "org.springframework.web.context.ContextLoaderListener"
SIMPLE_URL_HANDLER_MAPPING = "org.springframework.web.servlet.handler.SimpleUrlHandlerMapping"
BEAN_NAME_URL_HANDLER_MAPPING = "org.springframework.web.servlet.handler.BeanNameUrlHandlerMapping"
CONTROLLER_CLASS_NAME_HANDLER_MAPPING = "org.springframework.web.servlet.mvc.support.ControllerClassNameHandlerMapping"
CONTROLLER_INTERFACE = "org.springframework.web.servlet.mvc.Controller"
CONTROLLER = "org.springframework.stereotype.Controller"
COMPONENT = "org.springframework.stereotype.Component"
SERVICE = "org.springframework.stereotype.Service"
REQUEST_MAPPING = "org.springframework.web.bind.annotation.RequestMapping"
GET_MAPPING = "org.springframework.web.bind.annotation.GetMapping"
REQUEST_PARAM = "org.springframework.web.bind.annotation.RequestParam"


# ============================================================================
# XML Helpers
# ============================================================================


def web_xml(*fragments: str, namespace: Optional[str] = JAVAEE_NAMESPACE) -> str:
    """A deployment descriptor wrapping the given fragments."""
    xmlns = f' xmlns="{namespace}"' if namespace else ""
    body = "\n".join(fragments)
    return f'<?xml version="1.0" encoding="UTF-8"?>\n<web-app{xmlns} version="2.5">\n{body}\n</web-app>\n'


def servlet(name: str, servlet_class: str, **init_params: str) -> str:
    params = "".join(
        f"<init-param><param-name>{k}</param-name><param-value>{v}</param-value></init-param>"
        for k, v in init_params.items()
    )
    return (
        f"<servlet><servlet-name>{name}</servlet-name>"
        f"<servlet-class>{servlet_class}</servlet-class>{params}</servlet>"
    )


def servlet_mapping(name: str, *patterns: str) -> str:
    urls = "".join(f"<url-pattern>{p}</url-pattern>" for p in patterns)
    return f"<servlet-mapping><servlet-name>{name}</servlet-name>{urls}</servlet-mapping>"


def listener(listener_class: str) -> str:
    return f"<listener><listener-class>{listener_class}</listener-class></listener>"


def context_param(name: str, value: str) -> str:
    return f"<context-param><param-name>{name}</param-name><param-value>{value}</param-value></context-param>"


def beans_xml(*fragments: str) -> str:
    """A Spring context document wrapping the given fragments."""
    body = "\n".join(fragments)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<beans xmlns="{BEANS_NAMESPACE}" xmlns:context="{CONTEXT_NAMESPACE}" xmlns:p="{P_NAMESPACE}">\n'
        f"{body}\n</beans>\n"
    )


def bean(bean_class: Optional[str] = None, body: str = "", **attrs: str) -> str:
    """A <bean> element; attribute names use '_' for '-' (e.g. bean_id -> id)."""
    names = {"bean_id": "id", "bean_name": "name"}
    rendered = ""
    if bean_class:
        rendered += f' class="{bean_class}"'
    for key, value in attrs.items():
        rendered += f' {names.get(key, key.replace("_", "-"))}="{value}"'
    return f"<bean{rendered}>{body}</bean>"


def mappings_property(mappings: Dict[str, str]) -> str:
    props = "".join(f'<prop key="{url}">{ref}</prop>' for url, ref in mappings.items())
    return f'<property name="mappings"><props>{props}</props></property>'


def dispatcher_web_xml(pattern: str = "/servlet/*", name: str = "spring", **init_params: str) -> str:
    """A descriptor mapping one DispatcherServlet under pattern."""
    return web_xml(
        servlet(name, DISPATCHER_SERVLET, **init_params),
        servlet_mapping(name, pattern),
    )


# ============================================================================
# WAR Builder
# ============================================================================


class WarBuilder:
    """
    Collects entries and writes them as a WAR file.

    Usage:
        war = WarBuilder(tmp_path / "app.war")
        war.web_xml(dispatcher_web_xml())
        war.add("WEB-INF/spring-servlet.xml", beans_xml(...))
        path = war.build()
    """

    def __init__(self, path: Path):
        self.path = path
        self.entries: Dict[str, bytes] = {}
        self.jars: Dict[str, Dict[str, bytes]] = {}

    def add(self, name: str, data: Union[str, bytes]) -> "WarBuilder":
        self.entries[name] = data.encode("utf-8") if isinstance(data, str) else data
        return self

    def web_xml(self, content: str) -> "WarBuilder":
        return self.add("WEB-INF/web.xml", content)

    def add_class(self, cls: ClassWriter, jar: Optional[str] = None) -> "WarBuilder":
        """Add a compiled class to WEB-INF/classes, or to a jar under WEB-INF/lib."""
        if jar is None:
            return self.add("WEB-INF/classes/" + cls.file_name, cls.to_bytes())
        return self.add_to_jar(jar, cls.file_name, cls.to_bytes())

    def add_to_jar(self, jar: str, name: str, data: Union[str, bytes]) -> "WarBuilder":
        entries = self.jars.setdefault(jar, {})
        entries[name] = data.encode("utf-8") if isinstance(data, str) else data
        return self

    def build(self) -> Path:
        with zipfile.ZipFile(self.path, "w") as war:
            war.writestr("WEB-INF/", b"")
            for name, data in self.entries.items():
                war.writestr(name, data)
            for jar_name, entries in self.jars.items():
                buffer = io.BytesIO()
                with zipfile.ZipFile(buffer, "w") as jar:
                    for name, data in entries.items():
                        jar.writestr(name, data)
                war.writestr("WEB-INF/lib/" + jar_name, buffer.getvalue())
        return self.path


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def war_builder(tmp_path):
    """Factory for WarBuilder instances writing into tmp_path."""
    def make(name: str = "app.war") -> WarBuilder:
        return WarBuilder(tmp_path / name)
    return make
