"""
Report renderer.

One line per (URL, method, destination):

    /servlet/foo.html  ALL     com.example.FooController
    /servlet/B/bar     GET     com.example.ControllerB.getBar()

The URL column is as wide as the longest URL (at least 16 characters), the
method column is 6 characters wide.
"""

from __future__ import annotations

from typing import List

from ..config import DisplayConfig
from ..routing import (
    ComponentDestination,
    Destination,
    FileDestination,
    FileKind,
    RouteTable,
    ServletDestination,
)

MIN_URL_WIDTH = 16
METHOD_WIDTH = 6


def is_visible(destination: Destination, display: DisplayConfig) -> bool:
    """Whether the display settings show this destination."""
    if isinstance(destination, FileDestination):
        if destination.kind is FileKind.JSP:
            return display.show_jsp
        if destination.kind is FileKind.HTML:
            return display.show_html
        return display.show_static
    return True


def describe(destination: Destination) -> str:
    """Human-readable description of a destination."""
    if isinstance(destination, ServletDestination):
        return destination.servlet_class or f"servlet {destination.servlet_name}"
    if isinstance(destination, FileDestination):
        return destination.path
    if isinstance(destination, ComponentDestination):
        target = destination.bean_class or destination.bean_id
        if destination.method_name:
            return f"{target}.{destination.method_name}()"
        return target
    raise TypeError(f"Unknown destination type: {type(destination).__name__}")


def describe_params(destination: Destination) -> List[str]:
    """One line per request parameter of a component destination."""
    if not isinstance(destination, ComponentDestination):
        return []
    lines = []
    for param in destination.params.values():
        if param.required:
            lines.append(f"{param.name}: {param.type} (required)")
        elif param.default_value:
            lines.append(f"{param.name}: {param.type} = {param.default_value}")
        else:
            lines.append(f"{param.name}: {param.type}")
    return lines


def render(table: RouteTable, display: DisplayConfig) -> List[str]:
    """
    Render the visible routes of a table, sorted by URL then method.
    """
    rows = []
    for url in table:
        methods = sorted(table.methods(url).items(), key=lambda item: item[0].order)
        for method, destination in methods:
            if is_visible(destination, display):
                rows.append((url, method.value, destination))

    if not rows:
        return []

    width = max(MIN_URL_WIDTH, max(len(url) for url, _, _ in rows))
    indent = " " * (width + METHOD_WIDTH + 4)
    lines = []
    for url, method, destination in rows:
        lines.append(f"{url:<{width}}  {method:<{METHOD_WIDTH}}  {describe(destination)}".rstrip())
        if display.show_request_params:
            lines.extend(f"{indent}    {line}" for line in describe_params(destination))
    return lines
