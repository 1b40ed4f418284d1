"""
HTTP methods understood by the route table.
"""

from enum import Enum
from typing import Optional


class HttpMethod(str, Enum):
    """
    Request methods a route may be keyed on.

    ALL is synthetic: it matches every method that has no specific entry.
    """
    ALL = "ALL"
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @classmethod
    def specific(cls) -> tuple["HttpMethod", ...]:
        """The concrete methods, in table order."""
        return (cls.GET, cls.POST, cls.PUT, cls.DELETE)

    @classmethod
    def parse(cls, name: str) -> Optional["HttpMethod"]:
        """Map a request-method constant to a specific method, or None if unsupported."""
        try:
            method = cls(name.strip().upper())
        except ValueError:
            return None
        return None if method is cls.ALL else method

    @property
    def order(self) -> int:
        return _ORDER[self]


_ORDER = {m: i for i, m in enumerate(HttpMethod)}
