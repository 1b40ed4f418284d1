"""
Routing - the route table and its destination variants.
"""

from .methods import HttpMethod
from .destinations import (
    Destination,
    ServletDestination,
    FileDestination,
    FileKind,
    ComponentDestination,
    RequestParameter,
)
from .table import RouteTable

__all__ = [
    "HttpMethod",
    "Destination",
    "ServletDestination",
    "FileDestination",
    "FileKind",
    "ComponentDestination",
    "RequestParameter",
    "RouteTable",
]
