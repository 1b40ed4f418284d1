"""
Warmap faults - structured error taxonomy.

Every abort condition of an analysis run is a Fault subclass carrying a
stable code and a domain. Partial-data conditions are logged, never raised.
"""

from .core import Fault, FaultDomain, Severity
from .domains import (
    ArchiveFault,
    ClasspathConsistencyFault,
    InvalidContextFault,
    ClassDecodeFault,
    ConfigFault,
)

__all__ = [
    "Fault",
    "FaultDomain",
    "Severity",
    "ArchiveFault",
    "ClasspathConsistencyFault",
    "InvalidContextFault",
    "ClassDecodeFault",
    "ConfigFault",
]
