"""
Warmap faults - Domain-specific fault types.

Provides concrete fault classes for each domain:
- ARCHIVE faults (invalid or unreadable web archive)
- CONTEXT faults (unresolvable or unparseable Spring context)
- DECODE faults (malformed compiled classes)
- CONFIG faults
"""

from typing import Any, Optional
from .core import Fault, FaultDomain, Severity


# ============================================================================
# ARCHIVE Faults
# ============================================================================

class ArchiveFault(Fault):
    """The web archive or its deployment descriptor cannot be used."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        path: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.ARCHIVE,
            metadata={"path": path, **(metadata or {})},
        )
        self.path = path


class ClasspathConsistencyFault(Fault):
    """The classpath index names a location that does not hold the entry."""

    def __init__(self, name: str, location: str):
        super().__init__(
            code="CLASSPATH_INCONSISTENT",
            message=f"Classpath entry '{name}' indexed in '{location or '/WEB-INF/classes'}' but not found there",
            domain=FaultDomain.ARCHIVE,
            severity=Severity.FATAL,
            metadata={"name": name, "location": location},
        )
        self.name = name
        self.location = location


# ============================================================================
# CONTEXT Faults
# ============================================================================

class InvalidContextFault(Fault):
    """A Spring context resource cannot be resolved, parsed or interpreted."""

    def __init__(
        self,
        message: str,
        *,
        location: Optional[str] = None,
        code: str = "INVALID_CONTEXT",
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.CONTEXT,
            metadata={"location": location, **(metadata or {})},
        )
        self.location = location


# ============================================================================
# DECODE Faults
# ============================================================================

class ClassDecodeFault(Fault):
    """A compiled class is present but cannot be decoded."""

    def __init__(self, class_name: str, reason: str):
        super().__init__(
            code="CLASS_DECODE_FAILED",
            message=f"Cannot decode class '{class_name}': {reason}",
            domain=FaultDomain.DECODE,
            metadata={"class_name": class_name, "reason": reason},
        )
        self.class_name = class_name
        self.reason = reason


# ============================================================================
# CONFIG Faults
# ============================================================================

class ConfigFault(Fault):
    """Configuration value is invalid."""

    def __init__(self, key: str, reason: str):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Configuration key '{key}' is invalid: {reason}",
            domain=FaultDomain.CONFIG,
            metadata={"key": key, "reason": reason},
        )
        self.key = key
        self.reason = reason
