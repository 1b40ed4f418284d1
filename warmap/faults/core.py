"""
Warmap faults - Core types and fault taxonomy.

Defines:
- Fault base class (structured fault objects)
- FaultDomain (explicit fault domains)
- Severity levels
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


# ============================================================================
# Severity & Domain
# ============================================================================

class Severity(str, Enum):
    """
    Fault severity levels.

    Determines how the CLI reports the fault.
    """
    INFO = "info"       # Informational, no action needed
    WARN = "warn"       # Warning, partial data
    ERROR = "error"     # Error, analysis aborted
    FATAL = "fatal"     # Fatal, internal inconsistency


class FaultDomain:
    """
    Fault domains (taxonomy).

    Identifies the functional area where a fault occurred.
    """

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.value = name
        self.description = description

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"FaultDomain(name='{self.name}')"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, FaultDomain):
            return self.name == other.name
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(self.name)


# Standard Domains
FaultDomain.ARCHIVE = FaultDomain("archive", "Web archive and deployment descriptor errors")
FaultDomain.CONTEXT = FaultDomain("context", "Spring context resource errors")
FaultDomain.DECODE = FaultDomain("decode", "Compiled class decoding errors")
FaultDomain.CONFIG = FaultDomain("config", "Configuration errors")


# Domain defaults
DOMAIN_DEFAULTS = {
    FaultDomain.ARCHIVE: {"severity": Severity.ERROR},
    FaultDomain.CONTEXT: {"severity": Severity.ERROR},
    FaultDomain.DECODE: {"severity": Severity.ERROR},
    FaultDomain.CONFIG: {"severity": Severity.FATAL},
}


# ============================================================================
# Fault - Base Class
# ============================================================================

class Fault(Exception):
    """
    Base fault class - structured, typed fault object.

    A fault carries:
    - Stable machine-readable code
    - Human-readable message
    - Severity level
    - Domain classification
    - Retry semantics (analysis never retries, so always False)

    Attributes:
        code: Stable machine-readable identifier (e.g., "ARCHIVE_NOT_FOUND")
        message: Human-readable summary
        severity: Fault severity (INFO, WARN, ERROR, FATAL)
        domain: Fault domain (ARCHIVE, CONTEXT, DECODE, ...)
        retryable: Whether this fault can be retried
        metadata: Additional context data

    Example:
        ```python
        raise Fault(
            code="ARCHIVE_NOT_FOUND",
            message="No such file: app.war",
            domain=FaultDomain.ARCHIVE,
        )
        ```
    """

    def __init__(
        self,
        code: str | None = None,
        message: str | None = None,
        *,
        domain: FaultDomain | None = None,
        severity: Optional[Severity] = None,
        retryable: bool = False,
        metadata: Optional[dict[str, Any]] = None,
    ):
        self.code = code if code is not None else getattr(self, "code", None)
        self.message = message if message is not None else getattr(self, "message", None)
        self.domain = domain if domain is not None else getattr(self, "domain", None)

        if self.code is None or self.message is None or self.domain is None:
            raise TypeError(f"{self.__class__.__name__} missing required code, message, or domain")

        super().__init__(self.message)

        defaults = DOMAIN_DEFAULTS.get(self.domain, {"severity": Severity.ERROR})
        self.severity = severity or defaults["severity"]
        self.retryable = retryable
        self.metadata = metadata or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(code={self.code!r}, domain={self.domain.value}, "
            f"severity={self.severity.value})"
        )

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize fault to dictionary.

        Returns:
            Dictionary representation suitable for logging/serialization
        """
        return {
            "code": self.code,
            "message": self.message,
            "domain": self.domain.value,
            "severity": self.severity.value,
            "retryable": self.retryable,
            "metadata": self.metadata,
        }
