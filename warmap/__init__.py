"""
Warmap - static URL map reconstruction for Java web archives.

Reads a WAR without running it and reports every URL it serves:
- Servlet mappings declared in WEB-INF/web.xml
- Client-accessible files (JSP, HTML, static content)
- Spring MVC handler mappings from XML contexts and @RequestMapping annotations
"""

__version__ = "1.0.0"

# ============================================================================
# Core
# ============================================================================

from .engine import RouteMapper, map_routes
from .config import ConfigLoader, WarmapConfig, DisplayConfig, SpringConfig

# ============================================================================
# Routing
# ============================================================================

from .routing import (
    RouteTable,
    HttpMethod,
    ServletDestination,
    FileDestination,
    FileKind,
    ComponentDestination,
    RequestParameter,
)

# ============================================================================
# Archive & Faults
# ============================================================================

from .archive import WarArchive
from .faults import (
    Fault,
    FaultDomain,
    Severity,
    ArchiveFault,
    ClasspathConsistencyFault,
    InvalidContextFault,
    ClassDecodeFault,
    ConfigFault,
)

__all__ = [
    "__version__",
    "RouteMapper",
    "map_routes",
    "ConfigLoader",
    "WarmapConfig",
    "DisplayConfig",
    "SpringConfig",
    "RouteTable",
    "HttpMethod",
    "ServletDestination",
    "FileDestination",
    "FileKind",
    "ComponentDestination",
    "RequestParameter",
    "WarArchive",
    "Fault",
    "FaultDomain",
    "Severity",
    "ArchiveFault",
    "ClasspathConsistencyFault",
    "InvalidContextFault",
    "ClassDecodeFault",
    "ConfigFault",
]
