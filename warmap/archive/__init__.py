"""
Archive access - WAR entries, classpath and deployment descriptor.
"""

from .descriptor import DeploymentDescriptor, ServletMapping
from .war import WarArchive

__all__ = ["WarArchive", "DeploymentDescriptor", "ServletMapping"]
